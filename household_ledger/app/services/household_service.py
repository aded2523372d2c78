"""
services/household_service.py — Household creation and the caller's household list.

The creator of a household becomes its first member, with the admin role.
Inviting or removing members is handled elsewhere.

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility; only flush here.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from household_ledger.app.errors import AppError, ErrorCode
from household_ledger.app.models.household import Household, HouseholdMember, MemberRole
from household_ledger.app.models.user import User
from household_ledger.app.utils import utcnow


def create_household(
        name: str,
        creator_id: str,
        session: Session,
        now: datetime | None = None,
) -> tuple[Household, MemberRole]:
    """
    Creates a household and adds the creator as its admin member.

    Args:
        name: Validated, already trimmed name from CreateHouseholdSchema.

    Raises:
        AppError(USER_NOT_FOUND, 404) -- no user row for creator_id yet.
    """
    if session.get(User, creator_id) is None:
        raise AppError(
            ErrorCode.USER_NOT_FOUND,
            f"User {creator_id} does not exist.",
            404,
        )

    created_at = now or utcnow()
    household = Household(name=name, creator_id=creator_id, created_at=created_at)
    household.members.append(
        HouseholdMember(user_id=creator_id, role=MemberRole.ADMIN, joined_at=created_at)
    )
    session.add(household)
    session.flush()
    return household, MemberRole.ADMIN


def list_households(user_id: str, session: Session) -> list[tuple[Household, MemberRole]]:
    """Returns every household the user belongs to with their role, oldest first."""
    stmt = (
        select(Household, HouseholdMember.role)
        .join(HouseholdMember, HouseholdMember.household_id == Household.id)
        .where(HouseholdMember.user_id == user_id)
        .order_by(Household.created_at.asc(), Household.id)
    )
    return [(household, role) for household, role in session.execute(stmt).all()]
