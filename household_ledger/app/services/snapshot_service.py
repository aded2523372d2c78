"""
services/snapshot_service.py — Roster and expense snapshot loading.

These are the ONLY sanctioned ways to read household data for balance
purposes. Each call takes one read of the store and hands the ledger engine
immutable rows; the engine never touches the session.

Layer rules:
  - No Flask imports. No current_app, request, g, or HTTP knowledge.
  - Receives household_id and session (SQLAlchemy Session) as arguments.
  - Returns ledger.types value objects or ORM rows; never mutates.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from household_ledger.app.errors import AppError, ErrorCode
from household_ledger.app.ledger import ExpenseRow, ExpenseWithSplits, SplitRow, group_rows
from household_ledger.app.models.expense import Expense, ExpenseSplit
from household_ledger.app.models.household import Household, HouseholdMember
from household_ledger.app.utils import as_utc


def require_member(household_id: str, user_id: str, session: Session) -> Household:
    """
    Returns the Household if user_id belongs to it.

    Raises:
        AppError(HOUSEHOLD_NOT_FOUND, 404) -- household does not exist.
        AppError(FORBIDDEN, 403)           -- user is not a member.
    """
    household = session.get(Household, household_id)
    if household is None:
        raise AppError(
            ErrorCode.HOUSEHOLD_NOT_FOUND,
            f"Household {household_id} does not exist.",
            404,
        )

    membership = session.execute(
        select(HouseholdMember.id).where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.user_id == user_id,
        )
    ).scalar_one_or_none()

    if membership is None:
        raise AppError(
            ErrorCode.FORBIDDEN,
            f"You are not a member of household {household_id}.",
            403,
        )
    return household


def get_member_ids(household_id: str, session: Session) -> list[str]:
    """Returns the user_ids of all current members of a household."""
    stmt = select(HouseholdMember.user_id).where(HouseholdMember.household_id == household_id)
    return list(session.execute(stmt).scalars().all())


def get_members(household_id: str, session: Session) -> list[HouseholdMember]:
    """Returns membership rows with their User eagerly loaded."""
    stmt = (
        select(HouseholdMember)
        .options(joinedload(HouseholdMember.user))
        .where(HouseholdMember.household_id == household_id)
        .order_by(HouseholdMember.joined_at, HouseholdMember.id)
    )
    return list(session.execute(stmt).scalars().all())


def load_snapshot(household_id: str, session: Session) -> list[ExpenseWithSplits]:
    """
    Reads every expense of a household with its split rows.

    One outer join: an expense without any split still comes back (with a NULL
    split) so that the engine reports it as corrupt instead of silently
    ignoring it. Expenses are ordered by created_at, then id, which fixes the
    tie order of the history stream.
    """
    stmt = (
        select(Expense, ExpenseSplit)
        .outerjoin(ExpenseSplit, ExpenseSplit.expense_id == Expense.id)
        .where(Expense.household_id == household_id)
        .order_by(Expense.created_at, Expense.id, ExpenseSplit.id)
    )
    return group_rows(
        (_to_expense_row(expense), None if split is None else _to_split_row(split))
        for expense, split in session.execute(stmt).all()
    )


def _to_expense_row(expense: Expense) -> ExpenseRow:
    return ExpenseRow(
        id=expense.id,
        household_id=expense.household_id,
        creator_id=expense.creator_id,
        amount=expense.amount,
        is_optional=expense.is_optional,
        created_at=as_utc(expense.created_at),
    )


def _to_split_row(split: ExpenseSplit) -> SplitRow:
    return SplitRow(
        expense_id=split.expense_id,
        user_id=split.user_id,
        has_paid=split.has_paid,
        paid_at=as_utc(split.paid_at),
    )
