"""
models/household.py — Household and membership table definitions.

A household is the scope of every balance: members are the roster the
balance engine seeds its output from. No business logic here.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from household_ledger.app.extensions import db
from household_ledger.app.utils import generate_id, utcnow


class MemberRole(str, enum.Enum):
    ADMIN  = "admin"
    MEMBER = "member"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Store enum values (e.g., 'admin'), not names ('ADMIN')."""
    return [member.value for member in enum_cls]


class Household(db.Model):
    __tablename__ = "households"

    __table_args__ = (
        CheckConstraint(
            "LENGTH(TRIM(name)) > 0",
            name="ck_households_name_nonempty",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    creator_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    members: Mapped[list["HouseholdMember"]] = relationship(
        "HouseholdMember",
        back_populates="household",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    expenses: Mapped[list["Expense"]] = relationship(  # noqa: F821
        "Expense",
        back_populates="household",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Household id={self.id} name={self.name!r}>"


class HouseholdMember(db.Model):
    __tablename__ = "household_members"

    __table_args__ = (
        UniqueConstraint("household_id", "user_id", name="uq_household_members_household_user"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    household_id: Mapped[str] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    role: Mapped[MemberRole] = mapped_column(
        Enum(
            MemberRole,
            name="member_role_enum",
            values_callable=_enum_values,
        ),
        nullable=False,
        default=MemberRole.MEMBER,
    )

    # Optional per-household name; falls back to User.name when NULL.
    display_name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    household: Mapped["Household"] = relationship(
        "Household",
        back_populates="members",
    )

    user: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="memberships",
    )

    @property
    def name(self) -> str:
        """Display name for this household, falling back to the user's name."""
        return self.display_name or self.user.name

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<HouseholdMember id={self.id} "
            f"household_id={self.household_id} "
            f"user_id={self.user_id}>"
        )
