"""
models/expense.py — Expense and ExpenseSplit table definitions.

No business logic. No imports from services or routes.

Key design points:
  - `amount` uses Numeric(12, 2), never Float.
  - One ExpenseSplit row per member sharing the cost. The creator's row always
    exists and is created already paid at the expense's created_at.
  - has_paid and paid_at move together: paid_at is set iff has_paid is true.
    The CHECK constraint below is the last line of defence; the service layer
    is the primary gate.
  - Splits cascade with their expense: deleting an expense removes them.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from household_ledger.app.extensions import db
from household_ledger.app.utils import generate_id, utcnow


class Expense(db.Model):
    __tablename__ = "expenses"

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        CheckConstraint(
            "LENGTH(TRIM(description)) > 0",
            name="ck_expenses_description_nonempty",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    household_id: Mapped[str] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # The member who logged it; always implicitly part of its splits.
    creator_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Optional spending is tracked on a separate ledger from mandatory spending.
    is_optional: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    receipt_url: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    household: Mapped["Household"] = relationship(  # noqa: F821
        "Household",
        back_populates="expenses",
    )

    creator: Mapped["User"] = relationship(  # noqa: F821
        "User",
        foreign_keys=[creator_id],
    )

    splits: Mapped[list["ExpenseSplit"]] = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Expense id={self.id} "
            f"household_id={self.household_id} "
            f"amount={self.amount} "
            f"optional={self.is_optional}>"
        )


class ExpenseSplit(db.Model):
    __tablename__ = "expense_splits"

    __table_args__ = (
        # A member appears at most once per expense.
        UniqueConstraint("expense_id", "user_id", name="uq_expense_splits_expense_user"),

        CheckConstraint(
            "(has_paid AND paid_at IS NOT NULL) OR (NOT has_paid AND paid_at IS NULL)",
            name="ck_expense_splits_paid_at_matches_has_paid",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)

    expense_id: Mapped[str] = mapped_column(
        ForeignKey("expenses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Monotonic: flips to true once and never back.
    has_paid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    expense: Mapped["Expense"] = relationship(
        "Expense",
        back_populates="splits",
    )

    user: Mapped["User"] = relationship(  # noqa: F821
        "User",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<ExpenseSplit id={self.id} "
            f"expense_id={self.expense_id} "
            f"user_id={self.user_id} "
            f"has_paid={self.has_paid}>"
        )
