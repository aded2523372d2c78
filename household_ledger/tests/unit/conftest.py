"""
tests/unit/conftest.py — Snapshot row builders shared by the ledger unit tests.

Unit test constraints:
  - No database, no Flask application context, no auth context.
  - Engine tests build ledger.types rows directly; service tests patch the
    data-access helpers with unittest.mock.

These are plain functions (not fixtures) so tests can call them with
arbitrary arguments.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from household_ledger.app.ledger import ExpenseRow, ExpenseWithSplits, SplitRow


T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def at(days: int = 0, minutes: int = 0) -> datetime:
    """A fixed point in time `days` (and `minutes`) after T0. No wall clock."""
    return T0 + timedelta(days=days, minutes=minutes)


def paid(user_id: str, when: datetime | None = None) -> tuple[str, datetime | None]:
    return (user_id, when)


def entry(
    expense_id: str,
    creator_id: str,
    amount: str,
    participants: list[str | tuple[str, datetime | None]],
    created_at: datetime = T0,
    is_optional: bool = False,
    household_id: str = "h1",
) -> ExpenseWithSplits:
    """
    Builds one expense with its splits.

    `participants` holds plain user ids (unpaid) or paid(user_id, when)
    tuples. The creator's split is NOT added implicitly; list it explicitly,
    typically as paid(creator, created_at).
    """
    expense = ExpenseRow(
        id=expense_id,
        household_id=household_id,
        creator_id=creator_id,
        amount=Decimal(amount),
        is_optional=is_optional,
        created_at=created_at,
    )
    splits = []
    for p in participants:
        if isinstance(p, tuple):
            user_id, when = p
            splits.append(SplitRow(expense_id, user_id, has_paid=True, paid_at=when))
        else:
            splits.append(SplitRow(expense_id, p, has_paid=False))
    return ExpenseWithSplits(expense, tuple(splits))
