"""
ledger/shares.py — Per-member share of one expense.

share = amount / split_count, where split_count is the number of split rows
the expense has right now (not the household size).

Rounding: plain Decimal division in the active decimal context (28 significant
digits, ROUND_HALF_EVEN by default). Nothing is quantised to cents here and
the rounding residue is NOT redistributed to any member. Summing the shares of
an expense with a non-terminating quotient (e.g. 10 / 3) therefore lands within
one unit of the last significant digit of the amount, not exactly on it. This
is a known limitation; presentation code quantises to cents when rendering.
"""

from __future__ import annotations

from decimal import Decimal

from household_ledger.app.errors import LedgerIntegrityError
from household_ledger.app.ledger.types import ExpenseWithSplits


def compute_share(amount: Decimal, split_count: int) -> Decimal:
    """
    Returns amount / split_count.

    Raises LedgerIntegrityError when split_count < 1 or amount <= 0. Every
    expense includes at least its creator and has a positive amount, so either
    condition means the snapshot is corrupt; there is no fallback value.
    """
    if split_count < 1:
        raise LedgerIntegrityError(
            f"Cannot compute a share over {split_count} splits; "
            f"every expense has at least its creator's split."
        )
    if amount <= 0:
        raise LedgerIntegrityError(
            f"Cannot compute a share of non-positive amount {amount}."
        )
    return Decimal(amount) / Decimal(split_count)


def share_of(entry: ExpenseWithSplits) -> Decimal:
    """The share of one member in `entry`, using its current split count."""
    return compute_share(entry.expense.amount, entry.split_count)
