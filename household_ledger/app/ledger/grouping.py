"""
ledger/grouping.py — Rebuild per-expense groups from denormalised rows.

Storage hands back one row per (expense, split). Joins, pagination overlap or
a caller concatenating two fetches can repeat an expense or a split row. Both
engine entry points regroup their input first so that split_count is always
the number of DISTINCT members on the expense and no row is seen twice.
"""

from __future__ import annotations

from collections.abc import Iterable

from household_ledger.app.errors import LedgerIntegrityError
from household_ledger.app.ledger.types import ExpenseRow, ExpenseWithSplits, SplitRow


def regroup(
        entries: Iterable[tuple[ExpenseRow, Iterable[SplitRow]]],
) -> list[ExpenseWithSplits]:
    """
    Merges (expense, splits) entries by expense id.

    Expenses keep first-seen order; within an expense, split rows keep
    first-seen order and a repeated (expense_id, user_id) is dropped.

    Raises LedgerIntegrityError if a split is attached to the wrong expense,
    if has_paid and paid_at disagree (paid without a date, or a date on an
    unpaid split), or if an expense ends up with no split rows at all (the
    creator's split always exists).
    """
    expenses: dict[str, ExpenseRow] = {}
    splits: dict[str, dict[str, SplitRow]] = {}

    for expense, expense_splits in entries:
        expenses.setdefault(expense.id, expense)
        by_user = splits.setdefault(expense.id, {})
        for split in expense_splits:
            if split.expense_id != expense.id:
                raise LedgerIntegrityError(
                    f"Split for user {split.user_id} references expense "
                    f"{split.expense_id} but was grouped under {expense.id}."
                )
            _check_payment_state(split)
            by_user.setdefault(split.user_id, split)

    grouped: list[ExpenseWithSplits] = []
    for expense_id, expense in expenses.items():
        if not splits[expense_id]:
            raise LedgerIntegrityError(
                f"Expense {expense_id} has no split rows; "
                f"the creator's split is missing."
            )
        grouped.append(ExpenseWithSplits(expense, tuple(splits[expense_id].values())))
    return grouped


def _check_payment_state(split: SplitRow) -> None:
    """paid_at is set exactly when has_paid is true."""
    if split.has_paid and split.paid_at is None:
        raise LedgerIntegrityError(
            f"Split of user {split.user_id} on expense {split.expense_id} "
            f"is marked paid but has no paid_at."
        )
    if not split.has_paid and split.paid_at is not None:
        raise LedgerIntegrityError(
            f"Split of user {split.user_id} on expense {split.expense_id} "
            f"is unpaid but carries paid_at {split.paid_at.isoformat()}."
        )


def group_rows(
        pairs: Iterable[tuple[ExpenseRow, SplitRow | None]],
) -> list[ExpenseWithSplits]:
    """
    Groups flat (expense, split) pairs, as produced by an outer join of
    expenses to splits. A None split (expense with no split rows) is kept so
    that regroup() can report it.
    """
    return regroup(
        (expense, () if split is None else (split,))
        for expense, split in pairs
    )


def regroup_entries(rows: Iterable[ExpenseWithSplits]) -> list[ExpenseWithSplits]:
    return regroup((entry.expense, entry.splits) for entry in rows)
