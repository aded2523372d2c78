"""
ledger/balances.py — Current open balances between a viewer and every member.

Only unpaid splits are live debt. For each expense:
  - viewer created it   → every other member's unpaid split is owed to the viewer
  - someone else did    → the viewer's own unpaid split is owed to the creator
Self-splits (user_id == creator_id) never count; they are the creator's
self-paid portion.

Mandatory and optional expenses accumulate into separate fields and are
never mixed.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from household_ledger.app.ledger.grouping import regroup_entries
from household_ledger.app.ledger.shares import share_of
from household_ledger.app.ledger.types import Balance4, ExpenseWithSplits


def aggregate_balances(
        viewer_id: str,
        members: Iterable[str],
        rows: Sequence[ExpenseWithSplits],
) -> dict[str, Balance4]:
    """
    Returns {member_id: Balance4} for every member other than the viewer.

    Members with nothing outstanding are present with all-zero totals, so a
    settled member is distinguishable from an unknown one. Counterparties that
    are not in `members` (e.g. someone who left the household) are skipped.

    Rows are regrouped by expense first, so a repeated expense or split row
    is counted once.
    """
    balances: dict[str, Balance4] = {
        member_id: Balance4()
        for member_id in members
        if member_id != viewer_id
    }

    for entry in regroup_entries(rows):
        expense = entry.expense

        if expense.creator_id == viewer_id:
            for split in entry.splits:
                if split.user_id == viewer_id or split.has_paid:
                    continue
                balance = balances.get(split.user_id)
                if balance is None:
                    continue
                if expense.is_optional:
                    balance.owes_you_optional += share_of(entry)
                else:
                    balance.owes_you += share_of(entry)
            continue

        own_split = entry.split_for(viewer_id)
        if own_split is None or own_split.has_paid:
            continue
        balance = balances.get(expense.creator_id)
        if balance is None:
            continue
        if expense.is_optional:
            balance.you_owe_optional += share_of(entry)
        else:
            balance.you_owe += share_of(entry)

    return balances
