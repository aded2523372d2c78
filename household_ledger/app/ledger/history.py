"""
ledger/history.py — Balance-change events over time, for the running-balance chart.

Rows are stored one per (expense, member) but the history is one event per
LOGICAL occurrence:

  Created(expense_id)          "this expense was logged"      at created_at
  Paid(expense_id, user_id)    "this member paid their share" at paid_at

Each key is emitted at most once, however many split rows the expense has.
Without this a three-way split would report its creation three times.

Ordering: events are sorted by date ascending with a STABLE sort. On equal
timestamps, creation events come first (in expense iteration order), then
payment events (in expense order, then split order). There is no secondary
sort key; the tie order is a direct function of input order, so the same
snapshot always yields the same sequence.

Summing every event of a ledger reproduces what aggregate_balances() reports
for that ledger, summed over all counterparties.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from household_ledger.app.ledger.grouping import regroup_entries
from household_ledger.app.ledger.shares import share_of
from household_ledger.app.ledger.types import (
    BalanceEvent,
    BalancePoint,
    Created,
    EventKey,
    ExpenseWithSplits,
    HistoryTotals,
    Paid,
)


def reconstruct_history(
        viewer_id: str,
        rows: Sequence[ExpenseWithSplits],
) -> list[BalanceEvent]:
    """
    Returns the viewer's deduplicated, date-ordered balance events.

    Pure: the result depends only on viewer_id and rows, and no wall clock is
    read. Calling it twice on the same snapshot returns equal lists.
    """
    grouped = regroup_entries(rows)
    emitted: set[EventKey] = set()
    created_events: list[BalanceEvent] = []
    paid_events: list[BalanceEvent] = []

    for entry in grouped:
        event = _creation_event(viewer_id, entry, emitted)
        if event is not None:
            created_events.append(event)

    for entry in grouped:
        paid_events.extend(_payment_events(viewer_id, entry, emitted))

    return sorted(created_events + paid_events, key=lambda e: e.date)


def _creation_event(
        viewer_id: str,
        entry: ExpenseWithSplits,
        emitted: set[EventKey],
) -> BalanceEvent | None:
    expense = entry.expense
    key = Created(expense.id)
    if key in emitted:
        return None
    emitted.add(key)

    if expense.creator_id == viewer_id:
        others = sum(1 for s in entry.splits if s.user_id != expense.creator_id)
        owed = share_of(entry) * others
        if owed <= 0:
            return None
        return BalanceEvent(
            date=expense.created_at,
            owed_to_you_change=owed,
            is_optional=expense.is_optional,
        )

    if entry.split_for(viewer_id) is not None:
        return BalanceEvent(
            date=expense.created_at,
            you_owe_change=share_of(entry),
            is_optional=expense.is_optional,
        )

    return None


def _payment_events(
        viewer_id: str,
        entry: ExpenseWithSplits,
        emitted: set[EventKey],
) -> list[BalanceEvent]:
    expense = entry.expense
    events: list[BalanceEvent] = []

    for split in entry.splits:
        # regroup() guarantees paid_at is set on every paid split.
        if not split.has_paid:
            continue

        key = Paid(expense.id, split.user_id)
        if key in emitted:
            continue
        emitted.add(key)

        if expense.creator_id == viewer_id and split.user_id != viewer_id:
            # payment received
            events.append(BalanceEvent(
                date=split.paid_at,
                owed_to_you_change=-share_of(entry),
                is_optional=expense.is_optional,
            ))
        elif split.user_id == viewer_id and expense.creator_id != viewer_id:
            # payment made
            events.append(BalanceEvent(
                date=split.paid_at,
                you_owe_change=-share_of(entry),
                is_optional=expense.is_optional,
            ))

    return events


def running_balance(events: Sequence[BalanceEvent]) -> list[BalancePoint]:
    """
    Cumulative (owed to you - you owe) after each event, one point per event,
    with the mandatory and optional ledgers tracked separately.
    """
    balance = Decimal("0")
    optional_balance = Decimal("0")
    points: list[BalancePoint] = []

    for event in events:
        delta = event.owed_to_you_change - event.you_owe_change
        if event.is_optional:
            optional_balance += delta
        else:
            balance += delta
        points.append(BalancePoint(event.date, balance, optional_balance))

    return points


def totals_from_history(events: Sequence[BalanceEvent]) -> HistoryTotals:
    """Sums the deltas of every event per direction and ledger."""
    totals = HistoryTotals()
    for event in events:
        if event.is_optional:
            totals.owed_to_you_optional += event.owed_to_you_change
            totals.you_owe_optional += event.you_owe_change
        else:
            totals.owed_to_you += event.owed_to_you_change
            totals.you_owe += event.you_owe_change
    return totals
