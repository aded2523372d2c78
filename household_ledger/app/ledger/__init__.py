"""
ledger — Balance & history reconciliation engine.

Pure functions over an immutable snapshot of expense/split rows:

  compute_share()        amount / split_count
  aggregate_balances()   current open balances, viewer vs. every member
  reconstruct_history()  deduplicated, date-ordered balance-change events

Layer rules:
  - No Flask imports, no SQLAlchemy imports, no I/O, no wall clock.
  - Inputs are ledger.types value objects; outputs are fresh plain data.
"""

from household_ledger.app.ledger.balances import aggregate_balances
from household_ledger.app.ledger.grouping import group_rows, regroup
from household_ledger.app.ledger.history import (
    reconstruct_history,
    running_balance,
    totals_from_history,
)
from household_ledger.app.ledger.shares import compute_share, share_of
from household_ledger.app.ledger.types import (
    Balance4,
    BalanceEvent,
    BalancePoint,
    ExpenseRow,
    ExpenseWithSplits,
    HistoryTotals,
    SplitRow,
)

__all__ = [
    "Balance4",
    "BalanceEvent",
    "BalancePoint",
    "ExpenseRow",
    "ExpenseWithSplits",
    "HistoryTotals",
    "SplitRow",
    "aggregate_balances",
    "compute_share",
    "group_rows",
    "reconstruct_history",
    "regroup",
    "running_balance",
    "share_of",
    "totals_from_history",
]
