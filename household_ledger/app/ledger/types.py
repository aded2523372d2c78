"""
ledger/types.py — Immutable snapshot rows and engine outputs.

The engine never sees ORM objects. Services convert query results into these
value types first, so every computation runs over a frozen point-in-time
snapshot and can be repeated with identical results.

All monetary values are Decimal. No float anywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


_ZERO = Decimal("0")


# ── Snapshot rows ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ExpenseRow:
    id: str
    household_id: str
    creator_id: str
    amount: Decimal
    is_optional: bool
    created_at: datetime


@dataclass(frozen=True)
class SplitRow:
    expense_id: str
    user_id: str
    has_paid: bool
    paid_at: datetime | None = None


@dataclass(frozen=True)
class ExpenseWithSplits:
    """One expense and the complete set of its split rows."""

    expense: ExpenseRow
    splits: tuple[SplitRow, ...]

    @property
    def split_count(self) -> int:
        return len(self.splits)

    def split_for(self, user_id: str) -> SplitRow | None:
        return next((s for s in self.splits if s.user_id == user_id), None)


# ── Outputs ────────────────────────────────────────────────────────────────

@dataclass
class Balance4:
    """
    The viewer's open position against one counterparty.

    The four totals are kept apart so the caller decides how to net them;
    mandatory and optional amounts are never added together here.
    """

    owes_you: Decimal = _ZERO
    owes_you_optional: Decimal = _ZERO
    you_owe: Decimal = _ZERO
    you_owe_optional: Decimal = _ZERO

    @property
    def net(self) -> Decimal:
        """Positive when the counterparty owes the viewer (mandatory ledger)."""
        return self.owes_you - self.you_owe

    @property
    def net_optional(self) -> Decimal:
        return self.owes_you_optional - self.you_owe_optional


@dataclass(frozen=True)
class BalanceEvent:
    date: datetime
    you_owe_change: Decimal = _ZERO
    owed_to_you_change: Decimal = _ZERO
    is_optional: bool = False


@dataclass(frozen=True)
class BalancePoint:
    """Running net position (owed to you minus you owe) after one event."""

    date: datetime
    balance: Decimal
    optional_balance: Decimal


# ── Deduplication keys ─────────────────────────────────────────────────────
# A logical event is identified structurally, never by string concatenation,
# so identifiers containing any delimiter cannot collide.

@dataclass(frozen=True)
class Created:
    expense_id: str


@dataclass(frozen=True)
class Paid:
    expense_id: str
    user_id: str


EventKey = Created | Paid


@dataclass
class HistoryTotals:
    """Sums of all event deltas, per ledger, across every counterparty."""

    owed_to_you: Decimal = _ZERO
    owed_to_you_optional: Decimal = _ZERO
    you_owe: Decimal = _ZERO
    you_owe_optional: Decimal = _ZERO
