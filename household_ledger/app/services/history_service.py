"""
services/history_service.py — Running-balance history for one viewer.

Wraps ledger/history.py the same way balance_service wraps the aggregator:
membership check, snapshot load, pure computation, response shaping.
The history is recomputed from scratch on every request; nothing is cached.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from household_ledger.app.ledger import (
    BalanceEvent,
    BalancePoint,
    reconstruct_history,
    running_balance,
    totals_from_history,
)
from household_ledger.app.services import snapshot_service
from household_ledger.app.utils import format_money


def get_history_response(
        household_id: str,
        caller_id: str,
        session: Session,
) -> dict:
    """
    Builds the payload for GET /households/:id/balance-history.

    `events` and `points` are parallel lists: points[i] is the running
    position after events[i]. `totals` sums every delta per ledger.

    Raises:
        AppError(HOUSEHOLD_NOT_FOUND, 404)  -- household does not exist.
        AppError(FORBIDDEN, 403)            -- caller not a member.
        LedgerIntegrityError (500)          -- snapshot breaks a data invariant.
    """
    snapshot_service.require_member(household_id, caller_id, session)

    rows = snapshot_service.load_snapshot(household_id, session)
    events = reconstruct_history(caller_id, rows)
    points = running_balance(events)
    totals = totals_from_history(events)

    return {
        "household_id": household_id,
        "viewer_id": caller_id,
        "events": [_serialize_event(e) for e in events],
        "points": [_serialize_point(p) for p in points],
        "totals": {
            "owed_to_you": format_money(totals.owed_to_you),
            "owed_to_you_optional": format_money(totals.owed_to_you_optional),
            "you_owe": format_money(totals.you_owe),
            "you_owe_optional": format_money(totals.you_owe_optional),
        },
    }


def _serialize_event(event: BalanceEvent) -> dict:
    return {
        "date": event.date.isoformat(),
        "you_owe_change": format_money(event.you_owe_change),
        "owed_to_you_change": format_money(event.owed_to_you_change),
        "is_optional": event.is_optional,
    }


def _serialize_point(point: BalancePoint) -> dict:
    return {
        "date": point.date.isoformat(),
        "balance": format_money(point.balance),
        "optional_balance": format_money(point.optional_balance),
    }
