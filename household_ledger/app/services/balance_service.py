"""
services/balance_service.py — Balance response for one viewer in one household.

The canonical balance formula lives in ledger/balances.py and must not be
reimplemented here or anywhere else. This module only:
  1. enforces household membership,
  2. loads a snapshot (services/snapshot_service.py),
  3. runs the aggregator,
  4. shapes the result for the route.

Layer rules:
  - No Flask imports. No current_app, request, g, or HTTP knowledge.
  - Returns plain Python dicts and lists.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from household_ledger.app.ledger import Balance4, ExpenseWithSplits, aggregate_balances
from household_ledger.app.services import snapshot_service
from household_ledger.app.utils import format_money

logger = logging.getLogger(__name__)


def get_balance_response(
        household_id: str,
        caller_id: str,
        session: Session,
) -> dict:
    """
    Builds the payload for GET /households/:id/balances.

    Every member other than the caller appears, settled members included.
    Mandatory and optional totals are reported separately; `net` and
    `net_optional` are owes_you - you_owe within each ledger.

    Raises:
        AppError(HOUSEHOLD_NOT_FOUND, 404)  -- household does not exist.
        AppError(FORBIDDEN, 403)            -- caller not a member.
        LedgerIntegrityError (500)          -- snapshot breaks a data invariant.
    """
    snapshot_service.require_member(household_id, caller_id, session)

    members = snapshot_service.get_members(household_id, session)
    rows = snapshot_service.load_snapshot(household_id, session)

    member_ids = [m.user_id for m in members]
    _log_departed_counterparties(household_id, set(member_ids), rows)

    balances = aggregate_balances(caller_id, member_ids, rows)

    return {
        "household_id": household_id,
        "viewer_id": caller_id,
        "balances": [
            _serialize_balance(m.user_id, m.name, balances[m.user_id])
            for m in members
            if m.user_id != caller_id
        ],
    }


def _serialize_balance(user_id: str, name: str, balance: Balance4) -> dict:
    return {
        "user_id": user_id,
        "name": name,
        "owes_you": format_money(balance.owes_you),
        "owes_you_optional": format_money(balance.owes_you_optional),
        "you_owe": format_money(balance.you_owe),
        "you_owe_optional": format_money(balance.you_owe_optional),
        "net": format_money(balance.net),
        "net_optional": format_money(balance.net_optional),
    }


def _log_departed_counterparties(
        household_id: str,
        member_ids: set[str],
        rows: list[ExpenseWithSplits],
) -> None:
    """Debug trace for expenses that reference users no longer on the roster."""
    participants = {r.expense.creator_id for r in rows}
    participants.update(s.user_id for r in rows for s in r.splits)
    departed = participants - member_ids
    if departed:
        logger.debug(
            "Household %s: %d expense participant(s) are no longer members "
            "and are excluded from balances: %s",
            household_id,
            len(departed),
            sorted(departed),
        )
