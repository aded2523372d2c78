"""
routes/balances.py — Balance and balance-history route handlers.

Layer rules:
  - Call ONE service, return envelope.
  - No business logic. No DB queries.

Endpoints (url_prefix=/api/v1/households):
  GET /households/:id/balances         → 200  open balances vs. every member
  GET /households/:id/balance-history  → 200  balance-change events + running balance
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from household_ledger.app.extensions import db
from household_ledger.app.middleware.auth_middleware import require_auth
from household_ledger.app.services import balance_service, history_service

balances_bp = Blueprint("balances", __name__)


@balances_bp.route("/<household_id>/balances", methods=["GET"])
@require_auth
def get_balances(household_id: str):
    """GET /households/:id/balances — the caller's position against each member."""
    result = balance_service.get_balance_response(
        household_id=household_id,
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@balances_bp.route("/<household_id>/balance-history", methods=["GET"])
@require_auth
def get_balance_history(household_id: str):
    """GET /households/:id/balance-history — recomputed on every request."""
    result = history_service.get_history_response(
        household_id=household_id,
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200
