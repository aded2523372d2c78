"""
routes/households.py — Household route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries.

Endpoints (url_prefix=/api/v1/households):
  POST /households  → 201  create household; caller becomes its admin
  GET  /households  → 200  caller's households with their role
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from household_ledger.app.extensions import db
from household_ledger.app.middleware.auth_middleware import require_auth
from household_ledger.app.models.household import Household, MemberRole
from household_ledger.app.schemas.household_schema import CreateHouseholdSchema
from household_ledger.app.services import household_service
from household_ledger.app.utils import as_utc

households_bp = Blueprint("households", __name__)


def _serialize_household(household: Household, role: MemberRole) -> dict:
    return {
        "id": household.id,
        "name": household.name,
        "creator_id": household.creator_id,
        "created_at": as_utc(household.created_at).isoformat(),
        "role": role.value,
    }


@households_bp.route("", methods=["POST"])
@require_auth
def create_household():
    """POST /households — the caller becomes the first (admin) member."""
    data = CreateHouseholdSchema().load(request.get_json(force=True) or {})
    household, role = household_service.create_household(
        name=data["name"],
        creator_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": _serialize_household(household, role), "warnings": []}), 201


@households_bp.route("", methods=["GET"])
@require_auth
def list_households():
    """GET /households — every household the caller belongs to."""
    rows = household_service.list_households(user_id=g.user_id, session=db.session)
    return jsonify({
        "data": [_serialize_household(h, role) for h, role in rows],
        "warnings": [],
    }), 200
