"""
routes/expenses.py — Expense route handlers.

Registered at url_prefix=/api/v1 (not /api/v1/expenses) because this blueprint
owns BOTH the household-scoped paths (/households/:id/expenses) and the
expense-ID paths (/expenses/:id).

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No business logic. No DB queries. No bare SQL.
  - _serialize_expense() is a pure data-shape helper, not business logic.

Endpoints:
  GET    /households/:id/expenses?offset=N  → 200  one page, newest first
  POST   /households/:id/expenses           → 201  log an expense
  PATCH  /expenses/:id/splits               → 200  change who shares it (creator only)
  POST   /expenses/:id/pay                  → 200  caller marks own split paid
  DELETE /expenses/:id                      → 200  delete (creator only)
"""

from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify, request

from household_ledger.app.extensions import db
from household_ledger.app.middleware.auth_middleware import require_auth
from household_ledger.app.models.expense import Expense, ExpenseSplit
from household_ledger.app.schemas.expense_schema import (
    CreateExpenseSchema,
    ListExpensesQuerySchema,
    UpdateSplitsSchema,
)
from household_ledger.app.services import expense_service
from household_ledger.app.utils import as_utc

expenses_bp = Blueprint("expenses", __name__)


# ── Serialization helpers ──────────────────────────────────────────────────
# Pure data-shaping. Amounts as strings.

def _isoformat(value) -> str | None:
    return as_utc(value).isoformat() if value is not None else None


def _serialize_split(split: ExpenseSplit) -> dict:
    return {
        "id": split.id,
        "user_id": split.user_id,
        "has_paid": split.has_paid,
        "paid_at": _isoformat(split.paid_at),
    }


def _serialize_expense(expense: Expense) -> dict:
    """Converts an Expense ORM object to a plain dict for JSON output."""
    return {
        "id": expense.id,
        "household_id": expense.household_id,
        "creator_id": expense.creator_id,
        "creator_name": expense.creator.name,
        "description": expense.description,
        "amount": str(expense.amount),
        "is_optional": expense.is_optional,
        "receipt_url": expense.receipt_url,
        "created_at": _isoformat(expense.created_at),
        "updated_at": _isoformat(expense.updated_at),
        "splits": [_serialize_split(s) for s in expense.splits],
    }


# ── Household-scoped expense routes ────────────────────────────────────────

@expenses_bp.route("/households/<household_id>/expenses", methods=["GET"])
@require_auth
def list_expenses(household_id: str):
    """GET /households/:id/expenses — one page of expenses, newest first."""
    query = ListExpensesQuerySchema().load(request.args.to_dict())
    expenses, has_more = expense_service.list_expenses(
        household_id=household_id,
        caller_id=g.user_id,
        offset=query["offset"],
        page_size=current_app.config["EXPENSE_PAGE_SIZE"],
        session=db.session,
    )
    return jsonify({
        "data": {
            "expenses": [_serialize_expense(e) for e in expenses],
            "has_more": has_more,
        },
        "warnings": [],
    }), 200


@expenses_bp.route("/households/<household_id>/expenses", methods=["POST"])
@require_auth
def create_expense(household_id: str):
    """POST /households/:id/expenses — the caller becomes the creator."""
    data = CreateExpenseSchema().load(request.get_json(force=True) or {})
    expense = expense_service.create_expense(
        household_id=household_id,
        caller_id=g.user_id,
        data=data,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": _serialize_expense(expense), "warnings": []}), 201


# ── Expense-ID routes ──────────────────────────────────────────────────────

@expenses_bp.route("/expenses/<expense_id>/splits", methods=["PATCH"])
@require_auth
def update_splits(expense_id: str):
    """PATCH /expenses/:id/splits — replace the non-creator participants."""
    data = UpdateSplitsSchema().load(request.get_json(force=True) or {})
    expense = expense_service.update_split_members(
        expense_id=expense_id,
        caller_id=g.user_id,
        user_ids=data["user_ids"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": _serialize_expense(expense), "warnings": []}), 200


@expenses_bp.route("/expenses/<expense_id>/pay", methods=["POST"])
@require_auth
def pay_split(expense_id: str):
    """POST /expenses/:id/pay — mark the caller's own share as paid."""
    split = expense_service.mark_split_paid(
        expense_id=expense_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": _serialize_split(split), "warnings": []}), 200


@expenses_bp.route("/expenses/<expense_id>", methods=["DELETE"])
@require_auth
def delete_expense(expense_id: str):
    """DELETE /expenses/:id — removes the expense and its splits."""
    expense_service.delete_expense(
        expense_id=expense_id,
        caller_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({
        "data": {
            "deleted": True,
            "expense_id": expense_id,
        },
        "warnings": [],
    }), 200
