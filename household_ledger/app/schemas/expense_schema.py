"""
schemas/expense_schema.py — Marshmallow schemas for expense endpoints.

Validation responsibility:
  - This file:
      - Field types, lengths, decimal precision
      - DUPLICATE_SPLIT_USER (400) — request shape rule
      - Non-empty-after-trim enforcement for description
  - services/expense_service.py:
      - SPLIT_USER_NOT_MEMBER (422)  — requires DB membership lookup
      - Creator-only edits (FORBIDDEN, 403) — requires DB record lookup

IMPORTANT: Inherits from marshmallow.Schema directly, never ma.Schema.
           See extensions.py for the explanation.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    validate,
)

from household_ledger.app.errors import ErrorCode


# ── Shared validators ─────────────────────────────────────────────────────

def _validate_monetary_amount(value: Decimal) -> None:
    """
    Must be strictly greater than zero with at most 2 decimal places.
    Input with more places is rejected, never rounded.
    """
    if value <= Decimal("0"):
        raise ValidationError("Amount must be greater than zero.")

    # Decimal("10.123").as_tuple().exponent == -3  → 3 dp → reject
    if value.as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)


def _validate_non_empty_after_trim(value: str) -> None:
    """Mirrors the DB CHECK(LENGTH(TRIM(...)) > 0) constraint at the API layer."""
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


def _validate_unique_user_ids(value: list[str]) -> None:
    if len(value) != len(set(value)):
        raise ValidationError(ErrorCode.DUPLICATE_SPLIT_USER)


def _user_id_list(**kwargs) -> fields.List:
    return fields.List(
        fields.Str(validate=validate.Length(min=1, max=36)),
        validate=_validate_unique_user_ids,
        **kwargs,
    )


# ── Create expense ─────────────────────────────────────────────────────────

class CreateExpenseSchema(Schema):
    """
    POST /households/:id/expenses

    `split_user_ids` lists the members sharing the cost besides the creator.
    The creator is always added by the service, so listing them is allowed
    but has no effect.
    """

    description = fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=1,
                max=255,
                error="Description must be between 1 and 255 characters.",
            ),
            _validate_non_empty_after_trim,
        ],
    )

    amount = fields.Decimal(
        required=True,
        validate=_validate_monetary_amount,
    )

    is_optional = fields.Bool(load_default=False)

    receipt_url = fields.Url(load_default=None, allow_none=True)

    split_user_ids = _user_id_list(load_default=list)


# ── Edit split membership ─────────────────────────────────────────────────

class UpdateSplitsSchema(Schema):
    """
    PATCH /expenses/:id/splits

    The full new list of non-creator participants. Members absent from the
    list lose their split; new members get an unpaid split.
    """

    user_ids = _user_id_list(required=True)


# ── List expenses query string ────────────────────────────────────────────

class ListExpensesQuerySchema(Schema):
    """GET /households/:id/expenses?offset=N"""

    class Meta:
        # Cache-busting and other client query params are ignored.
        unknown = EXCLUDE

    offset = fields.Int(
        load_default=0,
        validate=validate.Range(min=0, error="offset must be zero or a positive integer."),
    )
