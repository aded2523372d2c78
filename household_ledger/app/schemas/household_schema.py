"""
schemas/household_schema.py — Marshmallow schemas for household endpoints.

Validation responsibility:
  - This file: name type, non-empty after trim, at most 100 characters after trim.
  - services/household_service.py: USER_NOT_FOUND (requires DB lookup).

Inherits from marshmallow.Schema directly, never ma.Schema.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, post_load


def _validate_household_name(value: str) -> None:
    """Leading and trailing whitespace does not count towards the limits."""
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError("Household name is required.")
    if len(trimmed) > 100:
        raise ValidationError("Household name must be at most 100 characters.")


class CreateHouseholdSchema(Schema):
    """
    POST /households

    The loaded name is already trimmed. The DB column is VARCHAR(100) with
    CHECK(LENGTH(TRIM(name)) > 0).
    """

    name = fields.Str(required=True, validate=_validate_household_name)

    @post_load
    def _strip_name(self, data: dict, **kwargs) -> dict:
        data["name"] = data["name"].strip()
        return data
