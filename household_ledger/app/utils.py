from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_EVEN, Decimal


def generate_id() -> str:
    """Returns a random RFC 4122 version 4 UUID string, used as primary key."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """
    Treats naive datetimes as UTC.

    SQLite drops tzinfo on DateTime(timezone=True) columns; PostgreSQL keeps it.
    Snapshot timestamps must all be aware so they sort against each other.
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


_CENT = Decimal("0.01")


def format_money(value: Decimal) -> str:
    """
    Renders an engine amount as a 2dp string (ROUND_HALF_EVEN).

    Only used at the response boundary; engine values keep full precision.
    A residue that rounds to zero from below (e.g. -1E-27) renders as "0.00",
    never "-0.00".
    """
    quantized = value.quantize(_CENT, rounding=ROUND_HALF_EVEN)
    if quantized.is_zero():
        quantized = quantized.copy_abs()
    return str(quantized)
