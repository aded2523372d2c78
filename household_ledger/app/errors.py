"""
errors.py — AppError base class and error code registry.

Every error returned by the HouseholdLedger API uses a code defined here.
Do not raise strings or generic exceptions from service or route code.

Rules:
  - Error codes are a versioned contract. They do not change once published.
  - Error messages are human-readable prose. They may be improved at any time.
  - Never conflate 401 (unauthenticated) with 403 (unauthorized).
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field  # which request field caused the error

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"AppError(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


class LedgerIntegrityError(AppError):
    """
    Raised by the balance engine when a snapshot breaks a data invariant
    (zero split count, non-positive amount, paid split without paid_at).

    This is never a user error. It means upstream data is corrupt, so the
    whole computation is abandoned and the request fails with a 500.
    """

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.LEDGER_INTEGRITY_ERROR, message, 500)


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
# These are the string values sent in the API response.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD              = "MISSING_FIELD"
    INVALID_FIELD              = "INVALID_FIELD"
    INVALID_AMOUNT_PRECISION   = "INVALID_AMOUNT_PRECISION"
    DUPLICATE_SPLIT_USER       = "DUPLICATE_SPLIT_USER"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    HOUSEHOLD_NOT_FOUND        = "HOUSEHOLD_NOT_FOUND"
    EXPENSE_NOT_FOUND          = "EXPENSE_NOT_FOUND"
    SPLIT_NOT_FOUND            = "SPLIT_NOT_FOUND"
    USER_NOT_FOUND             = "USER_NOT_FOUND"

    # ── Business Rule Violations (422) ────────────────────────────────────
    SPLIT_USER_NOT_MEMBER      = "SPLIT_USER_NOT_MEMBER"

    # ── Auth Errors ────────────────────────────────────────────────────────
    # 401 = we do not know who you are (unauthenticated)
    # 403 = we know who you are, but you are not allowed (unauthorized)
    TOKEN_MISSING              = "TOKEN_MISSING"          # 401
    TOKEN_INVALID              = "TOKEN_INVALID"          # 401
    TOKEN_EXPIRED              = "TOKEN_EXPIRED"          # 401
    FORBIDDEN                  = "FORBIDDEN"              # 403

    # ── System Errors (500) ────────────────────────────────────────────────
    LEDGER_INTEGRITY_ERROR     = "LEDGER_INTEGRITY_ERROR"
    INTERNAL_ERROR             = "INTERNAL_ERROR"
