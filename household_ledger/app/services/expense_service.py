"""
services/expense_service.py — Expense and split lifecycle.

Ownership rules:
  - Any household member may list expenses and log a new one.
  - Only the expense's creator may change who shares it or delete it.
  - Only a split's own user may mark that split paid.

Split invariants maintained here:
  - The creator's split exists from creation and is already paid, with
    paid_at == expense.created_at (the creator's own share is self-settled).
  - has_paid flips to true once. Marking an already-paid split again is a
    no-op and keeps the original paid_at.
  - Changing the participant list changes split_count, and therefore every
    member's share, from that point on.

Layer rules:
  - No Flask imports. No current_app, request, g, or HTTP knowledge.
  - Receives plain values and dicts; returns ORM objects or raises AppError.
  - Commits are the route's responsibility; only flush here.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from household_ledger.app.errors import AppError, ErrorCode
from household_ledger.app.models.expense import Expense, ExpenseSplit
from household_ledger.app.services.snapshot_service import get_member_ids, require_member
from household_ledger.app.utils import utcnow


# ── Private helpers ────────────────────────────────────────────────────────

def _get_expense_or_404(expense_id: str, session: Session) -> Expense:
    """Returns the Expense or raises EXPENSE_NOT_FOUND (404)."""
    expense = session.get(Expense, expense_id)
    if expense is None:
        raise AppError(
            ErrorCode.EXPENSE_NOT_FOUND,
            f"Expense {expense_id} does not exist.",
            404,
        )
    return expense


def _require_creator(expense: Expense, caller_id: str) -> None:
    """Raises FORBIDDEN (403) unless caller_id created the expense."""
    if expense.creator_id != caller_id:
        raise AppError(
            ErrorCode.FORBIDDEN,
            "Only the member who logged this expense may change it.",
            403,
        )


def _validate_split_users_are_members(
        user_ids: list[str],
        household_id: str,
        member_ids: list[str],
) -> None:
    """Raises SPLIT_USER_NOT_MEMBER (422) for the first user not in the household."""
    member_set = set(member_ids)
    for user_id in user_ids:
        if user_id not in member_set:
            raise AppError(
                ErrorCode.SPLIT_USER_NOT_MEMBER,
                f"User {user_id} is not a member of household {household_id}.",
                422,
                field="splits",
            )


# ── Public service functions ───────────────────────────────────────────────

def list_expenses(
        household_id: str,
        caller_id: str,
        offset: int,
        page_size: int,
        session: Session,
) -> tuple[list[Expense], bool]:
    """
    Returns one page of a household's expenses, newest first, and whether
    another page may follow (a full page was returned).
    """
    require_member(household_id, caller_id, session)

    stmt = (
        select(Expense)
        .options(
            joinedload(Expense.creator),
            selectinload(Expense.splits),
        )
        .where(Expense.household_id == household_id)
        .order_by(Expense.created_at.desc(), Expense.id.desc())
        .limit(page_size)
        .offset(offset)
    )
    expenses = list(session.execute(stmt).scalars().all())
    return expenses, len(expenses) == page_size


def create_expense(
        household_id: str,
        caller_id: str,
        data: dict,
        session: Session,
        now: datetime | None = None,
) -> Expense:
    """
    Logs a new expense with the caller as creator.

    Args:
        data: Validated dict from CreateExpenseSchema.
        now:  Creation timestamp; defaults to the current UTC time.

    Enforces:
      FORBIDDEN (403)              caller must be a household member
      SPLIT_USER_NOT_MEMBER (422)  every split user must be a household member
    """
    require_member(household_id, caller_id, session)

    split_user_ids = [u for u in data.get("split_user_ids") or [] if u != caller_id]
    _validate_split_users_are_members(
        split_user_ids,
        household_id,
        get_member_ids(household_id, session),
    )

    created_at = now or utcnow()
    expense = Expense(
        household_id=household_id,
        creator_id=caller_id,
        amount=data["amount"],
        description=data["description"].strip(),
        is_optional=data.get("is_optional", False),
        receipt_url=data.get("receipt_url"),
        created_at=created_at,
        updated_at=created_at,
    )
    expense.splits.append(
        ExpenseSplit(user_id=caller_id, has_paid=True, paid_at=created_at)
    )
    for user_id in split_user_ids:
        expense.splits.append(ExpenseSplit(user_id=user_id, has_paid=False))

    session.add(expense)
    session.flush()
    return expense


def update_split_members(
        expense_id: str,
        caller_id: str,
        user_ids: list[str],
        session: Session,
        now: datetime | None = None,
) -> Expense:
    """
    Replaces the set of non-creator participants of an expense.

    Members no longer listed lose their split row (paid or not); newly listed
    members get an unpaid split. The creator's split is never removed.

    Enforces:
      FORBIDDEN (403)              caller must be the creator
      SPLIT_USER_NOT_MEMBER (422)  every listed user must be a household member
    """
    expense = _get_expense_or_404(expense_id, session)
    _require_creator(expense, caller_id)

    wanted = [u for u in user_ids if u != expense.creator_id]
    _validate_split_users_are_members(
        wanted,
        expense.household_id,
        get_member_ids(expense.household_id, session),
    )

    wanted_set = set(wanted)
    for split in list(expense.splits):
        if split.user_id != expense.creator_id and split.user_id not in wanted_set:
            expense.splits.remove(split)

    existing = {s.user_id for s in expense.splits}
    for user_id in wanted:
        if user_id not in existing:
            expense.splits.append(ExpenseSplit(user_id=user_id, has_paid=False))

    expense.updated_at = now or utcnow()
    session.flush()
    return expense


def mark_split_paid(
        expense_id: str,
        caller_id: str,
        session: Session,
        paid_at: datetime | None = None,
) -> ExpenseSplit:
    """
    Marks the caller's own split on an expense as paid.

    Idempotent: a split that is already paid is returned unchanged.

    Raises:
        EXPENSE_NOT_FOUND (404)  -- no such expense.
        FORBIDDEN (403)          -- caller is not in the expense's household.
        SPLIT_NOT_FOUND (404)    -- caller has no split on this expense.
    """
    expense = _get_expense_or_404(expense_id, session)
    require_member(expense.household_id, caller_id, session)

    split = session.execute(
        select(ExpenseSplit).where(
            ExpenseSplit.expense_id == expense_id,
            ExpenseSplit.user_id == caller_id,
        )
    ).scalar_one_or_none()
    if split is None:
        raise AppError(
            ErrorCode.SPLIT_NOT_FOUND,
            f"You do not share expense {expense_id}.",
            404,
        )

    if not split.has_paid:
        split.has_paid = True
        split.paid_at = paid_at or utcnow()
        session.flush()
    return split


def delete_expense(expense_id: str, caller_id: str, session: Session) -> None:
    """
    Deletes an expense and all its splits. Later balance and history
    computations simply no longer see it.
    """
    expense = _get_expense_or_404(expense_id, session)
    _require_creator(expense, caller_id)
    session.delete(expense)
    session.flush()
