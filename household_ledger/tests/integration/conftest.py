"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - Tests run against the database named by TEST_DATABASE_URL, an in-memory
    SQLite database by default (Flask-SQLAlchemy keeps one shared connection
    for it, so every request in the session sees the same tables).
  - The app is created once per session using create_app("testing").
  - All tables are created once via db.create_all() at session start.
  - Between tests, all rows are deleted in FK-safe order so tests are isolated.

Users and households are seeded directly through the ORM: account and
household management belong to another service. Access tokens are minted
with the testing JWT secret, exactly as the identity service would sign them.

Helper functions (not fixtures) are provided for common operations:
  - make_user(app, ...)        → user id
  - make_household(app, ...)   → household id
  - token_for(user_id)         → signed access token
  - auth_headers(token)        → {"Authorization": "Bearer <token>"}
  - make_expense(client, ...)  → HTTP response
  - pay(client, ...)           → HTTP response

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test without fixture parameterization overhead.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from sqlalchemy import delete

from household_ledger.app import create_app
from household_ledger.app.extensions import db as _db
from household_ledger.app.models import (
    Expense,
    ExpenseSplit,
    Household,
    HouseholdMember,
    MemberRole,
    User,
)
from household_ledger.config import TestingConfig


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """
    Creates the Flask application in 'testing' mode once for the entire test session.

    Steps:
      1. Create app with TestingConfig.
      2. Run db.create_all() to create all tables.
      3. Yield the app for the test session.
      4. Drop all tables at teardown.
    """
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """
    Deletes all rows between tests in FK-safe order.

    Splits and expenses go before memberships, households and users.
    """
    yield  # run the test

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test

        for model in (ExpenseSplit, Expense, HouseholdMember, Household, User):
            _db.session.execute(delete(model))
        _db.session.commit()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def make_user(app, name: str, email: str | None = None) -> str:
    """Inserts a user row and returns its id."""
    if email is None:
        email = f"{name.lower()}@test.com"
    with app.app_context():
        user = User(name=name, email=email)
        _db.session.add(user)
        _db.session.commit()
        return user.id


def make_household(
    app,
    creator_id: str,
    member_ids: list[str] | tuple = (),
    name: str = "Flat 4B",
) -> str:
    """
    Inserts a household with creator_id as admin and every id in member_ids
    as a member, joined in the order given. Returns the household id.
    """
    with app.app_context():
        household = Household(name=name, creator_id=creator_id)
        _db.session.add(household)
        _db.session.flush()

        joined = datetime(2026, 1, 1, tzinfo=timezone.utc)
        household.members.append(
            HouseholdMember(user_id=creator_id, role=MemberRole.ADMIN, joined_at=joined)
        )
        for offset, user_id in enumerate(member_ids, start=1):
            household.members.append(
                HouseholdMember(
                    user_id=user_id,
                    role=MemberRole.MEMBER,
                    joined_at=joined + timedelta(minutes=offset),
                )
            )
        _db.session.commit()
        return household.id


def remove_member(app, household_id: str, user_id: str) -> None:
    """Deletes a membership row, leaving the user's expense history in place."""
    with app.app_context():
        _db.session.execute(
            delete(HouseholdMember).where(
                HouseholdMember.household_id == household_id,
                HouseholdMember.user_id == user_id,
            )
        )
        _db.session.commit()


def token_for(user_id: str, expires_in: timedelta = timedelta(minutes=15), **claims) -> str:
    """Signs an access token for user_id with the testing secret."""
    payload = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc) + expires_in,
        **claims,
    }
    return jwt.encode(
        payload,
        TestingConfig.JWT_SECRET_KEY,
        algorithm=TestingConfig.JWT_ALGORITHM,
    )


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def make_expense(
    client,
    token: str,
    household_id: str,
    amount: str,
    split_user_ids: list[str] | None = None,
    description: str = "Test Expense",
    is_optional: bool = False,
):
    """
    Logs an expense and returns the HTTP response.
    The token owner becomes the creator; split_user_ids are the other members
    sharing the cost.
    """
    payload: dict = {
        "description": description,
        "amount": amount,
        "is_optional": is_optional,
        "split_user_ids": split_user_ids or [],
    }
    return client.post(
        f"/api/v1/households/{household_id}/expenses",
        json=payload,
        headers=auth_headers(token),
    )


def pay(client, token: str, expense_id: str):
    """Marks the token owner's split on expense_id paid. Returns the HTTP response."""
    return client.post(
        f"/api/v1/expenses/{expense_id}/pay",
        headers=auth_headers(token),
    )
