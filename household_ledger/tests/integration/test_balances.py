"""
tests/integration/test_balances.py — Integration tests for GET /households/:id/balances.

Runs the full HTTP stack: JWT auth, membership check, snapshot load from the
database, aggregation, and display formatting. Literal household scenarios
are replayed through the real endpoints.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from .conftest import (
    auth_headers,
    make_expense,
    make_household,
    make_user,
    pay,
    remove_member,
    token_for,
)


@pytest.fixture
def flat(app):
    """A household with four members; A created it. Returns ids and tokens."""
    ids = {name: make_user(app, name) for name in ("Alice", "Bob", "Cat", "Dan")}
    household_id = make_household(
        app, ids["Alice"], [ids["Bob"], ids["Cat"], ids["Dan"]],
    )
    return {
        "household_id": household_id,
        "A": ids["Alice"],
        "B": ids["Bob"],
        "C": ids["Cat"],
        "D": ids["Dan"],
        "tok": {key: token_for(ids[name]) for key, name in
                (("A", "Alice"), ("B", "Bob"), ("C", "Cat"), ("D", "Dan"))},
    }


def _balances(client, flat, viewer: str) -> dict:
    resp = client.get(
        f"/api/v1/households/{flat['household_id']}/balances",
        headers=auth_headers(flat["tok"][viewer]),
    )
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body["warnings"] == []
    return {b["user_id"]: b for b in body["data"]["balances"]}


def _expense_id(resp) -> str:
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]["id"]


# ── Scenarios ──────────────────────────────────────────────────────────────

def test_creator_is_owed_one_share_by_each_unpaid_member(client, flat):
    make_expense(client, flat["tok"]["A"], flat["household_id"], "30.00", [flat["B"], flat["C"]])

    balances = _balances(client, flat, "A")

    assert balances[flat["B"]]["owes_you"] == "10.00"
    assert balances[flat["C"]]["owes_you"] == "10.00"
    assert balances[flat["B"]]["you_owe"] == "0.00"
    assert balances[flat["B"]]["owes_you_optional"] == "0.00"
    assert balances[flat["D"]]["net"] == "0.00"


def test_payment_clears_only_the_payers_share(client, flat):
    expense_id = _expense_id(make_expense(
        client, flat["tok"]["A"], flat["household_id"], "30.00", [flat["B"], flat["C"]],
    ))
    assert pay(client, flat["tok"]["B"], expense_id).status_code == 200

    balances = _balances(client, flat, "A")

    assert balances[flat["B"]]["owes_you"] == "0.00"
    assert balances[flat["C"]]["owes_you"] == "10.00"


def test_non_creator_viewer_owes_the_creator(client, flat):
    make_expense(client, flat["tok"]["A"], flat["household_id"], "9.00", [flat["B"], flat["D"]])

    balances = _balances(client, flat, "D")

    assert balances[flat["A"]]["you_owe"] == "3.00"
    assert balances[flat["A"]]["net"] == "-3.00"
    # D has no position against B: only the creator is a counterparty.
    assert balances[flat["B"]]["you_owe"] == "0.00"
    assert balances[flat["B"]]["owes_you"] == "0.00"


def test_optional_expense_lands_on_optional_ledger(client, flat):
    make_expense(
        client, flat["tok"]["A"], flat["household_id"], "12.00", [flat["B"]],
        is_optional=True,
    )

    bob = _balances(client, flat, "A")[flat["B"]]

    assert bob["owes_you_optional"] == "6.00"
    assert bob["owes_you"] == "0.00"
    assert bob["net_optional"] == "6.00"
    assert bob["net"] == "0.00"


def test_deleted_expense_no_longer_contributes(client, flat):
    keep = _expense_id(make_expense(
        client, flat["tok"]["A"], flat["household_id"], "20.00", [flat["B"]],
    ))
    drop = _expense_id(make_expense(
        client, flat["tok"]["A"], flat["household_id"], "40.00", [flat["B"]],
    ))
    assert _balances(client, flat, "A")[flat["B"]]["owes_you"] == "30.00"

    resp = client.delete(f"/api/v1/expenses/{drop}", headers=auth_headers(flat["tok"]["A"]))
    assert resp.status_code == 200

    assert _balances(client, flat, "A")[flat["B"]]["owes_you"] == "10.00"
    assert keep != drop


# ── Response shape ─────────────────────────────────────────────────────────

def test_every_other_member_listed_even_without_activity(client, flat):
    balances = _balances(client, flat, "B")

    assert set(balances) == {flat["A"], flat["C"], flat["D"]}
    assert balances[flat["A"]]["name"] == "Alice"
    for b in balances.values():
        assert b["net"] == "0.00"
        assert b["net_optional"] == "0.00"


def test_response_names_household_and_viewer(client, flat):
    resp = client.get(
        f"/api/v1/households/{flat['household_id']}/balances",
        headers=auth_headers(flat["tok"]["C"]),
    )

    data = resp.get_json()["data"]
    assert data["household_id"] == flat["household_id"]
    assert data["viewer_id"] == flat["C"]


def test_mutual_debts_are_reported_gross_and_netted(client, flat):
    make_expense(client, flat["tok"]["A"], flat["household_id"], "30.00", [flat["B"]])
    make_expense(client, flat["tok"]["B"], flat["household_id"], "10.00", [flat["A"]])

    bob = _balances(client, flat, "A")[flat["B"]]

    assert bob["owes_you"] == "15.00"
    assert bob["you_owe"] == "5.00"
    assert bob["net"] == "10.00"


def test_uneven_share_is_rounded_for_display_only(client, flat):
    make_expense(client, flat["tok"]["B"], flat["household_id"], "10.00", [flat["A"], flat["C"]])

    assert _balances(client, flat, "A")[flat["B"]]["you_owe"] == "3.33"
    assert _balances(client, flat, "B")[flat["A"]]["owes_you"] == "3.33"


def test_departed_member_is_not_listed(app, client, flat):
    make_expense(client, flat["tok"]["A"], flat["household_id"], "30.00", [flat["B"], flat["C"]])
    remove_member(app, flat["household_id"], flat["B"])

    balances = _balances(client, flat, "A")

    assert flat["B"] not in balances
    assert balances[flat["C"]]["owes_you"] == "10.00"


def test_balances_are_isolated_per_household(app, client, flat):
    other = make_household(app, flat["A"], [flat["B"]], name="Cabin")
    make_expense(client, flat["tok"]["A"], other, "50.00", [flat["B"]])

    assert _balances(client, flat, "A")[flat["B"]]["owes_you"] == "0.00"


# ── Access control ─────────────────────────────────────────────────────────

def test_non_member_forbidden(app, client, flat):
    outsider = token_for(make_user(app, "Eve"))

    resp = client.get(
        f"/api/v1/households/{flat['household_id']}/balances",
        headers=auth_headers(outsider),
    )

    assert resp.status_code == 403
    assert resp.get_json()["error"]["code"] == "FORBIDDEN"


def test_unknown_household_not_found(client, flat):
    resp = client.get(
        "/api/v1/households/00000000-0000-0000-0000-000000000000/balances",
        headers=auth_headers(flat["tok"]["A"]),
    )

    assert resp.status_code == 404
    assert resp.get_json()["error"]["code"] == "HOUSEHOLD_NOT_FOUND"


def test_missing_token(client, flat):
    resp = client.get(f"/api/v1/households/{flat['household_id']}/balances")

    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "TOKEN_MISSING"


def test_malformed_authorization_header(client, flat):
    resp = client.get(
        f"/api/v1/households/{flat['household_id']}/balances",
        headers={"Authorization": f"Token {flat['tok']['A']}"},
    )

    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "TOKEN_INVALID"


def test_expired_token(client, flat):
    expired = token_for(flat["A"], expires_in=timedelta(minutes=-1))

    resp = client.get(
        f"/api/v1/households/{flat['household_id']}/balances",
        headers=auth_headers(expired),
    )

    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "TOKEN_EXPIRED"


def test_token_signed_with_wrong_secret(client, flat):
    import jwt

    forged = jwt.encode({"sub": flat["A"]}, "another-secret-of-at-least-32-bytes!!", algorithm="HS256")

    resp = client.get(
        f"/api/v1/households/{flat['household_id']}/balances",
        headers=auth_headers(forged),
    )

    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "TOKEN_INVALID"
