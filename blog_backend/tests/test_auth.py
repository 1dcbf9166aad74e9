"""
tests/test_auth.py
"""
from __future__ import annotations

import logging
from dataclasses import replace

import pytest

from app.core.security import AdminGate, AuthResult


def test_gate_outcomes():
    gate = AdminGate("correct", signing_key="k")

    assert gate.check_password("correct") is AuthResult.AUTHORIZED
    assert gate.check_password("wrong") is AuthResult.DENIED
    assert gate.check_password("Correct") is AuthResult.DENIED
    assert gate.check_password(None) is AuthResult.DENIED
    assert AdminGate(None, signing_key="k").check_password("correct") is AuthResult.MISCONFIGURED


def test_tokens_are_signed_with_the_server_key():
    gate = AdminGate("correct", signing_key="k")
    other = AdminGate("correct", signing_key="different")

    token = gate.issue_token()

    assert gate.verify_token(token)
    assert not other.verify_token(token)
    assert not gate.verify_token("")
    assert not gate.verify_token(token + "x")


def test_login_success_returns_token(client):
    rv = client.post("/auth/admin", json={"password": "correct"})

    assert rv.status_code == 200
    body = rv.json()
    assert body["success"] is True
    assert body["message"] == "Authentication successful"
    assert body["token"]


def test_wrong_password_is_200_without_token(client):
    rv = client.post("/auth/admin", json={"password": "wrong"})

    assert rv.status_code == 200
    assert rv.json() == {"success": False, "message": "Invalid password"}


def test_missing_password_has_same_shape(client):
    for payload in ({}, {"password": ""}):
        rv = client.post("/auth/admin", json=payload)
        assert rv.status_code == 200
        assert rv.json() == {"success": False, "message": "Password is required"}


@pytest.mark.parametrize("password", [12345, True, ["correct"], {"value": "correct"}])
def test_non_string_password_is_denied(client, password):
    rv = client.post("/auth/admin", json={"password": password})

    assert rv.status_code == 200
    assert rv.json() == {"success": False, "message": "Invalid password"}


def test_misconfigured_looks_like_denied_and_is_logged(make_client, settings, caplog):
    client = make_client(replace(settings, admin_password=None))

    with caplog.at_level(logging.ERROR):
        misconfigured = client.post("/auth/admin", json={"password": "correct"})
    denied = make_client(settings).post("/auth/admin", json={"password": "wrong"})

    assert misconfigured.status_code == denied.status_code == 200
    assert set(misconfigured.json()) == set(denied.json()) == {"success", "message"}
    assert misconfigured.json()["success"] is False
    assert "ADMIN_PASSWORD" in caplog.text


def test_token_from_login_unlocks_writes(client):
    token = client.post("/auth/admin", json={"password": "correct"}).json()["token"]

    rv = client.post(
        "/posts",
        json={"title": "t", "content": "c", "excerpt": "e", "author": "a"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert rv.status_code == 201
