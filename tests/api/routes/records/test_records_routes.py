"""Testes das rotas de leitura dos documentos canônicos."""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.services.identity import resolve_account_id
from tests.fakes.app_factory import make_test_app


def _submit(client: TestClient) -> None:
    response = client.post(
        "/forms/intake",
        json={"email": "ana@example.com", "first_name": "Ana", "step": "proposal"},
    )
    assert response.status_code == 200


def test_account_by_id() -> None:
    harness = make_test_app()
    account_id = resolve_account_id("ana@example.com")

    with TestClient(harness.app) as client:
        _submit(client)
        response = client.get(f"/records/accounts/{account_id}")

    body = response.json()
    assert response.status_code == 200
    assert body["ok"] is True
    assert body["kind"] == "account"
    assert body["record"]["account_id"] == account_id
    assert body["record"]["external_task_ref"] == "task-1"


def test_account_by_email_is_case_insensitive() -> None:
    harness = make_test_app()

    with TestClient(harness.app) as client:
        _submit(client)
        response = client.get("/records/accounts", params={"email": "ANA@Example.com"})

    assert response.status_code == 200
    assert response.json()["record"]["primary_email"] == "ana@example.com"


def test_account_by_blank_email() -> None:
    harness = make_test_app()

    with TestClient(harness.app) as client:
        response = client.get("/records/accounts", params={"email": " "})

    assert response.status_code == 400


def test_missing_records_return_404() -> None:
    harness = make_test_app()

    with TestClient(harness.app) as client:
        responses = [
            client.get("/records/accounts/unknown"),
            client.get("/records/orders/ORD-404"),
            client.get("/records/support/unknown"),
        ]

    assert [r.status_code for r in responses] == [404, 404, 404]
    assert responses[0].json()["error"]["code"] == "not_found"
