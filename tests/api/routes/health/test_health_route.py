"""Testes dos endpoints de health e readiness."""

from __future__ import annotations

import json
from dataclasses import replace
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from api.routes.health.router import readiness_check
from config.settings import StoreSettings, TrackerSettings
from tests.fakes.app_factory import default_settings, make_test_app


def _build_request_with_state(state: SimpleNamespace) -> Request:
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "path": "/ready",
        "raw_path": b"/ready",
        "query_string": b"",
        "headers": [],
        "app": SimpleNamespace(state=state),
    }

    async def _receive() -> dict[str, object]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(scope, _receive)


def _container(settings, *, redis_client=None, firestore_client=None) -> SimpleNamespace:
    return SimpleNamespace(
        settings=settings,
        redis_client=redis_client,
        firestore_client=firestore_client,
    )


def test_health_endpoint() -> None:
    harness = make_test_app()

    with TestClient(harness.app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["service"] == "intake-core"


@pytest.mark.asyncio
async def test_readiness_without_container() -> None:
    response = await readiness_check(_build_request_with_state(SimpleNamespace()))

    assert response.status_code == 503
    assert json.loads(response.body)["status"] == "not_ready"


@pytest.mark.asyncio
async def test_memory_backends_are_ready_with_optional_integrations_degraded() -> None:
    request = _build_request_with_state(SimpleNamespace(container=_container(default_settings())))

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 200
    assert payload["status"] == "ready"
    assert set(payload["checks"]) == {"tracker", "mail"}
    assert payload["checks"]["tracker"] == {"status": "degraded", "latency_ms": None, "error": "disabled"}


@pytest.mark.asyncio
async def test_firestore_and_redis_are_checked_when_configured() -> None:
    redis_client = MagicMock()
    redis_client.ping = AsyncMock(return_value=True)
    firestore_client = MagicMock()
    firestore_client.collection.return_value.document.return_value.get.return_value = (
        SimpleNamespace(exists=True)
    )
    settings = default_settings(
        stores=StoreSettings(backend="firestore", throttle_backend="redis"),
        tracker=replace(TrackerSettings(), enabled=True),
    )
    request = _build_request_with_state(
        SimpleNamespace(
            container=_container(
                settings, redis_client=redis_client, firestore_client=firestore_client
            )
        )
    )

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 200
    assert payload["checks"]["firestore"]["status"] == "ok"
    assert payload["checks"]["redis"]["status"] == "ok"
    assert payload["checks"]["tracker"]["status"] == "ok"
    firestore_client.collection.assert_called_with("_health")


@pytest.mark.asyncio
async def test_redis_failure_makes_service_not_ready() -> None:
    redis_client = MagicMock()
    redis_client.ping = AsyncMock(side_effect=ConnectionError("down"))
    settings = default_settings(stores=StoreSettings(throttle_backend="redis"))
    request = _build_request_with_state(
        SimpleNamespace(container=_container(settings, redis_client=redis_client))
    )

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 503
    assert payload["checks"]["redis"] == {
        "status": "failed",
        "latency_ms": None,
        "error": "ConnectionError",
    }


@pytest.mark.asyncio
async def test_missing_firestore_health_doc_is_degraded() -> None:
    firestore_client = MagicMock()
    firestore_client.collection.return_value.document.return_value.get.return_value = (
        SimpleNamespace(exists=False)
    )
    settings = default_settings(stores=StoreSettings(backend="firestore"))
    request = _build_request_with_state(
        SimpleNamespace(container=_container(settings, firestore_client=firestore_client))
    )

    response = await readiness_check(request)
    payload = json.loads(response.body.decode("utf-8"))

    assert response.status_code == 200
    assert payload["checks"]["firestore"]["status"] == "degraded"
