"""Endpoints de health check para Cloud Run."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)

router = APIRouter()

HEALTH_COLLECTION = "_health"
HEALTH_DOCUMENT = "check"


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    """Resultado de checagem de dependência."""

    status: Literal["ok", "degraded", "failed"]
    latency_ms: float | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "latency_ms": self.latency_ms,
            "error": self.error,
        }


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness — verifica se o serviço está rodando."""
    return HealthResponse(
        status="healthy",
        service="intake-core",
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness — checa só os backends efetivamente configurados."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        return JSONResponse(
            content={
                "status": "not_ready",
                "checks": {},
                "timestamp": datetime.now(UTC).isoformat(),
            },
            status_code=503,
        )

    stores = container.settings.stores
    checks: dict[str, DependencyCheck] = {}
    if "firestore" in (stores.backend, stores.throttle_backend):
        checks["firestore"] = await _check_firestore(container.firestore_client)
    if stores.throttle_backend == "redis":
        checks["redis"] = await _check_redis(container.redis_client)
    checks["tracker"] = _check_enabled(container.settings.tracker.enabled)
    checks["mail"] = _check_enabled(container.settings.mail.enabled)

    ready = all(check.status in {"ok", "degraded"} for check in checks.values())
    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {name: check.as_dict() for name, check in checks.items()},
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


def _check_enabled(enabled: bool) -> DependencyCheck:
    # Projeção e notificação são best-effort: desabilitadas não bloqueiam
    if enabled:
        return DependencyCheck(status="ok")
    return DependencyCheck(status="degraded", error="disabled")


async def _check_redis(redis_client: Any | None) -> DependencyCheck:
    if redis_client is None:
        return DependencyCheck(status="failed", error="not_configured")
    started_at = time.perf_counter()
    try:
        await asyncio.wait_for(redis_client.ping(), timeout=2.0)
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        logger.warning("readiness_redis_check_failed", extra={"error_type": type(exc).__name__})
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))


async def _check_firestore(firestore_client: Any | None) -> DependencyCheck:
    if firestore_client is None:
        return DependencyCheck(status="failed", error="not_configured")
    started_at = time.perf_counter()
    try:
        exists = await asyncio.wait_for(
            asyncio.to_thread(_read_firestore_health_doc, firestore_client),
            timeout=3.0,
        )
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        logger.warning(
            "readiness_firestore_check_failed",
            extra={"error_type": type(exc).__name__},
        )
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    status = "ok" if exists else "degraded"
    return DependencyCheck(status=status, latency_ms=round(latency_ms, 2))


def _read_firestore_health_doc(firestore_client: Any) -> bool:
    doc = firestore_client.collection(HEALTH_COLLECTION).document(HEALTH_DOCUMENT).get()
    return bool(getattr(doc, "exists", False))
