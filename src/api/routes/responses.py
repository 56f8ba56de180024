"""Helpers compartilhados pelas rotas — contexto, envelope e mapeamento de erros.

Mapeamento de status:
- 401: AuthenticationError (assinatura)
- 400: ValidationError / JSON inválido
- 409: mesmo evento em processamento por outra entrega (com Retry-After)
- 429: ThrottledError (com Retry-After)
- 500: secret ausente (configuração do servidor)
- 503: ledger indisponível antes do pre-write
- 200: sucesso, evento ignorado e falhas após o pre-write (ok=false)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.domain.errors import DependencyError, ThrottledError
from app.observability import (
    get_correlation_id,
    reset_correlation_id,
    reset_event_source,
    set_correlation_id,
    set_event_source,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from app.bootstrap.dependencies import AppContainer
    from app.domain.errors import ValidationError
    from app.domain.events import NormalizedEvent
    from app.use_cases import IngestResult

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "x-correlation-id"


@contextmanager
def request_scope(request: Request, source: str = "") -> Iterator[str]:
    """Define correlation_id (header ou UUID) e origem durante o request."""
    correlation_token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
    source_token = set_event_source(source)
    try:
        yield get_correlation_id()
    finally:
        reset_event_source(source_token)
        reset_correlation_id(correlation_token)


def get_container(request: Request) -> AppContainer:
    """Container montado no lifespan (ou injetado em create_app)."""
    return request.app.state.container


def json_response(
    body: dict[str, Any],
    status_code: int,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """JSONResponse com correlation_id no corpo e no header."""
    correlation_id = get_correlation_id()
    body.setdefault("correlation_id", correlation_id)
    merged = {CORRELATION_HEADER: correlation_id, **(headers or {})}
    return JSONResponse(content=body, status_code=status_code, headers=merged)


def error_response(
    status_code: int,
    code: str,
    message: str,
    *,
    errors: list[dict[str, str]] | None = None,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    """Envelope de erro `{ok: false, error: {code, message}, errors?}`."""
    body: dict[str, Any] = {"ok": False, "error": {"code": code, "message": message}}
    if errors is not None:
        body["errors"] = errors
    body.update(extra)
    return json_response(body, status_code, headers)


def validation_response(exc: ValidationError) -> JSONResponse:
    """400 com a lista completa de campos rejeitados."""
    logger.info("payload_rejected", extra={"fields": exc.fields})
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        exc.code,
        str(exc),
        errors=[error.as_dict() for error in exc.errors],
    )


def result_response(result: IngestResult) -> JSONResponse:
    if result.status == "in_progress":
        return json_response(
            result.to_response(get_correlation_id()),
            status.HTTP_409_CONFLICT,
            headers={"Retry-After": str(result.retry_after or 1)},
        )
    return json_response(result.to_response(get_correlation_id()), status.HTTP_200_OK)


async def run_ingest(container: AppContainer, event: NormalizedEvent, raw_body: bytes) -> JSONResponse:
    """Executa o pipeline e traduz o resultado para HTTP.

    O corpo já foi validado como UTF-8 na borda; o raw_payload é gravado sem perdas.
    """
    try:
        result = await container.ingest.execute(event, raw_body.decode("utf-8"))
    except ThrottledError as exc:
        return error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            exc.code,
            str(exc),
            headers={"Retry-After": str(exc.retry_after)},
            reason=exc.reason,
            retry_after=exc.retry_after,
            event_id=event.event_id,
        )
    except DependencyError as exc:
        status_code = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if exc.stage == "ledger"
            else status.HTTP_200_OK
        )
        return error_response(
            status_code,
            exc.code,
            str(exc),
            event_id=event.event_id,
            status="failed",
        )
    return result_response(result)
