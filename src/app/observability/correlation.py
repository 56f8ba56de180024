"""Contexto da requisição (correlation_id e origem do evento).

Usa ContextVar para ser async-safe; o filter de logging lê daqui.

Uso:
    token = set_correlation_id(request.headers.get("x-correlation-id"))
    try:
        ...
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_event_source: ContextVar[str] = ContextVar("event_source", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual; gera UUID se None."""
    value = correlation_id or str(uuid.uuid4())
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def get_event_source() -> str:
    """Retorna a origem do evento em processamento (form|cal|stripe)."""
    return _event_source.get()


def set_event_source(source: str) -> Token[str]:
    """Define a origem do evento no contexto atual."""
    return _event_source.set(source)


def reset_event_source(token: Token[str]) -> None:
    """Restaura a origem do evento ao valor anterior."""
    _event_source.reset(token)
