"""Filters de logging para injeção de contexto da requisição.

Campos injetados em cada record:
- correlation_id: ID de rastreamento da requisição
- service: nome do serviço
- event_source: origem do evento (vazio fora do pipeline)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class RequestContextFilter(logging.Filter):
    """Injeta correlation_id, service e event_source em cada record.

    Valores passados explicitamente via `extra` são preservados.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        event_source_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")
        self._get_event_source = event_source_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; nunca descarta."""
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        source = getattr(record, "event_source", None)
        record.event_source = source if source else self._get_event_source()
        record.service = self._service_name
        return True
