"""Formatters de logging estruturado.

Todo log do pipeline sai em JSON com os campos:
- asctime, level, logger, message
- correlation_id: rastreamento da requisição
- service: nome do serviço
- event_source: origem do evento em processamento (form|cal|stripe)

Payloads brutos e e-mails nunca entram no log; ids determinísticos sim.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
    "event_source",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "asctime": "2026-10-19 10:30:00,120",
            "level": "INFO",
            "logger": "app.use_cases.ingest_event",
            "message": "receipt_committed",
            "correlation_id": "abc-123",
            "service": "intake_core",
            "event_source": "stripe"
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)
    return JsonFormatter(format_string, rename_fields=FIELD_RENAME_MAP)
