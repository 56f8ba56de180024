"""Testes para config.logging.

Cobre: configure_logging, get_logger, RequestContextFilter,
create_json_formatter.
"""

from __future__ import annotations

import json
import logging

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    RequestContextFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
)
from config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS


def _record(message: str = "receipt_committed", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.use_cases.ingest_event",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_default_level(self) -> None:
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_level_is_case_insensitive(self) -> None:
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="VERBOSE")

    def test_replaces_existing_handlers(self) -> None:
        """Chamadas repetidas não duplicam handlers."""
        configure_logging()
        configure_logging()

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].filters[0], RequestContextFilter)

    def test_constants(self) -> None:
        assert DEFAULT_SERVICE_NAME == "intake_core"
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS

    def test_get_logger_returns_named_logger(self) -> None:
        assert get_logger("app.services.throttle").name == "app.services.throttle"


class TestRequestContextFilter:
    """Testes para RequestContextFilter."""

    def test_injects_context(self) -> None:
        context_filter = RequestContextFilter(
            "intake_core",
            correlation_id_getter=lambda: "corr-1",
            event_source_getter=lambda: "stripe",
        )
        record = _record()

        assert context_filter.filter(record) is True
        assert record.correlation_id == "corr-1"
        assert record.event_source == "stripe"
        assert record.service == "intake_core"

    def test_explicit_extra_wins(self) -> None:
        context_filter = RequestContextFilter("intake_core", lambda: "ctx", lambda: "form")
        record = _record(correlation_id="explicit", event_source="cal")

        context_filter.filter(record)

        assert record.correlation_id == "explicit"
        assert record.event_source == "cal"

    def test_without_getters(self) -> None:
        record = _record()

        RequestContextFilter("svc").filter(record)

        assert record.correlation_id == ""
        assert record.event_source == ""


class TestJsonFormatter:
    """Testes para create_json_formatter."""

    def test_output_has_required_fields_renamed(self) -> None:
        formatter = create_json_formatter()
        record = _record(event_id="evt-1")
        RequestContextFilter("intake_core", lambda: "corr-1", lambda: "form").filter(record)

        payload = json.loads(formatter.format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "app.use_cases.ingest_event"
        assert payload["message"] == "receipt_committed"
        assert payload["correlation_id"] == "corr-1"
        assert payload["service"] == "intake_core"
        assert payload["event_source"] == "form"
        assert payload["event_id"] == "evt-1"

    def test_rename_map_covers_level_and_logger(self) -> None:
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}
        assert "correlation_id" in REQUIRED_LOG_FIELDS
