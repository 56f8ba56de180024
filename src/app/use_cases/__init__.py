"""Casos de uso do intake-core."""

from app.use_cases.ingest_event import IngestEventUseCase, IngestResult, ignored_result
from app.use_cases.read_records import ReadRecordsUseCase

__all__ = [
    "IngestEventUseCase",
    "IngestResult",
    "ReadRecordsUseCase",
    "ignored_result",
]
