"""Observabilidade — contexto de requisição e métricas em logs estruturados.

Uso:
    from app.observability import get_correlation_id, set_correlation_id
    from app.observability import record_stage_latency, record_ingest_outcome
"""

from app.observability.correlation import (
    get_correlation_id,
    get_event_source,
    reset_correlation_id,
    reset_event_source,
    set_correlation_id,
    set_event_source,
)
from app.observability.metrics import (
    record_ingest_outcome,
    record_stage_latency,
    record_throttle_rejection,
)

__all__ = [
    "get_correlation_id",
    "get_event_source",
    "record_ingest_outcome",
    "record_stage_latency",
    "record_throttle_rejection",
    "reset_correlation_id",
    "reset_event_source",
    "set_correlation_id",
    "set_event_source",
]
