"""Métricas via structured logging.

As métricas saem como logs JSON e são agregadas fora do serviço.

Métricas suportadas:
- Latência por etapa do pipeline (canonical, projection, notification)
- Resultado de ingestão por origem (committed, already_processed, failed, ignored)
- Rejeições do throttle por motivo (cooldown, daily_cap)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_stage_latency(stage: str, latency_ms: float, *, source: str = "") -> None:
    """Registra latência de uma etapa do pipeline.

    Args:
        stage: Etapa (ex: "canonical", "projection", "notification")
        latency_ms: Latência em milissegundos
        source: Origem do evento
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "stage": stage,
            "source": source,
            "latency_ms": round(latency_ms, 2),
        },
    )


def record_ingest_outcome(source: str, status: str) -> None:
    """Registra o resultado final de uma ingestão."""
    logger.info(
        "metric_ingest_outcome",
        extra={"metric_type": "counter", "source": source, "status": status},
    )


def record_throttle_rejection(reason: str, retry_after: int) -> None:
    """Registra rejeição do throttle (sem identidade no log)."""
    logger.info(
        "metric_throttle_rejection",
        extra={"metric_type": "counter", "reason": reason, "retry_after": retry_after},
    )
