"""Projection Adapter — espelha documentos canônicos no tracker.

Só roda depois que a escrita canônica retornou com sucesso. Falhas aqui são
registradas no resultado (e no receipt), nunca desfazem o estado canônico.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

from app.domain.trace import ProjectionTrace
from app.infra.tracker.payloads import build_task_description, build_task_name, build_task_tags
from app.services.canonical import canonical_key

if TYPE_CHECKING:
    from app.domain.events import EntityKind, NormalizedEvent
    from app.protocols.tracker import TrackerClientProtocol
    from app.services.canonical import CanonicalUpsertEngine

logger = logging.getLogger(__name__)

ProjectionStatus = Literal["projected", "skipped", "failed"]


@dataclass(frozen=True, slots=True)
class ProjectionOutcome:
    """Resultado da projeção."""

    status: ProjectionStatus
    task_id: str | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {"status": self.status, "task_id": self.task_id, "error": self.error}


class ProjectionAdapter:
    """Cria ou atualiza a tarefa do tracker e grava o ponteiro de volta.

    Args:
        tracker: Client do tracker (None = projeção desabilitada)
        engine: Engine canônico, usado para anexar external_task_ref
    """

    def __init__(
        self,
        tracker: TrackerClientProtocol | None,
        engine: CanonicalUpsertEngine,
    ) -> None:
        self._tracker = tracker
        self._engine = engine

    @property
    def enabled(self) -> bool:
        return self._tracker is not None

    async def project(
        self,
        event: NormalizedEvent,
        kind: EntityKind,
        doc_id: str,
        doc: dict[str, Any],
        ledger_key: str,
    ) -> ProjectionOutcome:
        """Projeta o documento; nunca levanta (falha vira ProjectionOutcome)."""
        if self._tracker is None:
            return ProjectionOutcome(status="skipped")

        doc_key = canonical_key(kind, doc_id)
        name = build_task_name(kind, doc)
        description = build_task_description(kind, doc, ledger_key=ledger_key, canonical_key=doc_key)
        task_id: str | None = doc.get("external_task_ref")
        try:
            if task_id:
                await self._tracker.update_task(task_id, name, description)
            else:
                task_id = await self._tracker.create_task(
                    name, description, build_task_tags(kind, event.source)
                )
            trace = ProjectionTrace(
                task_id=task_id,
                ledger_key=ledger_key,
                canonical_key=doc_key,
                projected_at=datetime.now(UTC),
            )
            await self._engine.attach_projection(kind, doc_id, task_id, trace)
        except Exception as exc:
            logger.warning(
                "projection_failed",
                extra={
                    "event_id": event.event_id,
                    "kind": kind,
                    "error_type": type(exc).__name__,
                },
            )
            return ProjectionOutcome(status="failed", task_id=task_id, error=_describe(exc))

        logger.info("projection_completed", extra={"event_id": event.event_id, "kind": kind})
        return ProjectionOutcome(status="projected", task_id=task_id)


def _describe(exc: Exception) -> str:
    return f"{type(exc).__name__}: {exc}"[:300]
