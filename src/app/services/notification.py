"""Notification Dispatcher — última etapa do pipeline, best-effort.

Falha no envio é logada e anotada como comentário na tarefa do tracker;
estado canônico e projeção não são desfeitos.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from app.services.canonical import canonical_key

if TYPE_CHECKING:
    from app.domain.events import EntityKind, NormalizedEvent
    from app.protocols.notifier import MailSenderProtocol
    from app.protocols.tracker import TrackerClientProtocol
    from app.services.projection import ProjectionOutcome

logger = logging.getLogger(__name__)

NotificationStatus = Literal["sent", "skipped", "failed"]


@dataclass(frozen=True, slots=True)
class NotificationOutcome:
    """Resultado da notificação."""

    status: NotificationStatus
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {"status": self.status, "error": self.error}


def build_notification(
    event: NormalizedEvent,
    kind: EntityKind,
    doc_id: str,
    projection: ProjectionOutcome,
) -> tuple[str, str]:
    """Assunto e corpo (texto simples) da notificação operacional."""
    subject = f"[intake] {event.event_type} ({kind})"
    name = " ".join(p for p in (event.identity.first_name, event.identity.last_name) if p)
    lines = [
        f"Evento: {event.event_type}",
        f"Origem: {event.source}",
        f"Event id: {event.event_id}",
        f"Contato: {name or '-'} <{event.identity.email}>",
        f"Documento: {canonical_key(kind, doc_id)}",
        f"Tarefa: {projection.task_id or '-'} ({projection.status})",
    ]
    if event.support is not None:
        lines.extend(["", f"Assunto: {event.support.subject}", "", event.support.message])
    return subject, "\n".join(lines)


class NotificationDispatcher:
    """Envia a notificação e anota falhas no tracker.

    Args:
        sender: Client de e-mail (None = notificação desabilitada)
        tracker: Client do tracker para anotar falhas (opcional)
        notify_to: Destinatário das notificações
    """

    def __init__(
        self,
        sender: MailSenderProtocol | None,
        tracker: TrackerClientProtocol | None,
        notify_to: str,
    ) -> None:
        self._sender = sender
        self._tracker = tracker
        self._notify_to = notify_to

    async def notify(
        self,
        event: NormalizedEvent,
        kind: EntityKind,
        doc_id: str,
        projection: ProjectionOutcome,
    ) -> NotificationOutcome:
        """Envia; nunca levanta (falha vira NotificationOutcome)."""
        if self._sender is None:
            return NotificationOutcome(status="skipped")

        subject, body = build_notification(event, kind, doc_id, projection)
        try:
            await self._sender.send(self._notify_to, subject, body)
        except Exception as exc:
            error = f"{type(exc).__name__}: {exc}"[:300]
            logger.warning(
                "notification_failed",
                extra={"event_id": event.event_id, "error_type": type(exc).__name__},
            )
            await self._annotate(projection.task_id, error)
            return NotificationOutcome(status="failed", error=error)

        logger.info("notification_sent", extra={"event_id": event.event_id})
        return NotificationOutcome(status="sent")

    async def _annotate(self, task_id: str | None, error: str) -> None:
        if self._tracker is None or not task_id:
            return
        try:
            await self._tracker.add_comment(task_id, f"Falha ao enviar notificação: {error}")
        except Exception:
            logger.exception("notification_annotation_failed")
