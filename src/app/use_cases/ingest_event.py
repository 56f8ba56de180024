"""Caso de uso: ingestão de um evento normalizado.

Ordem do pipeline:
    gate de idempotência → throttle → pre-write do receipt → upsert canônico
    → projeção → notificação → post-write do receipt

Erros de autenticação/validação acontecem antes (na borda); daqui para
frente nada é desfeito: falhas após o pre-write ficam registradas no receipt.
O throttle só consome a cota depois que o pre-write foi aceito. Uma entrega
concorrente do mesmo evento (receipt PENDING dentro do lease) volta como
"in_progress", sem nenhum efeito colateral.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from app.domain.errors import DependencyError, ReceiptInProgressError
from app.observability import record_ingest_outcome, record_stage_latency
from app.services.canonical import canonical_key
from app.services.identity import derive_support_id, resolve_account_id
from app.services.notification import NotificationOutcome
from app.services.projection import ProjectionOutcome
from fsm import InvalidReceiptTransitionError, ReceiptState

if TYPE_CHECKING:
    from app.domain.events import EntityKind, NormalizedEvent
    from app.domain.receipt import Receipt
    from app.domain.throttle_state import ThrottleState
    from app.services.canonical import CanonicalUpsertEngine
    from app.services.notification import NotificationDispatcher
    from app.services.projection import ProjectionAdapter
    from app.services.receipt_ledger import ReceiptLedger
    from app.services.throttle import ThrottleGuard

logger = logging.getLogger(__name__)

IngestStatus = Literal["committed", "already_processed", "in_progress", "failed", "ignored"]


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Resultado de uma ingestão (base do envelope de resposta)."""

    ok: bool
    event_id: str
    status: IngestStatus
    account_id: str | None = None
    canonical_ref: str | None = None
    projection: ProjectionOutcome = field(default_factory=lambda: ProjectionOutcome("skipped"))
    notification: NotificationOutcome = field(default_factory=lambda: NotificationOutcome("skipped"))
    error: str | None = None
    event_id_generated: bool = False
    retry_after: int | None = None

    @property
    def already_processed(self) -> bool:
        return self.status == "already_processed"

    def to_response(self, correlation_id: str) -> dict[str, Any]:
        body: dict[str, Any] = {
            "ok": self.ok,
            "event_id": self.event_id,
            "status": self.status,
            "already_processed": self.already_processed,
            "account_id": self.account_id,
            "canonical_ref": self.canonical_ref,
            "projection": self.projection.as_dict(),
            "notification": self.notification.as_dict(),
            "correlation_id": correlation_id,
        }
        if self.error:
            body["error"] = self.error
        if self.retry_after is not None:
            body["retry_after"] = self.retry_after
        return body


def ignored_result(event_id: str) -> IngestResult:
    """Evento de tipo não suportado: 200 sem nenhuma escrita."""
    return IngestResult(ok=True, event_id=event_id, status="ignored")


def _already_processed(receipt: Receipt, event: NormalizedEvent) -> IngestResult:
    if receipt.projection_error:
        projection = ProjectionOutcome("failed", receipt.projection_ref, receipt.projection_error)
    elif receipt.projection_ref:
        projection = ProjectionOutcome("projected", receipt.projection_ref)
    else:
        projection = ProjectionOutcome("skipped")
    return IngestResult(
        ok=True,
        event_id=receipt.event_id,
        status="already_processed",
        account_id=receipt.account_id,
        canonical_ref=receipt.canonical_ref,
        projection=projection,
        event_id_generated=event.event_id_generated,
    )


class IngestEventUseCase:
    """Executa o pipeline completo para um NormalizedEvent.

    Args:
        ledger: Serviço do ledger de receipts
        engine: Engine de upsert canônico
        projection: Adapter de projeção no tracker
        notification: Dispatcher de notificação
        throttle: Guard de throttle (None = sem throttle)
    """

    def __init__(
        self,
        *,
        ledger: ReceiptLedger,
        engine: CanonicalUpsertEngine,
        projection: ProjectionAdapter,
        notification: NotificationDispatcher,
        throttle: ThrottleGuard | None = None,
    ) -> None:
        self._ledger = ledger
        self._engine = engine
        self._projection = projection
        self._notification = notification
        self._throttle = throttle

    async def execute(self, event: NormalizedEvent, raw_payload: str) -> IngestResult:
        """Processa o evento.

        Raises:
            ThrottledError: Cooldown ou teto diário (nada foi gravado)
            DependencyError: Ledger indisponível antes do pre-write
        """
        existing = await self._lookup(event)
        if existing is not None and existing.state == ReceiptState.COMMITTED:
            logger.info("event_already_processed", extra={"event_id": event.event_id})
            record_ingest_outcome(event.source, "already_processed")
            return _already_processed(existing, event)

        account_id = resolve_account_id(event.identity.email)
        quota = None
        if event.throttled and self._throttle is not None:
            quota = await self._throttle.check(account_id)

        try:
            receipt = await self._ledger.begin(event, raw_payload, existing)
        except ReceiptInProgressError as exc:
            logger.info(
                "event_in_progress",
                extra={"event_id": event.event_id, "retry_after": exc.retry_after},
            )
            record_ingest_outcome(event.source, "in_progress")
            return IngestResult(
                ok=False,
                event_id=event.event_id,
                status="in_progress",
                error="ledger: in_progress",
                event_id_generated=event.event_id_generated,
                retry_after=exc.retry_after,
            )
        except InvalidReceiptTransitionError:
            # Outra entrega comitou entre a leitura e o pre-write
            committed = await self._lookup(event)
            if committed is None:
                raise
            record_ingest_outcome(event.source, "already_processed")
            return _already_processed(committed, event)
        except Exception as exc:
            logger.exception("receipt_prewrite_failed", extra={"event_id": event.event_id})
            raise DependencyError("ledger", "prewrite_failed") from exc

        if quota is not None:
            await self._record_quota(account_id, quota)
        return await self._run_pipeline(event, receipt, account_id)

    async def _lookup(self, event: NormalizedEvent) -> Receipt | None:
        try:
            return await self._ledger.lookup(event.source, event.event_id)
        except Exception as exc:
            logger.exception("receipt_lookup_failed", extra={"event_id": event.event_id})
            raise DependencyError("ledger", "lookup_failed") from exc

    async def _run_pipeline(
        self,
        event: NormalizedEvent,
        receipt: Receipt,
        account_id: str,
    ) -> IngestResult:
        started = time.perf_counter()
        try:
            kind, doc_id, doc = await self._upsert_canonical(event, account_id)
        except Exception as exc:
            error = exc.detail if isinstance(exc, DependencyError) else type(exc).__name__
            logger.warning(
                "canonical_upsert_failed",
                extra={"event_id": event.event_id, "error_type": type(exc).__name__},
            )
            await self._record_failure(receipt, f"canonical: {error}")
            record_ingest_outcome(event.source, "failed")
            return IngestResult(
                ok=False,
                event_id=event.event_id,
                status="failed",
                account_id=account_id,
                error=f"canonical: {error}",
                event_id_generated=event.event_id_generated,
            )
        record_stage_latency("canonical", _elapsed_ms(started), source=event.source)

        started = time.perf_counter()
        projection = await self._projection.project(event, kind, doc_id, doc, receipt.key)
        record_stage_latency("projection", _elapsed_ms(started), source=event.source)

        started = time.perf_counter()
        notification = await self._notification.notify(event, kind, doc_id, projection)
        record_stage_latency("notification", _elapsed_ms(started), source=event.source)

        ref = canonical_key(kind, doc_id)
        try:
            await self._ledger.commit(
                receipt,
                canonical_ref=ref,
                account_id=account_id,
                projection_ref=projection.task_id,
                projection_error=projection.error,
            )
        except Exception:
            # Receipt fica PENDING: expirado o lease, a próxima entrega re-executa
            logger.exception("receipt_postwrite_failed", extra={"event_id": event.event_id})
            record_ingest_outcome(event.source, "failed")
            return IngestResult(
                ok=False,
                event_id=event.event_id,
                status="failed",
                account_id=account_id,
                canonical_ref=ref,
                projection=projection,
                notification=notification,
                error="ledger: postwrite_failed",
                event_id_generated=event.event_id_generated,
            )

        record_ingest_outcome(event.source, "committed")
        return IngestResult(
            ok=True,
            event_id=event.event_id,
            status="committed",
            account_id=account_id,
            canonical_ref=ref,
            projection=projection,
            notification=notification,
            event_id_generated=event.event_id_generated,
        )

    async def _upsert_canonical(
        self,
        event: NormalizedEvent,
        account_id: str,
    ) -> tuple[EntityKind, str, dict[str, Any]]:
        """Account sempre; Order/Support quando presentes. Retorna o primário."""
        order_id = None
        if event.order is not None:
            order_id = await self._engine.resolve_order_id(event.order)
        account = await self._engine.upsert_account(event, account_id, order_id)
        order = await self._engine.upsert_order(event, account_id, order_id)
        support = None
        if event.support is not None:
            support_id = derive_support_id(event.source, event.event_id)
            support = await self._engine.upsert_support(event, account_id, support_id)

        if support is not None:
            return "support", support.support_id, support.to_firestore_dict()
        if order is not None:
            return "order", order.order_id, order.to_firestore_dict()
        return "account", account.account_id, account.to_firestore_dict()

    async def _record_quota(self, account_id: str, quota: ThrottleState) -> None:
        # O evento já foi aceito; falha ao gravar a cota não derruba o pipeline
        try:
            await self._throttle.record(account_id, quota)
        except Exception:
            logger.exception("throttle_record_failed", extra={"account_id": account_id})

    async def _record_failure(self, receipt: Receipt, error: str) -> None:
        try:
            await self._ledger.fail(receipt, error)
        except Exception:
            logger.exception("receipt_fail_write_failed", extra={"event_id": receipt.event_id})


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
