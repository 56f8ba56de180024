"""Serviço do ledger de receipts — gate de idempotência do pipeline.

Toda mudança de estado passa pela ReceiptStateMachine e é revalidada pelo
store contra o estado gravado: COMMITTED é terminal, PENDING/FAILED podem ser
re-executados (bump de `attempts`).

Receipt PENDING tem lease: enquanto `attempt_started_at + lease_seconds` não
passou, outra entrega do mesmo evento recebe ReceiptInProgressError em vez de
repetir upsert, projeção e notificação. Lease expirado = execução que caiu;
a próxima entrega assume via compare-and-set sobre `attempts`.
"""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.domain.errors import ReceiptAlreadyExistsError, ReceiptInProgressError, WriteConflictError
from app.domain.receipt import Receipt
from fsm import ReceiptState, ReceiptStateMachine

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.events import NormalizedEvent
    from app.protocols.receipt_ledger import ReceiptLedgerProtocol

logger = logging.getLogger(__name__)

# Limite do texto de erro gravado no receipt
MAX_ERROR_LENGTH = 500

DEFAULT_LEASE_SECONDS = 120


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ReceiptLedger:
    """Operações de alto nível sobre o ledger.

    Args:
        store: Persistência dos receipts
        lease_seconds: Duração do lease de uma execução PENDING
        clock: Fonte de tempo (injetável em testes)
    """

    def __init__(
        self,
        store: ReceiptLedgerProtocol,
        *,
        lease_seconds: int = DEFAULT_LEASE_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._lease_seconds = lease_seconds
        self._clock = clock or _utcnow

    async def lookup(self, source: str, event_id: str) -> Receipt | None:
        """Receipt existente para a chave (leitura do gate de idempotência)."""
        return await self._store.get(source, event_id)

    async def begin(
        self,
        event: NormalizedEvent,
        raw_payload: str,
        existing: Receipt | None = None,
    ) -> Receipt:
        """Pre-write: cria o receipt PENDING ou reivindica nova tentativa.

        Raises:
            InvalidReceiptTransitionError: Se outro request já comitou o evento
            ReceiptInProgressError: Se outra entrega detém o lease do evento
        """
        now = self._clock()
        if existing is None:
            receipt = Receipt(
                event_id=event.event_id,
                source=event.source,
                event_type=event.event_type,
                received_at=now,
                raw_payload=raw_payload,
                normalized_payload=event.to_receipt_dict(),
                attempt_started_at=now,
                updated_at=now,
            )
            try:
                await self._store.create(receipt)
            except ReceiptAlreadyExistsError:
                # Entrega concorrente gravou primeiro; decide pelo lease dela
                existing = await self._store.get(event.source, event.event_id)
                if existing is None:
                    raise
            else:
                logger.info(
                    "receipt_pending",
                    extra={"event_id": event.event_id, "event_type": event.event_type},
                )
                return receipt

        self._ensure_lease_expired(existing, now)
        machine = ReceiptStateMachine(initial_state=existing.state, receipt_key=existing.key)
        machine.transition(ReceiptState.PENDING, trigger="retry")
        try:
            receipt = await self._store.update(
                existing.source,
                existing.event_id,
                {
                    "state": ReceiptState.PENDING,
                    "processing_error": None,
                    "attempts": existing.attempts + 1,
                    "attempt_started_at": now,
                    "updated_at": now,
                },
                expected_attempts=existing.attempts,
            )
        except WriteConflictError as exc:
            # Outra entrega reivindicou a mesma tentativa primeiro
            raise ReceiptInProgressError(existing.key, self._lease_seconds) from exc
        logger.info(
            "receipt_retry",
            extra={"event_id": receipt.event_id, "attempts": receipt.attempts},
        )
        return receipt

    def _ensure_lease_expired(self, receipt: Receipt, now: datetime) -> None:
        if receipt.state != ReceiptState.PENDING or receipt.attempt_started_at is None:
            return
        elapsed = (now - receipt.attempt_started_at).total_seconds()
        if elapsed < self._lease_seconds:
            logger.info(
                "receipt_in_progress",
                extra={"event_id": receipt.event_id, "attempts": receipt.attempts},
            )
            raise ReceiptInProgressError(receipt.key, math.ceil(self._lease_seconds - elapsed))

    async def commit(
        self,
        receipt: Receipt,
        *,
        canonical_ref: str | None,
        account_id: str | None,
        projection_ref: str | None = None,
        projection_error: str | None = None,
    ) -> Receipt:
        """Post-write de sucesso (terminal)."""
        machine = ReceiptStateMachine(initial_state=receipt.state, receipt_key=receipt.key)
        machine.transition(ReceiptState.COMMITTED, trigger="commit")
        committed = await self._store.update(
            receipt.source,
            receipt.event_id,
            {
                "state": ReceiptState.COMMITTED,
                "processing_error": None,
                "canonical_ref": canonical_ref,
                "account_id": account_id,
                "projection_ref": projection_ref,
                "projection_error": _truncate(projection_error),
                "updated_at": self._clock(),
            },
        )
        logger.info(
            "receipt_committed",
            extra={"event_id": receipt.event_id, "attempts": committed.attempts},
        )
        return committed

    async def fail(self, receipt: Receipt, error: str) -> Receipt:
        """Post-write de falha: mantém processed=false e grava o erro."""
        machine = ReceiptStateMachine(initial_state=receipt.state, receipt_key=receipt.key)
        machine.transition(ReceiptState.FAILED, trigger="fail")
        failed = await self._store.update(
            receipt.source,
            receipt.event_id,
            {
                "state": ReceiptState.FAILED,
                "processing_error": _truncate(error),
                "updated_at": self._clock(),
            },
        )
        logger.warning(
            "receipt_failed",
            extra={"event_id": receipt.event_id, "attempts": failed.attempts},
        )
        return failed


def _truncate(value: str | None) -> str | None:
    if value is None:
        return None
    return value[:MAX_ERROR_LENGTH]
