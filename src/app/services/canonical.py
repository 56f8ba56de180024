"""Engine de upsert canônico com escrita otimista.

Cada upsert é ler → mesclar → put condicionado à versão lida. Em
WriteConflictError o engine relê e mescla de novo, até MAX_WRITE_ATTEMPTS;
esgotadas as tentativas, levanta DependencyError("canonical").

O checkout grava um vínculo payment_ref → order; eventos cujo token de order
é só o payment_intent (ex: refund sem metadata.code) são resolvidos por ele.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.account import Account
from app.domain.errors import DependencyError, WriteConflictError
from app.domain.order import Order
from app.domain.support_ticket import SupportTicket
from app.services.canonical_merge import (
    attach_projection_fields,
    merge_account,
    merge_order,
    merge_payment_link,
    merge_support,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.events import EntityKind, NormalizedEvent, OrderChanges
    from app.domain.trace import ProjectionTrace
    from app.protocols.canonical_store import CanonicalStoreProtocol

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 3

COLLECTION_BY_KIND: dict[str, str] = {
    "account": "accounts",
    "order": "orders",
    "support": "support",
    "payment_ref": "payment_refs",
}


def canonical_key(kind: EntityKind, doc_id: str) -> str:
    """Chave lógica do documento (ex: accounts/{account_id})."""
    return f"{COLLECTION_BY_KIND[kind]}/{doc_id}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CanonicalUpsertEngine:
    """Upsert de Account, Order e SupportTicket.

    Args:
        store: Store canônico com escrita condicional
        clock: Fonte de tempo (injetável em testes)
    """

    def __init__(
        self,
        store: CanonicalStoreProtocol,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or _utcnow

    async def _upsert(
        self,
        kind: EntityKind,
        doc_id: str,
        merge: Callable[[dict[str, Any] | None], dict[str, Any]],
    ) -> dict[str, Any]:
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            current = await self._store.get(kind, doc_id)
            merged = merge(current.data if current else None)
            try:
                await self._store.put(kind, doc_id, merged, current.version if current else None)
            except WriteConflictError:
                logger.info("canonical_write_retry", extra={"kind": kind, "attempt": attempt})
                continue
            return merged
        logger.warning("canonical_write_conflict_exhausted", extra={"kind": kind})
        raise DependencyError("canonical", "write_conflict")

    async def upsert_account(
        self,
        event: NormalizedEvent,
        account_id: str,
        order_id: str | None = None,
    ) -> Account:
        now = self._clock()
        data = await self._upsert(
            "account",
            account_id,
            lambda existing: merge_account(existing, account_id, event, now, order_id),
        )
        return Account.from_firestore_dict(data)

    async def resolve_order_id(self, changes: OrderChanges) -> str:
        """Id efetivo da order: segue o vínculo de pagamento quando o token é fallback."""
        if not (changes.order_id_is_fallback and changes.payment_ref):
            return changes.order_id
        link = await self._read("payment_ref", changes.payment_ref)
        if link and link.get("order_id"):
            logger.info(
                "order_resolved_by_payment_ref",
                extra={"order_id": link["order_id"]},
            )
            return str(link["order_id"])
        return changes.order_id

    async def upsert_order(
        self,
        event: NormalizedEvent,
        account_id: str,
        order_id: str | None = None,
    ) -> Order | None:
        if event.order is None:
            return None
        changes = event.order
        target_id = order_id or changes.order_id
        now = self._clock()
        data = await self._upsert(
            "order",
            target_id,
            lambda existing: merge_order(existing, changes, account_id, now, target_id),
        )
        if changes.payment_ref and not changes.order_id_is_fallback:
            payment_ref = changes.payment_ref
            await self._upsert(
                "payment_ref",
                payment_ref,
                lambda existing: merge_payment_link(existing, payment_ref, target_id, now),
            )
        return Order.from_firestore_dict(data)

    async def upsert_support(
        self,
        event: NormalizedEvent,
        account_id: str,
        support_id: str,
    ) -> SupportTicket | None:
        if event.support is None:
            return None
        changes = event.support
        now = self._clock()
        data = await self._upsert(
            "support",
            support_id,
            lambda existing: merge_support(existing, support_id, changes, account_id, now),
        )
        return SupportTicket.from_firestore_dict(data)

    async def attach_projection(
        self,
        kind: EntityKind,
        doc_id: str,
        task_id: str,
        trace: ProjectionTrace,
    ) -> None:
        """Grava external_task_ref + projection_trace no documento existente."""

        def _merge(existing: dict[str, Any] | None) -> dict[str, Any]:
            if existing is None:
                raise DependencyError("projection", f"{kind} ausente para anexar projeção")
            return attach_projection_fields(existing, task_id, trace)

        await self._upsert(kind, doc_id, _merge)

    async def _read(self, kind: EntityKind, doc_id: str) -> dict[str, Any] | None:
        current = await self._store.get(kind, doc_id)
        return current.data if current else None

    async def get_account(self, account_id: str) -> Account | None:
        data = await self._read("account", account_id)
        return Account.from_firestore_dict(data) if data else None

    async def get_order(self, order_id: str) -> Order | None:
        data = await self._read("order", order_id)
        return Order.from_firestore_dict(data) if data else None

    async def get_support(self, support_id: str) -> SupportTicket | None:
        data = await self._read("support", support_id)
        return SupportTicket.from_firestore_dict(data) if data else None
