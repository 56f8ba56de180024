"""Stores em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

import copy
import time
from typing import Any

from app.domain.errors import ReceiptAlreadyExistsError, ReceiptNotFoundError, WriteConflictError
from app.domain.events import EntityKind  # noqa: TC001
from app.domain.receipt import Receipt, apply_receipt_update, receipt_key
from app.domain.throttle_state import ThrottleState
from app.protocols.canonical_store import CanonicalStoreProtocol, VersionedDocument
from app.protocols.receipt_ledger import ReceiptLedgerProtocol
from app.protocols.throttle_store import ThrottleStoreProtocol


class MemoryReceiptLedger(ReceiptLedgerProtocol):
    """Ledger de receipts em memória — apenas para dev/test."""

    def __init__(self) -> None:
        self._receipts: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._receipts)

    async def get(self, source: str, event_id: str) -> Receipt | None:
        data = self._receipts.get(receipt_key(source, event_id))
        if data is None:
            return None
        return Receipt.from_firestore_dict(copy.deepcopy(data))

    async def create(self, receipt: Receipt) -> None:
        if receipt.key in self._receipts:
            raise ReceiptAlreadyExistsError(receipt.key)
        self._receipts[receipt.key] = receipt.to_firestore_dict()

    async def update(
        self,
        source: str,
        event_id: str,
        fields: dict[str, Any],
        *,
        expected_attempts: int | None = None,
    ) -> Receipt:
        # Sem await entre leitura e escrita: atômico dentro do event loop
        key = receipt_key(source, event_id)
        data = self._receipts.get(key)
        if data is None:
            raise ReceiptNotFoundError(key)
        updated = apply_receipt_update(
            Receipt.from_firestore_dict(copy.deepcopy(data)),
            fields,
            expected_attempts=expected_attempts,
        )
        self._receipts[key] = updated.to_firestore_dict()
        return updated


class MemoryCanonicalStore(CanonicalStoreProtocol):
    """Store canônico em memória com versão inteira por documento."""

    def __init__(self) -> None:
        self._docs: dict[tuple[str, str], tuple[dict[str, Any], int]] = {}

    async def get(self, kind: EntityKind, doc_id: str) -> VersionedDocument | None:
        entry = self._docs.get((kind, doc_id))
        if entry is None:
            return None
        data, version = entry
        return VersionedDocument(data=copy.deepcopy(data), version=version)

    async def put(
        self,
        kind: EntityKind,
        doc_id: str,
        data: dict[str, Any],
        expected_version: Any | None,
    ) -> None:
        entry = self._docs.get((kind, doc_id))
        current_version = entry[1] if entry else None
        if current_version != expected_version:
            raise WriteConflictError(f"{kind}/{doc_id}")
        self._docs[(kind, doc_id)] = (copy.deepcopy(data), (current_version or 0) + 1)


class MemoryThrottleStore(ThrottleStoreProtocol):
    """Estado do throttle em memória, com expiração por TTL."""

    def __init__(self) -> None:
        self._store: dict[str, tuple[dict[str, Any], float]] = {}  # key -> (state, expires_at)

    async def get(self, key: str) -> ThrottleState | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        data, expires_at = entry
        if time.time() > expires_at:
            del self._store[key]
            return None
        return ThrottleState.model_validate(data)

    async def put(self, key: str, state: ThrottleState, ttl_seconds: int) -> None:
        self._store[key] = (state.to_dict(), time.time() + ttl_seconds)
