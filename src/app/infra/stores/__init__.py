"""Stores — implementações concretas de persistência.

Módulos disponíveis:
    - memory_stores: Ledger, store canônico e throttle em memória (dev/test)
    - firestore_receipt_ledger: Ledger de receipts no Firestore
    - firestore_canonical_store: Accounts/orders/support no Firestore
    - firestore_throttle_store: Estado do throttle no Firestore
    - redis_throttle_store: Estado do throttle no Redis (Upstash)
"""

from __future__ import annotations

from app.infra.stores.firestore_canonical_store import FirestoreCanonicalStore
from app.infra.stores.firestore_receipt_ledger import FirestoreReceiptLedger
from app.infra.stores.firestore_throttle_store import FirestoreThrottleStore
from app.infra.stores.memory_stores import (
    MemoryCanonicalStore,
    MemoryReceiptLedger,
    MemoryThrottleStore,
)
from app.infra.stores.redis_throttle_store import RedisThrottleStore

__all__ = [
    # Firestore
    "FirestoreCanonicalStore",
    "FirestoreReceiptLedger",
    "FirestoreThrottleStore",
    # Memory (dev/test)
    "MemoryCanonicalStore",
    "MemoryReceiptLedger",
    "MemoryThrottleStore",
    # Redis (Upstash)
    "RedisThrottleStore",
]
