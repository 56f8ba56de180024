"""Factories de stores baseadas em AppSettings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.infra.stores import (
    FirestoreCanonicalStore,
    FirestoreReceiptLedger,
    FirestoreThrottleStore,
    MemoryCanonicalStore,
    MemoryReceiptLedger,
    MemoryThrottleStore,
    RedisThrottleStore,
)

if TYPE_CHECKING:
    from app.protocols.canonical_store import CanonicalStoreProtocol
    from app.protocols.receipt_ledger import ReceiptLedgerProtocol
    from app.protocols.throttle_store import ThrottleStoreProtocol
    from config.settings import AppSettings

logger = logging.getLogger(__name__)


def _require(client: Any | None, name: str) -> Any:
    if client is None:
        msg = f"Cliente {name} não inicializado"
        raise ValueError(msg)
    return client


def _warn_memory_in_non_dev(settings: AppSettings, store: str) -> None:
    if settings.base.environment not in ("development", "test"):
        logger.warning(
            "memory_store_in_non_dev",
            extra={"store": store, "environment": settings.base.environment},
        )


def create_receipt_ledger_store(
    settings: AppSettings,
    firestore_client: Any | None = None,
) -> ReceiptLedgerProtocol:
    """Cria o ledger de receipts conforme STORE_BACKEND."""
    if settings.stores.backend == "firestore":
        store = FirestoreReceiptLedger(
            _require(firestore_client, "firestore"),
            collection=settings.firestore.collection_receipts,
        )
        logger.info("receipt_ledger_created", extra={"backend": "firestore"})
        return store

    _warn_memory_in_non_dev(settings, "receipt_ledger")
    logger.info("receipt_ledger_created", extra={"backend": "memory"})
    return MemoryReceiptLedger()


def create_canonical_store(
    settings: AppSettings,
    firestore_client: Any | None = None,
) -> CanonicalStoreProtocol:
    """Cria o store canônico conforme STORE_BACKEND."""
    if settings.stores.backend == "firestore":
        store = FirestoreCanonicalStore(
            _require(firestore_client, "firestore"),
            collections={
                "account": settings.firestore.collection_accounts,
                "order": settings.firestore.collection_orders,
                "support": settings.firestore.collection_support,
                "payment_ref": settings.firestore.collection_payment_refs,
            },
        )
        logger.info("canonical_store_created", extra={"backend": "firestore"})
        return store

    _warn_memory_in_non_dev(settings, "canonical")
    logger.info("canonical_store_created", extra={"backend": "memory"})
    return MemoryCanonicalStore()


def create_throttle_store(
    settings: AppSettings,
    *,
    firestore_client: Any | None = None,
    redis_client: Any | None = None,
) -> ThrottleStoreProtocol:
    """Cria o store do throttle conforme THROTTLE_BACKEND."""
    backend = settings.stores.throttle_backend
    if backend == "redis":
        logger.info("throttle_store_created", extra={"backend": "redis"})
        return RedisThrottleStore(_require(redis_client, "redis"))

    if backend == "firestore":
        logger.info("throttle_store_created", extra={"backend": "firestore"})
        return FirestoreThrottleStore(
            _require(firestore_client, "firestore"),
            collection=settings.firestore.collection_throttle,
        )

    _warn_memory_in_non_dev(settings, "throttle")
    logger.info("throttle_store_created", extra={"backend": "memory"})
    return MemoryThrottleStore()
