"""Firestore Throttle Store — estado do throttle em throttle/{key}.

`expires_at` é gravado para uma TTL policy do Firestore (configurar no
console); a leitura também ignora documentos vencidos.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from google.api_core import exceptions as gcp_exceptions

from app.domain.throttle_state import ThrottleState
from app.protocols.throttle_store import ThrottleStoreProtocol
from utils.errors import FirestoreUnavailableError

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

THROTTLE_COLLECTION = "throttle"


class FirestoreThrottleStore(ThrottleStoreProtocol):
    """Store de throttle usando Firestore."""

    def __init__(
        self,
        firestore_client: FirestoreClient,
        collection: str = THROTTLE_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._collection = collection

    async def get(self, key: str) -> ThrottleState | None:
        return await asyncio.to_thread(self._get_sync, key)

    def _get_sync(self, key: str) -> ThrottleState | None:
        try:
            snapshot = self._db.collection(self._collection).document(key).get()
        except gcp_exceptions.GoogleAPICallError as exc:
            raise FirestoreUnavailableError("Falha ao ler throttle no Firestore") from exc
        if not snapshot.exists:
            return None
        data = snapshot.to_dict() or {}
        expires_at = data.get("expires_at")
        if isinstance(expires_at, datetime) and expires_at < datetime.now(UTC):
            return None
        return ThrottleState.model_validate(data)

    async def put(self, key: str, state: ThrottleState, ttl_seconds: int) -> None:
        await asyncio.to_thread(self._put_sync, key, state, ttl_seconds)

    def _put_sync(self, key: str, state: ThrottleState, ttl_seconds: int) -> None:
        data = {
            **state.to_dict(),
            "expires_at": datetime.now(UTC) + timedelta(seconds=ttl_seconds),
        }
        try:
            self._db.collection(self._collection).document(key).set(data)
        except gcp_exceptions.GoogleAPICallError as exc:
            raise FirestoreUnavailableError("Falha ao gravar throttle no Firestore") from exc
