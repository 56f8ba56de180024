"""Firestore Canonical Store — accounts, orders e support com escrita otimista.

Documento novo usa create() (falha se outro request criou antes); documento
existente usa update() condicionado ao update_time lido. Qualquer um dos
dois casos de corrida vira WriteConflictError para o engine re-mesclar.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.api_core import exceptions as gcp_exceptions

from app.domain.errors import WriteConflictError
from app.domain.events import EntityKind  # noqa: TC001
from app.protocols.canonical_store import CanonicalStoreProtocol, VersionedDocument
from utils.errors import FirestoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from google.cloud.firestore import Client as FirestoreClient

logger = logging.getLogger(__name__)

DEFAULT_COLLECTIONS: dict[str, str] = {
    "account": "accounts",
    "order": "orders",
    "support": "support",
    "payment_ref": "payment_refs",
}


class FirestoreCanonicalStore(CanonicalStoreProtocol):
    """Store canônico usando Firestore.

    Args:
        firestore_client: Cliente Firestore
        collections: Nome da coleção por tipo de entidade
    """

    def __init__(
        self,
        firestore_client: FirestoreClient,
        collections: Mapping[str, str] | None = None,
    ) -> None:
        self._db = firestore_client
        self._collections = {**DEFAULT_COLLECTIONS, **(collections or {})}

    def _doc(self, kind: EntityKind, doc_id: str):
        return self._db.collection(self._collections[kind]).document(doc_id)

    async def get(self, kind: EntityKind, doc_id: str) -> VersionedDocument | None:
        return await asyncio.to_thread(self._get_sync, kind, doc_id)

    def _get_sync(self, kind: EntityKind, doc_id: str) -> VersionedDocument | None:
        try:
            snapshot = self._doc(kind, doc_id).get()
        except gcp_exceptions.GoogleAPICallError as exc:
            raise FirestoreUnavailableError(f"Falha ao ler {kind} no Firestore") from exc
        if not snapshot.exists:
            return None
        return VersionedDocument(data=snapshot.to_dict() or {}, version=snapshot.update_time)

    async def put(
        self,
        kind: EntityKind,
        doc_id: str,
        data: dict[str, Any],
        expected_version: Any | None,
    ) -> None:
        await asyncio.to_thread(self._put_sync, kind, doc_id, data, expected_version)

    def _put_sync(
        self,
        kind: EntityKind,
        doc_id: str,
        data: dict[str, Any],
        expected_version: Any | None,
    ) -> None:
        doc_ref = self._doc(kind, doc_id)
        try:
            if expected_version is None:
                doc_ref.create(data)
            else:
                doc_ref.update(
                    data,
                    option=self._db.write_option(last_update_time=expected_version),
                )
        except (gcp_exceptions.AlreadyExists, gcp_exceptions.FailedPrecondition) as exc:
            logger.info("canonical_write_conflict", extra={"kind": kind})
            raise WriteConflictError(f"{kind}/{doc_id}") from exc
        except gcp_exceptions.GoogleAPICallError as exc:
            raise FirestoreUnavailableError(f"Falha ao gravar {kind} no Firestore") from exc

