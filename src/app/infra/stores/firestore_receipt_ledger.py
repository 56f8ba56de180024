"""Firestore Receipt Ledger — ledger append-only de eventos recebidos.

Estrutura no Firestore:
    {receipts}/{source}/events/{event_id}

Características:
    - create() atômico no pre-write (AlreadyExists = receipt existente)
    - update() grava só campos de estado; raw/normalized nunca são reescritos
    - update() condicionado ao update_time lido (transição checada no estado gravado)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.api_core import exceptions as gcp_exceptions

from app.domain.errors import ReceiptAlreadyExistsError, ReceiptNotFoundError, WriteConflictError
from app.domain.receipt import MUTABLE_RECEIPT_FIELDS, Receipt, apply_receipt_update, receipt_key
from app.protocols.receipt_ledger import ReceiptLedgerProtocol
from utils.errors import FirestoreUnavailableError

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient
    from google.cloud.firestore import DocumentReference

logger = logging.getLogger(__name__)

RECEIPTS_COLLECTION = "receipts"
EVENTS_SUBCOLLECTION = "events"


class FirestoreReceiptLedger(ReceiptLedgerProtocol):
    """Ledger de receipts usando Firestore.

    Args:
        firestore_client: Cliente Firestore
        collection: Coleção raiz dos receipts
    """

    def __init__(
        self,
        firestore_client: FirestoreClient,
        collection: str = RECEIPTS_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._collection = collection

    def _doc(self, source: str, event_id: str) -> DocumentReference:
        return (
            self._db.collection(self._collection)
            .document(source)
            .collection(EVENTS_SUBCOLLECTION)
            .document(event_id)
        )

    async def get(self, source: str, event_id: str) -> Receipt | None:
        return await asyncio.to_thread(self._get_sync, source, event_id)

    def _get_sync(self, source: str, event_id: str) -> Receipt | None:
        try:
            snapshot = self._doc(source, event_id).get()
        except gcp_exceptions.GoogleAPICallError as exc:
            raise FirestoreUnavailableError("Falha ao ler receipt no Firestore") from exc
        if not snapshot.exists:
            return None
        return Receipt.from_firestore_dict(snapshot.to_dict() or {})

    async def create(self, receipt: Receipt) -> None:
        await asyncio.to_thread(self._create_sync, receipt)

    def _create_sync(self, receipt: Receipt) -> None:
        try:
            self._doc(receipt.source, receipt.event_id).create(receipt.to_firestore_dict())
        except gcp_exceptions.AlreadyExists as exc:
            raise ReceiptAlreadyExistsError(receipt.key) from exc
        except gcp_exceptions.GoogleAPICallError as exc:
            raise FirestoreUnavailableError("Falha ao gravar receipt no Firestore") from exc
        logger.debug("receipt_created", extra={"event_id": receipt.event_id})

    async def update(
        self,
        source: str,
        event_id: str,
        fields: dict[str, Any],
        *,
        expected_attempts: int | None = None,
    ) -> Receipt:
        return await asyncio.to_thread(
            self._update_sync, source, event_id, fields, expected_attempts
        )

    def _update_sync(
        self,
        source: str,
        event_id: str,
        fields: dict[str, Any],
        expected_attempts: int | None,
    ) -> Receipt:
        doc_ref = self._doc(source, event_id)
        try:
            snapshot = doc_ref.get()
        except gcp_exceptions.GoogleAPICallError as exc:
            raise FirestoreUnavailableError("Falha ao ler receipt no Firestore") from exc
        if not snapshot.exists:
            raise ReceiptNotFoundError(receipt_key(source, event_id))

        current = Receipt.from_firestore_dict(snapshot.to_dict() or {})
        updated = apply_receipt_update(current, fields, expected_attempts=expected_attempts)
        state_fields = {
            k: v for k, v in updated.to_firestore_dict().items() if k in MUTABLE_RECEIPT_FIELDS
        }
        try:
            # Escrita condicionada ao update_time lido: a checagem acima vale na escrita
            doc_ref.update(
                state_fields,
                option=self._db.write_option(last_update_time=snapshot.update_time),
            )
        except gcp_exceptions.FailedPrecondition as exc:
            logger.info("receipt_write_conflict", extra={"event_id": event_id})
            raise WriteConflictError(receipt_key(source, event_id)) from exc
        except gcp_exceptions.GoogleAPICallError as exc:
            raise FirestoreUnavailableError("Falha ao atualizar receipt no Firestore") from exc
        return updated
