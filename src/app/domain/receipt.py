"""Receipt — entrada append-only do ledger de eventos.

`raw_payload` e `normalized_payload` são gravados no pre-write e nunca mais
alterados; só os campos de estado mudam depois.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.errors import WriteConflictError
from app.domain.events import EventSource  # noqa: TC001 - usado em runtime pelo Pydantic
from fsm.states import ReceiptState
from fsm.transitions import is_transition_valid
from fsm.types import InvalidReceiptTransitionError

# Campos que o post-write pode alterar; o resto do documento é imutável
MUTABLE_RECEIPT_FIELDS: frozenset[str] = frozenset({
    "state",
    "processed",
    "processing_error",
    "projection_ref",
    "projection_error",
    "canonical_ref",
    "account_id",
    "attempts",
    "attempt_started_at",
    "updated_at",
})


def _utcnow() -> datetime:
    return datetime.now(UTC)


def receipt_key(source: str, event_id: str) -> str:
    """Chave lógica do ledger: receipts/{source}/{eventId}."""
    return f"receipts/{source}/{event_id}"


class Receipt(BaseModel):
    """Receipt de um evento recebido."""

    model_config = ConfigDict(extra="ignore")

    event_id: str
    source: EventSource
    event_type: str
    received_at: datetime = Field(default_factory=_utcnow)
    raw_payload: str
    normalized_payload: dict[str, Any] = Field(default_factory=dict)
    state: ReceiptState = ReceiptState.PENDING
    processing_error: str | None = None
    projection_ref: str | None = None
    projection_error: str | None = None
    canonical_ref: str | None = None
    account_id: str | None = None
    attempts: int = 1
    # Início da execução corrente; None em receipts gravados antes do lease
    attempt_started_at: datetime | None = None
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def processed(self) -> bool:
        return self.state.processed

    @property
    def key(self) -> str:
        return receipt_key(self.source, self.event_id)

    def to_firestore_dict(self) -> dict[str, Any]:
        """Documento JSON-compatível; inclui o flag `processed` derivado."""
        data = self.model_dump(mode="json")
        data["processed"] = self.processed
        return data

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> Receipt:
        return cls.model_validate(data)


def apply_receipt_update(
    receipt: Receipt,
    fields: dict[str, Any],
    *,
    expected_attempts: int | None = None,
) -> Receipt:
    """Aplica campos de estado ao receipt gravado, validando contra o estado dele.

    Store chama com o receipt que ele mesmo leu: a transição é checada contra o
    estado persistido, não contra o snapshot do chamador.

    Args:
        receipt: Receipt como está no store
        fields: Campos a alterar
        expected_attempts: Se informado, `attempts` gravado precisa ser igual

    Raises:
        ValueError: Se `fields` contém campo fora de MUTABLE_RECEIPT_FIELDS
        InvalidReceiptTransitionError: Se o estado gravado não permite a transição
        WriteConflictError: Se outra entrega já reivindicou a tentativa
    """
    forbidden = set(fields) - MUTABLE_RECEIPT_FIELDS
    if forbidden:
        raise ValueError(f"Campos imutáveis no receipt: {sorted(forbidden)}")
    target = fields.get("state")
    if target is not None and not is_transition_valid(receipt.state, ReceiptState(target)):
        raise InvalidReceiptTransitionError(receipt.state, ReceiptState(target))
    if expected_attempts is not None and receipt.attempts != expected_attempts:
        raise WriteConflictError(receipt.key)
    changes = {k: v for k, v in fields.items() if k != "processed"}
    return Receipt.model_validate({**receipt.model_dump(), **changes})
