"""Protocolo do ledger de receipts (append-only).

Interface leve (ABC) dependida pelo serviço ReceiptLedger.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.receipt import Receipt


class ReceiptLedgerProtocol(ABC):
    """Contrato de persistência de receipts.

    Métodos canônicos:
    - get(source, event_id) -> Receipt | None
    - create(receipt) -> None (falha se a chave já existe)
    - update(source, event_id, fields, expected_attempts=None) -> Receipt
      (só campos mutáveis; transição validada contra o estado gravado)
    """

    @abstractmethod
    async def get(self, source: str, event_id: str) -> Receipt | None:
        """Busca receipt pela chave lógica receipts/{source}/{event_id}."""

    @abstractmethod
    async def create(self, receipt: Receipt) -> None:
        """Grava receipt novo.

        Raises:
            ReceiptAlreadyExistsError: Se a chave já existe
        """

    @abstractmethod
    async def update(
        self,
        source: str,
        event_id: str,
        fields: dict[str, Any],
        *,
        expected_attempts: int | None = None,
    ) -> Receipt:
        """Atualiza campos de estado do receipt de forma atômica.

        Leitura, checagem e escrita formam uma operação só: a transição de
        `state` é validada contra o estado persistido no momento da escrita.

        Args:
            source: Origem do evento
            event_id: Id do evento
            fields: Campos a alterar (subconjunto de MUTABLE_RECEIPT_FIELDS)
            expected_attempts: Compare-and-set sobre `attempts` (reivindicação de retry)

        Raises:
            ValueError: Se algum campo for imutável (raw/normalized payload)
            ReceiptNotFoundError: Se o receipt não existe
            InvalidReceiptTransitionError: Se o estado gravado não permite a transição
            WriteConflictError: Se o receipt mudou entre a leitura e a escrita

        Returns:
            Receipt atualizado
        """
