"""Protocolo do store canônico (accounts, orders, support)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from app.domain.events import EntityKind  # noqa: TC001 - alias usado em anotações públicas


@dataclass(frozen=True, slots=True)
class VersionedDocument:
    """Documento lido com o marcador de versão usado na escrita condicional.

    `version` é opaco para o chamador (int no store em memória,
    update_time no Firestore).
    """

    data: dict[str, Any]
    version: Any


class CanonicalStoreProtocol(Protocol):
    """Contrato de persistência com escrita otimista."""

    async def get(self, kind: EntityKind, doc_id: str) -> VersionedDocument | None:
        """Lê documento e versão; None se ausente."""
        ...

    async def put(
        self,
        kind: EntityKind,
        doc_id: str,
        data: dict[str, Any],
        expected_version: Any | None,
    ) -> None:
        """Grava documento se a versão atual for `expected_version`.

        `expected_version=None` exige que o documento ainda não exista.

        Raises:
            WriteConflictError: Se a versão mudou (ou o documento já existe)
        """
        ...
