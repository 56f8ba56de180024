"""Protocolo do store de estado do throttle."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.throttle_state import ThrottleState


class ThrottleStoreProtocol(ABC):
    """Leitura/escrita simples (sem lock) do estado por identidade."""

    @abstractmethod
    async def get(self, key: str) -> ThrottleState | None:
        """Estado atual da chave; None se nunca vista."""

    @abstractmethod
    async def put(self, key: str, state: ThrottleState, ttl_seconds: int) -> None:
        """Persiste o estado (TTL permite expirar chaves antigas)."""
