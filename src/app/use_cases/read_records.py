"""Caso de uso: leitura dos documentos canônicos (camada de apresentação)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.services.identity import resolve_account_id

if TYPE_CHECKING:
    from app.domain.account import Account
    from app.domain.order import Order
    from app.domain.support_ticket import SupportTicket
    from app.services.canonical import CanonicalUpsertEngine


class ReadRecordsUseCase:
    """Consultas por chave; o e-mail é resolvido para o account_id determinístico."""

    def __init__(self, engine: CanonicalUpsertEngine) -> None:
        self._engine = engine

    async def account(self, account_id: str) -> Account | None:
        return await self._engine.get_account(account_id)

    async def account_by_email(self, email: str) -> Account | None:
        return await self._engine.get_account(resolve_account_id(email))

    async def order(self, order_id: str) -> Order | None:
        return await self._engine.get_order(order_id)

    async def support(self, support_id: str) -> SupportTicket | None:
        return await self._engine.get_support(support_id)
