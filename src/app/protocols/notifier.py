"""Protocolo do envio de notificações por e-mail."""

from __future__ import annotations

from typing import Protocol


class MailSenderProtocol(Protocol):
    """Envia mensagem de texto simples; retorna o id da mensagem no provedor."""

    async def send(self, to: str, subject: str, body: str) -> str:
        ...
