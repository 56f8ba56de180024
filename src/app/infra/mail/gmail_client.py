"""Client concreto da Gmail API para notificações operacionais."""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from email.message import EmailMessage
from typing import Any

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.observability import get_correlation_id
from app.protocols.notifier import MailSenderProtocol
from config.settings.mail import GMAIL_SEND_SCOPE
from utils.errors import ExternalServiceError

logger = logging.getLogger(__name__)

_COMPONENT = "gmail_client"


def build_raw_message(sender: str, to: str, subject: str, body: str) -> str:
    """Mensagem RFC-822 codificada em base64url (campo `raw` da API)."""
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii")


class GmailMailSender(MailSenderProtocol):
    """Envia e-mail pela Gmail API com service account delegada.

    O google-auth faz a troca JWT bearer por token de acesso e o renova
    quando expira; o client da API é síncrono e roda em thread.
    """

    __slots__ = ("_sender", "_service")

    def __init__(self, *, credentials_json: str, sender: str, service: Any | None = None) -> None:
        self._sender = sender
        if service is None:
            credentials = service_account.Credentials.from_service_account_info(
                json.loads(credentials_json),
                scopes=[GMAIL_SEND_SCOPE],
                subject=sender,
            )
            service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
        self._service = service

    async def send(self, to: str, subject: str, body: str) -> str:
        raw = build_raw_message(self._sender, to, subject, body)
        try:
            response = await asyncio.to_thread(self._send_sync, raw)
        except HttpError as exc:
            status_code = getattr(exc.resp, "status", None)
            self._log_error(status_code=status_code, exc=exc)
            raise ExternalServiceError(
                "Falha ao enviar e-mail", service="gmail", status_code=status_code
            ) from exc
        except GoogleAuthError as exc:
            self._log_error(status_code=None, exc=exc)
            raise ExternalServiceError("Falha ao obter token do Gmail", service="gmail") from exc
        message_id = str(response.get("id", ""))
        logger.info(
            "gmail_message_sent",
            extra={"component": _COMPONENT, "correlation_id": get_correlation_id()},
        )
        return message_id

    def _send_sync(self, raw: str) -> dict[str, Any]:
        return (
            self._service.users()
            .messages()
            .send(userId=self._sender, body={"raw": raw})
            .execute()
        )

    def _log_error(self, *, status_code: int | None, exc: Exception) -> None:
        logger.error(
            "gmail_http_error",
            extra={
                "component": _COMPONENT,
                "status_code": status_code,
                "error_type": type(exc).__name__,
                "correlation_id": get_correlation_id(),
            },
        )
