"""Parse e validação inicial dos webhooks (sem PII)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from app.domain.errors import AuthenticationError

if TYPE_CHECKING:
    from .signature import SignatureResult


class WebhookRequestError(ValueError):
    """Erro base para falhas de webhook."""


class InvalidSignatureError(WebhookRequestError, AuthenticationError):
    """Assinatura inválida do webhook."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidJsonError(WebhookRequestError):
    """JSON inválido no payload do webhook."""


class MissingSecretError(WebhookRequestError):
    """Nenhum secret configurado para a origem; o serviço falha fechado."""


def parse_webhook_request(
    raw_body: bytes,
    signature_result: SignatureResult,
) -> dict[str, object]:
    """Exige assinatura válida e só então parseia o JSON.

    Args:
        raw_body: Corpo bruto do request
        signature_result: Resultado do verificador da origem

    Raises:
        MissingSecretError: Se não há secret configurado
        InvalidSignatureError: Se assinatura for inválida
        InvalidJsonError: Se o corpo não for UTF-8, o JSON estiver inválido ou
            não for objeto

    Returns:
        Payload dict
    """
    if not signature_result.valid:
        reason = signature_result.error or "invalid_signature"
        if reason == "missing_secret":
            raise MissingSecretError(reason)
        raise InvalidSignatureError(reason)

    # json.loads aceitaria UTF-16/32 em bytes; o raw_payload gravado é texto UTF-8
    try:
        text = raw_body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidJsonError("invalid_encoding") from exc

    try:
        payload = json.loads(text or "{}")
    except json.JSONDecodeError as exc:
        raise InvalidJsonError("invalid_json") from exc

    if not isinstance(payload, dict):
        raise InvalidJsonError("payload_not_object")

    return payload
