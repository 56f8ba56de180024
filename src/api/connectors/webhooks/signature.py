"""Validação de assinatura HMAC-SHA256 dos webhooks (Cal.com e Stripe).

A verificação roda sobre os bytes brutos do corpo, antes de qualquer parse.
Aceita vários secrets para permitir rotação sem janela de rejeição.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

CAL_SIGNATURE_HEADER = "x-cal-signature-256"
STRIPE_SIGNATURE_HEADER = "stripe-signature"


@dataclass(frozen=True, slots=True)
class SignatureResult:
    """Resultado da validação de assinatura."""

    valid: bool
    error: str | None = None


def _header(headers: Mapping[str, str], name: str) -> str:
    """Busca header ignorando caixa (Mapping simples ou Headers do Starlette)."""
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if key.lower() == lowered:
                value = candidate
                break
    return (value or "").strip()


def _hex_digest(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def _active_secrets(secrets: Sequence[str] | str | None) -> list[str]:
    if not secrets:
        return []
    if isinstance(secrets, str):
        secrets = [secrets]
    return [s for s in secrets if s]


def verify_hmac_hex(
    raw_body: bytes,
    signature: str,
    secrets: Sequence[str] | str | None,
) -> SignatureResult:
    """Compara HMAC-SHA256 hex em tempo constante.

    Args:
        raw_body: Corpo bruto do request
        signature: Assinatura recebida (hex, prefixo `sha256=` opcional)
        secrets: Um ou mais secrets aceitos

    Returns:
        SignatureResult
    """
    active = _active_secrets(secrets)
    if not active:
        return SignatureResult(valid=False, error="missing_secret")

    candidate = signature.strip().lower()
    if candidate.startswith("sha256="):
        candidate = candidate[len("sha256=") :]
    if not candidate:
        return SignatureResult(valid=False, error="missing_signature")

    for secret in active:
        if hmac.compare_digest(_hex_digest(secret, raw_body), candidate):
            return SignatureResult(valid=True)
    return SignatureResult(valid=False, error="signature_mismatch")


def verify_cal_signature(
    raw_body: bytes,
    headers: Mapping[str, str],
    secrets: Sequence[str] | str | None,
) -> SignatureResult:
    """Valida o header x-cal-signature-256 do Cal.com."""
    if not _active_secrets(secrets):
        return SignatureResult(valid=False, error="missing_secret")
    signature = _header(headers, CAL_SIGNATURE_HEADER)
    if not signature:
        return SignatureResult(valid=False, error="missing_signature")
    return verify_hmac_hex(raw_body, signature, secrets)


def _parse_stripe_header(value: str) -> tuple[str, list[str]]:
    """Extrai `t` e todos os `v1` de `t=...,v1=...,v1=...`."""
    timestamp = ""
    candidates: list[str] = []
    for part in value.split(","):
        key, sep, item = part.strip().partition("=")
        if not sep:
            continue
        if key == "t":
            timestamp = item.strip()
        elif key == "v1" and item.strip():
            candidates.append(item.strip())
    return timestamp, candidates


def verify_stripe_signature(
    raw_body: bytes,
    headers: Mapping[str, str],
    secrets: Sequence[str] | str | None,
    *,
    tolerance_seconds: int = 300,
    now: float | None = None,
) -> SignatureResult:
    """Valida o header stripe-signature.

    O digest é calculado sobre `"{t}.{raw_body}"`; basta um `v1` coincidir com
    qualquer secret. Com `tolerance_seconds > 0`, timestamps fora da janela
    são rejeitados (proteção contra replay).

    Args:
        raw_body: Corpo bruto do request
        headers: Headers recebidos
        secrets: Um ou mais secrets aceitos
        tolerance_seconds: Janela de frescor (0 desabilita)
        now: Epoch atual (injetável em testes)

    Returns:
        SignatureResult
    """
    active = _active_secrets(secrets)
    if not active:
        return SignatureResult(valid=False, error="missing_secret")

    header = _header(headers, STRIPE_SIGNATURE_HEADER)
    if not header:
        return SignatureResult(valid=False, error="missing_signature")

    timestamp, candidates = _parse_stripe_header(header)
    if not timestamp or not candidates:
        return SignatureResult(valid=False, error="malformed_signature")
    try:
        issued_at = int(timestamp)
    except ValueError:
        return SignatureResult(valid=False, error="malformed_signature")

    signed = timestamp.encode("utf-8") + b"." + raw_body
    matched = any(
        hmac.compare_digest(_hex_digest(secret, signed), candidate.lower())
        for secret in active
        for candidate in candidates
    )
    if not matched:
        return SignatureResult(valid=False, error="signature_mismatch")

    if tolerance_seconds > 0:
        current = time.time() if now is None else now
        if abs(current - issued_at) > tolerance_seconds:
            return SignatureResult(valid=False, error="timestamp_out_of_tolerance")

    return SignatureResult(valid=True)
