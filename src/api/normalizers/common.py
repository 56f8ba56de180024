"""Helpers compartilhados pelos normalizers (ids de evento, nomes, datas)."""

from __future__ import annotations

import hashlib
import re
import uuid
from datetime import UTC, datetime
from typing import Any

# Ids de evento fornecidos pelo cliente só são aceitos neste formato
FORM_EVENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:-]{7,127}$")

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def resolve_form_event_id(candidate: object) -> tuple[str, bool]:
    """Usa o event_id do cliente se bem-formado; senão gera um novo.

    Returns:
        (event_id, gerado_pelo_servico)
    """
    if isinstance(candidate, str) and FORM_EVENT_ID_PATTERN.match(candidate.strip()):
        return candidate.strip(), False
    return uuid.uuid4().hex, True


def payload_event_id(raw_body: bytes) -> str:
    """Id estável derivado do corpo bruto (fallback sem id nativo)."""
    return f"payload:{hashlib.sha256(raw_body).hexdigest()}"


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_PATTERN.match(value))


def split_full_name(full_name: str | None) -> tuple[str | None, str | None]:
    """Divide "Nome Sobrenome Composto" em (primeiro, resto)."""
    if not full_name or not full_name.strip():
        return None, None
    first, _, rest = full_name.strip().partition(" ")
    return first, (rest.strip() or None)


def clean_str(value: Any) -> str | None:
    """String aparada ou None (vazios e não-strings viram None)."""
    if isinstance(value, str):
        return value.strip() or None
    return None


def dig(data: Any, *path: str) -> Any:
    """Navega dicts aninhados; None se algum nível faltar."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def parse_iso_timestamp(value: Any, default: datetime) -> datetime:
    """Parseia ISO-8601 (aceita sufixo Z); retorna default se inválido."""
    if not isinstance(value, str) or not value.strip():
        return default
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return default
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def parse_epoch(value: Any, default: datetime) -> datetime:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return default
    return datetime.fromtimestamp(value, tz=UTC)
