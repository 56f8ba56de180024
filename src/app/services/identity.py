"""Resolução determinística de identidade.

O mesmo e-mail (em qualquer variação de caixa/espaços) sempre gera o mesmo
account_id, sem tabela de lookup: requests concorrentes da mesma pessoa
chegam à mesma chave sem coordenação.
"""

from __future__ import annotations

import hashlib
import uuid


def normalize_email(value: str) -> str:
    """E-mail aparado e em minúsculas (chave natural)."""
    return value.strip().lower()


def _digest_to_uuid(material: str) -> str:
    digest = bytearray(hashlib.sha256(material.encode("utf-8")).digest()[:16])
    digest[6] = (digest[6] & 0x0F) | 0x50  # versão 5
    digest[8] = (digest[8] & 0x3F) | 0x80  # variante RFC 4122
    return str(uuid.UUID(bytes=bytes(digest)))


def resolve_account_id(email: str) -> str:
    """account_id determinístico derivado do e-mail normalizado."""
    return _digest_to_uuid(normalize_email(email))


def derive_support_id(source: str, event_id: str) -> str:
    """support_id determinístico: reprocessar o evento reusa o mesmo ticket."""
    return _digest_to_uuid(f"support:{source}:{event_id}")
