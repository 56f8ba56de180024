"""Account — documento canônico de uma pessoa/cliente.

O id é derivado do e-mail normalizado (ver app.services.identity); o documento
é criado no primeiro evento com identidade e depois só recebe merges.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.trace import ProjectionTrace


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Account(BaseModel):
    """Account persistida em accounts/{account_id}."""

    model_config = ConfigDict(extra="ignore")

    account_id: str
    primary_email: str
    first_name: str | None = None
    last_name: str | None = None
    lifecycle_state: str | None = None
    active_orders: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    external_task_ref: str | None = None
    projection_trace: ProjectionTrace | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.primary_email

    def to_firestore_dict(self) -> dict[str, Any]:
        """Documento JSON-compatível (datas em ISO-8601, sem None)."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> Account:
        return cls.model_validate(data)
