"""SupportTicket — documento canônico de um pedido de suporte.

O id é derivado de (source, event_id): reprocessar o mesmo evento nunca abre
um segundo ticket.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.trace import ProjectionTrace


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SupportTicket(BaseModel):
    """Ticket persistido em support/{support_id}."""

    model_config = ConfigDict(extra="ignore")

    support_id: str
    account_id: str
    subject: str
    message: str
    category: str = "general"
    order_id: str | None = None
    status: str = "open"
    metadata: dict[str, Any] = Field(default_factory=dict)
    external_task_ref: str | None = None
    projection_trace: ProjectionTrace | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def to_firestore_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> SupportTicket:
        return cls.model_validate(data)
