"""Order — documento canônico de um pedido, chaveado pelo token fornecido."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.trace import ProjectionTrace


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Order(BaseModel):
    """Order persistida em orders/{order_id}."""

    model_config = ConfigDict(extra="ignore")

    order_id: str
    account_id: str
    status: str = "open"
    step_booleans: dict[str, bool] = Field(default_factory=dict)
    plan: str | None = None
    amount_total: int | None = None
    currency: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    external_task_ref: str | None = None
    projection_trace: ProjectionTrace | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def to_firestore_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> Order:
        return cls.model_validate(data)
