"""Referência cruzada entre tracker, ledger e documento canônico."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - usado em runtime pelo schema do Pydantic

from pydantic import BaseModel, ConfigDict


class ProjectionTrace(BaseModel):
    """Ponteiro gravado pelo Projection Adapter no documento canônico."""

    model_config = ConfigDict(extra="ignore")

    task_id: str
    ledger_key: str
    canonical_key: str
    projected_at: datetime
