"""Estado do throttle por identidade."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - usado em runtime pelo schema do Pydantic
from typing import Any

from pydantic import BaseModel, ConfigDict


class ThrottleState(BaseModel):
    """Último envio aceito e contagem do dia UTC corrente.

    Attributes:
        last_at: Momento do último envio aceito
        count_today: Envios aceitos no dia `day`
        day: Data UTC (ISO) a que `count_today` se refere
    """

    model_config = ConfigDict(extra="ignore")

    last_at: datetime | None = None
    count_today: int = 0
    day: str = ""

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
