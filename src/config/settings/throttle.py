"""Settings do throttle de submissões por identidade.

Proteção contra abuso em formulários: cooldown entre envios e teto diário.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ThrottleSettings:
    """Configurações do throttle.

    Attributes:
        enabled: Se o throttle está habilitado
        cooldown_seconds: Intervalo mínimo entre submissões aceitas
        max_per_day: Máximo de submissões aceitas por dia UTC
    """

    enabled: bool = True
    cooldown_seconds: int = 600
    max_per_day: int = 3

    def validate(self) -> list[str]:
        """Valida limites do throttle."""
        errors: list[str] = []
        if self.cooldown_seconds < 0:
            errors.append("THROTTLE_COOLDOWN_SECONDS deve ser >= 0")
        if self.max_per_day < 1:
            errors.append("THROTTLE_MAX_PER_DAY deve ser >= 1")
        return errors


def load_throttle_settings() -> ThrottleSettings:
    """Carrega ThrottleSettings de variáveis de ambiente."""
    return ThrottleSettings(
        enabled=os.getenv("THROTTLE_ENABLED", "true").lower() in ("true", "1", "yes"),
        cooldown_seconds=int(os.getenv("THROTTLE_COOLDOWN_SECONDS", "600")),
        max_per_day=int(os.getenv("THROTTLE_MAX_PER_DAY", "3")),
    )
