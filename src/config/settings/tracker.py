"""Settings do tracker de execução (API compatível com ClickUp v2).

O tracker recebe a projeção dos documentos canônicos; nunca é fonte de verdade.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

TRACKER_API_BASE_URL: str = "https://api.clickup.com/api/v2"


@dataclass(frozen=True)
class TrackerSettings:
    """Configurações do tracker.

    Attributes:
        enabled: Se a projeção está habilitada
        api_base_url: URL base da API
        api_token: Token de acesso (header Authorization)
        list_id: Lista onde as tarefas são criadas
        timeout_seconds: Timeout por requisição HTTP
    """

    enabled: bool = False
    api_base_url: str = TRACKER_API_BASE_URL
    api_token: str = ""
    list_id: str = ""
    timeout_seconds: float = 10.0

    def validate(self) -> list[str]:
        """Valida credenciais quando a projeção está habilitada."""
        if not self.enabled:
            return []
        errors: list[str] = []
        if not self.api_token:
            errors.append("TRACKER_API_TOKEN não configurado")
        if not self.list_id:
            errors.append("TRACKER_LIST_ID não configurado")
        if self.timeout_seconds <= 0:
            errors.append("TRACKER_TIMEOUT_SECONDS deve ser > 0")
        return errors


def load_tracker_settings() -> TrackerSettings:
    """Carrega TrackerSettings de variáveis de ambiente."""
    return TrackerSettings(
        enabled=os.getenv("TRACKER_ENABLED", "false").lower() in ("true", "1", "yes"),
        api_base_url=os.getenv("TRACKER_API_BASE_URL", TRACKER_API_BASE_URL).rstrip("/"),
        api_token=os.getenv("TRACKER_API_TOKEN", ""),
        list_id=os.getenv("TRACKER_LIST_ID", ""),
        timeout_seconds=float(os.getenv("TRACKER_TIMEOUT_SECONDS", "10")),
    )
