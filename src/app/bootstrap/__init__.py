"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: carrega AppSettings uma única vez,
configura logging e conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import get_settings, initialize_app

    settings = get_settings()
    initialize_app(settings)
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.observability import get_correlation_id, get_event_source
from config.logging import configure_logging
from config.settings import AppSettings, load_settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """AppSettings do processo (carregado do ambiente uma vez)."""
    return load_settings()


def initialize_app(settings: AppSettings) -> None:
    """Configura logging estruturado JSON com correlation_id e origem."""
    configure_logging(
        level=settings.base.log_level,
        service_name=settings.base.service_name,
        correlation_id_getter=get_correlation_id,
        event_source_getter=get_event_source,
    )


def validate_runtime_settings(settings: AppSettings) -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development`/`test` mantém alerta sem bloquear execução local.
    """
    environment = settings.base.environment
    errors = settings.validate()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if settings.base.is_strict:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


__all__ = [
    "get_settings",
    "initialize_app",
    "validate_runtime_settings",
]
