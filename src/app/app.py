"""Entrypoint da aplicação intake-core.

Este módulo é o ponto de entrada principal do serviço.
Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080

Cloud Run:
    O container deve expor a porta 8080 (padrão do Cloud Run).
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import create_api_router
from api.routes.health.router import HEALTH_COLLECTION, HEALTH_DOCUMENT
from app.bootstrap import get_settings, initialize_app, validate_runtime_settings
from app.bootstrap.dependencies import build_container
from config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from app.bootstrap.dependencies import AppContainer
    from config.settings import AppSettings

logger = get_logger(__name__)


async def _seed_firestore_health_doc(firestore_client: object, service: str) -> None:
    """Escreve documento mínimo de health para check de readiness."""

    def _write_doc() -> None:
        firestore_client.collection(HEALTH_COLLECTION).document(HEALTH_DOCUMENT).set(  # type: ignore[attr-defined]
            {
                "updated_at": datetime.now(UTC).isoformat(),
                "service": service,
            }
        )

    await asyncio.to_thread(_write_doc)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações (falha rápido em staging/production)
    - Monta o container (stores, tracker, mail) se não foi injetado

    Shutdown:
    - Fecha conexões gracefully
    """
    settings: AppSettings = app.state.settings
    logger.info("app_starting", extra={"environment": settings.base.environment})
    validate_runtime_settings(settings)

    owns_container = getattr(app.state, "container", None) is None
    if owns_container:
        app.state.container = build_container(settings)

    container: AppContainer = app.state.container
    if container.firestore_client is not None:
        try:
            await _seed_firestore_health_doc(container.firestore_client, settings.base.service_name)
        except Exception as exc:
            logger.warning("firestore_client_not_ready", extra={"error_type": type(exc).__name__})

    yield

    logger.info("app_shutting_down")
    if owns_container:
        await container.aclose()


def create_app(
    settings: AppSettings | None = None,
    container: AppContainer | None = None,
) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        settings: Configuração explícita (default: carregada do ambiente)
        container: Container pronto (testes); sem ele o lifespan monta um

    Returns:
        Aplicação FastAPI configurada.
    """
    settings = settings or (container.settings if container else get_settings())
    initialize_app(settings)

    fastapi_app = FastAPI(
        title="intake-core",
        description="Ingestão idempotente de formulários, agendamentos e pagamentos",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None if settings.base.is_production else "/docs",
        redoc_url=None,
        openapi_url=None if settings.base.is_production else "/openapi.json",
    )
    fastapi_app.state.settings = settings
    fastapi_app.state.container = container

    # Formulários são enviados por browsers (site público)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"environment": settings.base.environment})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta (desenvolvimento)."""
    import uvicorn

    logger.info("Starting intake-core in development mode")
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )


if __name__ == "__main__":
    main()
