"""Agregador de rotas — registra todos os routers por superfície.

Este módulo é responsável por criar o router principal da API
e incluir os sub-routers de webhooks, formulários e leitura.

Uso:
    from api.routes import create_api_router

    app = FastAPI()
    app.include_router(create_api_router())
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.forms.router import router as forms_router
from api.routes.health.router import router as health_router
from api.routes.records.router import router as records_router
from api.routes.webhooks.router import router as webhooks_router


def create_api_router() -> APIRouter:
    """Cria router principal com todos os sub-routers registrados.

    Returns:
        APIRouter configurado com todos os endpoints.
    """
    api_router = APIRouter()

    # Health checks (sem prefixo para /health e /ready na raiz)
    api_router.include_router(health_router, tags=["health"])

    # Webhooks assinados (Cal.com, Stripe)
    api_router.include_router(webhooks_router, prefix="/webhooks", tags=["webhooks"])

    # Formulários de usuário
    api_router.include_router(forms_router, prefix="/forms", tags=["forms"])

    # Leitura dos documentos canônicos
    api_router.include_router(records_router, prefix="/records", tags=["records"])

    return api_router
