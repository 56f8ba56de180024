"""Rotas HTTP da API — adapters de entrada do pipeline.

Responsabilidades:
- Definir endpoints HTTP (webhooks, formulários, leitura, health)
- Ler o corpo bruto e validar assinatura antes de qualquer parse
- Delegação para normalizers/use_cases
- Respostas HTTP apropriadas (ver responses.py)

Estrutura:
- routes/webhooks/: Cal.com e Stripe
- routes/forms/: formulários de usuário
- routes/records/: leitura de accounts, orders e support
- routes/health/: health checks e readiness

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
