"""Connectors de borda.

Estrutura:
- webhooks/: verificação de assinatura (Cal.com, Stripe) e parse do corpo bruto
"""

__all__: list[str] = []
