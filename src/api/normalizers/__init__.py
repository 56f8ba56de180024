"""Normalizers por origem — conversão de payloads externos para NormalizedEvent.

Estrutura:
- aliases.py: tabela versionada de rótulos de formulário
- form/: formulários de usuário (url-encoded ou JSON)
- cal/: webhooks de agendamento do Cal.com
- stripe/: webhooks de pagamento do Stripe

Normalização termina antes de qualquer escrita durável.
"""

from .cal import normalize_cal_webhook
from .form import normalize_form
from .stripe import normalize_stripe_webhook

__all__ = [
    "normalize_cal_webhook",
    "normalize_form",
    "normalize_stripe_webhook",
]
