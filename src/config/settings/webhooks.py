"""Settings dos webhooks assinados (Cal.com e Stripe).

Cada provedor aceita uma lista de secrets para permitir rotação:
a assinatura é válida se qualquer secret da lista confere.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_STRIPE_TOLERANCE_SECONDS = 300


def _split_secrets(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class WebhookSettings:
    """Secrets e janelas dos webhooks.

    Attributes:
        cal_secrets: Secrets HMAC do Cal.com (rotação)
        stripe_secrets: Signing secrets do Stripe (whsec_...)
        stripe_tolerance_seconds: Janela de frescor do timestamp (0 desativa)
    """

    cal_secrets: tuple[str, ...] = ()
    stripe_secrets: tuple[str, ...] = ()
    stripe_tolerance_seconds: int = DEFAULT_STRIPE_TOLERANCE_SECONDS

    def validate(self) -> list[str]:
        """Valida secrets obrigatórios dos webhooks."""
        errors: list[str] = []
        if not self.cal_secrets:
            errors.append("CAL_WEBHOOK_SECRETS não configurado")
        if not self.stripe_secrets:
            errors.append("STRIPE_WEBHOOK_SECRETS não configurado")
        if self.stripe_tolerance_seconds < 0:
            errors.append("STRIPE_TIMESTAMP_TOLERANCE_SECONDS deve ser >= 0")
        return errors


def load_webhook_settings() -> WebhookSettings:
    """Carrega WebhookSettings de variáveis de ambiente."""
    cal_raw = os.getenv("CAL_WEBHOOK_SECRETS") or os.getenv("CAL_WEBHOOK_SECRET", "")
    stripe_raw = os.getenv("STRIPE_WEBHOOK_SECRETS") or os.getenv("STRIPE_WEBHOOK_SECRET", "")
    return WebhookSettings(
        cal_secrets=_split_secrets(cal_raw),
        stripe_secrets=_split_secrets(stripe_raw),
        stripe_tolerance_seconds=int(
            os.getenv(
                "STRIPE_TIMESTAMP_TOLERANCE_SECONDS", str(DEFAULT_STRIPE_TOLERANCE_SECONDS)
            )
        ),
    )
