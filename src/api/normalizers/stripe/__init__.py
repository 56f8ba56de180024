"""Normalizer Stripe — webhooks de pagamento."""

from .normalizer import SUPPORTED_STRIPE_EVENTS, normalize_stripe_webhook, resolve_order_token

__all__ = [
    "SUPPORTED_STRIPE_EVENTS",
    "normalize_stripe_webhook",
    "resolve_order_token",
]
