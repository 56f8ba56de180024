"""Webhooks assinados: verificação de assinatura e parsing seguro."""

from .receive import (
    InvalidJsonError,
    InvalidSignatureError,
    MissingSecretError,
    WebhookRequestError,
    parse_webhook_request,
)
from .signature import (
    CAL_SIGNATURE_HEADER,
    STRIPE_SIGNATURE_HEADER,
    SignatureResult,
    verify_cal_signature,
    verify_hmac_hex,
    verify_stripe_signature,
)

__all__ = [
    "CAL_SIGNATURE_HEADER",
    "STRIPE_SIGNATURE_HEADER",
    "InvalidJsonError",
    "InvalidSignatureError",
    "MissingSecretError",
    "SignatureResult",
    "WebhookRequestError",
    "parse_webhook_request",
    "verify_cal_signature",
    "verify_hmac_hex",
    "verify_stripe_signature",
]
