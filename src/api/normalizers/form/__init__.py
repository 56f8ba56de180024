"""Normalizer de formulários de usuário."""

from .contracts import FORM_CONTRACTS, IntakeForm, OrderStepForm, SupportForm
from .normalizer import decode_form_body, normalize_form

__all__ = [
    "FORM_CONTRACTS",
    "IntakeForm",
    "OrderStepForm",
    "SupportForm",
    "decode_form_body",
    "normalize_form",
]
