"""Normalizer de webhooks do Stripe para NormalizedEvent.

Tipos suportados:
- checkout.session.completed
- checkout.session.async_payment_succeeded
- checkout.session.async_payment_failed
- charge.refunded

Demais tipos são ignorados (resposta 200 sem escrita).
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from app.domain.errors import FieldError, ValidationError
from app.domain.events import (
    AccountChanges,
    IdentityFields,
    LifecycleState,
    NormalizedEvent,
    OrderChanges,
)

from ..common import clean_str, dig, is_valid_email, parse_epoch, split_full_name

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
CHECKOUT_ASYNC_SUCCEEDED = "checkout.session.async_payment_succeeded"
CHECKOUT_ASYNC_FAILED = "checkout.session.async_payment_failed"
CHARGE_REFUNDED = "charge.refunded"

SUPPORTED_STRIPE_EVENTS = frozenset({
    CHECKOUT_COMPLETED,
    CHECKOUT_ASYNC_SUCCEEDED,
    CHECKOUT_ASYNC_FAILED,
    CHARGE_REFUNDED,
})

_PAID_STATUSES = frozenset({"paid", "no_payment_required"})


def resolve_order_token(session: dict[str, Any]) -> str | None:
    """client_reference_id → metadata.code → id da sessão."""
    return (
        clean_str(session.get("client_reference_id"))
        or clean_str(dig(session, "metadata", "code"))
        or clean_str(session.get("id"))
    )


def _checkout_outcome(event_type: str, session: dict[str, Any]) -> tuple[str, LifecycleState | None]:
    if event_type == CHECKOUT_ASYNC_FAILED:
        return "payment_failed", LifecycleState.PAYMENT_FAILED
    if event_type == CHECKOUT_ASYNC_SUCCEEDED:
        return "paid", LifecycleState.CUSTOMER
    if session.get("payment_status") in _PAID_STATUSES:
        return "paid", LifecycleState.CUSTOMER
    # Pagamento assíncrono (boleto, débito): confirmação chega em outro evento
    return "payment_pending", None


def _checkout_changes(
    event_type: str, session: dict[str, Any]
) -> tuple[str | None, str | None, OrderChanges | None, LifecycleState | None]:
    email = clean_str(dig(session, "customer_details", "email")) or clean_str(session.get("customer_email"))
    name = clean_str(dig(session, "customer_details", "name"))
    token = resolve_order_token(session)
    status, lifecycle = _checkout_outcome(event_type, session)
    metadata = {
        "stripe_session_id": clean_str(session.get("id")),
        "stripe_customer_id": clean_str(session.get("customer")),
        "payment_status": clean_str(session.get("payment_status")),
        "stripe_payment_intent": clean_str(session.get("payment_intent")),
    }
    order = None
    if token:
        order = OrderChanges(
            order_id=token,
            status=status,
            steps={"payment": status == "paid"},
            plan=clean_str(dig(session, "metadata", "item")) or clean_str(dig(session, "metadata", "plan")),
            amount_total=session.get("amount_total") if isinstance(session.get("amount_total"), int) else None,
            currency=clean_str(session.get("currency")),
            metadata={k: v for k, v in metadata.items() if v},
            payment_ref=clean_str(session.get("payment_intent")),
        )
    return email, name, order, lifecycle


def _refund_changes(
    charge: dict[str, Any],
) -> tuple[str | None, str | None, OrderChanges | None, LifecycleState | None]:
    email = clean_str(dig(charge, "billing_details", "email")) or clean_str(charge.get("receipt_email"))
    name = clean_str(dig(charge, "billing_details", "name"))
    code = clean_str(dig(charge, "metadata", "code"))
    payment_intent = clean_str(charge.get("payment_intent"))
    # Sem metadata.code a order é resolvida pelo payment_intent gravado no checkout
    token = code or payment_intent or clean_str(charge.get("id"))
    fully_refunded = bool(charge.get("refunded"))
    status = "refunded" if fully_refunded else "partially_refunded"
    order = None
    if token:
        amount_refunded = charge.get("amount_refunded")
        order = OrderChanges(
            order_id=token,
            status=status,
            currency=clean_str(charge.get("currency")),
            metadata={
                "stripe_charge_id": clean_str(charge.get("id")),
                "amount_refunded": amount_refunded if isinstance(amount_refunded, int) else None,
            },
            payment_ref=payment_intent,
            order_id_is_fallback=code is None,
        )
    return email, name, order, LifecycleState.REFUNDED if fully_refunded else None


def normalize_stripe_webhook(
    body: dict[str, Any],
    *,
    received_at: datetime | None = None,
) -> NormalizedEvent | None:
    """Normaliza um evento do Stripe.

    Returns:
        NormalizedEvent, ou None quando o tipo não é suportado

    Raises:
        ValidationError: Sem id de evento, sem objeto ou sem e-mail do cliente
    """
    event_type = clean_str(body.get("type")) or ""
    if event_type not in SUPPORTED_STRIPE_EVENTS:
        logger.info("stripe_event_ignored", extra={"stripe_event_type": event_type[:64]})
        return None

    errors: list[FieldError] = []
    event_id = clean_str(body.get("id"))
    if not event_id:
        errors.append(FieldError("id", "missing", "Evento sem id"))
    obj = dig(body, "data", "object")
    if not isinstance(obj, dict):
        errors.append(FieldError("data.object", "missing", "Evento sem objeto"))
        raise ValidationError(errors)

    if event_type == CHARGE_REFUNDED:
        email, name, order, lifecycle = _refund_changes(obj)
    else:
        email, name, order, lifecycle = _checkout_changes(event_type, obj)

    if not email:
        errors.append(FieldError("data.object.customer_details.email", "missing", "Evento sem e-mail"))
    elif not is_valid_email(email):
        errors.append(FieldError("data.object.customer_details.email", "invalid_email", "E-mail inválido"))
    if errors:
        raise ValidationError(errors)

    now = received_at or datetime.now(UTC)
    first_name, last_name = split_full_name(name)
    if order is not None:
        order = order.model_copy(
            update={"metadata": {k: v for k, v in order.metadata.items() if v is not None}}
        )

    return NormalizedEvent(
        source="stripe",
        event_type=event_type,
        event_id=event_id,
        occurred_at=parse_epoch(body.get("created"), now),
        identity=IdentityFields(email=email, first_name=first_name, last_name=last_name),
        account=AccountChanges(lifecycle_state=lifecycle),
        order=order,
    )
