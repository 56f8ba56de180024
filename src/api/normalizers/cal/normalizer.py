"""Normalizer de webhooks do Cal.com para NormalizedEvent."""

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

from ..common import is_valid_email, parse_iso_timestamp, payload_event_id, split_full_name
from .extractor import (
    CAL_EVENT_CANCELLED,
    CAL_EVENT_CREATED,
    CAL_EVENT_RESCHEDULED,
    SUPPORTED_CAL_EVENTS,
    CalBooking,
    extract_booking,
    normalize_cal_event_type,
)

logger = logging.getLogger(__name__)

_LIFECYCLE_BY_EVENT = {
    CAL_EVENT_CREATED: LifecycleState.CALL_SCHEDULED,
    CAL_EVENT_RESCHEDULED: LifecycleState.CALL_RESCHEDULED,
    CAL_EVENT_CANCELLED: LifecycleState.CALL_CANCELLED,
}


def compute_cal_event_id(event_type: str, booking: CalBooking, raw_body: bytes) -> str:
    """`cal:{tipo}:{uid}`; sem uid, hash do corpo bruto."""
    if booking.uid:
        return f"cal:{event_type}:{booking.uid}"
    return payload_event_id(raw_body)


def _booking_metadata(event_type: str, booking: CalBooking) -> dict[str, Any]:
    details = {
        "uid": booking.uid,
        "event_slug": booking.event_slug,
        "title": booking.title,
        "start_time": booking.start_time,
        "end_time": booking.end_time,
        "status": event_type,
        **booking.extra,
    }
    return {"last_booking": {k: v for k, v in details.items() if v is not None}}


def normalize_cal_webhook(
    body: dict[str, Any],
    raw_body: bytes,
    *,
    received_at: datetime | None = None,
) -> NormalizedEvent | None:
    """Normaliza um webhook do Cal.com.

    Returns:
        NormalizedEvent, ou None quando o tipo de evento não é suportado

    Raises:
        ValidationError: Se o booking não traz e-mail válido do participante
    """
    event_type = normalize_cal_event_type(body)
    if event_type not in SUPPORTED_CAL_EVENTS:
        logger.info("cal_event_ignored", extra={"trigger": str(body.get("triggerEvent") or "")[:64]})
        return None

    booking = extract_booking(body)
    if not booking.attendee_email:
        raise ValidationError([FieldError("payload.attendees.email", "missing", "Booking sem e-mail")])
    if not is_valid_email(booking.attendee_email):
        raise ValidationError([FieldError("payload.attendees.email", "invalid_email", "E-mail inválido")])

    now = received_at or datetime.now(UTC)
    first_name, last_name = split_full_name(booking.attendee_name)

    order = None
    if booking.order_code:
        order = OrderChanges(
            order_id=booking.order_code,
            steps={"call_scheduled": event_type != CAL_EVENT_CANCELLED},
        )

    return NormalizedEvent(
        source="cal",
        event_type=event_type,
        event_id=compute_cal_event_id(event_type, booking, raw_body),
        occurred_at=parse_iso_timestamp(booking.created_at, now),
        identity=IdentityFields(
            email=booking.attendee_email,
            first_name=first_name,
            last_name=last_name,
        ),
        account=AccountChanges(
            lifecycle_state=_LIFECYCLE_BY_EVENT[event_type],
            metadata=_booking_metadata(event_type, booking),
        ),
        order=order,
    )
