"""Extração estrutural do payload de webhook do Cal.com.

Não faz validação de negócio; só localiza campos em formatos históricos.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..common import clean_str, dig

CAL_EVENT_CREATED = "booking.created"
CAL_EVENT_RESCHEDULED = "booking.rescheduled"
CAL_EVENT_CANCELLED = "booking.cancelled"
CAL_EVENT_UNKNOWN = "unknown"

SUPPORTED_CAL_EVENTS = frozenset({CAL_EVENT_CREATED, CAL_EVENT_RESCHEDULED, CAL_EVENT_CANCELLED})

# Locais onde versões diferentes do Cal.com colocam o slug do tipo de evento
_SLUG_PATHS: tuple[tuple[str, ...], ...] = (
    ("payload", "eventType", "slug"),
    ("payload", "eventTypeSlug"),
    ("payload", "booking", "eventType", "slug"),
    ("payload", "booking", "eventTypeSlug"),
)


@dataclass(frozen=True, slots=True)
class CalBooking:
    """Campos relevantes de um booking do Cal.com."""

    uid: str | None
    event_slug: str | None
    title: str | None
    start_time: str | None
    end_time: str | None
    attendee_email: str | None
    attendee_name: str | None
    created_at: str | None
    order_code: str | None
    extra: dict[str, Any] = field(default_factory=dict)


def normalize_cal_event_type(body: dict[str, Any]) -> str:
    """Mapeia o trigger do Cal.com para booking.created/rescheduled/cancelled."""
    raw = body.get("triggerEvent") or body.get("type") or body.get("event") or body.get("name") or ""
    value = str(raw).lower()
    if "cancel" in value:
        return CAL_EVENT_CANCELLED
    if "reschedule" in value:
        return CAL_EVENT_RESCHEDULED
    if "created" in value:
        return CAL_EVENT_CREATED
    return CAL_EVENT_UNKNOWN


def extract_event_slug(body: dict[str, Any]) -> str | None:
    for path in _SLUG_PATHS:
        slug = clean_str(dig(body, *path))
        if slug:
            return slug
    return None


def _first_attendee(payload: dict[str, Any]) -> tuple[str | None, str | None]:
    attendees = payload.get("attendees")
    if isinstance(attendees, list):
        for attendee in attendees:
            if isinstance(attendee, dict) and clean_str(attendee.get("email")):
                return clean_str(attendee.get("email")), clean_str(attendee.get("name"))

    # Formulário de booking (responses) quando attendees vem vazio
    email = clean_str(dig(payload, "responses", "email", "value"))
    name = clean_str(dig(payload, "responses", "name", "value"))
    return email, name


def _order_code(payload: dict[str, Any]) -> str | None:
    return (
        clean_str(dig(payload, "metadata", "code"))
        or clean_str(dig(payload, "responses", "code", "value"))
    )


def extract_booking(body: dict[str, Any]) -> CalBooking:
    payload = body.get("payload")
    if not isinstance(payload, dict):
        payload = {}
    email, name = _first_attendee(payload)
    return CalBooking(
        uid=clean_str(payload.get("uid")) or clean_str(dig(payload, "booking", "uid")),
        event_slug=extract_event_slug(body),
        title=clean_str(payload.get("title")),
        start_time=clean_str(payload.get("startTime")),
        end_time=clean_str(payload.get("endTime")),
        attendee_email=email,
        attendee_name=name,
        created_at=clean_str(body.get("createdAt")),
        order_code=_order_code(payload),
        extra={
            k: payload[k]
            for k in ("rescheduleUid", "cancellationReason", "location")
            if clean_str(payload.get(k))
        },
    )
