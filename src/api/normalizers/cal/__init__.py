"""Normalizer Cal.com — webhooks de agendamento."""

from .extractor import (
    SUPPORTED_CAL_EVENTS,
    CalBooking,
    extract_booking,
    extract_event_slug,
    normalize_cal_event_type,
)
from .normalizer import compute_cal_event_id, normalize_cal_webhook

__all__ = [
    "SUPPORTED_CAL_EVENTS",
    "CalBooking",
    "compute_cal_event_id",
    "extract_booking",
    "extract_event_slug",
    "normalize_cal_event_type",
    "normalize_cal_webhook",
]
