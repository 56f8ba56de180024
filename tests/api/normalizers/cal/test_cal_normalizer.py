"""Testes do normalizer de webhooks do Cal.com."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from api.normalizers import normalize_cal_webhook
from api.normalizers.cal.extractor import extract_booking, extract_event_slug, normalize_cal_event_type
from api.normalizers.common import payload_event_id
from app.domain.errors import ValidationError
from app.domain.events import LifecycleState
from tests.fakes.builders import cal_body, encode


class TestCalExtractor:
    @pytest.mark.parametrize(
        ("trigger", "expected"),
        [
            ("BOOKING_CREATED", "booking.created"),
            ("BOOKING_RESCHEDULED", "booking.rescheduled"),
            ("BOOKING_CANCELLED", "booking.cancelled"),
            ("MEETING_ENDED", "unknown"),
        ],
    )
    def test_event_type(self, trigger: str, expected: str) -> None:
        assert normalize_cal_event_type({"triggerEvent": trigger}) == expected

    def test_slug_from_nested_booking(self) -> None:
        body = {"payload": {"booking": {"eventTypeSlug": "onboarding"}}}
        assert extract_event_slug(body) == "onboarding"

    def test_attendee_falls_back_to_responses(self) -> None:
        body = {
            "payload": {
                "uid": "bk_9",
                "attendees": [],
                "responses": {
                    "email": {"value": "bia@example.com"},
                    "name": {"value": "Bia Lima"},
                    "code": {"value": "ORD-7"},
                },
            }
        }

        booking = extract_booking(body)

        assert booking.attendee_email == "bia@example.com"
        assert booking.attendee_name == "Bia Lima"
        assert booking.order_code == "ORD-7"


class TestNormalizeCalWebhook:
    def test_booking_created(self) -> None:
        body = cal_body()

        event = normalize_cal_webhook(body, encode(body))

        assert event is not None
        assert event.source == "cal"
        assert event.event_type == "booking.created"
        assert event.event_id == "cal:booking.created:bk_123"
        assert event.identity.first_name == "Ana"
        assert event.identity.last_name == "Souza"
        assert event.account.lifecycle_state == LifecycleState.CALL_SCHEDULED
        assert event.account.metadata["last_booking"]["event_slug"] == "discovery"
        assert event.occurred_at == datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
        assert event.order is None
        assert event.throttled is False

    def test_reschedule_and_cancel_have_distinct_ids(self) -> None:
        """Mesmo booking, tipos diferentes: chaves de idempotência diferentes."""
        created = normalize_cal_webhook(cal_body(), b"a")
        cancelled = normalize_cal_webhook(cal_body(trigger="BOOKING_CANCELLED"), b"b")

        assert created is not None and cancelled is not None
        assert created.event_id != cancelled.event_id
        assert cancelled.account.lifecycle_state == LifecycleState.CALL_CANCELLED

    def test_order_code_marks_call_step(self) -> None:
        body = cal_body(code="ORD-100", trigger="BOOKING_CANCELLED")

        event = normalize_cal_webhook(body, encode(body))

        assert event is not None and event.order is not None
        assert event.order.order_id == "ORD-100"
        assert event.order.steps == {"call_scheduled": False}

    def test_without_uid_uses_payload_hash(self) -> None:
        body = cal_body()
        del body["payload"]["uid"]
        raw = encode(body)

        event = normalize_cal_webhook(body, raw)

        assert event is not None
        assert event.event_id == payload_event_id(raw)

    def test_unsupported_trigger_is_ignored(self) -> None:
        assert normalize_cal_webhook({"triggerEvent": "MEETING_ENDED"}, b"{}") is None

    def test_missing_email(self) -> None:
        body = cal_body()
        body["payload"]["attendees"] = []

        with pytest.raises(ValidationError) as exc_info:
            normalize_cal_webhook(body, encode(body))

        assert exc_info.value.errors[0].code == "missing"

    def test_invalid_email(self) -> None:
        body = cal_body(email="not-an-email")

        with pytest.raises(ValidationError) as exc_info:
            normalize_cal_webhook(body, encode(body))

        assert exc_info.value.errors[0].code == "invalid_email"
