"""Testes do normalizer de formulários (url-encoded e JSON)."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from urllib.parse import urlencode

import pytest

from api.normalizers import normalize_form
from api.normalizers.aliases import FORM_ALIAS_TABLE_VERSION
from api.normalizers.form.normalizer import decode_form_body
from app.domain.errors import ValidationError
from app.domain.events import LifecycleState

FORM_URLENCODED = "application/x-www-form-urlencoded"
RECEIVED_AT = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def _urlencoded(fields: dict[str, str]) -> bytes:
    return urlencode(fields).encode("utf-8")


class TestDecodeFormBody:
    def test_urlencoded_last_value_wins(self) -> None:
        body = b"consent=off&consent=on&email=a%40b.com"
        assert decode_form_body(body, FORM_URLENCODED) == {"consent": "on", "email": "a@b.com"}

    def test_json_with_charset(self) -> None:
        assert decode_form_body(b'{"email": "a@b.com"}', "application/json; charset=utf-8") == {
            "email": "a@b.com"
        }

    def test_unsupported_content_type(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            decode_form_body(b"email=a", "text/plain")
        assert exc_info.value.errors[0].code == "unsupported_content_type"

    def test_json_must_be_object(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            decode_form_body(b"[]", "application/json")
        assert exc_info.value.errors[0].code == "invalid_json"


class TestIntakeForm:
    """Formulário de intake → Account com lifecycle."""

    def test_urlencoded_with_historical_labels(self) -> None:
        body = _urlencoded({
            "E-mail": "  Ana@Example.com ",
            "First Name": "Ana",
            "Surname": "Souza",
            "Stage": "Discovery",
            "Company Name": "Acme",
            "privacy_consent": "on",
            "utm_source": "ads",
            "submit": "Enviar",
        })

        event = normalize_form("intake", body, FORM_URLENCODED, received_at=RECEIVED_AT)

        assert event.source == "form"
        assert event.event_type == "form.intake"
        assert event.identity.email == "Ana@Example.com"
        assert event.identity.first_name == "Ana"
        assert event.identity.last_name == "Souza"
        assert event.account.lifecycle_state == LifecycleState.DISCOVERY
        assert event.account.metadata == {"company": "Acme", "consent": True}
        assert event.throttled is True
        assert event.alias_version == FORM_ALIAS_TABLE_VERSION
        assert event.occurred_at == RECEIVED_AT
        assert event.primary_kind == "account"

    def test_client_event_id_is_kept(self) -> None:
        body = json.dumps({
            "email": "ana@example.com",
            "first_name": "Ana",
            "step": "inquiry",
            "event_id": "sub_2026_0001",
        }).encode()

        event = normalize_form("intake", body, "application/json")

        assert event.event_id == "sub_2026_0001"
        assert event.event_id_generated is False

    def test_malformed_event_id_is_replaced(self) -> None:
        body = json.dumps({
            "email": "ana@example.com",
            "first_name": "Ana",
            "step": "inquiry",
            "event_id": "x",
        }).encode()

        event = normalize_form("intake", body, "application/json")

        assert event.event_id != "x"
        assert event.event_id_generated is True

    def test_all_problems_reported_together(self) -> None:
        """Campo desconhecido, obrigatório ausente e valor inválido no mesmo erro."""
        body = _urlencoded({
            "email": "not-an-email",
            "favourite_color": "blue",
            "step": "launch",
        })

        with pytest.raises(ValidationError) as exc_info:
            normalize_form("intake", body, FORM_URLENCODED)

        codes = {(e.field, e.code) for e in exc_info.value.errors}
        assert ("favourite_color", "unknown_field") in codes
        assert ("first_name", "missing") in codes
        assert ("email", "invalid_email") in codes
        assert ("step", "invalid_step") in codes

    def test_blank_values_count_as_missing(self) -> None:
        body = _urlencoded({"email": "ana@example.com", "first_name": "   ", "step": "inquiry"})

        with pytest.raises(ValidationError) as exc_info:
            normalize_form("intake", body, FORM_URLENCODED)

        assert exc_info.value.fields == ["first_name"]

    def test_field_of_other_form_is_rejected(self) -> None:
        body = _urlencoded({
            "email": "ana@example.com",
            "first_name": "Ana",
            "step": "inquiry",
            "order_id": "ORD-1",
        })

        with pytest.raises(ValidationError) as exc_info:
            normalize_form("intake", body, FORM_URLENCODED)

        assert exc_info.value.errors[0].code == "unknown_field"


class TestOrderStepForm:
    def test_order_step_builds_order_changes(self) -> None:
        body = _urlencoded({
            "email": "ana@example.com",
            "code": "ORD-100",
            "step": "Kickoff Call",
            "completed": "false",
            "item": "starter",
        })

        event = normalize_form("order_step", body, FORM_URLENCODED)

        assert event.order is not None
        assert event.order.order_id == "ORD-100"
        assert event.order.steps == {"kickoff_call": False}
        assert event.order.plan == "starter"
        assert event.account.lifecycle_state is None
        assert event.primary_kind == "order"

    def test_invalid_order_id(self) -> None:
        body = _urlencoded({"email": "ana@example.com", "order_id": "!", "step": "x"})

        with pytest.raises(ValidationError) as exc_info:
            normalize_form("order_step", body, FORM_URLENCODED)

        assert ("order_id", "invalid_order_id") in {(e.field, e.code) for e in exc_info.value.errors}


class TestSupportForm:
    def test_support_builds_ticket_changes(self) -> None:
        body = json.dumps({
            "Your Email": "ana@example.com",
            "Topic": "Fatura duplicada",
            "Details": "Recebi duas cobranças",
            "Support Type": "billing",
        }).encode()

        event = normalize_form("support", body, "application/json")

        assert event.support is not None
        assert event.support.subject == "Fatura duplicada"
        assert event.support.category == "billing"
        assert event.primary_kind == "support"

    def test_unknown_category(self) -> None:
        body = json.dumps({
            "email": "ana@example.com",
            "subject": "Oi",
            "message": "Teste",
            "category": "sales",
        }).encode()

        with pytest.raises(ValidationError) as exc_info:
            normalize_form("support", body, "application/json")

        assert exc_info.value.fields == ["category"]


def test_unknown_form_kind() -> None:
    with pytest.raises(ValidationError) as exc_info:
        normalize_form("newsletter", b"{}", "application/json")
    assert exc_info.value.fields == ["form_kind"]
