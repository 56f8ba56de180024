"""Testes da resolução determinística de identidade."""

from __future__ import annotations

import uuid

from app.services.identity import derive_support_id, normalize_email, resolve_account_id


def test_normalize_email_trims_and_lowercases() -> None:
    assert normalize_email("  Ana@Example.COM ") == "ana@example.com"


def test_same_email_variants_resolve_to_same_account() -> None:
    variants = ["ana@example.com", "ANA@example.com", "  Ana@Example.com\t"]
    assert len({resolve_account_id(v) for v in variants}) == 1


def test_different_emails_resolve_to_different_accounts() -> None:
    assert resolve_account_id("ana@example.com") != resolve_account_id("bia@example.com")


def test_account_id_is_uuid_v5_shaped() -> None:
    parsed = uuid.UUID(resolve_account_id("ana@example.com"))
    assert parsed.version == 5
    assert parsed.variant == uuid.RFC_4122


def test_account_id_is_stable_across_calls() -> None:
    """Sem estado: o mesmo valor em qualquer processo."""
    assert resolve_account_id("ana@example.com") == resolve_account_id("ana@example.com")


def test_support_id_depends_on_source_and_event() -> None:
    first = derive_support_id("form", "evt-1")
    assert first == derive_support_id("form", "evt-1")
    assert first != derive_support_id("form", "evt-2")
    assert first != derive_support_id("cal", "evt-1")
