"""Testes do caso de uso de leitura dos documentos canônicos."""

from __future__ import annotations

import pytest

from app.domain.events import OrderChanges
from app.infra.stores.memory_stores import MemoryCanonicalStore
from app.services.canonical import CanonicalUpsertEngine
from app.services.identity import resolve_account_id
from app.use_cases import ReadRecordsUseCase
from tests.fakes.builders import make_event


@pytest.mark.asyncio
async def test_account_by_email_uses_deterministic_id() -> None:
    engine = CanonicalUpsertEngine(MemoryCanonicalStore())
    await engine.upsert_account(make_event(), resolve_account_id("ana@example.com"))
    records = ReadRecordsUseCase(engine)

    account = await records.account_by_email("  ANA@example.com ")

    assert account is not None
    assert account.primary_email == "ana@example.com"


@pytest.mark.asyncio
async def test_missing_records_return_none() -> None:
    records = ReadRecordsUseCase(CanonicalUpsertEngine(MemoryCanonicalStore()))

    assert await records.account("missing") is None
    assert await records.order("missing") is None
    assert await records.support("missing") is None


@pytest.mark.asyncio
async def test_order_lookup() -> None:
    engine = CanonicalUpsertEngine(MemoryCanonicalStore())
    await engine.upsert_order(make_event(order=OrderChanges(order_id="ORD-1")), "acct")

    order = await ReadRecordsUseCase(engine).order("ORD-1")

    assert order is not None
    assert order.account_id == "acct"
