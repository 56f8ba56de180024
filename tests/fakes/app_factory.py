"""Monta app FastAPI com container em memória para testes de rota."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from fastapi import FastAPI

from app.app import create_app
from app.bootstrap.dependencies import AppContainer, build_pipeline
from app.infra.stores.memory_stores import (
    MemoryCanonicalStore,
    MemoryReceiptLedger,
    MemoryThrottleStore,
)
from config.settings import AppSettings, MailSettings, WebhookSettings
from tests.fakes.builders import CAL_SECRET, STRIPE_SECRET
from tests.fakes.fake_integrations import FakeClock, FakeMailSender, FakeTrackerClient


def default_settings(**overrides: Any) -> AppSettings:
    settings = AppSettings(
        webhooks=WebhookSettings(cal_secrets=(CAL_SECRET,), stripe_secrets=(STRIPE_SECRET,)),
        mail=MailSettings(notify_to="ops@example.com"),
    )
    return replace(settings, **overrides)


@dataclass
class AppHarness:
    """App pronto e os fakes por trás dele."""

    app: FastAPI
    container: AppContainer
    ledger: MemoryReceiptLedger
    canonical: MemoryCanonicalStore
    tracker: FakeTrackerClient
    mail: FakeMailSender
    clock: FakeClock = field(default_factory=FakeClock)


def make_test_app(
    settings: AppSettings | None = None,
    *,
    ledger: MemoryReceiptLedger | None = None,
    canonical: MemoryCanonicalStore | None = None,
    tracker: FakeTrackerClient | None = None,
    mail: FakeMailSender | None = None,
) -> AppHarness:
    settings = settings or default_settings()
    ledger = ledger if ledger is not None else MemoryReceiptLedger()
    canonical = canonical if canonical is not None else MemoryCanonicalStore()
    tracker = tracker or FakeTrackerClient()
    mail = mail or FakeMailSender()
    clock = FakeClock()
    ingest, records = build_pipeline(
        settings,
        ledger_store=ledger,
        canonical_store=canonical,
        throttle_store=MemoryThrottleStore(),
        tracker=tracker,
        mail_sender=mail,
        clock=clock,
    )
    container = AppContainer(settings=settings, ingest=ingest, records=records)
    return AppHarness(
        app=create_app(settings, container),
        container=container,
        ledger=ledger,
        canonical=canonical,
        tracker=tracker,
        mail=mail,
        clock=clock,
    )
