"""Wiring do pipeline — monta o AppContainer a partir de AppSettings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.bootstrap.clients import (
    create_async_redis_client,
    create_firestore_client,
    create_http_client,
)
from app.bootstrap.dependencies_stores import (
    create_canonical_store,
    create_receipt_ledger_store,
    create_throttle_store,
)
from app.infra.mail import GmailMailSender
from app.infra.tracker import TrackerHttpClient
from app.services import (
    CanonicalUpsertEngine,
    NotificationDispatcher,
    ProjectionAdapter,
    ReceiptLedger,
    ThrottleGuard,
)
from app.use_cases import IngestEventUseCase, ReadRecordsUseCase

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    import httpx

    from app.protocols.canonical_store import CanonicalStoreProtocol
    from app.protocols.notifier import MailSenderProtocol
    from app.protocols.receipt_ledger import ReceiptLedgerProtocol
    from app.protocols.throttle_store import ThrottleStoreProtocol
    from app.protocols.tracker import TrackerClientProtocol
    from config.settings import AppSettings

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Dependências montadas uma vez por processo."""

    settings: AppSettings
    ingest: IngestEventUseCase
    records: ReadRecordsUseCase
    redis_client: Any | None = None
    firestore_client: Any | None = None
    http_client: httpx.AsyncClient | None = None

    async def aclose(self) -> None:
        """Fecha conexões abertas pelo container."""
        if self.http_client is not None:
            await self.http_client.aclose()
        if self.redis_client is not None:
            await self.redis_client.aclose()


def create_tracker_client(
    settings: AppSettings,
    http_client: httpx.AsyncClient | None,
) -> TrackerClientProtocol | None:
    """Client do tracker, ou None se a projeção estiver desabilitada."""
    if not settings.tracker.enabled or http_client is None:
        logger.info("tracker_disabled")
        return None
    return TrackerHttpClient(
        http_client=http_client,
        base_url=settings.tracker.api_base_url,
        api_token=settings.tracker.api_token,
        list_id=settings.tracker.list_id,
        timeout_seconds=settings.tracker.timeout_seconds,
    )


def create_mail_sender(settings: AppSettings) -> MailSenderProtocol | None:
    """Sender Gmail, ou None se a notificação estiver desabilitada."""
    if not settings.mail.enabled:
        logger.info("mail_disabled")
        return None
    return GmailMailSender(
        credentials_json=settings.mail.service_account_json,
        sender=settings.mail.sender,
    )


def build_pipeline(
    settings: AppSettings,
    *,
    ledger_store: ReceiptLedgerProtocol,
    canonical_store: CanonicalStoreProtocol,
    throttle_store: ThrottleStoreProtocol,
    tracker: TrackerClientProtocol | None = None,
    mail_sender: MailSenderProtocol | None = None,
    clock: Callable[[], datetime] | None = None,
) -> tuple[IngestEventUseCase, ReadRecordsUseCase]:
    """Conecta serviços e casos de uso sobre stores/clients já criados."""
    engine = CanonicalUpsertEngine(canonical_store, clock=clock)
    throttle = ThrottleGuard(
        throttle_store,
        cooldown_seconds=settings.throttle.cooldown_seconds,
        max_per_day=settings.throttle.max_per_day,
        clock=clock,
        enabled=settings.throttle.enabled,
    )
    ingest = IngestEventUseCase(
        ledger=ReceiptLedger(
            ledger_store,
            lease_seconds=settings.stores.receipt_lease_seconds,
            clock=clock,
        ),
        engine=engine,
        projection=ProjectionAdapter(tracker, engine),
        notification=NotificationDispatcher(mail_sender, tracker, settings.mail.notify_to),
        throttle=throttle,
    )
    return ingest, ReadRecordsUseCase(engine)


def build_container(settings: AppSettings) -> AppContainer:
    """Cria clients conforme os backends configurados e monta o pipeline."""
    firestore_client = None
    if "firestore" in (settings.stores.backend, settings.stores.throttle_backend):
        firestore_client = create_firestore_client(
            settings.firestore.project_id or settings.base.gcp_project
        )

    redis_client = None
    if settings.stores.throttle_backend == "redis":
        redis_client = create_async_redis_client(settings.base.redis_url)

    http_client = None
    if settings.tracker.enabled:
        http_client = create_http_client(settings.tracker.timeout_seconds)

    ingest, records = build_pipeline(
        settings,
        ledger_store=create_receipt_ledger_store(settings, firestore_client),
        canonical_store=create_canonical_store(settings, firestore_client),
        throttle_store=create_throttle_store(
            settings,
            firestore_client=firestore_client,
            redis_client=redis_client,
        ),
        tracker=create_tracker_client(settings, http_client),
        mail_sender=create_mail_sender(settings),
    )
    logger.info(
        "container_built",
        extra={
            "store_backend": settings.stores.backend,
            "throttle_backend": settings.stores.throttle_backend,
            "tracker_enabled": settings.tracker.enabled,
            "mail_enabled": settings.mail.enabled,
        },
    )
    return AppContainer(
        settings=settings,
        ingest=ingest,
        records=records,
        redis_client=redis_client,
        firestore_client=firestore_client,
        http_client=http_client,
    )
