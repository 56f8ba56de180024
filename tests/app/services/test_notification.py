"""Testes do Notification Dispatcher."""

from __future__ import annotations

import pytest

from app.domain.events import SupportChanges
from app.services.notification import NotificationDispatcher, build_notification
from app.services.projection import ProjectionOutcome
from tests.fakes.builders import make_event
from tests.fakes.fake_integrations import FakeMailSender, FakeTrackerClient

PROJECTED = ProjectionOutcome(status="projected", task_id="task-9")


def test_build_notification_includes_references() -> None:
    event = make_event(support=SupportChanges(subject="Fatura", message="Duplicada"))

    subject, body = build_notification(event, "support", "sup-1", PROJECTED)

    assert subject == "[intake] form.intake (support)"
    assert "Documento: support/sup-1" in body
    assert "Tarefa: task-9 (projected)" in body
    assert body.endswith("Duplicada")


class TestNotificationDispatcher:
    @pytest.mark.asyncio
    async def test_skipped_without_sender(self) -> None:
        outcome = await NotificationDispatcher(None, None, "ops@example.com").notify(
            make_event(), "account", "a1", PROJECTED
        )
        assert outcome.status == "skipped"

    @pytest.mark.asyncio
    async def test_sends_to_configured_recipient(self) -> None:
        sender = FakeMailSender()

        outcome = await NotificationDispatcher(sender, None, "ops@example.com").notify(
            make_event(), "account", "a1", PROJECTED
        )

        assert outcome.status == "sent"
        assert sender.sent[0]["to"] == "ops@example.com"

    @pytest.mark.asyncio
    async def test_failure_is_annotated_on_task(self) -> None:
        tracker = FakeTrackerClient()

        outcome = await NotificationDispatcher(
            FakeMailSender(fail=True), tracker, "ops@example.com"
        ).notify(make_event(), "account", "a1", PROJECTED)

        assert outcome.status == "failed"
        assert outcome.error is not None
        assert tracker.comments[0][0] == "task-9"
        assert "Falha ao enviar notificação" in tracker.comments[0][1]

    @pytest.mark.asyncio
    async def test_failure_without_task_skips_annotation(self) -> None:
        tracker = FakeTrackerClient()

        outcome = await NotificationDispatcher(
            FakeMailSender(fail=True), tracker, "ops@example.com"
        ).notify(make_event(), "account", "a1", ProjectionOutcome(status="failed"))

        assert outcome.status == "failed"
        assert tracker.comments == []
