"""Testes dos stores Firestore com client mockado."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as gcp_exceptions

from app.domain.errors import ReceiptAlreadyExistsError, ReceiptNotFoundError, WriteConflictError
from app.domain.receipt import Receipt
from app.domain.throttle_state import ThrottleState
from app.infra.stores.firestore_canonical_store import FirestoreCanonicalStore
from app.infra.stores.firestore_receipt_ledger import FirestoreReceiptLedger
from app.infra.stores.firestore_throttle_store import FirestoreThrottleStore
from fsm import InvalidReceiptTransitionError, ReceiptState
from utils.errors import FirestoreUnavailableError


def _snapshot(data: dict | None, update_time: object = None) -> MagicMock:
    snapshot = MagicMock()
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    snapshot.update_time = update_time
    return snapshot


def _receipt() -> Receipt:
    return Receipt(
        event_id="evt-1",
        source="cal",
        event_type="booking.created",
        raw_payload="{}",
    )


class TestFirestoreReceiptLedger:
    """Testes do FirestoreReceiptLedger."""

    def _ledger(self) -> tuple[FirestoreReceiptLedger, MagicMock, MagicMock]:
        client = MagicMock()
        doc_ref = MagicMock()
        (
            client.collection.return_value.document.return_value
            .collection.return_value.document.return_value
        ) = doc_ref
        return FirestoreReceiptLedger(client, collection="receipts"), client, doc_ref

    @pytest.mark.asyncio
    async def test_document_path(self) -> None:
        """Receipt fica em receipts/{source}/events/{event_id}."""
        ledger, client, doc_ref = self._ledger()
        doc_ref.get.return_value = _snapshot(None)

        await ledger.get("cal", "evt-1")

        client.collection.assert_called_with("receipts")
        client.collection.return_value.document.assert_called_with("cal")
        client.collection.return_value.document.return_value.collection.assert_called_with(
            "events"
        )
        (
            client.collection.return_value.document.return_value
            .collection.return_value.document.assert_called_with("evt-1")
        )

    @pytest.mark.asyncio
    async def test_create_maps_already_exists(self) -> None:
        ledger, _client, doc_ref = self._ledger()
        doc_ref.create.side_effect = gcp_exceptions.AlreadyExists("exists")

        with pytest.raises(ReceiptAlreadyExistsError):
            await ledger.create(_receipt())

    @pytest.mark.asyncio
    async def test_create_writes_processed_flag(self) -> None:
        ledger, _client, doc_ref = self._ledger()

        await ledger.create(_receipt())

        written = doc_ref.create.call_args[0][0]
        assert written["processed"] is False
        assert written["state"] == "PENDING"
        assert written["raw_payload"] == "{}"

    @pytest.mark.asyncio
    async def test_get_unavailable(self) -> None:
        ledger, _client, doc_ref = self._ledger()
        doc_ref.get.side_effect = gcp_exceptions.ServiceUnavailable("down")

        with pytest.raises(FirestoreUnavailableError):
            await ledger.get("cal", "evt-1")

    @pytest.mark.asyncio
    async def test_update_writes_only_state_fields(self) -> None:
        """update não reenvia raw_payload nem normalized_payload."""
        ledger, _client, doc_ref = self._ledger()
        doc_ref.get.return_value = _snapshot(_receipt().to_firestore_dict())

        updated = await ledger.update("cal", "evt-1", {"state": ReceiptState.COMMITTED})

        written = doc_ref.update.call_args[0][0]
        assert written["state"] == "COMMITTED"
        assert written["processed"] is True
        assert "raw_payload" not in written
        assert "normalized_payload" not in written
        assert updated.state == ReceiptState.COMMITTED

    @pytest.mark.asyncio
    async def test_update_missing_receipt(self) -> None:
        ledger, _client, doc_ref = self._ledger()
        doc_ref.get.return_value = _snapshot(None)

        with pytest.raises(ReceiptNotFoundError):
            await ledger.update("cal", "evt-1", {"state": ReceiptState.FAILED})

    @pytest.mark.asyncio
    async def test_update_is_conditioned_on_read_version(self) -> None:
        ledger, client, doc_ref = self._ledger()
        stamp = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
        doc_ref.get.return_value = _snapshot(_receipt().to_firestore_dict(), update_time=stamp)

        await ledger.update("cal", "evt-1", {"attempts": 2}, expected_attempts=1)

        client.write_option.assert_called_once_with(last_update_time=stamp)
        assert doc_ref.update.call_args.kwargs["option"] is client.write_option.return_value

    @pytest.mark.asyncio
    async def test_update_rejects_transition_out_of_committed(self) -> None:
        ledger, _client, doc_ref = self._ledger()
        committed = _receipt().model_copy(update={"state": ReceiptState.COMMITTED})
        doc_ref.get.return_value = _snapshot(committed.to_firestore_dict())

        with pytest.raises(InvalidReceiptTransitionError):
            await ledger.update("cal", "evt-1", {"state": ReceiptState.PENDING})

        doc_ref.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_write_becomes_conflict(self) -> None:
        ledger, _client, doc_ref = self._ledger()
        doc_ref.get.return_value = _snapshot(_receipt().to_firestore_dict())
        doc_ref.update.side_effect = gcp_exceptions.FailedPrecondition("stale")

        with pytest.raises(WriteConflictError):
            await ledger.update("cal", "evt-1", {"state": ReceiptState.COMMITTED})


class TestFirestoreCanonicalStore:
    """Testes do FirestoreCanonicalStore."""

    def _store(self) -> tuple[FirestoreCanonicalStore, MagicMock, MagicMock]:
        client = MagicMock()
        doc_ref = MagicMock()
        client.collection.return_value.document.return_value = doc_ref
        store = FirestoreCanonicalStore(client, collections={"account": "crm_accounts"})
        return store, client, doc_ref

    @pytest.mark.asyncio
    async def test_get_returns_update_time_as_version(self) -> None:
        store, client, doc_ref = self._store()
        stamp = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
        doc_ref.get.return_value = _snapshot({"account_id": "a1"}, update_time=stamp)

        current = await store.get("account", "a1")

        client.collection.assert_called_with("crm_accounts")
        assert current is not None
        assert current.data == {"account_id": "a1"}
        assert current.version == stamp

    @pytest.mark.asyncio
    async def test_get_missing(self) -> None:
        store, _client, doc_ref = self._store()
        doc_ref.get.return_value = _snapshot(None)

        assert await store.get("order", "o1") is None

    @pytest.mark.asyncio
    async def test_new_document_uses_create(self) -> None:
        store, _client, doc_ref = self._store()

        await store.put("order", "o1", {"order_id": "o1"}, None)

        doc_ref.create.assert_called_once_with({"order_id": "o1"})
        doc_ref.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_document_uses_precondition(self) -> None:
        store, client, doc_ref = self._store()
        stamp = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)

        await store.put("order", "o1", {"order_id": "o1"}, stamp)

        client.write_option.assert_called_once_with(last_update_time=stamp)
        doc_ref.update.assert_called_once_with(
            {"order_id": "o1"}, option=client.write_option.return_value
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [gcp_exceptions.AlreadyExists("exists"), gcp_exceptions.FailedPrecondition("stale")],
    )
    async def test_races_become_write_conflict(self, error: Exception) -> None:
        store, _client, doc_ref = self._store()
        doc_ref.create.side_effect = error
        doc_ref.update.side_effect = error

        with pytest.raises(WriteConflictError):
            await store.put("account", "a1", {}, None)
        with pytest.raises(WriteConflictError):
            await store.put("account", "a1", {}, "v1")

    @pytest.mark.asyncio
    async def test_other_errors_are_unavailable(self) -> None:
        store, _client, doc_ref = self._store()
        doc_ref.create.side_effect = gcp_exceptions.DeadlineExceeded("slow")

        with pytest.raises(FirestoreUnavailableError):
            await store.put("support", "s1", {}, None)


class TestFirestoreThrottleStore:
    """Testes do FirestoreThrottleStore."""

    def _store(self) -> tuple[FirestoreThrottleStore, MagicMock]:
        client = MagicMock()
        doc_ref = MagicMock()
        client.collection.return_value.document.return_value = doc_ref
        return FirestoreThrottleStore(client), doc_ref

    @pytest.mark.asyncio
    async def test_put_writes_expires_at(self) -> None:
        store, doc_ref = self._store()

        await store.put("acct-1", ThrottleState(count_today=1, day="2026-03-10"), 3600)

        written = doc_ref.set.call_args[0][0]
        assert written["count_today"] == 1
        assert written["expires_at"] > datetime.now(UTC)

    @pytest.mark.asyncio
    async def test_expired_document_is_ignored(self) -> None:
        store, doc_ref = self._store()
        doc_ref.get.return_value = _snapshot({
            "count_today": 3,
            "day": "2026-03-10",
            "expires_at": datetime.now(UTC) - timedelta(seconds=1),
        })

        assert await store.get("acct-1") is None

    @pytest.mark.asyncio
    async def test_get_live_document(self) -> None:
        store, doc_ref = self._store()
        doc_ref.get.return_value = _snapshot({
            "count_today": 2,
            "day": "2026-03-10",
            "expires_at": datetime.now(UTC) + timedelta(hours=1),
        })

        state = await store.get("acct-1")

        assert state is not None
        assert state.count_today == 2

    @pytest.mark.asyncio
    async def test_write_failure(self) -> None:
        store, doc_ref = self._store()
        doc_ref.set.side_effect = gcp_exceptions.ServiceUnavailable("down")

        with pytest.raises(FirestoreUnavailableError):
            await store.put("acct-1", ThrottleState(), 60)
