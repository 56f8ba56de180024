"""Testes do RedisThrottleStore com mock."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.domain.throttle_state import ThrottleState
from app.infra.stores.redis_throttle_store import RedisThrottleStore
from utils.errors import RedisConnectionError


def _redis(get_value: bytes | None = None) -> MagicMock:
    client = MagicMock()
    client.get = AsyncMock(return_value=get_value)
    client.set = AsyncMock(return_value=True)
    return client


class TestRedisThrottleStore:
    """Testes do RedisThrottleStore."""

    @pytest.mark.asyncio
    async def test_put_uses_namespace_and_ttl(self) -> None:
        """Deve gravar JSON em throttle:{key} com expiração."""
        client = _redis()
        store = RedisThrottleStore(client)
        state = ThrottleState(
            last_at=datetime(2026, 3, 10, 12, 0, tzinfo=UTC), count_today=1, day="2026-03-10"
        )

        await store.put("acct-1", state, ttl_seconds=172800)

        args, kwargs = client.set.call_args
        assert args[0] == "throttle:acct-1"
        assert json.loads(args[1])["count_today"] == 1
        assert kwargs == {"ex": 172800}

    @pytest.mark.asyncio
    async def test_get_parses_blob(self) -> None:
        blob = json.dumps(
            {"last_at": "2026-03-10T12:00:00Z", "count_today": 2, "day": "2026-03-10"}
        ).encode()
        store = RedisThrottleStore(_redis(blob))

        state = await store.get("acct-1")

        assert state is not None
        assert state.count_today == 2
        assert state.last_at == datetime(2026, 3, 10, 12, 0, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_get_missing_key(self) -> None:
        store = RedisThrottleStore(_redis(None))

        assert await store.get("acct-1") is None

    @pytest.mark.asyncio
    async def test_corrupted_blob_is_treated_as_new(self) -> None:
        """Blob inválido não deve derrubar a requisição."""
        store = RedisThrottleStore(_redis(b"not-json"))

        assert await store.get("acct-1") is None

    @pytest.mark.asyncio
    async def test_connection_error_is_wrapped(self) -> None:
        client = _redis()
        client.get.side_effect = ConnectionError("down")
        store = RedisThrottleStore(client)

        with pytest.raises(RedisConnectionError):
            await store.get("acct-1")

    @pytest.mark.asyncio
    async def test_put_error_is_wrapped(self) -> None:
        client = _redis()
        client.set.side_effect = TimeoutError("timeout")
        store = RedisThrottleStore(client)

        with pytest.raises(RedisConnectionError):
            await store.put("acct-1", ThrottleState(), ttl_seconds=10)
