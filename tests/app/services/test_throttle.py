"""Testes do throttle por identidade (cooldown + teto diário)."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from app.domain.errors import ThrottledError
from app.domain.throttle_state import ThrottleState
from app.infra.stores.memory_stores import MemoryThrottleStore
from app.services.throttle import STATE_TTL_SECONDS, ThrottleGuard, seconds_until_next_utc_day
from tests.fakes.fake_integrations import FakeClock

KEY = "acct-1"


def _guard(clock: FakeClock, store: MemoryThrottleStore | None = None, **kwargs) -> ThrottleGuard:
    return ThrottleGuard(
        store or MemoryThrottleStore(),
        cooldown_seconds=kwargs.pop("cooldown_seconds", 600),
        max_per_day=kwargs.pop("max_per_day", 3),
        clock=clock,
        **kwargs,
    )


class TestThrottleGuard:
    @pytest.mark.asyncio
    async def test_first_submission_is_recorded(self) -> None:
        clock = FakeClock()
        store = MemoryThrottleStore()

        state = await _guard(clock, store).check_and_record(KEY)

        assert state is not None
        assert state.count_today == 1
        assert state.day == "2026-03-10"
        assert await store.get(KEY) == state

    @pytest.mark.asyncio
    async def test_cooldown_rejects_with_remaining_seconds(self) -> None:
        clock = FakeClock()
        guard = _guard(clock)
        await guard.check_and_record(KEY)

        clock.advance(120)
        with pytest.raises(ThrottledError) as exc_info:
            await guard.check_and_record(KEY)

        assert exc_info.value.reason == "cooldown"
        assert exc_info.value.retry_after == 480

    @pytest.mark.asyncio
    async def test_rejection_does_not_update_state(self) -> None:
        clock = FakeClock()
        store = MemoryThrottleStore()
        guard = _guard(clock, store)
        first = await guard.check_and_record(KEY)

        clock.advance(10)
        with pytest.raises(ThrottledError):
            await guard.check_and_record(KEY)

        assert await store.get(KEY) == first

    @pytest.mark.asyncio
    async def test_daily_cap_then_rollover(self) -> None:
        """Três envios espaçados passam, o quarto bate no teto, o dia seguinte libera."""
        clock = FakeClock(datetime(2026, 3, 10, 9, 0, tzinfo=UTC))
        guard = _guard(clock)
        for _ in range(3):
            await guard.check_and_record(KEY)
            clock.advance(601)

        with pytest.raises(ThrottledError) as exc_info:
            await guard.check_and_record(KEY)
        assert exc_info.value.reason == "daily_cap"
        assert exc_info.value.retry_after == seconds_until_next_utc_day(clock.now)

        clock.now = datetime(2026, 3, 11, 0, 0, 5, tzinfo=UTC)
        state = await guard.check_and_record(KEY)
        assert state is not None
        assert state.count_today == 1
        assert state.day == "2026-03-11"

    @pytest.mark.asyncio
    async def test_daily_cap_checked_before_cooldown(self) -> None:
        clock = FakeClock()
        guard = _guard(clock, cooldown_seconds=600, max_per_day=1)
        await guard.check_and_record(KEY)

        clock.advance(5)
        with pytest.raises(ThrottledError) as exc_info:
            await guard.check_and_record(KEY)

        assert exc_info.value.reason == "daily_cap"

    @pytest.mark.asyncio
    async def test_keys_are_independent(self) -> None:
        clock = FakeClock()
        guard = _guard(clock)
        await guard.check_and_record("acct-1")
        assert await guard.check_and_record("acct-2") is not None

    @pytest.mark.asyncio
    async def test_check_alone_does_not_consume_quota(self) -> None:
        """check só decide; a cota é consumida em record."""
        clock = FakeClock()
        store = MemoryThrottleStore()
        guard = _guard(clock, store)

        pending = await guard.check(KEY)
        assert await store.get(KEY) is None
        again = await guard.check(KEY)

        assert pending == again
        await guard.record(KEY, pending)
        assert await store.get(KEY) == pending
        with pytest.raises(ThrottledError):
            await guard.check(KEY)

    @pytest.mark.asyncio
    async def test_disabled_guard_never_touches_store(self) -> None:
        clock = FakeClock()
        store = MemoryThrottleStore()
        guard = _guard(clock, store, enabled=False)

        for _ in range(10):
            assert await guard.check_and_record(KEY) is None

        assert await store.get(KEY) is None


class TestThrottleHelpers:
    def test_seconds_until_next_utc_day(self) -> None:
        now = datetime(2026, 3, 10, 23, 59, 30, tzinfo=UTC)
        assert seconds_until_next_utc_day(now) == 30

    def test_seconds_until_next_utc_day_is_at_least_one(self) -> None:
        now = datetime(2026, 3, 10, 23, 59, 59, 999999, tzinfo=UTC)
        assert seconds_until_next_utc_day(now) == 1

    def test_state_ttl_outlives_one_day(self) -> None:
        assert STATE_TTL_SECONDS > 24 * 3600

    def test_throttled_error_retry_after_floor(self) -> None:
        assert ThrottledError("cooldown", 0).retry_after == 1

    def test_state_roundtrip_dict(self) -> None:
        state = ThrottleState(last_at=datetime(2026, 3, 10, tzinfo=UTC), count_today=2, day="2026-03-10")
        assert ThrottleState.model_validate(state.to_dict()) == state
