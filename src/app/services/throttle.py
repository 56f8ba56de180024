"""Throttle de submissões por identidade (cooldown + teto diário).

Throttle aproximado, sem lock distribuído: duas requisições simultâneas da
mesma identidade podem ler o mesmo estado e ambas passarem antes de qualquer
uma persistir. Race conhecida e aceita (tolerância a abuso é leniente).

No pipeline `check` roda antes do pre-write do receipt e `record` só depois
dele: um pre-write que falha (503) não consome cooldown nem cota diária.
"""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from app.domain.errors import ThrottledError
from app.domain.throttle_state import ThrottleState
from app.observability import record_throttle_rejection

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.protocols.throttle_store import ThrottleStoreProtocol

logger = logging.getLogger(__name__)

# Estado precisa sobreviver ao dia UTC corrente
STATE_TTL_SECONDS = 2 * 24 * 3600


def _utcnow() -> datetime:
    return datetime.now(UTC)


def seconds_until_next_utc_day(now: datetime) -> int:
    next_day = datetime.combine(now.date() + timedelta(days=1), datetime.min.time(), tzinfo=UTC)
    return max(1, math.ceil((next_day - now).total_seconds()))


class ThrottleGuard:
    """Aplica cooldown e teto diário por chave de identidade.

    Args:
        store: Persistência do ThrottleState
        cooldown_seconds: Intervalo mínimo entre envios aceitos
        max_per_day: Envios aceitos por dia UTC
        clock: Fonte de tempo (injetável em testes)
        enabled: Se False, todo envio é aceito sem tocar o store
    """

    def __init__(
        self,
        store: ThrottleStoreProtocol,
        *,
        cooldown_seconds: int,
        max_per_day: int,
        clock: Callable[[], datetime] | None = None,
        enabled: bool = True,
    ) -> None:
        self._store = store
        self._cooldown = cooldown_seconds
        self._max_per_day = max_per_day
        self._clock = clock or _utcnow
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def check_and_record(self, identity_key: str) -> ThrottleState | None:
        """Verifica limites e, se liberado, registra o envio.

        Raises:
            ThrottledError: Teto diário atingido ou cooldown em curso

        Returns:
            Novo estado persistido (None se o throttle está desabilitado)
        """
        state = await self.check(identity_key)
        if state is not None:
            await self.record(identity_key, state)
        return state

    async def check(self, identity_key: str) -> ThrottleState | None:
        """Verifica limites sem gravar nada.

        Raises:
            ThrottledError: Teto diário atingido ou cooldown em curso

        Returns:
            Estado a gravar se o envio for aceito (None se desabilitado)
        """
        if not self._enabled:
            return None

        now = self._clock()
        today = now.astimezone(UTC).date().isoformat()
        state = await self._store.get(identity_key) or ThrottleState()
        count_today = state.count_today if state.day == today else 0

        if count_today >= self._max_per_day:
            self._reject("daily_cap", seconds_until_next_utc_day(now.astimezone(UTC)))

        if state.last_at is not None and self._cooldown > 0:
            elapsed = (now - state.last_at).total_seconds()
            if elapsed < self._cooldown:
                self._reject("cooldown", math.ceil(self._cooldown - elapsed))

        return ThrottleState(last_at=now, count_today=count_today + 1, day=today)

    async def record(self, identity_key: str, state: ThrottleState) -> None:
        """Consome a cota: grava o estado devolvido por `check`."""
        await self._store.put(identity_key, state, STATE_TTL_SECONDS)
        logger.debug("throttle_recorded", extra={"count_today": state.count_today})

    def _reject(self, reason: str, retry_after: int) -> None:
        record_throttle_rejection(reason, retry_after)
        raise ThrottledError(reason, retry_after)
