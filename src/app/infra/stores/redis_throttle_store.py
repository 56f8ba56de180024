"""Redis Throttle Store — estado do throttle em Redis (Upstash compatível).

GET/SET simples de um blob JSON por chave, sem lock: duas requisições
simultâneas podem ler o mesmo estado e ambas passarem (race conhecida do
throttle, aceita).

Contrato de Keys:
    As keys são ids derivados (account_id), nunca e-mails.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from app.domain.throttle_state import ThrottleState
from app.protocols.throttle_store import ThrottleStoreProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Prefixo para namespace de throttle
THROTTLE_PREFIX = "throttle:"


class RedisThrottleStore(ThrottleStoreProtocol):
    """Store de throttle usando Redis assíncrono.

    Args:
        async_redis_client: Cliente Redis assíncrono
    """

    def __init__(self, async_redis_client: AsyncRedis) -> None:
        self._redis = async_redis_client

    def _key(self, key: str) -> str:
        return f"{THROTTLE_PREFIX}{key}"

    async def get(self, key: str) -> ThrottleState | None:
        try:
            raw = await self._redis.get(self._key(key))
        except Exception as exc:
            raise RedisConnectionError("Falha ao ler throttle no Redis") from exc
        if raw is None:
            return None
        try:
            return ThrottleState.model_validate(json.loads(raw))
        except (ValueError, TypeError):
            # Blob corrompido equivale a chave nova
            logger.warning("throttle_state_corrupted", extra={"key": key[:8] + "..."})
            return None

    async def put(self, key: str, state: ThrottleState, ttl_seconds: int) -> None:
        try:
            await self._redis.set(self._key(key), json.dumps(state.to_dict()), ex=ttl_seconds)
        except Exception as exc:
            raise RedisConnectionError("Falha ao gravar throttle no Redis") from exc
