"""Factories de clientes externos — Redis, Firestore e HTTP.

Recebem os valores já carregados em AppSettings; nenhum lê o ambiente.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Redis Client Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_async_redis_client(redis_url: str) -> AsyncRedis:
    """Cria cliente Redis assíncrono.

    Raises:
        ValueError: Se REDIS_URL não configurado
    """
    from redis.asyncio import Redis as AsyncRedis

    if not redis_url:
        msg = "REDIS_URL não configurado"
        raise ValueError(msg)

    client = AsyncRedis.from_url(
        redis_url,
        decode_responses=False,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
    )
    logger.info("async_redis_client_created")
    return client


# ──────────────────────────────────────────────────────────────────────────────
# Firestore Client Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_firestore_client(project_id: str) -> FirestoreClient:
    """Cria cliente Firestore para o projeto informado."""
    from google.cloud import firestore

    client = firestore.Client(project=project_id or None)
    logger.info("firestore_client_created", extra={"project": project_id})
    return client


# ──────────────────────────────────────────────────────────────────────────────
# HTTP Client Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_http_client(timeout_seconds: float) -> httpx.AsyncClient:
    """Cliente HTTP async compartilhado (tracker)."""
    return httpx.AsyncClient(timeout=timeout_seconds)
