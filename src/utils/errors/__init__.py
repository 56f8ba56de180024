"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    ExternalServiceError,
    FirestoreUnavailableError,
    InfrastructureError,
    RedisConnectionError,
)

__all__ = [
    "ExternalServiceError",
    "FirestoreUnavailableError",
    "InfrastructureError",
    "RedisConnectionError",
]
