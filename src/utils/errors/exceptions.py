"""Exceções de infraestrutura para falhas de stores e clientes externos."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura (store, tracker, provedor de e-mail)."""


class RedisConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar Redis."""


class FirestoreUnavailableError(InfrastructureError):
    """Falha de indisponibilidade ao acessar Firestore."""


class ExternalServiceError(InfrastructureError):
    """Falha HTTP em serviço externo (tracker ou envio de e-mail).

    Attributes:
        service: Nome lógico do serviço (ex.: "tracker", "gmail")
        status_code: Status HTTP quando houve resposta
    """

    def __init__(self, message: str, *, service: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code
