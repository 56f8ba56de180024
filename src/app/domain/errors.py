"""Taxonomia de erros do pipeline de ingestão.

- AuthenticationError: assinatura ausente/inválida → rejeita antes de qualquer escrita
- ValidationError: campos ausentes/inválidos → rejeita com lista completa, sem escrita
- ThrottledError: cooldown ou teto diário → rejeita com retry hint, sem escrita
- DependencyError: falha de store/projeção/notificação → sempre após o pre-write
- ReceiptInProgressError: entrega concorrente do mesmo evento → sem efeitos colaterais
"""

from __future__ import annotations

from dataclasses import dataclass

from fsm.types import InvalidReceiptTransitionError


class IntakeError(Exception):
    """Base dos erros do pipeline."""

    code: str = "intake_error"


class AuthenticationError(IntakeError):
    """Assinatura do webhook ausente ou inválida."""

    code = "authentication_failed"


@dataclass(frozen=True, slots=True)
class FieldError:
    """Falha de um único campo na normalização."""

    field: str
    code: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "code": self.code, "message": self.message}


class ValidationError(IntakeError):
    """Payload rejeitado; lista todos os campos com problema (não só o primeiro)."""

    code = "validation_failed"

    def __init__(self, errors: list[FieldError]) -> None:
        fields = ", ".join(sorted({e.field for e in errors}))
        super().__init__(f"Payload inválido: {fields}")
        self.errors = list(errors)

    @property
    def fields(self) -> list[str]:
        """Campos rejeitados, na ordem em que foram detectados."""
        return [e.field for e in self.errors]


class ThrottledError(IntakeError):
    """Submissão bloqueada pelo throttle.

    Attributes:
        reason: "cooldown" ou "daily_cap"
        retry_after: Segundos até a liberação (sempre >= 1)
    """

    code = "throttled"

    def __init__(self, reason: str, retry_after: int) -> None:
        super().__init__(f"Submissão bloqueada ({reason}); tente em {retry_after}s")
        self.reason = reason
        self.retry_after = max(1, int(retry_after))


class DependencyError(IntakeError):
    """Falha de dependência externa após o pre-write do receipt.

    Attributes:
        stage: Etapa que falhou (canonical, ledger)
        detail: Descrição curta, sem PII
    """

    code = "dependency_failed"

    def __init__(self, stage: str, detail: str) -> None:
        super().__init__(f"{stage}: {detail}")
        self.stage = stage
        self.detail = detail


class ReceiptAlreadyExistsError(IntakeError):
    """Pre-write encontrou receipt já gravado para a mesma chave."""

    code = "receipt_exists"


class WriteConflictError(IntakeError):
    """Escrita condicional rejeitada: o documento mudou desde a leitura."""

    code = "write_conflict"


class ReceiptNotFoundError(IntakeError, LookupError):
    """Atualização de receipt inexistente no ledger."""

    code = "receipt_not_found"


class ReceiptInProgressError(IntakeError):
    """Outra entrega do mesmo evento está em execução (lease ativo).

    Attributes:
        key: Chave lógica do receipt
        retry_after: Segundos até o lease expirar (sempre >= 1)
    """

    code = "in_progress"

    def __init__(self, key: str, retry_after: int) -> None:
        super().__init__(f"Evento em processamento: {key}")
        self.key = key
        self.retry_after = max(1, int(retry_after))


__all__ = [
    "AuthenticationError",
    "DependencyError",
    "FieldError",
    "IntakeError",
    "InvalidReceiptTransitionError",
    "ReceiptAlreadyExistsError",
    "ReceiptInProgressError",
    "ReceiptNotFoundError",
    "ThrottledError",
    "ValidationError",
    "WriteConflictError",
]
