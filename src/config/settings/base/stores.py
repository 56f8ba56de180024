"""Settings de backends de persistência.

Define onde ficam receipts, documentos canônicos e estado do throttle.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

StoreBackend = Literal["memory", "firestore"]
ThrottleBackend = Literal["memory", "redis", "firestore"]


@dataclass(frozen=True)
class StoreSettings:
    """Backends de persistência.

    Attributes:
        backend: Backend do ledger e do store canônico (memory|firestore)
        throttle_backend: Backend do estado do throttle (memory|redis|firestore)
        receipt_lease_seconds: Lease de uma execução PENDING antes de outra entrega assumir
    """

    backend: StoreBackend = "memory"
    throttle_backend: ThrottleBackend = "memory"
    receipt_lease_seconds: int = 120

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida backends contra o ambiente.

        Args:
            base: BaseSettings para verificar ambiente e conexões.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend == "memory" and base.is_strict:
            errors.append("STORE_BACKEND=memory proibido em staging/production")

        if self.throttle_backend == "memory" and base.is_strict:
            errors.append("THROTTLE_BACKEND=memory proibido em staging/production")

        if self.throttle_backend == "redis" and not base.redis_url:
            errors.append("THROTTLE_BACKEND=redis requer REDIS_URL configurado")

        if "firestore" in (self.backend, self.throttle_backend) and not base.gcp_project:
            errors.append("Backend firestore requer GCP_PROJECT configurado")

        if self.receipt_lease_seconds <= 0:
            errors.append("RECEIPT_LEASE_SECONDS deve ser > 0")

        return errors


def load_store_settings() -> StoreSettings:
    """Carrega StoreSettings de variáveis de ambiente."""
    backend_str = os.getenv("STORE_BACKEND", "memory").lower()
    backend: StoreBackend = "firestore" if backend_str == "firestore" else "memory"

    throttle_str = os.getenv("THROTTLE_BACKEND", backend).lower()
    throttle_backend: ThrottleBackend = (
        throttle_str if throttle_str in ("memory", "redis", "firestore") else "memory"
    )
    return StoreSettings(
        backend=backend,
        throttle_backend=throttle_backend,
        receipt_lease_seconds=int(os.getenv("RECEIPT_LEASE_SECONDS", "120")),
    )
