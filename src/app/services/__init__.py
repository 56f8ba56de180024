"""Serviços de aplicação.

Unidades reutilizáveis de orquestração (sem IO direto).
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.canonical import CanonicalUpsertEngine, canonical_key
from app.services.identity import derive_support_id, normalize_email, resolve_account_id
from app.services.notification import NotificationDispatcher, NotificationOutcome
from app.services.projection import ProjectionAdapter, ProjectionOutcome
from app.services.receipt_ledger import ReceiptLedger
from app.services.throttle import ThrottleGuard

__all__ = [
    "CanonicalUpsertEngine",
    "NotificationDispatcher",
    "NotificationOutcome",
    "ProjectionAdapter",
    "ProjectionOutcome",
    "ReceiptLedger",
    "ThrottleGuard",
    "canonical_key",
    "derive_support_id",
    "normalize_email",
    "resolve_account_id",
]
