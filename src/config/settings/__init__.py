"""Agregador de settings do intake-core.

Cada domínio carrega seu dataclass de variáveis de ambiente; `load_settings()`
monta um único `AppSettings` no startup, que é passado por referência ao
pipeline. Nenhum componente lê o ambiente depois do bootstrap.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from config.settings.base import (
    BaseSettings,
    Environment,
    StoreBackend,
    StoreSettings,
    ThrottleBackend,
)
from config.settings.base.core import load_base_settings
from config.settings.base.stores import load_store_settings
from config.settings.infra import FirestoreSettings
from config.settings.infra.firestore import load_firestore_settings
from config.settings.mail import MailSettings, load_mail_settings
from config.settings.throttle import ThrottleSettings, load_throttle_settings
from config.settings.tracker import TrackerSettings, load_tracker_settings
from config.settings.webhooks import WebhookSettings, load_webhook_settings


@dataclass(frozen=True)
class AppSettings:
    """Configuração completa e imutável do serviço."""

    base: BaseSettings = field(default_factory=BaseSettings)
    stores: StoreSettings = field(default_factory=StoreSettings)
    firestore: FirestoreSettings = field(default_factory=FirestoreSettings)
    webhooks: WebhookSettings = field(default_factory=WebhookSettings)
    throttle: ThrottleSettings = field(default_factory=ThrottleSettings)
    tracker: TrackerSettings = field(default_factory=TrackerSettings)
    mail: MailSettings = field(default_factory=MailSettings)

    def validate(self) -> list[str]:
        """Agrega erros de validação de todos os domínios, prefixados."""
        errors: list[str] = []
        errors.extend(f"base: {e}" for e in self.base.validate())
        errors.extend(f"stores: {e}" for e in self.stores.validate(self.base))
        if "firestore" in (self.stores.backend, self.stores.throttle_backend):
            errors.extend(
                f"firestore: {e}" for e in self.firestore.validate(self.base.gcp_project)
            )
        errors.extend(f"webhooks: {e}" for e in self.webhooks.validate())
        errors.extend(f"throttle: {e}" for e in self.throttle.validate())
        errors.extend(f"tracker: {e}" for e in self.tracker.validate())
        errors.extend(f"mail: {e}" for e in self.mail.validate())
        return errors


def load_settings() -> AppSettings:
    """Carrega todas as settings do ambiente (sem cache)."""
    return AppSettings(
        base=load_base_settings(),
        stores=load_store_settings(),
        firestore=load_firestore_settings(),
        webhooks=load_webhook_settings(),
        throttle=load_throttle_settings(),
        tracker=load_tracker_settings(),
        mail=load_mail_settings(),
    )


__all__ = [
    "AppSettings",
    "BaseSettings",
    "Environment",
    "FirestoreSettings",
    "MailSettings",
    "StoreBackend",
    "StoreSettings",
    "ThrottleBackend",
    "ThrottleSettings",
    "TrackerSettings",
    "WebhookSettings",
    "load_settings",
]
