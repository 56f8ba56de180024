"""Settings de infraestrutura."""

from __future__ import annotations

from config.settings.infra.firestore import FirestoreSettings

__all__ = ["FirestoreSettings"]
