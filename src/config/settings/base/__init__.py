"""Agregador de settings base."""

from __future__ import annotations

from config.settings.base.core import BaseSettings, Environment
from config.settings.base.stores import StoreBackend, StoreSettings, ThrottleBackend

__all__ = [
    "BaseSettings",
    "Environment",
    "StoreBackend",
    "StoreSettings",
    "ThrottleBackend",
]
