"""Tracker de execução (projeção best-effort dos documentos canônicos)."""

from .client import TrackerHttpClient
from .payloads import build_task_description, build_task_name, build_task_tags

__all__ = [
    "TrackerHttpClient",
    "build_task_description",
    "build_task_name",
    "build_task_tags",
]
