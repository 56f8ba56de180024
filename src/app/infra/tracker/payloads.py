"""Montagem de nome/descrição das tarefas projetadas no tracker.

A descrição termina com um bloco de rastreio (ledger + documento canônico)
para que qualquer tarefa possa ser reconciliada com a origem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.events import EntityKind

_SKIPPED_FIELDS = frozenset({
    "projection_trace", "external_task_ref", "created_at", "updated_at", "metadata",
})


def build_task_name(kind: EntityKind, doc: dict[str, Any]) -> str:
    if kind == "support":
        return f"Suporte: {doc.get('subject', '')}".strip()
    if kind == "order":
        return f"Pedido {doc.get('order_id', '')} ({doc.get('status', 'open')})"
    name = " ".join(p for p in (doc.get("first_name"), doc.get("last_name")) if p)
    label = name or doc.get("primary_email", doc.get("account_id", ""))
    state = doc.get("lifecycle_state")
    return f"{label} ({state})" if state else str(label)


def _format_value(value: Any) -> str:
    if isinstance(value, dict):
        return ", ".join(f"{k}={v}" for k, v in sorted(value.items()))
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def build_task_description(
    kind: EntityKind,
    doc: dict[str, Any],
    *,
    ledger_key: str,
    canonical_key: str,
) -> str:
    lines = [f"## {kind}", ""]
    for field, value in doc.items():
        if field in _SKIPPED_FIELDS or value in (None, "", [], {}):
            continue
        lines.append(f"- **{field}**: {_format_value(value)}")
    metadata = doc.get("metadata") or {}
    if metadata:
        lines.extend(["", "### metadata", ""])
        lines.extend(f"- **{k}**: {_format_value(v)}" for k, v in sorted(metadata.items()))
    lines.extend([
        "",
        "---",
        f"ledger: `{ledger_key}`",
        f"canonical: `{canonical_key}`",
    ])
    return "\n".join(lines)


def build_task_tags(kind: EntityKind, source: str) -> list[str]:
    return [kind, f"source:{source}"]
