"""Merge determinístico de documentos canônicos com as mudanças de um evento.

Regras:
- Campos que o evento é dono sobrescrevem o valor atual.
- Valores vazios (None, "", [], {}) nunca apagam valor existente.
- `metadata` é mesclado chave a chave; `active_orders` é uma união ordenada.
- `lifecycle_state` de pagamento (customer, payment_failed, refunded) só é
  substituído por outro estado de pagamento; etapas de formulário e eventos de
  agenda que chegam depois não rebaixam a Account.
- Campos não relacionados ao evento são preservados.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from app.domain.account import Account
from app.domain.events import LifecycleState
from app.domain.order import Order
from app.domain.support_ticket import SupportTicket
from app.services.identity import normalize_email

if TYPE_CHECKING:
    from datetime import datetime

    from app.domain.events import NormalizedEvent, OrderChanges, SupportChanges
    from app.domain.trace import ProjectionTrace


PAYMENT_LIFECYCLE_STATES: frozenset[str] = frozenset({
    LifecycleState.CUSTOMER,
    LifecycleState.PAYMENT_FAILED,
    LifecycleState.REFUNDED,
})


def _is_empty_value(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def merge_metadata(existing: dict[str, Any] | None, incoming: dict[str, Any]) -> dict[str, Any]:
    merged = dict(existing or {})
    for key, value in incoming.items():
        if not _is_empty_value(value):
            merged[key] = value
    return merged


def resolve_lifecycle(current: str | None, incoming: LifecycleState) -> str:
    """Estado resultante; estado de pagamento só cede para outro de pagamento."""
    if current in PAYMENT_LIFECYCLE_STATES and incoming not in PAYMENT_LIFECYCLE_STATES:
        return current
    return incoming.value


def union_preserving_order(existing: list[str] | None, extra: list[str]) -> list[str]:
    result = list(existing or [])
    for item in extra:
        if item and item not in result:
            result.append(item)
    return result


def _set_if_present(doc: dict[str, Any], field: str, value: Any) -> None:
    if not _is_empty_value(value):
        doc[field] = value


def merge_account(
    existing: dict[str, Any] | None,
    account_id: str,
    event: NormalizedEvent,
    now: datetime,
    order_id: str | None = None,
) -> dict[str, Any]:
    """Documento de Account resultante (forma Firestore).

    `order_id` é o id já resolvido da order do evento (default: o token do evento).
    """
    doc = copy.deepcopy(existing) if existing else {
        "account_id": account_id,
        "primary_email": normalize_email(event.identity.email),
        "created_at": now,
    }
    _set_if_present(doc, "first_name", event.identity.first_name)
    _set_if_present(doc, "last_name", event.identity.last_name)
    if event.account.lifecycle_state is not None:
        doc["lifecycle_state"] = resolve_lifecycle(
            doc.get("lifecycle_state"), event.account.lifecycle_state
        )
    doc["metadata"] = merge_metadata(doc.get("metadata"), event.account.metadata)
    if event.order is not None:
        doc["active_orders"] = union_preserving_order(
            doc.get("active_orders"), [order_id or event.order.order_id]
        )
    doc["updated_at"] = now
    return Account.model_validate(doc).to_firestore_dict()


def merge_order(
    existing: dict[str, Any] | None,
    changes: OrderChanges,
    account_id: str,
    now: datetime,
    order_id: str | None = None,
) -> dict[str, Any]:
    """Documento de Order resultante; o account_id original é preservado."""
    doc = copy.deepcopy(existing) if existing else {
        "order_id": order_id or changes.order_id,
        "account_id": account_id,
        "created_at": now,
    }
    _set_if_present(doc, "status", changes.status)
    # False é valor válido em step_booleans (passo desmarcado)
    doc["step_booleans"] = {**doc.get("step_booleans", {}), **changes.steps}
    _set_if_present(doc, "plan", changes.plan)
    _set_if_present(doc, "amount_total", changes.amount_total)
    _set_if_present(doc, "currency", changes.currency)
    doc["metadata"] = merge_metadata(doc.get("metadata"), changes.metadata)
    doc["updated_at"] = now
    return Order.model_validate(doc).to_firestore_dict()


def merge_payment_link(
    existing: dict[str, Any] | None,
    payment_ref: str,
    order_id: str,
    now: datetime,
) -> dict[str, Any]:
    """Vínculo payment_ref → order; o primeiro vínculo gravado prevalece."""
    if existing:
        return copy.deepcopy(existing)
    return {"payment_ref": payment_ref, "order_id": order_id, "created_at": now}


def merge_support(
    existing: dict[str, Any] | None,
    support_id: str,
    changes: SupportChanges,
    account_id: str,
    now: datetime,
) -> dict[str, Any]:
    """Ticket criado uma vez; reprocessamento só completa campos vazios."""
    if existing:
        doc = copy.deepcopy(existing)
        doc["metadata"] = merge_metadata(doc.get("metadata"), changes.metadata)
    else:
        doc = {
            "support_id": support_id,
            "account_id": account_id,
            "subject": changes.subject,
            "message": changes.message,
            "category": changes.category,
            "order_id": changes.order_id,
            "metadata": dict(changes.metadata),
            "created_at": now,
        }
    doc["updated_at"] = now
    return SupportTicket.model_validate(doc).to_firestore_dict()


def attach_projection_fields(
    existing: dict[str, Any],
    task_id: str,
    trace: ProjectionTrace,
) -> dict[str, Any]:
    """Grava só o ponteiro do tracker; o resto do documento fica intacto."""
    doc = copy.deepcopy(existing)
    doc["external_task_ref"] = task_id
    doc["projection_trace"] = trace.model_dump(mode="json")
    return doc
