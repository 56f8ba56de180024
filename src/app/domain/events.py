"""Evento normalizado — forma canônica de toda entrada do pipeline.

Normalizers da camada API convertem forms/webhooks neste modelo; daqui em
diante nenhum componente conhece rótulos de campo externos.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - usado em runtime pelo schema do Pydantic
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

EventSource = Literal["form", "cal", "stripe"]
# payment_ref: vínculo referência de pagamento → order (não é projetado)
EntityKind = Literal["account", "order", "support", "payment_ref"]


class LifecycleState(StrEnum):
    """Estados de ciclo de vida de uma Account."""

    # Passos do formulário de intake
    INQUIRY = "inquiry"
    DISCOVERY = "discovery"
    PROPOSAL = "proposal"
    ONBOARDING = "onboarding"
    ACTIVE = "active"

    # Agenda (Cal.com)
    CALL_SCHEDULED = "call_scheduled"
    CALL_RESCHEDULED = "call_rescheduled"
    CALL_CANCELLED = "call_cancelled"

    # Pagamento (Stripe)
    CUSTOMER = "customer"
    PAYMENT_FAILED = "payment_failed"
    REFUNDED = "refunded"


INTAKE_STEPS: tuple[str, ...] = (
    LifecycleState.INQUIRY,
    LifecycleState.DISCOVERY,
    LifecycleState.PROPOSAL,
    LifecycleState.ONBOARDING,
    LifecycleState.ACTIVE,
)


class IdentityFields(BaseModel):
    """Chave natural (e-mail) e nome informados pelo evento."""

    model_config = ConfigDict(frozen=True)

    email: str
    first_name: str | None = None
    last_name: str | None = None


class AccountChanges(BaseModel):
    """Campos de Account que o evento é dono."""

    model_config = ConfigDict(frozen=True)

    lifecycle_state: LifecycleState | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class OrderChanges(BaseModel):
    """Campos de Order que o evento é dono.

    `payment_ref` é a referência do provedor de pagamento (ex: payment_intent do
    Stripe). Evento com token próprio registra o vínculo; evento cujo `order_id`
    é só fallback (`order_id_is_fallback`) resolve a order pelo vínculo.
    """

    model_config = ConfigDict(frozen=True)

    order_id: str
    status: str | None = None
    steps: dict[str, bool] = Field(default_factory=dict)
    plan: str | None = None
    amount_total: int | None = None
    currency: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    payment_ref: str | None = None
    order_id_is_fallback: bool = False


class SupportChanges(BaseModel):
    """Conteúdo de um ticket de suporte."""

    model_config = ConfigDict(frozen=True)

    subject: str
    message: str
    category: str = "general"
    order_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class NormalizedEvent(BaseModel):
    """Evento validado, pronto para o ledger e o store canônico.

    Attributes:
        source: Origem (form|cal|stripe)
        event_type: Tipo normalizado (ex: "form.intake", "booking.created")
        event_id: Chave de idempotência
        event_id_generated: True quando o id foi gerado pelo serviço
        occurred_at: Momento do evento segundo a origem (ou recebimento)
        identity: E-mail e nome
        account: Mudanças de Account
        order: Mudanças de Order (se houver)
        support: Ticket de suporte (se houver)
        throttled: Se o evento passa pelo throttle (submissões de usuário)
        alias_version: Versão da tabela de aliases usada (só forms)
    """

    model_config = ConfigDict(frozen=True)

    source: EventSource
    event_type: str
    event_id: str
    event_id_generated: bool = False
    occurred_at: datetime
    identity: IdentityFields
    account: AccountChanges = Field(default_factory=AccountChanges)
    order: OrderChanges | None = None
    support: SupportChanges | None = None
    throttled: bool = False
    alias_version: int | None = None

    @property
    def primary_kind(self) -> EntityKind:
        """Entidade principal do evento (a que é projetada no tracker)."""
        if self.support is not None:
            return "support"
        if self.order is not None:
            return "order"
        return "account"

    def to_receipt_dict(self) -> dict[str, Any]:
        """Forma serializável gravada como normalized_payload do receipt."""
        return self.model_dump(mode="json")
