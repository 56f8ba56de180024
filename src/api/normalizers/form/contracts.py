"""Contratos Pydantic por tipo de formulário (campos já canônicos)."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from app.domain.events import INTAKE_STEPS

from ..common import is_valid_email

_ORDER_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{2,63}$")
_STEP_SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_]{0,63}$")

SupportCategory = Literal["general", "billing", "technical", "account"]


class _FormContract(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, frozen=True)

    email: str
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if not is_valid_email(value):
            raise PydanticCustomError("invalid_email", "E-mail em formato inválido")
        return value


class IntakeForm(_FormContract):
    """Formulário de intake: cria/atualiza a Account e seu lifecycle."""

    first_name: str = Field(max_length=100)
    step: str
    company: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=40)
    website: str | None = Field(default=None, max_length=300)
    budget: str | None = Field(default=None, max_length=100)
    timeline: str | None = Field(default=None, max_length=100)
    message: str | None = Field(default=None, max_length=5000)
    consent: bool = False
    newsletter: bool = False

    @field_validator("step")
    @classmethod
    def _check_step(cls, value: str) -> str:
        step = value.lower()
        if step not in INTAKE_STEPS:
            raise PydanticCustomError(
                "invalid_step",
                "Passo deve ser um de: {allowed}",
                {"allowed": ", ".join(INTAKE_STEPS)},
            )
        return step


class OrderStepForm(_FormContract):
    """Marca (ou desmarca) um passo de progresso de um pedido."""

    order_id: str
    step: str
    completed: bool = True
    plan: str | None = Field(default=None, max_length=100)
    message: str | None = Field(default=None, max_length=5000)

    @field_validator("order_id")
    @classmethod
    def _check_order_id(cls, value: str) -> str:
        if not _ORDER_ID_PATTERN.match(value):
            raise PydanticCustomError("invalid_order_id", "Código do pedido inválido")
        return value

    @field_validator("step")
    @classmethod
    def _check_step_slug(cls, value: str) -> str:
        slug = re.sub(r"[\s\-]+", "_", value.lower())
        if not _STEP_SLUG_PATTERN.match(slug):
            raise PydanticCustomError("invalid_step", "Passo deve ser um identificador simples")
        return slug


class SupportForm(_FormContract):
    """Abre um ticket de suporte."""

    subject: str = Field(max_length=200)
    message: str = Field(max_length=5000)
    category: SupportCategory = "general"
    order_id: str | None = None


FORM_CONTRACTS: dict[str, type[_FormContract]] = {
    "intake": IntakeForm,
    "order_step": OrderStepForm,
    "support": SupportForm,
}

BOOLEAN_FIELDS: frozenset[str] = frozenset({"consent", "newsletter", "completed"})
