"""Normalizer de formulários (url-encoded ou JSON) para NormalizedEvent.

Etapas:
1. Decodifica o corpo de acordo com o content-type
2. Resolve rótulos pela tabela de aliases (descarta ruído de transporte)
3. Apara strings e converte checkboxes para bool
4. Valida contra o contrato do tipo de formulário

Todas as falhas (rótulos desconhecidos, campos ausentes, valores inválidos)
são acumuladas e devolvidas juntas em um único ValidationError.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any
from urllib.parse import parse_qsl

from pydantic import ValidationError as PydanticValidationError

from app.domain.errors import FieldError, ValidationError
from app.domain.events import (
    AccountChanges,
    IdentityFields,
    LifecycleState,
    NormalizedEvent,
    OrderChanges,
    SupportChanges,
)

from ..aliases import FORM_ALIAS_TABLE_VERSION, is_ignored_label, resolve_field
from ..common import resolve_form_event_id
from .contracts import BOOLEAN_FIELDS, FORM_CONTRACTS, IntakeForm, OrderStepForm, SupportForm

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"on", "true", "yes", "1", "checked", "y"})
_FALSE_VALUES = frozenset({"off", "false", "no", "0", "", "n"})

_INTAKE_METADATA_FIELDS = (
    "company", "phone", "website", "budget", "timeline", "message", "consent", "newsletter",
)


def decode_form_body(raw_body: bytes, content_type: str | None) -> dict[str, Any]:
    """Decodifica o corpo em um dict rótulo -> valor.

    Raises:
        ValidationError: content-type não suportado ou corpo malformado
    """
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    try:
        text = raw_body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError([FieldError("body", "invalid_encoding", "Corpo deve ser UTF-8")]) from exc

    if media_type == "application/x-www-form-urlencoded":
        # Rótulos repetidos: vale o último (checkbox com hidden fallback)
        return dict(parse_qsl(text, keep_blank_values=True))

    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            payload = json.loads(text or "{}")
        except json.JSONDecodeError as exc:
            raise ValidationError([FieldError("body", "invalid_json", "JSON inválido")]) from exc
        if not isinstance(payload, dict):
            raise ValidationError([FieldError("body", "invalid_json", "JSON deve ser um objeto")])
        return payload

    raise ValidationError([
        FieldError("body", "unsupported_content_type", f"Content-type não suportado: {media_type or 'vazio'}")
    ])


def _coerce_checkbox(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    return value


def _resolve_labels(fields: dict[str, Any]) -> tuple[dict[str, Any], list[FieldError]]:
    resolved: dict[str, Any] = {}
    errors: list[FieldError] = []
    for label, value in fields.items():
        if is_ignored_label(label):
            continue
        canonical = resolve_field(label)
        if canonical is None:
            errors.append(FieldError(label, "unknown_field", "Campo não reconhecido"))
            continue
        if isinstance(value, dict | list):
            errors.append(FieldError(canonical, "invalid_type", "Valor deve ser escalar"))
            continue
        if isinstance(value, int | float) and not isinstance(value, bool):
            value = str(value)
        resolved[canonical] = value
    return resolved, errors


def _clean_values(resolved: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for name, value in resolved.items():
        if name in BOOLEAN_FIELDS:
            value = _coerce_checkbox(value)
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        if value is None:
            continue
        cleaned[name] = value
    return cleaned


def _contract_errors(exc: PydanticValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    for item in exc.errors(include_url=False):
        field = ".".join(str(part) for part in item["loc"]) or "body"
        error_type = item["type"]
        if error_type == "missing":
            errors.append(FieldError(field, "missing", "Campo obrigatório"))
        elif error_type == "extra_forbidden":
            errors.append(FieldError(field, "unknown_field", "Campo não aceito neste formulário"))
        else:
            errors.append(FieldError(field, error_type, item["msg"]))
    return errors


def _build_event(
    form_kind: str,
    contract: Any,
    event_id: str,
    generated: bool,
    received_at: datetime,
) -> NormalizedEvent:
    identity = IdentityFields(
        email=contract.email,
        first_name=contract.first_name,
        last_name=contract.last_name,
    )
    account = AccountChanges()
    order = None
    support = None

    if isinstance(contract, IntakeForm):
        metadata = {
            name: getattr(contract, name)
            for name in _INTAKE_METADATA_FIELDS
            if getattr(contract, name) not in (None, False)
        }
        account = AccountChanges(lifecycle_state=LifecycleState(contract.step), metadata=metadata)
    elif isinstance(contract, OrderStepForm):
        order = OrderChanges(
            order_id=contract.order_id,
            steps={contract.step: contract.completed},
            plan=contract.plan,
            metadata={"last_note": contract.message} if contract.message else {},
        )
    elif isinstance(contract, SupportForm):
        support = SupportChanges(
            subject=contract.subject,
            message=contract.message,
            category=contract.category,
            order_id=contract.order_id,
        )

    return NormalizedEvent(
        source="form",
        event_type=f"form.{form_kind}",
        event_id=event_id,
        event_id_generated=generated,
        occurred_at=received_at,
        identity=identity,
        account=account,
        order=order,
        support=support,
        throttled=True,
        alias_version=FORM_ALIAS_TABLE_VERSION,
    )


def normalize_form(
    form_kind: str,
    raw_body: bytes,
    content_type: str | None,
    *,
    received_at: datetime | None = None,
) -> NormalizedEvent:
    """Normaliza uma submissão de formulário.

    Args:
        form_kind: intake | order_step | support
        raw_body: Corpo bruto do request
        content_type: Header content-type
        received_at: Momento do recebimento (default: agora, UTC)

    Raises:
        ValidationError: Com todos os campos problemáticos

    Returns:
        NormalizedEvent pronto para o pipeline
    """
    contract_cls = FORM_CONTRACTS.get(form_kind)
    if contract_cls is None:
        raise ValidationError([FieldError("form_kind", "unsupported_form", "Formulário desconhecido")])

    fields = decode_form_body(raw_body, content_type)
    resolved, errors = _resolve_labels(fields)
    event_id, generated = resolve_form_event_id(resolved.pop("event_id", None))
    cleaned = _clean_values(resolved)

    contract = None
    try:
        contract = contract_cls.model_validate(cleaned)
    except PydanticValidationError as exc:
        errors.extend(_contract_errors(exc))

    if errors or contract is None:
        logger.info(
            "form_validation_failed",
            extra={"form_kind": form_kind, "fields": [e.field for e in errors]},
        )
        raise ValidationError(errors)

    return _build_event(
        form_kind,
        contract,
        event_id,
        generated,
        received_at or datetime.now(UTC),
    )
