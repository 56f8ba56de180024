"""Endpoint de submissão de formulários (intake, order_step, support).

Aceita application/x-www-form-urlencoded ou JSON. Submissões passam pelo
throttle por identidade antes de qualquer escrita.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from api.normalizers import normalize_form
from api.normalizers.form.contracts import FORM_CONTRACTS
from api.routes.responses import (
    error_response,
    get_container,
    request_scope,
    run_ingest,
    validation_response,
)
from app.domain.errors import ValidationError

router = APIRouter()


@router.post("/{form_kind}", response_model=None)
async def submit_form(form_kind: str, request: Request) -> JSONResponse:
    """Normaliza e ingere uma submissão de formulário."""
    with request_scope(request, "form"):
        if form_kind not in FORM_CONTRACTS:
            return error_response(
                status.HTTP_404_NOT_FOUND,
                "unknown_form",
                f"Formulário desconhecido: {form_kind}",
            )
        raw_body = await request.body()
        try:
            event = normalize_form(form_kind, raw_body, request.headers.get("content-type"))
        except ValidationError as exc:
            return validation_response(exc)
        return await run_ingest(get_container(request), event, raw_body)
