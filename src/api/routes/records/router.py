"""Leitura dos documentos canônicos para a camada de apresentação.

Somente leitura; o tracker nunca é consultado aqui.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse

from api.routes.responses import error_response, get_container, json_response, request_scope

if TYPE_CHECKING:
    from pydantic import BaseModel

router = APIRouter()


def _record_response(kind: str, record: BaseModel | None, key: str) -> JSONResponse:
    if record is None:
        return error_response(
            status.HTTP_404_NOT_FOUND,
            "not_found",
            f"{kind} não encontrado",
            key=key,
        )
    return json_response(
        {"ok": True, "kind": kind, "record": record.model_dump(mode="json")},
        status.HTTP_200_OK,
    )


@router.get("/accounts", response_model=None)
async def get_account_by_email(request: Request, email: str = Query(default="")) -> JSONResponse:
    """Account pelo e-mail (resolvido para o id determinístico)."""
    with request_scope(request):
        if not email.strip():
            return error_response(
                status.HTTP_400_BAD_REQUEST,
                "validation_failed",
                "Parâmetro email obrigatório",
                errors=[{"field": "email", "code": "missing", "message": "Campo obrigatório"}],
            )
        account = await get_container(request).records.account_by_email(email)
        return _record_response("account", account, "email")


@router.get("/accounts/{account_id}", response_model=None)
async def get_account(account_id: str, request: Request) -> JSONResponse:
    with request_scope(request):
        account = await get_container(request).records.account(account_id)
        return _record_response("account", account, account_id)


@router.get("/orders/{order_id}", response_model=None)
async def get_order(order_id: str, request: Request) -> JSONResponse:
    with request_scope(request):
        order = await get_container(request).records.order(order_id)
        return _record_response("order", order, order_id)


@router.get("/support/{support_id}", response_model=None)
async def get_support(support_id: str, request: Request) -> JSONResponse:
    with request_scope(request):
        ticket = await get_container(request).records.support(support_id)
        return _record_response("support", ticket, support_id)
