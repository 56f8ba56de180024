"""Endpoint de webhook do Cal.com.

Fluxo:
1. Lê o corpo bruto (a assinatura cobre os bytes exatos)
2. Valida x-cal-signature-256 contra os secrets configurados
3. Parseia o JSON e normaliza o booking
4. Tipos não suportados respondem 200 "ignored" sem escrita
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from api.connectors.webhooks import (
    InvalidJsonError,
    InvalidSignatureError,
    MissingSecretError,
    parse_webhook_request,
    verify_cal_signature,
)
from api.normalizers import normalize_cal_webhook
from api.normalizers.common import payload_event_id
from api.routes.responses import (
    error_response,
    get_container,
    request_scope,
    result_response,
    run_ingest,
    validation_response,
)
from app.domain.errors import ValidationError
from app.use_cases import ignored_result

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=None)
async def receive_cal_webhook(request: Request) -> JSONResponse:
    """Recebe eventos BOOKING_* do Cal.com."""
    with request_scope(request, "cal"):
        container = get_container(request)
        raw_body = await request.body()
        signature = verify_cal_signature(
            raw_body,
            request.headers,
            container.settings.webhooks.cal_secrets,
        )
        try:
            payload = parse_webhook_request(raw_body, signature)
        except MissingSecretError:
            logger.error("webhook_secret_missing", extra={"provider": "cal"})
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "missing_secret",
                "Missing CAL_WEBHOOK_SECRET",
            )
        except InvalidSignatureError as exc:
            logger.warning("webhook_signature_invalid", extra={"provider": "cal", "reason": exc.reason})
            return error_response(status.HTTP_401_UNAUTHORIZED, exc.code, exc.reason)
        except InvalidJsonError as exc:
            logger.warning("webhook_invalid_json", extra={"provider": "cal"})
            return error_response(status.HTTP_400_BAD_REQUEST, "invalid_json", str(exc))

        try:
            event = normalize_cal_webhook(payload, raw_body)
        except ValidationError as exc:
            return validation_response(exc)

        if event is None:
            return result_response(ignored_result(payload_event_id(raw_body)))
        return await run_ingest(container, event, raw_body)
