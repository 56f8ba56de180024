"""Endpoint de webhook do Stripe.

A assinatura `stripe-signature` cobre `"{t}.{corpo}"`; timestamps fora da
janela configurada são rejeitados como replay.
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
    verify_stripe_signature,
)
from api.normalizers import normalize_stripe_webhook
from api.normalizers.common import clean_str, payload_event_id
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
async def receive_stripe_webhook(request: Request) -> JSONResponse:
    """Recebe eventos de checkout e reembolso do Stripe."""
    with request_scope(request, "stripe"):
        container = get_container(request)
        settings = container.settings.webhooks
        raw_body = await request.body()
        signature = verify_stripe_signature(
            raw_body,
            request.headers,
            settings.stripe_secrets,
            tolerance_seconds=settings.stripe_tolerance_seconds,
        )
        try:
            payload = parse_webhook_request(raw_body, signature)
        except MissingSecretError:
            logger.error("webhook_secret_missing", extra={"provider": "stripe"})
            return error_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "missing_secret",
                "Missing STRIPE_WEBHOOK_SECRET",
            )
        except InvalidSignatureError as exc:
            logger.warning(
                "webhook_signature_invalid",
                extra={"provider": "stripe", "reason": exc.reason},
            )
            return error_response(status.HTTP_401_UNAUTHORIZED, exc.code, exc.reason)
        except InvalidJsonError as exc:
            logger.warning("webhook_invalid_json", extra={"provider": "stripe"})
            return error_response(status.HTTP_400_BAD_REQUEST, "invalid_json", str(exc))

        try:
            event = normalize_stripe_webhook(payload)
        except ValidationError as exc:
            return validation_response(exc)

        if event is None:
            event_id = clean_str(payload.get("id")) or payload_event_id(raw_body)
            return result_response(ignored_result(event_id))
        return await run_ingest(container, event, raw_body)
