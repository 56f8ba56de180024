"""Router dos webhooks — agrega os provedores assinados."""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.webhooks.cal import router as cal_router
from api.routes.webhooks.stripe import router as stripe_router

router = APIRouter()

router.include_router(cal_router, prefix="/cal")
router.include_router(stripe_router, prefix="/stripe")
