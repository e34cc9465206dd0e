# ==============================================================================
# WEBHOOK ENDPOINTS - Stripe Event Delivery
# ==============================================================================
# Raw-body endpoint; the signature is checked before anything is parsed
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, Request

from storefront.api.dependencies import WebhookServiceDep

router = APIRouter(prefix="/webhook", tags=["Webhooks"])


async def receive_stripe_event(
    request: Request,
    service: WebhookServiceDep,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
) -> Dict[str, Any]:
    """
    Verify and apply one Stripe event.

    Returns ``{"received": true}``; replays of an already processed
    event also carry ``"duplicate": true``.
    """
    payload = await request.body()
    return await service.process(payload, stripe_signature)


router.add_api_route(
    "/stripe",
    receive_stripe_event,
    methods=["POST"],
    summary="Stripe webhook",
    include_in_schema=False,
)
