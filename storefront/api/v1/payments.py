# ==============================================================================
# PAYMENTS ENDPOINTS - Stripe Checkout Routes
# ==============================================================================
# Direct payment intents, hosted checkout sessions, payment confirmation
# and the supported payment methods
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, status

from storefront.api.dependencies import CurrentUser, PaymentServiceDep
from storefront.api.v1.orders import mount_order_routes
from storefront.api.v1.webhooks import receive_stripe_event
from storefront.core.constants import SuccessMessages
from storefront.schemas.base import APIResponse
from storefront.schemas.payment import (
    CheckoutSessionCreate,
    CheckoutSessionResponse,
    ConfirmPaymentRequest,
    PaymentIntentCreate,
    PaymentIntentResponse,
    PaymentMethodsResponse,
)
from storefront.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post(
    "/create-payment-intent",
    response_model=APIResponse[PaymentIntentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create payment intent",
    description="Open a payment intent for the given items; the order is recorded by the webhook.",
)
async def create_payment_intent(
    schema: PaymentIntentCreate,
    user: CurrentUser,
    service: PaymentServiceDep,
) -> APIResponse[PaymentIntentResponse]:
    intent = await service.create_payment_intent(user, schema.items)
    return APIResponse.ok(data=intent)


@router.post(
    "/create-checkout-session",
    response_model=APIResponse[CheckoutSessionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create hosted checkout session",
)
async def create_checkout_session(
    schema: CheckoutSessionCreate,
    user: CurrentUser,
    service: PaymentServiceDep,
) -> APIResponse[CheckoutSessionResponse]:
    session = await service.create_checkout_session(user, schema)
    return APIResponse.ok(data=session)


@router.post(
    "/confirm-payment",
    response_model=APIResponse[Dict[str, Any]],
    summary="Confirm payment",
    description="Reconcile an order with the current state of its payment intent.",
)
async def confirm_payment(
    schema: ConfirmPaymentRequest,
    user: CurrentUser,
    service: PaymentServiceDep,
) -> APIResponse[Dict[str, Any]]:
    result = await service.confirm_payment(user, schema.payment_intent_id, schema.order_id)
    message = SuccessMessages.PAYMENT_CONFIRMED if result["status"] == "succeeded" else None
    return APIResponse.ok(data=result, message=message)


@router.get(
    "/methods",
    response_model=APIResponse[PaymentMethodsResponse],
    summary="Supported payment methods",
)
async def payment_methods() -> APIResponse[PaymentMethodsResponse]:
    return APIResponse.ok(data=PaymentService.supported_methods())


# Order creation and history are also reachable under /payments
mount_order_routes(router, "/create-order", "/orders")

router.add_api_route(
    "/webhook",
    receive_stripe_event,
    methods=["POST"],
    summary="Stripe webhook",
    include_in_schema=False,
)
