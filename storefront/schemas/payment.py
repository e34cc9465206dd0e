# ==============================================================================
# PAYMENT SCHEMAS - Stripe Checkout Flows
# ==============================================================================

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema
from storefront.schemas.order import PaymentMethod
from storefront.schemas.user import ShippingAddress


class CheckoutItem(BaseSchema):
    """Product and quantity; prices are always looked up server-side."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1, le=100)


class PaymentIntentCreate(BaseSchema):
    items: List[CheckoutItem] = Field(..., min_length=1)


class PaymentIntentResponse(BaseSchema):
    client_secret: Optional[str] = None
    payment_intent_id: str
    amount: float


class CheckoutSessionCreate(BaseSchema):
    """Hosted checkout request."""

    items: List[CheckoutItem] = Field(..., min_length=1)
    success_url: Optional[str] = Field(None, min_length=1, description="Defaults to the storefront success page")
    cancel_url: Optional[str] = Field(None, min_length=1, description="Defaults to the storefront cart")
    shipping_address: Optional[ShippingAddress] = None
    payment_method: PaymentMethod = "stripe"


class CheckoutSessionResponse(BaseSchema):
    session_id: str
    checkout_url: Optional[str] = None


class ConfirmPaymentRequest(BaseSchema):
    payment_intent_id: str = Field(..., min_length=1)
    order_id: Optional[str] = None


class PaymentMethodInfo(BaseSchema):
    id: str
    name: str
    type: str


class PaymentMethodsResponse(BaseSchema):
    methods: List[PaymentMethodInfo]
    currency: str = "USD"
