# ==============================================================================
# ORDER SCHEMAS - E-commerce Orders
# ==============================================================================
# Request/Response schemas for order management
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, model_validator

from storefront.core.constants import OrderConstants
from storefront.schemas.base import BaseSchema, Pagination, TimestampSchema


OrderStatus = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "completed", "failed", "refunded"]
PaymentMethod = Literal["stripe", "cashapp", "samsung_pay"]


class OrderAddressInput(BaseSchema):
    """Shipping address supplied at checkout; every field is required."""

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    address: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(OrderConstants.DEFAULT_COUNTRY, min_length=2, max_length=56)
    phone: str = Field(..., min_length=1, max_length=20)


class OrderAddress(BaseSchema):
    """Stored shipping address; webhook-created orders carry placeholders."""

    first_name: str = OrderConstants.ADDRESS_PLACEHOLDER
    last_name: str = OrderConstants.ADDRESS_PLACEHOLDER
    address: str = OrderConstants.ADDRESS_PLACEHOLDER
    city: str = OrderConstants.ADDRESS_PLACEHOLDER
    state: str = OrderConstants.ADDRESS_PLACEHOLDER
    zip_code: str = OrderConstants.ADDRESS_PLACEHOLDER
    country: str = OrderConstants.DEFAULT_COUNTRY
    phone: str = OrderConstants.ADDRESS_PLACEHOLDER


class OrderItem(BaseSchema):
    """Line item snapshotted at order time."""

    product_id: str
    name: str = ""
    brand: str = ""
    image: Optional[str] = None
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseSchema):
    """Schema for creating an order from the cart."""

    shipping_address: OrderAddressInput
    payment_method: PaymentMethod = OrderConstants.METHOD_STRIPE
    notes: Optional[str] = Field(None, max_length=500)


class OrderResponse(TimestampSchema):
    """Order as returned by the API."""

    id: str = Field(..., description="Order unique identifier")
    order_number: str = Field(..., description="Human-readable order number")
    user_id: str
    items: List[OrderItem] = Field(default_factory=list)
    total_amount: float
    shipping_cost: float = 0.0
    final_amount: float
    shipping_address: OrderAddress = Field(default_factory=OrderAddress)
    payment_method: str = OrderConstants.METHOD_STRIPE
    payment_status: PaymentStatus = "pending"
    status: OrderStatus = "pending"
    stripe_payment_intent_id: Optional[str] = None
    stripe_session_id: Optional[str] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    delivered_at: Optional[datetime] = None
    stock_reserved: bool = False
    has_shipping_address: bool = False

    @model_validator(mode="after")
    def flag_address(self) -> "OrderResponse":
        placeholder = OrderConstants.ADDRESS_PLACEHOLDER
        self.has_shipping_address = all(
            value != placeholder
            for value in self.shipping_address.model_dump().values()
        )
        return self


class OrderCreatedResponse(BaseSchema):
    """Order plus the client secret needed to confirm payment."""

    order: OrderResponse
    client_secret: Optional[str] = None
    payment_intent_id: Optional[str] = None


class OrderStatusUpdate(BaseSchema):
    """Admin status change."""

    status: OrderStatus
    tracking_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)


class PaymentStatusUpdate(BaseSchema):
    """Admin payment status change."""

    payment_status: PaymentStatus


class OrderListResponse(BaseSchema):
    orders: List[OrderResponse]
    pagination: Pagination
