# ==============================================================================
# PAYMENT SERVICE - Direct Intents, Hosted Checkout & Confirmation
# ==============================================================================

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from storefront.core.constants import ErrorMessages, PaymentConstants
from storefront.core.exceptions import AuthorizationError, BadRequestError, InsufficientStockError
from storefront.core.settings import settings
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.order import OrderResponse
from storefront.schemas.payment import (
    CheckoutItem,
    CheckoutSessionCreate,
    CheckoutSessionResponse,
    PaymentIntentResponse,
    PaymentMethodInfo,
    PaymentMethodsResponse,
)
from storefront.services.order_service import OrderService
from storefront.services.payment_gateway import StripeGateway
from storefront.services.product_service import ProductService
from storefront.utils.helpers import round_money, to_cents

logger = logging.getLogger(__name__)


def compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def encode_items(items: List[Dict[str, Any]]) -> str:
    """
    Serialize priced lines for provider metadata.

    Raises:
        BadRequestError: If the result exceeds the provider's value limit
    """
    encoded = compact_json([
        {"product_id": item["product_id"], "quantity": item["quantity"], "price": item["price"]}
        for item in items
    ])
    if len(encoded) > PaymentConstants.METADATA_VALUE_LIMIT:
        raise BadRequestError(
            message="Too many items for a single checkout; please split the order",
            details={"length": len(encoded), "limit": PaymentConstants.METADATA_VALUE_LIMIT},
        )
    return encoded


class PaymentService:
    """
    Payment flows that do not start from a stored order.

    Prices always come from the catalog, never from the request.
    """

    def __init__(
        self,
        adapter: BaseDatabaseAdapter,
        gateway: StripeGateway,
        orders: Optional[OrderService] = None,
        products: Optional[ProductService] = None,
    ) -> None:
        self._adapter = adapter
        self._gateway = gateway
        self._products = products or ProductService(adapter)
        self._orders = orders or OrderService(adapter, gateway, products=self._products)

    async def _price_items(self, items: List[CheckoutItem]) -> Tuple[List[Dict[str, Any]], float]:
        """Look up active products and price each line server-side."""
        products = await self._products.get_documents([item.product_id for item in items])
        priced = []
        for item in items:
            product = products.get(item.product_id)
            if not product or not product.get("is_active", False):
                raise BadRequestError(message=f"Product {item.product_id} is not available")
            if product.get("quantity", 0) < item.quantity:
                raise InsufficientStockError(
                    message=f"Product {product['name']} is not available in the requested quantity",
                    product_id=item.product_id,
                )
            priced.append({
                "product_id": item.product_id,
                "quantity": item.quantity,
                "price": round_money(product["new_price"]),
                "product": product,
            })
        total = round_money(sum(line["price"] * line["quantity"] for line in priced))
        return priced, total

    # ==========================================================================
    # DIRECT PAYMENT INTENT
    # ==========================================================================

    async def create_payment_intent(self, user: Dict[str, Any], items: List[CheckoutItem]) -> PaymentIntentResponse:
        """
        Open a payment intent for an ad hoc cart; the webhook records the order.

        Raises:
            BadRequestError: Amount below the minimum charge or metadata too long
        """
        priced, total = await self._price_items(items)
        if total < settings.MIN_CHARGE_AMOUNT:
            raise BadRequestError(message=ErrorMessages.AMOUNT_TOO_SMALL)

        intent = await self._gateway.create_payment_intent(
            to_cents(total),
            metadata={
                "user_id": user["id"],
                "type": PaymentConstants.TYPE_CART_CHECKOUT,
                "items": encode_items(priced),
            },
        )
        return PaymentIntentResponse(
            client_secret=intent["client_secret"],
            payment_intent_id=intent["id"],
            amount=total,
        )

    # ==========================================================================
    # HOSTED CHECKOUT
    # ==========================================================================

    async def create_checkout_session(
        self,
        user: Dict[str, Any],
        schema: CheckoutSessionCreate,
    ) -> CheckoutSessionResponse:
        """Create a hosted checkout session; no order exists until the webhook."""
        priced, total = await self._price_items(schema.items)
        if total < settings.MIN_CHARGE_AMOUNT:
            raise BadRequestError(message=ErrorMessages.AMOUNT_TOO_SMALL)

        line_items = [
            {
                "price_data": {
                    "currency": settings.STRIPE_CURRENCY,
                    "product_data": {
                        "name": line["product"]["name"],
                        "images": (line["product"].get("images") or [])[:1],
                    },
                    "unit_amount": to_cents(line["price"]),
                },
                "quantity": line["quantity"],
            }
            for line in priced
        ]

        address = schema.shipping_address.model_dump(exclude_none=True) if schema.shipping_address else {}
        encoded_address = compact_json(address)
        if len(encoded_address) > PaymentConstants.METADATA_VALUE_LIMIT:
            raise BadRequestError(message="Shipping address is too long")

        frontend = settings.FRONTEND_URL.rstrip("/")
        session = await self._gateway.create_checkout_session(
            line_items=line_items,
            metadata={
                "user_id": user["id"],
                "payment_method": schema.payment_method,
                "items": encode_items(priced),
                "shipping_address": encoded_address,
            },
            success_url=schema.success_url or f"{frontend}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=schema.cancel_url or f"{frontend}/cart",
            customer_email=user.get("email"),
            shipping_countries=list(PaymentConstants.SHIPPING_COUNTRIES),
        )
        return CheckoutSessionResponse(session_id=session["id"], checkout_url=session.get("url"))

    # ==========================================================================
    # CONFIRMATION
    # ==========================================================================

    async def confirm_payment(
        self,
        user: Dict[str, Any],
        payment_intent_id: str,
        order_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Reconcile an order with the provider's view of its payment intent.

        The order is the one the intent was opened for; an ``order_id``
        naming any other order is rejected. A ``requires_payment_method``
        intent (new, or declined and retryable) only flags the order's
        payment as failed; cancelling is left to the provider's
        failure webhook.

        Raises:
            BadRequestError: If the intent belongs to another order, or
                the payment has not gone through
            AuthorizationError: If the intent or its order belongs to
                another user
        """
        intent = await self._gateway.retrieve_payment_intent(payment_intent_id)

        order = await self._orders.find_by_intent(payment_intent_id)
        if order_id and (order is None or order["id"] != order_id):
            logger.warning(f"Payment {payment_intent_id} does not belong to order {order_id}")
            raise BadRequestError(message=ErrorMessages.PAYMENT_ORDER_MISMATCH)

        owner = order["user_id"] if order is not None else intent["metadata"].get("user_id")
        if owner and owner != user["id"]:
            raise AuthorizationError(message=ErrorMessages.ORDER_FORBIDDEN)

        status = intent["status"]
        if status == "succeeded":
            if order is not None:
                order = await self._orders.apply_payment_success(order, payment_intent_id)
        elif status == "requires_payment_method":
            if order is not None:
                await self._orders.record_failed_attempt(order)
            logger.info(f"Payment {payment_intent_id} not completed for user {user['id']}")
            raise BadRequestError(message=ErrorMessages.PAYMENT_FAILED, details={"status": status})

        return {
            "status": status,
            "payment_intent_id": payment_intent_id,
            "order": OrderResponse.model_validate(order) if order is not None else None,
        }

    @staticmethod
    def supported_methods() -> PaymentMethodsResponse:
        return PaymentMethodsResponse(
            methods=[PaymentMethodInfo(**method) for method in PaymentConstants.SUPPORTED_METHODS],
            currency=settings.STRIPE_CURRENCY.upper(),
        )
