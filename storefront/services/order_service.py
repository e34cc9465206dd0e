# ==============================================================================
# ORDER SERVICE - Checkout, Lifecycle & Payment Reconciliation
# ==============================================================================
# Order creation with stock reservation and compensation, guarded
# status transitions, and the payment-state updates shared by the
# webhook and the confirm-payment endpoint
# ==============================================================================

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from storefront.core.constants import (
    AnalyticsEvents,
    DatabaseConstants,
    ErrorMessages,
    OrderConstants,
    PaymentConstants,
    UserRoles,
)
from storefront.core.exceptions import (
    AlreadyExistsError,
    AuthorizationError,
    BadRequestError,
    InsufficientStockError,
    InvalidStateTransitionError,
)
from storefront.core.settings import settings
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.base import Pagination
from storefront.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from storefront.services.analytics_service import AnalyticsService
from storefront.services.base_service import BaseService
from storefront.services.cart_service import CartService
from storefront.services.effects import PostCommitEffects
from storefront.services.notification_service import NotificationService
from storefront.services.payment_gateway import StripeGateway
from storefront.services.product_service import ProductService
from storefront.utils.helpers import generate_order_number, round_money, to_cents, utc_now

logger = logging.getLogger(__name__)


def snapshot_item(product: Dict[str, Any], quantity: int) -> Dict[str, Any]:
    """Freeze the product fields an order line keeps."""
    images = product.get("images") or []
    return {
        "product_id": product["id"],
        "name": product.get("name", ""),
        "brand": product.get("brand", ""),
        "image": images[0] if images else None,
        "price": round_money(product.get("new_price", 0)),
        "quantity": quantity,
    }


def shipping_cost_for(total_amount: float) -> float:
    """Free shipping strictly above the threshold, flat rate otherwise."""
    if total_amount > settings.FREE_SHIPPING_THRESHOLD:
        return 0.0
    return settings.SHIPPING_FLAT_RATE


def can_transition(current: str, requested: str) -> bool:
    return requested in OrderConstants.TRANSITIONS.get(current, frozenset())


class OrderService(BaseService[OrderResponse]):
    """
    Order lifecycle.

    Creation reserves stock with a conditional decrement per line and
    undoes every reservation if a later step fails. Every status write
    goes through ``_change_status``, which validates the edge against
    the transition table and applies it as a compare-and-set on the
    current status. Cancelling a reserved order clears the reservation
    flag in the same write, so stock is returned at most once.
    """

    _not_found_message = ErrorMessages.ORDER_NOT_FOUND

    def __init__(
        self,
        adapter: BaseDatabaseAdapter,
        gateway: StripeGateway,
        products: Optional[ProductService] = None,
        cart: Optional[CartService] = None,
        notifications: Optional[NotificationService] = None,
        analytics: Optional[AnalyticsService] = None,
    ) -> None:
        super().__init__(adapter, DatabaseConstants.ORDERS_COLLECTION)
        self._gateway = gateway
        self._products = products or ProductService(adapter)
        self._cart = cart or CartService(adapter, self._products)
        self._notifications = notifications or NotificationService(adapter)
        self._analytics = analytics or AnalyticsService(adapter)

    def _to_response(self, entity: Dict[str, Any]) -> OrderResponse:
        return OrderResponse.model_validate(entity)

    # ==========================================================================
    # CREATION
    # ==========================================================================

    async def create_order(self, user: Dict[str, Any], schema: OrderCreate) -> OrderCreatedResponse:
        """
        Create an order from the user's cart and open a payment intent.

        Steps: pre-check every line, reserve stock, insert the order,
        create the payment intent. A failure after reservation cancels
        the order (if inserted) and returns the stock before re-raising.

        Raises:
            BadRequestError: Empty cart or unsupported payment method
            InsufficientStockError: A line cannot be fulfilled
            PaymentProviderError: The payment intent could not be created
        """
        if schema.payment_method != OrderConstants.METHOD_STRIPE:
            raise BadRequestError(message=ErrorMessages.INVALID_PAYMENT_METHOD)

        user_id = user["id"]
        lines = await self._cart.get_lines(user_id)
        if not lines:
            raise BadRequestError(message=ErrorMessages.CART_EMPTY)

        items = await self._check_lines(lines)
        await self._reserve(items)

        total_amount = round_money(sum(item["price"] * item["quantity"] for item in items))
        shipping_cost = shipping_cost_for(total_amount)
        data = {
            "user_id": user_id,
            "items": items,
            "total_amount": total_amount,
            "shipping_cost": shipping_cost,
            "final_amount": round_money(total_amount + shipping_cost),
            "shipping_address": schema.shipping_address.model_dump(),
            "payment_method": schema.payment_method,
            "payment_status": OrderConstants.PAYMENT_PENDING,
            "status": OrderConstants.STATUS_PENDING,
            "stripe_payment_intent_id": None,
            "stripe_session_id": None,
            "transaction_id": None,
            "notes": schema.notes,
            "tracking_number": None,
            "delivered_at": None,
            "stock_reserved": True,
        }

        try:
            order = await self._insert_with_number(data)
        except Exception:
            await self._release_items(items)
            raise

        try:
            customer_id = await self._gateway.get_or_create_customer(user["email"], user.get("username"))
            intent = await self._gateway.create_payment_intent(
                to_cents(order["final_amount"]),
                metadata={
                    "order_id": order["id"],
                    "user_id": user_id,
                    "type": PaymentConstants.TYPE_ORDER_PAYMENT,
                },
                customer_id=customer_id,
                description=f"Payment for order {order['order_number']}",
            )
            order = await self._adapter.update(
                self._collection_name,
                order["id"],
                {"stripe_payment_intent_id": intent["id"], "updated_at": utc_now()},
            )
        except Exception:
            logger.error(f"Payment setup failed for order {order['order_number']}; cancelling")
            try:
                await self._change_status(
                    order,
                    OrderConstants.STATUS_CANCELLED,
                    {"payment_status": OrderConstants.PAYMENT_FAILED},
                )
            except Exception:
                logger.exception(f"Could not compensate order {order['order_number']}")
            raise

        logger.info(f"Order {order['order_number']} created for user {user_id}")

        effects = PostCommitEffects(f"order {order['order_number']}")
        effects.add("clear_cart", self._cart.clear, user_id)
        effects.add("track_order_created", self._analytics.track_order_event, AnalyticsEvents.ORDER_CREATED, order)
        effects.add("notify_order_confirmation", self._notifications.notify_order_confirmation, order)
        await effects.run()

        return OrderCreatedResponse(
            order=self._to_response(order),
            client_secret=intent["client_secret"],
            payment_intent_id=intent["id"],
        )

    async def _check_lines(self, lines: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Snapshot every cart line, rejecting the whole cart if any line fails."""
        products = await self._products.get_documents([line["product_id"] for line in lines])
        items = []
        for line in lines:
            product = products.get(line["product_id"])
            quantity = line["quantity"]
            if not product or not product.get("is_active", False) or product.get("quantity", 0) < quantity:
                name = product.get("name") if product else line["product_id"]
                raise InsufficientStockError(
                    message=f"Product {name} is not available in the requested quantity",
                    product_id=line["product_id"],
                )
            items.append(snapshot_item(product, quantity))
        return items

    async def _reserve(self, items: List[Dict[str, Any]]) -> None:
        reserved: List[Dict[str, Any]] = []
        for item in items:
            if not await self._products.reserve_stock(item["product_id"], item["quantity"]):
                logger.warning(f"Lost stock race on product {item['product_id']}; releasing {len(reserved)} lines")
                await self._release_items(reserved)
                raise InsufficientStockError(
                    message=f"Product {item['name']} is not available in the requested quantity",
                    product_id=item["product_id"],
                )
            reserved.append(item)

    async def _release_items(self, items: List[Dict[str, Any]]) -> None:
        for item in items:
            await self._products.release_stock(item["product_id"], item["quantity"])

    async def _insert_with_number(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert with a fresh order number, retrying on a number collision."""
        for attempt in range(1, OrderConstants.NUMBER_ATTEMPTS + 1):
            try:
                return await self._insert({**data, "order_number": generate_order_number()})
            except AlreadyExistsError:
                logger.warning(f"Order number collision (attempt {attempt})")
        raise AlreadyExistsError(
            message="Could not allocate a unique order number",
            resource_type="order",
        )

    async def create_paid_order(
        self,
        user_id: str,
        items: List[Dict[str, Any]],
        amount: float,
        shipping_address: Dict[str, Any],
        payment_intent_id: Optional[str],
        transaction_id: Optional[str],
        session_id: Optional[str] = None,
        payment_method: str = OrderConstants.METHOD_STRIPE,
    ) -> Dict[str, Any]:
        """
        Record an order that the provider reports as already paid.

        Stock is not touched for these orders.
        """
        amount = round_money(amount)
        order = await self._insert_with_number({
            "user_id": user_id,
            "items": items,
            "total_amount": amount,
            "shipping_cost": 0.0,
            "final_amount": amount,
            "shipping_address": shipping_address,
            "payment_method": payment_method,
            "payment_status": OrderConstants.PAYMENT_COMPLETED,
            "status": OrderConstants.STATUS_CONFIRMED,
            "stripe_payment_intent_id": payment_intent_id,
            "stripe_session_id": session_id,
            "transaction_id": transaction_id,
            "notes": None,
            "tracking_number": None,
            "delivered_at": None,
            "stock_reserved": False,
        })
        logger.info(f"Order {order['order_number']} recorded from provider payment {transaction_id}")
        return order

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    async def get_document(self, order_id: str) -> Dict[str, Any]:
        return await self._get_document(order_id)

    async def find_by_intent(self, payment_intent_id: str) -> Optional[Dict[str, Any]]:
        return await self._adapter.find_one(
            self._collection_name,
            {"stripe_payment_intent_id": payment_intent_id},
        )

    async def find_by_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        return await self._adapter.find_one(self._collection_name, {"stripe_session_id": session_id})

    async def list_user_orders(
        self,
        user_id: str,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[OrderResponse], Pagination]:
        filters: Dict[str, Any] = {"user_id": user_id}
        if status:
            filters["status"] = status
        return await self.get_paginated(page, limit, filters)

    async def list_all(
        self,
        status: Optional[str] = None,
        payment_status: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[OrderResponse], Pagination]:
        filters: Dict[str, Any] = {}
        if status:
            filters["status"] = status
        if payment_status:
            filters["payment_status"] = payment_status
        return await self.get_paginated(page, limit, filters)

    async def get_for_user(self, user: Dict[str, Any], order_id: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If the order does not exist
            AuthorizationError: If the caller is neither owner nor admin
        """
        order = await self._get_document(order_id)
        if order["user_id"] != user["id"] and user.get("role") != UserRoles.ADMIN:
            raise AuthorizationError(message=ErrorMessages.ORDER_FORBIDDEN)
        return order

    # ==========================================================================
    # STATUS TRANSITIONS
    # ==========================================================================

    async def _change_status(
        self,
        order: Dict[str, Any],
        new_status: str,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Apply a validated status change as a compare-and-set.

        Raises:
            InvalidStateTransitionError: If the edge is not allowed or the
                order moved on concurrently
        """
        current = order["status"]
        if not can_transition(current, new_status):
            logger.warning(f"Rejected transition {current} -> {new_status} for order {order['id']}")
            raise InvalidStateTransitionError(current, new_status)

        update = {**(extra or {}), "status": new_status, "updated_at": utc_now()}
        release = new_status == OrderConstants.STATUS_CANCELLED and order.get("stock_reserved", False)
        if new_status == OrderConstants.STATUS_CANCELLED:
            update["stock_reserved"] = False

        updated = await self._adapter.find_one_and_update(
            self._collection_name,
            {"id": order["id"], "status": current},
            {"$set": update},
        )
        if updated is None:
            latest = await self._get_document(order["id"])
            logger.warning(f"Order {order['id']} changed concurrently; now {latest['status']}")
            raise InvalidStateTransitionError(latest["status"], new_status)

        if release:
            await self._release_items(order.get("items", []))
            logger.info(f"Released reserved stock for order {order['order_number']}")

        logger.info(f"Order {order['order_number']}: {current} -> {new_status}")
        return updated

    async def cancel_by_customer(self, user_id: str, order_id: str) -> OrderResponse:
        """
        Raises:
            AuthorizationError: If the caller does not own the order
            BadRequestError: If the order has shipped, been delivered or is cancelled
        """
        order = await self._get_document(order_id)
        if order["user_id"] != user_id:
            raise AuthorizationError(message=ErrorMessages.ORDER_FORBIDDEN)
        if order["status"] not in OrderConstants.CUSTOMER_CANCELLABLE:
            raise BadRequestError(message=ErrorMessages.ORDER_NOT_CANCELLABLE)

        updated = await self._change_status(order, OrderConstants.STATUS_CANCELLED)

        effects = PostCommitEffects(f"order {updated['order_number']}")
        effects.add("notify_status_update", self._notifications.notify_status_update, updated)
        await effects.run()
        return self._to_response(updated)

    async def update_status(self, order_id: str, schema: OrderStatusUpdate) -> OrderResponse:
        """Admin status change along an allowed edge."""
        order = await self._get_document(order_id)
        extra: Dict[str, Any] = {}
        if schema.tracking_number:
            extra["tracking_number"] = schema.tracking_number
        if schema.notes:
            extra["notes"] = schema.notes
        if schema.status == OrderConstants.STATUS_DELIVERED:
            extra["delivered_at"] = utc_now()

        updated = await self._change_status(order, schema.status, extra)

        effects = PostCommitEffects(f"order {updated['order_number']}")
        effects.add("notify_status_update", self._notifications.notify_status_update, updated)
        await effects.run()
        return self._to_response(updated)

    async def update_payment_status(self, order_id: str, payment_status: str) -> OrderResponse:
        await self._get_document(order_id)
        updated = await self._adapter.update(
            self._collection_name,
            order_id,
            {"payment_status": payment_status, "updated_at": utc_now()},
        )
        logger.info(f"Order {order_id} payment status set to {payment_status}")
        return self._to_response(updated)

    # ==========================================================================
    # PAYMENT RECONCILIATION
    # ==========================================================================

    async def apply_payment_success(self, order: Dict[str, Any], payment_intent_id: str) -> Dict[str, Any]:
        """
        Mark an order paid and confirm it when the status allows.

        A cancelled (or otherwise advanced) order keeps its status.
        """
        extra = {
            "payment_status": OrderConstants.PAYMENT_COMPLETED,
            "transaction_id": payment_intent_id,
        }
        if can_transition(order["status"], OrderConstants.STATUS_CONFIRMED):
            try:
                return await self._change_status(order, OrderConstants.STATUS_CONFIRMED, extra)
            except InvalidStateTransitionError:
                order = await self._get_document(order["id"])

        if order["status"] == OrderConstants.STATUS_CANCELLED:
            logger.warning(
                f"Payment {payment_intent_id} succeeded for cancelled order {order['order_number']}"
            )
        return await self._adapter.update(
            self._collection_name,
            order["id"],
            {**extra, "updated_at": utc_now()},
        )

    async def record_failed_attempt(self, order: Dict[str, Any]) -> Dict[str, Any]:
        """Flag the payment failed but keep the order open for another attempt."""
        updated = await self._adapter.find_one_and_update(
            self._collection_name,
            {"id": order["id"], "payment_status": {"$ne": OrderConstants.PAYMENT_COMPLETED}},
            {"$set": {"payment_status": OrderConstants.PAYMENT_FAILED, "updated_at": utc_now()}},
        )
        return updated or order

    async def apply_payment_failure(self, order: Dict[str, Any]) -> Dict[str, Any]:
        """Mark a payment failed and cancel the order when allowed."""
        if order.get("payment_status") == OrderConstants.PAYMENT_COMPLETED:
            logger.warning(f"Ignoring payment failure for already paid order {order['order_number']}")
            return order

        extra = {"payment_status": OrderConstants.PAYMENT_FAILED}
        if can_transition(order["status"], OrderConstants.STATUS_CANCELLED):
            try:
                return await self._change_status(order, OrderConstants.STATUS_CANCELLED, extra)
            except InvalidStateTransitionError:
                order = await self._get_document(order["id"])

        return await self._adapter.update(
            self._collection_name,
            order["id"],
            {**extra, "updated_at": utc_now()},
        )
