# ==============================================================================
# WEBHOOK SERVICE - Payment Event Reconciliation
# ==============================================================================
# Verifies provider events, claims each event id once, and applies the
# matching order mutation
# ==============================================================================

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from storefront.core.constants import (
    AnalyticsEvents,
    DatabaseConstants,
    OrderConstants,
    PaymentConstants,
)
from storefront.core.exceptions import AlreadyExistsError, NotFoundError, WebhookVerificationError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.services.analytics_service import AnalyticsService
from storefront.services.cart_service import CartService
from storefront.services.effects import PostCommitEffects
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService, snapshot_item
from storefront.services.payment_gateway import StripeGateway
from storefront.services.product_service import ProductService
from storefront.services.user_service import UserService
from storefront.utils.helpers import utc_now

logger = logging.getLogger(__name__)

EVENTS = DatabaseConstants.WEBHOOK_EVENTS_COLLECTION
PLACEHOLDER = OrderConstants.ADDRESS_PLACEHOLDER


class MalformedEventError(ValueError):
    """Event payload that can never be applied; acknowledged without retry."""


def placeholder_address() -> Dict[str, str]:
    return {
        "first_name": PLACEHOLDER,
        "last_name": PLACEHOLDER,
        "address": PLACEHOLDER,
        "city": PLACEHOLDER,
        "state": PLACEHOLDER,
        "zip_code": PLACEHOLDER,
        "country": OrderConstants.DEFAULT_COUNTRY,
        "phone": PLACEHOLDER,
    }


def address_from_profile(profile: Optional[Dict[str, Any]]) -> Optional[Dict[str, str]]:
    """Map a saved profile address (fullname, flat, area, pincode...) to an order address."""
    if not profile or not any(profile.values()):
        return None
    names = (profile.get("fullname") or "").split()
    street = ", ".join(part for part in (profile.get("flat"), profile.get("area")) if part)
    return {
        "first_name": names[0] if names else PLACEHOLDER,
        "last_name": " ".join(names[1:]) or PLACEHOLDER,
        "address": street or PLACEHOLDER,
        "city": profile.get("city") or PLACEHOLDER,
        "state": profile.get("state") or PLACEHOLDER,
        "zip_code": profile.get("pincode") or PLACEHOLDER,
        "country": OrderConstants.DEFAULT_COUNTRY,
        "phone": profile.get("mobile") or PLACEHOLDER,
    }


def address_from_provider(session: Dict[str, Any]) -> Optional[Dict[str, str]]:
    """Map the address the hosted checkout collected, if any."""
    shipping = session.get("shipping_details") or {}
    customer = session.get("customer_details") or {}
    address = shipping.get("address") or customer.get("address")
    if not address or not address.get("line1"):
        return None

    names = (shipping.get("name") or customer.get("name") or "").split()
    street = ", ".join(part for part in (address.get("line1"), address.get("line2")) if part)
    return {
        "first_name": names[0] if names else PLACEHOLDER,
        "last_name": " ".join(names[1:]) or PLACEHOLDER,
        "address": street,
        "city": address.get("city") or PLACEHOLDER,
        "state": address.get("state") or PLACEHOLDER,
        "zip_code": address.get("postal_code") or PLACEHOLDER,
        "country": address.get("country") or OrderConstants.DEFAULT_COUNTRY,
        "phone": customer.get("phone") or PLACEHOLDER,
    }


def decode_json(metadata: Dict[str, Any], key: str, default: Any) -> Any:
    raw = metadata.get(key)
    if not raw:
        return default
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedEventError(f"metadata.{key} is not valid JSON: {e}")


class WebhookService:
    """
    Payment webhook processor.

    Each verified event id is inserted into ``webhook_events`` before
    any order is touched; the unique index turns a redelivery into a
    no-op. Events that can never be applied (bad metadata, unknown
    user) are acknowledged. Any other failure releases the claim and
    propagates so the provider retries.
    """

    def __init__(
        self,
        adapter: BaseDatabaseAdapter,
        gateway: StripeGateway,
        orders: Optional[OrderService] = None,
        users: Optional[UserService] = None,
        cart: Optional[CartService] = None,
        notifications: Optional[NotificationService] = None,
        analytics: Optional[AnalyticsService] = None,
    ) -> None:
        self._adapter = adapter
        self._gateway = gateway
        self._products = ProductService(adapter)
        self._notifications = notifications or NotificationService(adapter)
        self._analytics = analytics or AnalyticsService(adapter)
        self._cart = cart or CartService(adapter, self._products)
        self._users = users or UserService(adapter)
        self._orders = orders or OrderService(
            adapter,
            gateway,
            products=self._products,
            cart=self._cart,
            notifications=self._notifications,
            analytics=self._analytics,
        )

    async def process(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify, deduplicate and apply one webhook delivery.

        Raises:
            WebhookVerificationError: If the signature or payload is invalid
        """
        event = self._gateway.verify_webhook(payload, signature)
        event_id = event.get("id")
        event_type = event.get("type")
        if not event_id:
            raise WebhookVerificationError("Event has no id")

        try:
            await self._adapter.create(EVENTS, {
                "event_id": event_id,
                "type": event_type,
                "outcome": "processing",
                "received_at": utc_now(),
                "processed_at": None,
            })
        except AlreadyExistsError:
            logger.info(f"Webhook {event_id} ({event_type}) already processed; skipping")
            return {"received": True, "duplicate": True}

        obj = (event.get("data") or {}).get("object") or {}
        try:
            outcome = await self._dispatch(event_type, obj)
        except (MalformedEventError, NotFoundError) as e:
            outcome = f"ignored: {e}"
            logger.warning(f"Webhook {event_id} ({event_type}) cannot be applied: {e}")
        except Exception:
            logger.exception(f"Webhook {event_id} ({event_type}) failed; releasing claim for retry")
            await self._adapter.bulk_delete(EVENTS, {"event_id": event_id})
            raise

        await self._adapter.update_one(
            EVENTS,
            {"event_id": event_id},
            {"$set": {"outcome": outcome, "processed_at": utc_now()}},
        )
        logger.info(f"Webhook {event_id} ({event_type}): {outcome}")
        return {"received": True}

    async def _dispatch(self, event_type: Optional[str], obj: Dict[str, Any]) -> str:
        if event_type == PaymentConstants.EVENT_INTENT_SUCCEEDED:
            return await self._intent_succeeded(obj)
        if event_type in (PaymentConstants.EVENT_INTENT_FAILED, PaymentConstants.EVENT_INTENT_CANCELED):
            return await self._intent_failed(obj)
        if event_type == PaymentConstants.EVENT_SESSION_COMPLETED:
            return await self._session_completed(obj)
        return "unhandled event type"

    # ==========================================================================
    # PAYMENT INTENTS
    # ==========================================================================

    async def _intent_succeeded(self, intent: Dict[str, Any]) -> str:
        metadata = intent.get("metadata") or {}
        intent_id = intent.get("id")

        if metadata.get("type") == PaymentConstants.TYPE_CART_CHECKOUT:
            return await self._create_from_intent(intent, metadata)

        order = None
        if metadata.get("order_id"):
            order = await self._orders.get_document(metadata["order_id"])
        elif intent_id:
            order = await self._orders.find_by_intent(intent_id)
        if order is None:
            return "no matching order"

        order = await self._orders.apply_payment_success(order, intent_id)

        effects = PostCommitEffects(f"order {order['order_number']}")
        effects.add("notify_payment_success", self._notifications.notify_payment_success, order)
        effects.add("track_order_completed", self._analytics.track_order_event, AnalyticsEvents.ORDER_COMPLETED, order)
        await effects.run()
        return f"order {order['order_number']} paid ({order['status']})"

    async def _create_from_intent(self, intent: Dict[str, Any], metadata: Dict[str, Any]) -> str:
        intent_id = intent.get("id")
        existing = await self._orders.find_by_intent(intent_id) if intent_id else None
        if existing:
            return f"order {existing['order_number']} already recorded"

        user = await self._users.get_document(self._require_user(metadata))
        items = await self._items_from(metadata)
        order = await self._orders.create_paid_order(
            user_id=user["id"],
            items=items,
            amount=(intent.get("amount") or 0) / 100,
            shipping_address=placeholder_address(),
            payment_intent_id=intent_id,
            transaction_id=intent_id,
        )

        effects = PostCommitEffects(f"order {order['order_number']}")
        effects.add("notify_payment_success", self._notifications.notify_payment_success, order)
        effects.add("track_order_completed", self._analytics.track_order_event, AnalyticsEvents.ORDER_COMPLETED, order)
        await effects.run()
        return f"order {order['order_number']} created from payment intent"

    async def _intent_failed(self, intent: Dict[str, Any]) -> str:
        metadata = intent.get("metadata") or {}
        order = None
        if metadata.get("order_id"):
            order = await self._orders.get_document(metadata["order_id"])
        elif intent.get("id"):
            order = await self._orders.find_by_intent(intent["id"])
        if order is None:
            return "no matching order"

        order = await self._orders.apply_payment_failure(order)

        effects = PostCommitEffects(f"order {order['order_number']}")
        effects.add("notify_payment_failed", self._notifications.notify_payment_failed, order)
        await effects.run()
        return f"order {order['order_number']} payment failed ({order['status']})"

    # ==========================================================================
    # CHECKOUT SESSIONS
    # ==========================================================================

    async def _session_completed(self, session: Dict[str, Any]) -> str:
        session_id = session.get("id")
        existing = await self._orders.find_by_session(session_id) if session_id else None
        if existing:
            return f"order {existing['order_number']} already recorded"

        metadata = session.get("metadata") or {}
        user = await self._users.get_document(self._require_user(metadata))
        items = await self._items_from(metadata)

        # Lowest to highest precedence: saved profile, checkout metadata, provider
        checkout_address = decode_json(metadata, "shipping_address", {})
        shipping_address = (
            address_from_provider(session)
            or address_from_profile(checkout_address)
            or address_from_profile(user.get("shipping_address"))
            or placeholder_address()
        )

        order = await self._orders.create_paid_order(
            user_id=user["id"],
            items=items,
            amount=(session.get("amount_total") or 0) / 100,
            shipping_address=shipping_address,
            payment_intent_id=session.get("payment_intent"),
            transaction_id=session_id,
            session_id=session_id,
            payment_method=metadata.get("payment_method") or OrderConstants.METHOD_STRIPE,
        )

        effects = PostCommitEffects(f"order {order['order_number']}")
        if checkout_address:
            effects.add("save_shipping_address", self._users.save_shipping_address, user["id"], checkout_address)
        effects.add("clear_cart", self._cart.clear, user["id"])
        effects.add("notify_payment_success", self._notifications.notify_payment_success, order)
        effects.add("notify_order_confirmation", self._notifications.notify_order_confirmation, order)
        effects.add("track_order_completed", self._analytics.track_order_event, AnalyticsEvents.ORDER_COMPLETED, order)
        await effects.run()
        return f"order {order['order_number']} created from checkout session"

    # ==========================================================================
    # METADATA HELPERS
    # ==========================================================================

    @staticmethod
    def _require_user(metadata: Dict[str, Any]) -> str:
        user_id = metadata.get("user_id")
        if not user_id:
            raise MalformedEventError("metadata.user_id is missing")
        return user_id

    async def _items_from(self, metadata: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Rebuild order lines from metadata, keeping the charged unit price."""
        raw_items = decode_json(metadata, "items", [])
        if not isinstance(raw_items, list) or not raw_items:
            raise MalformedEventError("metadata.items is empty")

        try:
            lines = [
                (
                    str(raw["product_id"]),
                    int(raw["quantity"]),
                    None if raw.get("price") is None else float(raw["price"]),
                )
                for raw in raw_items
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedEventError(f"metadata.items is malformed: {e}")

        products = await self._products.get_documents([product_id for product_id, _, _ in lines])
        items = []
        for product_id, quantity, price in lines:
            product = products.get(product_id) or {"id": product_id, "name": product_id}
            item = snapshot_item(product, quantity)
            if price is not None:
                item["price"] = price
            items.append(item)
        return items
