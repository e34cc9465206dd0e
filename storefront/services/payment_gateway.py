# ==============================================================================
# PAYMENT GATEWAY - Stripe SDK Wrapper
# ==============================================================================
# Thin async facade over the synchronous Stripe SDK
# ==============================================================================

from __future__ import annotations

import asyncio
import json
import logging
from functools import partial
from typing import Any, Callable, Dict, List, Optional

import stripe

from storefront.core.exceptions import PaymentProviderError, WebhookVerificationError
from storefront.core.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def _plain(obj: Any) -> Dict[str, str]:
    """Copy a Stripe metadata object into a plain dict."""
    if not obj:
        return {}
    return {key: obj[key] for key in obj.keys()}


class StripeGateway:
    """
    Payment provider gateway.

    Configures the SDK once (API key, network retries, HTTP timeout)
    and exposes the handful of calls the storefront needs. SDK calls
    block, so each runs on the default executor. Results are returned
    as plain dicts so callers never depend on SDK object types.

    Example:
        >>> gateway = StripeGateway()
        >>> intent = await gateway.create_payment_intent(2500, {"order_id": "..."})
        >>> intent["client_secret"]
    """

    def __init__(self, config: Optional[Settings] = None) -> None:
        self._config = config or default_settings
        self._currency = self._config.STRIPE_CURRENCY

        stripe.api_key = self._config.STRIPE_SECRET_KEY
        stripe.max_network_retries = self._config.STRIPE_MAX_NETWORK_RETRIES
        stripe.default_http_client = stripe.RequestsClient(timeout=self._config.STRIPE_TIMEOUT)

    async def _call(self, func: Callable[..., Any], **params: Any) -> Any:
        """Run a blocking SDK call off the event loop."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(func, **params))
        except stripe.StripeError as e:
            logger.error(f"Stripe call {getattr(func, '__qualname__', func)} failed: {e.user_message or e}")
            raise PaymentProviderError(provider_code=getattr(e, "code", None))

    # ==========================================================================
    # CUSTOMERS
    # ==========================================================================

    async def get_or_create_customer(self, email: str, name: Optional[str] = None) -> str:
        """Return the id of the customer with this email, creating one if needed."""
        existing = await self._call(stripe.Customer.list, email=email, limit=1)
        if existing.data:
            return existing.data[0].id
        customer = await self._call(stripe.Customer.create, email=email, name=name)
        logger.info(f"Created Stripe customer {customer.id}")
        return customer.id

    # ==========================================================================
    # PAYMENT INTENTS
    # ==========================================================================

    async def create_payment_intent(
        self,
        amount_cents: int,
        metadata: Dict[str, str],
        customer_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "amount": amount_cents,
            "currency": self._currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
        }
        if customer_id:
            params["customer"] = customer_id
        if description:
            params["description"] = description

        intent = await self._call(stripe.PaymentIntent.create, **params)
        logger.info(f"Created payment intent {intent.id} for {amount_cents} cents")
        return {
            "id": intent.id,
            "client_secret": intent.client_secret,
            "amount": intent.amount,
            "status": intent.status,
        }

    async def retrieve_payment_intent(self, intent_id: str) -> Dict[str, Any]:
        intent = await self._call(stripe.PaymentIntent.retrieve, id=intent_id)
        return {
            "id": intent.id,
            "amount": intent.amount,
            "status": intent.status,
            "metadata": _plain(intent.metadata),
        }

    # ==========================================================================
    # CHECKOUT SESSIONS
    # ==========================================================================

    async def create_checkout_session(
        self,
        line_items: List[Dict[str, Any]],
        metadata: Dict[str, str],
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str] = None,
        shipping_countries: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "mode": "payment",
            "line_items": line_items,
            "metadata": metadata,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if customer_email:
            params["customer_email"] = customer_email
        if shipping_countries:
            params["shipping_address_collection"] = {"allowed_countries": list(shipping_countries)}

        session = await self._call(stripe.checkout.Session.create, **params)
        logger.info(f"Created checkout session {session.id}")
        return {"id": session.id, "url": session.url}

    # ==========================================================================
    # WEBHOOKS
    # ==========================================================================

    def verify_webhook(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify the ``Stripe-Signature`` header and decode the event.

        Raises:
            WebhookVerificationError: On a missing or invalid signature
        """
        if not signature:
            raise WebhookVerificationError("Missing Stripe-Signature header")

        try:
            text = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                text,
                signature,
                self._config.STRIPE_WEBHOOK_SECRET,
                self._config.STRIPE_WEBHOOK_TOLERANCE,
            )
            return json.loads(text)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise WebhookVerificationError(str(e.user_message or e))
        except (UnicodeDecodeError, ValueError) as e:
            raise WebhookVerificationError(f"Invalid payload: {e}")
