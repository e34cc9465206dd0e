# ==============================================================================
# CONFTEST - Pytest Fixtures and Configuration
# ==============================================================================
# Shared fixtures for all tests: in-memory MongoDB, fake payment provider,
# authenticated clients and catalog factories
# ==============================================================================

from __future__ import annotations

import hashlib
import hmac
import json
import os
import time
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

import mongomock
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32chars!"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["EMAIL_ENABLED"] = "false"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_storefront"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_storefront"
os.environ["FRONTEND_URL"] = "https://shop.example.com/"

WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]
API = "/api"


# ==============================================================================
# IN-MEMORY MOTOR CLIENT
# ==============================================================================
# Exposes the slice of the Motor API the adapter uses on top of mongomock

class AsyncCursor:
    """Awaitable ``to_list`` over a mongomock cursor."""

    def __init__(self, cursor) -> None:
        self._cursor = cursor

    def sort(self, *args, **kwargs) -> "AsyncCursor":
        self._cursor = self._cursor.sort(*args, **kwargs)
        return self

    def skip(self, count: int) -> "AsyncCursor":
        self._cursor = self._cursor.skip(count)
        return self

    def limit(self, count: int) -> "AsyncCursor":
        self._cursor = self._cursor.limit(count)
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        documents = list(self._cursor)
        return documents if length is None else documents[:length]


class AsyncCollection:
    def __init__(self, collection) -> None:
        self._collection = collection

    def find(self, *args, **kwargs) -> AsyncCursor:
        return AsyncCursor(self._collection.find(*args, **kwargs))

    def aggregate(self, pipeline, **kwargs) -> AsyncCursor:
        return AsyncCursor(self._collection.aggregate(pipeline, **kwargs))

    def __getattr__(self, name: str):
        method = getattr(self._collection, name)

        async def call(*args, **kwargs):
            return method(*args, **kwargs)

        return call


class AsyncDatabase:
    def __init__(self, database) -> None:
        self._database = database

    def __getitem__(self, name: str) -> AsyncCollection:
        return AsyncCollection(self._database[name])

    async def command(self, *args, **kwargs) -> Dict[str, Any]:
        return self._database.command(*args, **kwargs)


class AsyncMongoClient:
    def __init__(self) -> None:
        self._client = mongomock.MongoClient(tz_aware=True)

    def __getitem__(self, name: str) -> AsyncDatabase:
        return AsyncDatabase(self._client[name])

    def close(self) -> None:
        self._client.close()


# ==============================================================================
# FAKE PAYMENT PROVIDER
# ==============================================================================

from storefront.core.exceptions import PaymentProviderError  # noqa: E402
from storefront.services.payment_gateway import StripeGateway  # noqa: E402


class FakeGateway(StripeGateway):
    """
    Records provider calls in memory.

    Webhook verification is inherited, so signatures are checked by the
    real SDK against ``WEBHOOK_SECRET``.
    """

    def __init__(self) -> None:
        super().__init__()
        self.customers: Dict[str, str] = {}
        self.intents: Dict[str, Dict[str, Any]] = {}
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.fail_intents = False

    async def get_or_create_customer(self, email: str, name: Optional[str] = None) -> str:
        return self.customers.setdefault(email, f"cus_{uuid4().hex[:12]}")

    async def create_payment_intent(
        self,
        amount_cents: int,
        metadata: Dict[str, str],
        customer_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        if self.fail_intents:
            raise PaymentProviderError(provider_code="card_declined")
        intent_id = f"pi_{uuid4().hex[:16]}"
        self.intents[intent_id] = {
            "id": intent_id,
            "client_secret": f"{intent_id}_secret_test",
            "amount": amount_cents,
            "status": "requires_payment_method",
            "metadata": dict(metadata),
            "customer": customer_id,
            "description": description,
        }
        return {
            "id": intent_id,
            "client_secret": self.intents[intent_id]["client_secret"],
            "amount": amount_cents,
            "status": "requires_payment_method",
        }

    async def retrieve_payment_intent(self, intent_id: str) -> Dict[str, Any]:
        if intent_id not in self.intents:
            raise PaymentProviderError(provider_code="resource_missing")
        intent = self.intents[intent_id]
        return {
            "id": intent["id"],
            "amount": intent["amount"],
            "status": intent["status"],
            "metadata": dict(intent["metadata"]),
        }

    async def create_checkout_session(
        self,
        line_items: List[Dict[str, Any]],
        metadata: Dict[str, str],
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str] = None,
        shipping_countries: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        session_id = f"cs_test_{uuid4().hex[:16]}"
        self.sessions[session_id] = {
            "id": session_id,
            "line_items": line_items,
            "metadata": dict(metadata),
            "success_url": success_url,
            "cancel_url": cancel_url,
            "customer_email": customer_email,
            "shipping_countries": shipping_countries,
        }
        return {"id": session_id, "url": f"https://checkout.stripe.test/{session_id}"}


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a ``Stripe-Signature`` header for the payload."""
    timestamp = timestamp if timestamp is not None else int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def make_event(event_type: str, obj: Dict[str, Any], event_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "id": event_id or f"evt_{uuid4().hex[:16]}",
        "object": "event",
        "type": event_type,
        "data": {"object": obj},
    }


# ==============================================================================
# HTTP CLIENT FIXTURES
# ==============================================================================

@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest_asyncio.fixture
async def client(gateway: FakeGateway) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client backed by an empty in-memory database."""
    from storefront.api.dependencies import get_payment_gateway
    from storefront.database.factory import DatabaseFactory

    # Reset factory to ensure clean state
    DatabaseFactory.reset()

    # Import app after environment is set
    from storefront.main import app

    await DatabaseFactory.initialize(client=AsyncMongoClient())
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        timeout=30.0,
    ) as async_client:
        yield async_client

    app.dependency_overrides.clear()
    await DatabaseFactory.shutdown()
    DatabaseFactory.reset()


@pytest.fixture
def adapter(client: AsyncClient):
    """Adapter behind the running app, for seeding and inspecting state."""
    from storefront.database.factory import DatabaseFactory
    return DatabaseFactory.get_adapter()


@pytest_asyncio.fixture
async def register_user(
    client: AsyncClient,
) -> Callable[..., Awaitable[Tuple[str, Dict[str, str], Dict[str, Any]]]]:
    """
    Factory registering a fresh user.

    Returns:
        Callable returning (user_id, auth headers, signup data)
    """

    async def _register(role: str = "user") -> Tuple[str, Dict[str, str], Dict[str, Any]]:
        suffix = uuid4().hex[:8]
        user_data = {
            "username": f"user_{suffix}",
            "email": f"user_{suffix}@example.com",
            "password": "TestPassword123!",
        }
        response = await client.post(f"{API}/auth/signup", json=user_data)
        assert response.status_code == 201, f"Failed to register: {response.text}"

        result = response.json()["data"]
        user_id = result["user"]["id"]
        if role != "user":
            from storefront.database.factory import DatabaseFactory
            await DatabaseFactory.get_adapter().update("users", user_id, {"role": role})

        return user_id, {"Authorization": f"Bearer {result['token']}"}, user_data

    return _register


@pytest_asyncio.fixture
async def auth_client(
    client: AsyncClient,
    register_user,
) -> AsyncGenerator[Tuple[AsyncClient, str, Dict[str, Any]], None]:
    """
    Create authenticated client with test user.

    Returns:
        Tuple of (client, user_id, user_data)
    """
    user_id, headers, user_data = await register_user()
    client.headers.update(headers)

    yield client, user_id, user_data

    # Cleanup - remove auth header
    if "Authorization" in client.headers:
        del client.headers["Authorization"]


@pytest_asyncio.fixture
async def admin_headers(register_user) -> Dict[str, str]:
    """Auth headers for a user promoted to admin."""
    _, headers, _ = await register_user(role="admin")
    return headers


# ==============================================================================
# CATALOG FIXTURES
# ==============================================================================

@pytest_asyncio.fixture
async def product_factory(adapter) -> Callable[..., Awaitable[Dict[str, Any]]]:
    """Factory creating products through the product service."""
    from storefront.schemas.product import ProductCreate
    from storefront.services.product_service import ProductService

    service = ProductService(adapter)

    async def _create(**overrides: Any) -> Dict[str, Any]:
        data = {
            "name": f"Sneaker {uuid4().hex[:6]}",
            "description": "Lightweight running shoe",
            "brand": "Stride",
            "category": "shoes",
            "gender": "Unisex",
            "price": 120.0,
            "new_price": 100.0,
            "quantity": 10,
            "images": ["https://img.example.com/sneaker.jpg"],
            "trending": False,
        }
        data.update(overrides)
        product = await service.create(ProductCreate(**data))
        return product.model_dump()

    return _create


@pytest.fixture
def shipping_address() -> Dict[str, str]:
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "address": "12 Analytical Way",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "country": "US",
        "phone": "5551234567",
    }


@pytest.fixture
def webhook_poster(client: AsyncClient) -> Callable[..., Awaitable[Any]]:
    """Post a signed provider event to the webhook endpoint."""

    async def _post(event: Dict[str, Any], path: str = f"{API}/webhook/stripe", signature: Optional[str] = None):
        payload = json.dumps(event)
        return await client.post(
            path,
            content=payload,
            headers={
                "stripe-signature": signature or sign_payload(payload),
                "content-type": "application/json",
            },
        )

    return _post
