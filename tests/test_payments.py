# ==============================================================================
# PAYMENT ENDPOINT TESTS
# ==============================================================================
# Tests for direct payment intents, hosted checkout and confirmation
# ==============================================================================

import json

import pytest


async def place_order(client, product, shipping_address, quantity=1):
    await client.post("/api/user/cart", json={"product_id": product["id"], "quantity": quantity})
    response = await client.post("/api/orders", json={"shipping_address": shipping_address})
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestPaymentIntent:
    """Tests for ad hoc payment intents."""

    @pytest.mark.asyncio
    async def test_prices_come_from_catalog(self, auth_client, product_factory, gateway):
        """Test the charged amount ignores any client-supplied price."""
        client, user_id, _ = auth_client
        product = await product_factory(price=40.0, new_price=25.5)

        response = await client.post(
            "/api/payments/create-payment-intent",
            json={"items": [{"product_id": product["id"], "quantity": 2, "price": 0.01}]},
        )

        assert response.status_code == 201, response.text
        data = response.json()["data"]
        assert data["amount"] == 51.0
        assert data["client_secret"]

        intent = gateway.intents[data["payment_intent_id"]]
        assert intent["amount"] == 5100
        assert intent["metadata"]["type"] == "cart_checkout"
        assert intent["metadata"]["user_id"] == user_id
        assert json.loads(intent["metadata"]["items"]) == [
            {"product_id": product["id"], "quantity": 2, "price": 25.5}
        ]

    @pytest.mark.asyncio
    async def test_no_order_until_webhook(self, auth_client, product_factory, adapter):
        """Test creating an intent does not record an order."""
        client, _, _ = auth_client
        product = await product_factory()

        await client.post(
            "/api/payments/create-payment-intent",
            json={"items": [{"product_id": product["id"], "quantity": 1}]},
        )

        assert await adapter.count("orders") == 0

    @pytest.mark.asyncio
    async def test_minimum_charge(self, auth_client, product_factory):
        """Test amounts below the provider minimum are rejected."""
        client, _, _ = auth_client
        product = await product_factory(price=0.25, new_price=0.25)

        response = await client.post(
            "/api/payments/create-payment-intent",
            json={"items": [{"product_id": product["id"], "quantity": 1}]},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Amount must be at least $0.50"

    @pytest.mark.asyncio
    async def test_metadata_length_limit(self, auth_client, product_factory):
        """Test a cart too large for provider metadata is rejected."""
        client, _, _ = auth_client
        products = [await product_factory() for _ in range(8)]

        response = await client.post(
            "/api/payments/create-payment-intent",
            json={"items": [{"product_id": p["id"], "quantity": 1} for p in products]},
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["limit"] == 500

    @pytest.mark.asyncio
    async def test_unavailable_product(self, auth_client, product_factory, adapter):
        """Test inactive products cannot be paid for."""
        client, _, _ = auth_client
        product = await product_factory()
        await adapter.update("products", product["id"], {"is_active": False})

        response = await client.post(
            "/api/payments/create-payment-intent",
            json={"items": [{"product_id": product["id"], "quantity": 1}]},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_insufficient_stock(self, auth_client, product_factory):
        """Test quantities above stock are rejected."""
        client, _, _ = auth_client
        product = await product_factory(quantity=1)

        response = await client.post(
            "/api/payments/create-payment-intent",
            json={"items": [{"product_id": product["id"], "quantity": 2}]},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INSUFFICIENT_STOCK"


class TestCheckoutSession:
    """Tests for hosted checkout sessions."""

    @pytest.mark.asyncio
    async def test_create_session(self, auth_client, product_factory, gateway):
        """Test session line items and metadata."""
        client, user_id, user_data = auth_client
        product = await product_factory(price=20.0, new_price=19.99)

        response = await client.post(
            "/api/payments/create-checkout-session",
            json={
                "items": [{"product_id": product["id"], "quantity": 3}],
                "success_url": "https://shop.example.com/success",
                "cancel_url": "https://shop.example.com/cancel",
                "shipping_address": {"fullname": "Ada Lovelace", "city": "London"},
            },
        )

        assert response.status_code == 201, response.text
        data = response.json()["data"]
        assert data["checkout_url"].endswith(data["session_id"])

        session = gateway.sessions[data["session_id"]]
        assert session["line_items"][0]["price_data"]["unit_amount"] == 1999
        assert session["line_items"][0]["quantity"] == 3
        assert session["customer_email"] == user_data["email"].lower()
        metadata = session["metadata"]
        assert metadata["user_id"] == user_id
        assert metadata["payment_method"] == "stripe"
        assert json.loads(metadata["shipping_address"]) == {"fullname": "Ada Lovelace", "city": "London"}

    @pytest.mark.asyncio
    async def test_session_default_urls(self, auth_client, product_factory, gateway):
        """Test redirect URLs default to the storefront pages."""
        client, _, _ = auth_client
        product = await product_factory()

        response = await client.post(
            "/api/payments/create-checkout-session",
            json={"items": [{"product_id": product["id"], "quantity": 1}]},
        )

        assert response.status_code == 201, response.text
        session = gateway.sessions[response.json()["data"]["session_id"]]
        assert session["success_url"] == "https://shop.example.com/payment/success?session_id={CHECKOUT_SESSION_ID}"
        assert session["cancel_url"] == "https://shop.example.com/cart"

    @pytest.mark.asyncio
    async def test_session_minimum_charge(self, auth_client, product_factory):
        """Test hosted checkout enforces the minimum charge too."""
        client, _, _ = auth_client
        product = await product_factory(price=0.1, new_price=0.1)

        response = await client.post(
            "/api/payments/create-checkout-session",
            json={
                "items": [{"product_id": product["id"], "quantity": 1}],
                "success_url": "https://shop.example.com/success",
                "cancel_url": "https://shop.example.com/cancel",
            },
        )

        assert response.status_code == 400


class TestConfirmPayment:
    """Tests for client-driven payment confirmation."""

    @pytest.mark.asyncio
    async def test_confirm_succeeded(self, auth_client, product_factory, shipping_address, gateway):
        """Test a succeeded intent confirms the order."""
        client, _, _ = auth_client
        created = await place_order(client, await product_factory(), shipping_address)
        intent_id = created["payment_intent_id"]
        gateway.intents[intent_id]["status"] = "succeeded"

        response = await client.post("/api/payments/confirm-payment", json={"payment_intent_id": intent_id})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Payment confirmed successfully"
        assert body["data"]["status"] == "succeeded"
        assert body["data"]["order"]["status"] == "confirmed"
        assert body["data"]["order"]["payment_status"] == "completed"
        assert body["data"]["order"]["transaction_id"] == intent_id

    @pytest.mark.asyncio
    async def test_confirm_declined_keeps_order_open(
        self, auth_client, product_factory, shipping_address, gateway, adapter
    ):
        """Test an unpaid intent flags the payment but keeps the order and its stock."""
        client, _, _ = auth_client
        product = await product_factory(quantity=4)
        created = await place_order(client, product, shipping_address, quantity=2)
        intent_id = created["payment_intent_id"]

        response = await client.post(
            "/api/payments/confirm-payment",
            json={"payment_intent_id": intent_id, "order_id": created["order"]["id"]},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Payment failed. Please try again."
        order = await adapter.get_by_id("orders", created["order"]["id"])
        assert order["status"] == "pending"
        assert order["payment_status"] == "failed"
        assert (await adapter.get_by_id("products", product["id"]))["quantity"] == 2

        gateway.intents[intent_id]["status"] = "succeeded"
        response = await client.post("/api/payments/confirm-payment", json={"payment_intent_id": intent_id})

        assert response.status_code == 200
        assert response.json()["data"]["order"]["status"] == "confirmed"
        assert response.json()["data"]["order"]["payment_status"] == "completed"

    @pytest.mark.asyncio
    async def test_confirm_intent_of_another_order(
        self, auth_client, product_factory, shipping_address, gateway, adapter
    ):
        """Test a paid intent cannot settle an order it was not opened for."""
        client, _, _ = auth_client
        expensive = await place_order(client, await product_factory(price=950.0, new_price=900.0), shipping_address)
        cheap = await client.post(
            "/api/payments/create-payment-intent",
            json={"items": [{"product_id": (await product_factory(new_price=1.0))["id"], "quantity": 1}]},
        )
        cheap_intent = cheap.json()["data"]["payment_intent_id"]
        gateway.intents[cheap_intent]["status"] = "succeeded"

        response = await client.post(
            "/api/payments/confirm-payment",
            json={"payment_intent_id": cheap_intent, "order_id": expensive["order"]["id"]},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Payment intent does not belong to this order"
        order = await adapter.get_by_id("orders", expensive["order"]["id"])
        assert order["status"] == "pending"
        assert order["payment_status"] == "pending"

    @pytest.mark.asyncio
    async def test_confirm_order_id_of_other_intent(
        self, auth_client, product_factory, shipping_address, gateway, adapter
    ):
        """Test one order's paid intent cannot confirm a second order."""
        client, _, _ = auth_client
        first = await place_order(client, await product_factory(), shipping_address)
        second = await place_order(client, await product_factory(), shipping_address)
        gateway.intents[first["payment_intent_id"]]["status"] = "succeeded"

        response = await client.post(
            "/api/payments/confirm-payment",
            json={"payment_intent_id": first["payment_intent_id"], "order_id": second["order"]["id"]},
        )

        assert response.status_code == 400
        assert (await adapter.get_by_id("orders", second["order"]["id"]))["payment_status"] == "pending"
        assert (await adapter.get_by_id("orders", first["order"]["id"]))["payment_status"] == "pending"

    @pytest.mark.asyncio
    async def test_confirm_other_users_cart_intent(self, auth_client, register_user, product_factory, gateway):
        """Test a cart checkout intent is only visible to the customer who opened it."""
        client, _, _ = auth_client
        response = await client.post(
            "/api/payments/create-payment-intent",
            json={"items": [{"product_id": (await product_factory())["id"], "quantity": 1}]},
        )
        intent_id = response.json()["data"]["payment_intent_id"]
        _, other_headers, _ = await register_user()

        response = await client.post(
            "/api/payments/confirm-payment",
            json={"payment_intent_id": intent_id},
            headers=other_headers,
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_confirm_processing(self, auth_client, product_factory, shipping_address, gateway):
        """Test an in-flight intent leaves the order untouched."""
        client, _, _ = auth_client
        created = await place_order(client, await product_factory(), shipping_address)
        gateway.intents[created["payment_intent_id"]]["status"] = "processing"

        response = await client.post(
            "/api/payments/confirm-payment",
            json={"payment_intent_id": created["payment_intent_id"]},
        )

        assert response.status_code == 200
        assert response.json()["data"]["order"]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_confirm_other_users_order(
        self, auth_client, register_user, product_factory, shipping_address, gateway
    ):
        """Test customers cannot confirm someone else's order."""
        client, _, _ = auth_client
        created = await place_order(client, await product_factory(), shipping_address)
        _, other_headers, _ = await register_user()

        response = await client.post(
            "/api/payments/confirm-payment",
            json={"payment_intent_id": created["payment_intent_id"]},
            headers=other_headers,
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_confirm_unknown_intent(self, auth_client):
        """Test provider errors surface as 502."""
        client, _, _ = auth_client

        response = await client.post("/api/payments/confirm-payment", json={"payment_intent_id": "pi_missing"})

        assert response.status_code == 502


class TestPaymentMethods:
    """Tests for the supported methods listing."""

    @pytest.mark.asyncio
    async def test_methods(self, client):
        """Test supported methods are public."""
        response = await client.get("/api/payments/methods")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["currency"] == "USD"
        assert {m["id"] for m in data["methods"]} >= {"card", "cash_app", "samsung_pay"}
