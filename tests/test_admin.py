# ==============================================================================
# ADMIN ENDPOINT TESTS
# ==============================================================================
# Tests for the back office: dashboard, users, catalog and orders
# ==============================================================================

import pytest
import pytest_asyncio


PRODUCT_PAYLOAD = {
    "name": "Trail Runner",
    "description": "Grippy outsole",
    "brand": "Stride",
    "category": "Shoes",
    "price": 150.0,
    "new_price": 120.0,
    "quantity": 8,
}


@pytest_asyncio.fixture
async def admin(register_user):
    """Returns (admin_id, headers)."""
    admin_id, headers, _ = await register_user("admin")
    return admin_id, headers


async def place_order(client, product, shipping_address):
    await client.post("/api/user/cart", json={"product_id": product["id"], "quantity": 1})
    response = await client.post("/api/orders", json={"shipping_address": shipping_address})
    return response.json()["data"]["order"]


class TestAdminAccess:
    """Tests for the admin role check."""

    @pytest.mark.asyncio
    async def test_customer_forbidden(self, auth_client):
        """Test customers cannot reach admin routes."""
        client, _, _ = auth_client

        response = await client.get("/api/admin/dashboard")

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_anonymous_unauthorized(self, client):
        """Test admin routes need a token."""
        response = await client.get("/api/admin/users")
        assert response.status_code == 401


class TestDashboard:
    """Tests for dashboard figures."""

    @pytest.mark.asyncio
    async def test_dashboard_stats(
        self, auth_client, admin, product_factory, shipping_address, adapter
    ):
        """Test counts and the shipped/delivered sales window."""
        client, _, _ = auth_client
        _, headers = admin
        product = await product_factory(price=300.0, new_price=300.0)
        hidden = await product_factory()
        await adapter.update("products", hidden["id"], {"is_active": False})
        delivered = await place_order(client, product, shipping_address)
        await place_order(client, product, shipping_address)
        await adapter.update("orders", delivered["id"], {"status": "delivered"})

        response = await client.get("/api/admin/dashboard", headers=headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["stats"] == {
            "total_users": 2,
            "total_products": 1,
            "total_orders": 2,
            "pending_orders": 1,
        }
        assert data["sales"]["order_count"] == 1
        assert data["sales"]["total_sales"] == delivered["final_amount"]
        assert len(data["recent_orders"]) == 2
        assert [p["id"] for p in data["top_products"]] == [product["id"]]


class TestUserManagement:
    """Tests for listing and (de)activating users."""

    @pytest.mark.asyncio
    async def test_list_and_search(self, auth_client, admin):
        """Test listing users with a case-insensitive search."""
        client, _, user_data = auth_client
        _, headers = admin

        response = await client.get("/api/admin/users", headers=headers)
        assert response.json()["data"]["pagination"]["total_items"] == 2

        response = await client.get(
            "/api/admin/users",
            params={"search": user_data["username"].upper()},
            headers=headers,
        )
        users = response.json()["data"]["users"]
        assert [u["username"] for u in users] == [user_data["username"]]
        assert "password" not in users[0]

    @pytest.mark.asyncio
    async def test_deactivate_blocks_login(self, auth_client, admin):
        """Test a deactivated user can no longer log in."""
        client, user_id, user_data = auth_client
        _, headers = admin

        response = await client.put(
            f"/api/admin/users/{user_id}/status",
            json={"is_active": False},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False

        response = await client.post(
            "/api/auth/login",
            json={"email": user_data["email"], "password": user_data["password"]},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_cannot_deactivate_self(self, client, admin):
        """Test admins cannot lock themselves out."""
        admin_id, headers = admin

        response = await client.put(
            f"/api/admin/users/{admin_id}/status",
            json={"is_active": False},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "You cannot deactivate your own account"


class TestCatalogManagement:
    """Tests for product and category administration."""

    @pytest.mark.asyncio
    async def test_create_product(self, client, admin):
        """Test creating a product lowercases the category."""
        _, headers = admin

        response = await client.post("/api/admin/products", json=PRODUCT_PAYLOAD, headers=headers)

        assert response.status_code == 201, response.text
        product = response.json()["data"]
        assert product["category"] == "shoes"
        assert product["is_active"] is True
        assert product["rating"] == 0.0

    @pytest.mark.asyncio
    async def test_create_rejects_inverted_prices(self, client, admin):
        """Test the selling price cannot exceed the list price."""
        _, headers = admin

        response = await client.post(
            "/api/admin/products",
            json={**PRODUCT_PAYLOAD, "new_price": 200.0},
            headers=headers,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_product(self, client, admin, product_factory):
        """Test partial updates and the price check against stored values."""
        _, headers = admin
        product = await product_factory(price=120.0, new_price=100.0)

        response = await client.put(
            f"/api/admin/products/{product['id']}",
            json={"quantity": 3, "trending": True},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["quantity"] == 3
        assert response.json()["data"]["trending"] is True

        response = await client.put(
            f"/api/admin/products/{product['id']}",
            json={"new_price": 130.0},
            headers=headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_soft_delete(self, client, admin, product_factory, adapter):
        """Test deleted products leave the storefront but stay in the back office."""
        _, headers = admin
        product = await product_factory()

        response = await client.delete(f"/api/admin/products/{product['id']}", headers=headers)
        assert response.status_code == 200
        assert (await adapter.get_by_id("products", product["id"])) is not None

        public = await client.get(f"/api/products/{product['id']}")
        assert public.status_code == 404

        listing = await client.get("/api/admin/products", headers=headers)
        assert [p["id"] for p in listing.json()["data"]["products"]] == [product["id"]]

        listing = await client.get("/api/admin/products", params={"include_inactive": False}, headers=headers)
        assert listing.json()["data"]["products"] == []

    @pytest.mark.asyncio
    async def test_missing_product(self, client, admin):
        """Test updating an unknown product."""
        _, headers = admin

        response = await client.put(f"/api/admin/products/{'0' * 24}", json={"quantity": 1}, headers=headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_duplicate_category(self, client, admin):
        """Test category names are unique."""
        _, headers = admin
        payload = {"category_name": "Bags", "display_name": "Bags"}

        first = await client.post("/api/admin/categories", json=payload, headers=headers)
        second = await client.post("/api/admin/categories", json={**payload, "category_name": "bags"}, headers=headers)

        assert first.status_code == 201
        assert first.json()["data"]["category_name"] == "bags"
        assert second.status_code == 409


class TestOrderManagement:
    """Tests for order listing and payment status."""

    @pytest.mark.asyncio
    async def test_list_with_filters(self, auth_client, admin, product_factory, shipping_address):
        """Test the admin order list filters by status and payment status."""
        client, _, _ = auth_client
        _, headers = admin
        product = await product_factory()
        first = await place_order(client, product, shipping_address)
        await place_order(client, product, shipping_address)
        await client.put(f"/api/orders/{first['id']}/cancel")

        response = await client.get("/api/admin/orders", headers=headers)
        assert response.json()["data"]["pagination"]["total_items"] == 2

        response = await client.get("/api/admin/orders", params={"status": "cancelled"}, headers=headers)
        assert [o["id"] for o in response.json()["data"]["orders"]] == [first["id"]]

        response = await client.get("/api/admin/orders", params={"payment_status": "completed"}, headers=headers)
        assert response.json()["data"]["orders"] == []

    @pytest.mark.asyncio
    async def test_invalid_status_filter(self, client, admin):
        """Test unknown status filters are rejected."""
        _, headers = admin

        response = await client.get("/api/admin/orders", params={"status": "lost"}, headers=headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_payment_status(self, auth_client, admin, product_factory, shipping_address):
        """Test admins can set the payment status directly."""
        client, _, _ = auth_client
        _, headers = admin
        order = await place_order(client, await product_factory(), shipping_address)

        response = await client.put(
            f"/api/admin/orders/{order['id']}/payment-status",
            json={"payment_status": "refunded"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["payment_status"] == "refunded"
        assert response.json()["data"]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_shipped_with_tracking(self, auth_client, admin, product_factory, shipping_address, adapter):
        """Test shipping records the tracking number and notifies the customer."""
        client, user_id, _ = auth_client
        _, headers = admin
        order = await place_order(client, await product_factory(), shipping_address)
        for step in ("confirmed", "processing"):
            await client.put(f"/api/admin/orders/{order['id']}/status", json={"status": step}, headers=headers)

        response = await client.put(
            f"/api/admin/orders/{order['id']}/status",
            json={"status": "shipped", "tracking_number": "1Z999"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["tracking_number"] == "1Z999"
        notes = await adapter.get_all("notifications", filters={"user_id": user_id, "type": "order_shipped"})
        assert len(notes) == 1
        assert "1Z999" in notes[0]["message"]
