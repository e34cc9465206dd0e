# ==============================================================================
# ANALYTICS ENDPOINT TESTS
# ==============================================================================
# Tests for event tracking and the admin reports
# ==============================================================================

import pytest
import pytest_asyncio

from storefront.utils.helpers import utc_now


@pytest_asyncio.fixture
async def admin_client(client, admin_headers):
    client.headers.update(admin_headers)
    yield client
    del client.headers["Authorization"]


class TestTracking:
    """Tests for the public tracking routes."""

    @pytest.mark.asyncio
    async def test_track_anonymous(self, client, adapter):
        """Test anonymous events are stored with request metadata."""
        response = await client.post(
            "/api/analytics/track",
            json={"type": "wishlist_add", "data": {"product_id": "p1"}, "session_id": "s-1"},
            headers={"User-Agent": "pytest-agent", "Referer": "https://shop.example.com/"},
        )

        assert response.status_code == 201
        events = await adapter.get_all("analytics", filters={"type": "wishlist_add"})
        assert len(events) == 1
        assert events[0]["user_id"] is None
        assert events[0]["session_id"] == "s-1"
        assert events[0]["metadata"]["user_agent"] == "pytest-agent"
        assert events[0]["metadata"]["referrer"] == "https://shop.example.com/"

    @pytest.mark.asyncio
    async def test_track_attaches_user(self, auth_client, adapter):
        """Test a valid token attributes the event to the user."""
        client, user_id, _ = auth_client

        await client.post("/api/analytics/track", json={"type": "cart_remove"})

        events = await adapter.get_all("analytics", filters={"type": "cart_remove"})
        assert events[0]["user_id"] == user_id

    @pytest.mark.asyncio
    async def test_track_unknown_type(self, client):
        """Test unknown event types are rejected."""
        response = await client.post("/api/analytics/track", json={"type": "mouse_move"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_page_view(self, client, adapter):
        """Test page views are stored as page_view events."""
        response = await client.post("/api/analytics/track-page-view", json={"page": "/products/shoes"})

        assert response.status_code == 201
        events = await adapter.get_all("analytics", filters={"type": "page_view"})
        assert events[0]["data"] == {"page": "/products/shoes"}


class TestReports:
    """Tests for the admin reports."""

    @pytest.mark.asyncio
    async def test_reports_are_admin_only(self, auth_client):
        """Test customers cannot read reports."""
        client, _, _ = auth_client

        for path in ("dashboard", "sales", "users", "products", "search"):
            response = await client.get(f"/api/analytics/{path}")
            assert response.status_code == 403, path

    @pytest.mark.asyncio
    async def test_days_bounds(self, admin_client):
        """Test the reporting window is bounded."""
        response = await admin_client.get("/api/analytics/sales", params={"days": 0})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_dashboard(self, admin_client, product_factory):
        """Test the dashboard funnel follows views and cart adds."""
        product = await product_factory()
        await admin_client.get(f"/api/products/{product['id']}")
        await admin_client.get(f"/api/products/{product['id']}")
        await admin_client.post("/api/user/cart", json={"product_id": product["id"], "quantity": 1})
        await admin_client.get("/api/products/search", params={"q": "Sneaker"})

        response = await admin_client.get("/api/analytics/dashboard", params={"days": 7})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["period_days"] == 7
        assert data["totals"]["users"] == 1
        assert data["totals"]["products"] == 1
        assert data["events_by_type"]["product_view"] == 2
        assert data["top_products"] == [{"product_id": product["id"], "count": 2, "name": product["name"]}]
        assert data["top_searches"] == [{"query": "sneaker", "count": 1}]
        funnel = data["conversion_funnel"]
        assert funnel["product_views"] == 2
        assert funnel["cart_adds"] == 1
        assert funnel["view_to_cart_rate"] == 50.0

    @pytest.mark.asyncio
    async def test_sales_counts_paid_orders(
        self, auth_client, admin_headers, product_factory, shipping_address
    ):
        """Test sales only include orders whose payment completed."""
        client, _, _ = auth_client
        product = await product_factory(price=100.0, new_price=100.0)
        await client.post("/api/user/cart", json={"product_id": product["id"], "quantity": 2})
        paid = (await client.post("/api/orders", json={"shipping_address": shipping_address})).json()["data"]["order"]
        await client.post("/api/user/cart", json={"product_id": product["id"], "quantity": 1})
        await client.post("/api/orders", json={"shipping_address": shipping_address})
        await client.put(
            f"/api/admin/orders/{paid['id']}/payment-status",
            json={"payment_status": "completed"},
            headers=admin_headers,
        )

        response = await client.get("/api/analytics/sales", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_revenue"] == paid["final_amount"]
        assert data["daily_revenue"] == [
            {"date": utc_now().date().isoformat(), "orders": 1, "revenue": paid["final_amount"]}
        ]
        assert data["top_selling_products"] == [
            {"product_id": product["id"], "name": product["name"], "quantity": 2, "revenue": 200.0}
        ]

    @pytest.mark.asyncio
    async def test_users_report(self, client, register_user, admin_headers):
        """Test registrations and logins per day."""
        _, _, user_data = await register_user()
        await client.post(
            "/api/auth/login",
            json={"email": user_data["email"], "password": user_data["password"]},
        )

        response = await client.get("/api/analytics/users", headers=admin_headers)

        data = response.json()["data"]
        today = utc_now().date().isoformat()
        assert data["registrations"] == [{"date": today, "count": 2}]
        assert data["logins"] == [{"date": today, "count": 1}]
        assert data["total_users"] == 2
        assert data["new_users"] == 2

    @pytest.mark.asyncio
    async def test_products_and_search_reports(self, admin_client, product_factory):
        """Test the product view and search reports."""
        product = await product_factory()
        await admin_client.get(f"/api/products/{product['id']}")
        await admin_client.get("/api/products/search", params={"q": "Boots"})
        await admin_client.get("/api/products/search", params={"q": "boots"})

        products = (await admin_client.get("/api/analytics/products")).json()["data"]
        assert products["top_viewed"][0]["product_id"] == product["id"]
        assert products["views_per_day"][0]["count"] == 1

        searches = (await admin_client.get("/api/analytics/search")).json()["data"]
        assert searches["top_searches"] == [{"query": "boots", "count": 2}]
        assert searches["searches_per_day"][0]["count"] == 2
