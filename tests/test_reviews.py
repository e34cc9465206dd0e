# ==============================================================================
# REVIEW ENDPOINT TESTS
# ==============================================================================
# Tests for verified-purchase reviews and product rating aggregation
# ==============================================================================

import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def delivered_order(auth_client, admin_headers, product_factory, shipping_address):
    """A delivered order for the authenticated user; returns (product, order)."""
    client, _, _ = auth_client
    product = await product_factory()
    await client.post("/api/user/cart", json={"product_id": product["id"], "quantity": 1})
    order = (await client.post("/api/orders", json={"shipping_address": shipping_address})).json()["data"]["order"]
    for status in ("confirmed", "processing", "shipped", "delivered"):
        response = await client.put(
            f"/api/admin/orders/{order['id']}/status",
            json={"status": status},
            headers=admin_headers,
        )
        assert response.status_code == 200, response.text
    return product, order


async def post_review(client, product, order, rating=5, comment="Great fit", headers=None):
    return await client.post(
        "/api/reviews",
        json={"product_id": product["id"], "order_id": order["id"], "rating": rating, "comment": comment},
        headers=headers,
    )


class TestReviewEligibility:
    """Tests for the can-review check."""

    @pytest.mark.asyncio
    async def test_can_review_delivered(self, auth_client, delivered_order):
        """Test a delivered order allows a review."""
        client, _, _ = auth_client
        product, order = delivered_order

        response = await client.get(f"/api/reviews/can-review/{product['id']}/{order['id']}")

        assert response.status_code == 200
        assert response.json()["data"] == {"can_review": True, "reason": None}

    @pytest.mark.asyncio
    async def test_cannot_review_undelivered(self, auth_client, product_factory, shipping_address):
        """Test an order that is not delivered cannot be reviewed."""
        client, _, _ = auth_client
        product = await product_factory()
        await client.post("/api/user/cart", json={"product_id": product["id"], "quantity": 1})
        order = (await client.post("/api/orders", json={"shipping_address": shipping_address})).json()["data"]["order"]

        response = await post_review(client, product, order)

        assert response.status_code == 400
        assert response.json()["message"] == "You can only review products from delivered orders"

    @pytest.mark.asyncio
    async def test_cannot_review_product_not_in_order(self, auth_client, delivered_order, product_factory):
        """Test only products from the order can be reviewed."""
        client, _, _ = auth_client
        _, order = delivered_order
        other = await product_factory()

        response = await client.get(f"/api/reviews/can-review/{other['id']}/{order['id']}")

        assert response.json()["data"]["can_review"] is False
        assert response.json()["data"]["reason"] == "Product not found in this order"

    @pytest.mark.asyncio
    async def test_cannot_review_someone_elses_order(self, auth_client, delivered_order, register_user):
        """Test another user's order is treated as not found."""
        client, _, _ = auth_client
        product, order = delivered_order
        _, other_headers, _ = await register_user()

        response = await post_review(client, product, order, headers=other_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Order not found"


class TestReviewWrites:
    """Tests for creating and changing reviews."""

    @pytest.mark.asyncio
    async def test_create_updates_product_rating(self, auth_client, delivered_order, adapter):
        """Test a review is verified and the product rating follows it."""
        client, user_id, user_data = auth_client
        product, order = delivered_order

        response = await post_review(client, product, order, rating=4, comment="  Comfortable  ")

        assert response.status_code == 201
        review = response.json()["data"]
        assert review["verified"] is True
        assert review["comment"] == "Comfortable"
        assert review["username"] == user_data["username"]

        stored = await adapter.get_by_id("products", product["id"])
        assert stored["rating"] == 4.0
        assert stored["review_count"] == 1

    @pytest.mark.asyncio
    async def test_one_review_per_order(self, auth_client, delivered_order):
        """Test a second review for the same product and order is rejected."""
        client, _, _ = auth_client
        product, order = delivered_order
        await post_review(client, product, order)

        response = await post_review(client, product, order)

        assert response.status_code == 400
        assert response.json()["message"] == "You have already reviewed this product for this order"

    @pytest.mark.asyncio
    async def test_invalid_rating(self, auth_client, delivered_order):
        """Test ratings outside 1-5 are rejected."""
        client, _, _ = auth_client
        product, order = delivered_order

        response = await post_review(client, product, order, rating=6)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_recomputes_rating(self, auth_client, delivered_order, adapter):
        """Test editing a rating refreshes the product aggregate."""
        client, _, _ = auth_client
        product, order = delivered_order
        review = (await post_review(client, product, order, rating=5)).json()["data"]

        response = await client.put(f"/api/reviews/{review['id']}", json={"rating": 2})

        assert response.status_code == 200
        assert response.json()["data"]["rating"] == 2
        assert (await adapter.get_by_id("products", product["id"]))["rating"] == 2.0

    @pytest.mark.asyncio
    async def test_only_author_can_edit(self, auth_client, delivered_order, register_user):
        """Test other users cannot edit or delete a review."""
        client, _, _ = auth_client
        product, order = delivered_order
        review = (await post_review(client, product, order)).json()["data"]
        _, other_headers, _ = await register_user()

        response = await client.put(f"/api/reviews/{review['id']}", json={"rating": 1}, headers=other_headers)
        assert response.status_code == 403

        response = await client.delete(f"/api/reviews/{review['id']}", headers=other_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_resets_rating(self, auth_client, delivered_order, adapter):
        """Test deleting the only review resets the product rating."""
        client, _, _ = auth_client
        product, order = delivered_order
        review = (await post_review(client, product, order)).json()["data"]

        response = await client.delete(f"/api/reviews/{review['id']}")

        assert response.status_code == 200
        stored = await adapter.get_by_id("products", product["id"])
        assert stored["rating"] == 0.0
        assert stored["review_count"] == 0

    @pytest.mark.asyncio
    async def test_mark_helpful_once(self, auth_client, delivered_order, register_user):
        """Test a user can mark a review helpful only once."""
        client, _, _ = auth_client
        product, order = delivered_order
        review = (await post_review(client, product, order)).json()["data"]
        _, other_headers, _ = await register_user()

        response = await client.post(f"/api/reviews/{review['id']}/helpful", headers=other_headers)
        assert response.status_code == 200
        assert response.json()["data"]["helpful"] == 1

        response = await client.post(f"/api/reviews/{review['id']}/helpful", headers=other_headers)
        assert response.status_code == 400


class TestReviewQueries:
    """Tests for review listings."""

    @pytest.mark.asyncio
    async def test_product_reviews_distribution(self, auth_client, delivered_order):
        """Test product reviews include the rating distribution."""
        client, _, _ = auth_client
        product, order = delivered_order
        await post_review(client, product, order, rating=4)

        response = await client.get(f"/api/reviews/product/{product['id']}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_reviews"] == 1
        assert data["average_rating"] == 4.0
        assert data["rating_distribution"] == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 0}
        assert len(data["reviews"]) == 1

    @pytest.mark.asyncio
    async def test_product_reviews_bad_sort(self, client):
        """Test unknown sort keys are rejected."""
        response = await client.get("/api/reviews/product/abc", params={"sort": "random"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_my_reviews(self, auth_client, delivered_order):
        """Test the caller's own reviews are listed."""
        client, _, _ = auth_client
        product, order = delivered_order
        await post_review(client, product, order)

        response = await client.get("/api/reviews/user")

        assert response.status_code == 200
        assert response.json()["data"]["pagination"]["total_items"] == 1
