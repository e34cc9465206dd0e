# ==============================================================================
# REVIEW SERVICE - Verified Purchase Reviews
# ==============================================================================

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from storefront.core.constants import DatabaseConstants, ErrorMessages, OrderConstants
from storefront.core.exceptions import AuthorizationError, BadRequestError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.base import Pagination
from storefront.schemas.review import (
    ProductReviewsResponse,
    ReviewCreate,
    ReviewEligibility,
    ReviewResponse,
    ReviewUpdate,
)
from storefront.services.base_service import BaseService
from storefront.services.product_service import ProductService
from storefront.utils.helpers import utc_now

logger = logging.getLogger(__name__)

SORTS = {
    "newest": ("created_at", "desc"),
    "oldest": ("created_at", "asc"),
    "highest": ("rating", "desc"),
    "lowest": ("rating", "asc"),
}


class ReviewService(BaseService[ReviewResponse]):
    """
    Product reviews tied to a delivered order.

    A user may review a product once per order that contained it.
    The product's ``rating`` and ``review_count`` are recomputed from
    active reviews after every change.
    """

    _not_found_message = ErrorMessages.REVIEW_NOT_FOUND

    def __init__(self, adapter: BaseDatabaseAdapter, products: Optional[ProductService] = None) -> None:
        super().__init__(adapter, DatabaseConstants.REVIEWS_COLLECTION)
        self._products = products or ProductService(adapter)

    def _to_response(self, entity: Dict[str, Any]) -> ReviewResponse:
        return ReviewResponse.model_validate(entity)

    # ==========================================================================
    # ELIGIBILITY
    # ==========================================================================

    async def check_eligibility(self, user_id: str, product_id: str, order_id: str) -> ReviewEligibility:
        if await self._adapter.exists(
            self._collection_name,
            {"product_id": product_id, "user_id": user_id, "order_id": order_id},
        ):
            return ReviewEligibility(can_review=False, reason="You have already reviewed this product for this order")

        order = await self._adapter.get_by_id(DatabaseConstants.ORDERS_COLLECTION, order_id)
        if not order or order.get("user_id") != user_id:
            return ReviewEligibility(can_review=False, reason="Order not found")
        if order.get("status") != OrderConstants.STATUS_DELIVERED:
            return ReviewEligibility(can_review=False, reason="You can only review products from delivered orders")
        if not any(item.get("product_id") == product_id for item in order.get("items", [])):
            return ReviewEligibility(can_review=False, reason="Product not found in this order")

        return ReviewEligibility(can_review=True)

    # ==========================================================================
    # WRITES
    # ==========================================================================

    async def create(self, user: Dict[str, Any], schema: ReviewCreate) -> ReviewResponse:
        """
        Raises:
            BadRequestError: If the user may not review this product/order
            AlreadyExistsError: On a concurrent duplicate (unique index)
        """
        eligibility = await self.check_eligibility(user["id"], schema.product_id, schema.order_id)
        if not eligibility.can_review:
            raise BadRequestError(message=eligibility.reason)

        review = await self._insert({
            "product_id": schema.product_id,
            "user_id": user["id"],
            "username": user.get("username"),
            "order_id": schema.order_id,
            "rating": schema.rating,
            "comment": schema.comment.strip(),
            "helpful": 0,
            "helpful_by": [],
            "verified": True,
            "is_active": True,
        })
        await self._refresh_product_rating(schema.product_id)
        return self._to_response(review)

    async def update(self, user_id: str, review_id: str, schema: ReviewUpdate) -> ReviewResponse:
        review = await self._owned(user_id, review_id)
        data = schema.model_dump(exclude_unset=True, exclude_none=True)
        if not data:
            raise BadRequestError(message="No fields to update")
        data["updated_at"] = utc_now()

        updated = await self._adapter.update(self._collection_name, review_id, data)
        await self._refresh_product_rating(review["product_id"])
        return self._to_response(updated)

    async def delete(self, user_id: str, review_id: str) -> None:
        review = await self._owned(user_id, review_id)
        await self._adapter.delete(self._collection_name, review_id)
        await self._refresh_product_rating(review["product_id"])

    async def mark_helpful(self, user_id: str, review_id: str) -> ReviewResponse:
        """
        Raises:
            BadRequestError: If the user already marked this review
        """
        await self._get_document(review_id)
        updated = await self._adapter.find_one_and_update(
            self._collection_name,
            {"id": review_id, "helpful_by": {"$ne": user_id}},
            {"$inc": {"helpful": 1}, "$push": {"helpful_by": user_id}},
        )
        if not updated:
            raise BadRequestError(message="You have already marked this review as helpful")
        return self._to_response(updated)

    async def _owned(self, user_id: str, review_id: str) -> Dict[str, Any]:
        review = await self._get_document(review_id)
        if review["user_id"] != user_id:
            raise AuthorizationError(message="Not authorized to modify this review")
        return review

    async def _refresh_product_rating(self, product_id: str) -> None:
        rows = await self._adapter.aggregate(self._collection_name, [
            {"$match": {"product_id": product_id, "is_active": True}},
            {"$group": {"_id": "$product_id", "average": {"$avg": "$rating"}, "count": {"$sum": 1}}},
        ])
        average, count = (round(rows[0]["average"], 1), rows[0]["count"]) if rows else (0.0, 0)
        await self._products.update_rating(product_id, average, count)
        logger.info(f"Product {product_id} rating now {average} over {count} reviews")

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    async def for_product(
        self,
        product_id: str,
        sort: str = "newest",
        page: int = 1,
        limit: int = 10,
    ) -> ProductReviewsResponse:
        sort_by, sort_order = SORTS.get(sort, SORTS["newest"])
        filters = {"product_id": product_id, "is_active": True}
        reviews, pagination = await self.get_paginated(page, limit, filters, sort_by, sort_order)

        rows = await self._adapter.aggregate(self._collection_name, [
            {"$match": filters},
            {"$group": {"_id": "$rating", "count": {"$sum": 1}}},
        ])
        distribution = {str(star): 0 for star in range(1, 6)}
        for row in rows:
            distribution[str(row["_id"])] = row["count"]
        total = sum(distribution.values())
        average = (
            round(sum(int(star) * count for star, count in distribution.items()) / total, 1)
            if total else 0.0
        )

        return ProductReviewsResponse(
            reviews=reviews,
            pagination=pagination,
            average_rating=average,
            total_reviews=total,
            rating_distribution=distribution,
        )

    async def for_user(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[ReviewResponse], Pagination]:
        return await self.get_paginated(page, limit, {"user_id": user_id})
