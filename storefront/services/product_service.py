# ==============================================================================
# PRODUCT SERVICE - Catalog & Stock
# ==============================================================================
# Product listing, search, admin CRUD and atomic stock reservation
# ==============================================================================

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from storefront.core.constants import APIConstants, DatabaseConstants, ErrorMessages
from storefront.core.exceptions import BadRequestError, NotFoundError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.base import Pagination
from storefront.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from storefront.services.base_service import BaseService
from storefront.utils.helpers import utc_now

logger = logging.getLogger(__name__)

SORT_FIELDS = ("created_at", "new_price", "rating", "name")


def discount_percentage(price: float, new_price: float) -> int:
    """Whole-percent discount of ``new_price`` against ``price``."""
    if not price:
        return 0
    return round((price - new_price) / price * 100)


class ProductService(BaseService[ProductResponse]):
    """
    Catalog service.

    Besides listing and admin CRUD it owns the stock counter:
    ``reserve_stock`` is a conditional decrement that only succeeds
    when enough units remain, and ``release_stock`` gives units back.
    """

    _not_found_message = ErrorMessages.PRODUCT_NOT_FOUND

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        super().__init__(adapter, DatabaseConstants.PRODUCTS_COLLECTION)

    def _to_response(self, entity: Dict[str, Any]) -> ProductResponse:
        data = dict(entity)
        data["discount_percentage"] = discount_percentage(
            data.get("price", 0), data.get("new_price", 0)
        )
        return ProductResponse.model_validate(data)

    # ==========================================================================
    # PUBLIC CATALOG
    # ==========================================================================

    async def list_products(
        self,
        category: Optional[str] = None,
        gender: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        rating: Optional[float] = None,
        trending: Optional[bool] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = APIConstants.PRODUCT_PAGE_SIZE,
        include_inactive: bool = False,
    ) -> Tuple[List[ProductResponse], Pagination]:
        """Filtered, sorted and paginated product listing."""
        filters: Dict[str, Any] = {}
        if not include_inactive:
            filters["is_active"] = True
        if category:
            filters["category"] = category.lower()
        if gender:
            filters["gender"] = gender
        if min_price is not None or max_price is not None:
            price_range: Dict[str, float] = {}
            if min_price is not None:
                price_range["$gte"] = min_price
            if max_price is not None:
                price_range["$lte"] = max_price
            filters["new_price"] = price_range
        if rating is not None:
            filters["rating"] = {"$gte": rating}
        if trending is not None:
            filters["trending"] = trending
        if search:
            pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
            filters["$or"] = [
                {"name": pattern},
                {"description": pattern},
                {"brand": pattern},
                {"tags": pattern},
            ]

        if sort_by not in SORT_FIELDS:
            sort_by = "created_at"
        return await self.get_paginated(page, limit, filters, sort_by, sort_order)

    async def trending(self, limit: int = APIConstants.TRENDING_LIMIT) -> List[ProductResponse]:
        documents = await self._adapter.get_all(
            self._collection_name,
            limit=limit,
            filters={"is_active": True, "trending": True},
            sort_by="rating",
            sort_order="desc",
        )
        return [self._to_response(doc) for doc in documents]

    async def get_active_document(self, product_id: str) -> Dict[str, Any]:
        """
        Raw document of an active product.

        Raises:
            NotFoundError: If the product is missing or inactive
        """
        product = await self._adapter.find_one(
            self._collection_name,
            {"id": product_id, "is_active": True},
        )
        if not product:
            raise NotFoundError(
                message=ErrorMessages.PRODUCT_NOT_FOUND,
                resource_type="product",
                resource_id=product_id,
            )
        return product

    async def get_active(self, product_id: str) -> ProductResponse:
        return self._to_response(await self.get_active_document(product_id))

    async def get_documents(self, product_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Products keyed by id; missing ids are simply absent."""
        if not product_ids:
            return {}
        documents = await self._adapter.get_all(
            self._collection_name,
            limit=len(product_ids),
            filters={"id": {"$in": list(dict.fromkeys(product_ids))}},
        )
        return {doc["id"]: doc for doc in documents}

    # ==========================================================================
    # STOCK
    # ==========================================================================

    async def reserve_stock(self, product_id: str, quantity: int) -> bool:
        """
        Atomically take ``quantity`` units if at least that many remain.

        Returns:
            True if the units were reserved
        """
        updated = await self._adapter.find_one_and_update(
            self._collection_name,
            {"id": product_id, "is_active": True, "quantity": {"$gte": quantity}},
            {"$inc": {"quantity": -quantity}},
        )
        return updated is not None

    async def release_stock(self, product_id: str, quantity: int) -> None:
        matched = await self._adapter.update_one(
            self._collection_name,
            {"id": product_id},
            {"$inc": {"quantity": quantity}},
        )
        if not matched:
            logger.warning(f"Could not restore {quantity} units of missing product {product_id}")

    async def update_rating(self, product_id: str, rating: float, review_count: int) -> None:
        await self._adapter.update(
            self._collection_name,
            product_id,
            {"rating": rating, "review_count": review_count},
        )

    # ==========================================================================
    # ADMIN
    # ==========================================================================

    async def create(self, schema: ProductCreate) -> ProductResponse:
        data = schema.model_dump()
        data.update({"rating": 0.0, "review_count": 0, "is_active": True})
        product = await self._insert(data)
        logger.info(f"Created product {product['id']} ({product['name']})")
        return self._to_response(product)

    async def update(self, product_id: str, schema: ProductUpdate) -> ProductResponse:
        current = await self._get_document(product_id)
        data = schema.model_dump(exclude_unset=True)
        if not data:
            raise BadRequestError(message="No fields to update")

        price = data.get("price", current.get("price", 0))
        new_price = data.get("new_price", current.get("new_price", 0))
        if new_price > price:
            raise BadRequestError(message="new_price cannot exceed price")

        data["updated_at"] = utc_now()
        product = await self._adapter.update(self._collection_name, product_id, data)
        return self._to_response(product)

    async def soft_delete(self, product_id: str) -> None:
        await self._get_document(product_id)
        await self._adapter.update(
            self._collection_name,
            product_id,
            {"is_active": False, "updated_at": utc_now()},
        )
        logger.info(f"Deactivated product {product_id}")
