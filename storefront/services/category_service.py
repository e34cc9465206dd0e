# ==============================================================================
# CATEGORY SERVICE
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, List

from storefront.core.constants import DatabaseConstants, ErrorMessages
from storefront.core.exceptions import AlreadyExistsError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.product import CategoryCreate, CategoryResponse
from storefront.services.base_service import BaseService


class CategoryService(BaseService[CategoryResponse]):
    """Product categories."""

    _not_found_message = ErrorMessages.CATEGORY_NOT_FOUND

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        super().__init__(adapter, DatabaseConstants.CATEGORIES_COLLECTION)

    def _to_response(self, entity: Dict[str, Any]) -> CategoryResponse:
        return CategoryResponse.model_validate(entity)

    async def list_active(self) -> List[CategoryResponse]:
        """Active categories ordered by sort_order, then display name."""
        documents = await self._adapter.get_all(
            self._collection_name,
            limit=DatabaseConstants.MAX_BATCH_SIZE,
            filters={"is_active": True},
        )
        documents.sort(key=lambda c: (c.get("sort_order", 0), c.get("display_name", "")))
        return [self._to_response(doc) for doc in documents]

    async def create(self, schema: CategoryCreate) -> CategoryResponse:
        """
        Raises:
            AlreadyExistsError: If the category name is taken
        """
        if await self._adapter.exists(self._collection_name, {"category_name": schema.category_name}):
            raise AlreadyExistsError(
                message=f"Category '{schema.category_name}' already exists",
                resource_type="category",
            )
        data = schema.model_dump()
        data["is_active"] = True
        data["product_count"] = await self._adapter.count(
            DatabaseConstants.PRODUCTS_COLLECTION,
            {"category": schema.category_name, "is_active": True},
        )
        return self._to_response(await self._insert(data))
