# ==============================================================================
# BASE SERVICE - Shared Collection Access
# ==============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel

from storefront.core.exceptions import NotFoundError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.base import Pagination
from storefront.utils.helpers import calculate_offset, paginate_results, utc_now

ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)


class BaseService(ABC, Generic[ResponseSchemaType]):
    """
    One collection plus the schema its documents are returned as.

    Subclasses implement ``_to_response`` and set ``_not_found_message``
    to the text clients see when a lookup misses.
    """

    _not_found_message: str = "Resource not found"

    def __init__(self, adapter: BaseDatabaseAdapter, collection_name: str) -> None:
        self._adapter = adapter
        self._collection_name = collection_name

    @abstractmethod
    def _to_response(self, entity: Dict[str, Any]) -> ResponseSchemaType: ...

    async def _get_document(self, id: Any) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If no document has this id
        """
        document = await self._adapter.get_by_id(self._collection_name, id)
        if not document:
            raise NotFoundError(
                message=self._not_found_message,
                resource_type=self._collection_name,
                resource_id=id,
            )
        return document

    async def _insert(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = utc_now()
        data.setdefault("created_at", now)
        data.setdefault("updated_at", now)
        return await self._adapter.create(self._collection_name, data)

    async def get_by_id(self, id: Any) -> ResponseSchemaType:
        return self._to_response(await self._get_document(id))

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return await self._adapter.count(self._collection_name, filters)

    async def get_paginated(
        self,
        page: int = 1,
        page_size: int = 10,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[ResponseSchemaType], Pagination]:
        """Return one page of ``filters`` matches and its ``Pagination``."""
        documents = await self._adapter.get_all(
            self._collection_name,
            skip=calculate_offset(page, page_size),
            limit=page_size,
            filters=filters,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        total = await self.count(filters)
        return [self._to_response(doc) for doc in documents], Pagination(**paginate_results(page, page_size, total))
