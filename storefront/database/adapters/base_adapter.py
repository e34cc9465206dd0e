# ==============================================================================
# BASE DATABASE ADAPTER - Document Store Contract
# ==============================================================================
# The only way services reach storage; tests swap the client underneath
# ==============================================================================

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

Document = Dict[str, Any]


class BaseDatabaseAdapter(ABC):
    """
    Document store used by the storefront services.

    Conventions:
        - Documents are exposed with a string ``id`` key; ``_id`` never
          leaves the adapter. A malformed id matches nothing.
        - Filters use MongoDB query syntax and may reference ``id``.
        - ``update`` and ``bulk_update`` take plain fields (applied with
          ``$set``); ``find_one_and_update`` and ``update_one`` take a
          full update document (``$set``, ``$inc``, ``$push``, ``$pull``...).
        - A write rejected by a unique index raises AlreadyExistsError.
    """

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================

    @abstractmethod
    async def connect(self) -> None:
        """
        Raises:
            DatabaseError: If the server cannot be reached
        """

    @abstractmethod
    async def disconnect(self) -> None: ...

    @abstractmethod
    async def health_check(self) -> bool: ...

    @abstractmethod
    async def create_index(
        self,
        collection: str,
        keys: Sequence[Tuple[str, int]],
        unique: bool = False,
    ) -> str: ...

    # ==========================================================================
    # SINGLE DOCUMENTS
    # ==========================================================================

    @abstractmethod
    async def create(self, collection: str, data: Document) -> Document:
        """Insert and return the document with its new ``id``."""

    @abstractmethod
    async def get_by_id(self, collection: str, id: Any) -> Optional[Document]: ...

    @abstractmethod
    async def find_one(self, collection: str, filters: Dict[str, Any]) -> Optional[Document]: ...

    @abstractmethod
    async def update(self, collection: str, id: Any, data: Dict[str, Any]) -> Optional[Document]:
        """Set fields by id and return the updated document (None if missing)."""

    @abstractmethod
    async def delete(self, collection: str, id: Any) -> bool: ...

    @abstractmethod
    async def find_one_and_update(
        self,
        collection: str,
        filters: Dict[str, Any],
        update: Dict[str, Any],
    ) -> Optional[Document]:
        """
        Atomically update the first match and return it after the write.

        Conditions in ``filters`` act as a compare-and-set guard: stock
        reservation (``quantity >= n``), status transitions (current
        status) and one-time flags all rely on this.
        """

    @abstractmethod
    async def update_one(
        self,
        collection: str,
        filters: Dict[str, Any],
        update: Dict[str, Any],
    ) -> int:
        """Apply an update document to the first match; returns matched count."""

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    @abstractmethod
    async def get_all(
        self,
        collection: str,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> List[Document]: ...

    @abstractmethod
    async def count(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int: ...

    @abstractmethod
    async def exists(self, collection: str, filters: Dict[str, Any]) -> bool: ...

    @abstractmethod
    async def aggregate(self, collection: str, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Run an aggregation pipeline; results keep their ``_id`` group keys."""

    # ==========================================================================
    # BULK
    # ==========================================================================

    @abstractmethod
    async def bulk_update(self, collection: str, filters: Dict[str, Any], data: Dict[str, Any]) -> int:
        """Set fields on every match; returns the modified count."""

    @abstractmethod
    async def bulk_delete(self, collection: str, filters: Dict[str, Any]) -> int: ...
