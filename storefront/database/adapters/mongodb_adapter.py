# ==============================================================================
# MONGODB ADAPTER - Motor Implementation
# ==============================================================================

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from storefront.core.exceptions import AlreadyExistsError, DatabaseError
from storefront.core.settings import settings
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter, Document

logger = logging.getLogger(__name__)


def _to_object_id(value: Any) -> Any:
    # Malformed ids stay strings and match nothing
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def _public(document: Optional[Document]) -> Optional[Document]:
    if document is None:
        return None
    if "_id" in document:
        document["id"] = str(document.pop("_id"))
    return document


def _strip_id(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key != "id"}


class MongoDBAdapter(BaseDatabaseAdapter):
    """
    Storefront document store on Motor.

    Args:
        connection_url: MongoDB URI (defaults to ``MONGODB_URL``)
        database_name: Database name (defaults to ``MONGODB_DB``)
        client: Motor-compatible client to use as is; the startup
            ping is skipped for it (tests pass an in-memory client)
    """

    def __init__(
        self,
        connection_url: Optional[str] = None,
        database_name: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        self._connection_url = connection_url or settings.MONGODB_URL
        self._database_name = database_name or settings.MONGODB_DB
        self._client: Optional[AsyncIOMotorClient] = client
        self._injected = client is not None
        self._database: Optional[AsyncIOMotorDatabase] = None

    def _query(self, filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Translate ``id`` (plain or ``$in``) into ``_id``."""
        query = dict(filters or {})
        if "id" in query:
            value = query.pop("id")
            if isinstance(value, dict) and "$in" in value:
                value = {"$in": [_to_object_id(v) for v in value["$in"]]}
            else:
                value = _to_object_id(value)
            query["_id"] = value
        return query

    def _collection(self, name: str):
        if self._database is None:
            raise DatabaseError("Database not connected")
        return self._database[name]

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================

    async def connect(self) -> None:
        try:
            if self._client is None:
                self._client = AsyncIOMotorClient(
                    self._connection_url,
                    maxPoolSize=settings.DB_POOL_SIZE,
                    maxIdleTimeMS=settings.DB_POOL_TIMEOUT * 1000,
                    tz_aware=True,
                )
            self._database = self._client[self._database_name]
            if not self._injected:
                await self._client.admin.command("ping")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise DatabaseError(f"MongoDB connection failed: {e}")

        logger.info(f"MongoDB adapter connected to {self._database_name}")

    async def disconnect(self) -> None:
        if self._client is not None:
            self._client.close()
            self._database = None
            logger.info("MongoDB adapter disconnected")

    async def health_check(self) -> bool:
        if self._database is None:
            return False
        try:
            await self._database.command("ping")
        except Exception as e:
            logger.warning(f"MongoDB health check failed: {e}")
            return False
        return True

    async def create_index(
        self,
        collection: str,
        keys: Sequence[Tuple[str, int]],
        unique: bool = False,
    ) -> str:
        return await self._collection(collection).create_index(list(keys), unique=unique)

    # ==========================================================================
    # SINGLE DOCUMENTS
    # ==========================================================================

    async def create(self, collection: str, data: Document) -> Document:
        document = _strip_id(data)
        try:
            result = await self._collection(collection).insert_one(document)
        except DuplicateKeyError as e:
            raise AlreadyExistsError(
                message=f"Duplicate {collection} record",
                resource_type=collection,
                details={"key": str(e.details or e)},
            )
        document.pop("_id", None)
        document["id"] = str(result.inserted_id)
        return document

    async def get_by_id(self, collection: str, id: Any) -> Optional[Document]:
        return await self.find_one(collection, {"id": id})

    async def find_one(self, collection: str, filters: Dict[str, Any]) -> Optional[Document]:
        return _public(await self._collection(collection).find_one(self._query(filters)))

    async def update(self, collection: str, id: Any, data: Dict[str, Any]) -> Optional[Document]:
        return await self.find_one_and_update(collection, {"id": id}, {"$set": _strip_id(data)})

    async def delete(self, collection: str, id: Any) -> bool:
        result = await self._collection(collection).delete_one(self._query({"id": id}))
        return result.deleted_count > 0

    async def find_one_and_update(
        self,
        collection: str,
        filters: Dict[str, Any],
        update: Dict[str, Any],
    ) -> Optional[Document]:
        try:
            document = await self._collection(collection).find_one_and_update(
                self._query(filters),
                update,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise AlreadyExistsError(
                message=f"Duplicate {collection} record",
                resource_type=collection,
                details={"key": str(e)},
            )
        return _public(document)

    async def update_one(
        self,
        collection: str,
        filters: Dict[str, Any],
        update: Dict[str, Any],
    ) -> int:
        result = await self._collection(collection).update_one(self._query(filters), update)
        return result.matched_count

    # ==========================================================================
    # QUERIES
    # ==========================================================================

    async def get_all(
        self,
        collection: str,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        sort_order: str = "asc",
    ) -> List[Document]:
        cursor = self._collection(collection).find(self._query(filters))
        if sort_by:
            cursor = cursor.sort(sort_by, ASCENDING if sort_order.lower() == "asc" else DESCENDING)
        documents = await cursor.skip(skip).limit(limit).to_list(length=limit)
        return [_public(document) for document in documents]

    async def count(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int:
        return await self._collection(collection).count_documents(self._query(filters))

    async def exists(self, collection: str, filters: Dict[str, Any]) -> bool:
        return await self.find_one(collection, filters) is not None

    async def aggregate(self, collection: str, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        cursor = self._collection(collection).aggregate(pipeline)
        return await cursor.to_list(length=None)

    # ==========================================================================
    # BULK
    # ==========================================================================

    async def bulk_update(self, collection: str, filters: Dict[str, Any], data: Dict[str, Any]) -> int:
        result = await self._collection(collection).update_many(self._query(filters), {"$set": data})
        return result.modified_count

    async def bulk_delete(self, collection: str, filters: Dict[str, Any]) -> int:
        result = await self._collection(collection).delete_many(self._query(filters))
        return result.deleted_count
