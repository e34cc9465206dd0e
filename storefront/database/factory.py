# ==============================================================================
# DATABASE FACTORY - Adapter Lifecycle & Indexes
# ==============================================================================

from __future__ import annotations

import logging
from typing import Any, Optional

from pymongo import ASCENDING, DESCENDING

from storefront.core.constants import DatabaseConstants
from storefront.core.exceptions import DatabaseError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.adapters.mongodb_adapter import MongoDBAdapter

logger = logging.getLogger(__name__)


# (collection, keys, unique)
INDEXES = [
    (DatabaseConstants.USERS_COLLECTION, [("email", ASCENDING)], True),
    (DatabaseConstants.USERS_COLLECTION, [("username", ASCENDING)], True),
    (DatabaseConstants.PRODUCTS_COLLECTION, [("category", ASCENDING), ("is_active", ASCENDING)], False),
    (DatabaseConstants.PRODUCTS_COLLECTION, [("trending", ASCENDING), ("rating", DESCENDING)], False),
    (DatabaseConstants.CATEGORIES_COLLECTION, [("category_name", ASCENDING)], True),
    (DatabaseConstants.ORDERS_COLLECTION, [("order_number", ASCENDING)], True),
    (DatabaseConstants.ORDERS_COLLECTION, [("user_id", ASCENDING), ("created_at", DESCENDING)], False),
    (DatabaseConstants.ORDERS_COLLECTION, [("stripe_payment_intent_id", ASCENDING)], False),
    (DatabaseConstants.ORDERS_COLLECTION, [("stripe_session_id", ASCENDING)], False),
    (
        DatabaseConstants.REVIEWS_COLLECTION,
        [("product_id", ASCENDING), ("user_id", ASCENDING), ("order_id", ASCENDING)],
        True,
    ),
    (DatabaseConstants.MESSAGES_COLLECTION, [("order_id", ASCENDING), ("created_at", ASCENDING)], False),
    (DatabaseConstants.NOTIFICATIONS_COLLECTION, [("user_id", ASCENDING), ("created_at", DESCENDING)], False),
    (DatabaseConstants.ANALYTICS_COLLECTION, [("type", ASCENDING), ("date", DESCENDING)], False),
    (DatabaseConstants.WEBHOOK_EVENTS_COLLECTION, [("event_id", ASCENDING)], True),
]


class DatabaseFactory:
    """
    Process-wide holder of the storefront adapter.

    ``initialize`` runs from the app lifespan (or a test fixture with an
    in-memory client) and every request reuses the same adapter.
    """

    _instance: Optional[BaseDatabaseAdapter] = None

    @classmethod
    async def initialize(cls, client: Optional[Any] = None, **kwargs) -> BaseDatabaseAdapter:
        """
        Connect and ensure indexes.

        Raises:
            DatabaseError: If the connection or an index build fails
        """
        if cls._instance is None:
            cls._instance = MongoDBAdapter(client=client, **kwargs)

        try:
            await cls._instance.connect()
            for collection, keys, unique in INDEXES:
                await cls._instance.create_index(collection, keys, unique=unique)
        except DatabaseError:
            raise
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise DatabaseError(f"Failed to initialize database: {e}")

        logger.info(f"Database initialized with {len(INDEXES)} indexes")
        return cls._instance

    @classmethod
    async def shutdown(cls) -> None:
        if cls._instance is not None:
            try:
                await cls._instance.disconnect()
            except Exception as e:
                logger.error(f"Error disconnecting database: {e}")
        cls._instance = None

    @classmethod
    def get_adapter(cls) -> BaseDatabaseAdapter:
        if cls._instance is None:
            raise DatabaseError("Database adapter not initialized")
        return cls._instance

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._instance is not None

    @classmethod
    async def health_check(cls) -> bool:
        if cls._instance is None:
            return False
        return await cls._instance.health_check()

    @classmethod
    def reset(cls) -> None:
        """Forget the adapter without disconnecting (tests)."""
        cls._instance = None
