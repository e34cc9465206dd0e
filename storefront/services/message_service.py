# ==============================================================================
# MESSAGE SERVICE - Order Conversations
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, List

from storefront.core.constants import DatabaseConstants, ErrorMessages, UserRoles
from storefront.core.exceptions import AuthorizationError, NotFoundError
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.message import MessageCreate, MessageResponse
from storefront.services.base_service import BaseService
from storefront.services.user_service import UserService
from storefront.utils.helpers import utc_now


class MessageService(BaseService[MessageResponse]):
    """Messages between a customer and the store about one order."""

    def __init__(self, adapter: BaseDatabaseAdapter) -> None:
        super().__init__(adapter, DatabaseConstants.MESSAGES_COLLECTION)
        self._users = UserService(adapter)

    def _to_response(self, entity: Dict[str, Any]) -> MessageResponse:
        return MessageResponse.model_validate(entity)

    async def _order_for(self, user: Dict[str, Any], order_id: str) -> Dict[str, Any]:
        order = await self._adapter.get_by_id(DatabaseConstants.ORDERS_COLLECTION, order_id)
        if not order:
            raise NotFoundError(message=ErrorMessages.ORDER_NOT_FOUND, resource_type="order", resource_id=order_id)
        if user.get("role") != UserRoles.ADMIN and order["user_id"] != user["id"]:
            raise AuthorizationError(message=ErrorMessages.ORDER_FORBIDDEN)
        return order

    async def send(self, user: Dict[str, Any], schema: MessageCreate) -> MessageResponse:
        """
        Customers write to the store; admins write to a named user or the order owner.

        Raises:
            NotFoundError: If the order is missing or no admin exists
            AuthorizationError: If a customer does not own the order
        """
        order = await self._order_for(user, schema.order_id)
        is_admin = user.get("role") == UserRoles.ADMIN

        if is_admin:
            receiver_id = schema.receiver_id or order["user_id"]
        else:
            admin = await self._users.first_admin()
            if not admin:
                raise NotFoundError(message="No admin available to receive messages", resource_type="user")
            receiver_id = admin["id"]

        message = await self._insert({
            "order_id": schema.order_id,
            "sender_id": user["id"],
            "receiver_id": receiver_id,
            "message": schema.message.strip(),
            "is_read": False,
            "sender_type": "admin" if is_admin else "customer",
        })
        return self._to_response(message)

    async def for_order(self, user: Dict[str, Any], order_id: str) -> List[MessageResponse]:
        """Conversation in chronological order; marks the caller's incoming messages read."""
        await self._order_for(user, order_id)
        documents = await self._adapter.get_all(
            self._collection_name,
            limit=DatabaseConstants.MAX_BATCH_SIZE,
            filters={"order_id": order_id},
            sort_by="created_at",
            sort_order="asc",
        )
        await self.mark_read(user["id"], order_id)
        return [self._to_response(doc) for doc in documents]

    async def unread_count(self, user_id: str) -> int:
        return await self.count({"receiver_id": user_id, "is_read": False})

    async def mark_read(self, user_id: str, order_id: str) -> int:
        return await self._adapter.bulk_update(
            self._collection_name,
            {"order_id": order_id, "receiver_id": user_id, "is_read": False},
            {"is_read": True, "updated_at": utc_now()},
        )
