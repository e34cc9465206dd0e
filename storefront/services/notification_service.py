# ==============================================================================
# NOTIFICATION SERVICE - In-App Notifications & Templates
# ==============================================================================
# Stores user notifications and optionally mirrors them by email
# ==============================================================================

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from storefront.core.constants import (
    DatabaseConstants,
    ErrorMessages,
    NotificationTypes,
    UserRoles,
)
from storefront.core.exceptions import NotFoundError
from storefront.core.settings import settings
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.base import Pagination
from storefront.schemas.notification import NotificationResponse
from storefront.services.base_service import BaseService
from storefront.services.email_service import EmailService
from storefront.utils.helpers import utc_now

logger = logging.getLogger(__name__)


class NotificationService(BaseService[NotificationResponse]):
    """
    Notification storage, delivery and templates.

    ``create`` is the single write path; the ``notify_*`` templates
    build title and message text for order and account events.
    """

    _not_found_message = ErrorMessages.NOTIFICATION_NOT_FOUND
    BROADCAST_BATCH = 500

    def __init__(
        self,
        adapter: BaseDatabaseAdapter,
        email_service: Optional[EmailService] = None,
    ) -> None:
        super().__init__(adapter, DatabaseConstants.NOTIFICATIONS_COLLECTION)
        self._email = email_service or EmailService()

    def _to_response(self, entity: Dict[str, Any]) -> NotificationResponse:
        return NotificationResponse.model_validate(entity)

    # ==========================================================================
    # CREATION
    # ==========================================================================

    async def create(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        priority: str = "medium",
        send_email: bool = False,
    ) -> NotificationResponse:
        """
        Store a notification and optionally email it to the user.

        Email failures are logged; the notification is kept either way.
        """
        now = utc_now()
        document = await self._insert({
            "user_id": user_id,
            "type": type,
            "title": title[:100],
            "message": message[:500],
            "data": data or {},
            "is_read": False,
            "read_at": None,
            "is_email_sent": False,
            "email_sent_at": None,
            "priority": priority,
            "expires_at": now + timedelta(days=NotificationTypes.EXPIRY_DAYS),
        })

        if send_email:
            user = await self._adapter.get_by_id(DatabaseConstants.USERS_COLLECTION, user_id)
            if user and user.get("email"):
                if await self._email.send(user["email"], title, f"{message}\n\n{self._link(data or {})}"):
                    document = await self._adapter.update(
                        self._collection_name,
                        document["id"],
                        {"is_email_sent": True, "email_sent_at": utc_now()},
                    ) or document
            else:
                logger.warning(f"No email address for user {user_id}; notification not emailed")

        return self._to_response(document)

    @staticmethod
    def _link(data: Dict[str, Any]) -> str:
        base = settings.FRONTEND_URL.rstrip("/")
        if data.get("order_id"):
            return f"{base}/orders/{data['order_id']}"
        return base

    async def create_bulk(
        self,
        user_ids: Optional[List[str]] = None,
        exclude_users: Sequence[str] = (),
        **content: Any,
    ) -> List[NotificationResponse]:
        """
        Send the same notification to several users.

        Without ``user_ids`` it goes to every active non-admin user.
        """
        if user_ids is None:
            user_ids = await self._broadcast_audience()
        excluded = set(exclude_users)
        return [
            await self.create(user_id, **content)
            for user_id in dict.fromkeys(user_ids)
            if user_id not in excluded
        ]

    async def _broadcast_audience(self) -> List[str]:
        filters = {"is_active": True, "role": {"$ne": UserRoles.ADMIN}}
        user_ids: List[str] = []
        while True:
            batch = await self._adapter.get_all(
                DatabaseConstants.USERS_COLLECTION,
                skip=len(user_ids),
                limit=self.BROADCAST_BATCH,
                filters=filters,
                sort_by="_id",
            )
            user_ids.extend(user["id"] for user in batch)
            if len(batch) < self.BROADCAST_BATCH:
                return user_ids

    # ==========================================================================
    # TEMPLATES
    # ==========================================================================

    async def notify_welcome(self, user: Dict[str, Any]) -> NotificationResponse:
        return await self.create(
            user["id"],
            NotificationTypes.WELCOME,
            "Welcome to our store!",
            f"Hi {user.get('username', 'there')}, thanks for joining. Start exploring our latest products.",
            send_email=True,
        )

    async def notify_order_confirmation(self, order: Dict[str, Any]) -> NotificationResponse:
        return await self.create(
            order["user_id"],
            NotificationTypes.ORDER_CONFIRMATION,
            "Order Confirmed",
            f"Your order {order['order_number']} has been placed. "
            f"Total: ${order['final_amount']:.2f}",
            data={"order_id": order["id"], "order_number": order["order_number"]},
            priority="high",
            send_email=True,
        )

    async def notify_status_update(self, order: Dict[str, Any]) -> NotificationResponse:
        """Pick the template matching the order's new status."""
        status = order["status"]
        data = {"order_id": order["id"], "order_number": order["order_number"], "status": status}

        if status == "shipped":
            tracking = order.get("tracking_number")
            message = f"Your order {order['order_number']} has shipped."
            if tracking:
                message += f" Tracking number: {tracking}"
            return await self.create(
                order["user_id"], NotificationTypes.ORDER_SHIPPED, "Order Shipped",
                message, data=data, priority="high", send_email=True,
            )
        if status == "delivered":
            return await self.create(
                order["user_id"], NotificationTypes.ORDER_DELIVERED, "Order Delivered",
                f"Your order {order['order_number']} has been delivered. Enjoy your purchase!",
                data=data, send_email=True,
            )
        return await self.create(
            order["user_id"], NotificationTypes.ORDER_STATUS_UPDATE, "Order Status Updated",
            f"Your order {order['order_number']} is now {status}.",
            data=data,
        )

    async def notify_payment_success(self, order: Dict[str, Any]) -> NotificationResponse:
        return await self.create(
            order["user_id"],
            NotificationTypes.PAYMENT_SUCCESS,
            "Payment Successful",
            f"We received your payment of ${order['final_amount']:.2f} for order {order['order_number']}.",
            data={"order_id": order["id"], "order_number": order["order_number"]},
            priority="high",
        )

    async def notify_payment_failed(self, order: Dict[str, Any]) -> NotificationResponse:
        return await self.create(
            order["user_id"],
            NotificationTypes.PAYMENT_FAILED,
            "Payment Failed",
            f"Payment for order {order['order_number']} did not go through. Please try again.",
            data={"order_id": order["id"], "order_number": order["order_number"]},
            priority="urgent",
            send_email=True,
        )

    # ==========================================================================
    # USER OPERATIONS
    # ==========================================================================

    async def list_for_user(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        unread_only: bool = False,
    ) -> Tuple[List[NotificationResponse], Pagination]:
        filters: Dict[str, Any] = {"user_id": user_id}
        if unread_only:
            filters["is_read"] = False
        return await self.get_paginated(page, limit, filters)

    async def unread_count(self, user_id: str) -> int:
        return await self.count({"user_id": user_id, "is_read": False})

    async def mark_read(self, user_id: str, notification_id: str) -> NotificationResponse:
        document = await self._adapter.find_one_and_update(
            self._collection_name,
            {"id": notification_id, "user_id": user_id},
            {"$set": {"is_read": True, "read_at": utc_now(), "updated_at": utc_now()}},
        )
        if not document:
            raise NotFoundError(
                message=ErrorMessages.NOTIFICATION_NOT_FOUND,
                resource_type="notification",
                resource_id=notification_id,
            )
        return self._to_response(document)

    async def mark_all_read(self, user_id: str) -> int:
        return await self._adapter.bulk_update(
            self._collection_name,
            {"user_id": user_id, "is_read": False},
            {"is_read": True, "read_at": utc_now()},
        )

    async def delete(self, user_id: str, notification_id: str) -> None:
        deleted = await self._adapter.bulk_delete(
            self._collection_name,
            {"id": notification_id, "user_id": user_id},
        )
        if not deleted:
            raise NotFoundError(
                message=ErrorMessages.NOTIFICATION_NOT_FOUND,
                resource_type="notification",
                resource_id=notification_id,
            )

    async def delete_all(self, user_id: str) -> int:
        return await self._adapter.bulk_delete(self._collection_name, {"user_id": user_id})
