# ==============================================================================
# NOTIFICATION SCHEMAS
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema, Pagination, TimestampSchema


NotificationType = Literal[
    "order_confirmation",
    "order_status_update",
    "order_shipped",
    "order_delivered",
    "payment_success",
    "payment_failed",
    "low_stock",
    "product_review",
    "welcome",
    "promotion",
    "system",
]
Priority = Literal["low", "medium", "high", "urgent"]


class NotificationContent(BaseSchema):
    """Fields shared by single and bulk notification requests."""

    type: NotificationType = "system"
    title: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=500)
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: Priority = "medium"
    send_email: bool = False


class NotificationCreate(NotificationContent):
    user_id: str = Field(..., min_length=1)


class BulkNotificationCreate(NotificationContent):
    """Explicit recipients, or every active customer when ``user_ids`` is omitted."""

    user_ids: Optional[List[str]] = Field(None, min_length=1)
    exclude_users: List[str] = Field(default_factory=list)


class NotificationResponse(TimestampSchema):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool = False
    read_at: Optional[datetime] = None
    is_email_sent: bool = False
    email_sent_at: Optional[datetime] = None
    priority: str = "medium"
    expires_at: Optional[datetime] = None


class NotificationListResponse(BaseSchema):
    notifications: List[NotificationResponse]
    pagination: Pagination
    unread_count: int = 0
