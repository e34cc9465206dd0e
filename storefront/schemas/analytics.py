# ==============================================================================
# ANALYTICS SCHEMAS
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema


EventType = Literal[
    "page_view",
    "product_view",
    "search",
    "cart_add",
    "cart_remove",
    "wishlist_add",
    "wishlist_remove",
    "order_created",
    "order_completed",
    "user_registration",
    "user_login",
    "email_sent",
    "notification_sent",
]


class TrackEventRequest(BaseSchema):
    """Client-reported analytics event."""

    type: EventType
    data: Dict[str, Any] = Field(default_factory=dict)
    session_id: Optional[str] = Field(None, max_length=100)


class PageViewRequest(BaseSchema):
    page: str = Field(..., min_length=1, max_length=500)
    session_id: Optional[str] = Field(None, max_length=100)
