# ==============================================================================
# MESSAGE SCHEMAS - Order Conversations
# ==============================================================================

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema, TimestampSchema


class MessageCreate(BaseSchema):
    """Schema for sending a message about an order."""

    order_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=1000)
    receiver_id: Optional[str] = None


class MarkReadRequest(BaseSchema):
    order_id: str = Field(..., min_length=1)


class MessageResponse(TimestampSchema):
    id: str
    order_id: str
    sender_id: str
    receiver_id: str
    message: str
    is_read: bool = False
    sender_type: Literal["admin", "customer"]
