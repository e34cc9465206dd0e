# ==============================================================================
# BASE SCHEMAS - Envelope, Pagination, Timestamps
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class BaseSchema(BaseModel):
    """
    Base for every request and response schema.

    Documents from the adapter already carry a string ``id``, so
    responses validate straight from the stored dict.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class TimestampSchema(BaseSchema):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(BaseModel):
    """Page metadata returned next to every list (see ``paginate_results``)."""

    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_items: int = Field(..., ge=0)
    page_size: int = Field(..., ge=1)
    has_next: bool = False
    has_prev: bool = False


class APIResponse(BaseModel, Generic[T]):
    """
    Success envelope: ``{success: true, message, data}``.

    Errors never go through this model; ``AppException.to_dict``
    and the handlers in ``main.py`` build the error envelope.
    """

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: Optional[T] = None, message: Optional[str] = None) -> "APIResponse[T]":
        return cls(success=True, data=data, message=message)


class HealthResponse(BaseSchema):
    status: str = Field(..., description="healthy or degraded")
    version: str
    database: str = Field(..., description="connected or disconnected")
