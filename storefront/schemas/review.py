# ==============================================================================
# REVIEW SCHEMAS - Verified Purchase Reviews
# ==============================================================================

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema, Pagination, TimestampSchema


class ReviewCreate(BaseSchema):
    """Schema for submitting a review of a delivered order line."""

    product_id: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=500)


class ReviewUpdate(BaseSchema):
    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, min_length=1, max_length=500)


class ReviewResponse(TimestampSchema):
    """Review as returned by the API."""

    id: str
    product_id: str
    user_id: str
    order_id: str
    username: Optional[str] = None
    rating: int
    comment: str
    helpful: int = 0
    verified: bool = True
    is_active: bool = True


class ReviewEligibility(BaseSchema):
    can_review: bool
    reason: Optional[str] = None


class ProductReviewsResponse(BaseSchema):
    """Reviews for one product with rating aggregates."""

    reviews: List[ReviewResponse]
    pagination: Pagination
    average_rating: float = 0.0
    total_reviews: int = 0
    rating_distribution: Dict[str, int] = Field(default_factory=dict)


class ReviewListResponse(BaseSchema):
    reviews: List[ReviewResponse]
    pagination: Pagination
