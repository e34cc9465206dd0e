# ==============================================================================
# REVIEWS ENDPOINTS - Verified Purchase Reviews
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter, Query, status

from storefront.api.dependencies import CurrentUser, CurrentUserID, ReviewServiceDep
from storefront.core.constants import APIConstants
from storefront.schemas.base import APIResponse
from storefront.schemas.review import (
    ProductReviewsResponse,
    ReviewCreate,
    ReviewEligibility,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.get(
    "/can-review/{product_id}/{order_id}",
    response_model=APIResponse[ReviewEligibility],
    summary="Check review eligibility",
)
async def can_review(
    product_id: str,
    order_id: str,
    user_id: CurrentUserID,
    service: ReviewServiceDep,
) -> APIResponse[ReviewEligibility]:
    return APIResponse.ok(data=await service.check_eligibility(user_id, product_id, order_id))


@router.post(
    "",
    response_model=APIResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create review",
)
async def create_review(
    schema: ReviewCreate,
    user: CurrentUser,
    service: ReviewServiceDep,
) -> APIResponse[ReviewResponse]:
    review = await service.create(user, schema)
    return APIResponse.ok(data=review, message="Review created successfully")


@router.get(
    "/product/{product_id}",
    response_model=APIResponse[ProductReviewsResponse],
    summary="Reviews for a product",
)
async def product_reviews(
    product_id: str,
    service: ReviewServiceDep,
    sort: str = Query("newest", pattern="^(newest|oldest|highest|lowest)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(APIConstants.DEFAULT_PAGE_SIZE, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[ProductReviewsResponse]:
    return APIResponse.ok(data=await service.for_product(product_id, sort, page, limit))


@router.get("/user", response_model=APIResponse[ReviewListResponse], summary="My reviews")
async def my_reviews(
    user_id: CurrentUserID,
    service: ReviewServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(APIConstants.DEFAULT_PAGE_SIZE, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[ReviewListResponse]:
    reviews, pagination = await service.for_user(user_id, page, limit)
    return APIResponse.ok(data=ReviewListResponse(reviews=reviews, pagination=pagination))


@router.put("/{review_id}", response_model=APIResponse[ReviewResponse], summary="Update review")
async def update_review(
    review_id: str,
    schema: ReviewUpdate,
    user_id: CurrentUserID,
    service: ReviewServiceDep,
) -> APIResponse[ReviewResponse]:
    review = await service.update(user_id, review_id, schema)
    return APIResponse.ok(data=review, message="Review updated successfully")


@router.delete("/{review_id}", response_model=APIResponse[dict], summary="Delete review")
async def delete_review(
    review_id: str,
    user_id: CurrentUserID,
    service: ReviewServiceDep,
) -> APIResponse[dict]:
    await service.delete(user_id, review_id)
    return APIResponse.ok(message="Review deleted successfully")


@router.post("/{review_id}/helpful", response_model=APIResponse[ReviewResponse], summary="Mark review helpful")
async def mark_helpful(
    review_id: str,
    user_id: CurrentUserID,
    service: ReviewServiceDep,
) -> APIResponse[ReviewResponse]:
    review = await service.mark_helpful(user_id, review_id)
    return APIResponse.ok(data=review)
