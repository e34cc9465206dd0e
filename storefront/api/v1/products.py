# ==============================================================================
# PRODUCTS ENDPOINTS - Public Catalog Routes
# ==============================================================================
# Listing, filtering, search and product details
# ==============================================================================

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Query

from storefront.api.dependencies import AnalyticsServiceDep, OptionalUserID, ProductServiceDep
from storefront.core.constants import APIConstants
from storefront.core.exceptions import BadRequestError
from storefront.schemas.base import APIResponse
from storefront.schemas.product import Gender, ProductListResponse, ProductResponse

router = APIRouter(prefix="/products", tags=["Products"])

SORT_PATTERN = "^(created_at|new_price|rating|name)$"
ORDER_PATTERN = "^(asc|desc)$"


@router.get(
    "",
    response_model=APIResponse[ProductListResponse],
    summary="List products",
    description="Active products with filters, sorting and pagination.",
)
async def list_products(
    service: ProductServiceDep,
    category: Optional[str] = Query(None),
    gender: Optional[Gender] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    rating: Optional[float] = Query(None, ge=0, le=5),
    trending: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    sort_by: str = Query("created_at", pattern=SORT_PATTERN),
    sort_order: str = Query("desc", pattern=ORDER_PATTERN),
    page: int = Query(1, ge=1),
    limit: int = Query(APIConstants.PRODUCT_PAGE_SIZE, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[ProductListResponse]:
    products, pagination = await service.list_products(
        category=category,
        gender=gender,
        min_price=min_price,
        max_price=max_price,
        rating=rating,
        trending=trending,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return APIResponse.ok(data=ProductListResponse(products=products, pagination=pagination))


@router.get(
    "/trending",
    response_model=APIResponse[List[ProductResponse]],
    summary="Trending products",
)
async def trending_products(
    service: ProductServiceDep,
    limit: int = Query(APIConstants.TRENDING_LIMIT, ge=1, le=50),
) -> APIResponse[List[ProductResponse]]:
    return APIResponse.ok(data=await service.trending(limit))


@router.get(
    "/search",
    response_model=APIResponse[ProductListResponse],
    summary="Search products",
)
async def search_products(
    service: ProductServiceDep,
    analytics: AnalyticsServiceDep,
    user_id: OptionalUserID,
    q: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(APIConstants.PRODUCT_PAGE_SIZE, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[ProductListResponse]:
    """Case-insensitive search over name, description, brand and tags."""
    if not q or not q.strip():
        raise BadRequestError(message="Search query is required")

    products, pagination = await service.list_products(search=q, page=page, limit=limit)
    await analytics.track_search(q.strip(), pagination.total_items, user_id)
    return APIResponse.ok(data=ProductListResponse(products=products, pagination=pagination))


@router.get(
    "/category/{category}",
    response_model=APIResponse[ProductListResponse],
    summary="Products by category",
)
async def products_by_category(
    category: str,
    service: ProductServiceDep,
    sort_by: str = Query("created_at", pattern=SORT_PATTERN),
    sort_order: str = Query("desc", pattern=ORDER_PATTERN),
    page: int = Query(1, ge=1),
    limit: int = Query(APIConstants.PRODUCT_PAGE_SIZE, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[ProductListResponse]:
    products, pagination = await service.list_products(
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return APIResponse.ok(data=ProductListResponse(products=products, pagination=pagination))


@router.get(
    "/{product_id}",
    response_model=APIResponse[ProductResponse],
    summary="Get product",
    description="Product details; inactive products are reported as not found.",
)
async def get_product(
    product_id: str,
    service: ProductServiceDep,
    analytics: AnalyticsServiceDep,
    user_id: OptionalUserID,
) -> APIResponse[ProductResponse]:
    product = await service.get_active(product_id)
    await analytics.track_product_view(product_id, user_id)
    return APIResponse.ok(data=product)
