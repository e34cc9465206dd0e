# ==============================================================================
# CATEGORIES ENDPOINTS
# ==============================================================================

from __future__ import annotations

from typing import List

from fastapi import APIRouter

from storefront.api.dependencies import CategoryServiceDep
from storefront.schemas.base import APIResponse
from storefront.schemas.product import CategoryResponse

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get(
    "",
    response_model=APIResponse[List[CategoryResponse]],
    summary="List categories",
)
async def list_categories(service: CategoryServiceDep) -> APIResponse[List[CategoryResponse]]:
    return APIResponse.ok(data=await service.list_active())
