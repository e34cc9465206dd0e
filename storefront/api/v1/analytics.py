# ==============================================================================
# ANALYTICS ENDPOINTS - Event Tracking & Reports
# ==============================================================================
# Public tracking routes and admin-only reports
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Request, status

from storefront.api.dependencies import AnalyticsServiceDep, OptionalUserID, get_admin_user
from storefront.core.constants import AnalyticsEvents
from storefront.schemas.analytics import PageViewRequest, TrackEventRequest
from storefront.schemas.base import APIResponse

router = APIRouter(prefix="/analytics", tags=["Analytics"])

DaysQuery = Query(30, ge=1, le=365)
admin_only = [Depends(get_admin_user)]


def request_metadata(request: Request) -> Dict[str, Any]:
    """Client details recorded with tracked events."""
    return {
        "user_agent": request.headers.get("user-agent"),
        "ip_address": request.client.host if request.client else None,
        "referrer": request.headers.get("referer"),
    }


# ==============================================================================
# TRACKING
# ==============================================================================

@router.post(
    "/track",
    response_model=APIResponse[dict],
    status_code=status.HTTP_201_CREATED,
    summary="Track event",
)
async def track_event(
    schema: TrackEventRequest,
    request: Request,
    user_id: OptionalUserID,
    service: AnalyticsServiceDep,
) -> APIResponse[dict]:
    await service.track(
        schema.type,
        user_id=user_id,
        data=schema.data,
        session_id=schema.session_id,
        metadata=request_metadata(request),
    )
    return APIResponse.ok(message="Event tracked")


@router.post(
    "/track-page-view",
    response_model=APIResponse[dict],
    status_code=status.HTTP_201_CREATED,
    summary="Track page view",
)
async def track_page_view(
    schema: PageViewRequest,
    request: Request,
    user_id: OptionalUserID,
    service: AnalyticsServiceDep,
) -> APIResponse[dict]:
    await service.track(
        AnalyticsEvents.PAGE_VIEW,
        user_id=user_id,
        data={"page": schema.page},
        session_id=schema.session_id,
        metadata=request_metadata(request),
    )
    return APIResponse.ok(message="Page view tracked")


# ==============================================================================
# REPORTS (ADMIN)
# ==============================================================================

@router.get("/dashboard", response_model=APIResponse[Dict[str, Any]], dependencies=admin_only)
async def dashboard(service: AnalyticsServiceDep, days: int = DaysQuery) -> APIResponse[Dict[str, Any]]:
    return APIResponse.ok(data=await service.dashboard(days))


@router.get("/sales", response_model=APIResponse[Dict[str, Any]], dependencies=admin_only)
async def sales(service: AnalyticsServiceDep, days: int = DaysQuery) -> APIResponse[Dict[str, Any]]:
    return APIResponse.ok(data=await service.sales(days))


@router.get("/users", response_model=APIResponse[Dict[str, Any]], dependencies=admin_only)
async def users(service: AnalyticsServiceDep, days: int = DaysQuery) -> APIResponse[Dict[str, Any]]:
    return APIResponse.ok(data=await service.users(days))


@router.get("/products", response_model=APIResponse[Dict[str, Any]], dependencies=admin_only)
async def products(service: AnalyticsServiceDep, days: int = DaysQuery) -> APIResponse[Dict[str, Any]]:
    return APIResponse.ok(data=await service.products(days))


@router.get("/search", response_model=APIResponse[Dict[str, Any]], dependencies=admin_only)
async def searches(service: AnalyticsServiceDep, days: int = DaysQuery) -> APIResponse[Dict[str, Any]]:
    return APIResponse.ok(data=await service.searches(days))
