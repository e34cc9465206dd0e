# ==============================================================================
# NOTIFICATIONS ENDPOINTS
# ==============================================================================
# User inbox plus admin-only creation routes
# ==============================================================================

from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Query, status

from storefront.api.dependencies import AdminUser, CurrentUserID, NotificationServiceDep
from storefront.core.constants import APIConstants
from storefront.schemas.base import APIResponse
from storefront.schemas.notification import (
    BulkNotificationCreate,
    NotificationCreate,
    NotificationListResponse,
    NotificationResponse,
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=APIResponse[NotificationListResponse], summary="List notifications")
async def list_notifications(
    user_id: CurrentUserID,
    service: NotificationServiceDep,
    unread_only: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[NotificationListResponse]:
    notifications, pagination = await service.list_for_user(user_id, page, limit, unread_only)
    return APIResponse.ok(data=NotificationListResponse(
        notifications=notifications,
        pagination=pagination,
        unread_count=await service.unread_count(user_id),
    ))


@router.get("/unread-count", response_model=APIResponse[Dict[str, int]], summary="Unread notifications")
async def unread_count(user_id: CurrentUserID, service: NotificationServiceDep) -> APIResponse[Dict[str, int]]:
    return APIResponse.ok(data={"unread_count": await service.unread_count(user_id)})


@router.put("/mark-all-read", response_model=APIResponse[Dict[str, int]], summary="Mark all read")
async def mark_all_read(user_id: CurrentUserID, service: NotificationServiceDep) -> APIResponse[Dict[str, int]]:
    updated = await service.mark_all_read(user_id)
    return APIResponse.ok(data={"updated": updated}, message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=APIResponse[NotificationResponse], summary="Mark read")
async def mark_read(
    notification_id: str,
    user_id: CurrentUserID,
    service: NotificationServiceDep,
) -> APIResponse[NotificationResponse]:
    return APIResponse.ok(data=await service.mark_read(user_id, notification_id))


@router.delete("/{notification_id}", response_model=APIResponse[dict], summary="Delete notification")
async def delete_notification(
    notification_id: str,
    user_id: CurrentUserID,
    service: NotificationServiceDep,
) -> APIResponse[dict]:
    await service.delete(user_id, notification_id)
    return APIResponse.ok(message="Notification deleted")


@router.delete("", response_model=APIResponse[Dict[str, int]], summary="Delete all notifications")
async def delete_all(user_id: CurrentUserID, service: NotificationServiceDep) -> APIResponse[Dict[str, int]]:
    deleted = await service.delete_all(user_id)
    return APIResponse.ok(data={"deleted": deleted}, message="All notifications deleted")


# ==============================================================================
# ADMIN
# ==============================================================================

@router.post(
    "",
    response_model=APIResponse[NotificationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Send notification (admin)",
)
async def create_notification(
    schema: NotificationCreate,
    _: AdminUser,
    service: NotificationServiceDep,
) -> APIResponse[NotificationResponse]:
    content = schema.model_dump(exclude={"user_id"})
    notification = await service.create(schema.user_id, **content)
    return APIResponse.ok(data=notification, message="Notification created")


@router.post(
    "/bulk",
    response_model=APIResponse[List[NotificationResponse]],
    status_code=status.HTTP_201_CREATED,
    summary="Send notification to many users (admin)",
)
async def create_bulk(
    schema: BulkNotificationCreate,
    _: AdminUser,
    service: NotificationServiceDep,
) -> APIResponse[List[NotificationResponse]]:
    content = schema.model_dump(exclude={"user_ids", "exclude_users"})
    notifications = await service.create_bulk(schema.user_ids, schema.exclude_users, **content)
    return APIResponse.ok(data=notifications, message=f"{len(notifications)} notifications created")
