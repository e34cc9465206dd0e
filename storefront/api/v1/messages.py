# ==============================================================================
# MESSAGES ENDPOINTS - Order Conversations
# ==============================================================================

from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, status

from storefront.api.dependencies import CurrentUser, CurrentUserID, MessageServiceDep
from storefront.schemas.base import APIResponse
from storefront.schemas.message import MarkReadRequest, MessageCreate, MessageResponse

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post(
    "/send",
    response_model=APIResponse[MessageResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Send message",
)
async def send_message(
    schema: MessageCreate,
    user: CurrentUser,
    service: MessageServiceDep,
) -> APIResponse[MessageResponse]:
    message = await service.send(user, schema)
    return APIResponse.ok(data=message, message="Message sent successfully")


@router.get(
    "/order/{order_id}",
    response_model=APIResponse[List[MessageResponse]],
    summary="Order conversation",
)
async def order_messages(
    order_id: str,
    user: CurrentUser,
    service: MessageServiceDep,
) -> APIResponse[List[MessageResponse]]:
    return APIResponse.ok(data=await service.for_order(user, order_id))


@router.get("/unread-count", response_model=APIResponse[Dict[str, int]], summary="Unread messages")
async def unread_count(user_id: CurrentUserID, service: MessageServiceDep) -> APIResponse[Dict[str, int]]:
    return APIResponse.ok(data={"unread_count": await service.unread_count(user_id)})


@router.put("/mark-read", response_model=APIResponse[Dict[str, int]], summary="Mark order messages read")
async def mark_read(
    schema: MarkReadRequest,
    user_id: CurrentUserID,
    service: MessageServiceDep,
) -> APIResponse[Dict[str, int]]:
    updated = await service.mark_read(user_id, schema.order_id)
    return APIResponse.ok(data={"updated": updated})
