# ==============================================================================
# ORDERS ENDPOINTS - Customer Order Routes
# ==============================================================================
# Checkout from the cart, order history and customer cancellation.
# The create/list/get handlers are also mounted under /payments.
# ==============================================================================

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, status

from storefront.api.dependencies import CurrentUser, CurrentUserID, OrderServiceDep
from storefront.core.constants import APIConstants, SuccessMessages
from storefront.schemas.base import APIResponse
from storefront.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatus,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


async def place_order(
    user: CurrentUser,
    schema: OrderCreate,
    service: OrderServiceDep,
) -> APIResponse[OrderCreatedResponse]:
    """Create an order from the cart and open its payment intent."""
    result = await service.create_order(user, schema)
    return APIResponse.ok(data=result, message=SuccessMessages.ORDER_PLACED)


async def list_my_orders(
    user_id: CurrentUserID,
    service: OrderServiceDep,
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(APIConstants.DEFAULT_PAGE_SIZE, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[OrderListResponse]:
    """The caller's orders, newest first."""
    orders, pagination = await service.list_user_orders(user_id, status_filter, page, limit)
    return APIResponse.ok(data=OrderListResponse(orders=orders, pagination=pagination))


async def get_order(
    order_id: str,
    user: CurrentUser,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    """One order; visible to its owner and to admins."""
    order = await service.get_for_user(user, order_id)
    return APIResponse.ok(data=OrderResponse.model_validate(order))


def mount_order_routes(target: APIRouter, create_path: str, list_path: str) -> None:
    """Register the shared create/list/get handlers on a router."""
    target.add_api_route(
        create_path,
        place_order,
        methods=["POST"],
        response_model=APIResponse[OrderCreatedResponse],
        status_code=status.HTTP_201_CREATED,
        summary="Create order",
    )
    target.add_api_route(
        list_path,
        list_my_orders,
        methods=["GET"],
        response_model=APIResponse[OrderListResponse],
        summary="List my orders",
    )
    target.add_api_route(
        f"{list_path}/{{order_id}}",
        get_order,
        methods=["GET"],
        response_model=APIResponse[OrderResponse],
        summary="Get order",
    )


mount_order_routes(router, "", "")


@router.put(
    "/{order_id}/cancel",
    response_model=APIResponse[OrderResponse],
    summary="Cancel order",
    description="Cancel before shipping; reserved stock is returned.",
)
async def cancel_order(
    order_id: str,
    user_id: CurrentUserID,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    order = await service.cancel_by_customer(user_id, order_id)
    return APIResponse.ok(data=order, message=SuccessMessages.ORDER_CANCELLED)
