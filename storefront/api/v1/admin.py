# ==============================================================================
# ADMIN ENDPOINTS - Back-office Routes
# ==============================================================================
# Dashboard, user management, catalog management and order fulfilment.
# Every route requires an admin user.
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from storefront.api.dependencies import (
    AdminServiceDep,
    AdminUser,
    CategoryServiceDep,
    OrderServiceDep,
    ProductServiceDep,
    UserServiceDep,
    get_admin_user,
)
from storefront.core.constants import APIConstants, SuccessMessages
from storefront.schemas.base import APIResponse
from storefront.schemas.order import (
    OrderListResponse,
    OrderResponse,
    OrderStatus,
    OrderStatusUpdate,
    PaymentStatus,
    PaymentStatusUpdate,
)
from storefront.schemas.product import (
    CategoryCreate,
    CategoryResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from storefront.schemas.user import UserListResponse, UserResponse, UserStatusUpdate

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(get_admin_user)],
)


@router.get("/dashboard", response_model=APIResponse[Dict[str, Any]], summary="Admin dashboard")
async def dashboard(service: AdminServiceDep) -> APIResponse[Dict[str, Any]]:
    return APIResponse.ok(data=await service.dashboard())


# ==============================================================================
# USERS
# ==============================================================================

@router.get("/users", response_model=APIResponse[UserListResponse], summary="List users")
async def list_users(
    service: UserServiceDep,
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[UserListResponse]:
    users, pagination = await service.list_users(page, limit, search)
    return APIResponse.ok(data=UserListResponse(users=users, pagination=pagination))


@router.put("/users/{user_id}/status", response_model=APIResponse[UserResponse], summary="Activate or deactivate user")
async def set_user_status(
    user_id: str,
    schema: UserStatusUpdate,
    admin: AdminUser,
    service: UserServiceDep,
) -> APIResponse[UserResponse]:
    user = await service.set_active(admin["id"], user_id, schema.is_active)
    state = "activated" if schema.is_active else "deactivated"
    return APIResponse.ok(data=user, message=f"User {state} successfully")


# ==============================================================================
# CATALOG
# ==============================================================================

@router.get("/products", response_model=APIResponse[ProductListResponse], summary="List all products")
async def list_products(
    service: ProductServiceDep,
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[str] = Query(None),
    include_inactive: bool = Query(True),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[ProductListResponse]:
    products, pagination = await service.list_products(
        category=category,
        search=search,
        page=page,
        limit=limit,
        include_inactive=include_inactive,
    )
    return APIResponse.ok(data=ProductListResponse(products=products, pagination=pagination))


@router.post(
    "/products",
    response_model=APIResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
)
async def create_product(schema: ProductCreate, service: ProductServiceDep) -> APIResponse[ProductResponse]:
    product = await service.create(schema)
    return APIResponse.ok(data=product, message="Product created successfully")


@router.put("/products/{product_id}", response_model=APIResponse[ProductResponse], summary="Update product")
async def update_product(
    product_id: str,
    schema: ProductUpdate,
    service: ProductServiceDep,
) -> APIResponse[ProductResponse]:
    product = await service.update(product_id, schema)
    return APIResponse.ok(data=product, message="Product updated successfully")


@router.delete("/products/{product_id}", response_model=APIResponse[dict], summary="Deactivate product")
async def delete_product(product_id: str, service: ProductServiceDep) -> APIResponse[dict]:
    await service.soft_delete(product_id)
    return APIResponse.ok(message="Product deleted successfully")


@router.post(
    "/categories",
    response_model=APIResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(schema: CategoryCreate, service: CategoryServiceDep) -> APIResponse[CategoryResponse]:
    category = await service.create(schema)
    return APIResponse.ok(data=category, message="Category created successfully")


# ==============================================================================
# ORDERS
# ==============================================================================

@router.get("/orders", response_model=APIResponse[OrderListResponse], summary="List all orders")
async def list_orders(
    service: OrderServiceDep,
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=APIConstants.MAX_PAGE_SIZE),
) -> APIResponse[OrderListResponse]:
    orders, pagination = await service.list_all(status_filter, payment_status, page, limit)
    return APIResponse.ok(data=OrderListResponse(orders=orders, pagination=pagination))


@router.put("/orders/{order_id}/status", response_model=APIResponse[OrderResponse], summary="Update order status")
async def update_order_status(
    order_id: str,
    schema: OrderStatusUpdate,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    order = await service.update_status(order_id, schema)
    return APIResponse.ok(data=order, message=SuccessMessages.ORDER_STATUS_UPDATED)


@router.put(
    "/orders/{order_id}/payment-status",
    response_model=APIResponse[OrderResponse],
    summary="Update payment status",
)
async def update_payment_status(
    order_id: str,
    schema: PaymentStatusUpdate,
    service: OrderServiceDep,
) -> APIResponse[OrderResponse]:
    order = await service.update_payment_status(order_id, schema.payment_status)
    return APIResponse.ok(data=order, message="Payment status updated successfully")
