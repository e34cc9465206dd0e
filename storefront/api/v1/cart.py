# ==============================================================================
# CART & WISHLIST ENDPOINTS - Per-user Shopping Lists
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter

from storefront.api.dependencies import (
    AnalyticsServiceDep,
    CartServiceDep,
    CurrentUserID,
    WishlistServiceDep,
)
from storefront.core.constants import AnalyticsEvents, SuccessMessages
from storefront.schemas.base import APIResponse
from storefront.schemas.cart import (
    CartItemAdd,
    CartItemUpdate,
    CartResponse,
    MoveToCart,
    WishlistAdd,
    WishlistResponse,
)

cart_router = APIRouter(prefix="/user/cart", tags=["Cart"])
wishlist_router = APIRouter(prefix="/user/wishlist", tags=["Wishlist"])


# ==============================================================================
# CART
# ==============================================================================

@cart_router.get("", response_model=APIResponse[CartResponse], summary="Get cart")
async def get_cart(user_id: CurrentUserID, service: CartServiceDep) -> APIResponse[CartResponse]:
    return APIResponse.ok(data=await service.get_cart(user_id))


@cart_router.post(
    "",
    response_model=APIResponse[CartResponse],
    summary="Add to cart",
    description="Add a product; an existing line is incremented and re-checked against stock.",
)
async def add_to_cart(
    user_id: CurrentUserID,
    schema: CartItemAdd,
    service: CartServiceDep,
    analytics: AnalyticsServiceDep,
) -> APIResponse[CartResponse]:
    cart = await service.add(user_id, schema.product_id, schema.quantity)
    await analytics.track_safely(
        AnalyticsEvents.CART_ADD,
        user_id=user_id,
        data={"product_id": schema.product_id, "quantity": schema.quantity},
    )
    return APIResponse.ok(data=cart, message=SuccessMessages.CART_UPDATED)


@cart_router.put("/{product_id}", response_model=APIResponse[CartResponse], summary="Update cart line")
async def update_cart_item(
    product_id: str,
    user_id: CurrentUserID,
    schema: CartItemUpdate,
    service: CartServiceDep,
) -> APIResponse[CartResponse]:
    cart = await service.update_quantity(user_id, product_id, schema.quantity)
    return APIResponse.ok(data=cart, message=SuccessMessages.CART_UPDATED)


@cart_router.delete("/{product_id}", response_model=APIResponse[CartResponse], summary="Remove cart line")
async def remove_from_cart(
    product_id: str,
    user_id: CurrentUserID,
    service: CartServiceDep,
    analytics: AnalyticsServiceDep,
) -> APIResponse[CartResponse]:
    cart = await service.remove(user_id, product_id)
    await analytics.track_safely(AnalyticsEvents.CART_REMOVE, user_id=user_id, data={"product_id": product_id})
    return APIResponse.ok(data=cart, message=SuccessMessages.CART_UPDATED)


@cart_router.delete("", response_model=APIResponse[dict], summary="Clear cart")
async def clear_cart(user_id: CurrentUserID, service: CartServiceDep) -> APIResponse[dict]:
    await service.clear(user_id)
    return APIResponse.ok(message=SuccessMessages.CART_CLEARED)


# ==============================================================================
# WISHLIST
# ==============================================================================

@wishlist_router.get("", response_model=APIResponse[WishlistResponse], summary="Get wishlist")
async def get_wishlist(user_id: CurrentUserID, service: WishlistServiceDep) -> APIResponse[WishlistResponse]:
    return APIResponse.ok(data=await service.get_wishlist(user_id))


@wishlist_router.post("", response_model=APIResponse[WishlistResponse], summary="Add to wishlist")
async def add_to_wishlist(
    user_id: CurrentUserID,
    schema: WishlistAdd,
    service: WishlistServiceDep,
    analytics: AnalyticsServiceDep,
) -> APIResponse[WishlistResponse]:
    wishlist = await service.add(user_id, schema.product_id)
    await analytics.track_safely(AnalyticsEvents.WISHLIST_ADD, user_id=user_id, data={"product_id": schema.product_id})
    return APIResponse.ok(data=wishlist, message=SuccessMessages.WISHLIST_UPDATED)


@wishlist_router.delete("/{product_id}", response_model=APIResponse[WishlistResponse], summary="Remove from wishlist")
async def remove_from_wishlist(
    product_id: str,
    user_id: CurrentUserID,
    service: WishlistServiceDep,
    analytics: AnalyticsServiceDep,
) -> APIResponse[WishlistResponse]:
    wishlist = await service.remove(user_id, product_id)
    await analytics.track_safely(AnalyticsEvents.WISHLIST_REMOVE, user_id=user_id, data={"product_id": product_id})
    return APIResponse.ok(data=wishlist, message=SuccessMessages.WISHLIST_UPDATED)


@wishlist_router.delete("", response_model=APIResponse[dict], summary="Clear wishlist")
async def clear_wishlist(user_id: CurrentUserID, service: WishlistServiceDep) -> APIResponse[dict]:
    await service.clear(user_id)
    return APIResponse.ok(message=SuccessMessages.WISHLIST_UPDATED)


@wishlist_router.post(
    "/{product_id}/move-to-cart",
    response_model=APIResponse[CartResponse],
    summary="Move wishlist item to cart",
)
async def move_to_cart(
    product_id: str,
    user_id: CurrentUserID,
    service: WishlistServiceDep,
    schema: MoveToCart = MoveToCart(),
) -> APIResponse[CartResponse]:
    cart = await service.move_to_cart(user_id, product_id, schema.quantity)
    return APIResponse.ok(data=cart, message=SuccessMessages.MOVED_TO_CART)
