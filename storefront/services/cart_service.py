# ==============================================================================
# CART SERVICE - Embedded Cart & Wishlist
# ==============================================================================
# Both collections live on the user document and are mutated with
# single atomic updates ($push / $pull / positional $inc and $set)
# ==============================================================================

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from storefront.core.constants import DatabaseConstants, ErrorMessages
from storefront.core.exceptions import BadRequestError, InsufficientStockError, NotFoundError
from storefront.core.settings import settings
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.schemas.cart import (
    CartLine,
    CartResponse,
    ProductSummary,
    WishlistLine,
    WishlistResponse,
)
from storefront.services.product_service import ProductService
from storefront.utils.helpers import round_half_up, round_money, utc_now

logger = logging.getLogger(__name__)

USERS = DatabaseConstants.USERS_COLLECTION


def _summary(product: Dict[str, Any]) -> ProductSummary:
    return ProductSummary.model_validate(product)


def _check_stock(product: Dict[str, Any], quantity: int) -> None:
    if product.get("quantity", 0) < quantity:
        raise InsufficientStockError(
            message=ErrorMessages.INSUFFICIENT_STOCK,
            product_id=product["id"],
        )


class CartService:
    """
    Shopping cart stored as ``user.cart``.

    Adding a product already in the cart increments its line instead
    of creating a second one. Every quantity change is checked against
    live stock.
    """

    def __init__(self, adapter: BaseDatabaseAdapter, products: Optional[ProductService] = None) -> None:
        self._adapter = adapter
        self._products = products or ProductService(adapter)

    async def _user(self, user_id: str) -> Dict[str, Any]:
        user = await self._adapter.get_by_id(USERS, user_id)
        if not user:
            raise NotFoundError(message=ErrorMessages.USER_NOT_FOUND, resource_type="user", resource_id=user_id)
        return user

    async def get_lines(self, user_id: str) -> List[Dict[str, Any]]:
        """Raw cart lines ``{product_id, quantity, added_at}``."""
        return list((await self._user(user_id)).get("cart") or [])

    async def get_cart(self, user_id: str) -> CartResponse:
        """Cart joined with current product data and totals."""
        lines = await self.get_lines(user_id)
        products = await self._products.get_documents([line["product_id"] for line in lines])

        items: List[CartLine] = []
        total = 0.0
        for line in lines:
            product = products.get(line["product_id"])
            if product is None:
                continue
            items.append(CartLine(
                product=_summary(product),
                quantity=line["quantity"],
                added_at=line.get("added_at"),
            ))
            total += product.get("new_price", 0) * line["quantity"]

        return CartResponse(
            items=items,
            total_items=sum(item.quantity for item in items),
            total_amount=round_money(total),
            estimated_tax=round_half_up(total * settings.TAX_RATE),
            final_amount=round_half_up(total * (1 + settings.TAX_RATE)),
        )

    async def add(self, user_id: str, product_id: str, quantity: int) -> CartResponse:
        """
        Add units of a product, merging with an existing line.

        Raises:
            NotFoundError: If the product is missing or inactive
            InsufficientStockError: If the combined quantity exceeds stock
        """
        product = await self._products.get_active_document(product_id)
        existing = next(
            (line for line in await self.get_lines(user_id) if line["product_id"] == product_id),
            None,
        )
        _check_stock(product, quantity + (existing["quantity"] if existing else 0))

        pushed = 0
        if existing is None:
            pushed = await self._adapter.update_one(
                USERS,
                {"id": user_id, "cart.product_id": {"$ne": product_id}},
                {"$push": {"cart": {"product_id": product_id, "quantity": quantity, "added_at": utc_now()}}},
            )
        if not pushed:
            await self._adapter.update_one(
                USERS,
                {"id": user_id, "cart.product_id": product_id},
                {"$inc": {"cart.$.quantity": quantity}},
            )
        return await self.get_cart(user_id)

    async def update_quantity(self, user_id: str, product_id: str, quantity: int) -> CartResponse:
        """
        Raises:
            NotFoundError: If the product is not in the cart
            InsufficientStockError: If stock is too low
        """
        lines = await self.get_lines(user_id)
        if not any(line["product_id"] == product_id for line in lines):
            raise NotFoundError(message=ErrorMessages.NOT_IN_CART, resource_type="cart", resource_id=product_id)

        product = await self._products.get_active_document(product_id)
        _check_stock(product, quantity)

        await self._adapter.update_one(
            USERS,
            {"id": user_id, "cart.product_id": product_id},
            {"$set": {"cart.$.quantity": quantity}},
        )
        return await self.get_cart(user_id)

    async def remove(self, user_id: str, product_id: str) -> CartResponse:
        matched = await self._adapter.update_one(
            USERS,
            {"id": user_id, "cart.product_id": product_id},
            {"$pull": {"cart": {"product_id": product_id}}},
        )
        if not matched:
            raise NotFoundError(message=ErrorMessages.NOT_IN_CART, resource_type="cart", resource_id=product_id)
        return await self.get_cart(user_id)

    async def clear(self, user_id: str) -> None:
        await self._adapter.update_one(USERS, {"id": user_id}, {"$set": {"cart": []}})


class WishlistService:
    """Wishlist stored as ``user.wishlist``; duplicates are rejected."""

    def __init__(
        self,
        adapter: BaseDatabaseAdapter,
        products: Optional[ProductService] = None,
        cart: Optional[CartService] = None,
    ) -> None:
        self._adapter = adapter
        self._products = products or ProductService(adapter)
        self._cart = cart or CartService(adapter, self._products)

    async def get_wishlist(self, user_id: str) -> WishlistResponse:
        user = await self._adapter.get_by_id(USERS, user_id)
        lines = list((user or {}).get("wishlist") or [])
        products = await self._products.get_documents([line["product_id"] for line in lines])

        items = [
            WishlistLine(product=_summary(products[line["product_id"]]), added_at=line.get("added_at"))
            for line in lines
            if line["product_id"] in products
        ]
        return WishlistResponse(items=items, total_items=len(items))

    async def add(self, user_id: str, product_id: str) -> WishlistResponse:
        """
        Raises:
            NotFoundError: If the product is missing or inactive
            BadRequestError: If the product is already wishlisted
        """
        await self._products.get_active_document(product_id)
        matched = await self._adapter.update_one(
            USERS,
            {"id": user_id, "wishlist.product_id": {"$ne": product_id}},
            {"$push": {"wishlist": {"product_id": product_id, "added_at": utc_now()}}},
        )
        if not matched:
            raise BadRequestError(message=ErrorMessages.ALREADY_IN_WISHLIST)
        return await self.get_wishlist(user_id)

    async def remove(self, user_id: str, product_id: str) -> WishlistResponse:
        matched = await self._adapter.update_one(
            USERS,
            {"id": user_id, "wishlist.product_id": product_id},
            {"$pull": {"wishlist": {"product_id": product_id}}},
        )
        if not matched:
            raise NotFoundError(
                message=ErrorMessages.NOT_IN_WISHLIST,
                resource_type="wishlist",
                resource_id=product_id,
            )
        return await self.get_wishlist(user_id)

    async def clear(self, user_id: str) -> None:
        await self._adapter.update_one(USERS, {"id": user_id}, {"$set": {"wishlist": []}})

    async def move_to_cart(self, user_id: str, product_id: str, quantity: int) -> CartResponse:
        """
        Move a wishlisted product into the cart.

        Raises:
            NotFoundError: If the product is not in the wishlist
            InsufficientStockError: If stock is too low
        """
        user = await self._adapter.get_by_id(USERS, user_id)
        if not any(line["product_id"] == product_id for line in (user or {}).get("wishlist") or []):
            raise NotFoundError(
                message=ErrorMessages.NOT_IN_WISHLIST,
                resource_type="wishlist",
                resource_id=product_id,
            )

        cart = await self._cart.add(user_id, product_id, quantity)
        await self._adapter.update_one(
            USERS,
            {"id": user_id},
            {"$pull": {"wishlist": {"product_id": product_id}}},
        )
        return cart
