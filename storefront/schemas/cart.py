# ==============================================================================
# CART SCHEMAS - Cart & Wishlist
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from storefront.schemas.base import BaseSchema


class CartItemAdd(BaseSchema):
    """Schema for adding a product to the cart."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, ge=1, le=100)


class CartItemUpdate(BaseSchema):
    """Schema for changing a cart line quantity."""

    quantity: int = Field(..., ge=1, le=100)


class WishlistAdd(BaseSchema):
    """Schema for adding a product to the wishlist."""

    product_id: str = Field(..., min_length=1)


class MoveToCart(BaseSchema):
    """Quantity to move from wishlist into the cart."""

    quantity: int = Field(1, ge=1, le=100)


class ProductSummary(BaseSchema):
    """Product fields joined into cart and wishlist lines."""

    id: str
    name: str
    brand: str = ""
    price: float
    new_price: float
    images: List[str] = Field(default_factory=list)
    quantity: int = 0
    category: str = ""
    is_active: bool = True


class CartLine(BaseSchema):
    product: ProductSummary
    quantity: int
    added_at: Optional[datetime] = None


class CartResponse(BaseSchema):
    """Cart contents with computed totals."""

    items: List[CartLine] = Field(default_factory=list)
    total_items: int = 0
    total_amount: float = 0.0
    estimated_tax: int = 0
    final_amount: int = 0


class WishlistLine(BaseSchema):
    product: ProductSummary
    added_at: Optional[datetime] = None


class WishlistResponse(BaseSchema):
    items: List[WishlistLine] = Field(default_factory=list)
    total_items: int = 0
