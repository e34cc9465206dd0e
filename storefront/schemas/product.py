# ==============================================================================
# PRODUCT SCHEMAS - Catalog
# ==============================================================================
# Request/Response schemas for products and categories
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from storefront.schemas.base import BaseSchema, Pagination, TimestampSchema


Gender = Literal["Men", "Women", "Unisex", "Kids"]
Condition = Literal["New", "Used", "Refurbished"]


class ProductBase(BaseSchema):
    """Fields shared by product create and response schemas."""

    name: str = Field(..., min_length=1, max_length=200, description="Product name")
    description: str = Field("", max_length=5000, description="Product description")
    brand: str = Field("", max_length=100, description="Brand name")
    category: str = Field(..., min_length=1, max_length=100, description="Category slug")
    subcategory: Optional[str] = Field(None, max_length=100)
    gender: Gender = "Unisex"
    price: float = Field(..., ge=0, description="List price")
    new_price: float = Field(..., ge=0, description="Selling price")
    quantity: int = Field(0, ge=0, description="Units in stock")
    images: List[str] = Field(default_factory=list)
    trending: bool = False
    features: List[str] = Field(default_factory=list)
    specifications: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    condition: Condition = "New"


class ProductCreate(ProductBase):
    """Schema for creating a product."""

    @field_validator("category")
    @classmethod
    def lower_category(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def check_prices(self) -> "ProductCreate":
        if self.new_price > self.price:
            raise ValueError("new_price cannot exceed price")
        return self


class ProductUpdate(BaseSchema):
    """Schema for partial product updates."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    brand: Optional[str] = Field(None, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    gender: Optional[Gender] = None
    price: Optional[float] = Field(None, ge=0)
    new_price: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    images: Optional[List[str]] = None
    trending: Optional[bool] = None
    is_active: Optional[bool] = None
    features: Optional[List[str]] = None
    specifications: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = None
    condition: Optional[Condition] = None

    @field_validator("category")
    @classmethod
    def lower_category(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v


class ProductResponse(ProductBase, TimestampSchema):
    """Product as returned by the API."""

    id: str = Field(..., description="Product unique identifier")
    rating: float = Field(0.0, ge=0, le=5)
    review_count: int = 0
    is_active: bool = True
    discount_percentage: int = 0


class ProductListResponse(BaseSchema):
    """Paginated product listing."""

    products: List[ProductResponse]
    pagination: Pagination


class CategoryCreate(BaseSchema):
    """Schema for creating a category."""

    category_name: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    category_img: Optional[str] = None
    sort_order: int = 0

    @field_validator("category_name")
    @classmethod
    def lower_name(cls, v: str) -> str:
        return v.strip().lower()


class CategoryResponse(TimestampSchema):
    """Category as returned by the API."""

    id: str
    category_name: str
    display_name: str
    description: str = ""
    category_img: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    product_count: int = 0
