# ==============================================================================
# SCHEMAS PACKAGE INITIALIZATION
# ==============================================================================

"""
Pydantic Schemas
================

Request/Response validation schemas for API endpoints:
- Base: Common schemas, pagination and the response envelope
- User: Authentication, profile and saved address
- Product: Catalog and categories
- Cart: Cart and wishlist
- Order/Payment: Checkout, lifecycle and Stripe flows
- Review/Message/Notification/Analytics: Engagement features
"""

from storefront.schemas.base import (
    BaseSchema,
    TimestampSchema,
    Pagination,
    APIResponse,
    HealthResponse,
)
from storefront.schemas.user import (
    ShippingAddress,
    UserCreate,
    UserLogin,
    UserUpdate,
    PasswordChange,
    UserResponse,
    AuthResponse,
)
from storefront.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    CategoryCreate,
    CategoryResponse,
)
from storefront.schemas.cart import (
    CartResponse,
    WishlistResponse,
)
from storefront.schemas.order import (
    OrderCreate,
    OrderResponse,
    OrderCreatedResponse,
    OrderStatusUpdate,
)
from storefront.schemas.review import (
    ReviewCreate,
    ReviewResponse,
    ProductReviewsResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampSchema",
    "Pagination",
    "APIResponse",
    "HealthResponse",
    # User
    "ShippingAddress",
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "PasswordChange",
    "UserResponse",
    "AuthResponse",
    # Catalog
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "CategoryCreate",
    "CategoryResponse",
    # Cart
    "CartResponse",
    "WishlistResponse",
    # Orders
    "OrderCreate",
    "OrderResponse",
    "OrderCreatedResponse",
    "OrderStatusUpdate",
    # Reviews
    "ReviewCreate",
    "ReviewResponse",
    "ProductReviewsResponse",
]
