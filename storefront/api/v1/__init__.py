# ==============================================================================
# API V1 ENDPOINTS PACKAGE
# ==============================================================================

"""
API Endpoints
=============

Route modules for the storefront API.
"""

from storefront.api.v1.auth import router as auth_router
from storefront.api.v1.products import router as products_router
from storefront.api.v1.categories import router as categories_router
from storefront.api.v1.cart import cart_router, wishlist_router
from storefront.api.v1.orders import router as orders_router
from storefront.api.v1.payments import router as payments_router
from storefront.api.v1.webhooks import router as webhooks_router
from storefront.api.v1.admin import router as admin_router
from storefront.api.v1.reviews import router as reviews_router
from storefront.api.v1.messages import router as messages_router
from storefront.api.v1.notifications import router as notifications_router
from storefront.api.v1.analytics import router as analytics_router

__all__ = [
    "auth_router",
    "products_router",
    "categories_router",
    "cart_router",
    "wishlist_router",
    "orders_router",
    "payments_router",
    "webhooks_router",
    "admin_router",
    "reviews_router",
    "messages_router",
    "notifications_router",
    "analytics_router",
]
