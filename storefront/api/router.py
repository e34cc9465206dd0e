# ==============================================================================
# MAIN API ROUTER - Route Aggregation
# ==============================================================================
# Combines all endpoint routers under the API prefix
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter

from storefront.core.settings import settings
from storefront.api.v1 import (
    auth_router,
    products_router,
    categories_router,
    cart_router,
    wishlist_router,
    orders_router,
    payments_router,
    webhooks_router,
    admin_router,
    reviews_router,
    messages_router,
    notifications_router,
    analytics_router,
)

# Create main API router
api_router = APIRouter()

for router in (
    auth_router,
    products_router,
    categories_router,
    cart_router,
    wishlist_router,
    orders_router,
    payments_router,
    webhooks_router,
    admin_router,
    reviews_router,
    messages_router,
    notifications_router,
    analytics_router,
):
    api_router.include_router(router, prefix=settings.API_PREFIX)
