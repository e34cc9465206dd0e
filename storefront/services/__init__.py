# ==============================================================================
# SERVICES PACKAGE INITIALIZATION
# ==============================================================================

"""
Service Layer
=============

Business logic for the storefront:
- BaseService: Generic service with common operations
- UserService: Authentication and user management
- ProductService / CategoryService: Catalog
- CartService / WishlistService: Per-user cart and wishlist
- OrderService: Order creation, lifecycle and payment state
- PaymentService / StripeGateway: Stripe payment flows
- WebhookService: Idempotent Stripe event reconciliation
- ReviewService, MessageService, NotificationService, AnalyticsService
- AdminService: Back-office dashboard
"""

from storefront.services.base_service import BaseService
from storefront.services.user_service import UserService
from storefront.services.product_service import ProductService
from storefront.services.category_service import CategoryService
from storefront.services.cart_service import CartService, WishlistService
from storefront.services.order_service import OrderService
from storefront.services.payment_gateway import StripeGateway
from storefront.services.payment_service import PaymentService
from storefront.services.webhook_service import WebhookService

__all__ = [
    "BaseService",
    "UserService",
    "ProductService",
    "CategoryService",
    "CartService",
    "WishlistService",
    "OrderService",
    "StripeGateway",
    "PaymentService",
    "WebhookService",
]
