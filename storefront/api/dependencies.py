# ==============================================================================
# API DEPENDENCIES - Dependency Injection
# ==============================================================================
# FastAPI dependencies for authentication, database access and services
# ==============================================================================

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from storefront.core.constants import ErrorMessages, UserRoles
from storefront.core.exceptions import InvalidTokenError, NotFoundError, TokenExpiredError
from storefront.core.security import verify_access_token
from storefront.core.settings import settings
from storefront.database.adapters.base_adapter import BaseDatabaseAdapter
from storefront.database.factory import DatabaseFactory
from storefront.services.admin_service import AdminService
from storefront.services.analytics_service import AnalyticsService
from storefront.services.cart_service import CartService, WishlistService
from storefront.services.category_service import CategoryService
from storefront.services.message_service import MessageService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.payment_gateway import StripeGateway
from storefront.services.payment_service import PaymentService
from storefront.services.product_service import ProductService
from storefront.services.review_service import ReviewService
from storefront.services.user_service import UserService
from storefront.services.webhook_service import WebhookService

# OAuth2 scheme for JWT tokens
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login",
    auto_error=False,
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ==============================================================================
# DATABASE DEPENDENCIES
# ==============================================================================

async def get_adapter() -> BaseDatabaseAdapter:
    """
    Get database adapter dependency.

    Returns initialized adapter from factory.
    """
    return DatabaseFactory.get_adapter()


# Annotated type for database adapter
DatabaseDep = Annotated[BaseDatabaseAdapter, Depends(get_adapter)]


# ==============================================================================
# AUTHENTICATION DEPENDENCIES
# ==============================================================================

async def get_current_user_id(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> str:
    """
    Extract user ID from JWT token.

    Raises:
        HTTPException: If token invalid or missing
    """
    if not token:
        raise _unauthorized(ErrorMessages.UNAUTHORIZED)

    try:
        payload = verify_access_token(token)
    except TokenExpiredError:
        raise _unauthorized("Token has expired")
    except InvalidTokenError as e:
        raise _unauthorized(e.message)

    return payload["sub"]


async def get_optional_user_id(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> Optional[str]:
    """
    Extract user ID if token provided, otherwise None.

    Used by endpoints that work for both authenticated
    and anonymous visitors (product views, analytics).
    """
    if not token:
        return None

    try:
        return await get_current_user_id(token)
    except HTTPException:
        return None


CurrentUserID = Annotated[str, Depends(get_current_user_id)]
OptionalUserID = Annotated[Optional[str], Depends(get_optional_user_id)]


async def get_current_user(
    user_id: CurrentUserID,
    adapter: DatabaseDep,
) -> Dict[str, Any]:
    """
    Load the authenticated user's document.

    Raises:
        HTTPException: If the user no longer exists or is deactivated
    """
    try:
        user = await UserService(adapter).get_document(user_id)
    except NotFoundError:
        raise _unauthorized(ErrorMessages.USER_NOT_FOUND)

    if not user.get("is_active", True):
        raise _unauthorized(ErrorMessages.ACCOUNT_DEACTIVATED)
    return user


CurrentUser = Annotated[Dict[str, Any], Depends(get_current_user)]


async def get_admin_user(user: CurrentUser) -> Dict[str, Any]:
    """Require the authenticated user to be an admin."""
    if user.get("role") != UserRoles.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=ErrorMessages.ADMIN_REQUIRED,
        )
    return user


AdminUser = Annotated[Dict[str, Any], Depends(get_admin_user)]


# ==============================================================================
# PAYMENT GATEWAY
# ==============================================================================

@lru_cache()
def get_payment_gateway() -> StripeGateway:
    """Process-wide Stripe gateway; the SDK is configured once."""
    return StripeGateway()


PaymentGatewayDep = Annotated[StripeGateway, Depends(get_payment_gateway)]


# ==============================================================================
# SERVICE DEPENDENCIES
# ==============================================================================

async def get_user_service(adapter: DatabaseDep) -> UserService:
    """Get user service instance."""
    return UserService(adapter)


async def get_product_service(adapter: DatabaseDep) -> ProductService:
    """Get product service instance."""
    return ProductService(adapter)


async def get_category_service(adapter: DatabaseDep) -> CategoryService:
    return CategoryService(adapter)


async def get_cart_service(adapter: DatabaseDep) -> CartService:
    return CartService(adapter)


async def get_wishlist_service(adapter: DatabaseDep) -> WishlistService:
    return WishlistService(adapter)


async def get_notification_service(adapter: DatabaseDep) -> NotificationService:
    return NotificationService(adapter)


async def get_analytics_service(adapter: DatabaseDep) -> AnalyticsService:
    return AnalyticsService(adapter)


async def get_order_service(
    adapter: DatabaseDep,
    gateway: PaymentGatewayDep,
) -> OrderService:
    """Get order service instance wired to the payment gateway."""
    return OrderService(adapter, gateway)


async def get_payment_service(
    adapter: DatabaseDep,
    gateway: PaymentGatewayDep,
) -> PaymentService:
    return PaymentService(adapter, gateway)


async def get_webhook_service(
    adapter: DatabaseDep,
    gateway: PaymentGatewayDep,
) -> WebhookService:
    return WebhookService(adapter, gateway)


async def get_review_service(adapter: DatabaseDep) -> ReviewService:
    return ReviewService(adapter)


async def get_message_service(adapter: DatabaseDep) -> MessageService:
    return MessageService(adapter)


async def get_admin_service(adapter: DatabaseDep) -> AdminService:
    return AdminService(adapter)


# Annotated service types
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
CartServiceDep = Annotated[CartService, Depends(get_cart_service)]
WishlistServiceDep = Annotated[WishlistService, Depends(get_wishlist_service)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
WebhookServiceDep = Annotated[WebhookService, Depends(get_webhook_service)]
ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]
MessageServiceDep = Annotated[MessageService, Depends(get_message_service)]
AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
