# ==============================================================================
# CORE PACKAGE INITIALIZATION
# ==============================================================================
# Core utilities: Settings, Security, Exceptions, Constants
# ==============================================================================

"""
Core Module
===========

Contains core utilities and configurations for the application:
- settings: Environment configuration management
- security: JWT authentication and password hashing
- exceptions: Custom exception classes
- constants: Application-wide constants and the order status table
"""

from storefront.core.settings import settings, get_settings
from storefront.core.exceptions import (
    AppException,
    DatabaseError,
    NotFoundError,
    AlreadyExistsError,
    BadRequestError,
    AuthenticationError,
    AuthorizationError,
    RateLimitError,
    BusinessRuleError,
    InsufficientStockError,
    InvalidStateTransitionError,
    PaymentProviderError,
    WebhookVerificationError,
)

__all__ = [
    "settings",
    "get_settings",
    "AppException",
    "DatabaseError",
    "NotFoundError",
    "AlreadyExistsError",
    "BadRequestError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitError",
    "BusinessRuleError",
    "InsufficientStockError",
    "InvalidStateTransitionError",
    "PaymentProviderError",
    "WebhookVerificationError",
]
