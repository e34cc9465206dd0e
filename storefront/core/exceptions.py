# ==============================================================================
# CUSTOM EXCEPTIONS - Storefront Error Hierarchy
# ==============================================================================
# Every error the API returns is one of these; the global handler in
# main.py renders them into the standard error envelope
# ==============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional


def _compact(**values: Any) -> Dict[str, Any]:
    """Drop empty values from a details dict."""
    return {key: value for key, value in values.items() if value is not None}


class AppException(Exception):
    """
    Base exception for all storefront errors.

    Subclasses set ``error_code`` and ``status_code`` as class
    attributes and only override ``__init__`` when they carry
    structured details.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        status_code: HTTP status code to return
        details: Additional context for clients
    """

    error_code: str = "INTERNAL_ERROR"
    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Render the JSON error envelope."""
        return {
            "success": False,
            "message": self.message,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            },
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.status_code}, {self.error_code}: {self.message!r})"


class DatabaseError(AppException):
    """MongoDB is unreachable or a command failed."""

    error_code = "DATABASE_ERROR"
    status_code = 503
    default_message = "Database operation failed"


# ==============================================================================
# REQUEST & RESOURCE ERRORS
# ==============================================================================

class BadRequestError(AppException):
    error_code = "BAD_REQUEST"
    status_code = 400
    default_message = "Bad request"


class NotFoundError(AppException):
    """
    A product, order, review or other document does not exist
    (or is not visible to the caller).
    """

    error_code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"

    def __init__(
        self,
        message: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[Any] = None,
    ) -> None:
        super().__init__(
            message,
            _compact(resource_type=resource_type, resource_id=str(resource_id) if resource_id else None),
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class AlreadyExistsError(AppException):
    """Unique key taken: email, username, category name, review slot."""

    error_code = "ALREADY_EXISTS"
    status_code = 409
    default_message = "Resource already exists"

    def __init__(
        self,
        message: Optional[str] = None,
        resource_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, {**(details or {}), **_compact(resource_type=resource_type)})


# ==============================================================================
# AUTH ERRORS
# ==============================================================================

class AuthenticationError(AppException):
    error_code = "AUTHENTICATION_ERROR"
    status_code = 401
    default_message = "Authentication failed"


class TokenExpiredError(AuthenticationError):
    error_code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


class InvalidTokenError(AuthenticationError):
    error_code = "INVALID_TOKEN"
    default_message = "Invalid token"


class AuthorizationError(AppException):
    """The caller is authenticated but does not own the resource or is not an admin."""

    error_code = "AUTHORIZATION_ERROR"
    status_code = 403
    default_message = "Permission denied"


class RateLimitError(AppException):
    """
    Too many requests from one client.

    Attributes:
        retry_after: Seconds until the bucket holds a token again
    """

    error_code = "RATE_LIMIT_EXCEEDED"
    status_code = 429
    default_message = "Rate limit exceeded"

    def __init__(self, message: Optional[str] = None, retry_after: int = 60) -> None:
        super().__init__(message, {"retry_after_seconds": retry_after})
        self.retry_after = retry_after


# ==============================================================================
# ORDER & STOCK ERRORS
# ==============================================================================

class BusinessRuleError(AppException):
    error_code = "BUSINESS_RULE_ERROR"
    status_code = 400
    default_message = "Business rule violation"

    def __init__(
        self,
        message: Optional[str] = None,
        rule: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, {**(details or {}), **_compact(violated_rule=rule)})


class InsufficientStockError(BusinessRuleError):
    """A product cannot cover the requested quantity."""

    error_code = "INSUFFICIENT_STOCK"
    default_message = "Insufficient stock"

    def __init__(self, message: Optional[str] = None, product_id: Optional[str] = None) -> None:
        super().__init__(message, rule="stock_available", details=_compact(product_id=product_id))
        self.product_id = product_id


class InvalidStateTransitionError(AppException):
    """An order status change that is not an edge of the transition table."""

    error_code = "INVALID_STATE_TRANSITION"
    status_code = 409

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot change order status from {current} to {requested}",
            {"current_status": current, "requested_status": requested},
        )
        self.current = current
        self.requested = requested


# ==============================================================================
# PAYMENT PROVIDER ERRORS
# ==============================================================================

class PaymentProviderError(AppException):
    """
    A Stripe call failed.

    The provider's own message is logged by the gateway; clients only
    see a generic message and the provider error code.
    """

    error_code = "PAYMENT_PROVIDER_ERROR"
    status_code = 502
    default_message = "Payment provider request failed"

    def __init__(self, message: Optional[str] = None, provider_code: Optional[str] = None) -> None:
        super().__init__(message, _compact(provider_code=provider_code))


class WebhookVerificationError(AppException):
    """The webhook payload or its Stripe-Signature header did not verify."""

    error_code = "WEBHOOK_SIGNATURE_INVALID"
    status_code = 400

    def __init__(self, reason: str) -> None:
        super().__init__(f"Webhook Error: {reason}")
