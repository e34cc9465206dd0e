# ==============================================================================
# APPLICATION CONSTANTS - Centralized Configuration Values
# ==============================================================================
# Immutable constants used throughout the application
# Organized by category for easy maintenance
# ==============================================================================

from __future__ import annotations

from typing import Dict, Final, FrozenSet


# ==============================================================================
# API CONSTANTS
# ==============================================================================

class APIConstants:
    """API-related constants."""

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 10
    PRODUCT_PAGE_SIZE: Final[int] = 12
    TRENDING_LIMIT: Final[int] = 8
    MAX_PAGE_SIZE: Final[int] = 100

    # Response headers
    RATE_LIMIT_HEADER: Final[str] = "X-RateLimit-Limit"
    RATE_LIMIT_REMAINING_HEADER: Final[str] = "X-RateLimit-Remaining"
    RATE_LIMIT_RESET_HEADER: Final[str] = "X-RateLimit-Reset"
    REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
    STRIPE_SIGNATURE_HEADER: Final[str] = "stripe-signature"


# ==============================================================================
# DATABASE CONSTANTS
# ==============================================================================

class DatabaseConstants:
    """Collection names."""

    USERS_COLLECTION: Final[str] = "users"
    PRODUCTS_COLLECTION: Final[str] = "products"
    CATEGORIES_COLLECTION: Final[str] = "categories"
    ORDERS_COLLECTION: Final[str] = "orders"
    REVIEWS_COLLECTION: Final[str] = "reviews"
    MESSAGES_COLLECTION: Final[str] = "messages"
    NOTIFICATIONS_COLLECTION: Final[str] = "notifications"
    ANALYTICS_COLLECTION: Final[str] = "analytics"
    WEBHOOK_EVENTS_COLLECTION: Final[str] = "webhook_events"

    # Query limits
    MAX_BATCH_SIZE: Final[int] = 1000


# ==============================================================================
# USER CONSTANTS
# ==============================================================================

class UserRoles:
    """User role constants."""

    USER: Final[str] = "user"
    ADMIN: Final[str] = "admin"


# ==============================================================================
# ORDER CONSTANTS
# ==============================================================================

class OrderConstants:
    """E-commerce order constants."""

    # Order statuses
    STATUS_PENDING: Final[str] = "pending"
    STATUS_CONFIRMED: Final[str] = "confirmed"
    STATUS_PROCESSING: Final[str] = "processing"
    STATUS_SHIPPED: Final[str] = "shipped"
    STATUS_DELIVERED: Final[str] = "delivered"
    STATUS_CANCELLED: Final[str] = "cancelled"

    # Payment statuses
    PAYMENT_PENDING: Final[str] = "pending"
    PAYMENT_COMPLETED: Final[str] = "completed"
    PAYMENT_FAILED: Final[str] = "failed"
    PAYMENT_REFUNDED: Final[str] = "refunded"

    # Payment methods
    METHOD_STRIPE: Final[str] = "stripe"
    METHOD_CASHAPP: Final[str] = "cashapp"
    METHOD_SAMSUNG_PAY: Final[str] = "samsung_pay"

    # Order number format: ORD + 8 timestamp digits + 4 random digits
    NUMBER_PREFIX: Final[str] = "ORD"
    NUMBER_ATTEMPTS: Final[int] = 5

    # Placeholder for address fields the payment flow did not collect
    ADDRESS_PLACEHOLDER: Final[str] = "N/A"
    DEFAULT_COUNTRY: Final[str] = "US"

    # Statuses from which a customer may still cancel
    CUSTOMER_CANCELLABLE: FrozenSet[str] = frozenset({
        "pending",
        "confirmed",
        "processing",
    })

    # Allowed (current -> requested) status edges
    TRANSITIONS: Dict[str, FrozenSet[str]] = {
        "pending": frozenset({"confirmed", "cancelled"}),
        "confirmed": frozenset({"processing", "cancelled"}),
        "processing": frozenset({"shipped", "cancelled"}),
        "shipped": frozenset({"delivered"}),
        "delivered": frozenset(),
        "cancelled": frozenset(),
    }

    @classmethod
    def all_statuses(cls) -> list[str]:
        """Get all order statuses in lifecycle order."""
        return list(cls.TRANSITIONS)

    @classmethod
    def all_payment_statuses(cls) -> list[str]:
        """Get all payment statuses."""
        return [
            cls.PAYMENT_PENDING,
            cls.PAYMENT_COMPLETED,
            cls.PAYMENT_FAILED,
            cls.PAYMENT_REFUNDED,
        ]


# ==============================================================================
# PAYMENT CONSTANTS
# ==============================================================================

class PaymentConstants:
    """Stripe integration constants."""

    # Metadata tags distinguishing the two payment-intent flows
    TYPE_ORDER_PAYMENT: Final[str] = "order_payment"
    TYPE_CART_CHECKOUT: Final[str] = "cart_checkout"

    # Webhook event types handled by the reconciler
    EVENT_INTENT_SUCCEEDED: Final[str] = "payment_intent.succeeded"
    EVENT_INTENT_FAILED: Final[str] = "payment_intent.payment_failed"
    EVENT_INTENT_CANCELED: Final[str] = "payment_intent.canceled"
    EVENT_SESSION_COMPLETED: Final[str] = "checkout.session.completed"

    # Stripe limits metadata values to 500 characters
    METADATA_VALUE_LIMIT: Final[int] = 500

    SHIPPING_COUNTRIES: Final[tuple] = ("US", "CA", "GB")

    SUPPORTED_METHODS: Final[tuple] = (
        {"id": "card", "name": "Credit/Debit Card", "type": "card"},
        {"id": "apple_pay", "name": "Apple Pay", "type": "wallet"},
        {"id": "google_pay", "name": "Google Pay", "type": "wallet"},
        {"id": "samsung_pay", "name": "Samsung Pay", "type": "wallet"},
        {"id": "cash_app", "name": "Cash App", "type": "wallet"},
    )


# ==============================================================================
# NOTIFICATION CONSTANTS
# ==============================================================================

class NotificationTypes:
    """Notification type constants."""

    ORDER_CONFIRMATION: Final[str] = "order_confirmation"
    ORDER_STATUS_UPDATE: Final[str] = "order_status_update"
    ORDER_SHIPPED: Final[str] = "order_shipped"
    ORDER_DELIVERED: Final[str] = "order_delivered"
    PAYMENT_SUCCESS: Final[str] = "payment_success"
    PAYMENT_FAILED: Final[str] = "payment_failed"
    LOW_STOCK: Final[str] = "low_stock"
    PRODUCT_REVIEW: Final[str] = "product_review"
    WELCOME: Final[str] = "welcome"
    PROMOTION: Final[str] = "promotion"
    SYSTEM: Final[str] = "system"

    # Days until a notification expires
    EXPIRY_DAYS: Final[int] = 30


# ==============================================================================
# ANALYTICS CONSTANTS
# ==============================================================================

class AnalyticsEvents:
    """Analytics event type constants."""

    PAGE_VIEW: Final[str] = "page_view"
    PRODUCT_VIEW: Final[str] = "product_view"
    SEARCH: Final[str] = "search"
    CART_ADD: Final[str] = "cart_add"
    CART_REMOVE: Final[str] = "cart_remove"
    WISHLIST_ADD: Final[str] = "wishlist_add"
    WISHLIST_REMOVE: Final[str] = "wishlist_remove"
    ORDER_CREATED: Final[str] = "order_created"
    ORDER_COMPLETED: Final[str] = "order_completed"
    USER_REGISTRATION: Final[str] = "user_registration"
    USER_LOGIN: Final[str] = "user_login"
    EMAIL_SENT: Final[str] = "email_sent"
    NOTIFICATION_SENT: Final[str] = "notification_sent"


# ==============================================================================
# ERROR MESSAGES
# ==============================================================================

class ErrorMessages:
    """Standardized error messages."""

    # Authentication
    INVALID_CREDENTIALS: Final[str] = "Invalid email or password"
    ACCOUNT_DEACTIVATED: Final[str] = "Account is deactivated"
    UNAUTHORIZED: Final[str] = "Authentication required"

    # Authorization
    ADMIN_REQUIRED: Final[str] = "Admin access required"
    ORDER_FORBIDDEN: Final[str] = "Not authorized to access this order"

    # Resources
    USER_NOT_FOUND: Final[str] = "User not found"
    PRODUCT_NOT_FOUND: Final[str] = "Product not found"
    CATEGORY_NOT_FOUND: Final[str] = "Category not found"
    ORDER_NOT_FOUND: Final[str] = "Order not found"
    REVIEW_NOT_FOUND: Final[str] = "Review not found"
    NOTIFICATION_NOT_FOUND: Final[str] = "Notification not found"
    NOT_IN_CART: Final[str] = "Product not found in cart"
    NOT_IN_WISHLIST: Final[str] = "Product not found in wishlist"

    # Business rules
    INSUFFICIENT_STOCK: Final[str] = "Insufficient stock"
    CART_EMPTY: Final[str] = "Cart is empty"
    ALREADY_IN_WISHLIST: Final[str] = "Product already in wishlist"
    ORDER_NOT_CANCELLABLE: Final[str] = "Order cannot be cancelled at this stage"
    INVALID_PAYMENT_METHOD: Final[str] = "Invalid payment method"
    AMOUNT_TOO_SMALL: Final[str] = "Amount must be at least $0.50"
    PAYMENT_FAILED: Final[str] = "Payment failed. Please try again."
    PAYMENT_ORDER_MISMATCH: Final[str] = "Payment intent does not belong to this order"

    # Rate limiting
    RATE_LIMIT_EXCEEDED: Final[str] = "Too many requests from this IP, please try again later"


# ==============================================================================
# SUCCESS MESSAGES
# ==============================================================================

class SuccessMessages:
    """Standardized success messages."""

    # Authentication
    USER_REGISTERED: Final[str] = "User registered successfully"
    LOGIN_SUCCESS: Final[str] = "Login successful"
    PROFILE_UPDATED: Final[str] = "Profile updated successfully"
    PASSWORD_CHANGED: Final[str] = "Password changed successfully"

    # Cart and wishlist
    CART_UPDATED: Final[str] = "Cart updated successfully"
    CART_CLEARED: Final[str] = "Cart cleared successfully"
    WISHLIST_UPDATED: Final[str] = "Wishlist updated successfully"
    MOVED_TO_CART: Final[str] = "Product moved to cart"

    # Orders
    ORDER_PLACED: Final[str] = "Order created successfully"
    ORDER_CANCELLED: Final[str] = "Order cancelled successfully"
    ORDER_STATUS_UPDATED: Final[str] = "Order status updated successfully"
    PAYMENT_CONFIRMED: Final[str] = "Payment confirmed successfully"
