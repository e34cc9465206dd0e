# ==============================================================================
# MIDDLEWARE PACKAGE INITIALIZATION
# ==============================================================================

"""
Middleware Module
=================

- RateLimitMiddleware: Per-IP token bucket
- RequestLoggerMiddleware: Request logging with X-Request-ID
"""

from storefront.middleware.rate_limiter import RateLimitMiddleware
from storefront.middleware.request_logger import RequestLoggerMiddleware

__all__ = [
    "RateLimitMiddleware",
    "RequestLoggerMiddleware",
]
