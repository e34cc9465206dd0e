# ==============================================================================
# RATE LIMITER MIDDLEWARE
# ==============================================================================
# Per-IP token bucket in front of the API
# ==============================================================================

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from storefront.core.constants import APIConstants, ErrorMessages
from storefront.core.exceptions import RateLimitError
from storefront.core.settings import settings

logger = logging.getLogger(__name__)

# Liveness probes and provider callbacks are never throttled
EXEMPT_PATHS = frozenset({
    "/",
    "/health",
    f"{settings.API_PREFIX}/webhook/stripe",
    f"{settings.API_PREFIX}/payments/webhook",
})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware using a token bucket per client IP.

    Each bucket holds ``requests_limit`` tokens and refills continuously
    over ``window_seconds``. Rejected requests get the standard error
    envelope with status 429.

    Attributes:
        requests_limit: Bucket capacity
        window_seconds: Time to refill an empty bucket
        _buckets: client id -> (tokens, last refill time)
    """

    def __init__(
        self,
        app,
        requests_limit: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        self.requests_limit = requests_limit or settings.RATE_LIMIT_REQUESTS
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW
        self._buckets: Dict[str, Tuple[float, float]] = {}

    def _get_client_id(self, request: Request) -> str:
        """Client IP, honouring the first X-Forwarded-For hop."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"

    def _take(self, client_id: str) -> Tuple[bool, int, int]:
        """
        Take one token from the client's bucket.

        Returns:
            Tuple of (allowed, remaining, seconds until a token is available)
        """
        now = time.monotonic()
        rate = self.requests_limit / self.window_seconds
        tokens, last = self._buckets.get(client_id, (float(self.requests_limit), now))
        tokens = min(float(self.requests_limit), tokens + (now - last) * rate)

        if tokens >= 1:
            tokens -= 1
            self._buckets[client_id] = (tokens, now)
            reset = math.ceil((self.requests_limit - tokens) / rate)
            return True, int(tokens), reset

        self._buckets[client_id] = (tokens, now)
        return False, 0, max(1, math.ceil((1 - tokens) / rate))

    def _headers(self, remaining: int, reset: int) -> Dict[str, str]:
        return {
            APIConstants.RATE_LIMIT_HEADER: str(self.requests_limit),
            APIConstants.RATE_LIMIT_REMAINING_HEADER: str(remaining),
            APIConstants.RATE_LIMIT_RESET_HEADER: str(reset),
        }

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        if not settings.RATE_LIMIT_ENABLED or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_id = self._get_client_id(request)
        allowed, remaining, reset = self._take(client_id)

        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_id} on {request.url.path}")
            error = RateLimitError(message=ErrorMessages.RATE_LIMIT_EXCEEDED, retry_after=reset)
            return JSONResponse(
                status_code=error.status_code,
                content=error.to_dict(),
                headers={**self._headers(0, reset), "Retry-After": str(reset)},
            )

        response = await call_next(request)
        response.headers.update(self._headers(remaining, reset))
        return response
