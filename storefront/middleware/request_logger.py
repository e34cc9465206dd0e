# ==============================================================================
# REQUEST LOGGER MIDDLEWARE
# ==============================================================================
# One log line per request with a short correlation id
# ==============================================================================

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.core.constants import APIConstants

logger = logging.getLogger(__name__)


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status and latency for every request.

    An incoming ``X-Request-ID`` is reused; otherwise a short id is
    generated. The id is stored on ``request.state`` and echoed back.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        request_id = request.headers.get(APIConstants.REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                f"[{request_id}] {request.method} {request.url.path} - Error ({duration_ms:.2f}ms)"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        level = logging.INFO if response.status_code < 400 else logging.WARNING
        logger.log(
            level,
            f"[{request_id}] {request.method} {request.url.path} "
            f"- {response.status_code} ({duration_ms:.2f}ms)",
        )

        response.headers[APIConstants.REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
