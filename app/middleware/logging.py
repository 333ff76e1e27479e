"""Request logging middleware."""

import logging
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its duration and tag the response with a request id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid4().hex[:12]
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.exception(
                f"[HTTP] {request.method} {request.url.path} failed after {duration_ms}ms (id={request_id})"
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        log = logger.warning if response.status_code >= 400 else logger.info
        log(
            f"[HTTP] {request.method} {request.url.path} -> {response.status_code} "
            f"in {duration_ms}ms (id={request_id})"
        )

        response.headers["X-Request-ID"] = request_id
        return response
