"""HTTP middleware for request/response logging."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

# Slow request threshold in milliseconds
SLOW_REQUEST_THRESHOLD_MS = 1000

# Polled paths logged at DEBUG only
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs REST requests with timing information.

    WebSocket traffic bypasses this middleware; commands sent over /ws are
    timed by the dispatcher instead.

    Log levels:
    - DEBUG: Request start, health checks
    - INFO: Successful responses
    - WARNING: 4xx errors, slow requests
    - ERROR: 5xx errors
    """

    def __init__(self, app: ASGIApp, slow_threshold_ms: float = SLOW_REQUEST_THRESHOLD_MS) -> None:
        super().__init__(app)
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        logger.debug("%s %s", request.method, request.url.path)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._log_response(request, response, duration_ms)
        return response

    def _log_response(
        self, request: Request, response: Response, duration_ms: float
    ) -> None:
        method = request.method
        path = request.url.path
        status = response.status_code

        if status >= 500:
            logger.error("%s %s -> %d (%.1fms)", method, path, status, duration_ms)
        elif status >= 400:
            logger.warning("%s %s -> %d (%.1fms)", method, path, status, duration_ms)
        elif duration_ms > self.slow_threshold_ms:
            logger.warning(
                "%s %s -> %d (%.1fms) SLOW", method, path, status, duration_ms
            )
        elif path in QUIET_PATHS:
            logger.debug("%s %s -> %d (%.1fms)", method, path, status, duration_ms)
        else:
            logger.info("%s %s -> %d (%.1fms)", method, path, status, duration_ms)
