"""
Audit Middleware - Request/response logging.

Logs every API request with method, path, status, duration and the
caller id taken from the X-User-Id header. Allocation refusals show up as
4xx warnings, store outages as 5xx errors.
"""
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from datameq.core.logging_config import get_logger

logger = get_logger(__name__)

USER_HEADER = "X-User-Id"


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging all requests and responses.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log audit information."""
        start_time = time.time()

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        caller = request.headers.get(USER_HEADER, "")[:36] or "-"

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"REQUEST FAILED: {method} {path} "
                f"caller={caller} duration={duration:.3f}s error={str(e)}"
            )
            raise

        duration = time.time() - start_time
        self._log_request(
            method=method,
            path=path,
            status_code=response.status_code,
            duration=duration,
            client_ip=client_ip,
            caller=caller
        )
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response

    def _log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        client_ip: str,
        caller: str
    ) -> None:
        # Pool and activity polling is frequent, keep it out of INFO
        if path.startswith("/health") or (method == "GET" and path in ("/pools", "/activity")):
            logger.debug(
                f"POLL: {method} {path} status={status_code} duration={duration:.3f}s"
            )
            return

        if status_code >= 500:
            log_fn = logger.error
        elif status_code >= 400:
            log_fn = logger.warning
        else:
            log_fn = logger.info

        log_fn(
            f"REQUEST: {method} {path} "
            f"status={status_code} duration={duration:.3f}s "
            f"client={client_ip} caller={caller}"
        )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds conservative security headers to all responses.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Allocation output is single-use, never cache it
        response.headers["Cache-Control"] = "no-store"

        return response
