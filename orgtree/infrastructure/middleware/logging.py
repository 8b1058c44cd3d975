import re
import time
from typing import Callable, Dict, Optional

from fastapi import Request, Response
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware

from orgtree.infrastructure.logging import bind_context, clear_context, get_logger
from orgtree.infrastructure.middleware.correlation import get_correlation_id

logger = get_logger(__name__)

_BRANCH_PATH = re.compile(
    r"^/api/v\d+/branches/(?P<branch>[^/]+)"
    r"(?:/organizations/(?P<organization>[^/]+))?"
    r"(?:/groups/(?P<group>[^/]+))?"
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Request/response logging middleware"""

    def __init__(self, app):
        super().__init__(app)
        self.exclude_paths = {
            "/health",  # Don't log health checks
            "/ready",  # Don't log readiness checks
            "/metrics",  # Don't log metrics endpoint
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        if request.url.path in self.exclude_paths:
            return await call_next(request)

        request_id = get_correlation_id()
        client_ip = self._get_client_ip(request)

        # Bind context for all logs in this request
        bind_context(
            correlation_id=request_id,
            request_method=request.method,
            request_path=request.url.path,
            client_ip=client_ip,
        )

        uid = request.headers.get("uid")
        if uid:
            bind_context(uid=uid)

        for key, value in self._extract_directory_context(request.url.path).items():
            bind_context(**{key: value})

        logger.info(
            "http_request_started",
            method=request.method,
            path=request.url.path,
            query_params=dict(request.query_params) if request.query_params else None,
            headers=self._sanitize_headers(request.headers),
        )

        try:
            response = await call_next(request)

            duration = time.time() - start_time

            logger.info(
                "http_request_completed",
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )

            if request_id:
                response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{round(duration * 1000, 2)}ms"

            return response

        except Exception as e:
            duration = time.time() - start_time

            logger.error(
                "http_request_failed",
                duration_ms=round(duration * 1000, 2),
                error_type=type(e).__name__,
                error_message=str(e),
                exc_info=True,
            )
            raise

        finally:
            clear_context()

    def _get_client_ip(self, request: Request) -> str:
        """Extract real client IP from request"""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"

    def _extract_directory_context(self, path: str) -> Dict[str, str]:
        """Extract branch, organization and group names from API paths"""
        match = _BRANCH_PATH.match(path)
        if not match:
            return {}
        return {key: value for key, value in match.groupdict().items() if value}

    def _sanitize_headers(self, headers: Headers) -> Dict[str, Optional[str]]:
        """Sanitize headers for logging"""
        sensitive_headers = {
            "authorization",
            "x-api-key",
            "cookie",
            "set-cookie",
        }

        sanitized = {}
        for key, value in headers.items():
            if key.lower() in sensitive_headers:
                sanitized[key] = "***REDACTED***"
            else:
                sanitized[key] = value

        return sanitized
