"""Metrics collection middleware for FastAPI"""

import re
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from orgtree.infrastructure.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    http_requests_in_progress
)
from orgtree.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Most specific first
_ENDPOINT_PATTERNS = [
    (r"^/api/v\d+/branches/[^/]+/organizations/[^/]+/groups/[^/]+/(admins|members|reconcile)$",
     r"/api/{version}/branches/{branch}/organizations/{org}/groups/{group}/\1"),
    (r"^/api/v\d+/branches/[^/]+/organizations/[^/]+/groups/[^/]+$",
     "/api/{version}/branches/{branch}/organizations/{org}/groups/{group}"),
    (r"^/api/v\d+/branches/[^/]+/organizations/[^/]+/(admins|sub-organizations|reconcile)$",
     r"/api/{version}/branches/{branch}/organizations/{org}/\1"),
    (r"^/api/v\d+/branches/[^/]+/(organizations|groups)$",
     r"/api/{version}/branches/{branch}/\1"),
]


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for collecting HTTP metrics"""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.exclude_paths = {
            "/metrics",
            "/health",
            "/ready"
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        endpoint = self._normalize_endpoint(request.url.path)
        method = request.method

        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()
        status = "500"

        try:
            response = await call_next(request)
            status = str(response.status_code)

            duration = time.time() - start_time
            if duration > 1.0:
                logger.warning(
                    "slow_request",
                    method=method,
                    endpoint=endpoint,
                    duration_seconds=duration,
                    status=status
                )

            return response

        finally:
            duration = time.time() - start_time
            http_request_duration_seconds.labels(
                method=method, endpoint=endpoint, status=status
            ).observe(duration)
            http_requests_total.labels(
                method=method, endpoint=endpoint, status=status
            ).inc()
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()

    def _normalize_endpoint(self, path: str) -> str:
        """Normalize endpoint path for metrics labels"""
        if path.endswith("/") and len(path) > 1:
            path = path[:-1]

        for pattern, replacement in _ENDPOINT_PATTERNS:
            normalized, count = re.subn(pattern, replacement, path)
            if count:
                return normalized

        # Truncate very long paths to avoid cardinality explosion
        if len(path) > 50:
            return path[:50] + "..."

        return path
