"""Health and readiness check endpoints"""

import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request, status

from orgtree.core.config import settings
from orgtree.infrastructure.logging import get_logger
from orgtree.infrastructure.metrics import health_check_status

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthChecker:
    """Service health checking utilities"""

    def __init__(self):
        self.start_time = time.time()

    def check_directory(self, request: Request) -> tuple[bool, str]:
        """Check that the directory answers a read of its suffix"""
        service = getattr(request.app.state, "admin_service", None)
        if service is None:
            return False, "Directory service is not initialized"
        if service.ping():
            return True, "Directory is reachable"
        return False, "Directory is unreachable"

    def get_uptime(self) -> float:
        """Get service uptime in seconds"""
        return time.time() - self.start_time


health_checker = HealthChecker()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint

    Returns 200 if service is alive, regardless of directory status
    """
    response_time_start = time.time()

    response = {
        "status": "healthy",
        "timestamp": _now(),
        "service": "orgtree",
        "version": settings.app_version,
        "environment": settings.environment,
        "uptime_seconds": health_checker.get_uptime(),
        "response_time_ms": round((time.time() - response_time_start) * 1000, 2)
    }

    health_check_status.labels(check_type="liveness").set(1)

    logger.debug("health_check", **response)

    return response


@router.get("/ready")
def readiness_check(request: Request) -> Dict[str, Any]:
    """
    Readiness check endpoint

    Returns 503 when the directory cannot be reached.
    """
    response_time_start = time.time()

    directory_healthy, directory_message = health_checker.check_directory(request)
    checks = {
        "directory": {
            "healthy": directory_healthy,
            "message": directory_message,
            "backend": settings.directory_backend
        }
    }

    response = {
        "status": "ready" if directory_healthy else "not_ready",
        "timestamp": _now(),
        "service": "orgtree",
        "version": settings.app_version,
        "environment": settings.environment,
        "uptime_seconds": health_checker.get_uptime(),
        "checks": checks,
        "response_time_ms": round((time.time() - response_time_start) * 1000, 2)
    }

    health_check_status.labels(check_type="readiness").set(1 if directory_healthy else 0)

    if not directory_healthy:
        logger.warning("readiness_check_failed", **response)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=response
        )

    logger.debug("readiness_check", **response)

    return response
