"""Prometheus metrics endpoint"""

from fastapi import APIRouter, HTTPException, Request, Response, status
from fastapi.responses import PlainTextResponse

from orgtree.core.config import settings
from orgtree.infrastructure.logging import get_logger
from orgtree.infrastructure.metrics import get_metrics, get_metrics_content_type

logger = get_logger(__name__)

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=PlainTextResponse)
def get_prometheus_metrics(request: Request):
    """
    Prometheus metrics endpoint

    Returns metrics in Prometheus text format, or 404 when metrics are disabled.
    """
    if not settings.metrics_enabled:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Metrics endpoint is disabled",
        )

    metrics_data = get_metrics()

    logger.debug(
        "metrics_accessed",
        client_ip=request.client.host if request.client else None,
    )

    return Response(
        content=metrics_data,
        media_type=get_metrics_content_type(),
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )
