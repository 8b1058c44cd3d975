from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from orgtree.api import health, metrics_endpoint
from orgtree.api.exception_handlers import (base_api_exception_handler,
                                            general_exception_handler,
                                            http_exception_handler,
                                            orgtree_error_handler,
                                            validation_exception_handler)
from orgtree.api.router import api_router
from orgtree.api.v1.router import get_openapi_config
from orgtree.application.services.directory_admin_service import DirectoryAdminService
from orgtree.core.config import settings
from orgtree.core.directory.layout import Branch
from orgtree.core.errors import OrgTreeError
from orgtree.core.exceptions import BaseAPIException
from orgtree.infrastructure.logging import get_logger, setup_logging
from orgtree.infrastructure.middleware.correlation import CorrelationIDMiddleware
from orgtree.infrastructure.middleware.logging import LoggingMiddleware
from orgtree.infrastructure.middleware.metrics import MetricsMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
        directory_backend=settings.directory_backend,
        base_dn=settings.base_dn,
    )

    if app.state.admin_service is None:
        app.state.admin_service = DirectoryAdminService.from_settings(settings)
    service = app.state.admin_service
    service.initialize()

    if settings.bootstrap_super_admin:
        for branch in Branch:
            service.bootstrap(branch.value, settings.bootstrap_super_admin)

    yield

    service.cleanup()
    logger.info("application_shutdown", app_name=settings.app_name)


def create_app(admin_service: Optional[DirectoryAdminService] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        admin_service: Service to serve requests with; when omitted one is
            built from settings at startup
    """
    openapi_config = get_openapi_config()

    app = FastAPI(
        title=openapi_config["title"],
        description=openapi_config["description"],
        version=openapi_config["version"],
        servers=openapi_config.get("servers"),
        openapi_tags=openapi_config.get("tags"),
        lifespan=lifespan,
    )
    app.state.admin_service = admin_service
    app.state.is_production = settings.is_production

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseAPIException, base_api_exception_handler)
    app.add_exception_handler(OrgTreeError, orgtree_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/", response_model=Dict[str, Any])
    def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "description": "Hierarchical organization and group administration over LDAP",
            "status": "running",
            "environment": settings.environment,
            "endpoints": {
                "api": settings.api_prefix,
                "docs": "/docs",
                "redoc": "/redoc",
                "health": "/health",
                "metrics": "/metrics",
            },
        }

    # Health and metrics endpoints at root level (no prefix)
    app.include_router(health.router)
    app.include_router(metrics_endpoint.router)

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()
