import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from orgtree.core.errors import OrgTreeError
from orgtree.core.exceptions import (BaseAPIException, InternalServerError,
                                     ValidationError, from_domain_error)
from orgtree.infrastructure.middleware.correlation import get_correlation_id

logger = structlog.get_logger(__name__)


def _error_json(exc: BaseAPIException, correlation_id) -> JSONResponse:
    error_response = exc.to_error_response(correlation_id=correlation_id)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(exclude_none=True),
        headers={"X-Correlation-ID": correlation_id} if correlation_id else {},
    )


async def base_api_exception_handler(
    request: Request, exc: BaseAPIException
) -> JSONResponse:
    correlation_id = get_correlation_id()

    logger.error(
        "api_exception",
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        correlation_id=correlation_id,
        path=request.url.path,
    )

    return _error_json(exc, correlation_id)


async def orgtree_error_handler(request: Request, exc: OrgTreeError) -> JSONResponse:
    correlation_id = get_correlation_id()
    api_error = from_domain_error(exc)

    log = logger.error if api_error.status_code >= 500 else logger.warning
    log(
        "domain_error",
        error_type=type(exc).__name__,
        code=api_error.code,
        message=exc.message,
        status_code=api_error.status_code,
        details=exc.details,
        correlation_id=correlation_id,
        path=request.url.path,
    )

    return _error_json(api_error, correlation_id)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    correlation_id = get_correlation_id()

    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    validation_error = ValidationError(
        message="Request validation failed", details={"errors": errors}
    )

    logger.error(
        "validation_error",
        errors=errors,
        correlation_id=correlation_id,
        path=request.url.path,
    )

    return _error_json(validation_error, correlation_id)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    correlation_id = get_correlation_id()

    logger.error(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        correlation_id=correlation_id,
        path=request.url.path,
    )

    code_mapping = {
        400: "ORG-400",
        401: "ORG-401",
        403: "ORG-403",
        404: "ORG-404",
        405: "ORG-405",
        409: "ORG-409",
        500: "ORG-500",
        503: "ORG-503",
    }

    error_code = code_mapping.get(exc.status_code, "ORG-500")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": error_code,
            "message": exc.detail if isinstance(exc.detail, str) else "Request failed",
            "details": exc.detail if isinstance(exc.detail, dict) else None,
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-ID": correlation_id} if correlation_id else {},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    correlation_id = get_correlation_id()

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        correlation_id=correlation_id,
        path=request.url.path,
        exc_info=True,
    )

    internal_error = InternalServerError(
        message="An unexpected error occurred",
        details=(
            {"error_type": type(exc).__name__}
            if not getattr(request.app.state, "is_production", True)
            else None
        ),
    )

    return _error_json(internal_error, correlation_id)
