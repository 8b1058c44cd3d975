"""API v1 router with OpenAPI configuration"""

from fastapi import APIRouter

from orgtree.api.v1.routes import groups_router, organizations_router


def _error_example(error: str, message: str) -> dict:
    return {
        "content": {
            "application/json": {
                "example": {
                    "code": error,
                    "message": message,
                    "correlation_id": "abc123",
                }
            }
        }
    }


api_v1_router = APIRouter(
    prefix="",
    responses={
        400: {"description": "Bad Request", **_error_example("ORG-400", "Invalid branch: 'partner'")},
        401: {"description": "Unauthorized", **_error_example("ORG-401", "The uid header is required")},
        403: {"description": "Forbidden", **_error_example("ORG-403", "Permission denied")},
        404: {"description": "Not Found", **_error_example("ORG-404", "Organization not found: Acme")},
        409: {"description": "Conflict", **_error_example("ORG-409", "Value already present")},
        503: {"description": "Directory Unavailable", **_error_example("ORG-503", "Directory unavailable")},
    },
)

api_v1_router.include_router(organizations_router)
api_v1_router.include_router(groups_router)


@api_v1_router.get(
    "/",
    summary="API v1 Root",
    description="Get API v1 information and available endpoints",
    tags=["api"],
)
def api_v1_root():
    """Get API v1 information"""
    return {
        "version": "1.0.0",
        "description": "OrgTree directory administration API",
        "endpoints": {
            "organizations": "/api/v1/branches/{branch}/organizations",
            "groups": "/api/v1/branches/{branch}/groups",
        },
        "authentication": "Acting principal is read from the 'uid' header",
        "documentation": {"openapi": "/docs", "redoc": "/redoc"},
    }


def get_openapi_config():
    """Get OpenAPI configuration for FastAPI app"""
    from orgtree.core.config import settings

    return {
        "title": "OrgTree API",
        "description": """
# OrgTree Directory Administration API

Organizations, groups and their administrators kept in an LDAP directory
under an `internal` and an `external` branch.

## Authentication

Every call names the acting principal in the `uid` header:

```
uid: alice
```

## Error Responses

```json
{
  "code": "ORG-403",
  "message": "Permission denied",
  "details": {...},
  "correlation_id": "unique-request-id"
}
```
        """,
        "version": settings.app_version,
        "servers": [
            {
                "url": f"http://{settings.api_host}:{settings.api_port}",
                "description": "Local development server",
            }
        ],
        "tags": [
            {"name": "organizations", "description": "Organization management operations"},
            {"name": "groups", "description": "Group management operations"},
            {"name": "health", "description": "Health check endpoints"},
            {"name": "metrics", "description": "Metrics and monitoring"},
        ],
    }
