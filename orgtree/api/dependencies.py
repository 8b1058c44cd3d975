"""FastAPI dependencies: acting principal and the administration service"""

from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from orgtree.application.services.directory_admin_service import DirectoryAdminService
from orgtree.core.exceptions import AuthenticationError, DirectoryUnavailableError
from orgtree.infrastructure.logging import bind_context, get_logger

logger = get_logger(__name__)


def get_admin_service(request: Request) -> DirectoryAdminService:
    """Administration service attached to the application"""
    service = getattr(request.app.state, "admin_service", None)
    if service is None:
        raise DirectoryUnavailableError("Directory service is not initialized")
    return service


def get_current_uid(
    uid: Optional[str] = Header(None, description="Acting principal uid"),
) -> str:
    """Principal taken from the ``uid`` request header"""
    if uid is None or not uid.strip():
        logger.warning("auth_missing_uid")
        raise AuthenticationError("The uid header is required")
    uid = uid.strip()
    bind_context(uid=uid)
    return uid


AdminService = Annotated[DirectoryAdminService, Depends(get_admin_service)]
CurrentUid = Annotated[str, Depends(get_current_uid)]
