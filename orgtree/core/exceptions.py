from typing import Optional, Dict, Any
from pydantic import BaseModel

from orgtree.core import errors


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    correlation_id: Optional[str] = None


class BaseAPIException(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_error_response(self, correlation_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details,
            correlation_id=correlation_id
        )


class ValidationError(BaseAPIException):
    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="ORG-400",
            message=message,
            status_code=400,
            details=details
        )


class AuthenticationError(BaseAPIException):
    def __init__(self, message: str = "Authentication required", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="ORG-401",
            message=message,
            status_code=401,
            details=details
        )


class AuthorizationError(BaseAPIException):
    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="ORG-403",
            message=message,
            status_code=403,
            details=details
        )


class NotFoundError(BaseAPIException):
    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="ORG-404",
            message=message,
            status_code=404,
            details=details
        )


class ConflictError(BaseAPIException):
    def __init__(self, message: str = "Resource conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="ORG-409",
            message=message,
            status_code=409,
            details=details
        )


class InternalServerError(BaseAPIException):
    def __init__(self, message: str = "Internal server error", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="ORG-500",
            message=message,
            status_code=500,
            details=details
        )


class DirectoryUnavailableError(BaseAPIException):
    def __init__(self, message: str = "Directory unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code="ORG-503",
            message=message,
            status_code=503,
            details=details
        )


ERROR_CODES = {
    "ORG-400": "Bad Request - The request or directory path was invalid or malformed",
    "ORG-401": "Unauthorized - The uid header is required",
    "ORG-403": "Forbidden - The principal lacks the required capability",
    "ORG-404": "Not Found - The organization, group or entry does not exist",
    "ORG-409": "Conflict - The entry or attribute value conflicts with existing data",
    "ORG-500": "Internal Server Error - An unexpected error occurred",
    "ORG-503": "Service Unavailable - The directory could not be reached"
}


_DOMAIN_ERROR_MAP = (
    ((errors.ValidationError, errors.InvalidPathError), ValidationError),
    ((errors.PermissionDeniedError,), AuthorizationError),
    ((errors.NotFoundError,), NotFoundError),
    ((errors.AlreadyExistsError, errors.ValueConflictError), ConflictError),
    ((errors.StoreUnavailableError,), DirectoryUnavailableError),
)


def from_domain_error(error: errors.OrgTreeError) -> BaseAPIException:
    """Translate a domain error into its API exception"""
    for domain_types, api_type in _DOMAIN_ERROR_MAP:
        if isinstance(error, domain_types):
            return api_type(message=error.message, details=error.details or None)
    return InternalServerError(message=error.message, details=error.details or None)
