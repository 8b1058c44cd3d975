"""Base exception classes for OrgTree"""

from typing import Any, Dict, List, Optional


class OrgTreeError(Exception):
    """Base exception for all OrgTree errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(OrgTreeError):
    """Raised when request input is invalid"""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            f"Validation failed: {', '.join(errors)}",
            {"errors": errors}
        )


class ConfigurationError(OrgTreeError):
    """Raised when configuration is invalid"""
    pass


class InvalidPathError(OrgTreeError):
    """Raised when a path does not follow the directory grammar"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(
            f"Invalid directory path '{path}': {reason}",
            {"path": path, "reason": reason}
        )


class NotFoundError(OrgTreeError):
    """Raised when an entry or a named organization/group is absent"""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {
                "resource_type": resource_type,
                "resource_id": resource_id
            }
        )


class AlreadyExistsError(OrgTreeError):
    """Raised when an entry already exists"""

    def __init__(self, resource_type: str, resource_id: str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} already exists: {resource_id}",
            {
                "resource_type": resource_type,
                "resource_id": resource_id
            }
        )


class ValueConflictError(OrgTreeError):
    """Base class for attribute value conflicts"""

    def __init__(self, message: str, dn: str, attribute: str, value: str):
        self.dn = dn
        self.attribute = attribute
        self.value = value
        super().__init__(
            message,
            {"dn": dn, "attribute": attribute, "value": value}
        )


class DuplicateValueError(ValueConflictError):
    """Raised when adding a value that is already present"""

    def __init__(self, dn: str, attribute: str, value: str):
        super().__init__(
            f"Value already present in '{attribute}' of {dn}: {value}",
            dn, attribute, value
        )


class AbsentValueError(ValueConflictError):
    """Raised when removing a value that is not present"""

    def __init__(self, dn: str, attribute: str, value: str):
        super().__init__(
            f"Value not present in '{attribute}' of {dn}: {value}",
            dn, attribute, value
        )


class PermissionDeniedError(OrgTreeError):
    """Raised when a principal lacks the capability for an operation"""

    def __init__(self, message: str = "Permission denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class StoreUnavailableError(OrgTreeError):
    """Raised when the directory cannot be reached or answers with a protocol failure"""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Directory operation '{operation}' failed: {reason}",
            {
                "operation": operation,
                "reason": reason
            }
        )


class PartialCreationError(OrgTreeError):
    """Raised when a composite creation fails after some entries were written.

    Nothing is rolled back: ``created`` lists the entries left behind so that
    an operator can reconcile or re-run.
    """

    def __init__(self, operation: str, created: List[str], failed: str, cause: OrgTreeError):
        self.operation = operation
        self.created = created
        self.failed = failed
        self.cause = cause
        super().__init__(
            f"{operation} stopped at {failed}: {cause.message}",
            {
                "operation": operation,
                "created": created,
                "failed": failed,
                "cause": type(cause).__name__,
            }
        )
