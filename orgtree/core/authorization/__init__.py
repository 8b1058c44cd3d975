from orgtree.core.authorization.models import (AuthorizationResult,
                                               AuthorizationRule, Capability)
from orgtree.core.authorization.service import AuthorizationService

__all__ = [
    "AuthorizationResult",
    "AuthorizationRule",
    "AuthorizationService",
    "Capability",
]
