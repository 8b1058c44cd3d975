"""Authorization models: capabilities and decision results"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Capability(str, Enum):
    """Composite capabilities a principal may hold over a target"""

    # Branch scoped
    CREATE_ORGANIZATION = "create_organization"

    # Organization scoped
    CREATE_SUB_ORGANIZATION = "create_sub_organization"
    MANAGE_ORGANIZATION = "manage_organization"
    VIEW_ORGANIZATION = "view_organization"
    CREATE_GROUP = "create_group"

    # Group scoped
    VIEW_GROUP = "view_group"
    MANAGE_GROUP_ADMINS = "manage_group_admins"
    MANAGE_GROUP_MEMBERS = "manage_group_members"


class AuthorizationRule(str, Enum):
    """Rule that granted a capability"""

    SUPER_ADMIN = "super_admin"
    ORG_ADMIN = "org_admin"
    GROUP_ADMIN = "group_admin"


class AuthorizationResult(BaseModel):
    """Result of authorization check"""

    allowed: bool
    reason: Optional[str] = None
    rule: Optional[AuthorizationRule] = None

    @classmethod
    def allow(
        cls, rule: AuthorizationRule, reason: str = "Access granted"
    ) -> "AuthorizationResult":
        """Create an allowed result"""
        return cls(allowed=True, reason=reason, rule=rule)

    @classmethod
    def deny(cls, reason: str = "Access denied") -> "AuthorizationResult":
        """Create a denied result"""
        return cls(allowed=False, reason=reason)
