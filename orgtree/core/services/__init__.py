from orgtree.core.services.bootstrap import DirectoryBootstrapper
from orgtree.core.services.group import GroupService
from orgtree.core.services.lookup import DirectoryLookup
from orgtree.core.services.organization import OrganizationService
from orgtree.core.services.visibility import VisibilityService

__all__ = [
    "DirectoryBootstrapper",
    "DirectoryLookup",
    "GroupService",
    "OrganizationService",
    "VisibilityService",
]
