"""Application services.

This module contains services that orchestrate business operations
by combining Core and Infrastructure components.
"""

from orgtree.application.services.base import ServiceBase
from orgtree.application.services.directory_admin_service import DirectoryAdminService

__all__ = [
    "ServiceBase",
    "DirectoryAdminService",
]
