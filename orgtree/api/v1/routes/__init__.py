"""API v1 routes"""

from .groups import router as groups_router
from .organizations import router as organizations_router

__all__ = [
    "groups_router",
    "organizations_router",
]
