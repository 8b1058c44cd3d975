"""API v1 request and response models"""

from .common import (BaseResponse, DataResponse, ListResponse,
                     PrincipalRequest, ReconcileResponse)
from .group import GroupCreateRequest, GroupResponse
from .organization import OrganizationCreateRequest, OrganizationResponse

__all__ = [
    "BaseResponse",
    "DataResponse",
    "ListResponse",
    "PrincipalRequest",
    "ReconcileResponse",
    "GroupCreateRequest",
    "GroupResponse",
    "OrganizationCreateRequest",
    "OrganizationResponse",
]
