"""Organization management API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from orgtree.api.dependencies import AdminService, CurrentUid
from orgtree.api.v1.models.common import (BaseResponse, DataResponse,
                                          PrincipalRequest, ReconcileResponse)
from orgtree.api.v1.models.organization import (OrganizationCreateRequest,
                                                OrganizationResponse)
from orgtree.application.dto import OrganizationDTO
from orgtree.infrastructure.logging import get_logger
from orgtree.infrastructure.middleware.correlation import get_correlation_id

logger = get_logger(__name__)

router = APIRouter(prefix="/branches/{branch}/organizations", tags=["organizations"])


def _to_response(dto: OrganizationDTO) -> OrganizationResponse:
    return OrganizationResponse.model_validate(dto)


@router.get(
    "",
    response_model=DataResponse[List[OrganizationResponse]],
    summary="List organizations",
    description="List the organizations the acting principal may see in a branch",
)
def list_organizations(
    branch: str,
    uid: CurrentUid,
    service: AdminService,
    name: Optional[str] = Query(None, description="Anchor organization"),
    nested: bool = Query(False, description="Include the whole subtree"),
) -> DataResponse[List[OrganizationResponse]]:
    """List visible organizations"""
    organizations = service.list_organizations(uid, branch, name=name, nested=nested)

    logger.info(
        "organizations_listed",
        branch=branch,
        anchor=name,
        nested=nested,
        count=len(organizations),
        correlation_id=get_correlation_id(),
    )

    return DataResponse(
        data=[_to_response(org) for org in organizations],
        correlation_id=get_correlation_id(),
    )


@router.post(
    "",
    response_model=DataResponse[OrganizationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create organization",
    description="Create a top-level organization with its groups container and admin group",
)
def create_organization(
    branch: str,
    request: OrganizationCreateRequest,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[OrganizationResponse]:
    """Create a new organization"""
    organization = service.create_organization(uid, branch, request.name)

    logger.info(
        "organization_created_via_api",
        branch=branch,
        organization=organization.name,
        dn=organization.dn,
        correlation_id=get_correlation_id(),
    )

    return DataResponse(
        data=_to_response(organization),
        message=f"Organization '{organization.name}' created successfully",
        correlation_id=get_correlation_id(),
    )


@router.post(
    "/{org}/sub-organizations",
    response_model=DataResponse[OrganizationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create sub-organization",
    description="Create an organization nested under an existing one",
)
def create_sub_organization(
    branch: str,
    org: str,
    request: OrganizationCreateRequest,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[OrganizationResponse]:
    """Create a new sub-organization"""
    organization = service.create_sub_organization(uid, branch, org, request.name)

    logger.info(
        "sub_organization_created_via_api",
        branch=branch,
        parent=org,
        organization=organization.name,
        correlation_id=get_correlation_id(),
    )

    return DataResponse(
        data=_to_response(organization),
        message=f"Sub-organization '{organization.name}' created under '{org}'",
        correlation_id=get_correlation_id(),
    )


@router.get(
    "/{org}/admins",
    response_model=DataResponse[List[str]],
    summary="List organization admins",
)
def list_org_admins(
    branch: str,
    org: str,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[List[str]]:
    admins = service.list_org_admins(uid, branch, org)
    return DataResponse(data=admins, correlation_id=get_correlation_id())


@router.post(
    "/{org}/admins",
    response_model=BaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add organization admin",
)
def add_org_admin(
    branch: str,
    org: str,
    request: PrincipalRequest,
    uid: CurrentUid,
    service: AdminService,
) -> BaseResponse:
    service.add_org_admin(uid, branch, org, request.uid)

    logger.info(
        "org_admin_added_via_api",
        branch=branch,
        organization=org,
        admin_uid=request.uid,
        correlation_id=get_correlation_id(),
    )

    return BaseResponse(
        message=f"'{request.uid}' is now an administrator of '{org}'",
        correlation_id=get_correlation_id(),
    )


@router.delete(
    "/{org}/admins",
    response_model=BaseResponse,
    summary="Remove organization admin",
)
def remove_org_admin(
    branch: str,
    org: str,
    uid: CurrentUid,
    service: AdminService,
    admin_uid: str = Query(..., alias="uid", min_length=1, description="Admin to remove"),
) -> BaseResponse:
    service.remove_org_admin(uid, branch, org, admin_uid)

    logger.info(
        "org_admin_removed_via_api",
        branch=branch,
        organization=org,
        admin_uid=admin_uid,
        correlation_id=get_correlation_id(),
    )

    return BaseResponse(
        message=f"'{admin_uid}' is no longer an administrator of '{org}'",
        correlation_id=get_correlation_id(),
    )


@router.post(
    "/{org}/reconcile",
    response_model=DataResponse[ReconcileResponse],
    summary="Reconcile organization",
    description="Re-create the groups container and admin group if they are missing",
)
def reconcile_organization(
    branch: str,
    org: str,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[ReconcileResponse]:
    result = service.reconcile_organization(uid, branch, org)

    logger.info(
        "organization_reconciled_via_api",
        branch=branch,
        organization=org,
        created=len(result.created),
        correlation_id=get_correlation_id(),
    )

    return DataResponse(
        data=ReconcileResponse(**result.to_dict()),
        message="Organization structure is complete",
        correlation_id=get_correlation_id(),
    )
