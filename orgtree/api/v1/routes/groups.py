"""Group management API endpoints"""

from typing import List

from fastapi import APIRouter, Query, status

from orgtree.api.dependencies import AdminService, CurrentUid
from orgtree.api.v1.models.common import (BaseResponse, DataResponse,
                                          PrincipalRequest, ReconcileResponse)
from orgtree.api.v1.models.group import GroupCreateRequest, GroupResponse
from orgtree.infrastructure.logging import get_logger
from orgtree.infrastructure.middleware.correlation import get_correlation_id

logger = get_logger(__name__)

router = APIRouter(prefix="/branches/{branch}", tags=["groups"])

GROUP_PATH = "/organizations/{org}/groups/{group}"


@router.get(
    "/groups",
    response_model=DataResponse[List[GroupResponse]],
    summary="List groups",
    description="List the groups the acting principal may see in a branch",
)
def list_groups(
    branch: str,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[List[GroupResponse]]:
    groups = service.list_groups(uid, branch)

    logger.info(
        "groups_listed",
        branch=branch,
        count=len(groups),
        correlation_id=get_correlation_id(),
    )

    return DataResponse(
        data=[GroupResponse.model_validate(group) for group in groups],
        correlation_id=get_correlation_id(),
    )


@router.post(
    "/groups",
    response_model=DataResponse[GroupResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create group",
    description="Create a group with its administrator subgroup inside an organization",
)
def create_group(
    branch: str,
    request: GroupCreateRequest,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[GroupResponse]:
    group = service.create_group(uid, branch, request.organization, request.name)

    logger.info(
        "group_created_via_api",
        branch=branch,
        organization=request.organization,
        group=group.name,
        dn=group.dn,
        correlation_id=get_correlation_id(),
    )

    return DataResponse(
        data=GroupResponse.model_validate(group),
        message=f"Group '{group.name}' created in '{request.organization}'",
        correlation_id=get_correlation_id(),
    )


@router.get(
    GROUP_PATH,
    response_model=DataResponse[GroupResponse],
    summary="Get group",
)
def get_group(
    branch: str,
    org: str,
    group: str,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[GroupResponse]:
    found = service.find_group(uid, branch, org, group)
    return DataResponse(
        data=GroupResponse.model_validate(found),
        correlation_id=get_correlation_id(),
    )


@router.get(
    GROUP_PATH + "/admins",
    response_model=DataResponse[List[str]],
    summary="List group admins",
)
def list_group_admins(
    branch: str,
    org: str,
    group: str,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[List[str]]:
    admins = service.list_group_admins(uid, branch, org, group)
    return DataResponse(data=admins, correlation_id=get_correlation_id())


@router.post(
    GROUP_PATH + "/admins",
    response_model=BaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add group admin",
)
def add_group_admin(
    branch: str,
    org: str,
    group: str,
    request: PrincipalRequest,
    uid: CurrentUid,
    service: AdminService,
) -> BaseResponse:
    service.add_group_admin(uid, branch, org, group, request.uid)

    logger.info(
        "group_admin_added_via_api",
        branch=branch,
        organization=org,
        group=group,
        admin_uid=request.uid,
        correlation_id=get_correlation_id(),
    )

    return BaseResponse(
        message=f"'{request.uid}' is now an administrator of group '{group}'",
        correlation_id=get_correlation_id(),
    )


@router.delete(
    GROUP_PATH + "/admins",
    response_model=BaseResponse,
    summary="Remove group admin",
)
def remove_group_admin(
    branch: str,
    org: str,
    group: str,
    uid: CurrentUid,
    service: AdminService,
    admin_uid: str = Query(..., alias="uid", min_length=1, description="Admin to remove"),
) -> BaseResponse:
    service.remove_group_admin(uid, branch, org, group, admin_uid)

    logger.info(
        "group_admin_removed_via_api",
        branch=branch,
        organization=org,
        group=group,
        admin_uid=admin_uid,
        correlation_id=get_correlation_id(),
    )

    return BaseResponse(
        message=f"'{admin_uid}' is no longer an administrator of group '{group}'",
        correlation_id=get_correlation_id(),
    )


@router.get(
    GROUP_PATH + "/members",
    response_model=DataResponse[List[str]],
    summary="List group members",
)
def list_group_members(
    branch: str,
    org: str,
    group: str,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[List[str]]:
    members = service.list_group_members(uid, branch, org, group)
    return DataResponse(data=members, correlation_id=get_correlation_id())


@router.post(
    GROUP_PATH + "/members",
    response_model=BaseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add group member",
)
def add_group_member(
    branch: str,
    org: str,
    group: str,
    request: PrincipalRequest,
    uid: CurrentUid,
    service: AdminService,
) -> BaseResponse:
    service.add_group_member(uid, branch, org, group, request.uid)

    logger.info(
        "group_member_added_via_api",
        branch=branch,
        organization=org,
        group=group,
        member_uid=request.uid,
        correlation_id=get_correlation_id(),
    )

    return BaseResponse(
        message=f"'{request.uid}' added to group '{group}'",
        correlation_id=get_correlation_id(),
    )


@router.delete(
    GROUP_PATH + "/members",
    response_model=BaseResponse,
    summary="Remove group member",
)
def remove_group_member(
    branch: str,
    org: str,
    group: str,
    uid: CurrentUid,
    service: AdminService,
    member_uid: str = Query(..., alias="uid", min_length=1, description="Member to remove"),
) -> BaseResponse:
    service.remove_group_member(uid, branch, org, group, member_uid)

    logger.info(
        "group_member_removed_via_api",
        branch=branch,
        organization=org,
        group=group,
        member_uid=member_uid,
        correlation_id=get_correlation_id(),
    )

    return BaseResponse(
        message=f"'{member_uid}' removed from group '{group}'",
        correlation_id=get_correlation_id(),
    )


@router.post(
    GROUP_PATH + "/reconcile",
    response_model=DataResponse[ReconcileResponse],
    summary="Reconcile group",
    description="Re-create the group administrator subgroup if it is missing",
)
def reconcile_group(
    branch: str,
    org: str,
    group: str,
    uid: CurrentUid,
    service: AdminService,
) -> DataResponse[ReconcileResponse]:
    result = service.reconcile_group(uid, branch, org, group)

    logger.info(
        "group_reconciled_via_api",
        branch=branch,
        organization=org,
        group=group,
        created=len(result.created),
        correlation_id=get_correlation_id(),
    )

    return DataResponse(
        data=ReconcileResponse(**result.to_dict()),
        message="Group structure is complete",
        correlation_id=get_correlation_id(),
    )
