from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from coterie.core.modules.member.models import CreateMemberRequest, MemberUpdate, MemberView
from coterie.web.deps import ADMIN, AUTHENTICATED, AppDep, CurrentUserDep
from coterie.web.openapi import ErrorResponse

router = APIRouter(tags=["members"], dependencies=AUTHENTICATED)
admin_router = APIRouter(tags=["members"], dependencies=ADMIN)


class ExtendDuesRequest(BaseModel):
    days: int = Field(..., gt=0, description="Number of days to add")


@router.get(
    "/members",
    summary="List members",
    operation_id="listMembers",
    responses={
        200: {"description": "Page of members"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Membership not active"},
    },
)
async def list_members(
    app: AppDep,
    limit: int = Query(50, ge=1, le=200, description="Maximum members to return"),
    offset: int = Query(0, ge=0, description="Members to skip"),
) -> list[MemberView]:
    return await app.list_members(limit, offset)


@router.get(
    "/members/{member_id}",
    summary="Get member",
    operation_id="getMember",
    responses={
        200: {"description": "Member"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
)
async def get_member(member_id: UUID, app: AppDep) -> MemberView:
    return await app.get_member(member_id)


@admin_router.post(
    "/members",
    summary="Create member",
    description="Register a new pending member. Admin only.",
    operation_id="createMember",
    status_code=201,
    responses={
        201: {"description": "Member created"},
        400: {"model": ErrorResponse, "description": "Invalid data"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
        409: {"model": ErrorResponse, "description": "Email or username taken"},
    },
)
async def create_member(request: CreateMemberRequest, app: AppDep) -> MemberView:
    return await app.create_member(request)


@admin_router.patch(
    "/members/{member_id}",
    summary="Update member",
    description="Partial update. Activation and expiration have their own endpoints.",
    operation_id="updateMember",
    responses={
        200: {"description": "Updated member"},
        400: {"model": ErrorResponse, "description": "Invalid update"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
)
async def update_member(member_id: UUID, update: MemberUpdate, app: AppDep) -> MemberView:
    return await app.update_member(member_id, update)


@admin_router.delete(
    "/members/{member_id}",
    summary="Delete member",
    operation_id="deleteMember",
    status_code=204,
    responses={
        204: {"description": "Member deleted"},
        400: {"model": ErrorResponse, "description": "Cannot delete yourself"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
)
async def delete_member(member_id: UUID, app: AppDep, current_user: CurrentUserDep) -> None:
    await app.delete_member(current_user.member, member_id)


@admin_router.post(
    "/members/{member_id}/activate",
    summary="Activate member",
    operation_id="activateMember",
    responses={
        200: {"description": "Active member"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
)
async def activate_member(member_id: UUID, app: AppDep) -> MemberView:
    return await app.activate_member(member_id)


@admin_router.post(
    "/members/{member_id}/expire",
    summary="Expire member",
    operation_id="expireMember",
    responses={
        200: {"description": "Expired member"},
        400: {"model": ErrorResponse, "description": "Member is exempt from dues"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
)
async def expire_member(member_id: UUID, app: AppDep) -> MemberView:
    return await app.expire_member(member_id)


@admin_router.post(
    "/members/{member_id}/suspend",
    summary="Suspend member",
    description="Suspend a member and end all of their sessions.",
    operation_id="suspendMember",
    responses={
        200: {"description": "Suspended member"},
        400: {"model": ErrorResponse, "description": "Cannot suspend yourself"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
)
async def suspend_member(member_id: UUID, app: AppDep, current_user: CurrentUserDep) -> MemberView:
    return await app.suspend_member(current_user.member, member_id)


@admin_router.post(
    "/members/{member_id}/extend-dues",
    summary="Extend dues",
    operation_id="extendDues",
    responses={
        200: {"description": "Member with the new dues date"},
        404: {"model": ErrorResponse, "description": "Member not found"},
    },
)
async def extend_dues(member_id: UUID, request: ExtendDuesRequest, app: AppDep) -> MemberView:
    return await app.extend_dues(member_id, request.days)
