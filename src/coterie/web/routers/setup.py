from fastapi import APIRouter
from pydantic import BaseModel, Field

from coterie.core.modules.member.models import CreateMemberRequest, MemberView
from coterie.errors import ValidationError
from coterie.web.deps import AppDep
from coterie.web.openapi import ErrorResponse

router = APIRouter(tags=["setup"])


class SetupStatus(BaseModel):
    setup_required: bool = Field(..., description="True until the first administrator exists")


class SetupRequest(BaseModel):
    """First administrator account."""

    org_name: str = Field(..., min_length=1, description="Organization name")
    email: str = Field(..., description="Administrator email")
    username: str = Field(..., min_length=1, description="Administrator username")
    full_name: str = Field(..., min_length=1, description="Administrator full name")
    password: str = Field(..., min_length=1, description="Administrator password")
    password_confirm: str = Field(..., description="Password repeated")


@router.get(
    "/setup",
    summary="Setup status",
    operation_id="getSetupStatus",
)
async def get_setup_status(app: AppDep) -> SetupStatus:
    return SetupStatus(setup_required=await app.is_setup_required())


@router.post(
    "/setup",
    summary="Create first administrator",
    description="One-time setup. Creates an active administrator exempt from dues.",
    operation_id="completeSetup",
    status_code=201,
    responses={
        201: {"description": "Administrator created"},
        400: {"model": ErrorResponse, "description": "Invalid data or setup already completed"},
    },
)
async def complete_setup(request: SetupRequest, app: AppDep) -> MemberView:
    if request.password != request.password_confirm:
        raise ValidationError("Passwords do not match")
    return await app.complete_setup(
        CreateMemberRequest(
            email=request.email,
            username=request.username,
            full_name=request.full_name,
            password=request.password,
        )
    )
