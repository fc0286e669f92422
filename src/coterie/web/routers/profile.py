from fastapi import APIRouter

from coterie.core.modules.member.models import MemberView
from coterie.web.deps import AUTHENTICATED, CurrentUserDep
from coterie.web.openapi import ErrorResponse

router = APIRouter(tags=["profile"], dependencies=AUTHENTICATED)


@router.get(
    "/profile",
    summary="Get current member profile",
    description="Get the profile of the currently authenticated member.",
    operation_id="getCurrentMemberProfile",
    responses={
        200: {"description": "Current member profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Membership not active"},
    },
)
async def get_profile(current_user: CurrentUserDep) -> MemberView:
    return MemberView.from_domain(current_user.member)
