"""Browser-facing pages. Failed authentication redirects to the login page instead of returning 401."""

from typing import Annotated

from fastapi import APIRouter, Form, Request
from pydantic import BaseModel, Field

from coterie.core.modules.member.models import MemberView
from coterie.web.deps import BROWSER, AppDep, CurrentUserDep, SessionInfoDep, ensure_form_csrf

router = APIRouter(prefix="/portal", tags=["portal"], dependencies=BROWSER)


class Dashboard(BaseModel):
    member: MemberView
    csrf_token: str = Field(..., description="Token for forms submitted from this page")


class ProfileForm(BaseModel):
    """Profile form fields, posted as application/x-www-form-urlencoded."""

    full_name: str = Field(..., min_length=1, description="New full name")
    csrf_token: str | None = Field(None, description="Required when no X-CSRF-Token header is sent")


@router.get("/dashboard", summary="Member dashboard", operation_id="getDashboard")
async def get_dashboard(app: AppDep, current_user: CurrentUserDep, session_info: SessionInfoDep) -> Dashboard:
    csrf_token = await app.issue_csrf_token(session_info.session_id)
    return Dashboard(member=MemberView.from_domain(current_user.member), csrf_token=csrf_token)


@router.post("/profile", summary="Update own profile", operation_id="updateOwnProfile")
async def update_profile(
    form: Annotated[ProfileForm, Form()], request: Request, app: AppDep, current_user: CurrentUserDep
) -> MemberView:
    await ensure_form_csrf(request, app, form.csrf_token)
    return await app.update_own_profile(current_user.member, form.full_name)
