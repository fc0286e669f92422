from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from coterie.web.deps import OptionalUserDep, optional_auth

router = APIRouter(tags=["public"], dependencies=[Depends(optional_auth)])

LOGIN_ENDPOINT = "/api/v1/auth/login"
DEFAULT_REDIRECT = "/portal/dashboard"


class Welcome(BaseModel):
    message: str
    authenticated: bool


class LoginPage(BaseModel):
    """Where a browser sent here by a protected page should log in and return to."""

    login_endpoint: str = Field(..., description="POST identifier and password here")
    redirect: str = Field(..., description="Local path to open after logging in")
    authenticated: bool = Field(..., description="The current session already works")


def safe_redirect(target: str | None) -> str:
    """Keep redirects on this site: only absolute local paths are allowed."""
    if not target or not target.startswith("/") or target.startswith("//") or "\\" in target:
        return DEFAULT_REDIRECT
    return target


@router.get("/login", summary="Login page", operation_id="getLoginPage")
async def get_login_page(
    current_user: OptionalUserDep,
    redirect: str | None = Query(None, description="Path that required a login"),
) -> LoginPage:
    return LoginPage(login_endpoint=LOGIN_ENDPOINT, redirect=safe_redirect(redirect), authenticated=current_user is not None)


@router.get("/events/welcome", summary="Welcome message", operation_id="getWelcome")
async def get_welcome(current_user: OptionalUserDep) -> Welcome:
    if current_user is None:
        return Welcome(message="Welcome, guest!", authenticated=False)
    return Welcome(message=f"Welcome back, {current_user.member.full_name}!", authenticated=True)
