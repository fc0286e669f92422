from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from coterie.config import Config
from coterie.core.modules.session.models import SessionToken
from coterie.web.deps import AUTHENTICATED, SESSION_COOKIE, AppDep, SessionCookieDep, SessionInfoDep
from coterie.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    """Authentication request."""

    identifier: str = Field(..., description="Username or email address")
    password: str = Field(..., description="Password for authentication")
    remember_me: bool = Field(False, description="Keep the session for 30 days instead of one")


class CsrfTokenResponse(BaseModel):
    """CSRF token for state-changing requests."""

    csrf_token: str = Field(..., description="Send in the X-CSRF-Token header or as the csrf_token form field")


def set_session_cookie(response: Response, config: Config, token: str, max_age: int) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=config.secure_cookies,
    )


def clear_session_cookie(response: Response, config: Config) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value="",
        max_age=0,
        path="/",
        httponly=True,
        samesite="lax",
        secure=config.secure_cookies,
    )


@router.post(
    "/auth/login",
    summary="Log in",
    description="Authenticate with username or email and password. Sets the session cookie.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, response: Response) -> CsrfTokenResponse:
    result = await app.login(login_data.identifier, login_data.password, login_data.remember_me)
    set_session_cookie(response, app.config, result.token, result.max_age)
    return CsrfTokenResponse(csrf_token=result.csrf_token)


@router.post(
    "/auth/logout",
    summary="Log out",
    description="End the current session, if any, and clear the session cookie.",
    operation_id="logout",
    status_code=204,
    responses={204: {"description": "Logged out"}},
)
async def logout(app: AppDep, token: SessionCookieDep, response: Response) -> None:
    await app.logout(SessionToken(token) if token else None)
    clear_session_cookie(response, app.config)


@router.get(
    "/auth/csrf-token",
    summary="Issue CSRF token",
    description="Issue a CSRF token for the current session. Any previously issued token stops working.",
    operation_id="getCsrfToken",
    dependencies=AUTHENTICATED,
    responses={
        200: {"description": "Fresh CSRF token"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Membership not active"},
    },
)
async def get_csrf_token(app: AppDep, session_info: SessionInfoDep) -> CsrfTokenResponse:
    return CsrfTokenResponse(csrf_token=await app.issue_csrf_token(session_info.session_id))
