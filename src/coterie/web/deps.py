"""Request gates.

Each gate is a FastAPI dependency. On success the auth gates store
`CurrentUser` and `SessionInfo` on `request.state`; `require_csrf` reads the
session from there, so it must be listed after an auth gate.
"""

from typing import Annotated, cast

import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyCookie, APIKeyHeader
from pydantic import BaseModel

from coterie.app import App
from coterie.core.modules.access.service import AuthContext
from coterie.core.modules.csrf.models import CSRF_HEADER
from coterie.core.modules.member.models import Member
from coterie.core.modules.session.models import SessionInfo, SessionToken
from coterie.errors import AccessDeniedError, LoginRedirect, UserError

logger = structlog.get_logger(__name__)

SESSION_COOKIE = "session"
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})

# Security schemes
session_cookie_scheme = APIKeyCookie(name=SESSION_COOKIE, auto_error=False)
csrf_header_scheme = APIKeyHeader(name=CSRF_HEADER, auto_error=False)


class CurrentUser(BaseModel):
    """Authenticated member attached to the request."""

    member: Member


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


AppDep = Annotated[App, Depends(get_app)]
SessionCookieDep = Annotated[str | None, Depends(session_cookie_scheme)]


def _attach(request: Request, context: AuthContext) -> None:
    request.state.current_user = CurrentUser(member=context.member)
    request.state.session_info = SessionInfo(session_id=context.session.id)


async def require_auth(request: Request, app: AppDep, token: SessionCookieDep) -> None:
    """401 without a live session, 403 for pending members."""
    _attach(request, await app.authenticate(SessionToken(token) if token else None))


async def require_admin(request: Request, app: AppDep, token: SessionCookieDep) -> None:
    """401 without a live session, 403 unless the member is an admin."""
    _attach(request, await app.authenticate_admin(SessionToken(token) if token else None))


async def require_auth_redirect(request: Request, app: AppDep, token: SessionCookieDep) -> None:
    """Same decisions as require_auth, but failures send the browser to the login page."""
    try:
        context = await app.authenticate(SessionToken(token) if token else None)
    except UserError:
        return_to = request.url.path
        if request.url.query:
            return_to = f"{return_to}?{request.url.query}"
        raise LoginRedirect(return_to) from None
    _attach(request, context)


async def optional_auth(request: Request, app: AppDep, token: SessionCookieDep) -> None:
    """Attach the member when the session checks out, otherwise carry on anonymously."""
    if not token:
        return
    try:
        context = await app.authenticate(SessionToken(token))
    except UserError:
        return
    _attach(request, context)


async def require_csrf(
    request: Request,
    app: AppDep,
    csrf_token: Annotated[str | None, Depends(csrf_header_scheme)] = None,
) -> None:
    """Validate the CSRF header on state-changing requests.

    Without the header the request passes on to the handler, which checks the
    form field instead.
    """
    if request.method in SAFE_METHODS:
        return
    session_info: SessionInfo | None = getattr(request.state, "session_info", None)
    if session_info is None:
        logger.error("csrf_check_without_session", path=request.url.path)
        raise AccessDeniedError
    if csrf_token is None:
        return
    await app.check_csrf(session_info.session_id, csrf_token)
    request.state.csrf_validated = True


async def get_current_user(request: Request) -> CurrentUser:
    return cast(CurrentUser, request.state.current_user)


async def get_optional_user(request: Request) -> CurrentUser | None:
    return cast(CurrentUser | None, getattr(request.state, "current_user", None))


async def get_session_info(request: Request) -> SessionInfo:
    return cast(SessionInfo, request.state.session_info)


# Type aliases for dependencies
CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
OptionalUserDep = Annotated[CurrentUser | None, Depends(get_optional_user)]
SessionInfoDep = Annotated[SessionInfo, Depends(get_session_info)]

# Gate chains, in execution order
AUTHENTICATED = [Depends(require_auth), Depends(require_csrf)]
ADMIN = [Depends(require_admin), Depends(require_csrf)]
BROWSER = [Depends(require_auth_redirect), Depends(require_csrf)]


async def ensure_form_csrf(request: Request, app: App, form_token: str | None) -> None:
    """Handler-level CSRF check for requests that carry the token in the body.

    Skipped only when `require_csrf` already validated a header token.
    """
    if request.method in SAFE_METHODS or getattr(request.state, "csrf_validated", False):
        return
    session_info = await get_session_info(request)
    if not form_token:
        logger.warning("csrf_missing", session_id=session_info.session_id, path=request.url.path)
        raise AccessDeniedError
    await app.check_csrf(session_info.session_id, form_token)
