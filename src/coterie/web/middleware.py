from collections.abc import Awaitable, Callable
from typing import cast

from fastapi import Request, Response
from fastapi.responses import RedirectResponse

from coterie.app import App

SETUP_PATH = "/setup"

# Reachable before the first admin exists
SETUP_EXEMPT_PREFIXES = (
    SETUP_PATH,
    "/login",
    "/auth/login",
    "/api/v1/auth/login",
    "/static",
    "/assets",
    "/favicon",
    "/health",
)


async def require_setup(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Send every request to the setup flow until an administrator exists."""
    if request.url.path.startswith(SETUP_EXEMPT_PREFIXES):
        return await call_next(request)

    app = cast(App, request.app.state.app)
    if await app.is_setup_required():
        return RedirectResponse(SETUP_PATH, status_code=303)
    return await call_next(request)
