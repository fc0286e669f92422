from urllib.parse import quote

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from coterie.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    LoginRedirect,
    NotFoundError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

LOGIN_PATH = "/login"


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    if isinstance(exc, AuthenticationError):
        status_code = 401
        error_type = "unauthorized"
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
        error_type = "forbidden"
    elif isinstance(exc, NotFoundError):
        status_code = 404
        error_type = "not_found"
    elif isinstance(exc, ConflictError):
        status_code = 409
        error_type = "conflict"
    elif isinstance(exc, ValidationError):
        status_code = 400
        error_type = "validation_error"
    else:
        status_code = 400
        error_type = "bad_request"

    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def login_redirect_handler(_: Request, exc: Exception) -> Response:
    """Send the browser to the login page, remembering where it was going."""
    return_to = exc.return_to if isinstance(exc, LoginRedirect) else "/"
    return RedirectResponse(f"{LOGIN_PATH}?redirect={quote(return_to, safe='')}", status_code=303)


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", error=str(exc))
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
