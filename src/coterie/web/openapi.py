from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from coterie.core.modules.csrf.models import CSRF_HEADER
from coterie.web.deps import SESSION_COOKIE

# Reachable without a session
PUBLIC_ENDPOINTS = {
    ("GET", "/health"),
    ("GET", "/setup"),
    ("POST", "/setup"),
    ("POST", "/api/v1/auth/login"),
    ("POST", "/api/v1/auth/logout"),
    ("GET", "/login"),
    ("GET", "/events/welcome"),
}


def set_custom_openapi(app: FastAPI) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="Coterie API",
            version="0.1.0",
            summary="Membership management for clubs and hackerspaces",
            routes=app.routes,
        )

        components = openapi_schema.setdefault("components", {})
        components["securitySchemes"] = {
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": SESSION_COOKIE,
                "description": "Opaque session token set by login",
            },
            "CsrfHeader": {
                "type": "apiKey",
                "in": "header",
                "name": CSRF_HEADER,
                "description": "CSRF token, required on state-changing requests",
            },
        }
        openapi_schema["security"] = [{"SessionCookie": [], "CsrfHeader": []}]

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in PUBLIC_ENDPOINTS:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Unauthorized", "type": "unauthorized"},
                {"message": "Forbidden", "type": "forbidden"},
                {"message": "Member not found", "type": "not_found"},
                {"message": "Email already registered", "type": "conflict"},
            ]
        }
    }
