from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coterie.app import App
from coterie.config import Config
from coterie.errors import LoginRedirect, UserError
from coterie.web.error_handlers import general_exception_handler, login_redirect_handler, user_error_handler
from coterie.web.middleware import require_setup
from coterie.web.openapi import set_custom_openapi
from coterie.web.routers import (
    admin_router,
    auth_router,
    members_admin_router,
    members_router,
    portal_router,
    profile_router,
    public_router,
    setup_router,
)


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="Coterie API",
        lifespan=lifespan,
        openapi_tags=[],
    )

    # First-run gate, runs before any route dependency
    app.middleware("http")(require_setup)

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy"}

    # API v1 routes
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(profile_router, prefix="/api/v1")
    app.include_router(members_router, prefix="/api/v1")
    app.include_router(members_admin_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    # Browser and public routes
    app.include_router(setup_router)
    app.include_router(portal_router)
    app.include_router(public_router)

    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(LoginRedirect, login_redirect_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
