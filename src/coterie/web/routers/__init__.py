from coterie.web.routers.admin import router as admin_router
from coterie.web.routers.auth import router as auth_router
from coterie.web.routers.members import admin_router as members_admin_router
from coterie.web.routers.members import router as members_router
from coterie.web.routers.portal import router as portal_router
from coterie.web.routers.profile import router as profile_router
from coterie.web.routers.public import router as public_router
from coterie.web.routers.setup import router as setup_router

__all__ = [
    "admin_router",
    "auth_router",
    "members_admin_router",
    "members_router",
    "portal_router",
    "profile_router",
    "public_router",
    "setup_router",
]
