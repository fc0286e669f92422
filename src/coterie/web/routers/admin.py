from fastapi import APIRouter, Depends

from coterie.core.modules.maintenance.service import MaintenanceReport
from coterie.core.modules.member.models import MemberView
from coterie.web.deps import ADMIN, AppDep, require_admin
from coterie.web.openapi import ErrorResponse

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/expired-check",
    summary="Expire members with unpaid dues",
    description="Sweep active members and expire those whose dues date has passed. Dues-exempt members are skipped.",
    operation_id="checkExpiredMembers",
    dependencies=ADMIN,
    responses={
        200: {"description": "Members expired by this sweep"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def check_expired_members(app: AppDep) -> list[MemberView]:
    return await app.check_expired_members()


@router.post(
    "/maintenance",
    summary="Run maintenance",
    description="Remove expired sessions and orphaned CSRF tokens, then run the dues sweep.",
    operation_id="runMaintenance",
    dependencies=ADMIN,
    responses={
        200: {"description": "Counts per step, null when a step failed"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def run_maintenance(app: AppDep) -> MaintenanceReport:
    return await app.run_maintenance()


@router.get(
    "/integrations",
    summary="Integration health",
    description="Health of each enabled integration. A null value means healthy, otherwise the error message.",
    operation_id="getIntegrationHealth",
    dependencies=[Depends(require_admin)],
    responses={
        200: {"description": "Integration name to error message"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def get_integration_health(app: AppDep) -> dict[str, str | None]:
    return await app.integration_health()
