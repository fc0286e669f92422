import asyncio
import contextlib

import structlog
from pydantic import BaseModel, Field

from coterie.core.core import Service

logger = structlog.get_logger(__name__)


class MaintenanceReport(BaseModel):
    """Outcome of one maintenance pass. A None count means that step failed."""

    expired_sessions: int | None = Field(None, description="Expired sessions removed")
    orphaned_csrf_tokens: int | None = Field(None, description="CSRF tokens without a session removed")
    expired_members: int | None = Field(None, description="Members expired by the dues sweep")


class MaintenanceService(Service):
    """Periodic session cleanup and dues sweep."""

    _task: asyncio.Task[None] | None = None

    async def on_start(self) -> None:
        interval = self.core.config.maintenance_interval_minutes
        if interval > 0:
            self._task = asyncio.create_task(self._loop(interval * 60))
            logger.debug("maintenance_scheduled", interval_minutes=interval)

    async def on_stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def run_once(self) -> MaintenanceReport:
        """Run every step, each isolated from the others' failures."""
        services = self.core.services
        report = MaintenanceReport()
        try:
            report.expired_sessions = await services.session.cleanup_expired()
        except Exception:
            logger.exception("session_cleanup_failed")
        try:
            report.orphaned_csrf_tokens = await services.csrf.cleanup_orphaned()
        except Exception:
            logger.exception("csrf_cleanup_failed")
        try:
            report.expired_members = len(await services.lifecycle.check_expired_members())
        except Exception:
            logger.exception("dues_sweep_failed")
        logger.info("maintenance_finished", **report.model_dump())
        return report

    async def _loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            await self.run_once()
