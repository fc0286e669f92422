from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from coterie.config import Config
from coterie.core.modules.integration.dispatcher import IntegrationDispatcher
from coterie.core.modules.integration.registry import build_dispatcher

if TYPE_CHECKING:
    from coterie.core.modules.access.service import AccessService
    from coterie.core.modules.csrf.service import CsrfService
    from coterie.core.modules.lifecycle.service import LifecycleService
    from coterie.core.modules.maintenance.service import MaintenanceService
    from coterie.core.modules.member.service import MemberService
    from coterie.core.modules.session.service import SessionService

logger = structlog.get_logger(__name__)


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    member: MemberService
    session: SessionService
    csrf: CsrfService
    access: AccessService
    lifecycle: LifecycleService
    maintenance: MaintenanceService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []
        self._database = database

        # (attribute_name, module_path, class_name), started in this order
        # and stopped in reverse; maintenance must come last
        service_configs = [
            ("member", "coterie.core.modules.member.service", "MemberService"),
            ("session", "coterie.core.modules.session.service", "SessionService"),
            ("csrf", "coterie.core.modules.csrf.service", "CsrfService"),
            ("access", "coterie.core.modules.access.service", "AccessService"),
            ("lifecycle", "coterie.core.modules.lifecycle.service", "LifecycleService"),
            ("maintenance", "coterie.core.modules.maintenance.service", "MaintenanceService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, database, integrations and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]] | None
    database: AsyncDatabase[dict[str, Any]]
    integrations: IntegrationDispatcher
    services: Services

    def __init__(
        self,
        config: Config,
        database: AsyncDatabase[dict[str, Any]] | None = None,
        integrations: IntegrationDispatcher | None = None,
    ) -> None:
        """Initialize core with config, MongoDB, integrations and services.

        `database` and `integrations` replace the ones built from config.
        """
        self.config = config
        if database is None:
            self.mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard", tz_aware=True)
            self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        else:
            self.mongo_client = None
            self.database = database
        self.integrations = integrations if integrations is not None else build_dispatcher(config)
        self.services = Services(self.database)
        self.services.set_core(self)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        await self.services.start_all()
        for name, error in await self.integrations.health_check_all():
            if error is None:
                logger.info("integration_healthy", integration=name)
            else:
                logger.warning("integration_unhealthy", integration=name, error=str(error))

    async def on_stop(self) -> None:
        """Stop services, close integrations and the MongoDB connection."""
        await self.services.stop_all()
        await self.integrations.aclose()
        if self.mongo_client is not None:
            await self.mongo_client.aclose()
