from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, NamedTuple
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from coterie.config import Config
from coterie.core.core import Core
from coterie.core.modules.access.service import AuthContext
from coterie.core.modules.credential.hasher import hash_password, needs_rehash, verify_dummy, verify_password
from coterie.core.modules.integration.dispatcher import IntegrationDispatcher
from coterie.core.modules.maintenance.service import MaintenanceReport
from coterie.core.modules.member.models import (
    CreateMemberRequest,
    Member,
    MemberRole,
    MembershipType,
    MemberUpdate,
    MemberView,
)
from coterie.core.modules.session.models import Session, SessionToken
from coterie.errors import AuthenticationError, ValidationError

logger = structlog.get_logger(__name__)


class LoginResult(NamedTuple):
    session: Session
    token: SessionToken
    csrf_token: str
    max_age: int  # seconds, for the session cookie


class App:
    """Facade for all application operations.

    Request gates resolve the caller before these methods run, so methods take
    an already authenticated member or session rather than a raw token.
    """

    def __init__(
        self,
        config: Config,
        database: AsyncDatabase[dict[str, Any]] | None = None,
        integrations: IntegrationDispatcher | None = None,
    ) -> None:
        self._core = Core(config, database=database, integrations=integrations)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    # Request gates

    async def is_setup_required(self) -> bool:
        return await self._core.services.access.is_setup_required()

    async def authenticate(self, raw_token: SessionToken | None) -> AuthContext:
        return await self._core.services.access.authenticate(raw_token)

    async def authenticate_admin(self, raw_token: SessionToken | None) -> AuthContext:
        return await self._core.services.access.ensure_admin(raw_token)

    async def check_csrf(self, session_id: UUID, token: str) -> None:
        await self._core.services.access.check_csrf(session_id, token)

    # Authentication

    async def login(self, identifier: str, password: str, remember_me: bool = False) -> LoginResult:
        """Verify credentials and open a session.

        Unknown identifiers and wrong passwords fail identically.
        """
        services = self._core.services
        member = await services.member.find_by_identifier(identifier)
        if member is None:
            verify_dummy(password)
            raise AuthenticationError
        if not verify_password(password, member.password_hash):
            logger.info("login_failed", member_id=member.id)
            raise AuthenticationError

        if needs_rehash(member.password_hash):
            await services.member.set_password_hash(member.id, hash_password(password))

        hours = self.config.remember_me_duration_hours if remember_me else self.config.session_duration_hours
        session, token = await services.session.start_session(member.id, hours)
        csrf_token = await services.csrf.generate_token(session.id)
        logger.info("login_succeeded", member_id=member.id, session_id=session.id)
        return LoginResult(session=session, token=token, csrf_token=csrf_token, max_age=hours * 60 * 60)

    async def logout(self, raw_token: SessionToken | None) -> None:
        """End the session behind a token. Missing or unknown sessions are fine."""
        if not raw_token:
            return
        services = self._core.services
        try:
            session = await services.session.find_by_token(raw_token)
            if session is not None:
                await services.csrf.delete_token(session.id)
            await services.session.delete_by_token(raw_token)
        except PyMongoError:
            logger.exception("logout_failed")

    async def issue_csrf_token(self, session_id: UUID) -> str:
        return await self._core.services.csrf.generate_token(session_id)

    async def complete_setup(self, request: CreateMemberRequest) -> MemberView:
        """Create the first administrator. Refused once any admin exists."""
        lifecycle = self._core.services.lifecycle
        if await self._core.services.member.has_admin():
            raise ValidationError("Setup has already been completed")

        member = await lifecycle.create_member(request.model_copy(update={"membership_type": MembershipType.LIFETIME}))
        await lifecycle.update_member(member.id, MemberUpdate(role=MemberRole.ADMIN, bypass_dues=True))
        admin = await lifecycle.activate_member(member.id)
        logger.info("setup_completed", member_id=admin.id)
        return MemberView.from_domain(admin)

    # Members

    async def list_members(self, limit: int = 50, offset: int = 0) -> list[MemberView]:
        members = await self._core.services.member.list_members(limit, offset)
        return [MemberView.from_domain(member) for member in members]

    async def get_member(self, member_id: UUID) -> MemberView:
        return MemberView.from_domain(await self._core.services.member.get_member(member_id))

    async def create_member(self, request: CreateMemberRequest) -> MemberView:
        return MemberView.from_domain(await self._core.services.lifecycle.create_member(request))

    async def update_member(self, member_id: UUID, update: MemberUpdate) -> MemberView:
        return MemberView.from_domain(await self._core.services.lifecycle.update_member(member_id, update))

    async def update_own_profile(self, member: Member, full_name: str) -> MemberView:
        """Members may change their own display name, nothing else."""
        return await self.update_member(member.id, MemberUpdate(full_name=full_name))

    async def activate_member(self, member_id: UUID) -> MemberView:
        return MemberView.from_domain(await self._core.services.lifecycle.activate_member(member_id))

    async def expire_member(self, member_id: UUID) -> MemberView:
        return MemberView.from_domain(await self._core.services.lifecycle.expire_member(member_id))

    async def suspend_member(self, admin: Member, member_id: UUID) -> MemberView:
        if admin.id == member_id:
            raise ValidationError("Cannot suspend yourself")
        return MemberView.from_domain(await self._core.services.lifecycle.suspend_member(member_id))

    async def extend_dues(self, member_id: UUID, days: int) -> MemberView:
        return MemberView.from_domain(await self._core.services.lifecycle.extend_dues(member_id, days))

    async def delete_member(self, admin: Member, member_id: UUID) -> None:
        if admin.id == member_id:
            raise ValidationError("Cannot delete yourself")
        await self._core.services.lifecycle.delete_member(member_id)

    # Maintenance

    async def check_expired_members(self) -> list[MemberView]:
        expired = await self._core.services.lifecycle.check_expired_members()
        return [MemberView.from_domain(member) for member in expired]

    async def run_maintenance(self) -> MaintenanceReport:
        return await self._core.services.maintenance.run_once()

    async def integration_health(self) -> dict[str, str | None]:
        """Map of integration name to error message, None when healthy."""
        results = await self._core.integrations.health_check_all()
        return {name: None if error is None else str(error) for name, error in results}
