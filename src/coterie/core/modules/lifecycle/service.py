from datetime import timedelta
from uuid import UUID

import structlog

from coterie.core.core import Service
from coterie.core.modules.credential.hasher import hash_password
from coterie.core.modules.integration.models import (
    LifecycleEvent,
    MemberActivated,
    MemberCreated,
    MemberDeleted,
    MemberExpired,
    MemberUpdated,
)
from coterie.core.modules.member.models import CreateMemberRequest, Member, MemberStatus, MemberUpdate
from coterie.core.modules.member.validators import validate_email, validate_password
from coterie.errors import ConflictError, NotFoundError, ValidationError
from coterie.utils import now

logger = structlog.get_logger(__name__)

# Statuses that only activate_member / expire_member may set
TRANSITION_ONLY_STATUSES = frozenset({MemberStatus.ACTIVE, MemberStatus.EXPIRED})


class LifecycleService(Service):
    """Owns member status transitions and announces them to integrations.

    Each operation stores its change first and then dispatches the event; a
    failing integration never undoes the stored change.
    """

    async def create_member(self, request: CreateMemberRequest) -> Member:
        members = self.core.services.member
        validate_email(request.email)
        validate_password(request.password)
        if await members.find_by_email(request.email) is not None:
            raise ConflictError("Email already exists")
        if await members.find_by_username(request.username) is not None:
            raise ConflictError("Username already exists")

        member = await members.insert(
            Member(
                email=request.email,
                username=request.username,
                full_name=request.full_name,
                password_hash=hash_password(request.password),
                membership_type=request.membership_type,
            )
        )
        logger.info("member_created", member_id=member.id, username=member.username)
        await self._emit(MemberCreated(member=member))
        return member

    async def activate_member(self, member_id: UUID) -> Member:
        """Make a member active. Activating an active member is a no-op."""
        member = await self._get(member_id)
        if member.status == MemberStatus.ACTIVE:
            return member

        updated = await self.core.services.member.update(member_id, MemberUpdate(status=MemberStatus.ACTIVE))
        logger.info("member_activated", member_id=member_id, previous_status=member.status)
        await self._emit(MemberActivated(member=updated))
        return updated

    async def expire_member(self, member_id: UUID) -> Member:
        member = await self._get(member_id)
        if member.bypass_dues:
            raise ValidationError("Member has dues bypass enabled")

        updated = await self.core.services.member.update(
            member_id, MemberUpdate(status=MemberStatus.EXPIRED, expires_at=now())
        )
        logger.info("member_expired", member_id=member_id, dues_paid_until=member.dues_paid_until)
        await self._emit(MemberExpired(member=updated))
        return updated

    async def check_expired_members(self) -> list[Member]:
        """Expire every active member whose dues have lapsed.

        A member that fails to expire is logged and skipped; the sweep always
        runs to the end.
        """
        expired: list[Member] = []
        for member in await self.core.services.member.list_active():
            if member.bypass_dues:
                continue
            if member.dues_paid_until is None or member.dues_paid_until >= now():
                continue
            try:
                expired.append(await self.expire_member(member.id))
            except Exception:
                logger.exception("member_expiration_failed", member_id=member.id)
        logger.info("dues_sweep_finished", expired_count=len(expired))
        return expired

    async def update_member(self, member_id: UUID, update: MemberUpdate) -> Member:
        """Apply an administrative update and announce it.

        ACTIVE and EXPIRED are reachable only through activate_member and
        expire_member.
        """
        if update.status in TRANSITION_ONLY_STATUSES:
            raise ValidationError(f"Status '{update.status}' can only be set by its dedicated action")

        old = await self._get(member_id)
        if not update.changes():
            return old

        new = await self.core.services.member.update(member_id, update)
        logger.info("member_updated", member_id=member_id, fields=sorted(update.changes()))
        await self._emit(MemberUpdated(old=old, new=new))
        return new

    async def suspend_member(self, member_id: UUID) -> Member:
        """Suspend a member and end all of their sessions."""
        member = await self.update_member(member_id, MemberUpdate(status=MemberStatus.SUSPENDED))
        await self.core.services.session.delete_by_member(member_id)
        return member

    async def extend_dues(self, member_id: UUID, days: int) -> Member:
        """Push the dues date forward, counting from today if it already lapsed."""
        if days <= 0:
            raise ValidationError("Days must be positive")
        member = await self._get(member_id)
        start = max(now(), member.dues_paid_until) if member.dues_paid_until else now()
        return await self.update_member(member_id, MemberUpdate(dues_paid_until=start + timedelta(days=days)))

    async def delete_member(self, member_id: UUID) -> None:
        member = await self._get(member_id)
        await self.core.services.member.delete(member_id)
        await self.core.services.session.delete_by_member(member_id)
        logger.info("member_deleted", member_id=member_id)
        await self._emit(MemberDeleted(member=member))

    async def _get(self, member_id: UUID) -> Member:
        member = await self.core.services.member.find_by_id(member_id)
        if member is None:
            raise NotFoundError("Member not found")
        return member

    async def _emit(self, event: LifecycleEvent) -> None:
        await self.core.integrations.handle_event(event)
