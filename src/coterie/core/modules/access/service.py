from typing import NamedTuple
from uuid import UUID

import structlog
from pymongo.errors import PyMongoError

from coterie.core.core import Service
from coterie.core.modules.member.models import Member, MemberStatus
from coterie.core.modules.session.models import Session, SessionToken
from coterie.errors import AccessDeniedError, AuthenticationError

logger = structlog.get_logger(__name__)


class AuthContext(NamedTuple):
    member: Member
    session: Session


class AccessService(Service):
    """Authentication and authorization decisions shared by all request gates."""

    async def authenticate(self, raw_token: SessionToken | None) -> AuthContext:
        """Resolve a session token to a member in good standing.

        Raises AuthenticationError when there is no usable session or member, and
        AccessDeniedError when the member exists but is still pending.
        """
        if not raw_token:
            raise AuthenticationError

        try:
            session = await self.core.services.session.find_by_token(raw_token)
            member = None if session is None else await self.core.services.member.find_by_id(session.member_id)
        except PyMongoError:
            logger.exception("session_lookup_failed")
            raise AuthenticationError from None

        if session is None or member is None:
            raise AuthenticationError

        if member.has_good_standing:
            return AuthContext(member=member, session=session)
        if member.status == MemberStatus.PENDING:
            raise AccessDeniedError
        raise AuthenticationError

    async def ensure_admin(self, raw_token: SessionToken | None) -> AuthContext:
        """Authenticate and require the admin role."""
        context = await self.authenticate(raw_token)
        if not context.member.is_admin:
            raise AccessDeniedError
        return context

    async def check_csrf(self, session_id: UUID, token: str) -> None:
        if not await self.core.services.csrf.validate_token(session_id, token):
            logger.warning("csrf_rejected", session_id=session_id)
            raise AccessDeniedError

    async def is_setup_required(self) -> bool:
        """True until the first admin exists.

        A database error reports setup as not required, so a broken connection
        cannot trap the operator on the setup page.
        """
        try:
            return not await self.core.services.member.has_admin()
        except PyMongoError:
            logger.exception("admin_check_failed")
            return False
