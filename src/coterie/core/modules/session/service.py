from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from coterie.core.core import Service
from coterie.core.modules.session.models import Session, SessionToken
from coterie.utils import generate_token, hash_token, now

logger = structlog.get_logger(__name__)


class SessionService(Service):
    """Issues, looks up and revokes login sessions.

    Lookups go by token hash, so a database read never exposes a usable token.
    A member may hold any number of concurrent sessions.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("sessions")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("token_hash", 1)], unique=True)
        await self._collection.create_index([("member_id", 1)])
        await self._collection.create_index([("expires_at", 1)])

    async def create(self, member_id: UUID, raw_token: SessionToken, expires_at: datetime) -> Session:
        session = Session(member_id=member_id, token_hash=hash_token(raw_token), expires_at=expires_at)
        await self._collection.insert_one(session.to_mongo())
        logger.info("session_created", session_id=session.id, member_id=member_id, expires_at=expires_at)
        return session

    async def start_session(self, member_id: UUID, duration_hours: int) -> tuple[Session, SessionToken]:
        """Generate a bearer token and open a session for it."""
        raw_token = SessionToken(generate_token())
        session = await self.create(member_id, raw_token, now() + timedelta(hours=duration_hours))
        return session, raw_token

    async def find_by_token(self, raw_token: SessionToken) -> Session | None:
        """Return the live session for a token and mark it as used.

        Unknown and expired tokens are both plain misses.
        """
        current = now()
        document = await self._collection.find_one_and_update(
            {"token_hash": hash_token(raw_token), "expires_at": {"$gt": current}},
            {"$set": {"last_used_at": current}},
            return_document=ReturnDocument.AFTER,
        )
        return Session.from_mongo(document)

    async def delete_by_token(self, raw_token: SessionToken) -> None:
        await self._collection.delete_one({"token_hash": hash_token(raw_token)})

    async def delete_by_member(self, member_id: UUID) -> int:
        result = await self._collection.delete_many({"member_id": member_id})
        if result.deleted_count:
            logger.info("member_sessions_revoked", member_id=member_id, count=result.deleted_count)
        return result.deleted_count

    async def cleanup_expired(self) -> int:
        result = await self._collection.delete_many({"expires_at": {"$lte": now()}})
        logger.debug("expired_sessions_removed", count=result.deleted_count)
        return result.deleted_count

    async def list_session_ids(self) -> list[UUID]:
        return list(await self._collection.distinct("_id"))
