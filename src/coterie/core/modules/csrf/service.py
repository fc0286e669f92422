import hmac
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from coterie.core.core import Service
from coterie.core.modules.csrf.models import CsrfToken
from coterie.utils import generate_token, hash_token

logger = structlog.get_logger(__name__)


class CsrfService(Service):
    """Session-bound CSRF tokens, one live token per session."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("csrf_tokens")

    async def on_start(self) -> None:
        await self._collection.create_index([("session_id", 1)], unique=True)

    async def generate_token(self, session_id: UUID) -> str:
        """Issue a token for the session, invalidating any earlier one."""
        token = generate_token()
        record = CsrfToken(session_id=session_id, token_hash=hash_token(token))
        await self._collection.update_one({"session_id": session_id}, {"$set": record.model_dump()}, upsert=True)
        return token

    async def validate_token(self, session_id: UUID, token: str) -> bool:
        document = await self._collection.find_one({"session_id": session_id})
        if document is None:
            return False
        return hmac.compare_digest(document["token_hash"], hash_token(token))

    async def delete_token(self, session_id: UUID) -> None:
        await self._collection.delete_one({"session_id": session_id})

    async def cleanup_orphaned(self) -> int:
        """Remove tokens whose session no longer exists."""
        live_ids = await self.core.services.session.list_session_ids()
        result = await self._collection.delete_many({"session_id": {"$nin": live_ids}})
        logger.debug("orphaned_csrf_tokens_removed", count=result.deleted_count)
        return result.deleted_count
