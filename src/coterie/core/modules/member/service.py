from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from coterie.core.core import Service
from coterie.core.modules.member.models import Member, MemberRole, MemberStatus, MemberUpdate
from coterie.errors import ConflictError, NotFoundError
from coterie.utils import now

logger = structlog.get_logger(__name__)


class MemberService(Service):
    """Member storage. Status transitions belong to LifecycleService, not here."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("members")

    async def on_start(self) -> None:
        await self._collection.create_index([("email", 1)], unique=True)
        await self._collection.create_index([("username", 1)], unique=True)
        await self._collection.create_index([("status", 1)])
        await self._collection.create_index([("role", 1)])

    async def find_by_id(self, member_id: UUID) -> Member | None:
        return Member.from_mongo(await self._collection.find_one({"_id": member_id}))

    async def find_by_email(self, email: str) -> Member | None:
        return Member.from_mongo(await self._collection.find_one({"email": email}))

    async def find_by_username(self, username: str) -> Member | None:
        return Member.from_mongo(await self._collection.find_one({"username": username}))

    async def find_by_identifier(self, identifier: str) -> Member | None:
        """Resolve a login identifier, trying username first, then email."""
        member = await self.find_by_username(identifier)
        if member is None:
            member = await self.find_by_email(identifier)
        return member

    async def get_member(self, member_id: UUID) -> Member:
        member = await self.find_by_id(member_id)
        if member is None:
            raise NotFoundError(f"Member '{member_id}' not found")
        return member

    async def list_members(self, limit: int = 50, offset: int = 0) -> list[Member]:
        return await Member.list_cursor(self._collection.find({}).skip(offset).limit(limit))

    async def list_active(self) -> list[Member]:
        return await Member.list_cursor(self._collection.find({"status": MemberStatus.ACTIVE}))

    async def has_admin(self) -> bool:
        return await self._collection.find_one({"role": MemberRole.ADMIN}) is not None

    async def insert(self, member: Member) -> Member:
        """Store a new member. A unique index hit, e.g. a concurrent registration, is a conflict."""
        try:
            await self._collection.insert_one(member.to_mongo())
        except DuplicateKeyError:
            raise ConflictError("Email or username already exists") from None
        logger.debug("member_inserted", member_id=member.id)
        return member

    async def update(self, member_id: UUID, update: MemberUpdate) -> Member:
        """Apply a partial update and return the stored result."""
        changes = update.changes()
        changes["updated_at"] = now()
        document = await self._collection.find_one_and_update(
            {"_id": member_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
        )
        member = Member.from_mongo(document)
        if member is None:
            raise NotFoundError(f"Member '{member_id}' not found")
        return member

    async def set_password_hash(self, member_id: UUID, password_hash: str) -> None:
        await self._collection.update_one({"_id": member_id}, {"$set": {"password_hash": password_hash, "updated_at": now()}})

    async def delete(self, member_id: UUID) -> None:
        result = await self._collection.delete_one({"_id": member_id})
        if result.deleted_count == 0:
            raise NotFoundError(f"Member '{member_id}' not found")
