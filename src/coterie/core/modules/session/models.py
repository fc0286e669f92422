"""Session management models."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import BaseModel, Field

from coterie.core.db import MongoModel
from coterie.utils import now

SessionToken = NewType("SessionToken", str)


class Session(MongoModel):
    """Server-side login session.

    Only the SHA-256 of the bearer token is stored; the raw token lives in the
    client cookie. Indexed on token_hash - unique, member_id, expires_at.
    """

    member_id: UUID
    token_hash: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=now)
    last_used_at: datetime = Field(default_factory=now)


class SessionInfo(BaseModel):
    """Session reference attached to an authenticated request."""

    session_id: UUID
