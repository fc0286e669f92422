from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from coterie.utils import now

CSRF_HEADER = "X-CSRF-Token"


class CsrfToken(BaseModel):
    """CSRF secret bound to one session.

    Unique on session_id: issuing a new token replaces the previous one. There is
    no separate expiry, the token lives as long as its session.
    """

    session_id: UUID
    token_hash: str
    created_at: datetime = Field(default_factory=now)
