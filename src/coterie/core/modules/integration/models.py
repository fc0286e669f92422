"""Member lifecycle events delivered to integrations."""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from coterie.core.modules.member.models import Member


class LifecycleEventType(StrEnum):
    MEMBER_CREATED = "member_created"
    MEMBER_ACTIVATED = "member_activated"
    MEMBER_EXPIRED = "member_expired"
    MEMBER_UPDATED = "member_updated"
    MEMBER_DELETED = "member_deleted"


class MemberCreated(BaseModel):
    type: Literal[LifecycleEventType.MEMBER_CREATED] = LifecycleEventType.MEMBER_CREATED
    member: Member


class MemberActivated(BaseModel):
    type: Literal[LifecycleEventType.MEMBER_ACTIVATED] = LifecycleEventType.MEMBER_ACTIVATED
    member: Member


class MemberExpired(BaseModel):
    type: Literal[LifecycleEventType.MEMBER_EXPIRED] = LifecycleEventType.MEMBER_EXPIRED
    member: Member


class MemberUpdated(BaseModel):
    """Snapshot before and after an update."""

    type: Literal[LifecycleEventType.MEMBER_UPDATED] = LifecycleEventType.MEMBER_UPDATED
    old: Member
    new: Member

    @property
    def member(self) -> Member:
        return self.new

    @property
    def status_changed(self) -> bool:
        return self.old.status != self.new.status


class MemberDeleted(BaseModel):
    type: Literal[LifecycleEventType.MEMBER_DELETED] = LifecycleEventType.MEMBER_DELETED
    member: Member


LifecycleEvent = Annotated[
    MemberCreated | MemberActivated | MemberExpired | MemberUpdated | MemberDeleted,
    Field(discriminator="type"),
]
