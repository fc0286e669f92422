from datetime import datetime
from enum import StrEnum
from typing import Any, Self
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from coterie.core.db import MongoModel
from coterie.utils import now


class MemberStatus(StrEnum):
    """Membership status.

    Only ACTIVE and HONORARY members are in good standing and may use the portal.
    PENDING members can log in but are refused until an admin activates them.
    """

    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    SUSPENDED = "suspended"
    HONORARY = "honorary"


GOOD_STANDING_STATUSES = frozenset({MemberStatus.ACTIVE, MemberStatus.HONORARY})


class MembershipType(StrEnum):
    REGULAR = "regular"
    STUDENT = "student"
    CORPORATE = "corporate"
    LIFETIME = "lifetime"


class MemberRole(StrEnum):
    MEMBER = "member"
    ADMIN = "admin"


class Member(MongoModel):
    """Club member with credentials.

    Indexed on email - unique, username - unique, status, role.
    """

    email: str
    username: str
    full_name: str
    password_hash: str  # argon2id
    status: MemberStatus = MemberStatus.PENDING
    membership_type: MembershipType = MembershipType.REGULAR
    role: MemberRole = MemberRole.MEMBER
    joined_at: datetime = Field(default_factory=now)
    expires_at: datetime | None = None
    dues_paid_until: datetime | None = None
    bypass_dues: bool = False
    notes: str | None = None
    discord_id: str | None = None
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN

    @property
    def has_good_standing(self) -> bool:
        return self.status in GOOD_STANDING_STATUSES


class MemberView(BaseModel):
    """Member information (API representation)."""

    id: UUID = Field(..., description="Member ID")
    email: str = Field(..., description="Email address")
    username: str = Field(..., description="Username")
    full_name: str = Field(..., description="Full name")
    status: MemberStatus = Field(..., description="Membership status")
    membership_type: MembershipType = Field(..., description="Membership type")
    role: MemberRole = Field(..., description="Member role")
    joined_at: datetime = Field(..., description="When the member joined")
    expires_at: datetime | None = Field(None, description="When the membership expired")
    dues_paid_until: datetime | None = Field(None, description="Dues are paid up to this moment")
    bypass_dues: bool = Field(..., description="Member is exempt from dues expiration")

    @classmethod
    def from_domain(cls, member: Member) -> "MemberView":
        """Create view model from domain model."""
        return cls.model_validate(member.model_dump(exclude={"password_hash", "notes", "discord_id"}))


class CreateMemberRequest(BaseModel):
    """Data needed to register a new member."""

    email: str = Field(..., description="Email address")
    username: str = Field(..., min_length=1, description="Username")
    full_name: str = Field(..., min_length=1, description="Full name")
    password: str = Field(..., min_length=1, description="Initial password")
    membership_type: MembershipType = Field(MembershipType.REGULAR, description="Membership type")


# Member fields that must always hold a value
NON_NULLABLE_UPDATE_FIELDS = ("full_name", "status", "membership_type", "role", "bypass_dues")


class MemberUpdate(BaseModel):
    """Partial member update, only explicitly set fields are written."""

    full_name: str | None = None
    status: MemberStatus | None = None
    membership_type: MembershipType | None = None
    role: MemberRole | None = None
    expires_at: datetime | None = None
    dues_paid_until: datetime | None = None
    bypass_dues: bool | None = None
    notes: str | None = None
    discord_id: str | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> Self:
        """Only the optional dates, notes and discord_id may be cleared with null."""
        cleared = [name for name in NON_NULLABLE_UPDATE_FIELDS if name in self.model_fields_set and getattr(self, name) is None]
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
