"""Role request model for the role escalation workflow."""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from pressroom.models.user import UserRole


class RoleRequestStatus(str, Enum):
    """Role request lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


REQUESTABLE_ROLES = frozenset(
    {UserRole.RECRUITER, UserRole.INSTRUCTOR, UserRole.EDITOR, UserRole.CHIEF_EDITOR}
)


class RoleRequest(SQLModel, table=True):
    """A user's petition to be granted a higher-privilege role.

    At most one pending request may exist per (user_id, requested_role); this
    is checked at submit time rather than by a unique constraint.
    """

    __tablename__ = "role_requests"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    requested_role: UserRole
    reason: str | None = Field(default=None)
    status: RoleRequestStatus = Field(default=RoleRequestStatus.PENDING, index=True)
    reviewed_by: int | None = Field(default=None, foreign_key="users.id")
    reviewed_at: datetime | None = Field(default=None)
    admin_notes: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    version: int = Field(default=1)


class RoleRequestCreate(SQLModel):
    """Schema for submitting a role request.

    ``requested_role`` is a plain string so an unknown role reaches the
    workflow and fails as InvalidRole rather than as a schema error.
    """

    requested_role: str
    reason: str | None = None


class RoleRequestRead(SQLModel):
    """Schema for reading a role request."""

    id: int
    user_id: int
    requested_role: UserRole
    reason: str | None
    status: RoleRequestStatus
    reviewed_by: int | None
    reviewed_at: datetime | None
    admin_notes: str | None
    created_at: datetime
    updated_at: datetime


class RoleRequestDecision(SQLModel):
    """Schema for approving or rejecting a request."""

    status: RoleRequestStatus
    admin_notes: str | None = None


class RoleRevoke(SQLModel):
    """Schema for revoking a role from a user."""

    role_to_revoke: UserRole
