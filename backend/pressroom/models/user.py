"""User model for authentication and authorization."""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel


class UserRole(str, Enum):
    """User roles. The role is the only authorization signal the workflows read."""

    USER = "user"
    EDITOR = "editor"
    CHIEF_EDITOR = "chiefeditor"
    ADMIN = "admin"
    MODERATOR = "moderator"
    PREMIUM = "premium"
    INSTRUCTOR = "instructor"
    RECRUITER = "recruiter"


class UserStatus(str, Enum):
    """Account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING = "pending"


class UserBase(SQLModel):
    """Base user fields."""

    email: str = Field(unique=True, index=True)
    full_name: str | None = Field(default=None)
    role: UserRole = Field(default=UserRole.USER, index=True)
    status: UserStatus = Field(default=UserStatus.ACTIVE)


class User(UserBase, table=True):
    """User database model."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: datetime | None = Field(default=None)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class UserCreate(SQLModel):
    """Schema for self-registration. New accounts always start as plain users."""

    email: str
    password: str
    full_name: str | None = None


class UserRead(UserBase):
    """Schema for reading a user."""

    id: int
    created_at: datetime
    last_login: datetime | None


class UserRoleUpdate(SQLModel):
    """Schema for an admin editing a user's role directly."""

    role: UserRole


class UserStatusUpdate(SQLModel):
    """Schema for an admin changing account status."""

    status: UserStatus
