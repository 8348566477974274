"""Authentication request/response schemas and the normalized actor."""

from dataclasses import dataclass

from pydantic import BaseModel, EmailStr

from pressroom.models.user import UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, resolved once per request."""

    user_id: int
    role: UserRole
    email: str

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Token response schema."""

    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """User response schema."""

    id: int
    email: str
    full_name: str | None
    role: str
    status: str
