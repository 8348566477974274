"""Call-for-submissions model."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class RequirementBase(SQLModel):
    """Base requirement fields."""

    title: str
    topic: str | None = Field(default=None)
    subject_area: str | None = Field(default=None)
    deadline: datetime | None = Field(default=None)
    is_active: bool = Field(default=True)


class Requirement(RequirementBase, table=True):
    """A call for submissions that manuscripts are submitted against."""

    __tablename__ = "requirements"

    id: int | None = Field(default=None, primary_key=True)
    submissions_count: int = Field(default=0)
    created_by: int | None = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)


class RequirementCreate(RequirementBase):
    """Schema for creating a requirement."""

    pass


class RequirementRead(RequirementBase):
    """Schema for reading a requirement."""

    id: int
    submissions_count: int
    created_at: datetime


class RequirementUpdate(SQLModel):
    """Schema for editing or closing a requirement."""

    title: str | None = None
    topic: str | None = None
    subject_area: str | None = None
    deadline: datetime | None = None
    is_active: bool | None = None
