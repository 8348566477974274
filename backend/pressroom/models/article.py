"""Newsroom article model with its approval pipeline."""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel


class ArticleStatus(str, Enum):
    """Publication status."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ApprovalStatus(str, Enum):
    """Editorial approval status, layered on top of ArticleStatus."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_MODIFICATION = "needsModification"


DEFAULT_REJECTION_REASON = "Article did not meet publication standards"


class ArticleBase(SQLModel):
    """Base article fields."""

    title: str
    excerpt: str
    content: str
    category: str = Field(default="Urban Planning")


class Article(ArticleBase, table=True):
    """Article database model.

    ``status``, ``approval_status`` and ``is_published`` are denormalized; the
    writer keeps them consistent so "published" reads stay a single filter.
    """

    __tablename__ = "articles"

    id: int | None = Field(default=None, primary_key=True)
    author_id: int = Field(foreign_key="users.id", index=True)
    status: ArticleStatus = Field(default=ArticleStatus.DRAFT, index=True)
    approval_status: ApprovalStatus = Field(default=ApprovalStatus.PENDING, index=True)
    is_published: bool = Field(default=False)
    published_at: datetime | None = Field(default=None)
    reviewed_by: int | None = Field(default=None, foreign_key="users.id")
    reviewed_at: datetime | None = Field(default=None)
    rejection_reason: str | None = Field(default=None)
    modification_notes: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    version: int = Field(default=1)


class ArticleCreate(SQLModel):
    """Schema for creating an article. ``submit`` sends it straight to review."""

    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    category: str | None = None
    submit: bool = False


class ArticleUpdate(SQLModel):
    """Schema for an author editing an article."""

    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    category: str | None = None


class ArticleRead(ArticleBase):
    """Schema for reading an article."""

    id: int
    author_id: int
    status: ArticleStatus
    approval_status: ApprovalStatus
    is_published: bool
    published_at: datetime | None
    reviewed_by: int | None
    reviewed_at: datetime | None
    rejection_reason: str | None
    modification_notes: str | None
    created_at: datetime
    updated_at: datetime


class ArticleRejection(SQLModel):
    reason: str | None = None


class ArticleModificationRequest(SQLModel):
    modification_notes: str
