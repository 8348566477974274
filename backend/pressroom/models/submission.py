"""Submission model for manuscripts and research papers under editorial review."""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel


class SubmissionKind(str, Enum):
    """Discriminator between the two submission flavours."""

    MANUSCRIPT = "manuscript"
    RESEARCH_PAPER = "research-paper"


class SubmissionStatus(str, Enum):
    """Submission workflow states.

    DRAFT and COMPLETED only apply to research papers: a paper is written as a
    draft, marked completed by its author, and only then enters the
    assignment pool. Manuscripts start at PENDING.
    """

    DRAFT = "draft"
    COMPLETED = "completed"
    PENDING = "pending"
    UNDER_REVIEW = "under-review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


TERMINAL_STATUSES = frozenset({SubmissionStatus.ACCEPTED, SubmissionStatus.REJECTED})

# Status a submission returns to when its editor is removed
UNASSIGNED_STATUS = {
    SubmissionKind.MANUSCRIPT: SubmissionStatus.PENDING,
    SubmissionKind.RESEARCH_PAPER: SubmissionStatus.COMPLETED,
}


class SubmissionBase(SQLModel):
    """Base submission fields."""

    title: str
    abstract: str
    kind: SubmissionKind = Field(default=SubmissionKind.MANUSCRIPT, index=True)


class Submission(SubmissionBase, table=True):
    """Submission database model.

    The author block is a snapshot taken at submission time and is never
    joined back to the live user record.
    """

    __tablename__ = "submissions"

    id: int | None = Field(default=None, primary_key=True)
    requirement_id: int | None = Field(default=None, foreign_key="requirements.id", index=True)

    # Author snapshot
    author_user_id: int = Field(foreign_key="users.id", index=True)
    author_name: str
    author_email: str
    author_affiliation: str | None = Field(default=None)

    # Attached file metadata, supplied by the upload handler
    file_url: str | None = Field(default=None)
    file_name: str | None = Field(default=None)
    file_type: str | None = Field(default=None)
    file_size: int | None = Field(default=None)

    status: SubmissionStatus = Field(default=SubmissionStatus.PENDING, index=True)

    # Assignment
    assigned_editor_id: int | None = Field(default=None, foreign_key="users.id", index=True)
    assigned_by_id: int | None = Field(default=None, foreign_key="users.id")
    assigned_at: datetime | None = Field(default=None)

    # Review
    editor_remarks: str = Field(default="")
    editor_reviewed_at: datetime | None = Field(default=None)
    admin_remarks: str = Field(default="")
    reviewed_by: int | None = Field(default=None, foreign_key="users.id")
    reviewed_at: datetime | None = Field(default=None)

    submitted_at: datetime = Field(default_factory=datetime.utcnow)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    version: int = Field(default=1)


class FileAttachment(SQLModel):
    """Upload handler output attached to a submission."""

    url: str
    filename: str
    file_type: str | None = None
    file_size: int | None = None


class SubmissionCreate(SubmissionBase):
    """Schema for submitting a manuscript or research paper."""

    requirement_id: int | None = None
    author_name: str | None = None
    author_affiliation: str | None = None
    file: FileAttachment | None = None
    draft: bool = False


class SubmissionUpdate(SQLModel):
    """Schema for an author editing their research paper."""

    title: str | None = None
    abstract: str | None = None
    author_affiliation: str | None = None
    file: FileAttachment | None = None


class SubmissionRead(SubmissionBase):
    """Schema for reading a submission."""

    id: int
    requirement_id: int | None
    author_user_id: int
    author_name: str
    author_email: str
    author_affiliation: str | None
    file_url: str | None
    file_name: str | None
    file_type: str | None
    file_size: int | None
    status: SubmissionStatus
    assigned_editor_id: int | None
    assigned_by_id: int | None
    assigned_at: datetime | None
    editor_remarks: str
    editor_reviewed_at: datetime | None
    admin_remarks: str
    reviewed_by: int | None
    reviewed_at: datetime | None
    submitted_at: datetime
    created_at: datetime
    updated_at: datetime
    version: int


class AssignEditor(SQLModel):
    """Schema for manual assignment and reassignment."""

    editor_id: int


class SubmissionReview(SQLModel):
    """Schema for a review decision."""

    status: SubmissionStatus
    remarks: str | None = None


class EditorRemarksUpdate(SQLModel):
    """Schema for an editor updating remarks without deciding."""

    editor_remarks: str = ""
