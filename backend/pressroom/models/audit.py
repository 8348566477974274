"""Audit log model for the editorial decision trail."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class AuditLog(SQLModel, table=True):
    """Append-only record of every workflow transition."""

    __tablename__ = "audit_logs"

    id: int | None = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=datetime.utcnow, index=True)
    actor_id: int = Field(foreign_key="users.id", index=True)
    actor_role: str
    action: str = Field(index=True)  # e.g. SUBMISSION_ASSIGNED, ROLE_REVOKED
    resource_type: str  # "submission", "role_request", "article", "user"
    resource_id: int = Field(index=True)
    old_value: str | None = Field(default=None)  # JSON string
    new_value: str | None = Field(default=None)  # JSON string
    partial: bool = Field(default=False)  # a cascaded write failed


class AuditLogRead(SQLModel):
    """Schema for reading audit log entries."""

    id: int
    timestamp: datetime
    actor_id: int
    actor_role: str
    action: str
    resource_type: str
    resource_id: int
    old_value: str | None
    new_value: str | None
    partial: bool
