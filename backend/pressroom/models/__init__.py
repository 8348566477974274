"""SQLModel database models."""

from pressroom.models.user import (
    User,
    UserRole,
    UserStatus,
    UserCreate,
    UserRead,
    UserRoleUpdate,
    UserStatusUpdate,
)
from pressroom.models.requirement import (
    Requirement,
    RequirementCreate,
    RequirementRead,
    RequirementUpdate,
)
from pressroom.models.submission import (
    Submission,
    SubmissionKind,
    SubmissionStatus,
    SubmissionCreate,
    SubmissionRead,
    SubmissionReview,
    SubmissionUpdate,
    FileAttachment,
    AssignEditor,
    EditorRemarksUpdate,
    TERMINAL_STATUSES,
    UNASSIGNED_STATUS,
)
from pressroom.models.role_request import (
    RoleRequest,
    RoleRequestStatus,
    RoleRequestCreate,
    RoleRequestRead,
    RoleRequestDecision,
    RoleRevoke,
    REQUESTABLE_ROLES,
)
from pressroom.models.article import (
    Article,
    ArticleStatus,
    ApprovalStatus,
    ArticleCreate,
    ArticleUpdate,
    ArticleRead,
    ArticleRejection,
    ArticleModificationRequest,
    DEFAULT_REJECTION_REASON,
)
from pressroom.models.audit import AuditLog, AuditLogRead

__all__ = [
    # User
    "User",
    "UserRole",
    "UserStatus",
    "UserCreate",
    "UserRead",
    "UserRoleUpdate",
    "UserStatusUpdate",
    # Requirement
    "Requirement",
    "RequirementCreate",
    "RequirementRead",
    "RequirementUpdate",
    # Submission
    "Submission",
    "SubmissionKind",
    "SubmissionStatus",
    "SubmissionCreate",
    "SubmissionRead",
    "SubmissionReview",
    "SubmissionUpdate",
    "FileAttachment",
    "AssignEditor",
    "EditorRemarksUpdate",
    "TERMINAL_STATUSES",
    "UNASSIGNED_STATUS",
    # Role requests
    "RoleRequest",
    "RoleRequestStatus",
    "RoleRequestCreate",
    "RoleRequestRead",
    "RoleRequestDecision",
    "RoleRevoke",
    "REQUESTABLE_ROLES",
    # Article
    "Article",
    "ArticleStatus",
    "ApprovalStatus",
    "ArticleCreate",
    "ArticleUpdate",
    "ArticleRead",
    "ArticleRejection",
    "ArticleModificationRequest",
    "DEFAULT_REJECTION_REASON",
    # Audit
    "AuditLog",
    "AuditLogRead",
]
