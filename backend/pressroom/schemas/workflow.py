"""Response schemas for workflow operations and dashboards."""

from pydantic import BaseModel, Field

from pressroom.models import ArticleRead, RoleRequestRead, SubmissionRead


class AssignmentSummary(BaseModel):
    """Outcome of one auto-assign batch."""

    assigned: int
    editors: int
    per_editor: int
    remainder: int
    failed: list[int] = Field(default_factory=list)
    distribution: dict[int, list[int]] = Field(default_factory=dict)
    message: str = ""

    @classmethod
    def build(
        cls,
        planned: int,
        editors: int,
        distribution: dict[int, list[int]],
        failed: list[int],
    ) -> "AssignmentSummary":
        """Summarize a batch of ``planned`` submissions over ``editors`` editors."""
        assigned = sum(len(ids) for ids in distribution.values())
        per_editor, remainder = divmod(planned, editors) if editors else (0, 0)
        if planned == 0:
            message = "No unassigned submissions to assign"
        else:
            message = (
                f"Distributed {assigned} submissions among {editors} editors: "
                f"{per_editor} per editor"
            )
            if remainder:
                plural = "s" if remainder > 1 else ""
                message += f", {remainder} editor{plural} get 1 extra"
            if failed:
                message += f"; {len(failed)} could not be assigned"
        return cls(
            assigned=assigned,
            editors=editors,
            per_editor=per_editor,
            remainder=remainder,
            failed=failed,
            distribution=distribution,
            message=message,
        )


class Workload(BaseModel):
    manuscripts: int
    papers: int
    total: int


class EditorWorkload(BaseModel):
    id: int
    email: str
    full_name: str | None
    workload: Workload


class KindStats(BaseModel):
    total: int
    assigned: int
    unassigned: int
    pending: int


class ChiefEditorStats(BaseModel):
    manuscripts: KindStats
    papers: KindStats
    editors: int
    avg_workload: int


class SubmissionPage(BaseModel):
    items: list[SubmissionRead]
    total: int
    skip: int
    limit: int
    by_status: dict[str, int]


class AssignmentStats(BaseModel):
    """An editor's own assignment counters."""

    total: int
    pending: int
    reviewed: int


class RoleRequestPage(BaseModel):
    items: list[RoleRequestRead]
    total: int
    skip: int
    limit: int
    stats: dict[str, int]


class RoleRequestReviewResponse(BaseModel):
    request: RoleRequestRead
    user_role: str | None
    partial: bool = False
    error: str | None = None


class RevokeResponse(BaseModel):
    user_id: int
    old_role: str
    new_role: str
    message: str


class DeleteResponse(BaseModel):
    deleted_id: int
    status: str | None = None
    partial: bool = False
    error: str | None = None


class ArticlePage(BaseModel):
    items: list[ArticleRead]
    total: int
