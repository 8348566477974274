"""Chief editor endpoints: assignment and oversight."""

from typing import Literal

from fastapi import APIRouter, Query

from pressroom.core.deps import ChiefEditorActor, DbSession, NotifierDep, SupervisorActor
from pressroom.models import (
    AssignEditor,
    Submission,
    SubmissionKind,
    SubmissionRead,
    SubmissionStatus,
)
from pressroom.schemas.workflow import (
    AssignmentSummary,
    ChiefEditorStats,
    EditorWorkload,
    SubmissionPage,
)
from pressroom.services.assignment import AssignmentEngine
from pressroom.services.submissions import SubmissionService

router = APIRouter(prefix="/chief-editor")

KindPath = Literal["manuscripts", "research-papers"]

PATH_KINDS = {
    "manuscripts": SubmissionKind.MANUSCRIPT,
    "research-papers": SubmissionKind.RESEARCH_PAPER,
}


@router.post("/auto-assign", response_model=AssignmentSummary)
async def auto_assign(
    actor: ChiefEditorActor,
    session: DbSession,
    notifier: NotifierDep,
) -> AssignmentSummary:
    """Distribute every unassigned submission across all editors, round-robin."""
    return await AssignmentEngine(session, notifier).auto_assign(actor)


@router.post("/{kind}/{submission_id}/assign", response_model=SubmissionRead)
async def assign_submission(
    kind: KindPath,
    submission_id: int,
    data: AssignEditor,
    actor: ChiefEditorActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Submission:
    return await AssignmentEngine(session, notifier).assign(
        submission_id, data.editor_id, actor, kind=PATH_KINDS[kind]
    )


@router.post("/{kind}/{submission_id}/reassign", response_model=SubmissionRead)
async def reassign_submission(
    kind: KindPath,
    submission_id: int,
    data: AssignEditor,
    actor: ChiefEditorActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Submission:
    """Move an assigned submission to another editor without touching its status."""
    return await AssignmentEngine(session, notifier).reassign(
        submission_id, data.editor_id, actor, kind=PATH_KINDS[kind]
    )


@router.post("/{kind}/{submission_id}/unassign", response_model=SubmissionRead)
async def unassign_submission(
    kind: KindPath,
    submission_id: int,
    actor: ChiefEditorActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Submission:
    return await AssignmentEngine(session, notifier).unassign(
        submission_id, actor, kind=PATH_KINDS[kind]
    )


@router.get("/submissions", response_model=SubmissionPage)
async def list_submissions(
    actor: SupervisorActor,
    session: DbSession,
    notifier: NotifierDep,
    status: SubmissionStatus | None = None,
    kind: SubmissionKind | None = None,
    assigned: str | None = Query(None, description="assigned, unassigned or an editor id"),
    requirement_id: int | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> SubmissionPage:
    items, total, by_status = await SubmissionService(session, notifier).list_submissions(
        status=status,
        kind=kind,
        assigned=assigned,
        requirement_id=requirement_id,
        skip=skip,
        limit=limit,
    )
    return SubmissionPage(
        items=[SubmissionRead.model_validate(s) for s in items],
        total=total,
        skip=skip,
        limit=limit,
        by_status=by_status,
    )


@router.get("/editors", response_model=list[EditorWorkload])
async def list_editors(
    actor: SupervisorActor,
    session: DbSession,
    notifier: NotifierDep,
) -> list[EditorWorkload]:
    """Editors with their open workload. For human dispatch only."""
    return await AssignmentEngine(session, notifier).editors_with_workload()


@router.get("/stats", response_model=ChiefEditorStats)
async def get_stats(
    actor: SupervisorActor,
    session: DbSession,
    notifier: NotifierDep,
) -> ChiefEditorStats:
    return await AssignmentEngine(session, notifier).stats()
