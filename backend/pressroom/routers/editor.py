"""Editor endpoints: reviewing assigned submissions."""

from fastapi import APIRouter

from pressroom.core.deps import DbSession, EditorActor, NotifierDep, ReviewerActor
from pressroom.models import (
    EditorRemarksUpdate,
    Submission,
    SubmissionKind,
    SubmissionRead,
    SubmissionReview,
    SubmissionStatus,
)
from pressroom.schemas.workflow import AssignmentStats
from pressroom.services.review import SubmissionReviewer

router = APIRouter(prefix="/editor")


@router.get("/assignments", response_model=list[SubmissionRead])
async def my_assignments(
    actor: EditorActor,
    session: DbSession,
    notifier: NotifierDep,
    kind: SubmissionKind | None = None,
    status: SubmissionStatus | None = None,
) -> list[Submission]:
    """Submissions assigned to the calling editor, most recent first."""
    return await SubmissionReviewer(session, notifier).my_assignments(actor, kind, status)


@router.get("/assignments/stats", response_model=AssignmentStats)
async def my_assignment_stats(
    actor: EditorActor,
    session: DbSession,
    notifier: NotifierDep,
) -> AssignmentStats:
    return await SubmissionReviewer(session, notifier).my_assignment_stats(actor)


@router.post("/submissions/{submission_id}/review", response_model=SubmissionRead)
async def review_submission(
    submission_id: int,
    data: SubmissionReview,
    actor: ReviewerActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Submission:
    """Accept or reject a submission.

    Editors may only review submissions assigned to them. Chief editors and
    admins may review any submission.
    """
    return await SubmissionReviewer(session, notifier).review(
        submission_id, actor, data.status, data.remarks
    )


@router.patch("/submissions/{submission_id}/remarks", response_model=SubmissionRead)
async def update_remarks(
    submission_id: int,
    data: EditorRemarksUpdate,
    actor: EditorActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Submission:
    return await SubmissionReviewer(session, notifier).update_editor_remarks(
        submission_id, actor, data.editor_remarks
    )
