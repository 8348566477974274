"""Author-side submission endpoints."""

from fastapi import APIRouter, status

from pressroom.core.deps import CurrentActor, DbSession, NotifierDep
from pressroom.models import (
    Requirement,
    RequirementRead,
    Submission,
    SubmissionCreate,
    SubmissionRead,
    SubmissionUpdate,
)
from pressroom.schemas.workflow import DeleteResponse
from pressroom.services.accounts import AccountService
from pressroom.services.submissions import SubmissionService

router = APIRouter(prefix="/submissions")


@router.get("/requirements", response_model=list[RequirementRead])
async def list_open_requirements(actor: CurrentActor, session: DbSession) -> list[Requirement]:
    """Calls for submissions that are currently accepting manuscripts."""
    return await AccountService(session).list_requirements(active_only=True)


@router.post("", response_model=SubmissionRead, status_code=status.HTTP_201_CREATED)
async def create_submission(
    data: SubmissionCreate,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Submission:
    """Submit a manuscript, or save / submit a research paper."""
    return await SubmissionService(session, notifier).submit(actor, data)


@router.get("/mine", response_model=list[SubmissionRead])
async def list_my_submissions(actor: CurrentActor, session: DbSession, notifier: NotifierDep) -> list[Submission]:
    return await SubmissionService(session, notifier).list_for_author(actor)


@router.get("/{submission_id}", response_model=SubmissionRead)
async def get_submission(
    submission_id: int,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Submission:
    """Get a submission visible to the caller."""
    return await SubmissionService(session, notifier).get(submission_id, actor)


@router.post("/{submission_id}/complete", response_model=SubmissionRead)
async def complete_research_paper(
    submission_id: int,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Submission:
    """Mark a draft research paper as ready for assignment."""
    return await SubmissionService(session, notifier).complete_research_paper(submission_id, actor)


@router.patch("/{submission_id}", response_model=SubmissionRead)
async def update_research_paper(
    submission_id: int,
    data: SubmissionUpdate,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Submission:
    """Edit your own research paper while it is still unassigned."""
    return await SubmissionService(session, notifier).update_research_paper(submission_id, actor, data)


@router.delete("/{submission_id}", response_model=DeleteResponse)
async def delete_research_paper(
    submission_id: int,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> DeleteResponse:
    """Withdraw your own research paper while it is still unassigned."""
    return await SubmissionService(session, notifier).delete_research_paper(submission_id, actor)
