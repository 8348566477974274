"""Submission intake, listing and deletion."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from pressroom.models import (
    Requirement,
    Submission,
    SubmissionCreate,
    SubmissionKind,
    SubmissionStatus,
    SubmissionUpdate,
    User,
    UserRole,
)
from pressroom.schemas.auth import Actor
from pressroom.schemas.workflow import DeleteResponse
from pressroom.services.audit import AuditService
from pressroom.services.notifier import ADMIN_CHANNEL, Notifier
from pressroom.services.store import EntityStore, run_cascade

logger = logging.getLogger(__name__)

# Research paper states an author may still edit or withdraw
AUTHOR_EDITABLE_STATUSES = (
    SubmissionStatus.DRAFT,
    SubmissionStatus.COMPLETED,
    SubmissionStatus.PENDING,
)


class SubmissionService:
    """Author-side submission operations and the admin delete cascade."""

    def __init__(self, session: AsyncSession, notifier: Notifier):
        self.store = EntityStore(session)
        self.audit = AuditService(self.store)
        self.notifier = notifier

    async def submit(self, actor: Actor, data: SubmissionCreate) -> Submission:
        """Create a submission with a snapshot of the author's details.

        Manuscripts must target an active requirement and start pending.
        Research papers may be saved as drafts and completed later.
        """
        if not data.title.strip() or not data.abstract.strip():
            raise ValidationError("Title and abstract are required")
        if data.draft and data.kind != SubmissionKind.RESEARCH_PAPER:
            raise ValidationError("Only research papers can be saved as drafts")
        if data.kind == SubmissionKind.MANUSCRIPT and data.requirement_id is None:
            raise ValidationError("A manuscript must be submitted against a requirement")

        if data.requirement_id is not None:
            requirement = await self.store.get_or_raise(
                Requirement, data.requirement_id, "Requirement"
            )
            if not requirement.is_active:
                raise ValidationError("This requirement is no longer accepting submissions")

        author = await self.store.get_or_raise(User, actor.user_id, "User")
        submission = Submission(
            kind=data.kind,
            title=data.title.strip(),
            abstract=data.abstract,
            requirement_id=data.requirement_id,
            author_user_id=author.id,
            author_name=data.author_name or author.display_name,
            author_email=author.email,
            author_affiliation=data.author_affiliation,
            status=SubmissionStatus.DRAFT if data.draft else SubmissionStatus.PENDING,
        )
        if data.file is not None:
            submission.file_url = data.file.url
            submission.file_name = data.file.filename
            submission.file_type = data.file.file_type
            submission.file_size = data.file.file_size

        async def create() -> Submission:
            return await self.store.create(submission)

        async def bump_counter() -> None:
            if data.requirement_id is not None:
                await self.store.update_by_id(
                    Requirement,
                    data.requirement_id,
                    {"submissions_count": Requirement.submissions_count + 1},
                )

        outcome = await run_cascade(create, bump_counter, "increment requirement counter")
        created = outcome.result
        await self.audit.log(
            actor=actor,
            action="SUBMISSION_CREATED",
            resource_type="submission",
            resource_id=created.id,
            new_value={"kind": created.kind.value, "status": created.status.value},
            partial=outcome.partial,
        )
        logger.info("Submission %s (%s) created by user %s", created.id, created.kind.value, actor.user_id)

        if created.status != SubmissionStatus.DRAFT:
            await self.notifier.publish(
                ADMIN_CHANNEL,
                "submission:new",
                {"submission_id": created.id, "kind": created.kind.value, "title": created.title},
            )
        return created

    async def complete_research_paper(self, submission_id: int, actor: Actor) -> Submission:
        """Mark a draft research paper as completed so it can be assigned."""
        paper = await self.store.get(Submission, submission_id)
        if paper is None or paper.kind != SubmissionKind.RESEARCH_PAPER:
            raise NotFound("Research paper not found")
        if paper.author_user_id != actor.user_id:
            raise Forbidden("Only the author can complete this research paper")
        if paper.status != SubmissionStatus.DRAFT:
            raise Conflict("Only draft research papers can be completed")

        updated = await self.store.update_by_id(
            Submission,
            submission_id,
            {"status": SubmissionStatus.COMPLETED},
            expected={"status": SubmissionStatus.DRAFT},
        )
        await self.audit.log_status_changed(
            actor, "submission", submission_id, SubmissionStatus.DRAFT.value, SubmissionStatus.COMPLETED.value
        )
        return updated

    async def get(self, submission_id: int, actor: Actor) -> Submission:
        """Fetch a submission visible to the actor."""
        submission = await self.store.get_or_raise(Submission, submission_id, "Submission")
        if actor.has_role(UserRole.ADMIN, UserRole.CHIEF_EDITOR):
            return submission
        if submission.author_user_id == actor.user_id:
            return submission
        if submission.assigned_editor_id == actor.user_id:
            return submission
        raise Forbidden("Access denied")

    async def list_for_author(self, actor: Actor) -> list[Submission]:
        return await self.store.find(
            Submission,
            Submission.author_user_id == actor.user_id,
            order_by=(Submission.created_at.desc(),),
        )

    async def list_submissions(
        self,
        status: SubmissionStatus | None = None,
        kind: SubmissionKind | None = None,
        assigned: str | None = None,
        requirement_id: int | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Submission], int, dict[str, int]]:
        """Filtered, paginated listing for supervisors.

        ``assigned`` is "assigned", "unassigned" or an editor id.
        ``requirement_id`` narrows the listing to one call for submissions.

        Returns:
            (page of submissions, total matching, counts by status)
        """
        base = [Submission.status != SubmissionStatus.DRAFT]
        if kind is not None:
            base.append(Submission.kind == kind)
        if assigned == "unassigned":
            base.append(Submission.assigned_editor_id.is_(None))
        elif assigned == "assigned":
            base.append(Submission.assigned_editor_id.is_not(None))
        elif assigned:
            if not assigned.isdigit():
                raise ValidationError("assigned must be 'assigned', 'unassigned' or an editor id")
            base.append(Submission.assigned_editor_id == int(assigned))
        if requirement_id is not None:
            base.append(Submission.requirement_id == requirement_id)

        where = list(base)
        if status is not None:
            where.append(Submission.status == status)

        items = await self.store.find(
            Submission,
            *where,
            order_by=(Submission.submitted_at.desc(), Submission.id.desc()),
            skip=skip,
            limit=limit,
        )
        total = await self.store.count(Submission, *where)
        by_status = await self.store.aggregate_count_by_field(Submission, "status", *base)
        return items, total, by_status

    async def delete(self, submission_id: int, actor: Actor) -> DeleteResponse:
        """Delete a submission and decrement its requirement's counter."""
        submission = await self.store.get_or_raise(Submission, submission_id, "Submission")
        return await self._delete(submission, actor)

    async def update_research_paper(
        self, submission_id: int, actor: Actor, data: SubmissionUpdate
    ) -> Submission:
        """Edit the author's own research paper before an editor picks it up.

        Raises:
            NotFound: If the paper does not exist or belongs to someone else
            Conflict: If the paper has been assigned or decided
        """
        paper = await self._get_own_paper(submission_id, actor)
        patch = data.model_dump(exclude_unset=True, exclude={"file"})
        if "title" in patch:
            if not patch["title"] or not patch["title"].strip():
                raise ValidationError("Title cannot be empty")
            patch["title"] = patch["title"].strip()
        if "abstract" in patch and not (patch["abstract"] or "").strip():
            raise ValidationError("Abstract cannot be empty")
        if data.file is not None:
            patch.update(
                file_url=data.file.url,
                file_name=data.file.filename,
                file_type=data.file.file_type,
                file_size=data.file.file_size,
            )
        if not patch:
            return paper

        updated = await self.store.update_by_id(
            Submission,
            submission_id,
            patch,
            expected={"version": paper.version, "assigned_editor_id": None},
        )
        await self.audit.log(
            actor=actor,
            action="SUBMISSION_UPDATED",
            resource_type="submission",
            resource_id=submission_id,
            new_value={"fields": sorted(patch)},
        )
        return updated

    async def delete_research_paper(self, submission_id: int, actor: Actor) -> DeleteResponse:
        """Let the author withdraw their own unassigned research paper."""
        paper = await self._get_own_paper(submission_id, actor)
        return await self._delete(paper, actor)

    async def _get_own_paper(self, submission_id: int, actor: Actor) -> Submission:
        paper = await self.store.get(Submission, submission_id)
        if (
            paper is None
            or paper.kind != SubmissionKind.RESEARCH_PAPER
            or paper.author_user_id != actor.user_id
        ):
            raise NotFound("Research paper not found")
        if paper.status not in AUTHOR_EDITABLE_STATUSES or paper.assigned_editor_id is not None:
            raise Conflict(
                f"Research paper can no longer be changed (status '{paper.status.value}')"
            )
        return paper

    async def _delete(self, submission: Submission, actor: Actor) -> DeleteResponse:
        submission_id = submission.id
        requirement_id = submission.requirement_id
        old_status = submission.status.value

        async def remove() -> None:
            if not await self.store.delete_by_id(Submission, submission_id):
                raise NotFound("Submission not found")

        async def decrement() -> None:
            if requirement_id is not None:
                await self.store.update_by_id(
                    Requirement,
                    requirement_id,
                    {"submissions_count": Requirement.submissions_count - 1},
                )

        outcome = await run_cascade(remove, decrement, "decrement requirement counter")
        await self.audit.log(
            actor=actor,
            action="SUBMISSION_DELETED",
            resource_type="submission",
            resource_id=submission_id,
            old_value={"status": old_status, "requirement_id": requirement_id},
            partial=outcome.partial,
        )
        logger.info("Submission %s deleted by %s", submission_id, actor.user_id)
        return DeleteResponse(
            deleted_id=submission_id,
            status=old_status,
            partial=outcome.partial,
            error=outcome.error,
        )
