"""Editor assignment engine.

Distributes unassigned submissions over the editor pool with a plain
round-robin, and performs manual assign / reassign / unassign on behalf of
chief editors. Current editor workload is reported but never consulted when
distributing.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.core.exceptions import Conflict, NoEditorsAvailable, NotFound, WorkflowError
from pressroom.models import (
    TERMINAL_STATUSES,
    UNASSIGNED_STATUS,
    Submission,
    SubmissionKind,
    SubmissionStatus,
    User,
    UserRole,
)
from pressroom.schemas.auth import Actor
from pressroom.schemas.workflow import (
    AssignmentSummary,
    ChiefEditorStats,
    EditorWorkload,
    KindStats,
    Workload,
)
from pressroom.services.audit import AuditService
from pressroom.services.notifier import Notifier, user_channel
from pressroom.services.store import EntityStore

logger = logging.getLogger(__name__)

OPEN_STATUSES = (SubmissionStatus.PENDING, SubmissionStatus.UNDER_REVIEW)


def plan_round_robin(
    submission_ids: Sequence[int], editor_ids: Sequence[int]
) -> list[tuple[int, int]]:
    """Pair the i-th submission with editor ``i mod len(editors)``.

    Both sequences must already be in their deterministic order (oldest
    submission first, editors by ascending id).

    Raises:
        NoEditorsAvailable: If ``editor_ids`` is empty
    """
    if not editor_ids:
        raise NoEditorsAvailable("No editors available for assignment")
    return [
        (submission_id, editor_ids[index % len(editor_ids)])
        for index, submission_id in enumerate(submission_ids)
    ]


def unassigned_clause():
    """Filter for submissions eligible for auto-assignment."""
    return and_(
        Submission.assigned_editor_id.is_(None),
        or_(
            Submission.status.in_(OPEN_STATUSES),
            and_(
                Submission.kind == SubmissionKind.RESEARCH_PAPER,
                Submission.status == SubmissionStatus.COMPLETED,
            ),
        ),
    )


class AssignmentEngine:
    """Assign submissions to editors."""

    def __init__(self, session: AsyncSession, notifier: Notifier):
        self.store = EntityStore(session)
        self.audit = AuditService(self.store)
        self.notifier = notifier

    async def editor_pool(self) -> list[User]:
        """All editors in ascending id order."""
        return await self.store.find(
            User, User.role == UserRole.EDITOR, order_by=(User.id.asc(),)
        )

    async def unassigned_submissions(self) -> list[Submission]:
        """Eligible submissions, oldest first."""
        return await self.store.find(
            Submission,
            unassigned_clause(),
            order_by=(Submission.created_at.asc(), Submission.id.asc()),
        )

    async def auto_assign(self, actor: Actor) -> AssignmentSummary:
        """Spread every unassigned submission evenly across all editors.

        Each assignment is its own conditional write. A submission that
        changed since it was read (or fails to write) is skipped and listed in
        ``failed``; earlier assignments in the batch stay in place.

        Raises:
            NoEditorsAvailable: If there are no editors; nothing is written
        """
        editors = await self.editor_pool()
        if not editors:
            raise NoEditorsAvailable("No editors available for assignment")

        pending = await self.unassigned_submissions()
        by_id = {s.id: s for s in pending}
        plan = plan_round_robin([s.id for s in pending], [e.id for e in editors])

        distribution: dict[int, list[int]] = {}
        failed: list[int] = []
        for submission_id, editor_id in plan:
            submission = by_id[submission_id]
            try:
                await self._assign(
                    submission,
                    editor_id,
                    actor,
                    expected={"assigned_editor_id": None, "status": submission.status},
                )
            except WorkflowError as e:
                logger.warning(
                    "Auto-assign skipped submission %s: %s", submission_id, e.message
                )
                failed.append(submission_id)
                continue
            distribution.setdefault(editor_id, []).append(submission_id)

        for editor_id, submission_ids in distribution.items():
            await self.notifier.publish(
                user_channel(editor_id),
                "submissions:assigned",
                {"count": len(submission_ids), "submission_ids": submission_ids},
            )

        summary = AssignmentSummary.build(
            planned=len(plan),
            editors=len(editors),
            distribution=distribution,
            failed=failed,
        )
        logger.info("Auto-assign by %s: %s", actor.user_id, summary.message)
        return summary

    async def assign(
        self,
        submission_id: int,
        editor_id: int,
        actor: Actor,
        kind: SubmissionKind | None = None,
    ) -> Submission:
        """Assign an unassigned submission to a specific editor."""
        await self._require_editor(editor_id)
        submission = await self._get_submission(submission_id, kind)

        if submission.assigned_editor_id is not None:
            raise Conflict("Submission is already assigned; reassign it instead")
        if submission.status in TERMINAL_STATUSES or submission.status == SubmissionStatus.DRAFT:
            raise Conflict(f"Cannot assign a submission in status '{submission.status.value}'")

        updated = await self._assign(
            submission,
            editor_id,
            actor,
            expected={"assigned_editor_id": None, "status": submission.status},
        )
        await self.notifier.publish(
            user_channel(editor_id),
            "submissions:assigned",
            {"count": 1, "submission_ids": [submission_id]},
        )
        return updated

    async def reassign(
        self,
        submission_id: int,
        editor_id: int,
        actor: Actor,
        kind: SubmissionKind | None = None,
    ) -> Submission:
        """Move an assigned submission to another editor, keeping its status."""
        await self._require_editor(editor_id)
        submission = await self._get_submission(submission_id, kind)

        previous_editor = submission.assigned_editor_id
        if previous_editor is None:
            raise Conflict("Submission is not assigned; assign it first")

        updated = await self.store.update_by_id(
            Submission,
            submission_id,
            {
                "assigned_editor_id": editor_id,
                "assigned_by_id": actor.user_id,
                "assigned_at": datetime.utcnow(),
            },
            expected={"assigned_editor_id": previous_editor},
        )
        await self.audit.log(
            actor=actor,
            action="SUBMISSION_REASSIGNED",
            resource_type="submission",
            resource_id=submission_id,
            old_value={"assigned_editor_id": previous_editor},
            new_value={"assigned_editor_id": editor_id},
        )
        logger.info(
            "Submission %s reassigned from editor %s to %s", submission_id, previous_editor, editor_id
        )

        await self.notifier.publish(
            user_channel(editor_id),
            "submissions:assigned",
            {"count": 1, "submission_ids": [submission_id]},
        )
        if previous_editor != editor_id:
            await self.notifier.publish(
                user_channel(previous_editor),
                "submissions:unassigned",
                {"submission_ids": [submission_id]},
            )
        return updated

    async def unassign(
        self,
        submission_id: int,
        actor: Actor,
        kind: SubmissionKind | None = None,
    ) -> Submission:
        """Remove the editor and return the submission to its unassigned status."""
        submission = await self._get_submission(submission_id, kind)

        previous_editor = submission.assigned_editor_id
        if previous_editor is None:
            raise Conflict("Submission is not assigned")
        if submission.status in TERMINAL_STATUSES:
            raise Conflict("Cannot unassign a submission that has already been decided")

        old_status = submission.status
        reset_status = UNASSIGNED_STATUS[submission.kind]
        updated = await self.store.update_by_id(
            Submission,
            submission_id,
            {
                "assigned_editor_id": None,
                "assigned_by_id": None,
                "assigned_at": None,
                "status": reset_status,
            },
            expected={"assigned_editor_id": previous_editor, "status": old_status},
        )
        await self.audit.log(
            actor=actor,
            action="SUBMISSION_UNASSIGNED",
            resource_type="submission",
            resource_id=submission_id,
            old_value={"assigned_editor_id": previous_editor, "status": old_status.value},
            new_value={"assigned_editor_id": None, "status": reset_status.value},
        )
        await self.notifier.publish(
            user_channel(previous_editor),
            "submissions:unassigned",
            {"submission_ids": [submission_id]},
        )
        return updated

    async def editors_with_workload(self) -> list[EditorWorkload]:
        """Every editor with their count of open assigned submissions."""
        result = []
        for editor in await self.editor_pool():
            counts = await self.store.aggregate_count_by_field(
                Submission,
                "kind",
                Submission.assigned_editor_id == editor.id,
                Submission.status.in_(OPEN_STATUSES),
            )
            manuscripts = counts.get(SubmissionKind.MANUSCRIPT.value, 0)
            papers = counts.get(SubmissionKind.RESEARCH_PAPER.value, 0)
            result.append(
                EditorWorkload(
                    id=editor.id,
                    email=editor.email,
                    full_name=editor.full_name,
                    workload=Workload(
                        manuscripts=manuscripts, papers=papers, total=manuscripts + papers
                    ),
                )
            )
        return result

    async def stats(self) -> ChiefEditorStats:
        """Dashboard counters for chief editors."""
        manuscripts = await self._kind_stats(SubmissionKind.MANUSCRIPT)
        papers = await self._kind_stats(SubmissionKind.RESEARCH_PAPER)
        editors = await self.store.count(User, User.role == UserRole.EDITOR)
        assigned = manuscripts.assigned + papers.assigned
        return ChiefEditorStats(
            manuscripts=manuscripts,
            papers=papers,
            editors=editors,
            avg_workload=round(assigned / editors) if editors else 0,
        )

    async def _kind_stats(self, kind: SubmissionKind) -> KindStats:
        of_kind = Submission.kind == kind
        not_draft = Submission.status != SubmissionStatus.DRAFT
        total = await self.store.count(Submission, of_kind, not_draft)
        assigned = await self.store.count(
            Submission, of_kind, Submission.assigned_editor_id.is_not(None)
        )
        pending = await self.store.count(
            Submission, of_kind, Submission.status == SubmissionStatus.PENDING
        )
        return KindStats(total=total, assigned=assigned, unassigned=total - assigned, pending=pending)

    async def _assign(
        self,
        submission: Submission,
        editor_id: int,
        actor: Actor,
        expected: dict,
    ) -> Submission:
        """Set the assignment fields and flip status to under-review in one write."""
        old_status = submission.status
        updated = await self.store.update_by_id(
            Submission,
            submission.id,
            {
                "assigned_editor_id": editor_id,
                "assigned_by_id": actor.user_id,
                "assigned_at": datetime.utcnow(),
                "status": SubmissionStatus.UNDER_REVIEW,
            },
            expected=expected,
        )
        await self.audit.log(
            actor=actor,
            action="SUBMISSION_ASSIGNED",
            resource_type="submission",
            resource_id=submission.id,
            old_value={"assigned_editor_id": None, "status": old_status.value},
            new_value={
                "assigned_editor_id": editor_id,
                "status": SubmissionStatus.UNDER_REVIEW.value,
            },
        )
        return updated

    async def _require_editor(self, editor_id: int) -> User:
        editor = await self.store.get(User, editor_id)
        if editor is None or editor.role != UserRole.EDITOR:
            raise NotFound("Editor not found")
        return editor

    async def _get_submission(
        self, submission_id: int, kind: SubmissionKind | None
    ) -> Submission:
        submission = await self.store.get(Submission, submission_id)
        if submission is None or (kind is not None and submission.kind != kind):
            label = "Research paper" if kind == SubmissionKind.RESEARCH_PAPER else "Submission"
            raise NotFound(f"{label} not found")
        return submission
