"""Submission review state machine.

pending -> under-review -> accepted | rejected

under-review is only entered through assignment. Editors may decide only the
submissions assigned to them; chief editors and admins may decide any.
Admins write ``admin_remarks``, everyone else writes ``editor_remarks``, so an
admin override never erases an editor's notes.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.core.config import get_settings
from pressroom.core.exceptions import Conflict, Forbidden, ValidationError
from pressroom.models import (
    TERMINAL_STATUSES,
    Submission,
    SubmissionKind,
    SubmissionStatus,
    UserRole,
)
from pressroom.schemas.auth import Actor
from pressroom.schemas.workflow import AssignmentStats
from pressroom.services.audit import AuditService
from pressroom.services.notifier import Notifier, user_channel
from pressroom.services.store import EntityStore

logger = logging.getLogger(__name__)

ADMIN_TARGETS = frozenset(
    {
        SubmissionStatus.PENDING,
        SubmissionStatus.UNDER_REVIEW,
        SubmissionStatus.ACCEPTED,
        SubmissionStatus.REJECTED,
    }
)

DECISION_WORDING = {
    SubmissionStatus.ACCEPTED: {
        "subject": "{kind} Accepted - {platform}",
        "message": "Congratulations! Your {kind_lower} has been accepted for publication.",
        "label": "Accepted",
        "color": "#10b981",
    },
    SubmissionStatus.REJECTED: {
        "subject": "{kind} Status Update - {platform}",
        "message": (
            "Thank you for your submission. After careful review, we are unable to "
            "accept your {kind_lower} at this time."
        ),
        "label": "Not Accepted",
        "color": "#ef4444",
    },
}


def kind_label(kind: SubmissionKind) -> str:
    return "Research Paper" if kind == SubmissionKind.RESEARCH_PAPER else "Manuscript"


class SubmissionReviewer:
    """Apply review decisions to submissions."""

    def __init__(self, session: AsyncSession, notifier: Notifier):
        self.store = EntityStore(session)
        self.audit = AuditService(self.store)
        self.notifier = notifier

    async def review(
        self,
        submission_id: int,
        actor: Actor,
        new_status: SubmissionStatus,
        remarks: str | None = None,
    ) -> Submission:
        """Record a decision on a submission.

        Raises:
            NotFound: If the submission does not exist
            Forbidden: If an editor is not the assigned editor
            ValidationError: If ``new_status`` is not allowed for the actor
            Conflict: If the current state does not permit the decision
        """
        submission = await self.store.get_or_raise(Submission, submission_id, "Submission")

        if actor.role == UserRole.EDITOR:
            if submission.assigned_editor_id != actor.user_id:
                raise Forbidden("You can only review submissions assigned to you")
        elif actor.role not in (UserRole.CHIEF_EDITOR, UserRole.ADMIN):
            raise Forbidden("Only editors can review submissions")

        old_status = submission.status
        if old_status == SubmissionStatus.DRAFT:
            raise Conflict(f"Cannot review a submission in status '{old_status.value}'")

        admin_path = actor.role == UserRole.ADMIN
        now = datetime.utcnow()
        patch = {"status": new_status, "reviewed_by": actor.user_id, "reviewed_at": now}

        if admin_path:
            if new_status not in ADMIN_TARGETS:
                raise ValidationError(f"Invalid status '{new_status.value}'")
            if new_status == SubmissionStatus.UNDER_REVIEW and submission.assigned_editor_id is None:
                raise Conflict("Assign an editor to move a submission under review")
            if new_status == SubmissionStatus.PENDING and submission.assigned_editor_id is not None:
                raise Conflict("Unassign the editor to move a submission back to pending")
            if remarks:
                patch["admin_remarks"] = remarks
        else:
            if new_status not in TERMINAL_STATUSES:
                raise ValidationError('Status must be either "accepted" or "rejected"')
            if old_status in TERMINAL_STATUSES:
                raise Conflict(f"Submission has already been {old_status.value}")
            if remarks is not None:
                patch["editor_remarks"] = remarks
            patch["editor_reviewed_at"] = now

        updated = await self.store.update_by_id(
            Submission,
            submission_id,
            patch,
            expected={
                "status": old_status,
                "assigned_editor_id": submission.assigned_editor_id,
            },
        )
        await self.audit.log_status_changed(
            actor,
            "submission",
            submission_id,
            old_status.value,
            new_status.value,
            action="SUBMISSION_REVIEWED",
            remarks=remarks,
        )
        logger.info(
            "Submission %s %s -> %s by %s %s",
            submission_id,
            old_status.value,
            new_status.value,
            actor.role.value,
            actor.user_id,
        )

        if new_status in TERMINAL_STATUSES:
            await self._notify_author(updated, remarks)
        return updated

    async def update_editor_remarks(
        self, submission_id: int, actor: Actor, remarks: str
    ) -> Submission:
        """Let the assigned editor save remarks without deciding."""
        submission = await self.store.get_or_raise(Submission, submission_id, "Submission")
        if submission.assigned_editor_id != actor.user_id:
            raise Forbidden("You can only update remarks on submissions assigned to you")
        return await self.store.update_by_id(
            Submission,
            submission_id,
            {"editor_remarks": remarks},
            expected={"assigned_editor_id": actor.user_id},
        )

    async def my_assignments(
        self,
        actor: Actor,
        kind: SubmissionKind | None = None,
        status: SubmissionStatus | None = None,
    ) -> list[Submission]:
        where = [Submission.assigned_editor_id == actor.user_id]
        if kind is not None:
            where.append(Submission.kind == kind)
        if status is not None:
            where.append(Submission.status == status)
        return await self.store.find(
            Submission, *where, order_by=(Submission.assigned_at.desc(),)
        )

    async def my_assignment_stats(self, actor: Actor) -> AssignmentStats:
        mine = Submission.assigned_editor_id == actor.user_id
        return AssignmentStats(
            total=await self.store.count(Submission, mine),
            pending=await self.store.count(
                Submission, mine, Submission.status == SubmissionStatus.UNDER_REVIEW
            ),
            reviewed=await self.store.count(
                Submission, mine, Submission.editor_reviewed_at.is_not(None)
            ),
        )

    async def _notify_author(self, submission: Submission, remarks: str | None) -> None:
        wording = DECISION_WORDING[submission.status]
        label = kind_label(submission.kind)
        platform = get_settings().platform_name
        fmt = {"kind": label, "kind_lower": label.lower(), "platform": platform}
        await self.notifier.send_template_email(
            submission.author_email,
            wording["subject"].format(**fmt),
            "submission_decision.html",
            author_name=submission.author_name,
            title=submission.title,
            kind_label=label,
            status=submission.status.value,
            status_label=wording["label"],
            message=wording["message"].format(**fmt),
            remarks=remarks,
            color=wording["color"],
            reviewed_at=submission.reviewed_at,
        )
        await self.notifier.publish(
            user_channel(submission.author_user_id),
            "submission:reviewed",
            {"submission_id": submission.id, "status": submission.status.value},
        )
