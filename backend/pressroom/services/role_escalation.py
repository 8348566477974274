"""Role escalation workflow.

(none) -> pending -> approved | rejected

Approving a request cascades to the requesting user's role. Revocation is a
separate, admin-only action that needs no request at all.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.core.exceptions import (
    AlreadyHasRole,
    AlreadyReviewed,
    CannotDelete,
    DuplicatePending,
    Forbidden,
    InvalidRole,
    NotFound,
    RoleMismatch,
    StaleWrite,
    ValidationError,
)
from pressroom.models import (
    REQUESTABLE_ROLES,
    RoleRequest,
    RoleRequestRead,
    RoleRequestStatus,
    User,
    UserRole,
)
from pressroom.schemas.auth import Actor
from pressroom.schemas.workflow import (
    DeleteResponse,
    RevokeResponse,
    RoleRequestReviewResponse,
)
from pressroom.services.audit import AuditService
from pressroom.services.notifier import Notifier, user_channel
from pressroom.services.store import CascadeOutcome, EntityStore, run_cascade

logger = logging.getLogger(__name__)

DECISIONS = (RoleRequestStatus.APPROVED, RoleRequestStatus.REJECTED)


def parse_requestable_role(value: str) -> UserRole:
    """Map a raw role name onto a role that may be requested.

    Raises:
        InvalidRole: If the name is unknown or not requestable
    """
    try:
        role = UserRole(value)
    except ValueError:
        raise InvalidRole(f"Invalid role '{value}'")
    if role not in REQUESTABLE_ROLES:
        raise InvalidRole(f"Role '{value}' cannot be requested")
    return role


class RoleEscalationWorkflow:
    """Submit, review, revoke and delete role requests."""

    def __init__(self, session: AsyncSession, notifier: Notifier):
        self.store = EntityStore(session)
        self.audit = AuditService(self.store)
        self.notifier = notifier

    async def submit(self, actor: Actor, requested_role: str, reason: str | None) -> RoleRequest:
        """File a new pending request.

        Raises:
            InvalidRole: If the role cannot be requested
            ValidationError: If no reason is given
            AlreadyHasRole: If the user already holds the role
            DuplicatePending: If an identical request is still pending
        """
        role = parse_requestable_role(requested_role)
        if not reason or not reason.strip():
            raise ValidationError("A reason is required")

        user = await self.store.get_or_raise(User, actor.user_id, "User")
        if user.role == role:
            raise AlreadyHasRole(f"You already have the {role.value} role")

        existing = await self.store.find_one(
            RoleRequest,
            RoleRequest.user_id == user.id,
            RoleRequest.requested_role == role,
            RoleRequest.status == RoleRequestStatus.PENDING,
        )
        if existing is not None:
            raise DuplicatePending(f"You already have a pending request for the {role.value} role")

        request = await self.store.create(
            RoleRequest(user_id=user.id, requested_role=role, reason=reason.strip())
        )
        await self.audit.log(
            actor=actor,
            action="ROLE_REQUESTED",
            resource_type="role_request",
            resource_id=request.id,
            new_value={"requested_role": role.value},
        )
        logger.info("User %s requested role %s (request %s)", user.id, role.value, request.id)
        return request

    async def review(
        self,
        request_id: int,
        actor: Actor,
        decision: RoleRequestStatus,
        admin_notes: str | None = None,
    ) -> RoleRequestReviewResponse:
        """Approve or reject a pending request.

        The request write is conditional on it still being pending, so two
        concurrent reviews cannot both succeed. On approval the user's role is
        updated as a second write; if that write fails the response is
        flagged ``partial``.

        Raises:
            ValidationError: If ``decision`` is not approved or rejected
            NotFound: If the request does not exist
            AlreadyReviewed: If the request is no longer pending
        """
        if decision not in DECISIONS:
            raise ValidationError('Status must be either "approved" or "rejected"')

        request = await self.store.get_or_raise(RoleRequest, request_id, "Role request")
        if request.status != RoleRequestStatus.PENDING:
            raise AlreadyReviewed(f"This request has already been {request.status.value}")

        patch = {
            "status": decision,
            "reviewed_by": actor.user_id,
            "reviewed_at": datetime.utcnow(),
            "admin_notes": admin_notes,
        }

        async def resolve() -> RoleRequest:
            try:
                return await self.store.update_by_id(
                    RoleRequest,
                    request_id,
                    patch,
                    expected={"status": RoleRequestStatus.PENDING},
                )
            except StaleWrite as e:
                raise AlreadyReviewed("This request has already been reviewed") from e

        async def grant_role() -> None:
            await self.store.update_by_id(
                User, request.user_id, {"role": request.requested_role}
            )

        if decision == RoleRequestStatus.APPROVED:
            outcome = await run_cascade(resolve, grant_role, "grant approved role")
        else:
            outcome = CascadeOutcome(result=await resolve())
        resolved = outcome.result

        await self.audit.log(
            actor=actor,
            action="ROLE_APPROVED" if decision == RoleRequestStatus.APPROVED else "ROLE_REJECTED",
            resource_type="role_request",
            resource_id=request_id,
            old_value={"status": RoleRequestStatus.PENDING.value},
            new_value={
                "status": decision.value,
                "user_id": request.user_id,
                "requested_role": request.requested_role.value,
            },
            partial=outcome.partial,
        )
        logger.info(
            "Role request %s %s by %s %s",
            request_id,
            decision.value,
            actor.role.value,
            actor.user_id,
        )

        user = await self.store.get(User, request.user_id)
        if decision == RoleRequestStatus.APPROVED and not outcome.partial:
            # Approval is announced in real time only; no email is sent.
            await self.notifier.publish(
                user_channel(request.user_id),
                "role:approved",
                {
                    "newRole": request.requested_role.value,
                    "message": (
                        f"Your request for the {request.requested_role.value} role "
                        "has been approved"
                    ),
                },
            )

        return RoleRequestReviewResponse(
            request=RoleRequestRead.model_validate(resolved),
            user_role=user.role.value if user is not None else None,
            partial=outcome.partial,
            error=outcome.error,
        )

    async def revoke_role(
        self, user_id: int, role_to_revoke: UserRole, actor: Actor
    ) -> RevokeResponse:
        """Strip a role from a user without any request.

        Raises:
            Forbidden: If an admin tries to revoke their own role
            NotFound: If the user does not exist
            RoleMismatch: If the user does not currently hold ``role_to_revoke``
        """
        if user_id == actor.user_id:
            raise Forbidden("Admins cannot revoke their own role")
        user = await self.store.get_or_raise(User, user_id, "User")
        if user.role != role_to_revoke:
            raise RoleMismatch(
                f"User does not have the {role_to_revoke.value} role "
                f"(current role: {user.role.value})"
            )

        old_role = user.role
        updated = await self.store.update_by_id(
            User, user_id, {"role": UserRole.USER}, expected={"role": old_role}
        )
        await self.audit.log(
            actor=actor,
            action="ROLE_REVOKED",
            resource_type="user",
            resource_id=user_id,
            old_value={"role": old_role.value},
            new_value={"role": UserRole.USER.value},
        )
        logger.info("Role %s revoked from user %s by %s", old_role.value, user_id, actor.user_id)

        await self.notifier.publish(
            user_channel(user_id),
            "role:revoked",
            {
                "oldRole": old_role.value,
                "newRole": UserRole.USER.value,
                "message": f"Your {old_role.value} role has been revoked",
            },
        )
        await self.notifier.send_template_email(
            updated.email,
            "Role Access Update",
            "role_revoked.html",
            name=updated.display_name,
            role=old_role.value,
            changed_at=datetime.utcnow(),
        )

        return RevokeResponse(
            user_id=user_id,
            old_role=old_role.value,
            new_role=UserRole.USER.value,
            message=f"Successfully revoked {old_role.value} role",
        )

    async def delete(self, request_id: int, actor: Actor) -> DeleteResponse:
        """Delete a request unless it still backs a live role grant.

        Raises:
            NotFound: If the request does not exist
            CannotDelete: If the request is approved and the user still holds the role
        """
        request = await self.store.get_or_raise(RoleRequest, request_id, "Role request")
        if request.status == RoleRequestStatus.APPROVED:
            user = await self.store.get(User, request.user_id)
            if user is not None and user.role == request.requested_role:
                raise CannotDelete(
                    "Cannot delete an approved request while the user still has the "
                    f"{request.requested_role.value} role. Revoke the role first."
                )

        if not await self.store.delete_by_id(RoleRequest, request_id):
            raise NotFound("Role request not found")
        await self.audit.log(
            actor=actor,
            action="ROLE_REQUEST_DELETED",
            resource_type="role_request",
            resource_id=request_id,
            old_value={
                "status": request.status.value,
                "requested_role": request.requested_role.value,
                "user_id": request.user_id,
            },
        )
        return DeleteResponse(deleted_id=request_id, status=request.status.value)

    async def list_requests(
        self,
        status: RoleRequestStatus | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[RoleRequest], int, dict[str, int]]:
        """Paginated requests for admins, newest first, with per-status stats."""
        where = [] if status is None else [RoleRequest.status == status]
        items = await self.store.find(
            RoleRequest,
            *where,
            order_by=(RoleRequest.created_at.desc(), RoleRequest.id.desc()),
            skip=skip,
            limit=limit,
        )
        total = await self.store.count(RoleRequest, *where)
        counts = await self.store.aggregate_count_by_field(RoleRequest, "status")
        stats = {"total": sum(counts.values())}
        for s in RoleRequestStatus:
            stats[s.value] = counts.get(s.value, 0)
        return items, total, stats

    async def my_requests(self, actor: Actor) -> list[RoleRequest]:
        return await self.store.find(
            RoleRequest,
            RoleRequest.user_id == actor.user_id,
            order_by=(RoleRequest.created_at.desc(), RoleRequest.id.desc()),
        )
