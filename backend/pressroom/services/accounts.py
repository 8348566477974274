"""Admin account management, requirements and the audit trail reader."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.core.exceptions import CannotDelete, Forbidden, NotFound, ValidationError
from pressroom.models import (
    AuditLog,
    Requirement,
    RequirementCreate,
    RequirementUpdate,
    Submission,
    User,
    UserRole,
    UserStatus,
)
from pressroom.schemas.auth import Actor
from pressroom.schemas.workflow import DeleteResponse
from pressroom.services.audit import AuditService
from pressroom.services.store import EntityStore

logger = logging.getLogger(__name__)


class AccountService:
    """Direct admin edits that bypass the role request workflow."""

    def __init__(self, session: AsyncSession):
        self.store = EntityStore(session)
        self.audit = AuditService(self.store)

    async def list_users(
        self, role: UserRole | None = None, skip: int = 0, limit: int = 20
    ) -> tuple[list[User], int]:
        where = [] if role is None else [User.role == role]
        items = await self.store.find(
            User, *where, order_by=(User.created_at.desc(),), skip=skip, limit=limit
        )
        return items, await self.store.count(User, *where)

    async def update_user_role(self, user_id: int, role: UserRole, actor: Actor) -> User:
        """Set a user's role directly.

        Raises:
            NotFound: If the user does not exist
            Forbidden: If an admin tries to change their own role
        """
        if user_id == actor.user_id:
            raise Forbidden("Admins cannot change their own role")
        user = await self.store.get_or_raise(User, user_id, "User")
        old_role = user.role
        updated = await self.store.update_by_id(User, user_id, {"role": role})
        await self.audit.log(
            actor=actor,
            action="USER_ROLE_UPDATED",
            resource_type="user",
            resource_id=user_id,
            old_value={"role": old_role.value},
            new_value={"role": role.value},
        )
        logger.info("User %s role %s -> %s by admin %s", user_id, old_role.value, role.value, actor.user_id)
        return updated

    async def update_user_status(self, user_id: int, status: UserStatus, actor: Actor) -> User:
        if user_id == actor.user_id:
            raise Forbidden("Admins cannot change their own status")
        user = await self.store.get_or_raise(User, user_id, "User")
        old_status = user.status
        updated = await self.store.update_by_id(User, user_id, {"status": status})
        await self.audit.log_status_changed(
            actor, "user", user_id, old_status.value, status.value, action="USER_STATUS_UPDATED"
        )
        return updated

    async def create_requirement(self, data: RequirementCreate, actor: Actor) -> Requirement:
        requirement = await self.store.create(
            Requirement(**data.model_dump(), created_by=actor.user_id)
        )
        await self.audit.log(
            actor=actor,
            action="REQUIREMENT_CREATED",
            resource_type="requirement",
            resource_id=requirement.id,
            new_value={"title": requirement.title},
        )
        return requirement

    async def update_requirement(
        self, requirement_id: int, data: RequirementUpdate, actor: Actor
    ) -> Requirement:
        """Edit a requirement. Setting ``is_active`` false closes it to new submissions."""
        requirement = await self.store.get_or_raise(Requirement, requirement_id, "Requirement")
        patch = data.model_dump(exclude_unset=True)
        if "title" in patch and not (patch["title"] or "").strip():
            raise ValidationError("Title cannot be empty")
        if "is_active" in patch and patch["is_active"] is None:
            raise ValidationError("is_active must be true or false")
        if not patch:
            return requirement
        old_value = {name: getattr(requirement, name) for name in patch}
        updated = await self.store.update_by_id(Requirement, requirement_id, patch)
        await self.audit.log(
            actor=actor,
            action="REQUIREMENT_UPDATED",
            resource_type="requirement",
            resource_id=requirement_id,
            old_value=old_value,
            new_value=patch,
        )
        return updated

    async def delete_requirement(self, requirement_id: int, actor: Actor) -> DeleteResponse:
        """Delete a requirement that no submission was filed against.

        Raises:
            NotFound: If the requirement does not exist
            CannotDelete: If submissions still reference it
        """
        requirement = await self.store.get_or_raise(Requirement, requirement_id, "Requirement")
        linked = await self.store.count(Submission, Submission.requirement_id == requirement_id)
        if linked:
            raise CannotDelete(
                f"Requirement has {linked} submission(s); deactivate it instead"
            )
        if not await self.store.delete_by_id(Requirement, requirement_id):
            raise NotFound("Requirement not found")
        await self.audit.log(
            actor=actor,
            action="REQUIREMENT_DELETED",
            resource_type="requirement",
            resource_id=requirement_id,
            old_value={"title": requirement.title},
        )
        logger.info("Requirement %s deleted by admin %s", requirement_id, actor.user_id)
        return DeleteResponse(deleted_id=requirement_id)

    async def list_requirements(self, active_only: bool = True) -> list[Requirement]:
        where = [Requirement.is_active.is_(True)] if active_only else []
        return await self.store.find(
            Requirement, *where, order_by=(Requirement.created_at.desc(),)
        )

    async def list_audit_logs(
        self,
        resource_type: str | None = None,
        resource_id: int | None = None,
        action: str | None = None,
        actor_id: int | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLog]:
        """Audit entries, newest first, filtered by any combination of fields."""
        where = []
        if resource_type:
            where.append(AuditLog.resource_type == resource_type)
        if resource_id is not None:
            where.append(AuditLog.resource_id == resource_id)
        if action:
            where.append(AuditLog.action == action)
        if actor_id is not None:
            where.append(AuditLog.actor_id == actor_id)
        return await self.store.find(
            AuditLog,
            *where,
            order_by=(AuditLog.timestamp.desc(), AuditLog.id.desc()),
            skip=skip,
            limit=limit,
        )
