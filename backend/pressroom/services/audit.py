"""Audit logging service."""

import json
from datetime import datetime
from typing import Any

from pressroom.models import AuditLog
from pressroom.schemas.auth import Actor
from pressroom.services.store import EntityStore


def _dump(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, default=str)


class AuditService:
    """Service for recording workflow transitions."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def log(
        self,
        actor: Actor,
        action: str,
        resource_type: str,
        resource_id: int,
        old_value: Any = None,
        new_value: Any = None,
        partial: bool = False,
    ) -> AuditLog:
        """Log an audit event.

        Args:
            actor: Who performed the action
            action: Action type (e.g., SUBMISSION_REVIEWED, ROLE_APPROVED)
            resource_type: Type of resource (e.g., "submission", "role_request")
            resource_id: ID of the affected resource
            old_value: Previous value (will be JSON serialized)
            new_value: New value (will be JSON serialized)
            partial: True when a cascaded second write did not land

        Returns:
            Created AuditLog entry
        """
        entry = AuditLog(
            timestamp=datetime.utcnow(),
            actor_id=actor.user_id,
            actor_role=actor.role.value,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_value=_dump(old_value),
            new_value=_dump(new_value),
            partial=partial,
        )
        return await self.store.create(entry)

    async def log_status_changed(
        self,
        actor: Actor,
        resource_type: str,
        resource_id: int,
        old_status: str,
        new_status: str,
        action: str = "STATUS_CHANGED",
        **extra: Any,
    ) -> AuditLog:
        """Log a state-machine transition."""
        return await self.log(
            actor=actor,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_value={"status": old_status},
            new_value={"status": new_status, **extra},
        )
