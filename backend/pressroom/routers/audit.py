"""Audit log endpoints."""

from fastapi import APIRouter, Query

from pressroom.core.deps import AdminActor, DbSession
from pressroom.models import AuditLog, AuditLogRead
from pressroom.services.accounts import AccountService

router = APIRouter(prefix="/audit")


@router.get("", response_model=list[AuditLogRead])
async def list_audit_logs(
    actor: AdminActor,
    session: DbSession,
    actor_id: int | None = None,
    action: str | None = None,
    resource_type: str | None = None,
    resource_id: int | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
) -> list[AuditLog]:
    """List audit logs with filters (Admin only)."""
    return await AccountService(session).list_audit_logs(
        resource_type=resource_type,
        resource_id=resource_id,
        action=action,
        actor_id=actor_id,
        skip=skip,
        limit=limit,
    )


@router.get("/resource/{resource_type}/{resource_id}", response_model=list[AuditLogRead])
async def get_resource_audit(
    resource_type: str,
    resource_id: int,
    actor: AdminActor,
    session: DbSession,
) -> list[AuditLog]:
    """Full decision trail for one entity."""
    return await AccountService(session).list_audit_logs(
        resource_type=resource_type, resource_id=resource_id, limit=500
    )
