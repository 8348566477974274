"""Admin endpoints: role requests, user management, submissions and requirements."""

from fastapi import APIRouter, Query, status

from pressroom.core.deps import AdminActor, DbSession, NotifierDep, SupervisorActor
from pressroom.models import (
    Requirement,
    RequirementCreate,
    RequirementRead,
    RequirementUpdate,
    RoleRequestDecision,
    RoleRequestRead,
    RoleRequestStatus,
    RoleRevoke,
    User,
    UserRead,
    UserRole,
    UserRoleUpdate,
    UserStatusUpdate,
)
from pressroom.schemas.workflow import (
    DeleteResponse,
    RevokeResponse,
    RoleRequestPage,
    RoleRequestReviewResponse,
)
from pressroom.services.accounts import AccountService
from pressroom.services.role_escalation import RoleEscalationWorkflow
from pressroom.services.submissions import SubmissionService

router = APIRouter(prefix="/admin")


# Role requests


@router.get("/role-requests", response_model=RoleRequestPage)
async def list_role_requests(
    actor: SupervisorActor,
    session: DbSession,
    notifier: NotifierDep,
    status: RoleRequestStatus | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> RoleRequestPage:
    items, total, stats = await RoleEscalationWorkflow(session, notifier).list_requests(
        status=status, skip=skip, limit=limit
    )
    return RoleRequestPage(
        items=[RoleRequestRead.model_validate(r) for r in items],
        total=total,
        skip=skip,
        limit=limit,
        stats=stats,
    )


@router.post("/role-requests/{request_id}/review", response_model=RoleRequestReviewResponse)
async def review_role_request(
    request_id: int,
    data: RoleRequestDecision,
    actor: SupervisorActor,
    session: DbSession,
    notifier: NotifierDep,
) -> RoleRequestReviewResponse:
    """Approve or reject a pending role request."""
    return await RoleEscalationWorkflow(session, notifier).review(
        request_id, actor, data.status, data.admin_notes
    )


@router.delete("/role-requests/{request_id}", response_model=DeleteResponse)
async def delete_role_request(
    request_id: int,
    actor: AdminActor,
    session: DbSession,
    notifier: NotifierDep,
) -> DeleteResponse:
    """Delete a role request. An approved grant must be revoked first."""
    return await RoleEscalationWorkflow(session, notifier).delete(request_id, actor)


@router.post("/users/{user_id}/revoke-role", response_model=RevokeResponse)
async def revoke_role(
    user_id: int,
    data: RoleRevoke,
    actor: AdminActor,
    session: DbSession,
    notifier: NotifierDep,
) -> RevokeResponse:
    return await RoleEscalationWorkflow(session, notifier).revoke_role(
        user_id, data.role_to_revoke, actor
    )


# Users


@router.get("/users", response_model=list[UserRead])
async def list_users(
    actor: AdminActor,
    session: DbSession,
    role: UserRole | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> list[User]:
    items, _ = await AccountService(session).list_users(role=role, skip=skip, limit=limit)
    return items


@router.patch("/users/{user_id}/role", response_model=UserRead)
async def update_user_role(
    user_id: int,
    data: UserRoleUpdate,
    actor: AdminActor,
    session: DbSession,
) -> User:
    return await AccountService(session).update_user_role(user_id, data.role, actor)


@router.patch("/users/{user_id}/status", response_model=UserRead)
async def update_user_status(
    user_id: int,
    data: UserStatusUpdate,
    actor: AdminActor,
    session: DbSession,
) -> User:
    return await AccountService(session).update_user_status(user_id, data.status, actor)


# Submissions and requirements


@router.delete("/submissions/{submission_id}", response_model=DeleteResponse)
async def delete_submission(
    submission_id: int,
    actor: AdminActor,
    session: DbSession,
    notifier: NotifierDep,
) -> DeleteResponse:
    """Delete a submission and decrement its requirement's counter."""
    return await SubmissionService(session, notifier).delete(submission_id, actor)


@router.post("/requirements", response_model=RequirementRead, status_code=status.HTTP_201_CREATED)
async def create_requirement(
    data: RequirementCreate,
    actor: AdminActor,
    session: DbSession,
) -> Requirement:
    return await AccountService(session).create_requirement(data, actor)


@router.get("/requirements", response_model=list[RequirementRead])
async def list_requirements(actor: AdminActor, session: DbSession) -> list[Requirement]:
    return await AccountService(session).list_requirements(active_only=False)


@router.patch("/requirements/{requirement_id}", response_model=RequirementRead)
async def update_requirement(
    requirement_id: int,
    data: RequirementUpdate,
    actor: AdminActor,
    session: DbSession,
) -> Requirement:
    """Edit a requirement, or close it with ``is_active: false``."""
    return await AccountService(session).update_requirement(requirement_id, data, actor)


@router.delete("/requirements/{requirement_id}", response_model=DeleteResponse)
async def delete_requirement(
    requirement_id: int,
    actor: AdminActor,
    session: DbSession,
) -> DeleteResponse:
    return await AccountService(session).delete_requirement(requirement_id, actor)
