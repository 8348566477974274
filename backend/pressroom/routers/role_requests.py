"""User-side role request endpoints."""

from fastapi import APIRouter, status

from pressroom.core.deps import CurrentActor, DbSession, NotifierDep
from pressroom.models import RoleRequest, RoleRequestCreate, RoleRequestRead
from pressroom.services.role_escalation import RoleEscalationWorkflow

router = APIRouter(prefix="/role-requests")


@router.post("", response_model=RoleRequestRead, status_code=status.HTTP_201_CREATED)
async def submit_role_request(
    data: RoleRequestCreate,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> RoleRequest:
    """Ask an admin for a higher-privilege role."""
    return await RoleEscalationWorkflow(session, notifier).submit(
        actor, data.requested_role, data.reason
    )


@router.get("/mine", response_model=list[RoleRequestRead])
async def my_role_requests(
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> list[RoleRequest]:
    return await RoleEscalationWorkflow(session, notifier).my_requests(actor)
