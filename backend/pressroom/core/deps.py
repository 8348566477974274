"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.core.config import get_settings
from pressroom.core.database import get_session
from pressroom.core.security import decode_token
from pressroom.models import User, UserRole, UserStatus
from pressroom.schemas.auth import Actor
from pressroom.services.notifier import Notifier, get_notifier

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/login")

DbSession = Annotated[AsyncSession, Depends(get_session)]
NotifierDep = Annotated[Notifier, Depends(get_notifier)]


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: DbSession,
) -> User:
    """Resolve the bearer token into an active user."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        raise credentials_exception

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception

    user = await session.get(User, user_id, populate_existing=True)
    if user is None:
        raise credentials_exception
    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is not active",
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def get_current_actor(user: CurrentUser) -> Actor:
    return Actor(user_id=user.id, role=user.role, email=user.email)


CurrentActor = Annotated[Actor, Depends(get_current_actor)]


def require_roles(*roles: UserRole):
    """Build a dependency that admits only the given roles."""

    async def checker(actor: CurrentActor) -> Actor:
        if actor.role not in roles:
            allowed = ", ".join(r.value for r in roles)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of: {allowed}",
            )
        return actor

    return checker


AdminActor = Annotated[Actor, Depends(require_roles(UserRole.ADMIN))]
ChiefEditorActor = Annotated[Actor, Depends(require_roles(UserRole.CHIEF_EDITOR))]
SupervisorActor = Annotated[
    Actor, Depends(require_roles(UserRole.CHIEF_EDITOR, UserRole.ADMIN))
]
ReviewerActor = Annotated[
    Actor, Depends(require_roles(UserRole.EDITOR, UserRole.CHIEF_EDITOR, UserRole.ADMIN))
]
EditorActor = Annotated[Actor, Depends(require_roles(UserRole.EDITOR))]
