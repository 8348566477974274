"""Authentication endpoints."""

from datetime import datetime

from fastapi import APIRouter, HTTPException, status
from sqlmodel import select

from pressroom.core.deps import CurrentUser, DbSession
from pressroom.core.security import create_access_token, get_password_hash, verify_password
from pressroom.models import User, UserCreate, UserRead, UserRole, UserStatus
from pressroom.schemas.auth import LoginRequest, TokenResponse, UserResponse

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, session: DbSession) -> TokenResponse:
    """Authenticate user and return access token."""
    result = await session.execute(select(User).where(User.email == request.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(request.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    if user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"User account is {user.status.value}",
        )

    # Update last login
    user.last_login = datetime.utcnow()
    session.add(user)
    await session.commit()

    return TokenResponse(access_token=create_access_token(user.id))


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: CurrentUser) -> UserResponse:
    """Get current user information."""
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        role=current_user.role.value,
        status=current_user.status.value,
    )


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate, session: DbSession) -> User:
    """Register a new account. Elevated roles are only reachable via role requests."""
    result = await session.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = User(
        email=user_data.email,
        full_name=user_data.full_name,
        hashed_password=get_password_hash(user_data.password),
        role=UserRole.USER,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)

    return user
