"""Pytest configuration and fixtures."""

from typing import Any, AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from pressroom.main import app
from pressroom.core.database import get_session
from pressroom.core.security import create_access_token, get_password_hash
from pressroom.models import Requirement, User, UserRole
from pressroom.services.notifier import Notifier, get_notifier


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingNotifier(Notifier):
    """Notifier that records every email and event instead of delivering it."""

    def __init__(self):
        self.emails: list[dict[str, str]] = []
        self.events: list[dict[str, Any]] = []

    async def send_email(self, to: str, subject: str, html: str) -> None:
        self.emails.append({"to": to, "subject": subject, "html": html})

    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        self.events.append({"channel": channel, "event": event, "payload": payload})

    def events_named(self, event: str) -> list[dict[str, Any]]:
        return [e for e in self.events if e["event"] == event]


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def client(test_session, notifier) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with overridden dependencies."""

    async def override_get_session():
        yield test_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_user(session: AsyncSession, email: str, role: UserRole, password: str = "secret123") -> User:
    """Insert a user directly."""
    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        full_name=email.split("@")[0].title(),
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture(scope="function")
async def admin_user(test_session) -> User:
    return await create_user(test_session, "admin@pressroom.org", UserRole.ADMIN, "admin123")


@pytest_asyncio.fixture(scope="function")
async def chief_user(test_session) -> User:
    return await create_user(test_session, "chief@pressroom.org", UserRole.CHIEF_EDITOR)


@pytest_asyncio.fixture(scope="function")
async def author_user(test_session) -> User:
    return await create_user(test_session, "author@pressroom.org", UserRole.USER, "author123")


@pytest_asyncio.fixture(scope="function")
async def editors(test_session) -> list[User]:
    """Three editors, in ascending id order."""
    return [
        await create_user(test_session, f"editor{i}@pressroom.org", UserRole.EDITOR)
        for i in range(1, 4)
    ]


@pytest_asyncio.fixture(scope="function")
async def requirement(test_session, admin_user) -> Requirement:
    """An open call for submissions."""
    req = Requirement(title="Transit-oriented development", topic="Mobility", created_by=admin_user.id)
    test_session.add(req)
    await test_session.commit()
    await test_session.refresh(req)
    return req


@pytest_asyncio.fixture(scope="function")
async def admin_token(admin_user) -> str:
    return token_for(admin_user)


@pytest_asyncio.fixture(scope="function")
async def chief_token(chief_user) -> str:
    return token_for(chief_user)


@pytest_asyncio.fixture(scope="function")
async def author_token(author_user) -> str:
    return token_for(author_user)


def token_for(user: User) -> str:
    """Issue an access token for a user without going through login."""
    return create_access_token(user.id)


def auth_headers(token: str) -> dict:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {token}"}


async def submit_manuscript(client: AsyncClient, token: str, requirement_id: int, title: str = "Streets for people") -> dict:
    """Submit a manuscript through the API and return its JSON."""
    response = await client.post(
        "/api/v1/submissions",
        json={
            "title": title,
            "abstract": "A study of pedestrian-first street design.",
            "kind": "manuscript",
            "requirement_id": requirement_id,
        },
        headers=auth_headers(token),
    )
    assert response.status_code == 201, response.text
    return response.json()
