"""Unit tests for websocket channel membership."""

import pytest

from pressroom.core.security import create_access_token
from pressroom.models import User, UserRole
from pressroom.routers.websocket import authenticate_websocket, channels_for


def make_user(user_id: int, role: UserRole) -> User:
    return User(id=user_id, email=f"u{user_id}@pressroom.org", hashed_password="x", role=role)


class TestChannelsFor:
    def test_regular_user_joins_private_channel(self):
        assert channels_for(make_user(5, UserRole.EDITOR)) == ["user:5"]

    def test_admin_also_joins_dashboard(self):
        assert channels_for(make_user(1, UserRole.ADMIN)) == ["user:1", "admin:dashboard"]


@pytest.mark.asyncio
class TestAuthenticateWebsocket:
    async def test_bad_token(self):
        assert await authenticate_websocket("not-a-token") is None

    async def test_token_without_numeric_subject(self):
        assert await authenticate_websocket(create_access_token("abc")) is None
