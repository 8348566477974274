"""WebSocket endpoint for real-time workflow events."""

import asyncio
import logging
from datetime import datetime

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from pressroom.core.database import get_session
from pressroom.core.security import decode_token
from pressroom.models import User, UserRole, UserStatus
from pressroom.services.notifier import ADMIN_CHANNEL, hub, user_channel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws")

KEEPALIVE_SECONDS = 30.0


async def authenticate_websocket(token: str) -> User | None:
    """Resolve the ``token`` query parameter into an active user."""
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        return None
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    async for session in get_session():
        user = await session.get(User, user_id)
        if user is None or user.status != UserStatus.ACTIVE:
            return None
        return user
    return None


def channels_for(user: User) -> list[str]:
    channels = [user_channel(user.id)]
    if user.role == UserRole.ADMIN:
        channels.append(ADMIN_CHANNEL)
    return channels


@router.websocket("/events")
async def workflow_events(websocket: WebSocket, token: str = Query(...)):
    """Stream assignment, review and role events for the connected user."""
    user = await authenticate_websocket(token)
    if not user:
        await websocket.close(code=4001, reason="Unauthorized")
        return

    channels = channels_for(user)
    await hub.connect(websocket, channels)
    logger.info("User %s joined %s", user.id, ", ".join(channels))

    try:
        await websocket.send_json({"type": "connected", "channels": channels})

        # Keep connection alive and handle pings
        while True:
            try:
                data = await asyncio.wait_for(websocket.receive_json(), timeout=KEEPALIVE_SECONDS)
                if data.get("type") == "ping":
                    await websocket.send_json(
                        {"type": "pong", "timestamp": datetime.utcnow().isoformat()}
                    )
            except asyncio.TimeoutError:
                await websocket.send_json({"type": "keepalive"})
    except WebSocketDisconnect:
        logger.info("Events websocket disconnected for user %s", user.id)
    finally:
        hub.disconnect(websocket)
