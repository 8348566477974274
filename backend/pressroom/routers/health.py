"""Health check endpoint."""

from fastapi import APIRouter

from pressroom.services.notifier import hub

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Return service health status."""
    return {
        "status": "healthy",
        "service": "pressroom",
        "version": "0.1.0",
        "realtime_channels": len(hub.channels),
    }
