"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from pressroom.core.config import get_settings
from pressroom.core.database import init_db
from pressroom.core.exceptions import WorkflowError
from pressroom.routers import (
    admin,
    articles,
    audit,
    auth,
    chief_editor,
    editor,
    health,
    role_requests,
    submissions,
    websocket,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan events."""
    await init_db()
    logger.info("%s started", settings.app_name)
    yield


app = FastAPI(
    title=settings.app_name,
    description="Editorial assignment and review workflow for submissions, role requests and articles",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    """Render any domain error as ``{"kind", "detail"}`` with its mapped status."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"kind": exc.kind, "detail": exc.message},
    )


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=settings.api_v1_prefix, tags=["auth"])
app.include_router(submissions.router, prefix=settings.api_v1_prefix, tags=["submissions"])
app.include_router(chief_editor.router, prefix=settings.api_v1_prefix, tags=["chief-editor"])
app.include_router(editor.router, prefix=settings.api_v1_prefix, tags=["editor"])
app.include_router(role_requests.router, prefix=settings.api_v1_prefix, tags=["role-requests"])
app.include_router(admin.router, prefix=settings.api_v1_prefix, tags=["admin"])
app.include_router(articles.router, prefix=settings.api_v1_prefix, tags=["articles"])
app.include_router(audit.router, prefix=settings.api_v1_prefix, tags=["audit"])
app.include_router(websocket.router, prefix=settings.api_v1_prefix, tags=["websocket"])
