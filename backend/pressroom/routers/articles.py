"""Newsroom article endpoints."""

from fastapi import APIRouter, Query, status

from pressroom.core.deps import AdminActor, CurrentActor, DbSession, NotifierDep
from pressroom.models import (
    Article,
    ArticleCreate,
    ArticleModificationRequest,
    ArticleRead,
    ArticleRejection,
    ArticleUpdate,
)
from pressroom.schemas.workflow import ArticlePage, DeleteResponse
from pressroom.services.article_approval import ArticleWorkflow

router = APIRouter(prefix="/articles")


@router.get("", response_model=ArticlePage)
async def list_published_articles(
    session: DbSession,
    notifier: NotifierDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> ArticlePage:
    """Published articles, newest first. Public."""
    items, total = await ArticleWorkflow(session, notifier).list_published(skip, limit)
    return ArticlePage(items=[ArticleRead.model_validate(a) for a in items], total=total)


@router.post("", response_model=ArticleRead, status_code=status.HTTP_201_CREATED)
async def create_article(
    data: ArticleCreate,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Article:
    return await ArticleWorkflow(session, notifier).create(actor, data)


@router.get("/mine", response_model=list[ArticleRead])
async def my_articles(actor: CurrentActor, session: DbSession, notifier: NotifierDep) -> list[Article]:
    return await ArticleWorkflow(session, notifier).list_for_author(actor)


@router.get("/pending", response_model=list[ArticleRead])
async def list_pending_articles(
    actor: AdminActor,
    session: DbSession,
    notifier: NotifierDep,
) -> list[Article]:
    """Articles waiting for an approval decision, oldest first."""
    return await ArticleWorkflow(session, notifier).list_pending()


@router.get("/{article_id}", response_model=ArticleRead)
async def get_article(
    article_id: int,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Article:
    return await ArticleWorkflow(session, notifier).get(article_id)


@router.patch("/{article_id}", response_model=ArticleRead)
async def update_article(
    article_id: int,
    data: ArticleUpdate,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Article:
    """Edit an article. Editing after a modification request resubmits it."""
    return await ArticleWorkflow(session, notifier).update(article_id, actor, data)


@router.delete("/{article_id}", response_model=DeleteResponse)
async def delete_article(
    article_id: int,
    actor: CurrentActor,
    session: DbSession,
    notifier: NotifierDep,
) -> DeleteResponse:
    return await ArticleWorkflow(session, notifier).delete(article_id, actor)


@router.post("/{article_id}/approve", response_model=ArticleRead)
async def approve_article(
    article_id: int,
    actor: AdminActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Article:
    return await ArticleWorkflow(session, notifier).approve(article_id, actor)


@router.post("/{article_id}/reject", response_model=ArticleRead)
async def reject_article(
    article_id: int,
    data: ArticleRejection,
    actor: AdminActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Article:
    return await ArticleWorkflow(session, notifier).reject(article_id, actor, data.reason)


@router.post("/{article_id}/request-modification", response_model=ArticleRead)
async def request_modification(
    article_id: int,
    data: ArticleModificationRequest,
    actor: AdminActor,
    session: DbSession,
    notifier: NotifierDep,
) -> Article:
    return await ArticleWorkflow(session, notifier).request_modification(
        article_id, actor, data.modification_notes
    )
