"""Article approval workflow.

draft -> pending -> approved (published) | rejected | needsModification

``approve`` flips status, approval status, the published flag and the
publish date in a single write. Editing an article that was sent back for
modification resubmits it.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.core.exceptions import Forbidden
from pressroom.models import (
    DEFAULT_REJECTION_REASON,
    ApprovalStatus,
    Article,
    ArticleCreate,
    ArticleStatus,
    ArticleUpdate,
    UserRole,
)
from pressroom.schemas.auth import Actor
from pressroom.schemas.workflow import DeleteResponse
from pressroom.services.audit import AuditService
from pressroom.services.notifier import Notifier, user_channel
from pressroom.services.store import EntityStore

logger = logging.getLogger(__name__)


class ArticleWorkflow:
    """Author and admin operations on newsroom articles."""

    def __init__(self, session: AsyncSession, notifier: Notifier):
        self.store = EntityStore(session)
        self.audit = AuditService(self.store)
        self.notifier = notifier

    async def create(self, actor: Actor, data: ArticleCreate) -> Article:
        """Create a draft, or submit it for review straight away."""
        status = ArticleStatus.PENDING if data.submit else ArticleStatus.DRAFT
        article = await self.store.create(
            Article(
                title=data.title or "Untitled Draft",
                excerpt=data.excerpt or "No excerpt provided",
                content=data.content or "<p>No content yet</p>",
                category=data.category or "Urban Planning",
                author_id=actor.user_id,
                status=status,
                approval_status=ApprovalStatus.PENDING,
            )
        )
        await self.audit.log(
            actor=actor,
            action="ARTICLE_CREATED",
            resource_type="article",
            resource_id=article.id,
            new_value={"status": status.value},
        )
        return article

    async def get(self, article_id: int) -> Article:
        return await self.store.get_or_raise(Article, article_id, "Article")

    async def update(self, article_id: int, actor: Actor, data: ArticleUpdate) -> Article:
        """Edit an article.

        An article sent back for modification goes back to the review queue
        in the same write as the edit.

        Raises:
            NotFound: If the article does not exist
            Forbidden: If the actor is neither the author nor an admin
        """
        article = await self._get_owned(article_id, actor)

        patch = data.model_dump(exclude_unset=True, exclude_none=True)
        resubmitted = article.approval_status == ApprovalStatus.NEEDS_MODIFICATION
        if resubmitted:
            patch.update(
                approval_status=ApprovalStatus.PENDING,
                status=ArticleStatus.PENDING,
                is_published=False,
                modification_notes=None,
            )

        updated = await self.store.update_by_id(
            Article, article_id, patch, expected={"version": article.version}
        )
        if resubmitted:
            await self.audit.log_status_changed(
                actor,
                "article",
                article_id,
                ApprovalStatus.NEEDS_MODIFICATION.value,
                ApprovalStatus.PENDING.value,
                action="ARTICLE_RESUBMITTED",
            )
            logger.info("Article %s resubmitted after modification", article_id)
        return updated

    async def approve(self, article_id: int, actor: Actor) -> Article:
        """Publish an article. Returns the entity with all publish fields set."""
        article = await self.get(article_id)
        now = datetime.utcnow()
        updated = await self.store.update_by_id(
            Article,
            article_id,
            {
                "status": ArticleStatus.PUBLISHED,
                "approval_status": ApprovalStatus.APPROVED,
                "is_published": True,
                "published_at": now,
                "reviewed_by": actor.user_id,
                "reviewed_at": now,
            },
            expected={"version": article.version},
        )
        await self._record_review(updated, actor, article.status, "ARTICLE_APPROVED")
        return updated

    async def reject(self, article_id: int, actor: Actor, reason: str | None = None) -> Article:
        """Send an article back to draft with a rejection reason."""
        article = await self.get(article_id)
        updated = await self.store.update_by_id(
            Article,
            article_id,
            {
                "status": ArticleStatus.DRAFT,
                "approval_status": ApprovalStatus.REJECTED,
                "is_published": False,
                "rejection_reason": reason or DEFAULT_REJECTION_REASON,
                "reviewed_by": actor.user_id,
                "reviewed_at": datetime.utcnow(),
            },
            expected={"version": article.version},
        )
        await self._record_review(updated, actor, article.status, "ARTICLE_REJECTED")
        return updated

    async def request_modification(
        self, article_id: int, actor: Actor, notes: str
    ) -> Article:
        """Ask the author for changes; the next edit resubmits the article."""
        article = await self.get(article_id)
        updated = await self.store.update_by_id(
            Article,
            article_id,
            {
                "approval_status": ApprovalStatus.NEEDS_MODIFICATION,
                "is_published": False,
                "modification_notes": notes,
                "reviewed_by": actor.user_id,
                "reviewed_at": datetime.utcnow(),
            },
            expected={"version": article.version},
        )
        await self._record_review(updated, actor, article.status, "ARTICLE_MODIFICATION_REQUESTED")
        return updated

    async def delete(self, article_id: int, actor: Actor) -> DeleteResponse:
        article = await self._get_owned(article_id, actor)
        await self.store.delete_by_id(Article, article_id)
        await self.audit.log(
            actor=actor,
            action="ARTICLE_DELETED",
            resource_type="article",
            resource_id=article_id,
            old_value={"status": article.status.value, "title": article.title},
        )
        return DeleteResponse(deleted_id=article_id, status=article.status.value)

    async def list_pending(self) -> list[Article]:
        return await self.store.find(
            Article,
            Article.status == ArticleStatus.PENDING,
            Article.approval_status == ApprovalStatus.PENDING,
            order_by=(Article.created_at.asc(), Article.id.asc()),
        )

    async def list_published(self, skip: int = 0, limit: int = 20) -> tuple[list[Article], int]:
        where = (Article.is_published.is_(True),)
        items = await self.store.find(
            Article, *where, order_by=(Article.published_at.desc(),), skip=skip, limit=limit
        )
        return items, await self.store.count(Article, *where)

    async def list_for_author(self, actor: Actor) -> list[Article]:
        return await self.store.find(
            Article,
            Article.author_id == actor.user_id,
            order_by=(Article.updated_at.desc(),),
        )

    async def _get_owned(self, article_id: int, actor: Actor) -> Article:
        article = await self.get(article_id)
        if article.author_id != actor.user_id and actor.role != UserRole.ADMIN:
            raise Forbidden("Only the author or an admin can modify this article")
        return article

    async def _record_review(
        self, article: Article, actor: Actor, old_status: ArticleStatus, action: str
    ) -> None:
        await self.audit.log(
            actor=actor,
            action=action,
            resource_type="article",
            resource_id=article.id,
            old_value={"status": old_status.value},
            new_value={
                "status": article.status.value,
                "approval_status": article.approval_status.value,
            },
        )
        logger.info(
            "Article %s %s by %s", article.id, article.approval_status.value, actor.user_id
        )
        await self.notifier.publish(
            user_channel(article.author_id),
            "article:reviewed",
            {
                "article_id": article.id,
                "title": article.title,
                "approval_status": article.approval_status.value,
                "status": article.status.value,
            },
        )
