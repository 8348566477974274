"""Entity store over an async SQLModel session.

All workflow services read and write through this class, so persistence
failures surface uniformly as StoreUnavailable and every update can be made
conditional on the state the caller last observed.
"""

import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from pressroom.core.exceptions import NotFound, StaleWrite, StoreUnavailable, WorkflowError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=SQLModel)
R = TypeVar("R")


class EntityStore:
    """Generic document-style access to table models."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as e:
            logger.exception("Entity store %s failed", operation)
            await self.session.rollback()
            raise StoreUnavailable(f"Entity store unavailable during {operation}") from e

    async def get(self, model: type[T], entity_id: int) -> T | None:
        """Fetch one entity by primary key, always re-reading the row."""
        async with self._guard("get"):
            return await self.session.get(model, entity_id, populate_existing=True)

    async def get_or_raise(self, model: type[T], entity_id: int, label: str | None = None) -> T:
        """Fetch one entity or raise NotFound."""
        entity = await self.get(model, entity_id)
        if entity is None:
            raise NotFound(f"{label or model.__name__} not found")
        return entity

    async def find(
        self,
        model: type[T],
        *where: Any,
        order_by: tuple = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[T]:
        """Find entities matching all ``where`` clauses."""
        query = select(model).where(*where).order_by(*order_by).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        async with self._guard("find"):
            result = await self.session.execute(query)
            return list(result.scalars().all())

    async def find_one(self, model: type[T], *where: Any) -> T | None:
        rows = await self.find(model, *where, limit=1)
        return rows[0] if rows else None

    async def count(self, model: type[T], *where: Any) -> int:
        query = select(func.count()).select_from(model).where(*where)
        async with self._guard("count"):
            result = await self.session.execute(query)
            return result.scalar_one()

    async def aggregate_count_by_field(
        self, model: type[T], field_name: str, *where: Any
    ) -> dict[Any, int]:
        """Count entities grouped by one column.

        Returns:
            Mapping of column value (enum values unwrapped) to count
        """
        column = getattr(model, field_name)
        query = select(column, func.count()).select_from(model).where(*where).group_by(column)
        async with self._guard("aggregate"):
            result = await self.session.execute(query)
            rows = result.all()
        return {
            (key.value if isinstance(key, Enum) else key): count for key, count in rows
        }

    async def create(self, entity: T) -> T:
        async with self._guard("create"):
            self.session.add(entity)
            await self.session.commit()
            await self.session.refresh(entity)
        return entity

    async def update_by_id(
        self,
        model: type[T],
        entity_id: int,
        patch: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> T:
        """Apply ``patch`` in one UPDATE, optionally guarded by ``expected``.

        Each ``expected`` field must still hold the given value for the row to
        be written. Versioned models get their ``version`` bumped.

        Raises:
            NotFound: If the entity does not exist
            StaleWrite: If the entity exists but no longer matches ``expected``
        """
        values = dict(patch)
        fields = model.model_fields
        if "updated_at" in fields:
            values.setdefault("updated_at", datetime.utcnow())
        if "version" in fields:
            values["version"] = model.version + 1

        stmt = update(model).where(model.id == entity_id)
        for name, value in (expected or {}).items():
            column = getattr(model, name)
            stmt = stmt.where(column.is_(None) if value is None else column == value)
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        async with self._guard("update"):
            result = await self.session.execute(stmt)
            await self.session.commit()

        if result.rowcount == 0:
            if await self.get(model, entity_id) is None:
                raise NotFound(f"{model.__name__} not found")
            raise StaleWrite(
                f"{model.__name__} {entity_id} was modified concurrently; reload and retry"
            )
        return await self.get_or_raise(model, entity_id)

    async def delete_by_id(self, model: type[T], entity_id: int) -> bool:
        entity = await self.get(model, entity_id)
        if entity is None:
            return False
        async with self._guard("delete"):
            await self.session.delete(entity)
            await self.session.commit()
        return True


@dataclass
class CascadeOutcome(Generic[R]):
    """Result of a two-write cascade.

    ``partial`` is set when the primary write landed but the follow-up did not.
    """

    result: R
    partial: bool = False
    error: str | None = None


async def run_cascade(
    primary: Callable[[], Awaitable[R]],
    secondary: Callable[[], Awaitable[Any]],
    description: str,
) -> CascadeOutcome[R]:
    """Run two dependent writes without a shared transaction.

    A failing primary propagates. A failing secondary is logged and reported
    as a partial outcome; the primary write is not rolled back.
    """
    result = await primary()
    try:
        await secondary()
    except WorkflowError as e:
        logger.exception("Cascade incomplete: %s (%s)", description, e.kind)
        return CascadeOutcome(result=result, partial=True, error=e.message)
    return CascadeOutcome(result=result)
