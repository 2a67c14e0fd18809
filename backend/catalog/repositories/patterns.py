"""Pattern persistence."""
from __future__ import annotations

from abc import abstractmethod
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ..models import Category, Pattern
from .base import Repository, SqlAlchemyRepository


class PatternRepository(Repository[Pattern]):
    @abstractmethod
    async def get_detail(self, slug: str) -> Optional[Pattern]:
        """Pattern by slug with its category loaded."""
        raise NotImplementedError

    @abstractmethod
    async def list_all(self, *, category_slug: str | None = None) -> list[Pattern]:
        raise NotImplementedError

    @abstractmethod
    async def slug_taken(self, slug: str, *, exclude_id: UUID | None = None) -> bool:
        raise NotImplementedError


class SqlAlchemyPatternRepository(SqlAlchemyRepository[Pattern], PatternRepository):
    model = Pattern

    async def get_detail(self, slug: str) -> Optional[Pattern]:
        return await self._first(
            select(Pattern).options(selectinload(Pattern.category)).where(Pattern.slug == slug)
        )

    async def list_all(self, *, category_slug: str | None = None) -> list[Pattern]:
        statement = select(Pattern).order_by(Pattern.name.asc(), Pattern.slug.asc())
        if category_slug is not None:
            statement = statement.join(Category, Pattern.category_id == Category.id).where(
                Category.slug == category_slug
            )
        return await self._all(statement)

    async def slug_taken(self, slug: str, *, exclude_id: UUID | None = None) -> bool:
        statement = select(Pattern).where(Pattern.slug == slug)
        if exclude_id is not None:
            statement = statement.where(Pattern.id != exclude_id)
        return await self._first(statement.limit(1)) is not None
