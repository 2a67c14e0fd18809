"""Category persistence."""
from __future__ import annotations

from abc import abstractmethod

from sqlalchemy import select

from ..models import Category
from .base import Repository, SqlAlchemyRepository


class CategoryRepository(Repository[Category]):
    @abstractmethod
    async def list_all(self) -> list[Category]:
        raise NotImplementedError


class SqlAlchemyCategoryRepository(SqlAlchemyRepository[Category], CategoryRepository):
    model = Category

    async def list_all(self) -> list[Category]:
        return await self._all(select(Category).order_by(Category.name.asc()))
