"""Repository port and the shared SQLAlchemy implementation.

Repositories only stage changes on the unit-of-work session; flushing and
committing belong to the use-case. A missing row is reported as ``None``;
the only failures raised here are infrastructure failures.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError

from ..domain_errors import infrastructure_error
from ..unit_of_work import UnitOfWork

ModelT = TypeVar("ModelT")


class Repository(ABC, Generic[ModelT]):
    """Port consumed by use-cases."""

    @abstractmethod
    async def add(self, entity: ModelT) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update(self, entity: ModelT) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, entity: ModelT) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get(self, key: UUID) -> Optional[ModelT]:
        raise NotImplementedError

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[ModelT]:
        raise NotImplementedError


class SqlAlchemyRepository(Repository[ModelT]):
    """Generic implementation over ``UnitOfWork.session``."""

    model: type[ModelT]

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def add(self, entity: ModelT) -> None:
        try:
            self._uow.session.add(entity)
        except SQLAlchemyError as exc:
            raise infrastructure_error(exc) from exc

    async def update(self, entity: ModelT) -> None:
        # Loaded entities are already tracked; add() re-attaches detached ones.
        await self.add(entity)

    async def delete(self, entity: ModelT) -> None:
        try:
            await self._uow.session.delete(entity)
        except SQLAlchemyError as exc:
            raise infrastructure_error(exc) from exc

    async def get(self, key: UUID) -> Optional[ModelT]:
        return await self._first(select(self.model).where(self.model.id == key))

    async def get_by_slug(self, slug: str) -> Optional[ModelT]:
        return await self._first(select(self.model).where(self.model.slug == slug))

    async def _first(self, statement: Select[Any]) -> Optional[ModelT]:
        result = await self._execute(statement)
        return result.scalars().first()

    async def _all(self, statement: Select[Any]) -> list[ModelT]:
        result = await self._execute(statement)
        return list(result.scalars().all())

    async def _execute(self, statement: Select[Any]):
        try:
            return await self._uow.session.execute(statement)
        except SQLAlchemyError as exc:
            raise infrastructure_error(exc) from exc
