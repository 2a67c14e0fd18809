"""Per-request unit of work and repositories."""
from collections.abc import AsyncIterator

from fastapi import Depends, Request

from .repositories.categories import CategoryRepository, SqlAlchemyCategoryRepository
from .repositories.patterns import PatternRepository, SqlAlchemyPatternRepository
from .unit_of_work import UnitOfWork


async def get_unit_of_work(request: Request) -> AsyncIterator[UnitOfWork]:
    """One unit of work per request; disposed when the request ends."""
    async with UnitOfWork(request.app.state.session_factory) as uow:
        yield uow


def get_pattern_repository(uow: UnitOfWork = Depends(get_unit_of_work)) -> PatternRepository:
    return SqlAlchemyPatternRepository(uow)


def get_category_repository(uow: UnitOfWork = Depends(get_unit_of_work)) -> CategoryRepository:
    return SqlAlchemyCategoryRepository(uow)
