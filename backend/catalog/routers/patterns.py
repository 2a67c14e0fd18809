"""Pattern endpoints."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query

from ..dependencies import get_category_repository, get_pattern_repository, get_unit_of_work
from ..envelopes import ResponseEnvelope
from ..messages import MessageKey
from ..repositories.categories import CategoryRepository
from ..repositories.patterns import PatternRepository
from ..schemas import PatternCreate, PatternDetail, PatternOut, PatternSummary, PatternUpdate
from ..security import require_write_access
from ..unit_of_work import UnitOfWork
from ..use_cases.patterns import (
    create_pattern_use_case,
    delete_pattern_use_case,
    get_pattern_use_case,
    list_patterns_use_case,
    update_pattern_use_case,
)

router = APIRouter(prefix="/patterns", tags=["patterns"])


@router.post(
    "",
    status_code=201,
    response_model=ResponseEnvelope[PatternOut],
    dependencies=[Depends(require_write_access)],
)
async def create_pattern(
    payload: Optional[PatternCreate] = Body(default=None),
    uow: UnitOfWork = Depends(get_unit_of_work),
    repository: PatternRepository = Depends(get_pattern_repository),
    categories: CategoryRepository = Depends(get_category_repository),
):
    pattern = await create_pattern_use_case(
        uow=uow,
        repository=repository,
        categories=categories,
        request=payload,
    )
    return ResponseEnvelope[PatternOut].ok(pattern, status_code=201, message_key=MessageKey.CREATED)


@router.put(
    "/{pattern_id}",
    response_model=ResponseEnvelope[PatternOut],
    dependencies=[Depends(require_write_access)],
)
async def update_pattern(
    pattern_id: UUID,
    payload: Optional[PatternUpdate] = Body(default=None),
    uow: UnitOfWork = Depends(get_unit_of_work),
    repository: PatternRepository = Depends(get_pattern_repository),
    categories: CategoryRepository = Depends(get_category_repository),
):
    pattern = await update_pattern_use_case(
        uow=uow,
        repository=repository,
        categories=categories,
        pattern_id=pattern_id,
        request=payload,
    )
    return ResponseEnvelope[PatternOut].ok(pattern)


@router.delete(
    "/{pattern_id}",
    response_model=ResponseEnvelope,
    dependencies=[Depends(require_write_access)],
)
async def delete_pattern(
    pattern_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
    repository: PatternRepository = Depends(get_pattern_repository),
):
    await delete_pattern_use_case(uow=uow, repository=repository, pattern_id=pattern_id)
    return ResponseEnvelope.ok()


@router.get("", response_model=ResponseEnvelope[list[PatternSummary]])
async def list_patterns(
    category: Optional[str] = Query(default=None),
    repository: PatternRepository = Depends(get_pattern_repository),
    categories: CategoryRepository = Depends(get_category_repository),
):
    patterns = await list_patterns_use_case(
        repository=repository,
        categories=categories,
        category_slug=category,
    )
    return ResponseEnvelope[list[PatternSummary]].ok(patterns)


@router.get("/{slug}", response_model=ResponseEnvelope[PatternDetail])
async def get_pattern(
    slug: str,
    repository: PatternRepository = Depends(get_pattern_repository),
):
    pattern = await get_pattern_use_case(repository=repository, slug=slug)
    return ResponseEnvelope[PatternDetail].ok(pattern)
