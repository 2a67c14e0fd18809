"""Category endpoints."""
from typing import Optional

from fastapi import APIRouter, Body, Depends

from ..dependencies import get_category_repository, get_unit_of_work
from ..envelopes import ResponseEnvelope
from ..messages import MessageKey
from ..repositories.categories import CategoryRepository
from ..schemas import CategoryCreate, CategoryOut
from ..security import require_write_access
from ..unit_of_work import UnitOfWork
from ..use_cases.categories import create_category_use_case, list_categories_use_case

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post(
    "",
    status_code=201,
    response_model=ResponseEnvelope[CategoryOut],
    dependencies=[Depends(require_write_access)],
)
async def create_category(
    payload: Optional[CategoryCreate] = Body(default=None),
    uow: UnitOfWork = Depends(get_unit_of_work),
    repository: CategoryRepository = Depends(get_category_repository),
):
    category = await create_category_use_case(uow=uow, repository=repository, request=payload)
    return ResponseEnvelope[CategoryOut].ok(category, status_code=201, message_key=MessageKey.CREATED)


@router.get("", response_model=ResponseEnvelope[list[CategoryOut]])
async def list_categories(repository: CategoryRepository = Depends(get_category_repository)):
    categories = await list_categories_use_case(repository=repository)
    return ResponseEnvelope[list[CategoryOut]].ok(categories)
