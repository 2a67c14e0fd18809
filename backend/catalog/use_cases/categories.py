"""Category use-cases."""
from __future__ import annotations

from typing import Optional

from ..domain_errors import domain_rule
from ..messages import MessageKey
from ..models import Category
from ..repositories.categories import CategoryRepository
from ..schemas import CategoryCreate, CategoryOut
from ..services.mapping import category_from_create, to_category_out
from ..services.validation import validate_category_request
from ..unit_of_work import UnitOfWork
from .orchestration import WriteOperation


async def create_category_use_case(
    *,
    uow: UnitOfWork,
    repository: CategoryRepository,
    request: Optional[CategoryCreate],
) -> CategoryOut:
    async def _persist(category: Category) -> Category:
        if await repository.get_by_slug(category.slug) is not None:
            raise domain_rule(
                MessageKey.SLUG_ALREADY_EXISTS,
                f"Slug '{category.slug}' is already in use.",
                http_status=409,
                code="SLUG_ALREADY_EXISTS",
            )
        await repository.add(category)
        return category

    operation = WriteOperation(
        "create_category",
        uow=uow,
        validate=validate_category_request,
        transform=category_from_create,
        mutate=_persist,
    )
    category = await operation.execute(request)
    return to_category_out(category)


async def list_categories_use_case(*, repository: CategoryRepository) -> list[CategoryOut]:
    return [to_category_out(category) for category in await repository.list_all()]
