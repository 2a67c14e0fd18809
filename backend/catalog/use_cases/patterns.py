"""Pattern catalog use-cases."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from ..domain_errors import DomainError, domain_rule
from ..messages import MessageKey
from ..models import Pattern
from ..repositories.categories import CategoryRepository
from ..repositories.patterns import PatternRepository
from ..schemas import PatternCreate, PatternDetail, PatternOut, PatternSummary, PatternUpdate
from ..services.mapping import (
    apply_pattern_changes,
    pattern_changes,
    pattern_from_create,
    to_pattern_detail,
    to_pattern_out,
    to_pattern_summary,
)
from ..services.validation import validate_pattern_request, validate_slug
from ..unit_of_work import UnitOfWork
from .orchestration import WriteOperation, read_one


def _slug_conflict(slug: str) -> DomainError:
    return domain_rule(
        MessageKey.SLUG_ALREADY_EXISTS,
        f"Slug '{slug}' is already in use.",
        http_status=409,
        code="SLUG_ALREADY_EXISTS",
    )


async def _ensure_category_exists(categories: CategoryRepository, category_id: UUID | None) -> None:
    if category_id is None:
        return
    await read_one(lambda: categories.get(category_id), entity_name="Category", key=category_id)


async def create_pattern_use_case(
    *,
    uow: UnitOfWork,
    repository: PatternRepository,
    categories: CategoryRepository,
    request: Optional[PatternCreate],
) -> PatternOut:
    """Validate and insert a pattern; slugs are unique across the catalog."""

    async def _persist(pattern: Pattern) -> Pattern:
        if await repository.slug_taken(pattern.slug):
            raise _slug_conflict(pattern.slug)
        await _ensure_category_exists(categories, pattern.category_id)
        await repository.add(pattern)
        return pattern

    operation = WriteOperation(
        "create_pattern",
        uow=uow,
        validate=validate_pattern_request,
        transform=pattern_from_create,
        mutate=_persist,
    )
    pattern = await operation.execute(request)
    return to_pattern_out(pattern)


async def update_pattern_use_case(
    *,
    uow: UnitOfWork,
    repository: PatternRepository,
    categories: CategoryRepository,
    pattern_id: UUID,
    request: Optional[PatternUpdate],
) -> PatternOut:
    """Replace every editable field of an existing pattern."""

    async def _persist(changes: dict[str, object]) -> Pattern:
        pattern = await read_one(lambda: repository.get(pattern_id), entity_name="Pattern", key=pattern_id)
        slug = str(changes["slug"])
        if await repository.slug_taken(slug, exclude_id=pattern_id):
            raise _slug_conflict(slug)
        await _ensure_category_exists(categories, changes.get("category_id"))
        apply_pattern_changes(pattern, changes)
        await repository.update(pattern)
        return pattern

    operation = WriteOperation(
        "update_pattern",
        uow=uow,
        validate=validate_pattern_request,
        transform=pattern_changes,
        mutate=_persist,
    )
    pattern = await operation.execute(request)
    return to_pattern_out(pattern)


async def delete_pattern_use_case(
    *,
    uow: UnitOfWork,
    repository: PatternRepository,
    pattern_id: UUID,
) -> None:
    async def _persist(key: UUID) -> None:
        pattern = await read_one(lambda: repository.get(key), entity_name="Pattern", key=key)
        await repository.delete(pattern)

    operation = WriteOperation(
        "delete_pattern",
        uow=uow,
        validate=lambda _key: None,
        transform=lambda key: key,
        mutate=_persist,
    )
    await operation.execute(pattern_id)


async def get_pattern_use_case(*, repository: PatternRepository, slug: str | None) -> PatternDetail:
    validate_slug(slug)
    pattern = await read_one(lambda: repository.get_detail(slug), entity_name="Pattern", key=slug)
    return to_pattern_detail(pattern)


async def list_patterns_use_case(
    *,
    repository: PatternRepository,
    categories: CategoryRepository,
    category_slug: str | None = None,
) -> list[PatternSummary]:
    if category_slug is not None:
        validate_slug(category_slug, field="category")
        await read_one(lambda: categories.get_by_slug(category_slug), entity_name="Category", key=category_slug)
    patterns = await repository.list_all(category_slug=category_slug)
    return [to_pattern_summary(pattern) for pattern in patterns]
