"""Request/entity/response mapping (pure, in-memory)."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from ..models import Category, Pattern
from ..schemas import (
    CategoryCreate,
    CategoryOut,
    PatternCreate,
    PatternDetail,
    PatternOut,
    PatternSummary,
    PatternUpdate,
)

_PATTERN_FIELDS: tuple[str, ...] = ("name", "slug", "summary", "problem", "solution", "category_id")


def _clean(value: str | None) -> str | None:
    return value.strip() if isinstance(value, str) else value


def pattern_from_create(request: PatternCreate) -> Pattern:
    now = datetime.now(timezone.utc)
    return Pattern(
        id=uuid.uuid4(),
        name=_clean(request.name),
        slug=request.slug,
        summary=_clean(request.summary),
        problem=request.problem,
        solution=request.solution,
        category_id=request.category_id,
        created_at=now,
        updated_at=now,
    )


def pattern_changes(request: PatternUpdate) -> dict[str, object]:
    """Attribute values an update writes onto the stored pattern."""
    changes = {name: getattr(request, name) for name in _PATTERN_FIELDS}
    changes["name"] = _clean(request.name)
    changes["summary"] = _clean(request.summary)
    changes["updated_at"] = datetime.now(timezone.utc)
    return changes


def apply_pattern_changes(pattern: Pattern, changes: dict[str, object]) -> Pattern:
    for name, value in changes.items():
        setattr(pattern, name, value)
    return pattern


def to_pattern_out(pattern: Pattern) -> PatternOut:
    return PatternOut.model_validate(pattern)


def to_pattern_detail(pattern: Pattern) -> PatternDetail:
    """Requires ``pattern.category`` to be loaded."""
    out = PatternOut.model_validate(pattern)
    category_name = pattern.category.name if pattern.category is not None else ""
    return PatternDetail(**out.model_dump(), category_name=category_name)


def to_pattern_summary(pattern: Pattern) -> PatternSummary:
    return PatternSummary.model_validate(pattern)


def category_from_create(request: CategoryCreate) -> Category:
    return Category(
        id=uuid.uuid4(),
        name=_clean(request.name),
        slug=request.slug,
        created_at=datetime.now(timezone.utc),
    )


def to_category_out(category: Category) -> CategoryOut:
    return CategoryOut.model_validate(category)
