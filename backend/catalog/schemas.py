"""Pydantic schemas for the catalog API."""
from datetime import datetime, timezone
from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    """SQLite returns stored UTC timestamps without a zone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(_as_utc)]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Pattern schemas
# Request fields are optional so that every rule is reported in one validation failure.
class PatternCreate(ApiModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    summary: Optional[str] = None
    problem: Optional[str] = None
    solution: Optional[str] = None
    category_id: Optional[UUID] = None


class PatternUpdate(PatternCreate):
    pass


class PatternOut(ApiModel):
    id: UUID
    name: str
    slug: str
    summary: Optional[str] = None
    problem: Optional[str] = None
    solution: Optional[str] = None
    category_id: Optional[UUID] = None
    created_at: UtcDateTime
    updated_at: UtcDateTime


class PatternDetail(PatternOut):
    """Pattern with its category resolved."""
    category_name: str = ""


class PatternSummary(ApiModel):
    id: UUID
    name: str
    slug: str
    summary: Optional[str] = None


# Category schemas
class CategoryCreate(ApiModel):
    name: Optional[str] = None
    slug: Optional[str] = None


class CategoryOut(ApiModel):
    id: UUID
    name: str
    slug: str
    created_at: UtcDateTime
