from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import OperationalError

from catalog.domain_errors import DomainError, ErrorKind
from catalog.messages import MessageKey
from catalog.models import Category, Pattern
from catalog.problem_details import FailureTranslator
from catalog.repositories.categories import CategoryRepository
from catalog.repositories.patterns import PatternRepository
from catalog.schemas import CategoryCreate, PatternCreate, PatternUpdate
from catalog.unit_of_work import TransactionState, UnitOfWork
from catalog.use_cases.categories import create_category_use_case, list_categories_use_case
from catalog.use_cases.orchestration import OperationState, WriteOperation
from catalog.use_cases.patterns import (
    create_pattern_use_case,
    delete_pattern_use_case,
    get_pattern_use_case,
    list_patterns_use_case,
    update_pattern_use_case,
)


class _TransactionStub:
    def __init__(self, session: "_SessionStub") -> None:
        self._session = session

    async def commit(self) -> None:
        self._session.events.append("commit")

    async def rollback(self) -> None:
        self._session.events.append("rollback")


class _SessionStub:
    def __init__(self, *, fail_flush: bool = False) -> None:
        self.events: list[str] = []
        self.fail_flush = fail_flush

    def in_transaction(self) -> bool:
        return False

    async def begin(self) -> _TransactionStub:
        self.events.append("begin")
        return _TransactionStub(self)

    async def flush(self) -> None:
        self.events.append("flush")
        if self.fail_flush:
            raise OperationalError("INSERT INTO patterns", {}, Exception("disk I/O error"))

    async def close(self) -> None:
        self.events.append("close")


class _PatternRepositoryStub(PatternRepository):
    def __init__(self, patterns: list[Pattern] | None = None, *, fail_add: Exception | None = None) -> None:
        self.patterns = {pattern.id: pattern for pattern in patterns or []}
        self.fail_add = fail_add
        self.added: list[Pattern] = []
        self.updated: list[Pattern] = []
        self.deleted: list[Pattern] = []

    async def add(self, entity: Pattern) -> None:
        if self.fail_add is not None:
            raise self.fail_add
        self.added.append(entity)

    async def update(self, entity: Pattern) -> None:
        self.updated.append(entity)

    async def delete(self, entity: Pattern) -> None:
        self.deleted.append(entity)

    async def get(self, key: UUID) -> Optional[Pattern]:
        return self.patterns.get(key)

    async def get_by_slug(self, slug: str) -> Optional[Pattern]:
        return next((pattern for pattern in self.patterns.values() if pattern.slug == slug), None)

    async def get_detail(self, slug: str) -> Optional[Pattern]:
        return await self.get_by_slug(slug)

    async def list_all(self, *, category_slug: str | None = None) -> list[Pattern]:
        return sorted(self.patterns.values(), key=lambda pattern: pattern.name)

    async def slug_taken(self, slug: str, *, exclude_id: UUID | None = None) -> bool:
        return any(
            pattern.slug == slug and pattern.id != exclude_id for pattern in self.patterns.values()
        )


class _CategoryRepositoryStub(CategoryRepository):
    def __init__(self, categories: list[Category] | None = None) -> None:
        self.categories = {category.id: category for category in categories or []}
        self.added: list[Category] = []

    async def add(self, entity: Category) -> None:
        self.added.append(entity)

    async def update(self, entity: Category) -> None:
        raise AssertionError("categories are never updated")

    async def delete(self, entity: Category) -> None:
        raise AssertionError("categories are never deleted")

    async def get(self, key: UUID) -> Optional[Category]:
        return self.categories.get(key)

    async def get_by_slug(self, slug: str) -> Optional[Category]:
        return next((category for category in self.categories.values() if category.slug == slug), None)

    async def list_all(self) -> list[Category]:
        return list(self.categories.values())


def _stored_pattern(*, name: str = "Strategy", slug: str = "strategy") -> Pattern:
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Pattern(
        id=uuid4(),
        name=name,
        slug=slug,
        summary="Swap algorithms at runtime.",
        problem=None,
        solution=None,
        category_id=None,
        created_at=now,
        updated_at=now,
    )


def _category(slug: str = "behavioral") -> Category:
    return Category(id=uuid4(), name=slug.title(), slug=slug, created_at=datetime.now(timezone.utc))


@pytest.mark.asyncio
async def test_create_pattern_commits_and_returns_output() -> None:
    session = _SessionStub()
    uow = UnitOfWork(lambda: session)
    repository = _PatternRepositoryStub()
    category = _category()

    result = await create_pattern_use_case(
        uow=uow,
        repository=repository,
        categories=_CategoryRepositoryStub([category]),
        request=PatternCreate(name="  Observer ", slug="observer", category_id=category.id),
    )

    assert result.name == "Observer"
    assert result.slug == "observer"
    assert result.category_id == category.id
    assert [pattern.slug for pattern in repository.added] == ["observer"]
    assert uow.state is TransactionState.COMMITTED
    assert session.events == ["begin", "flush", "commit", "close"]


@pytest.mark.asyncio
async def test_create_pattern_rejects_invalid_input_before_any_persistence() -> None:
    session = _SessionStub()
    repository = _PatternRepositoryStub()

    with pytest.raises(DomainError) as exc:
        await create_pattern_use_case(
            uow=UnitOfWork(lambda: session),
            repository=repository,
            categories=_CategoryRepositoryStub(),
            request=PatternCreate(name="", slug="Not A Slug", summary="s" * 501),
        )

    assert exc.value.kind is ErrorKind.VALIDATION
    assert set(exc.value.field_errors) == {"name", "slug", "summary"}
    assert repository.added == []
    assert session.events == []


@pytest.mark.asyncio
async def test_create_pattern_without_request_is_a_bad_request() -> None:
    with pytest.raises(DomainError) as exc:
        await create_pattern_use_case(
            uow=UnitOfWork(_SessionStub),
            repository=_PatternRepositoryStub(),
            categories=_CategoryRepositoryStub(),
            request=None,
        )

    assert exc.value.kind is ErrorKind.DOMAIN_RULE
    assert exc.value.http_status == 400
    assert exc.value.message_key is MessageKey.REQUEST_CANNOT_BE_NULL


@pytest.mark.asyncio
async def test_create_pattern_with_taken_slug_is_a_conflict() -> None:
    session = _SessionStub()
    uow = UnitOfWork(lambda: session)
    repository = _PatternRepositoryStub([_stored_pattern()])

    with pytest.raises(DomainError) as exc:
        await create_pattern_use_case(
            uow=uow,
            repository=repository,
            categories=_CategoryRepositoryStub(),
            request=PatternCreate(name="Strategy again", slug="strategy"),
        )

    assert exc.value.http_status == 409
    assert exc.value.code == "SLUG_ALREADY_EXISTS"
    assert repository.added == []
    assert uow.state is TransactionState.ROLLED_BACK
    assert "commit" not in session.events


@pytest.mark.asyncio
async def test_create_pattern_with_unknown_category_is_not_found() -> None:
    session = _SessionStub()

    with pytest.raises(DomainError) as exc:
        await create_pattern_use_case(
            uow=UnitOfWork(lambda: session),
            repository=_PatternRepositoryStub(),
            categories=_CategoryRepositoryStub(),
            request=PatternCreate(name="Visitor", slug="visitor", category_id=uuid4()),
        )

    assert exc.value.kind is ErrorKind.NOT_FOUND
    assert "Category" in exc.value.message
    assert session.events[-2:] == ["rollback", "close"]


@pytest.mark.asyncio
async def test_persistence_failure_rolls_back_and_hides_detail() -> None:
    session = _SessionStub(fail_flush=True)
    uow = UnitOfWork(lambda: session)

    with pytest.raises(DomainError) as exc:
        await create_pattern_use_case(
            uow=uow,
            repository=_PatternRepositoryStub(),
            categories=_CategoryRepositoryStub(),
            request=PatternCreate(name="Builder", slug="builder"),
        )

    assert exc.value.kind is ErrorKind.INFRASTRUCTURE
    assert uow.state is TransactionState.ROLLED_BACK
    assert "commit" not in session.events

    envelope, _ = FailureTranslator().translate(exc.value)
    assert envelope.status_code == 500
    assert "disk I/O error" not in envelope.model_dump_json()


@pytest.mark.asyncio
async def test_unclassified_repository_failure_is_wrapped_once() -> None:
    session = _SessionStub()
    cause = RuntimeError("connection reset by peer")

    with pytest.raises(DomainError) as exc:
        await create_pattern_use_case(
            uow=UnitOfWork(lambda: session),
            repository=_PatternRepositoryStub(fail_add=cause),
            categories=_CategoryRepositoryStub(),
            request=PatternCreate(name="Builder", slug="builder"),
        )

    assert exc.value.kind is ErrorKind.INFRASTRUCTURE
    assert exc.value.__cause__ is cause
    assert "connection reset" not in exc.value.message
    assert session.events == ["begin", "rollback", "close"]


@pytest.mark.asyncio
async def test_update_missing_pattern_is_not_found_and_mutates_nothing() -> None:
    session = _SessionStub()
    uow = UnitOfWork(lambda: session)
    repository = _PatternRepositoryStub([_stored_pattern()])
    missing_id = uuid4()

    with pytest.raises(DomainError) as exc:
        await update_pattern_use_case(
            uow=uow,
            repository=repository,
            categories=_CategoryRepositoryStub(),
            pattern_id=missing_id,
            request=PatternUpdate(name="Strategy", slug="strategy"),
        )

    assert exc.value.http_status == 404
    assert str(missing_id) in exc.value.message
    assert repository.updated == []
    assert uow.state is TransactionState.ROLLED_BACK


@pytest.mark.asyncio
async def test_update_replaces_fields_and_allows_keeping_own_slug() -> None:
    stored = _stored_pattern()
    repository = _PatternRepositoryStub([stored])
    uow = UnitOfWork(_SessionStub)

    result = await update_pattern_use_case(
        uow=uow,
        repository=repository,
        categories=_CategoryRepositoryStub(),
        pattern_id=stored.id,
        request=PatternUpdate(name="Strategy", slug="strategy", problem="Many algorithms."),
    )

    assert result.problem == "Many algorithms."
    assert result.summary is None
    assert result.updated_at > result.created_at
    assert repository.updated == [stored]
    assert uow.state is TransactionState.COMMITTED


@pytest.mark.asyncio
async def test_update_to_another_patterns_slug_is_a_conflict() -> None:
    stored = _stored_pattern()
    other = _stored_pattern(name="Observer", slug="observer")
    repository = _PatternRepositoryStub([stored, other])

    with pytest.raises(DomainError) as exc:
        await update_pattern_use_case(
            uow=UnitOfWork(_SessionStub),
            repository=repository,
            categories=_CategoryRepositoryStub(),
            pattern_id=stored.id,
            request=PatternUpdate(name="Strategy", slug="observer"),
        )

    assert exc.value.http_status == 409
    assert stored.slug == "strategy"


@pytest.mark.asyncio
async def test_delete_pattern() -> None:
    stored = _stored_pattern()
    repository = _PatternRepositoryStub([stored])

    await delete_pattern_use_case(uow=UnitOfWork(_SessionStub), repository=repository, pattern_id=stored.id)

    assert repository.deleted == [stored]

    with pytest.raises(DomainError) as exc:
        await delete_pattern_use_case(uow=UnitOfWork(_SessionStub), repository=repository, pattern_id=uuid4())
    assert exc.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_get_pattern_by_slug() -> None:
    repository = _PatternRepositoryStub([_stored_pattern()])

    detail = await get_pattern_use_case(repository=repository, slug="strategy")
    assert detail.name == "Strategy"
    assert detail.category_name == ""

    with pytest.raises(DomainError) as missing:
        await get_pattern_use_case(repository=repository, slug="singleton")
    assert missing.value.http_status == 404

    with pytest.raises(DomainError) as malformed:
        await get_pattern_use_case(repository=repository, slug="Not Valid")
    assert malformed.value.kind is ErrorKind.VALIDATION


@pytest.mark.asyncio
async def test_list_patterns_checks_category_filter() -> None:
    repository = _PatternRepositoryStub([_stored_pattern(), _stored_pattern(name="Adapter", slug="adapter")])
    categories = _CategoryRepositoryStub([_category("structural")])

    summaries = await list_patterns_use_case(repository=repository, categories=categories)
    assert [summary.slug for summary in summaries] == ["adapter", "strategy"]

    filtered = await list_patterns_use_case(
        repository=repository, categories=categories, category_slug="structural"
    )
    assert len(filtered) == 2

    with pytest.raises(DomainError) as exc:
        await list_patterns_use_case(repository=repository, categories=categories, category_slug="creational")
    assert exc.value.kind is ErrorKind.NOT_FOUND

    with pytest.raises(DomainError) as malformed:
        await list_patterns_use_case(repository=repository, categories=categories, category_slug="Not Valid")
    assert malformed.value.kind is ErrorKind.VALIDATION
    assert set(malformed.value.field_errors) == {"category"}


@pytest.mark.asyncio
async def test_create_category_and_reject_duplicate_slug() -> None:
    existing = _category("creational")
    repository = _CategoryRepositoryStub([existing])

    created = await create_category_use_case(
        uow=UnitOfWork(_SessionStub),
        repository=repository,
        request=CategoryCreate(name="Behavioral", slug="behavioral"),
    )
    assert created.slug == "behavioral"
    assert [category.slug for category in repository.added] == ["behavioral"]

    with pytest.raises(DomainError) as exc:
        await create_category_use_case(
            uow=UnitOfWork(_SessionStub),
            repository=repository,
            request=CategoryCreate(name="Creational", slug="creational"),
        )
    assert exc.value.http_status == 409

    listed = await list_categories_use_case(repository=repository)
    assert [category.slug for category in listed] == ["creational"]


@pytest.mark.asyncio
async def test_write_operation_tracks_state_and_refuses_reuse() -> None:
    async def _mutate(entity: str) -> str:
        return entity.upper()

    operation = WriteOperation(
        "uppercase_echo",
        uow=UnitOfWork(_SessionStub),
        validate=lambda _request: None,
        transform=lambda request: request,
        mutate=_mutate,
    )

    assert await operation.execute("done") == "DONE"
    assert operation.state is OperationState.COMMITTED

    with pytest.raises(RuntimeError):
        await operation.execute("again")


@pytest.mark.asyncio
async def test_write_operation_failure_state() -> None:
    def _reject(_request: str) -> None:
        raise ValueError("unexpected")

    operation = WriteOperation(
        "uppercase_echo",
        uow=UnitOfWork(_SessionStub),
        validate=_reject,
        transform=lambda request: request,
        mutate=lambda entity: entity,
    )

    with pytest.raises(DomainError) as exc:
        await operation.execute("x")

    assert operation.state is OperationState.FAILED
    assert exc.value.kind is ErrorKind.INFRASTRUCTURE
