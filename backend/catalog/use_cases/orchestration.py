"""Fixed validate -> transform -> persist -> commit sequence shared by write use-cases."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Generic, Optional, TypeVar

from ..domain_errors import DomainError, as_domain_error, domain_rule, not_found
from ..messages import MessageKey
from ..unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT")
EntityT = TypeVar("EntityT")
ResultT = TypeVar("ResultT")


class OperationState(str, Enum):
    VALIDATING = "validating"
    TRANSFORMING = "transforming"
    PERSISTING = "persisting"
    COMMITTED = "committed"
    FAILED = "failed"


def ensure_request(request: object) -> None:
    if request is None:
        raise domain_rule(MessageKey.REQUEST_CANNOT_BE_NULL)


class WriteOperation(Generic[RequestT, EntityT, ResultT]):
    """One invocation of a mutating use-case.

    ``mutate`` stages changes through repositories and returns the result;
    flush and commit happen here. Failures after the transaction opened are
    rolled back by the unit of work; anything outside the failure taxonomy is
    wrapped once as an infrastructure failure. There are no retries: a failed
    operation stays failed.
    """

    def __init__(
        self,
        name: str,
        *,
        uow: UnitOfWork,
        validate: Callable[[RequestT], None],
        transform: Callable[[RequestT], EntityT],
        mutate: Callable[[EntityT], Awaitable[ResultT]],
    ) -> None:
        self.name = name
        self._uow = uow
        self._validate = validate
        self._transform = transform
        self._mutate = mutate
        self.state = OperationState.VALIDATING

    async def execute(self, request: Optional[RequestT]) -> ResultT:
        if self.state is not OperationState.VALIDATING:
            raise RuntimeError(f"Operation {self.name} already executed")
        try:
            ensure_request(request)
            self._validate(request)

            self.state = OperationState.TRANSFORMING
            entity = self._transform(request)

            self.state = OperationState.PERSISTING
            async with self._uow.transaction():
                result = await self._mutate(entity)
                await self._uow.save_changes()
        except DomainError:
            self.state = OperationState.FAILED
            raise
        except Exception as exc:
            self.state = OperationState.FAILED
            raise as_domain_error(exc) from exc
        except BaseException:
            self.state = OperationState.FAILED
            raise

        self.state = OperationState.COMMITTED
        logger.info("%s committed", self.name)
        return result


async def read_one(
    load: Callable[[], Awaitable[Optional[EntityT]]],
    *,
    entity_name: str,
    key: object,
) -> EntityT:
    """Await a lookup and turn an empty result into a not-found failure."""
    try:
        entity = await load()
    except DomainError:
        raise
    except Exception as exc:
        raise as_domain_error(exc) from exc
    if entity is None:
        raise not_found(entity_name, key)
    return entity
