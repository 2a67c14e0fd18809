"""Domain-level failure taxonomy with stable machine-readable codes."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields
from enum import Enum
from http import HTTPStatus
from types import MappingProxyType
from typing import Any

from .messages import MessageKey, describe


class ErrorKind(str, Enum):
    """Closed set of failure categories."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    DOMAIN_RULE = "domain_rule"
    INFRASTRUCTURE = "infrastructure"


# kind -> (http status, error code)
KIND_DEFAULTS: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.VALIDATION: (400, "VALIDATION_ERROR"),
    ErrorKind.NOT_FOUND: (404, "NOT_FOUND"),
    ErrorKind.UNAUTHORIZED: (401, "UNAUTHORIZED"),
    ErrorKind.FORBIDDEN: (403, "FORBIDDEN"),
    ErrorKind.DOMAIN_RULE: (400, "BAD_REQUEST"),
    ErrorKind.INFRASTRUCTURE: (500, "INTERNAL_SERVER_ERROR"),
}


@dataclass(eq=False)
class DomainError(Exception):
    """Classified failure with stable code and HTTP mapping.

    Instances are read-only once built. Use the factory functions below
    instead of calling the constructor directly so that ``http_status`` and
    ``code`` stay consistent with ``kind``.
    """

    kind: ErrorKind
    http_status: int
    code: str
    message_key: MessageKey
    message: str
    field_errors: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    cause: BaseException | None = None

    def __post_init__(self) -> None:
        frozen = MappingProxyType({name: tuple(messages) for name, messages in self.field_errors.items()})
        object.__setattr__(self, "field_errors", frozen)
        super().__init__(self.message)
        object.__setattr__(self, "_sealed", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _FIELD_NAMES and getattr(self, "_sealed", False):
            raise AttributeError(f"DomainError.{name} is read-only")
        super().__setattr__(name, value)

    def __str__(self) -> str:
        return self.message


_FIELD_NAMES = frozenset(item.name for item in fields(DomainError))


def _status_code_name(http_status: int) -> str:
    try:
        return HTTPStatus(http_status).name
    except ValueError:
        return "DOMAIN_ERROR"


def validation_error(
    field_errors: Mapping[str, Sequence[str]],
    *,
    message: str | None = None,
) -> DomainError:
    """Build a validation failure from a field -> messages mapping.

    Callers are expected to pass at least one field error.
    """
    http_status, code = KIND_DEFAULTS[ErrorKind.VALIDATION]
    return DomainError(
        kind=ErrorKind.VALIDATION,
        http_status=http_status,
        code=code,
        message_key=MessageKey.VALIDATION_ERROR,
        message=message or describe(MessageKey.VALIDATION_ERROR),
        field_errors={name: tuple(messages) for name, messages in field_errors.items()},
    )


def not_found(entity_name: str, key: object) -> DomainError:
    http_status, code = KIND_DEFAULTS[ErrorKind.NOT_FOUND]
    return DomainError(
        kind=ErrorKind.NOT_FOUND,
        http_status=http_status,
        code=code,
        message_key=MessageKey.NOT_FOUND,
        message=f"{entity_name} with key '{key}' does not exist.",
    )


def unauthorized(reason: str | None = None) -> DomainError:
    http_status, code = KIND_DEFAULTS[ErrorKind.UNAUTHORIZED]
    return DomainError(
        kind=ErrorKind.UNAUTHORIZED,
        http_status=http_status,
        code=code,
        message_key=MessageKey.UNAUTHORIZED,
        message=reason or describe(MessageKey.UNAUTHORIZED),
    )


def forbidden(reason: str | None = None) -> DomainError:
    http_status, code = KIND_DEFAULTS[ErrorKind.FORBIDDEN]
    return DomainError(
        kind=ErrorKind.FORBIDDEN,
        http_status=http_status,
        code=code,
        message_key=MessageKey.FORBIDDEN,
        message=reason or describe(MessageKey.FORBIDDEN),
    )


def domain_rule(
    message_key: MessageKey,
    message: str | None = None,
    *,
    http_status: int | None = None,
    code: str | None = None,
) -> DomainError:
    """Caller-caused failure; status defaults to 400 and may be overridden (409, 502, ...).

    Without an explicit ``code`` the default status keeps the kind's code and
    any other status is named after its ``HTTPStatus`` member (``CONFLICT``).
    """
    default_status, default_code = KIND_DEFAULTS[ErrorKind.DOMAIN_RULE]
    if http_status is None or http_status == default_status:
        http_status, fallback_code = default_status, default_code
    else:
        fallback_code = _status_code_name(http_status)
    return DomainError(
        kind=ErrorKind.DOMAIN_RULE,
        http_status=http_status,
        code=code or fallback_code,
        message_key=message_key,
        message=message or describe(message_key),
    )


def infrastructure_error(
    cause: BaseException | None = None,
    *,
    message_key: MessageKey = MessageKey.INTERNAL_SERVER_ERROR,
) -> DomainError:
    """Unexpected internal failure.

    The message is always the generic text; ``cause`` is kept for operators only.
    """
    http_status, code = KIND_DEFAULTS[ErrorKind.INFRASTRUCTURE]
    error = DomainError(
        kind=ErrorKind.INFRASTRUCTURE,
        http_status=http_status,
        code=code,
        message_key=message_key,
        message=describe(MessageKey.INTERNAL_SERVER_ERROR),
        cause=cause,
    )
    if cause is not None:
        error.__cause__ = cause
    return error


def as_domain_error(exc: BaseException) -> DomainError:
    """Return ``exc`` if already classified, otherwise wrap it as infrastructure."""
    if isinstance(exc, DomainError):
        return exc
    return infrastructure_error(exc)
