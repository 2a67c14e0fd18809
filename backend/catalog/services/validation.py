"""Request field rules.

Every rule is checked before raising so that a single validation failure
lists all broken fields.
"""
from __future__ import annotations

import re

from ..domain_errors import validation_error
from ..messages import MessageKey, describe
from ..schemas import CategoryCreate, PatternCreate

NAME_MAX_LENGTH = 200
SLUG_MAX_LENGTH = 200
SUMMARY_MAX_LENGTH = 500
TEXT_MAX_LENGTH = 10_000
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class FieldErrors:
    """Accumulates field -> messages in the order rules were checked."""

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add(self, field: str, message: str) -> None:
        self._errors.setdefault(field, []).append(message)

    def raise_if_any(self) -> None:
        if self._errors:
            raise validation_error(self._errors)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def check_name(errors: FieldErrors, field: str, value: str | None) -> None:
    if _is_blank(value):
        errors.add(field, describe(MessageKey.NAME_CANNOT_BE_EMPTY))
        return
    if len(value.strip()) > NAME_MAX_LENGTH:
        errors.add(field, describe(MessageKey.NAME_TOO_LONG))


def check_slug(errors: FieldErrors, field: str, value: str | None) -> None:
    if _is_blank(value):
        errors.add(field, describe(MessageKey.SLUG_CANNOT_BE_EMPTY))
        return
    if len(value) > SLUG_MAX_LENGTH:
        errors.add(field, describe(MessageKey.SLUG_TOO_LONG))
    if not SLUG_PATTERN.match(value):
        errors.add(field, describe(MessageKey.SLUG_INVALID_FORMAT))


def check_text(errors: FieldErrors, field: str, value: str | None, *, max_length: int) -> None:
    if value is not None and len(value) > max_length:
        errors.add(field, describe(MessageKey.TEXT_TOO_LONG))


def validate_pattern_request(request: PatternCreate) -> None:
    errors = FieldErrors()
    check_name(errors, "name", request.name)
    check_slug(errors, "slug", request.slug)
    check_text(errors, "summary", request.summary, max_length=SUMMARY_MAX_LENGTH)
    check_text(errors, "problem", request.problem, max_length=TEXT_MAX_LENGTH)
    check_text(errors, "solution", request.solution, max_length=TEXT_MAX_LENGTH)
    errors.raise_if_any()


def validate_category_request(request: CategoryCreate) -> None:
    errors = FieldErrors()
    check_name(errors, "name", request.name)
    check_slug(errors, "slug", request.slug)
    errors.raise_if_any()


def validate_slug(slug: str | None, *, field: str = "slug") -> None:
    errors = FieldErrors()
    check_slug(errors, field, slug)
    errors.raise_if_any()
