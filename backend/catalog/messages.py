"""Opaque message keys and their default human text."""
from __future__ import annotations

from enum import Enum


class MessageKey(str, Enum):
    """Stable identifiers clients may use to look up localized text."""

    SUCCESS = "success"
    CREATED = "created"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"
    INTERNAL_SERVER_ERROR = "internal_server_error"
    BAD_REQUEST = "bad_request"

    REQUEST_CANNOT_BE_NULL = "request_cannot_be_null"
    MALFORMED_REQUEST = "malformed_request"
    TRANSACTION_ALREADY_STARTED = "transaction_already_started"
    TRANSACTION_NOT_STARTED = "transaction_not_started"

    NAME_CANNOT_BE_EMPTY = "name_cannot_be_empty"
    NAME_TOO_LONG = "name_too_long"
    SLUG_CANNOT_BE_EMPTY = "slug_cannot_be_empty"
    SLUG_TOO_LONG = "slug_too_long"
    SLUG_INVALID_FORMAT = "slug_invalid_format"
    SLUG_ALREADY_EXISTS = "slug_already_exists"
    TEXT_TOO_LONG = "text_too_long"


MESSAGES: dict[MessageKey, str] = {
    MessageKey.SUCCESS: "Success.",
    MessageKey.CREATED: "Created.",
    MessageKey.FORBIDDEN: "You are not allowed to perform this action.",
    MessageKey.UNAUTHORIZED: "Authentication is required.",
    MessageKey.NOT_FOUND: "Resource does not exist.",
    MessageKey.VALIDATION_ERROR: "Invalid input.",
    MessageKey.INTERNAL_SERVER_ERROR: "An unexpected error occurred. Please try again later.",
    MessageKey.BAD_REQUEST: "The request could not be processed.",
    MessageKey.REQUEST_CANNOT_BE_NULL: "Request body cannot be empty.",
    MessageKey.MALFORMED_REQUEST: "Request body must be a JSON object.",
    MessageKey.TRANSACTION_ALREADY_STARTED: "A transaction is already active.",
    MessageKey.TRANSACTION_NOT_STARTED: "No active transaction.",
    MessageKey.NAME_CANNOT_BE_EMPTY: "Name cannot be empty.",
    MessageKey.NAME_TOO_LONG: "Name is too long.",
    MessageKey.SLUG_CANNOT_BE_EMPTY: "Slug cannot be empty.",
    MessageKey.SLUG_TOO_LONG: "Slug is too long.",
    MessageKey.SLUG_INVALID_FORMAT: "Slug must be lowercase words separated by hyphens.",
    MessageKey.SLUG_ALREADY_EXISTS: "Slug is already in use.",
    MessageKey.TEXT_TOO_LONG: "Text is too long.",
}


def describe(key: MessageKey) -> str:
    """Return the default text for a message key."""
    return MESSAGES.get(key, key.value)
