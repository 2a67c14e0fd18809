"""Single translation point from raised failures to response envelopes.

Caller-caused failures are returned with their own code and message and
logged at WARNING. Anything unexpected is answered with one constant
internal-error envelope; the original exception only reaches the log at ERROR.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from .domain_errors import (
    KIND_DEFAULTS,
    DomainError,
    ErrorKind,
    domain_rule,
    forbidden,
    infrastructure_error,
    unauthorized,
    validation_error,
)
from .envelopes import ResponseEnvelope
from .logging_config import FAILURE_LOGGER_NAME
from .messages import MessageKey, describe

_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header", "cookie"})


@dataclass(frozen=True)
class FailureLogEntry:
    """Log record to emit for a translated failure."""

    level: int
    message: str
    args: tuple[Any, ...] = ()
    exc_info: BaseException | None = None


class TranslatedFailure(NamedTuple):
    envelope: ResponseEnvelope
    log: FailureLogEntry


def internal_error_envelope() -> ResponseEnvelope:
    """The only envelope shape ever returned for unexpected failures."""
    http_status, code = KIND_DEFAULTS[ErrorKind.INFRASTRUCTURE]
    return ResponseEnvelope(
        success=False,
        message_key=MessageKey.INTERNAL_SERVER_ERROR.value,
        message=describe(MessageKey.INTERNAL_SERVER_ERROR),
        error_code=code,
        status_code=http_status,
        data=None,
    )


def _error_envelope(exc: DomainError, data: Any = None) -> ResponseEnvelope:
    return ResponseEnvelope(
        success=False,
        message_key=exc.message_key.value,
        message=exc.message,
        error_code=exc.code,
        status_code=exc.http_status,
        data=data,
    )


class FailureTranslator:
    """Classify any exception and build its envelope plus log record."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(FAILURE_LOGGER_NAME)

    def translate(self, exc: BaseException) -> TranslatedFailure:
        """Pure classification; no logging, no I/O."""
        if not isinstance(exc, DomainError):
            return TranslatedFailure(
                internal_error_envelope(),
                FailureLogEntry(logging.ERROR, "Unhandled exception: %s", (type(exc).__name__,), exc),
            )

        match exc.kind:
            case ErrorKind.VALIDATION:
                data = {name: list(messages) for name, messages in exc.field_errors.items()}
                # Field names only; submitted values stay out of the log.
                return TranslatedFailure(
                    _error_envelope(exc, data=data),
                    FailureLogEntry(
                        logging.WARNING,
                        "Validation failed: %s (fields: %s)",
                        (exc.message, ", ".join(sorted(data))),
                    ),
                )
            case ErrorKind.NOT_FOUND | ErrorKind.UNAUTHORIZED | ErrorKind.FORBIDDEN | ErrorKind.DOMAIN_RULE:
                return TranslatedFailure(
                    _error_envelope(exc),
                    FailureLogEntry(
                        logging.WARNING,
                        "Request failed: kind=%s code=%s status=%d message=%s",
                        (exc.kind.value, exc.code, exc.http_status, exc.message),
                    ),
                )
            case ErrorKind.INFRASTRUCTURE:
                return TranslatedFailure(
                    internal_error_envelope(),
                    FailureLogEntry(logging.ERROR, "Internal failure: %s", (exc.message_key.value,), exc),
                )
        raise ValueError(f"No translation for error kind {exc.kind!r}")

    def handle(self, exc: BaseException) -> JSONResponse:
        """Translate, log on the injected logger and serialize."""
        envelope, entry = self.translate(exc)
        self._logger.log(entry.level, entry.message, *entry.args, exc_info=entry.exc_info)
        return JSONResponse(status_code=envelope.status_code, content=envelope.to_wire())


def _field_path(location: tuple[Any, ...] | list[Any]) -> str:
    parts = [str(part) for part in location]
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


_BODY_SHAPE_ERRORS = frozenset({"dict_type", "model_attributes_type", "model_type"})


def _is_malformed_body(error: Mapping[str, Any]) -> bool:
    """Undecodable JSON, or a body that is not an object at all."""
    if error.get("type") == "json_invalid":
        return True
    return error.get("type") in _BODY_SHAPE_ERRORS and tuple(error.get("loc", ())) == ("body",)


def failure_from_request_validation(exc: RequestValidationError) -> DomainError:
    """Batch every schema error FastAPI reported into one validation failure.

    A body that cannot be read as an object has no fields to report and is a
    request integrity failure instead.
    """
    errors = exc.errors()
    if any(_is_malformed_body(error) for error in errors):
        return domain_rule(MessageKey.MALFORMED_REQUEST)
    field_errors: dict[str, list[str]] = {}
    for error in errors:
        field_errors.setdefault(_field_path(error.get("loc", ())), []).append(str(error.get("msg", "")))
    return validation_error(field_errors)


def failure_from_http_exception(exc: StarletteHTTPException) -> DomainError:
    detail = exc.detail if isinstance(exc.detail, str) else None
    if exc.status_code == 401:
        return unauthorized(detail)
    if exc.status_code == 403:
        return forbidden(detail)
    if exc.status_code >= 500:
        return infrastructure_error(exc)
    message_key = MessageKey.NOT_FOUND if exc.status_code == 404 else MessageKey.BAD_REQUEST
    return domain_rule(message_key, detail, http_status=exc.status_code)


class FailureTranslationMiddleware(BaseHTTPMiddleware):
    """Outermost guard: nothing raised by the app leaves without an envelope."""

    def __init__(self, app: ASGIApp, translator: FailureTranslator) -> None:
        super().__init__(app)
        self._translator = translator

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return self._translator.handle(exc)


def register_failure_handlers(app: FastAPI, translator: FailureTranslator) -> None:
    """Route DomainError and framework errors through the translator."""

    async def _handle_domain_error(_: Request, exc: DomainError) -> JSONResponse:
        return translator.handle(exc)

    async def _handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        return translator.handle(failure_from_request_validation(exc))

    async def _handle_http_exception(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return translator.handle(failure_from_http_exception(exc))

    app.add_exception_handler(DomainError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_middleware(FailureTranslationMiddleware, translator=translator)
