"""Uniform response envelope returned for every request."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .messages import MessageKey, describe

T = TypeVar("T")


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class ResponseEnvelope(BaseModel, Generic[T]):
    """Wire shape shared by success and error responses.

    ``success`` is true exactly when ``error_code`` is empty. ``timestamp`` is
    stamped when the envelope is built.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    success: bool
    message_key: str
    message: str
    error_code: Optional[str] = None
    status_code: int
    data: Optional[T] = None
    timestamp: datetime = Field(default_factory=_now_utc)

    @model_validator(mode="after")
    def _success_has_no_error_code(self) -> "ResponseEnvelope[T]":
        if self.success != (self.error_code is None):
            raise ValueError("success must be true exactly when error_code is null")
        return self

    @classmethod
    def ok(
        cls,
        data: Any = None,
        *,
        status_code: int = 200,
        message_key: MessageKey = MessageKey.SUCCESS,
        message: str | None = None,
    ) -> "ResponseEnvelope[T]":
        return cls(
            success=True,
            message_key=message_key.value,
            message=message or describe(message_key),
            error_code=None,
            status_code=status_code,
            data=data,
        )

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible payload using the camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)
