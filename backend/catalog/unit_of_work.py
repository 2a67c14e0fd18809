"""Unit of work over an async SQLAlchemy session.

One ``UnitOfWork`` belongs to one operation; it is never shared between
concurrent requests. A transaction is either committed explicitly or rolled
back, and the underlying session is released in both cases.
"""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction

from .domain_errors import infrastructure_error
from .messages import MessageKey

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class UnitOfWork:
    """Begin/commit/rollback primitive wrapping one session."""

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None
        self._transaction: AsyncSessionTransaction | None = None
        self.state = TransactionState.IDLE

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, *_exc_info) -> None:
        await self.dispose()

    @property
    def session(self) -> AsyncSession:
        """Session held by this unit, opened on first use."""
        if self._session is None:
            self._session = self._session_factory()
        return self._session

    @property
    def is_active(self) -> bool:
        return self.state is TransactionState.ACTIVE

    async def begin(self) -> None:
        if self.is_active:
            raise infrastructure_error(message_key=MessageKey.TRANSACTION_ALREADY_STARTED)

        session = self.session
        try:
            if session.in_transaction():
                # Reads autobegin a transaction; adopt it instead of nesting.
                self._transaction = session.get_transaction()
            else:
                self._transaction = await session.begin()
        except SQLAlchemyError as exc:
            raise infrastructure_error(exc) from exc
        self.state = TransactionState.ACTIVE

    async def commit(self) -> None:
        transaction = self._require_active()
        committed = False
        try:
            await transaction.commit()
            committed = True
        except SQLAlchemyError as exc:
            raise infrastructure_error(exc) from exc
        finally:
            # A session closed after a failed commit discards the transaction.
            self.state = TransactionState.COMMITTED if committed else TransactionState.ROLLED_BACK
            await self._release()

    async def rollback(self) -> None:
        transaction = self._require_active()
        try:
            await transaction.rollback()
        except SQLAlchemyError as exc:
            raise infrastructure_error(exc) from exc
        finally:
            self.state = TransactionState.ROLLED_BACK
            await self._release()

    async def save_changes(self) -> None:
        """Flush staged mutations; they stay invisible to others until commit."""
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise infrastructure_error(exc) from exc

    async def dispose(self) -> None:
        """Release the session. Safe to call any number of times."""
        if self.is_active:
            await self.rollback_quietly()
        await self._release()

    async def rollback_quietly(self) -> None:
        """Roll back without masking the failure that triggered it."""
        try:
            await self.rollback()
        except Exception:
            logger.exception("Rollback failed; propagating the original failure")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Scoped transaction: commit on clean exit, roll back on any other exit."""
        await self.begin()
        try:
            yield self.session
        except BaseException:
            # Includes cancellation.
            if self.is_active:
                await self.rollback_quietly()
            raise
        await self.commit()

    def _require_active(self) -> AsyncSessionTransaction:
        if not self.is_active or self._transaction is None:
            raise infrastructure_error(message_key=MessageKey.TRANSACTION_NOT_STARTED)
        return self._transaction

    async def _release(self) -> None:
        session, self._session, self._transaction = self._session, None, None
        if session is None:
            return
        try:
            await session.close()
        except SQLAlchemyError:
            logger.exception("Failed to release database session")
