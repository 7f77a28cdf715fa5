"""SQLAlchemyUnitOfWork — one AsyncSession transaction per merge or fork."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ...ports.unit_of_work import UnitOfWork
from ...primitives.exceptions import (
    ConstraintViolationError,
    SessionManagementError,
    UnitOfWorkError,
)

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    Opens a session from *session_factory* on enter, begins a transaction,
    and closes the session on exit.

    Store writes passed this unit of work run on :attr:`session`; they are
    flushed as they happen and committed together. Failures surface as
    :class:`ConstraintViolationError` (a uniqueness rule caught at commit),
    :class:`UnitOfWorkError` (any other commit failure) or
    :class:`SessionManagementError` (the transaction could not be opened).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__()
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise UnitOfWorkError("Unit of work is not active")
        return self._session

    async def __aenter__(self) -> SQLAlchemyUnitOfWork:
        session = self._session_factory()
        try:
            await session.begin()
        except SQLAlchemyError as exc:
            await session.close()
            raise SessionManagementError(f"Cannot open a transaction: {exc}") from exc
        self._session = session
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            await super().__aexit__(exc_type, exc_val, exc_tb)
        finally:
            session, self._session = self._session, None
            if session is not None:
                await session.close()

    async def commit(self) -> None:
        session = self.session
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise ConstraintViolationError(f"Commit rejected: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            await session.rollback()
            raise UnitOfWorkError(f"Commit failed: {exc}") from exc

    async def rollback(self) -> None:
        await self.session.rollback()
