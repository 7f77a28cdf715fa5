"""UnitOfWork — the explicit transaction boundary of a merge or fork."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("l10n_branching.uow")


class UnitOfWork(ABC):
    """
    Abstract base class for Unit of Work implementations.

    A unit of work is opened, has any number of store writes staged against
    it (every write method of the store takes ``uow=``), and then either
    commits all of them or rolls all of them back. Nothing staged is visible
    to other readers before commit.

    Post-commit hooks registered with :meth:`on_commit` run **after** the
    commit has completed, so a hook (e.g. event publication) never observes
    uncommitted rows.

    Example:
        ```python
        async with store.transaction() as uow:
            key = await store.create_key(branch_id, "greet", uow=uow)
            await store.upsert_translation(key.id, "en", "Hi", uow=uow)
        ```
    """

    def __init__(self) -> None:
        self._on_commit_hooks: deque[Callable[[], Awaitable[Any]]] = deque()

    def on_commit(self, callback: Callable[[], Awaitable[Any]]) -> None:
        """Register an async callback to be executed after a successful commit."""
        self._on_commit_hooks.append(callback)

    async def trigger_commit_hooks(self) -> None:
        """Execute all registered on_commit hooks.

        Hook failures are logged; the commit they follow is already durable.
        """
        while self._on_commit_hooks:
            callback = self._on_commit_hooks.popleft()
            try:
                await callback()
            except Exception as exc:  # noqa: BLE001
                logger.error("Error in on_commit hook: %s", exc, exc_info=True)

    @abstractmethod
    async def commit(self) -> None:
        """Commit every staged write atomically."""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Discard every staged write."""
        ...

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """
        Commit on a clean exit, then fire hooks; roll back on an exception.

        Hooks are dropped on rollback.
        """
        if exc_type is None:
            await self.commit()
            await self.trigger_commit_hooks()
        else:
            self._on_commit_hooks.clear()
            await self.rollback()
