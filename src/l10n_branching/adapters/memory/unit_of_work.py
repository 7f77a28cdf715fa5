"""InMemoryUnitOfWork — stages writes and applies them atomically on commit."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from ...ports.unit_of_work import UnitOfWork
from ...primitives.exceptions import PersistenceError, UnitOfWorkError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .store import InMemoryTranslationStore, StoreState

    Operation = Callable[[StoreState], Any]

T = TypeVar("T")


class InMemoryUnitOfWork(UnitOfWork):
    """In-memory implementation of UnitOfWork.

    Every write is applied to a private *view* of the store (so later reads in
    the same unit of work see it and constraint violations surface at the
    call site) and recorded as a staged operation. ``commit`` replays the
    staged operations on a copy of the store's current state and swaps the
    copy in only if all of them succeed.

    Records commit/rollback calls for assertions.
    """

    def __init__(self, store: InMemoryTranslationStore) -> None:
        super().__init__()
        self._store = store
        self._staged: list[Operation] = []
        self._view: StoreState | None = None
        self.committed: bool = False
        self.rolled_back: bool = False
        self.commit_count: int = 0
        self.rollback_count: int = 0

    @property
    def closed(self) -> bool:
        return self.committed or self.rolled_back

    @property
    def staged_count(self) -> int:
        return len(self._staged)

    def view(self) -> StoreState:
        """State as seen from inside this unit of work."""
        if self._view is None:
            self._view = self._store.state.clone()
        return self._view

    def stage(self, operation: Callable[[StoreState], T]) -> T:
        """Apply *operation* to the private view and record it for commit."""
        if self.closed:
            raise UnitOfWorkError("Unit of work is already closed")
        result = operation(self.view())
        self._staged.append(operation)
        return result

    async def commit(self) -> None:
        """Apply all staged writes to the store, or none of them."""
        if self.closed:
            return
        staged, self._staged, self._view = self._staged, [], None
        try:
            self._store.apply(staged)
        except PersistenceError as exc:
            self.rolled_back = True
            self.rollback_count += 1
            raise UnitOfWorkError(f"Failed to commit transaction: {exc}") from exc
        self.committed = True
        self.commit_count += 1

    async def rollback(self) -> None:
        """Discard all staged writes."""
        if self.closed:
            return
        self._staged.clear()
        self._view = None
        self.rolled_back = True
        self.rollback_count += 1
