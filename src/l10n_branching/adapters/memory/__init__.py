from .store import InMemoryTranslationStore, StoreState
from .unit_of_work import InMemoryUnitOfWork

__all__ = [
    "InMemoryTranslationStore",
    "InMemoryUnitOfWork",
    "StoreState",
]
