from __future__ import annotations

from .store import ITranslationStore
from .unit_of_work import UnitOfWork

__all__ = ["ITranslationStore", "UnitOfWork"]
