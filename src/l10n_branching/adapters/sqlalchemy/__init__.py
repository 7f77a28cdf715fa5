"""SQLAlchemy (asyncio) implementation of the translation store."""

from .models import Base, BranchModel, TranslationKeyModel, TranslationModel
from .store import SQLAlchemyTranslationStore
from .uow import SQLAlchemyUnitOfWork

__all__ = [
    "Base",
    "BranchModel",
    "SQLAlchemyTranslationStore",
    "SQLAlchemyUnitOfWork",
    "TranslationKeyModel",
    "TranslationModel",
]
