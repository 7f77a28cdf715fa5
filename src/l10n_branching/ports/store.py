"""ITranslationStore — the Key/Translation Store the engine is written against."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..domain.branch import Branch, KeyWithTranslations, Translation, TranslationKey
    from .unit_of_work import UnitOfWork


@runtime_checkable
class ITranslationStore(Protocol):
    """
    Persistence boundary for branches, keys and translations.

    Reads accept an optional ``uow``: when given they run inside that unit of
    work, otherwise against committed state. Writes are staged on ``uow`` and
    become visible only when it commits.

    Uniqueness the store must enforce:

    - branches: ``(space_id, name)``
    - keys: ``(branch_id, namespace, name)``
    - translations: ``(key_id, language)``
    """

    # -- reads --------------------------------------------------------------

    async def get_branch(
        self, branch_id: str, uow: UnitOfWork | None = None
    ) -> Branch | None: ...

    async def find_branch_by_name(
        self, space_id: str, name: str, uow: UnitOfWork | None = None
    ) -> Branch | None: ...

    async def list_keys_with_translations(
        self, branch_id: str, uow: UnitOfWork | None = None
    ) -> list[KeyWithTranslations]: ...

    async def find_key(
        self,
        branch_id: str,
        name: str,
        namespace: str | None = None,
        uow: UnitOfWork | None = None,
    ) -> TranslationKey | None: ...

    # -- writes -------------------------------------------------------------

    async def create_branch(
        self,
        space_id: str,
        name: str,
        source_branch_id: str | None = None,
        uow: UnitOfWork | None = None,
    ) -> Branch: ...

    async def create_key(
        self,
        branch_id: str,
        name: str,
        namespace: str | None = None,
        *,
        description: str | None = None,
        uow: UnitOfWork | None = None,
    ) -> TranslationKey: ...

    async def upsert_translation(
        self,
        key_id: str,
        language: str,
        value: str,
        uow: UnitOfWork | None = None,
    ) -> Translation: ...

    async def copy_keys_and_translations(
        self,
        source_branch_id: str,
        target_branch_id: str,
        uow: UnitOfWork | None = None,
    ) -> int: ...

    # -- transactions -------------------------------------------------------

    def transaction(self) -> UnitOfWork:
        """Return a fresh, unopened unit of work bound to this store."""
        ...
