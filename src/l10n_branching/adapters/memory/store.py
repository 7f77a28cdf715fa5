"""InMemoryTranslationStore — dict-backed Key/Translation Store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar, cast

from ...domain.branch import (
    Branch,
    KeyWithTranslations,
    Translation,
    TranslationKey,
    TranslationValue,
    format_key,
    key_identity,
)
from ...ports.store import ITranslationStore
from ...primitives.exceptions import ConstraintViolationError
from ...primitives.id_generator import IIDGenerator, UUID4Generator
from .unit_of_work import InMemoryUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ...ports.unit_of_work import UnitOfWork

T = TypeVar("T")


@dataclass
class StoreState:
    """Rows of the three tables, keyed by id. Rows are immutable."""

    branches: dict[str, Branch] = field(default_factory=dict)
    keys: dict[str, TranslationKey] = field(default_factory=dict)
    translations: dict[str, Translation] = field(default_factory=dict)

    def clone(self) -> StoreState:
        return StoreState(
            branches=dict(self.branches),
            keys=dict(self.keys),
            translations=dict(self.translations),
        )

    # -- lookups ------------------------------------------------------------

    def branch_named(self, space_id: str, name: str) -> Branch | None:
        for branch in self.branches.values():
            if branch.space_id == space_id and branch.name == name:
                return branch
        return None

    def keys_of(self, branch_id: str) -> list[TranslationKey]:
        keys = [k for k in self.keys.values() if k.branch_id == branch_id]
        return sorted(keys, key=lambda k: (k.namespace or "", k.name))

    def key_named(
        self, branch_id: str, name: str, namespace: str | None
    ) -> TranslationKey | None:
        identity = key_identity(name, namespace)
        for key in self.keys.values():
            if key.branch_id == branch_id and key.identity == identity:
                return key
        return None

    def translations_of(self, key_id: str) -> list[Translation]:
        rows = [t for t in self.translations.values() if t.key_id == key_id]
        return sorted(rows, key=lambda t: t.language)

    def translation_for(self, key_id: str, language: str) -> Translation | None:
        for row in self.translations.values():
            if row.key_id == key_id and row.language == language:
                return row
        return None


class InMemoryTranslationStore(ITranslationStore):
    """In-memory implementation of :class:`ITranslationStore`.

    Writes passed a ``uow`` are staged on that
    :class:`InMemoryUnitOfWork`; writes without one are applied immediately,
    which is convenient for seeding test fixtures. Uniqueness constraints are
    enforced on every write and raise :class:`ConstraintViolationError`.
    """

    def __init__(self, id_generator: IIDGenerator | None = None) -> None:
        self._state = StoreState()
        self._ids: IIDGenerator = id_generator or UUID4Generator()

    @property
    def state(self) -> StoreState:
        return self._state

    def transaction(self) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self)

    def apply(self, operations: Iterable[Callable[[StoreState], Any]]) -> None:
        """Apply *operations* all-or-nothing to the committed state."""
        working = self._state.clone()
        for operation in operations:
            operation(working)
        self._state = working

    # -- internal -----------------------------------------------------------

    def _read(self, uow: UnitOfWork | None) -> StoreState:
        if isinstance(uow, InMemoryUnitOfWork) and not uow.closed:
            return uow.view()
        return self._state

    def _write(
        self, operation: Callable[[StoreState], T], uow: UnitOfWork | None
    ) -> T:
        if uow is None:
            working = self._state.clone()
            result = operation(working)
            self._state = working
            return result
        return cast("InMemoryUnitOfWork", uow).stage(operation)

    # -- reads --------------------------------------------------------------

    async def get_branch(
        self, branch_id: str, uow: UnitOfWork | None = None
    ) -> Branch | None:
        return self._read(uow).branches.get(branch_id)

    async def find_branch_by_name(
        self, space_id: str, name: str, uow: UnitOfWork | None = None
    ) -> Branch | None:
        return self._read(uow).branch_named(space_id, name)

    async def list_keys_with_translations(
        self, branch_id: str, uow: UnitOfWork | None = None
    ) -> list[KeyWithTranslations]:
        state = self._read(uow)
        return [
            KeyWithTranslations(
                id=key.id,
                name=key.name,
                namespace=key.namespace,
                description=key.description,
                translations=[
                    TranslationValue(language=t.language, value=t.value)
                    for t in state.translations_of(key.id)
                ],
            )
            for key in state.keys_of(branch_id)
        ]

    async def find_key(
        self,
        branch_id: str,
        name: str,
        namespace: str | None = None,
        uow: UnitOfWork | None = None,
    ) -> TranslationKey | None:
        return self._read(uow).key_named(branch_id, name, namespace)

    # -- writes -------------------------------------------------------------

    async def create_branch(
        self,
        space_id: str,
        name: str,
        source_branch_id: str | None = None,
        uow: UnitOfWork | None = None,
    ) -> Branch:
        branch = Branch(
            id=self._ids.next_id(),
            name=name,
            space_id=space_id,
            source_branch_id=source_branch_id,
        )

        def insert(state: StoreState) -> Branch:
            if state.branch_named(space_id, name) is not None:
                raise ConstraintViolationError(
                    f"Branch {name!r} already exists in space {space_id!r}"
                )
            if source_branch_id is not None and source_branch_id not in state.branches:
                raise ConstraintViolationError(
                    f"Source branch {source_branch_id!r} does not exist"
                )
            state.branches[branch.id] = branch
            return branch

        return self._write(insert, uow)

    async def create_key(
        self,
        branch_id: str,
        name: str,
        namespace: str | None = None,
        *,
        description: str | None = None,
        uow: UnitOfWork | None = None,
    ) -> TranslationKey:
        key = TranslationKey(
            id=self._ids.next_id(),
            branch_id=branch_id,
            name=name,
            namespace=namespace or None,
            description=description,
        )

        def insert(state: StoreState) -> TranslationKey:
            if branch_id not in state.branches:
                raise ConstraintViolationError(f"Branch {branch_id!r} does not exist")
            if state.key_named(branch_id, name, namespace) is not None:
                raise ConstraintViolationError(
                    f"Key {format_key(name, namespace)!r} already exists "
                    f"in branch {branch_id!r}"
                )
            state.keys[key.id] = key
            return key

        return self._write(insert, uow)

    async def upsert_translation(
        self,
        key_id: str,
        language: str,
        value: str,
        uow: UnitOfWork | None = None,
    ) -> Translation:
        new_id = self._ids.next_id()

        def upsert(state: StoreState) -> Translation:
            if key_id not in state.keys:
                raise ConstraintViolationError(f"Key {key_id!r} does not exist")
            existing = state.translation_for(key_id, language)
            row = Translation(
                id=existing.id if existing is not None else new_id,
                key_id=key_id,
                language=language,
                value=value,
            )
            state.translations[row.id] = row
            return row

        return self._write(upsert, uow)

    async def copy_keys_and_translations(
        self,
        source_branch_id: str,
        target_branch_id: str,
        uow: UnitOfWork | None = None,
    ) -> int:
        if uow is None:
            async with self.transaction() as own:
                return await self.copy_keys_and_translations(
                    source_branch_id, target_branch_id, uow=own
                )

        source_keys = await self.list_keys_with_translations(source_branch_id, uow=uow)
        for source_key in source_keys:
            new_key = await self.create_key(
                target_branch_id,
                source_key.name,
                source_key.namespace,
                description=source_key.description,
                uow=uow,
            )
            for translation in source_key.translations:
                await self.upsert_translation(
                    new_key.id, translation.language, translation.value, uow=uow
                )
        return len(source_keys)

    # ── Test helpers ─────────────────────────────────────────────

    def snapshot(self) -> dict[str, list[dict[str, Any]]]:
        """Every committed row, in a stable order, for equality assertions."""
        return {
            "branches": [
                b.model_dump() for b in sorted(self._state.branches.values(), key=_by_id)
            ],
            "keys": [
                k.model_dump() for k in sorted(self._state.keys.values(), key=_by_id)
            ],
            "translations": [
                t.model_dump()
                for t in sorted(self._state.translations.values(), key=_by_id)
            ],
        }

    def clear(self) -> None:
        self._state = StoreState()


def _by_id(row: Branch | TranslationKey | Translation) -> str:
    return row.id
