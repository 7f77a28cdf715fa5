from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from l10n_branching.adapters.memory import InMemoryTranslationStore
from l10n_branching.correlation import set_correlation_id
from l10n_branching.instrumentation import HookRegistry, set_hook_registry
from l10n_branching.services import DiffCalculator, MergeExecutor

if TYPE_CHECKING:
    from l10n_branching.domain import Branch, TranslationMap
    from l10n_branching.ports import ITranslationStore


async def _seed_keys(
    store: ITranslationStore,
    branch: Branch,
    keys: dict[str, TranslationMap],
    namespace: str | None = None,
) -> None:
    """Create *keys* (name -> translation map) in *branch* in one transaction."""
    async with store.transaction() as uow:
        for name, translations in keys.items():
            key = await store.create_key(branch.id, name, namespace, uow=uow)
            for language, value in translations.items():
                await store.upsert_translation(key.id, language, value, uow=uow)


async def _set_value(
    store: ITranslationStore,
    branch: Branch,
    name: str,
    language: str,
    value: str,
    namespace: str | None = None,
) -> None:
    key = await store.find_key(branch.id, name, namespace)
    assert key is not None
    await store.upsert_translation(key.id, language, value)


async def _branch_values(
    store: ITranslationStore, branch: Branch
) -> dict[tuple[str | None, str], TranslationMap]:
    keys = await store.list_keys_with_translations(branch.id)
    return {key.identity: key.translation_map() for key in keys}


@pytest.fixture(autouse=True)
def _reset_context() -> None:
    set_hook_registry(HookRegistry())
    set_correlation_id(None)


@pytest.fixture
def store() -> InMemoryTranslationStore:
    return InMemoryTranslationStore()


@pytest.fixture
def diff_calculator(store: InMemoryTranslationStore) -> DiffCalculator:
    return DiffCalculator(store)


@pytest.fixture
def merge_executor(
    store: InMemoryTranslationStore, diff_calculator: DiffCalculator
) -> MergeExecutor:
    return MergeExecutor(store, diff_calculator)


@pytest.fixture
async def main_branch(store: InMemoryTranslationStore) -> Branch:
    return await store.create_branch("space-1", "main")


@pytest.fixture
async def feature_branch(store: InMemoryTranslationStore, main_branch: Branch) -> Branch:
    """A branch forked from ``main`` (``source_branch_id`` points at main)."""
    branch = await store.create_branch("space-1", "feature", main_branch.id)
    await store.copy_keys_and_translations(main_branch.id, branch.id)
    return branch


# Store-agnostic helpers, exposed as fixtures so every test module (memory or
# SQLAlchemy) can seed and inspect branches the same way.


@pytest.fixture
def seed_keys():
    return _seed_keys


@pytest.fixture
def set_value():
    return _set_value


@pytest.fixture
def branch_values():
    return _branch_values
