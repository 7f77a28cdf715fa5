"""Diff Calculator — classified delta between two branches.

Each branch holds a complete copy of its keys (copy-on-write), so a diff is
a comparison of two full key sets matched by ``(namespace, name)``.

Terminology, from the source's point of view when merging into the target:

- **added**: key in source, absent from target
- **modified**: key in both, maps differ, no direct parent relationship
- **conflict**: key in both, maps differ, source was forked from target
- **deleted**: key in target, absent from source (informational only)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from ..domain.branch import KeyIdentity, format_key
from ..domain.diff import (
    BranchDiffResult,
    BranchRef,
    ChangeKind,
    ConflictEntry,
    DiffEntry,
    ModifiedEntry,
)
from ..domain.translation_map import TranslationMap, translations_equal
from ..instrumentation import get_hook_registry
from ..primitives.exceptions import (
    EntityNotFoundError,
    InvariantViolationError,
    ValidationError,
)

if TYPE_CHECKING:
    from ..domain.branch import Branch, KeyWithTranslations
    from ..ports.store import ITranslationStore

logger = logging.getLogger(__name__)


class IConflictClassifier(Protocol):
    """Decides whether a key whose maps differ is a modification or a conflict."""

    def classify(self, source: Branch, target: Branch) -> ChangeKind: ...


class LineageConflictClassifier(IConflictClassifier):
    """Single-hop lineage rule.

    When the source was forked directly from the target, a key whose value
    differs on the two sides must have been changed on both since the fork:
    a conflict. Without that relationship there is no basis to claim a
    double edit, so the source value is treated as an intended overwrite.

    Only the immediate ``source_branch_id`` is inspected; grandparents and
    siblings are never considered related.
    """

    def classify(self, source: Branch, target: Branch) -> ChangeKind:
        if source.is_child_of(target):
            return ChangeKind.CONFLICT
        return ChangeKind.MODIFIED


def _index_keys(
    branch: Branch, keys: list[KeyWithTranslations]
) -> dict[KeyIdentity, TranslationMap]:
    index: dict[KeyIdentity, TranslationMap] = {}
    for key in keys:
        if key.identity in index:
            raise InvariantViolationError(
                f"Branch {branch.id!r} holds key "
                f"{format_key(key.name, key.namespace)!r} more than once"
            )
        index[key.identity] = key.translation_map()
    return index


class DiffCalculator:
    """Computes :class:`BranchDiffResult` objects from an :class:`ITranslationStore`.

    Stateless between calls; safe to share.
    """

    def __init__(
        self,
        store: ITranslationStore,
        classifier: IConflictClassifier | None = None,
    ) -> None:
        self._store = store
        self._classifier = classifier or LineageConflictClassifier()

    async def compute_diff(
        self, source_branch_id: str, target_branch_id: str
    ) -> BranchDiffResult:
        """Compute the diff between *source_branch_id* and *target_branch_id*.

        Raises:
            EntityNotFoundError: either branch does not exist.
            ValidationError: the branches belong to different spaces.
        """
        attributes: dict[str, object] = {
            "branch.source_id": source_branch_id,
            "branch.target_id": target_branch_id,
        }

        async def _compute() -> BranchDiffResult:
            return await self._compute(source_branch_id, target_branch_id)

        result: BranchDiffResult = await get_hook_registry().execute_all(
            "branch.diff", attributes, _compute
        )
        return result

    async def _compute(
        self, source_branch_id: str, target_branch_id: str
    ) -> BranchDiffResult:
        source_branch, target_branch = await asyncio.gather(
            self._store.get_branch(source_branch_id),
            self._store.get_branch(target_branch_id),
        )
        if source_branch is None:
            raise EntityNotFoundError("Source branch", source_branch_id)
        if target_branch is None:
            raise EntityNotFoundError("Target branch", target_branch_id)
        if source_branch.space_id != target_branch.space_id:
            raise ValidationError(
                {"target_branch_id": ["Branches must be in the same space"]}
            )

        source_keys, target_keys = await asyncio.gather(
            self._store.list_keys_with_translations(source_branch_id),
            self._store.list_keys_with_translations(target_branch_id),
        )
        source_map = _index_keys(source_branch, source_keys)
        target_map = _index_keys(target_branch, target_keys)
        divergence = self._classifier.classify(source_branch, target_branch)

        added: list[DiffEntry] = []
        modified: list[ModifiedEntry] = []
        deleted: list[DiffEntry] = []
        conflicts: list[ConflictEntry] = []

        for (namespace, name), source_translations in source_map.items():
            target_translations = target_map.get((namespace, name))
            if target_translations is None:
                added.append(
                    DiffEntry(
                        key=name, namespace=namespace, translations=source_translations
                    )
                )
            elif translations_equal(source_translations, target_translations):
                continue
            elif divergence is ChangeKind.CONFLICT:
                conflicts.append(
                    ConflictEntry(
                        key=name,
                        namespace=namespace,
                        source=source_translations,
                        target=target_translations,
                    )
                )
            else:
                modified.append(
                    ModifiedEntry(
                        key=name,
                        namespace=namespace,
                        source=source_translations,
                        target=target_translations,
                    )
                )

        for (namespace, name), target_translations in target_map.items():
            if (namespace, name) not in source_map:
                deleted.append(
                    DiffEntry(
                        key=name, namespace=namespace, translations=target_translations
                    )
                )

        result = BranchDiffResult(
            source=BranchRef(id=source_branch.id, name=source_branch.name),
            target=BranchRef(id=target_branch.id, name=target_branch.name),
            added=added,
            modified=modified,
            deleted=deleted,
            conflicts=conflicts,
        )
        logger.debug(
            "Diff %s -> %s: %s",
            source_branch.name,
            target_branch.name,
            result.summary(),
        )
        return result
