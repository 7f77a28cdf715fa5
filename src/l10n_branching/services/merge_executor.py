"""Merge Executor — applies a branch diff to the target branch.

Process:

1. Compute the diff between source and target.
2. If any conflict has no caller-supplied resolution, return the unresolved
   conflicts and write nothing.
3. Otherwise apply added keys, modified keys and resolved conflicts inside a
   single unit of work, which commits all of them or none.

Keys that exist only in the target ("deleted") are never removed by a
merge; removing a key is an explicit, separate operation.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from ..domain.branch import key_identity
from ..domain.diff import MergeRequest, MergeResult, ResolutionChoice
from ..instrumentation import get_hook_registry
from ..primitives.exceptions import MergeTransactionError
from .diff_calculator import DiffCalculator

if TYPE_CHECKING:
    from ..domain.branch import KeyIdentity
    from ..domain.diff import (
        BranchDiffResult,
        ConflictEntry,
        DiffEntry,
        ModifiedEntry,
        Resolution,
    )
    from ..domain.translation_map import TranslationMap
    from ..ports.store import ITranslationStore
    from ..ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _match_resolutions(
    conflicts: list[ConflictEntry], resolutions: list[Resolution]
) -> dict[KeyIdentity, Resolution]:
    """Map each conflict to its resolution.

    A resolution matches on ``(namespace, key)``. One without a namespace also
    matches a namespaced conflict by key name, provided no other conflict
    shares that name.
    """
    by_identity = {r.identity: r for r in resolutions}
    name_counts = Counter(c.key for c in conflicts)
    matched: dict[KeyIdentity, Resolution] = {}
    for conflict in conflicts:
        resolution = by_identity.get(conflict.identity)
        if resolution is None and name_counts[conflict.key] == 1:
            resolution = by_identity.get(key_identity(conflict.key))
        if resolution is not None:
            matched[conflict.identity] = resolution
    return matched


class MergeExecutor:
    """Merges one branch into another with an explicit resolution protocol.

    The executor never guesses: a conflict is applied only when the caller
    names a resolution for it (``"source"``, ``"target"`` or a custom map).
    """

    def __init__(
        self,
        store: ITranslationStore,
        diff_calculator: DiffCalculator | None = None,
    ) -> None:
        self._store = store
        self._diff_calculator = diff_calculator or DiffCalculator(store)

    async def preview_merge(
        self, source_branch_id: str, target_branch_id: str
    ) -> BranchDiffResult:
        """Return the merge plan without writing anything."""
        return await self._diff_calculator.compute_diff(
            source_branch_id, target_branch_id
        )

    async def merge(self, source_branch_id: str, request: MergeRequest) -> MergeResult:
        """Merge *source_branch_id* into ``request.target_branch_id``.

        Returns ``MergeResult(success=False, conflicts=[...])`` when
        conflicts remain unresolved.

        Raises:
            EntityNotFoundError: either branch does not exist.
            ValidationError: the branches belong to different spaces.
            MergeTransactionError: the write phase failed and was rolled back.
        """
        attributes: dict[str, object] = {
            "branch.source_id": source_branch_id,
            "branch.target_id": request.target_branch_id,
            "merge.resolutions": len(request.resolutions),
        }

        async def _merge() -> MergeResult:
            return await self._merge(source_branch_id, request)

        result: MergeResult = await get_hook_registry().execute_all(
            "branch.merge", attributes, _merge
        )
        return result

    async def _merge(self, source_branch_id: str, request: MergeRequest) -> MergeResult:
        target_branch_id = request.target_branch_id
        diff = await self._diff_calculator.compute_diff(
            source_branch_id, target_branch_id
        )

        resolutions = _match_resolutions(diff.conflicts, request.resolutions)
        unresolved = [c for c in diff.conflicts if c.identity not in resolutions]
        if unresolved:
            logger.info(
                "Merge %s -> %s aborted: %d unresolved conflict(s)",
                diff.source.name,
                diff.target.name,
                len(unresolved),
            )
            return MergeResult(success=False, merged=0, conflicts=unresolved)

        used = {r.identity for r in resolutions.values()}
        for resolution in request.resolutions:
            if resolution.identity not in used:
                logger.debug(
                    "Ignoring resolution for non-conflicting key %s", resolution.label
                )

        logger.info(
            "Merging %s -> %s: %s",
            diff.source.name,
            diff.target.name,
            diff.summary(),
        )
        try:
            async with self._store.transaction() as uow:
                merged = await self._apply(target_branch_id, diff, resolutions, uow)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "Merge %s -> %s failed; no changes were committed",
                diff.source.name,
                diff.target.name,
            )
            raise MergeTransactionError(source_branch_id, target_branch_id) from exc

        logger.info(
            "Merged %s -> %s: %d key(s) applied",
            diff.source.name,
            diff.target.name,
            merged,
        )
        return MergeResult(success=True, merged=merged)

    # -- write phase --------------------------------------------------------

    async def _apply(
        self,
        target_branch_id: str,
        diff: BranchDiffResult,
        resolutions: dict[KeyIdentity, Resolution],
        uow: UnitOfWork,
    ) -> int:
        merged = 0
        for added in diff.added:
            await self._apply_added(target_branch_id, added, uow)
            merged += 1
        for modified in diff.modified:
            if await self._upsert_values(
                target_branch_id, modified, modified.source, uow
            ):
                merged += 1
        for conflict in diff.conflicts:
            values = self._resolved_values(conflict, resolutions[conflict.identity])
            if values is None:
                continue
            if await self._upsert_values(target_branch_id, conflict, values, uow):
                merged += 1
        return merged

    async def _apply_added(
        self, target_branch_id: str, entry: DiffEntry, uow: UnitOfWork
    ) -> None:
        key = await self._store.create_key(
            target_branch_id, entry.key, entry.namespace, uow=uow
        )
        for language, value in entry.translations.items():
            await self._store.upsert_translation(key.id, language, value, uow=uow)

    async def _upsert_values(
        self,
        target_branch_id: str,
        entry: ModifiedEntry | ConflictEntry,
        values: TranslationMap,
        uow: UnitOfWork,
    ) -> bool:
        """Upsert *values* per language; languages not in *values* are kept."""
        key = await self._store.find_key(
            target_branch_id, entry.key, entry.namespace, uow=uow
        )
        if key is None:
            logger.warning(
                "Key %s vanished from target branch %s during merge; skipped",
                entry.label,
                target_branch_id,
            )
            return False
        for language, value in values.items():
            await self._store.upsert_translation(key.id, language, value, uow=uow)
        return True

    @staticmethod
    def _resolved_values(
        conflict: ConflictEntry, resolution: Resolution
    ) -> TranslationMap | None:
        """Values to write for a resolved conflict; ``None`` keeps the target."""
        resolved = resolution.resolution
        if isinstance(resolved, dict):
            return dict(resolved) or None
        if resolution.choice is ResolutionChoice.SOURCE:
            return conflict.source
        return None
