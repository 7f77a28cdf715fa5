"""Ephemeral diff and merge value objects.

None of these are persisted: they live for the duration of a single
``compute_diff`` or ``merge`` call and are serialisable with
``model_dump(mode="json")`` for an API layer.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field

from .branch import KeyIdentity, format_key, key_identity
from .translation_map import TranslationMap
from .value_object import ValueObject


class ChangeKind(str, Enum):
    """Classification of a key when comparing a source to a target branch."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    CONFLICT = "conflict"
    UNCHANGED = "unchanged"


class BranchRef(ValueObject):
    id: str
    name: str


class _KeyedEntry(ValueObject):
    key: str
    namespace: str | None = None

    @property
    def identity(self) -> KeyIdentity:
        return key_identity(self.key, self.namespace)

    @property
    def label(self) -> str:
        return format_key(self.key, self.namespace)


class DiffEntry(_KeyedEntry):
    """A key present on one side only, with that side's full map."""

    translations: TranslationMap


class ModifiedEntry(_KeyedEntry):
    source: TranslationMap
    target: TranslationMap


class ConflictEntry(_KeyedEntry):
    source: TranslationMap
    target: TranslationMap


class ResolutionChoice(str, Enum):
    SOURCE = "source"
    TARGET = "target"


class Resolution(_KeyedEntry):
    """The caller's explicit decision for one conflicting key.

    ``resolution`` is ``"source"``, ``"target"`` or a custom translation map
    whose languages are upserted verbatim.
    """

    resolution: Literal["source", "target"] | TranslationMap

    @property
    def choice(self) -> ResolutionChoice | None:
        """The keep-a-side choice, or ``None`` for a custom map."""
        if isinstance(self.resolution, str):
            return ResolutionChoice(self.resolution)
        return None


class BranchDiffResult(ValueObject):
    """Classified delta between a source and a target branch."""

    source: BranchRef
    target: BranchRef
    added: list[DiffEntry] = Field(default_factory=list)
    modified: list[ModifiedEntry] = Field(default_factory=list)
    deleted: list[DiffEntry] = Field(default_factory=list)
    conflicts: list[ConflictEntry] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.deleted or self.conflicts)

    def summary(self) -> dict[str, int]:
        return {
            ChangeKind.ADDED.value: len(self.added),
            ChangeKind.MODIFIED.value: len(self.modified),
            ChangeKind.DELETED.value: len(self.deleted),
            ChangeKind.CONFLICT.value: len(self.conflicts),
        }

    def classify(self, name: str, namespace: str | None = None) -> ChangeKind:
        """Return the category a key landed in (``UNCHANGED`` if none)."""
        identity = key_identity(name, namespace)
        categories: list[tuple[ChangeKind, list[_KeyedEntry]]] = [
            (ChangeKind.ADDED, list(self.added)),
            (ChangeKind.MODIFIED, list(self.modified)),
            (ChangeKind.DELETED, list(self.deleted)),
            (ChangeKind.CONFLICT, list(self.conflicts)),
        ]
        for kind, entries in categories:
            if any(entry.identity == identity for entry in entries):
                return kind
        return ChangeKind.UNCHANGED


class MergeRequest(ValueObject):
    target_branch_id: str
    resolutions: list[Resolution] = Field(default_factory=list)


class MergeResult(ValueObject):
    """Outcome of a merge call.

    ``success=False`` is the soft-failure path: ``conflicts`` then holds
    exactly the conflicts that still need a resolution and nothing was
    written.
    """

    success: bool
    merged: int = 0
    conflicts: list[ConflictEntry] | None = None
