"""Domain model — entities, translation maps, diff/merge value objects, events."""

from __future__ import annotations

from l10n_branching.domain.branch import (
    Branch,
    KeyIdentity,
    KeyWithTranslations,
    Translation,
    TranslationKey,
    TranslationValue,
    format_key,
    key_identity,
)
from l10n_branching.domain.diff import (
    BranchDiffResult,
    BranchRef,
    ChangeKind,
    ConflictEntry,
    DiffEntry,
    MergeRequest,
    MergeResult,
    ModifiedEntry,
    Resolution,
    ResolutionChoice,
)
from l10n_branching.domain.events import BranchesMerged, BranchForked, DomainEvent
from l10n_branching.domain.translation_map import (
    TranslationMap,
    to_translation_map,
    translations_equal,
)
from l10n_branching.domain.value_object import ValueObject

__all__ = [
    "Branch",
    "BranchDiffResult",
    "BranchForked",
    "BranchRef",
    "BranchesMerged",
    "ChangeKind",
    "ConflictEntry",
    "DiffEntry",
    "DomainEvent",
    "KeyIdentity",
    "KeyWithTranslations",
    "MergeRequest",
    "MergeResult",
    "ModifiedEntry",
    "Resolution",
    "ResolutionChoice",
    "Translation",
    "TranslationKey",
    "TranslationMap",
    "TranslationValue",
    "ValueObject",
    "format_key",
    "key_identity",
    "to_translation_map",
    "translations_equal",
]
