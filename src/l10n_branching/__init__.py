"""l10n-branching — branch diff and merge engine for translation projects.

Two branches of a translation project, each holding a complete copy of its
keys and per-language values, are compared (``DiffCalculator``) and
reconciled (``MergeExecutor``) with an explicit conflict-resolution protocol
and an all-or-nothing write phase.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import InMemoryTranslationStore, InMemoryUnitOfWork

# ── Branch module ────────────────────────────────────────────────
from .branch import (
    ComputeDiffHandler,
    ComputeDiffQuery,
    ForkBranchCommand,
    ForkBranchHandler,
    MergeBranchesCommand,
    MergeBranchesHandler,
)
from .correlation import generate_correlation_id, get_correlation_id, set_correlation_id

# ── CQRS ─────────────────────────────────────────────────────────
from .cqrs import (
    Command,
    CommandHandler,
    CommandResponse,
    EventDispatcher,
    Query,
    QueryHandler,
    QueryResponse,
)

# ── Domain ───────────────────────────────────────────────────────
from .domain import (
    Branch,
    BranchDiffResult,
    BranchesMerged,
    BranchForked,
    BranchRef,
    ChangeKind,
    ConflictEntry,
    DiffEntry,
    DomainEvent,
    KeyWithTranslations,
    MergeRequest,
    MergeResult,
    ModifiedEntry,
    Resolution,
    ResolutionChoice,
    Translation,
    TranslationKey,
    TranslationMap,
    TranslationValue,
)

# ── Instrumentation ──────────────────────────────────────────────
from .instrumentation import (
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    set_hook_registry,
)

# ── Ports ────────────────────────────────────────────────────────
from .ports import ITranslationStore, UnitOfWork

# ── Primitives ───────────────────────────────────────────────────
from .primitives import (
    BranchingError,
    ConstraintViolationError,
    DomainError,
    EntityNotFoundError,
    InvariantViolationError,
    MergeError,
    MergeTransactionError,
    NotFoundError,
    PersistenceError,
    UnitOfWorkError,
    ValidationError,
)

# ── Services ─────────────────────────────────────────────────────
from .services import (
    DiffCalculator,
    IConflictClassifier,
    LineageConflictClassifier,
    MergeExecutor,
)

__all__ = [
    "Branch",
    "BranchDiffResult",
    "BranchForked",
    "BranchRef",
    "BranchesMerged",
    "BranchingError",
    "ChangeKind",
    "Command",
    "CommandHandler",
    "CommandResponse",
    "ComputeDiffHandler",
    "ComputeDiffQuery",
    "ConflictEntry",
    "ConstraintViolationError",
    "DiffCalculator",
    "DiffEntry",
    "DomainError",
    "DomainEvent",
    "EntityNotFoundError",
    "EventDispatcher",
    "ForkBranchCommand",
    "ForkBranchHandler",
    "HookRegistration",
    "HookRegistry",
    "IConflictClassifier",
    "ITranslationStore",
    "InMemoryTranslationStore",
    "InMemoryUnitOfWork",
    "InstrumentationHook",
    "InvariantViolationError",
    "KeyWithTranslations",
    "LineageConflictClassifier",
    "MergeBranchesCommand",
    "MergeBranchesHandler",
    "MergeError",
    "MergeExecutor",
    "MergeRequest",
    "MergeResult",
    "MergeTransactionError",
    "ModifiedEntry",
    "NotFoundError",
    "PersistenceError",
    "Query",
    "QueryHandler",
    "QueryResponse",
    "Resolution",
    "ResolutionChoice",
    "Translation",
    "TranslationKey",
    "TranslationMap",
    "TranslationValue",
    "UnitOfWork",
    "UnitOfWorkError",
    "ValidationError",
    "generate_correlation_id",
    "get_correlation_id",
    "get_hook_registry",
    "set_correlation_id",
    "set_hook_registry",
]
