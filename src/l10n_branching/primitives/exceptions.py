"""Domain and infrastructure exceptions for l10n-branching."""

from __future__ import annotations


class BranchingError(Exception):
    """Root exception for the branch diff/merge engine."""


class DomainError(BranchingError):
    """Base class for all domain-related errors."""


class NotFoundError(DomainError):
    """Raised when a branch, key or other resource is not found."""


class EntityNotFoundError(NotFoundError):
    """Raised when a specific entity cannot be found by ID."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id={entity_id!r} not found")


class InvariantViolationError(DomainError):
    """Raised when a domain invariant is violated."""


class ValidationError(BranchingError):
    """Raised when a request is structurally invalid.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))


class InfrastructureError(BranchingError):
    """Base class for all infrastructure-related errors."""


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class ConstraintViolationError(PersistenceError):
    """Raised when a write would break a store uniqueness constraint."""


class UnitOfWorkError(PersistenceError):
    """Raised when Unit of Work operations fail."""


class SessionManagementError(PersistenceError):
    """Raised when session creation or management fails."""


class MergeError(BranchingError):
    """Base class for merge failures (never raised for unresolved conflicts)."""


class MergeTransactionError(MergeError):
    """The write phase of a merge failed and was rolled back.

    Nothing was written to the target branch; the whole merge call may be
    re-issued.
    """

    def __init__(self, source_branch_id: str, target_branch_id: str) -> None:
        self.source_branch_id = source_branch_id
        self.target_branch_id = target_branch_id
        super().__init__(
            f"Merge of branch {source_branch_id!r} into {target_branch_id!r} "
            "failed and was rolled back"
        )
