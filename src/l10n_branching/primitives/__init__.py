"""Primitives — lowest layer: exceptions and id generation."""

from __future__ import annotations

from .exceptions import (
    BranchingError,
    ConstraintViolationError,
    DomainError,
    EntityNotFoundError,
    InfrastructureError,
    InvariantViolationError,
    MergeError,
    MergeTransactionError,
    NotFoundError,
    PersistenceError,
    SessionManagementError,
    UnitOfWorkError,
    ValidationError,
)
from .id_generator import IIDGenerator, UUID4Generator

__all__ = [
    "BranchingError",
    "ConstraintViolationError",
    "DomainError",
    "EntityNotFoundError",
    "IIDGenerator",
    "InfrastructureError",
    "InvariantViolationError",
    "MergeError",
    "MergeTransactionError",
    "NotFoundError",
    "PersistenceError",
    "SessionManagementError",
    "UUID4Generator",
    "UnitOfWorkError",
    "ValidationError",
]
