"""Diff Engine and Merge Orchestrator."""

from __future__ import annotations

from .diff_calculator import (
    DiffCalculator,
    IConflictClassifier,
    LineageConflictClassifier,
)
from .merge_executor import MergeExecutor

__all__ = [
    "DiffCalculator",
    "IConflictClassifier",
    "LineageConflictClassifier",
    "MergeExecutor",
]
