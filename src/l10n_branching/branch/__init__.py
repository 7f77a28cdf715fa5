"""Branch module — commands and queries exposed to an API layer."""

from __future__ import annotations

from .commands import (
    ForkBranchCommand,
    ForkBranchHandler,
    MergeBranchesCommand,
    MergeBranchesHandler,
)
from .queries import ComputeDiffHandler, ComputeDiffQuery

__all__ = [
    "ComputeDiffHandler",
    "ComputeDiffQuery",
    "ForkBranchCommand",
    "ForkBranchHandler",
    "MergeBranchesCommand",
    "MergeBranchesHandler",
]
