"""Domain events emitted by the branch command handlers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class DomainEvent(BaseModel):
    """Base class for all Domain Events.

    Events are immutable and carry tracing context.
    """

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    aggregate_id: str | None = None
    aggregate_type: str | None = None
    correlation_id: str | None = None


class BranchesMerged(DomainEvent):
    """A source branch was merged into a target branch and committed."""

    aggregate_type: str | None = "Branch"
    source_branch_id: str
    source_branch_name: str
    target_branch_id: str
    target_branch_name: str
    space_id: str
    merged: int
    conflicts_resolved: int = 0
    user_id: str | None = None


class BranchForked(DomainEvent):
    """A branch was created as a copy-on-write fork of another branch."""

    aggregate_type: str | None = "Branch"
    branch_id: str
    branch_name: str
    space_id: str
    source_branch_id: str
    key_count: int
    user_id: str | None = None
