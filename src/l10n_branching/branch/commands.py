"""Write side of the branch module: merge and copy-on-write fork."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from pydantic import Field, field_validator

from ..cqrs.command import Command
from ..cqrs.handler import CommandHandler
from ..cqrs.response import CommandResponse
from ..domain.branch import Branch
from ..domain.diff import MergeRequest, MergeResult, Resolution
from ..domain.events import BranchesMerged, BranchForked, DomainEvent
from ..primitives.exceptions import EntityNotFoundError, ValidationError

if TYPE_CHECKING:
    from ..cqrs.event_dispatcher import EventDispatcher
    from ..ports.store import ITranslationStore
    from ..services.merge_executor import MergeExecutor

logger = logging.getLogger(__name__)


class MergeBranchesCommand(Command[MergeResult]):
    source_branch_id: str
    target_branch_id: str
    resolutions: list[Resolution] = Field(default_factory=list)
    user_id: str | None = None


class ForkBranchCommand(Command[Branch]):
    """Create *name* in *space_id* as a full copy of *source_branch_id*."""

    name: str = Field(min_length=1, max_length=255)
    space_id: str
    source_branch_id: str
    user_id: str | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Branch name must not be blank")
        return stripped


async def _publish(
    dispatcher: EventDispatcher | None, events: list[DomainEvent]
) -> None:
    """Dispatch events emitted by an already-committed change.

    A failing handler cannot undo the commit, so it is logged, not raised.
    """
    if dispatcher is None:
        return
    try:
        await dispatcher.dispatch(events)
    except Exception as exc:  # noqa: BLE001
        logger.error("Error dispatching %d event(s): %s", len(events), exc, exc_info=True)


class MergeBranchesHandler(CommandHandler[MergeResult]):
    """Merges two branches and announces the merge with ``BranchesMerged``.

    Unresolved conflicts are returned with ``success=False`` and no event.
    """

    def __init__(
        self,
        store: ITranslationStore,
        merge_executor: MergeExecutor,
        event_dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._store = store
        self._merge_executor = merge_executor
        self._event_dispatcher = event_dispatcher

    async def handle(
        self, command: MergeBranchesCommand
    ) -> CommandResponse[MergeResult]:
        source, target = await asyncio.gather(
            self._store.get_branch(command.source_branch_id),
            self._store.get_branch(command.target_branch_id),
        )
        if source is None:
            raise EntityNotFoundError("Source branch", command.source_branch_id)
        if target is None:
            raise EntityNotFoundError("Target branch", command.target_branch_id)

        result = await self._merge_executor.merge(
            command.source_branch_id,
            MergeRequest(
                target_branch_id=command.target_branch_id,
                resolutions=command.resolutions,
            ),
        )
        if not result.success:
            return CommandResponse(
                result=result, success=False, correlation_id=command.correlation_id
            )

        event = BranchesMerged(
            aggregate_id=target.id,
            correlation_id=command.correlation_id,
            source_branch_id=source.id,
            source_branch_name=source.name,
            target_branch_id=target.id,
            target_branch_name=target.name,
            space_id=target.space_id,
            merged=result.merged,
            conflicts_resolved=len(command.resolutions),
            user_id=command.user_id,
        )
        await _publish(self._event_dispatcher, [event])
        return CommandResponse(
            result=result, events=[event], correlation_id=command.correlation_id
        )


class ForkBranchHandler(CommandHandler[Branch]):
    """Creates a branch as a copy-on-write fork of an existing one.

    The new branch and every copied key and translation are written in one
    unit of work; ``BranchForked`` is dispatched after it commits.
    """

    def __init__(
        self,
        store: ITranslationStore,
        event_dispatcher: EventDispatcher | None = None,
    ) -> None:
        self._store = store
        self._event_dispatcher = event_dispatcher

    async def handle(
        self, command: ForkBranchCommand
    ) -> CommandResponse[Branch]:
        source = await self._store.get_branch(command.source_branch_id)
        if source is None:
            raise EntityNotFoundError("Source branch", command.source_branch_id)
        if source.space_id != command.space_id:
            raise ValidationError(
                {"source_branch_id": ["Source branch must belong to the same space"]}
            )
        if await self._store.find_branch_by_name(command.space_id, command.name):
            raise ValidationError(
                {"name": [f"Branch {command.name!r} already exists in this space"]}
            )

        events: list[DomainEvent] = []
        async with self._store.transaction() as uow:
            branch = await self._store.create_branch(
                command.space_id, command.name, source.id, uow=uow
            )
            key_count = await self._store.copy_keys_and_translations(
                source.id, branch.id, uow=uow
            )
            events.append(
                BranchForked(
                    aggregate_id=branch.id,
                    correlation_id=command.correlation_id,
                    branch_id=branch.id,
                    branch_name=branch.name,
                    space_id=branch.space_id,
                    source_branch_id=source.id,
                    key_count=key_count,
                    user_id=command.user_id,
                )
            )
            uow.on_commit(lambda: _publish(self._event_dispatcher, events))

        logger.info(
            "Forked branch %s from %s with %d key(s)", branch.name, source.name, key_count
        )
        return CommandResponse(
            result=branch, events=events, correlation_id=command.correlation_id
        )
