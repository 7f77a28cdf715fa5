from __future__ import annotations

import pytest

from l10n_branching import BranchesMerged, BranchForked, EventDispatcher


def _merged() -> BranchesMerged:
    return BranchesMerged(
        source_branch_id="b2",
        source_branch_name="feature",
        target_branch_id="b1",
        target_branch_name="main",
        space_id="space-1",
        merged=3,
    )


class RecordingHandler:
    def __init__(self) -> None:
        self.events: list[object] = []

    async def handle(self, event: object) -> None:
        self.events.append(event)


@pytest.mark.asyncio()
async def test_dispatch_to_handler_object_and_callable() -> None:
    dispatcher = EventDispatcher()
    handler = RecordingHandler()
    seen: list[object] = []
    dispatcher.register(BranchesMerged, handler)
    dispatcher.register(BranchesMerged, seen.append)

    event = _merged()
    await dispatcher.dispatch([event])

    assert handler.events == [event]
    assert seen == [event]


@pytest.mark.asyncio()
async def test_dispatch_only_matching_type() -> None:
    dispatcher = EventDispatcher()
    handler = RecordingHandler()
    dispatcher.register(BranchForked, handler)

    await dispatcher.dispatch([_merged()])

    assert handler.events == []


def test_register_is_idempotent() -> None:
    dispatcher = EventDispatcher()
    handler = RecordingHandler()
    dispatcher.register(BranchesMerged, handler)
    dispatcher.register(BranchesMerged, handler)

    assert dispatcher.get_registered_handlers() == {BranchesMerged: [handler]}

    dispatcher.clear()
    assert dispatcher.get_registered_handlers() == {}


@pytest.mark.asyncio()
async def test_failing_handler_is_logged_and_raised(
    caplog: pytest.LogCaptureFixture,
) -> None:
    dispatcher = EventDispatcher()

    async def broken(event: BranchesMerged) -> None:
        raise RuntimeError("boom")

    dispatcher.register(BranchesMerged, broken)

    with pytest.raises(RuntimeError, match="boom"):
        await dispatcher.dispatch([_merged()])

    assert "Error executing handler" in caplog.text
