"""EventDispatcher — runs local handlers for emitted domain events."""

from __future__ import annotations

import asyncio
import logging
from inspect import isawaitable
from typing import TYPE_CHECKING, Protocol, TypeAlias, TypeVar

from ..domain.events import DomainEvent
from ..instrumentation import get_hook_registry

if TYPE_CHECKING:
    from collections.abc import Awaitable

logger = logging.getLogger(__name__)

E_contra = TypeVar("E_contra", bound=DomainEvent, contravariant=True)


class EventHandlerProtocol(Protocol[E_contra]):
    """Handler object with a ``handle(event)`` method."""

    def handle(self, event: E_contra) -> Awaitable[None] | None: ...


class EventHandlerCallable(Protocol[E_contra]):
    def __call__(self, event: E_contra) -> Awaitable[None] | None: ...


EventHandler: TypeAlias = "EventHandlerCallable[DomainEvent] | EventHandlerProtocol[DomainEvent]"


class EventDispatcher:
    """Local execution engine for domain events.

    Holds handler instances per event type and runs them concurrently under a
    semaphore. A failing handler is logged and re-raised; events are
    dispatched only after the unit of work that produced them has committed.
    """

    def __init__(self, max_concurrency: int = 10) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = {}
        self._semaphore = asyncio.Semaphore(max_concurrency)

    def register(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Register a handler for a specific event type."""
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    async def dispatch(self, events: list[DomainEvent]) -> None:
        """Dispatch events to all registered handlers."""
        registry = get_hook_registry()
        for event in events:
            handlers = self._handlers.get(type(event), [])
            if not handlers:
                continue

            event_name = type(event).__name__
            attributes: dict[str, object] = {
                "event.type": event_name,
                "event.id": event.event_id,
                "correlation_id": event.correlation_id,
            }

            async def _run(
                current_event: DomainEvent = event,
                current_handlers: list[EventHandler] = handlers,
            ) -> None:
                await asyncio.gather(
                    *(self._invoke(h, current_event) for h in current_handlers)
                )

            await registry.execute_all(f"event.dispatch.{event_name}", attributes, _run)

    async def _invoke(self, handler: EventHandler, event: DomainEvent) -> None:
        async with self._semaphore:
            try:
                if hasattr(handler, "handle"):
                    result = handler.handle(event)
                else:
                    result = handler(event)
                if isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Error executing handler %s for event %s",
                    type(handler).__name__,
                    type(event).__name__,
                )
                raise

    def get_registered_handlers(self) -> dict[type[DomainEvent], list[EventHandler]]:
        return {k: list(v) for k, v in self._handlers.items()}

    def clear(self) -> None:
        self._handlers.clear()
