"""CQRS primitives: commands, queries, handlers, event dispatching."""

from __future__ import annotations

from .command import Command
from .event_dispatcher import EventDispatcher, EventHandler
from .handler import CommandHandler, QueryHandler
from .query import Query
from .response import CommandResponse, QueryResponse

__all__ = [
    "Command",
    "CommandHandler",
    "CommandResponse",
    "EventDispatcher",
    "EventHandler",
    "Query",
    "QueryHandler",
    "QueryResponse",
]
