"""In-process event bus.

Each subscribed handler runs as its own task. Handlers for the same event are
neither ordered nor mutually excluded, and one handler failing never stops
the others.
"""

import asyncio
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from chat_companion.core.base import ApplicationError, ErrorLevel
from chat_companion.core.logging import get_logger
from chat_companion.events.models import MessageEvent

logger = get_logger(__name__)

Handler = Callable[[Any], Awaitable[Any]]


@dataclass
class HandlerOutcome:
    handler: str
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__name__", None) or getattr(getattr(handler, "func", None), "__name__", repr(handler))


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type[MessageEvent], list[Handler]] = defaultdict(list)
        self._tasks: set[asyncio.Task[HandlerOutcome]] = set()

    def subscribe(self, event_type: type[MessageEvent], handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def handlers_for(self, event: MessageEvent) -> list[Handler]:
        return list(self._handlers.get(type(event), []))

    async def _run(self, handler: Handler, event: MessageEvent) -> HandlerOutcome:
        name = _handler_name(handler)
        try:
            await handler(event)
        except Exception as e:
            level = (e.level if isinstance(e, ApplicationError) else ErrorLevel.ERROR).to_logging_level()
            logger.log(
                level,
                "Event handler failed",
                handler=name,
                event_name=event.name,
                error_type=type(e).__name__,
                error_message=str(e),
                exc_info=True,
            )
            return HandlerOutcome(handler=name, error=e)
        return HandlerOutcome(handler=name)

    def publish(self, event: MessageEvent) -> list[asyncio.Task[HandlerOutcome]]:
        """Start every handler for ``event`` in the background."""
        tasks = []
        for handler in self.handlers_for(event):
            task = asyncio.create_task(self._run(handler, event), name=f"{event.name}:{_handler_name(handler)}")
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        logger.debug("Event published", event_name=event.name, handlers=len(tasks))
        return tasks

    async def dispatch(self, event: MessageEvent) -> list[HandlerOutcome]:
        """Run every handler for ``event`` concurrently and wait for all of them."""
        return list(await asyncio.gather(*self.publish(event)))

    async def drain(self) -> None:
        """Wait for in-flight handlers, e.g. during shutdown."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    @property
    def in_flight(self) -> int:
        return len(self._tasks)
