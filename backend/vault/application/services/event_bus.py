"""Record event bus: in-process publish/subscribe for record change events."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any, Union

from vault.domain.entities import Record, RecordEvent

logger = logging.getLogger(__name__)

RecordHandler = Callable[[Record], Union[None, Awaitable[None]]]
EventHandler = Callable[[RecordEvent, Record], Union[None, Awaitable[None]]]


class RecordEventBus:
    """Dispatches change events to subscribed handlers.

    Publishing is synchronous with respect to the caller: ``publish`` returns
    only after every handler for the event has run, in registration order.
    Handlers may be plain callables or coroutine functions. A failing handler
    is logged and skipped; it never stops the remaining handlers and never
    reaches the publisher.
    """

    def __init__(self) -> None:
        self._handlers: dict[RecordEvent, list[EventHandler]] = {
            event: [] for event in RecordEvent
        }

    def subscribe(self, event: RecordEvent | str, handler: RecordHandler) -> Callable[[], None]:
        """Register ``handler(record)`` for one event kind.

        Returns a callable that removes the registration.
        """
        kind = RecordEvent(event)

        def _adapter(_event: RecordEvent, record: Record) -> Any:
            return handler(record)

        _adapter.__qualname__ = getattr(handler, "__qualname__", repr(handler))
        self._handlers[kind].append(_adapter)
        return lambda: self._remove(kind, _adapter)

    def subscribe_all(self, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler(event, record)`` for every event kind."""
        for kind in RecordEvent:
            self._handlers[kind].append(handler)

        def _unsubscribe() -> None:
            for kind in RecordEvent:
                self._remove(kind, handler)

        return _unsubscribe

    async def publish(self, event: RecordEvent | str, record: Record) -> None:
        """Invoke every handler registered for ``event`` with ``record``."""
        kind = RecordEvent(event)
        # Copy so handlers may unsubscribe while being dispatched
        for handler in list(self._handlers[kind]):
            try:
                result = handler(kind, record)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (record %s)",
                    getattr(handler, "__qualname__", handler),
                    kind.value,
                    record.id,
                )

    def handler_count(self, event: RecordEvent | str) -> int:
        return len(self._handlers[RecordEvent(event)])

    def clear(self) -> None:
        for handlers in self._handlers.values():
            handlers.clear()

    def _remove(self, kind: RecordEvent, handler: EventHandler) -> None:
        try:
            self._handlers[kind].remove(handler)
        except ValueError:
            pass


@lru_cache
def get_event_bus() -> RecordEventBus:
    """Process-wide event bus instance."""
    return RecordEventBus()
