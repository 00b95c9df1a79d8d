"""
Typed event bus for decoupled notifications.

Event types are Enum members, so subscribers never match on strings:

    bus.subscribe(NovelEvent.CHAPTER_FINISHED, on_finished)
    bus.publish(NovelEvent.CHAPTER_FINISHED, chapter="prologue")

Events published from inside a handler are queued and delivered after the
current dispatch completes, so handlers always observe a consistent order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class NovelEvent(Enum):
    """Notifications produced by the chapter interpreter."""
    # Chapter lifecycle
    CHAPTER_STARTED = auto()
    CHAPTER_FINISHED = auto()

    # Line playback
    LINE_STARTED = auto()
    LINE_FINISHED = auto()
    SEGMENT_STARTED = auto()

    # Widgets
    CHOICE_PRESENTED = auto()
    CHOICE_MADE = auto()
    INPUT_REQUESTED = auto()
    INPUT_ACCEPTED = auto()

    # Content problems (never fatal)
    SCRIPT_ERROR = auto()


class HostEvent(Enum):
    """Host loop events."""
    HOST_STARTED = auto()
    HOST_PAUSED = auto()
    HOST_RESUMED = auto()
    HOST_QUIT = auto()
    WINDOW_RESIZED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Keyword payload given to publish()
        consumed: Set by a handler to stop propagation
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Stop delivery to lower priority handlers."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Publish/subscribe hub.

    Features:
    - Enum-typed events
    - Priority ordering (higher first, FIFO within a priority)
    - Weak references by default, so a dropped subscriber unsubscribes itself
    - One-shot handlers
    - Consumption stops propagation
    """

    def __init__(self):
        # event type -> [(priority, handler or reference, one_shot)]
        self._handlers: dict[Enum, list[tuple[int, Any, bool]]] = {}
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback receiving the Event
            priority: Higher priority handlers are called first
            one_shot: Remove the handler after its first call
            weak: Hold the handler through a weak reference
        """
        if weak:
            handler_ref = WeakMethod(handler) if hasattr(handler, '__self__') else ref(handler)
        else:
            handler_ref = handler

        handlers = self._handlers.setdefault(event_type, [])
        insert_idx = len(handlers)
        for i, (p, _, _) in enumerate(handlers):
            if priority > p:
                insert_idx = i
                break
        handlers.insert(insert_idx, (priority, handler_ref, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Remove a handler from an event type."""
        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        self._handlers[event_type] = [
            entry for entry in handlers
            if self._resolve(entry[1]) != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)
        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Clear all handlers, or only those of one event type."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def has_subscribers(self, event_type: Enum) -> bool:
        return bool(self._handlers.get(event_type))

    def _dispatch(self, event: Event) -> None:
        handlers = self._handlers.get(event.type)
        if handlers:
            self._is_publishing = True
            to_remove = []

            # Handlers may subscribe or unsubscribe while we iterate
            for entry in list(handlers):
                _, handler_ref, one_shot = entry
                handler = self._resolve(handler_ref)
                if handler is None:
                    to_remove.append(entry)
                    continue

                try:
                    handler(event)
                except Exception:
                    logger.exception(f"Error in event handler for {event.type}")

                if one_shot:
                    to_remove.append(entry)
                if event.consumed:
                    break

            if to_remove:
                self._handlers[event.type] = [
                    entry for entry in self._handlers.get(event.type, [])
                    if not any(entry is removed for removed in to_remove)
                ]

            self._is_publishing = False

        while self._event_queue and not self._is_publishing:
            self._dispatch(self._event_queue.pop(0))

    @staticmethod
    def _resolve(handler_ref: Any) -> EventHandler | None:
        if isinstance(handler_ref, (ref, WeakMethod)):
            return handler_ref()
        return handler_ref
