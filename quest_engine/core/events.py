"""
Typed event bus for decoupled communication.

Event types are Enum members, so subscribers never match on strings.
The dialogue session and the unlock service publish here; a UI layer
subscribes.

Usage:
    bus = EventBus()
    bus.subscribe(ProgressionEvent.MODULE_UNLOCKED, on_unlocked)
    bus.publish(ProgressionEvent.MODULE_UNLOCKED, module_id="forest")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class DialogueEvent(Enum):
    """Conversation lifecycle events."""
    STARTED = auto()          # Conversation opened on an initial node
    NODE_ENTERED = auto()     # Navigated to a node
    CHOICE_SELECTED = auto()  # Player picked a choice (before actions run)
    ENDED = auto()            # Conversation closed


class ProgressionEvent(Enum):
    """Task and module progression events."""
    TASK_ACCEPTED = auto()
    MODULE_UNLOCKED = auto()
    MODULE_COMPLETED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Keyword data passed to publish()
        consumed: Set by a handler to stop propagation
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        """Stop delivery to lower-priority handlers."""
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


@dataclass(eq=False)
class _Subscription:
    priority: int
    target: Any  # strong callable, ref or WeakMethod
    one_shot: bool

    def resolve(self) -> EventHandler | None:
        if isinstance(self.target, (ref, WeakMethod)):
            return self.target()
        return self.target


class EventBus:
    """
    Publish/subscribe hub.

    Features:
    - Enum-typed events
    - Priority ordering (higher first)
    - Weak references by default
    - One-shot handlers
    - Consumption stops propagation
    - Events published from inside a handler are queued
    """

    def __init__(self):
        self._subscriptions: dict[Enum, list[_Subscription]] = {}
        self._pending: list[Event] = []
        self._dispatching = False

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
            priority: Higher priority handlers run first
            one_shot: Remove the handler after its first call
            weak: Hold the handler by weak reference
        """
        if weak:
            target = WeakMethod(handler) if hasattr(handler, '__self__') else ref(handler)
        else:
            target = handler

        subs = self._subscriptions.setdefault(event_type, [])
        position = len(subs)
        for i, sub in enumerate(subs):
            if priority > sub.priority:
                position = i
                break
        subs.insert(position, _Subscription(priority, target, one_shot))

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """Remove a handler from an event type."""
        subs = self._subscriptions.get(event_type)
        if not subs:
            return
        self._subscriptions[event_type] = [
            sub for sub in subs if sub.resolve() != handler
        ]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Returns:
            The Event object (check .consumed to see if it was handled)
        """
        event = Event(type=event_type, data=data)
        if self._dispatching:
            self._pending.append(event)
        else:
            self._dispatch(event)
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Drop handlers for one event type, or all of them."""
        if event_type is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(event_type, None)

    def handler_count(self, event_type: Enum) -> int:
        """Number of live handlers for an event type."""
        return sum(
            1 for sub in self._subscriptions.get(event_type, [])
            if sub.resolve() is not None
        )

    def _dispatch(self, event: Event) -> None:
        subs = self._subscriptions.get(event.type)
        if not subs:
            return

        self._dispatching = True
        dead: list[_Subscription] = []
        try:
            for sub in list(subs):
                handler = sub.resolve()
                if handler is None:
                    dead.append(sub)
                    continue

                try:
                    handler(event)
                except Exception:
                    logger.exception(f"Error in event handler for {event.type}")

                if sub.one_shot:
                    dead.append(sub)
                if event.consumed:
                    break
        finally:
            for sub in dead:
                if sub in subs:
                    subs.remove(sub)
            self._dispatching = False

        while self._pending:
            self._dispatch(self._pending.pop(0))
