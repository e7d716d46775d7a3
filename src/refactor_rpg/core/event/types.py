"""
Core Event Types for the RefactorRPG EventBus.

Purpose
-------
Provides fundamental type definitions for the event system: event payloads,
listener priorities, callback types, and listener data structures.

Design Decisions
----------------
- **EventPayload as dict**: Simple, flexible structure. Payloads carry frozen
  domain snapshots, so listeners can hold on to them safely.
- **ListenerPriority enum**: Explicit priority levels with numeric values
  for stable sorting. Dispatch is synchronous and strictly in this order.
- **EventListener with slots**: Memory-efficient, immutable listener metadata.

Priority Levels
---------------
- CRITICAL (0): Persistence collaborators that must see state first.
- HIGH (10): UI panels and snapshots.
- NORMAL (50): Notifications.
- LOW (100): Logging and metrics.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

EventPayload = dict[str, Any]


class ListenerPriority(Enum):
    """
    Priority levels for event listeners (lower value = earlier).

    Examples
    --------
    >>> ListenerPriority.CRITICAL.value
    0
    """

    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100


CallbackType = Callable[[EventPayload], Any]


@dataclass(slots=True, frozen=True)
class EventListener:
    """
    Represents a registered event listener.

    Attributes
    ----------
    callback:
        Callable invoked with the event payload.
    priority:
        ListenerPriority determining execution order.
    identifier:
        Unique string identifier for deduplication and unsubscription.
    once:
        If True, the listener is removed from the registry before its first
        execution (one-shot listener).
    """

    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    once: bool = False

    @classmethod
    def from_callback(
        cls,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority,
        identifier: Optional[str],
        once: bool,
    ) -> EventListener:
        """
        Create an EventListener, generating an identifier from the callback
        metadata and event name when none is given.

        Examples
        --------
        >>> listener = EventListener.from_callback(
        ...     event_name="progress.level_up",
        ...     callback=on_level_up,
        ...     priority=ListenerPriority.NORMAL,
        ...     identifier=None,
        ...     once=False,
        ... )
        >>> listener.identifier
        'notifications.on_level_up@progress.level_up'
        """
        if identifier is None:
            module = getattr(callback, "__module__", "unknown")
            qualname = getattr(
                callback, "__qualname__", getattr(callback, "__name__", "callback")
            )
            identifier = f"{module}.{qualname}@{event_name}"

        return cls(
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )
