"""
ListenerRegistry: storage and lookup for EventBus listeners.

Purpose
-------
Provides storage and retrieval of event listeners, supporting both exact
event names and wildcard patterns.

Responsibilities
----------------
- Store exact event listeners (e.g., "quest.completed")
- Store wildcard event listeners (e.g., "quest.*", "*.changed")
- Retrieve all listeners matching an event name (exact + wildcard)
- Maintain deterministic listener ordering by priority and identifier
- Atomically prune once=True listeners during retrieval
- Prevent duplicate listener registration

Design Decisions
----------------
- **Lock-guarded**: detections arrive on host threads, so every mutation and
  lookup runs under one lock. Extraction returns a new list, which the bus
  iterates outside the lock.
- **Deterministic ordering**: Listeners sorted by (priority, identifier).
- **Atomic once-pruning**: a one-shot listener is handed to exactly one
  publish, even when two threads publish concurrently.
"""

from __future__ import annotations

import threading

from refactor_rpg.core.event.router import EventRouter
from refactor_rpg.core.event.types import EventListener


def _sort_key(listener: EventListener) -> tuple[int, str]:
    return (listener.priority.value, listener.identifier)


class ListenerRegistry:
    """
    Registry for event listeners (exact and wildcard).

    Examples
    --------
    >>> registry = ListenerRegistry()
    >>> registry.add_listener("quest.completed", listener, allow_duplicates=False)
    True
    >>> len(registry.extract_listeners_for_event("quest.completed"))
    1
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._router = EventRouter()
        self._listeners: dict[str, list[EventListener]] = {}
        self._wildcard_listeners: list[tuple[str, EventListener]] = []

    # ------------------------------------------------------------------ #
    # Modification
    # ------------------------------------------------------------------ #

    def add_listener(
        self,
        event_name: str,
        listener: EventListener,
        *,
        allow_duplicates: bool,
    ) -> bool:
        """
        Register a listener for an event or wildcard pattern.

        Returns
        -------
        bool:
            True if the listener was added, False if it was prevented as
            a duplicate (same pattern and identifier).
        """
        with self._lock:
            if "*" in event_name:
                if not allow_duplicates and any(
                    lst.identifier == listener.identifier
                    for pattern, lst in self._wildcard_listeners
                    if pattern == event_name
                ):
                    return False

                self._wildcard_listeners.append((event_name, listener))
                self._wildcard_listeners.sort(key=lambda pl: _sort_key(pl[1]))
                return True

            listeners = self._listeners.setdefault(event_name, [])
            if not allow_duplicates and any(
                lst.identifier == listener.identifier for lst in listeners
            ):
                return False

            listeners.append(listener)
            listeners.sort(key=_sort_key)
            return True

    def remove_listener(self, event_name: str, identifier: str) -> bool:
        """Remove a listener by identifier; True if something was removed."""
        with self._lock:
            removed = False

            if event_name in self._listeners:
                original_count = len(self._listeners[event_name])
                self._listeners[event_name] = [
                    lst for lst in self._listeners[event_name] if lst.identifier != identifier
                ]
                removed = len(self._listeners[event_name]) < original_count
                if not self._listeners[event_name]:
                    del self._listeners[event_name]

            original_wc_count = len(self._wildcard_listeners)
            self._wildcard_listeners = [
                (pattern, lst)
                for pattern, lst in self._wildcard_listeners
                if not (pattern == event_name and lst.identifier == identifier)
            ]
            return removed or len(self._wildcard_listeners) < original_wc_count

    def clear_all(self) -> int:
        """Remove all listeners and return previous total count."""
        with self._lock:
            total = self._total_locked()
            self._listeners.clear()
            self._wildcard_listeners.clear()
            return total

    # ------------------------------------------------------------------ #
    # Lookup & Once-Removal
    # ------------------------------------------------------------------ #

    def extract_listeners_for_event(self, event_name: str) -> list[EventListener]:
        """
        Atomically collect all listeners for an event and prune once=True
        listeners.

        Returns
        -------
        list[EventListener]:
            All listeners that should receive this event, sorted by priority
            and identifier.
        """
        with self._lock:
            result: list[EventListener] = list(self._listeners.get(event_name, []))

            kept_exact = [lst for lst in result if not lst.once]
            if kept_exact:
                self._listeners[event_name] = kept_exact
            else:
                self._listeners.pop(event_name, None)

            new_wildcards: list[tuple[str, EventListener]] = []
            for pattern, listener in self._wildcard_listeners:
                if self._router.matches(event_name, pattern):
                    result.append(listener)
                    if listener.once:
                        continue
                new_wildcards.append((pattern, listener))
            self._wildcard_listeners = new_wildcards

        result.sort(key=_sort_key)
        return result

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_listener_count_for_event(self, event_name: str) -> int:
        """Count listeners that would receive this event (exact + wildcard)."""
        with self._lock:
            count = len(self._listeners.get(event_name, []))
            count += sum(
                1
                for pattern, _ in self._wildcard_listeners
                if self._router.matches(event_name, pattern)
            )
            return count

    def _total_locked(self) -> int:
        total = sum(len(listeners) for listeners in self._listeners.values())
        return total + len(self._wildcard_listeners)

    def get_total_listener_count(self) -> int:
        with self._lock:
            return self._total_locked()
