"""
Event bus counters.

`EventMetricsRecorder` is the mutable, lock-guarded side written by the bus
on host detection threads; `EventMetrics` is the frozen snapshot handed to
callers. Listener failures are counted twice: per event and per listener
identifier, so a misbehaving UI panel or notifier can be named.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class EventMetrics:
    """
    Immutable snapshot of event bus metrics.

    Examples
    --------
    >>> metrics = EventMetrics(
    ...     events_published={"progress.changed": 40},
    ...     listener_errors={"progress.changed": 2},
    ...     failing_listeners={"tool_window@progress.changed": 2},
    ...     total_listeners=3,
    ... )
    >>> metrics.get_summary()["error_rate"]
    5.0
    """

    events_published: dict[str, int] = field(default_factory=dict)
    listener_errors: dict[str, int] = field(default_factory=dict)
    failing_listeners: dict[str, int] = field(default_factory=dict)
    total_listeners: int = 0

    @property
    def worst_listener(self) -> Optional[str]:
        """Identifier of the listener with the most failures, if any failed."""
        if not self.failing_listeners:
            return None
        return max(self.failing_listeners.items(), key=lambda item: item[1])[0]

    def get_summary(self) -> dict[str, Any]:
        total_events = sum(self.events_published.values())
        total_errors = sum(self.listener_errors.values())
        error_rate = (total_errors / max(1, total_events)) * 100.0

        return {
            "total_events_published": total_events,
            "events_by_type": dict(self.events_published),
            "total_errors": total_errors,
            "errors_by_event": dict(self.listener_errors),
            "errors_by_listener": dict(self.failing_listeners),
            "worst_listener": self.worst_listener,
            "total_listeners": self.total_listeners,
            "error_rate": round(error_rate, 2),
        }


class EventMetricsRecorder:
    """
    Mutable metrics recorder for EventBus.

    Examples
    --------
    >>> recorder = EventMetricsRecorder()
    >>> recorder.record_publish("quest.completed")
    >>> recorder.snapshot().events_published["quest.completed"]
    1
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._published: Counter[str] = Counter()
        self._errors_by_event: Counter[str] = Counter()
        self._errors_by_listener: Counter[str] = Counter()
        self._listener_count = 0

    def record_publish(self, event_name: str) -> None:
        with self._lock:
            self._published[event_name] += 1

    def record_error(self, event_name: str, listener_id: Optional[str] = None) -> None:
        with self._lock:
            self._errors_by_event[event_name] += 1
            if listener_id is not None:
                self._errors_by_listener[listener_id] += 1

    @property
    def total_listeners(self) -> int:
        return self._listener_count

    def adjust_listener_count(self, delta: int) -> None:
        """Clamped at 0."""
        with self._lock:
            self._listener_count = max(0, self._listener_count + delta)

    def reset_listener_count(self) -> None:
        with self._lock:
            self._listener_count = 0

    def snapshot(self) -> EventMetrics:
        with self._lock:
            return EventMetrics(
                events_published=dict(self._published),
                listener_errors=dict(self._errors_by_event),
                failing_listeners=dict(self._errors_by_listener),
                total_listeners=self._listener_count,
            )
