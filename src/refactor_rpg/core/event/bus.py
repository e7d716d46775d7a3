"""
RefactorRPG EventBus: synchronous pub/sub with priority-ordered dispatch.

Purpose
-------
Decouples the game core (progression, quests, detection) from its outbound
collaborators: UI panels, desktop notifications, persistence.

Responsibilities
----------------
- Register/unregister event listeners with priorities
- Publish events to all matching listeners (exact + wildcard)
- Execute listeners sequentially in (priority, identifier) order
- Error isolation (one failing listener never blocks others)
- Metrics collection and introspection
- LogContext integration for structured logging

Design Decisions
----------------
- **Instance-based**: one bus per GameSession, useful for tests and for
  several profiles in one process.
- **Synchronous**: the host delivers detections on its own threads and the
  core never blocks on I/O, so there is no event loop to schedule on.
  Callers publish only after leaving their critical section, with frozen
  payloads.
- **Wildcard support**: Enables subscriptions like "quest.*".
- **Error isolation**: try/except per listener via handle_listener_error.
"""

from __future__ import annotations

import inspect
from typing import Any, Optional

from refactor_rpg.core.event.errors import handle_listener_error
from refactor_rpg.core.event.metrics import EventMetrics, EventMetricsRecorder
from refactor_rpg.core.event.registry import ListenerRegistry
from refactor_rpg.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from refactor_rpg.core.logging.logger import LogContext, get_logger

logger = get_logger(__name__)


class EventBus:
    """
    Priority-ordered synchronous EventBus.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("progress.level_up", on_level_up, priority=ListenerPriority.HIGH)
    >>> bus.publish("progress.level_up", {"old_level": 1, "new_level": 2})
    """

    def __init__(
        self,
        registry: Optional[ListenerRegistry] = None,
        metrics: Optional[EventMetricsRecorder] = None,
        *,
        enable_metrics: bool = True,
    ) -> None:
        self._registry = registry or ListenerRegistry()
        self._metrics = metrics or EventMetricsRecorder()
        self._metrics_enabled = enable_metrics

        logger.debug(
            "EventBus initialized",
            extra={"metrics_enabled": self._metrics_enabled},
        )

    # ------------------------------------------------------------------ #
    # Listener Validation
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        """
        Ensure callback accepts exactly one positional parameter.

        Raises
        ------
        ValueError:
            If callback signature is invalid.
        """
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            # Built-ins may not expose a signature; trust the caller.
            return

        params = list(sig.parameters.values())
        positional = [
            p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        ]
        has_varargs = any(p.kind == p.VAR_POSITIONAL for p in params)
        required = [p for p in positional if p.default is p.empty]

        if len(required) > 1 or (not positional and not has_varargs):
            callback_name = getattr(callback, "__qualname__", None) or repr(callback)
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(positional)} parameters for '{callback_name}'"
            )

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
        allow_duplicates: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event.

        Parameters
        ----------
        event_name:
            Event name like "quest.completed" or wildcard like "quest.*".
        callback:
            Callable taking a single EventPayload parameter.
        priority:
            ListenerPriority enum value (CRITICAL, HIGH, NORMAL, LOW).
        identifier:
            Optional unique identifier. Auto-generated if None.
        once:
            If True, listener is removed before its first execution.
        allow_duplicates:
            If False, prevents registering same (event_name, identifier) twice.

        Returns
        -------
        str:
            The listener identifier (for unsubscribing later).
        """
        self._validate_callback_signature(callback)

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        added = self._registry.add_listener(
            event_name=event_name,
            listener=listener,
            allow_duplicates=allow_duplicates,
        )

        if added:
            if self._metrics_enabled:
                self._metrics.adjust_listener_count(1)
            logger.debug(
                "EventBus: subscribed listener",
                extra={
                    "event_name": event_name,
                    "listener_id": listener.identifier,
                    "priority": listener.priority.name,
                    "once": listener.once,
                },
            )
        else:
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={"event_name": event_name, "listener_id": listener.identifier},
            )

        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        """Unsubscribe a listener; True if one was removed."""
        removed = self._registry.remove_listener(event_name=event_name, identifier=identifier)

        if removed:
            if self._metrics_enabled:
                self._metrics.adjust_listener_count(-1)
            logger.debug(
                "EventBus: unsubscribed listener",
                extra={"event_name": event_name, "listener_id": identifier},
            )

        return removed

    def clear(self) -> None:
        """Remove all listeners from all events."""
        total = self._registry.clear_all()

        if self._metrics_enabled:
            self._metrics.reset_listener_count()

        logger.info(
            "EventBus: cleared all listeners",
            extra={"previous_listener_count": total},
        )

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    def publish(self, event_name: str, data: EventPayload) -> list[Any]:
        """
        Publish an event to all subscribed listeners, in priority order.

        Returns
        -------
        list[Any]:
            Results from listeners that completed without raising.
        """
        if self._metrics_enabled:
            self._metrics.record_publish(event_name)

        listeners = self._registry.extract_listeners_for_event(event_name=event_name)

        if not listeners:
            logger.debug("EventBus: no listeners for event", extra={"event_name": event_name})
            return []

        # once-listeners were pruned during extraction
        if self._metrics_enabled:
            pruned = sum(1 for lst in listeners if lst.once)
            if pruned:
                self._metrics.adjust_listener_count(-pruned)

        results: list[Any] = []
        with LogContext(operation=event_name):
            for listener in listeners:
                try:
                    results.append(listener.callback(data))
                except Exception as exc:
                    handle_listener_error(
                        logger=logger,
                        event_name=event_name,
                        listener=listener,
                        exc=exc,
                        metrics=self._metrics if self._metrics_enabled else None,
                    )

        return results

    # ------------------------------------------------------------------ #
    # Metrics & Introspection
    # ------------------------------------------------------------------ #

    def get_metrics(self) -> Optional[EventMetrics]:
        if not self._metrics_enabled:
            return None
        return self._metrics.snapshot()

    def get_metrics_summary(self) -> dict[str, Any]:
        metrics = self.get_metrics()
        if metrics is None:
            return {}
        return metrics.get_summary()

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        """
        Number of listeners for `event_name` (exact + wildcard), or the total
        when no name is given.
        """
        if event_name:
            return self._registry.get_listener_count_for_event(event_name)
        return self._registry.get_total_listener_count()
