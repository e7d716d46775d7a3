"""
Error handling helpers for the RefactorRPG EventBus.

A failing listener is logged with full context and counted; it never
propagates into the publisher and never stops the remaining listeners.
"""

from __future__ import annotations

from logging import Logger
from typing import Optional

from refactor_rpg.core.event.metrics import EventMetricsRecorder
from refactor_rpg.core.event.types import EventListener


def handle_listener_error(
    *,
    logger: Logger,
    event_name: str,
    listener: EventListener,
    exc: Exception,
    metrics: Optional[EventMetricsRecorder],
) -> None:
    """
    Log listener execution error and update metrics.

    Examples
    --------
    >>> try:
    ...     listener.callback(payload)
    ... except Exception as exc:
    ...     handle_listener_error(
    ...         logger=logger,
    ...         event_name="quest.completed",
    ...         listener=listener,
    ...         exc=exc,
    ...         metrics=metrics_recorder,
    ...     )
    """
    if metrics is not None:
        metrics.record_error(event_name, listener.identifier)

    logger.error(
        "EventBus listener error",
        extra={
            "event_name": event_name,
            "listener_id": listener.identifier,
            "priority": listener.priority.name,
            "error": str(exc),
            "error_type": type(exc).__name__,
        },
        exc_info=exc,
    )
