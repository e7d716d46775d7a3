"""
Event System for RefactorRPG.

Provides the synchronous EventBus used to push progress, level-up and
quest notifications to UI and persistence collaborators.
"""

from .bus import EventBus
from .metrics import EventMetrics
from .types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)

__all__ = [
    "EventBus",
    "EventMetrics",
    "EventPayload",
    "ListenerPriority",
    "EventListener",
    "CallbackType",
]
