"""
Base Service Foundation

Purpose
-------
Provides the foundational class for RefactorRPG domain services
(ProgressionEngine, QuestEngine, DetectionCoordinator).

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access patterns
- Event emission helpers with per-event notification toggles
- Validation error wrapping

What this class does NOT do:
- Own any game state (subclasses do, under their own locks)
- Persist anything

Usage
-----
    class QuestEngine(BaseService):
        def __init__(self, config_manager, event_bus, logger):
            super().__init__(config_manager, event_bus, logger)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from .exceptions import ValidationError

if TYPE_CHECKING:
    from logging import Logger

    from refactor_rpg.core.config.manager import ConfigManager
    from refactor_rpg.core.event.bus import EventBus


class BaseService:
    """
    Base class for all domain services.

    Args:
        config_manager: Gameplay configuration manager
        event_bus: Event bus for outbound notifications
        logger: Structured logger instance
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    def get_config(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Retrieve a configuration value.

        Args:
            key: Dot-notation configuration key
            default: Value if the key is missing
        """
        return self._config.get(key, default)

    def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        toggle_key: Optional[str] = None,
    ) -> None:
        """
        Publish an event unless its notification toggle is switched off.

        Must be called outside any service lock: listeners run synchronously.

        Args:
            event_type: Event name
            data: Event payload
            toggle_key: Optional boolean config key gating this event
        """
        if toggle_key is not None and not self.get_config(toggle_key, True):
            self.log.debug(
                "Event suppressed by notification setting",
                extra={"event_name": event_type, "toggle_key": toggle_key},
            )
            return
        self._events.publish(event_type, data)

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log a service operation with structured context.

        Args:
            operation: Name of the operation being performed
            **context: Additional context data
        """
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation_name": operation, **context},
        )

    def validate_non_negative_int(self, value: int, name: str) -> None:
        """
        Raises:
            ValidationError: If value is not a non-negative integer
        """
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(name, f"{name} must be a non-negative integer, got {value}")

    # ========================================================================
    # Snapshot containers
    # ========================================================================

    def snapshot_mapping(self, snapshot: Any) -> Tuple[Mapping[str, Any], int]:
        """
        Top-level snapshot as a mapping, plus 1 when it had to be discarded.

        None is a fresh profile, not a malformed one.
        """
        if snapshot is None:
            return {}, 0
        if isinstance(snapshot, Mapping):
            return snapshot, 0
        self.log.warning(
            "Ignoring malformed snapshot",
            extra={"snapshot_type": type(snapshot).__name__},
        )
        return {}, 1

    def snapshot_section(self, snapshot: Mapping[str, Any], key: str) -> Tuple[List[Any], int]:
        """Records stored under `key`, plus 1 when the section was not a list."""
        section = snapshot.get(key)
        if section is None:
            return [], 0
        if isinstance(section, (list, tuple)):
            return list(section), 0
        self.log.warning(
            "Ignoring malformed snapshot section",
            extra={"section": key, "section_type": type(section).__name__},
        )
        return [], 1
