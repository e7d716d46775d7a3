"""
Core infrastructure layer for RefactorRPG.

Purpose
-------
Provide a single import surface for the infrastructure subsystems:

- Configuration management (Config, ConfigManager)
- Logging (structured logging, logger factory, LogContext)
- Event bus (EventBus, ListenerPriority)

Non-Responsibilities
--------------------
- Business logic (lives in refactor_rpg.modules)
- Any side effects beyond simple re-exports
"""

from refactor_rpg.core.config import Config, ConfigManager
from refactor_rpg.core.event import EventBus, ListenerPriority
from refactor_rpg.core.logging import LogContext, get_logger, setup_logging

__all__ = [
    "Config",
    "ConfigManager",
    "EventBus",
    "ListenerPriority",
    "LogContext",
    "get_logger",
    "setup_logging",
]
