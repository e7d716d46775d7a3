"""
Configuration error hierarchy for RefactorRPG.

Purpose
-------
Provides domain-specific exceptions for configuration management operations
with clear error classification and helpful error messages.

Non-Responsibilities
--------------------
- Error logging (handled by logger)
- Error recovery logic (handled by ConfigManager)

Exception Hierarchy
-------------------
ConfigError (base)
├── ConfigValidationError (type/bounds validation failures on write)
└── ConfigInitializationError (YAML directory or file failures at startup)
"""


class ConfigError(Exception):
    """
    Base exception for all configuration-related errors.

    Example
    -------
    >>> try:
    ...     manager.set("progression.xp_curve.base", -1)
    ... except ConfigError as e:
    ...     logger.error(f"Config operation failed: {e}")
    """


class ConfigValidationError(ConfigError):
    """
    Raised when a configuration value fails validation.

    This exception is raised when:
    - A registered validator rejects a value
    - A value has the wrong type for its key
    - Value bounds checking fails
    """

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid value for config key '{key}': {reason}")


class ConfigInitializationError(ConfigError):
    """
    Raised when ConfigManager is asked to load from a location that
    cannot be read at all (strict mode only; the default is to degrade
    to built-in defaults).
    """


__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConfigInitializationError",
]
