"""
ConfigManager: gameplay tunables with YAML defaults for RefactorRPG.

Purpose
-------
- Provide hierarchical, dot-notation access to tunable gameplay values
  (XP curve, dedup window, notification toggles).
- Back configuration with built-in defaults, deep-merged YAML files from the
  `config/` directory, and explicit runtime overrides.

Responsibilities
----------------
- Load and merge YAML defaults from the config directory.
- Serve reads with hit/miss/fallback metrics.
- Validate runtime overrides via registered validators before applying them.

Key Design Decisions
--------------------
- One ConfigManager per session (no class-level cache), so tests and
  multiple profiles never share state.
- Built-in defaults are the last resort; YAML overrides them; `set()`
  overrides YAML.
- Missing directory, unreadable files and non-dict YAML roots are logged
  and skipped. Startup never fails on configuration unless `strict=True`.
- Reads and writes go through a single lock because the host may call in
  from several detection threads.

Dependencies
------------
- PyYAML (`yaml.safe_load`) for config files.
- `refactor_rpg.core.logging.logger.get_logger` for structured logging.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, MutableMapping, Optional

import yaml

from refactor_rpg.core.config.errors import (
    ConfigInitializationError,
    ConfigValidationError,
)
from refactor_rpg.core.logging.logger import get_logger

logger = get_logger(__name__)

_MISSING = object()


# ============================================================================
# Built-in defaults
# ============================================================================

BUILTIN_DEFAULTS: Dict[str, Any] = {
    "progression": {
        "xp_curve": {"base": 100, "exponent": 1.5},
    },
    "detection": {"dedup_window_ms": 500},
    "history": {"recent_limit": 50},
    "notifications": {
        "xp_gain": True,
        "level_up": True,
        "quest_completed": True,
        "duration_ms": 3000,
    },
}


def _positive_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"expected a positive number, got {value!r}")
    return value


def _positive_int(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"expected a positive integer, got {value!r}")
    return value


def _boolean(value: Any) -> Any:
    if not isinstance(value, bool):
        raise ValueError(f"expected a boolean, got {value!r}")
    return value


DEFAULT_VALIDATORS: Dict[str, Callable[[Any], Any]] = {
    "progression.xp_curve.base": _positive_number,
    "progression.xp_curve.exponent": _positive_number,
    "detection.dedup_window_ms": _positive_int,
    "history.recent_limit": _positive_int,
    "notifications.xp_gain": _boolean,
    "notifications.level_up": _boolean,
    "notifications.quest_completed": _boolean,
    "notifications.duration_ms": _positive_int,
}


# ============================================================================
# Metrics
# ============================================================================


@dataclass(slots=True)
class ConfigMetrics:
    gets: int = 0
    hits: int = 0
    misses: int = 0
    sets: int = 0
    errors: int = 0
    yaml_files_loaded: int = 0


# ============================================================================
# ConfigManager
# ============================================================================


class ConfigManager:
    """
    Gameplay configuration with dot-notation access.

    Examples
    --------
    >>> manager = ConfigManager.from_directory(Path("config"))
    >>> manager.get("progression.xp_curve.base")
    100
    >>> manager.set("detection.dedup_window_ms", 250)
    >>> manager.get("detection.dedup_window_ms")
    250
    """

    def __init__(
        self,
        defaults: Optional[Dict[str, Any]] = None,
        validators: Optional[Dict[str, Callable[[Any], Any]]] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._values: Dict[str, Any] = copy.deepcopy(BUILTIN_DEFAULTS)
        if defaults:
            self._deep_merge_dict(self._values, copy.deepcopy(defaults))
        self._validators: Dict[str, Callable[[Any], Any]] = dict(DEFAULT_VALIDATORS)
        if validators:
            self._validators.update(validators)
        self._metrics = ConfigMetrics()

    @classmethod
    def from_directory(
        cls,
        config_dir: Optional[Path] = None,
        strict: bool = False,
    ) -> "ConfigManager":
        """
        Build a manager from built-in defaults plus every YAML file found
        under `config_dir` (defaults to `Config.CONFIG_DIR`).

        Raises
        ------
        ConfigInitializationError
            Only in strict mode, when the directory does not exist.
        """
        if config_dir is None:
            from refactor_rpg.core.config.config import Config

            config_dir = Config.CONFIG_DIR

        manager = cls()
        manager.load_yaml_directory(Path(config_dir), strict=strict)
        return manager

    # =========================================================================
    # YAML LOADING & DEFAULTS
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = value

    def load_yaml_directory(self, config_dir: Path, strict: bool = False) -> int:
        """
        Recursively load all YAML config files from `config_dir`.

        Returns
        -------
        int
            Number of files merged.
        """
        if not config_dir.exists():
            if strict:
                raise ConfigInitializationError(f"Config directory not found: {config_dir}")
            logger.warning(
                "Config directory not found; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return 0

        yaml_files = sorted(config_dir.rglob("*.yaml")) + sorted(config_dir.rglob("*.yml"))
        if not yaml_files:
            logger.info(
                "No YAML config files discovered; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return 0

        loaded_count = 0
        for yaml_file in yaml_files:
            if self._load_yaml_file(yaml_file, config_dir):
                loaded_count += 1

        self._metrics.yaml_files_loaded += loaded_count
        logger.info(
            "YAML configs loaded",
            extra={"yaml_file_count": loaded_count, "config_dir": str(config_dir)},
        )
        return loaded_count

    def _load_yaml_file(self, yaml_file: Path, config_dir: Path) -> bool:
        relative = str(yaml_file.relative_to(config_dir))
        try:
            with yaml_file.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
        except (OSError, yaml.YAMLError) as exc:
            self._metrics.errors += 1
            logger.warning(
                "Failed to load YAML config",
                extra={
                    "file": relative,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return False

        if isinstance(data, dict):
            with self._lock:
                self._deep_merge_dict(self._values, data)
            logger.debug("Loaded YAML config", extra={"file": relative})
            return True

        if data is not None:
            logger.warning(
                "Ignoring non-dict YAML root object",
                extra={"file": relative, "root_type": type(data).__name__},
            )
        return False

    # =========================================================================
    # VALIDATION HOOKS
    # =========================================================================

    def register_validator(self, key: str, validator: Callable[[Any], Any]) -> None:
        """
        Register a validator for a dot-notation key.

        Validators return the (possibly transformed) value to store, or raise
        to block the write.
        """
        with self._lock:
            self._validators[key] = validator

    def _apply_validator(self, key: str, value: Any) -> Any:
        validator = self._validators.get(key)
        if validator is None:
            return value
        try:
            return validator(value)
        except (TypeError, ValueError) as exc:
            self._metrics.errors += 1
            logger.error(
                "Config validation failed",
                extra={"config_key": key, "error": str(exc)},
            )
            raise ConfigValidationError(key, str(exc)) from exc

    # =========================================================================
    # READ API
    # =========================================================================

    def _lookup(self, key: str) -> Any:
        value: Any = self._values
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return _MISSING
            value = value[part]
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Parameters
        ----------
        key:
            Dot-notation config path (e.g. `"progression.xp_curve.base"`).
        default:
            Value to return if the key is not found.

        Examples
        --------
        >>> manager.get("notifications.level_up", True)
        True
        """
        with self._lock:
            self._metrics.gets += 1
            value = self._lookup(key)
            if value is _MISSING:
                self._metrics.misses += 1
                return default
            self._metrics.hits += 1
            return copy.deepcopy(value) if isinstance(value, (dict, list)) else value

    def get_all_keys(self) -> List[str]:
        with self._lock:
            return sorted(self._values.keys())

    # =========================================================================
    # WRITE API
    # =========================================================================

    def set(self, key: str, value: Any) -> None:
        """
        Override a configuration value at runtime.

        Raises
        ------
        ConfigValidationError
            If a registered validator rejects the value, or the path runs
            through a non-dict value.
        """
        validated = self._apply_validator(key, value)
        parts = key.split(".")

        with self._lock:
            node: Dict[str, Any] = self._values
            for part in parts[:-1]:
                child = node.setdefault(part, {})
                if not isinstance(child, dict):
                    self._metrics.errors += 1
                    raise ConfigValidationError(key, f"'{part}' is not a section")
                node = child
            old_value = node.get(parts[-1])
            node[parts[-1]] = validated
            self._metrics.sets += 1

        logger.info(
            "Config value updated",
            extra={"config_key": key, "old_value": old_value, "new_value": validated},
        )

    # =========================================================================
    # METRICS
    # =========================================================================

    def get_metrics(self) -> Dict[str, Any]:
        with self._lock:
            snapshot = asdict(self._metrics)
        gets = snapshot["gets"]
        snapshot["hit_rate"] = round(snapshot["hits"] / gets * 100, 2) if gets else 0.0
        return snapshot


__all__ = ["ConfigManager", "ConfigMetrics", "BUILTIN_DEFAULTS"]
