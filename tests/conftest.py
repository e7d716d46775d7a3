"""
Pytest Configuration and Fixtures for RefactorRPG Tests
=======================================================

Purpose
-------
Centralized fixtures for the RefactorRPG test suite: configuration, event
bus, engines, a controllable clock and fully wired game sessions.

Architecture Notes
------------------
- Every fixture builds fresh instances; nothing is shared between tests.
- ConfigManager fixtures use built-in defaults only (no YAML on disk), so
  tests do not depend on the repository's config directory.
- The fake clock starts at a fixed UTC instant and only moves when a test
  advances it.
"""

from __future__ import annotations

import os

# Must be set before refactor_rpg.core.config is imported.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import pytest

from refactor_rpg.core.config.manager import ConfigManager
from refactor_rpg.core.event.bus import EventBus
from refactor_rpg.core.logging.logger import clear_log_context, get_logger
from refactor_rpg.domain.models.refactoring import DetectedAction, RefactoringKind
from refactor_rpg.modules.progression.service import ProgressionEngine
from refactor_rpg.modules.quest.service import QuestEngine
from refactor_rpg.modules.session.context import GameSession

EPOCH = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock; call it to read, `advance` to move forward."""

    def __init__(self, start: datetime = EPOCH) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, milliseconds: int = 0, seconds: int = 0) -> datetime:
        self.current += timedelta(milliseconds=milliseconds, seconds=seconds)
        return self.current


# ============================================================================
# INFRASTRUCTURE FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def _isolated_log_context():
    yield
    clear_log_context()


@pytest.fixture
def config_manager() -> ConfigManager:
    """Built-in gameplay defaults only."""
    return ConfigManager()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def progression(config_manager, event_bus) -> ProgressionEngine:
    return ProgressionEngine(config_manager, event_bus, get_logger("tests.progression"))


@pytest.fixture
def quest_engine(config_manager, event_bus, progression) -> QuestEngine:
    """Quest engine with empty registries (no starter quests)."""
    return QuestEngine(
        config_manager,
        event_bus,
        get_logger("tests.quest"),
        progression=progression,
    )


@pytest.fixture
def session(config_manager, event_bus, clock) -> GameSession:
    """Fresh session seeded with the starter quests."""
    return GameSession(
        config_manager,
        event_bus,
        profile_id="test-profile",
        clock=clock,
        dedup_window_ms=500,
    )


# ============================================================================
# FACTORIES
# ============================================================================


@pytest.fixture
def make_action() -> Callable[..., DetectedAction]:
    """Factory for DetectedAction with sensible defaults."""

    def _make(
        kind: RefactoringKind = RefactoringKind.EXTRACT_METHOD,
        timestamp: Optional[datetime] = None,
        origin_file: Optional[str] = "Service.kt",
        element_hint: Optional[str] = None,
    ) -> DetectedAction:
        return DetectedAction(
            kind=kind,
            timestamp=timestamp or EPOCH,
            origin_file=origin_file,
            element_hint=element_hint,
        )

    return _make
