"""
Game Session - per-profile composition root
===========================================

Purpose
-------
Build and own every collaborator for one player profile: configuration,
event bus, progression and quest engines, deduplication gate and detection
coordinator. Replaces process-wide singletons; tests and hosts with several
profiles simply create several sessions.

Responsibilities
----------------
- Construct services in dependency order with one shared session lock
- Seed the starter quests for a fresh profile
- Export and restore persistence snapshots
- Reset a profile
- Hand out detection source adapters bound to the coordinator

Initialization Order
--------------------
    1. ConfigManager (YAML gameplay defaults)
    2. EventBus
    3. ProgressionEngine
    4. QuestEngine (pays quest XP into ProgressionEngine)
    5. DeduplicationGate
    6. DetectionCoordinator
"""

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from refactor_rpg.core.config.config import Config
from refactor_rpg.core.config.manager import ConfigManager
from refactor_rpg.core.event.bus import EventBus
from refactor_rpg.core.logging.logger import LogContext, get_logger
from refactor_rpg.domain.models.base import utc_now
from refactor_rpg.domain.models.progress import PlayerProgress
from refactor_rpg.domain.models.quest import Quest
from refactor_rpg.modules.detection.coordinator import DetectionCoordinator, DetectionOutcome
from refactor_rpg.modules.detection.dedup import DeduplicationGate
from refactor_rpg.modules.detection.sources import (
    ActionEventSource,
    CommandEventSource,
    RefactoringEventSource,
)
from refactor_rpg.modules.progression.service import ProgressionEngine
from refactor_rpg.modules.quest.service import QuestEngine, QuestUpdate

logger = get_logger(__name__)


class GameSession:
    """
    Explicitly constructed game context for one profile.

    Args:
        config_manager: Gameplay config (defaults to YAML from Config.CONFIG_DIR)
        event_bus: Outbound event bus (defaults to a fresh bus)
        profile_id: Bound into log context for every session operation
        config_dir: YAML directory used when no config_manager is given
        clock: Source of "now" for detections without a timestamp
        dedup_window_ms: Overrides the configured deduplication window

    Usage:
        session = GameSession(profile_id="alice")
        session.events.subscribe("progress.level_up", on_level_up)
        session.handle("refactoring.extractMethod", origin_file="Foo.kt")
        store(session.progress_snapshot(), session.quest_snapshot())
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        event_bus: Optional[EventBus] = None,
        *,
        profile_id: str = "default",
        config_dir: Optional[Path] = None,
        clock: Callable[[], datetime] = utc_now,
        dedup_window_ms: Optional[int] = None,
    ) -> None:
        self.profile_id = profile_id
        self._clock = clock
        self._lock = threading.RLock()

        with LogContext(profile_id=profile_id, operation="session.init"):
            self.config = config_manager or ConfigManager.from_directory(config_dir)
            self.events = event_bus or EventBus()

            self.progression = ProgressionEngine(
                self.config,
                self.events,
                get_logger("refactor_rpg.modules.progression"),
                lock=self._lock,
            )
            self.quests = QuestEngine(
                self.config,
                self.events,
                get_logger("refactor_rpg.modules.quest"),
                progression=self.progression,
                lock=self._lock,
            )
            self.gate = DeduplicationGate(self._resolve_window(dedup_window_ms))
            self.coordinator = DetectionCoordinator(
                self.config,
                self.events,
                get_logger("refactor_rpg.modules.detection"),
                progression=self.progression,
                quests=self.quests,
                gate=self.gate,
                lock=self._lock,
                clock=clock,
            )

            self.quests.seed_starter_quests(clock())

            logger.info(
                "Game session created",
                extra={
                    "dedup_window_ms": int(self.gate.window.total_seconds() * 1000),
                    "starter_quests": len(self.quests.active_quests()),
                },
            )

    def _resolve_window(self, override: Optional[int]) -> int:
        """Explicit argument, then DEDUP_WINDOW_MS from the environment, then YAML."""
        if override is not None:
            return override
        if Config.is_set_from_env("DEDUP_WINDOW_MS"):
            return Config.DEDUP_WINDOW_MS
        return self.config.get("detection.dedup_window_ms", Config.DEDUP_WINDOW_MS)

    # ========================================================================
    # Detection
    # ========================================================================

    def handle(
        self,
        raw_id: str,
        origin_file: Optional[str] = None,
        element_hint: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DetectionOutcome:
        with LogContext(profile_id=self.profile_id):
            return self.coordinator.handle(raw_id, origin_file, element_hint, now)

    def refactoring_source(self) -> RefactoringEventSource:
        return RefactoringEventSource(self.coordinator)

    def action_source(self) -> ActionEventSource:
        return ActionEventSource(self.coordinator)

    def command_source(self) -> CommandEventSource:
        return CommandEventSource(self.coordinator)

    # ========================================================================
    # Read models
    # ========================================================================

    def progress(self) -> PlayerProgress:
        return self.progression.snapshot()

    def active_quests(self) -> tuple[Quest, ...]:
        return self.quests.active_quests()

    def completed_quests(self) -> tuple[Quest, ...]:
        return self.quests.completed_quests()

    # ========================================================================
    # Persistence
    # ========================================================================

    def progress_snapshot(self) -> Dict[str, Any]:
        return self.progression.to_snapshot()

    def quest_snapshot(self) -> Dict[str, Any]:
        return self.quests.to_snapshot()

    def restore(
        self,
        progress: Optional[Mapping[str, Any]] = None,
        quests: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """
        Load both snapshots. Bad records are skipped; an absent or empty
        quest snapshot seeds the starter set.

        Returns:
            Total number of skipped records
        """
        with LogContext(profile_id=self.profile_id, operation="session.restore"):
            with self._lock:
                skipped = self.progression.restore(progress)
                skipped += self.quests.restore(quests, self._clock())
                self.gate.reset()
                snapshot = self.progression.snapshot()
                quest_state = self.quests.current_state()

            self._publish_state(snapshot, quest_state)

        if skipped:
            logger.warning("Snapshot restored with skipped records", extra={"skipped": skipped})
        return skipped

    def reset(self) -> None:
        """Wipe XP, history and dedup cache, and re-seed the starter quests."""
        with LogContext(profile_id=self.profile_id, operation="session.reset"):
            with self._lock:
                self.progression.reset()
                self.quests.reset(self._clock())
                self.gate.reset()
                snapshot = self.progression.snapshot()
                quest_state = self.quests.current_state()

            self._publish_state(snapshot, quest_state)
            logger.info("Profile reset")

    def _publish_state(self, snapshot: PlayerProgress, quest_state: QuestUpdate) -> None:
        self.progression.notify((), snapshot)
        self.quests.notify(quest_state)
