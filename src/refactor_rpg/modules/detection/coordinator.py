"""
Detection Coordinator
=====================

Purpose
-------
Single entry point for raw detections. Sequences classifier, deduplication
gate, progression and quest updates, then fans out notifications. Owns no
business rules itself.

Flow
----
    raw id -> classify -> (unrecognized: log, stop)
           -> gate      -> (duplicate: log, stop)
           -> history + XP -> quests (+ quest XP)
           -> publish progress/quest events (outside the lock)

Thread Safety
-------------
Detections arrive on host threads. Everything from the gate check to the
progress snapshot runs under the session lock; listeners only ever see the
frozen snapshot taken inside it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Union

from refactor_rpg.core.logging.logger import LogContext
from refactor_rpg.domain.models.base import utc_now
from refactor_rpg.domain.models.progress import PlayerProgress
from refactor_rpg.domain.models.quest import Quest
from refactor_rpg.domain.models.refactoring import DetectedAction, RefactoringKind
from refactor_rpg.modules.shared.base_service import BaseService
from refactor_rpg.modules.shared.exceptions import ValidationError

from .classifier import classify, looks_like_refactoring
from .sources import RawDetection

if TYPE_CHECKING:
    from logging import Logger

    from refactor_rpg.core.config.manager import ConfigManager
    from refactor_rpg.core.event.bus import EventBus
    from refactor_rpg.modules.progression.service import ProgressionEngine
    from refactor_rpg.modules.quest.service import QuestEngine

    from .dedup import DeduplicationGate


class DetectionResult(Enum):
    ACCEPTED = "accepted"
    UNRECOGNIZED = "unrecognized"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class DetectionOutcome:
    """What happened to one raw detection."""

    result: DetectionResult
    raw_id: str
    kind: Optional[RefactoringKind] = None
    action: Optional[DetectedAction] = None
    progress: Optional[PlayerProgress] = None
    completed_quests: tuple[Quest, ...] = ()
    level_before: Optional[int] = None

    @property
    def accepted(self) -> bool:
        return self.result is DetectionResult.ACCEPTED

    @property
    def leveled_up(self) -> bool:
        if self.level_before is None or self.progress is None:
            return False
        return self.progress.level > self.level_before


class DetectionCoordinator(BaseService):
    """
    Ties classifier, gate, progression and quests together.

    Public Methods
    --------------
    - handle() -> process one raw identifier
    - submit() -> process a RawDetection from a source adapter
    - handle_undo() -> record an undo (no XP reversal)
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        progression: ProgressionEngine,
        quests: QuestEngine,
        gate: DeduplicationGate,
        lock: Optional[Union[threading.Lock, threading.RLock]] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._progression = progression
        self._quests = quests
        self._gate = gate
        self._lock = lock or threading.RLock()
        self._clock = clock

    def submit(self, detection: RawDetection) -> DetectionOutcome:
        with LogContext(source=detection.source):
            return self.handle(
                detection.raw_id,
                origin_file=detection.origin_file,
                element_hint=detection.element_hint,
                now=detection.timestamp,
            )

    def handle(
        self,
        raw_id: str,
        origin_file: Optional[str] = None,
        element_hint: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DetectionOutcome:
        """
        Process one raw detection.

        Args:
            raw_id: Identifier as reported by the source
            origin_file: File the refactoring touched, if known
            element_hint: Element text, truncated to 50 characters
            now: Detection time (defaults to the session clock)

        Returns:
            DetectionOutcome; unrecognized and duplicate detections are
            normal outcomes, never exceptions

        Raises:
            ValidationError: If `now` is a naive datetime
        """
        if now is None:
            now = self._clock()
        elif now.tzinfo is None or now.utcoffset() is None:
            raise ValidationError("now", f"detection time must be timezone-aware, got {now!r}")

        kind = classify(raw_id)
        if kind is None:
            self._report_unrecognized(raw_id)
            return DetectionOutcome(DetectionResult.UNRECOGNIZED, raw_id)

        with self._lock:
            if not self._gate.should_accept(kind, origin_file, now):
                duplicate = True
            else:
                duplicate = False
                action = DetectedAction(
                    kind=kind,
                    timestamp=now,
                    origin_file=origin_file,
                    element_hint=element_hint,
                )
                level_before = self._progression.level
                action_change = self._progression.add_action(action)
                quest_update = self._quests.on_action(action, now)
                progress = self._progression.snapshot()

        if duplicate:
            self.emit_event("detection.rejected", {"raw_id": raw_id, "reason": "duplicate"})
            return DetectionOutcome(DetectionResult.DUPLICATE, raw_id, kind=kind)

        self._progression.notify((action_change, *quest_update.xp_changes), progress)
        self._quests.notify(quest_update)

        return DetectionOutcome(
            DetectionResult.ACCEPTED,
            raw_id,
            kind=kind,
            action=action,
            progress=progress,
            completed_quests=quest_update.completed,
            level_before=level_before,
        )

    def _report_unrecognized(self, raw_id: str) -> None:
        if looks_like_refactoring(raw_id):
            self.log.warning("Unknown refactoring id", extra={"raw_id": raw_id})
        else:
            self.log.debug("Ignoring unrecognized id", extra={"raw_id": raw_id})
        self.emit_event("detection.rejected", {"raw_id": raw_id, "reason": "unrecognized"})

    def handle_undo(self, raw_id: str, source: Optional[str] = None) -> None:
        """
        Record that the host undid a refactoring.

        XP and quest progress are kept: the history is append-only and an undo
        cannot be tied reliably to one earlier detection.
        """
        self.log.info("Refactoring undone", extra={"raw_id": raw_id, "undo_source": source})
        self.emit_event(
            "detection.undo",
            {"raw_id": raw_id, "kind": classify(raw_id), "source": source},
        )
