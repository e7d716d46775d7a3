"""
Quest Engine
============

Purpose
-------
Owns the active and completed quest registries for one profile, advances
objective counters as accepted actions arrive, and pays out completion
rewards through the ProgressionEngine.

Domain
------
- Quest registration (starter set or explicit addition)
- Objective matching via the explicit matcher table
- Lifecycle: AVAILABLE -> IN_PROGRESS -> COMPLETED (terminal)
- Completion XP (base reward x difficulty multiplier, rounded half up)
- Persistence snapshot export/restore with starter re-seeding

Design Notes
------------
- Registries are dicts keyed by quest id. Quests are frozen; an update
  replaces the entry by id, and a completed quest moves to the completed
  registry and is never touched again.
- All mutation happens under the session lock. Events are published by
  `notify()` once the caller has released it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Union

from refactor_rpg.domain.models.base import (
    DomainValidationError,
    from_epoch_millis,
    to_epoch_millis,
    utc_now,
)
from refactor_rpg.domain.models.quest import (
    Quest,
    QuestCategory,
    QuestDifficulty,
    QuestObjective,
    QuestStatus,
)
from refactor_rpg.domain.models.refactoring import DetectedAction
from refactor_rpg.modules.progression.service import XpChange
from refactor_rpg.modules.shared.base_service import BaseService
from refactor_rpg.modules.shared.exceptions import (
    InvalidOperationError,
    NotFoundError,
    SnapshotError,
    ValidationError,
)

from .objectives import is_known_matcher, matches
from .starter import starter_quests

if TYPE_CHECKING:
    from logging import Logger

    from refactor_rpg.core.config.manager import ConfigManager
    from refactor_rpg.core.event.bus import EventBus
    from refactor_rpg.modules.progression.service import ProgressionEngine


@dataclass(frozen=True)
class QuestUpdate:
    """
    What one action did to the quest registries.

    `active_quests` and `completed_quests` are captured in the same critical
    section as the change, so quest.changed never reports a later state.
    """

    changed: bool = False
    completed: tuple[Quest, ...] = ()
    xp_changes: tuple[XpChange, ...] = field(default_factory=tuple)
    active_quests: tuple[Quest, ...] = ()
    completed_quests: tuple[Quest, ...] = ()


class QuestEngine(BaseService):
    """
    Service for quest progression and rewards.

    Dependencies
    ------------
    - ConfigManager: notification toggles
    - EventBus: quest.completed, quest.changed
    - Logger: structured logging
    - ProgressionEngine: receives completion XP

    Public Methods
    --------------
    - on_action() -> advance matching objectives, complete quests
    - add_quest() -> register a new AVAILABLE quest
    - active_quests() / completed_quests() -> ordered snapshots
    - get_quest() -> lookup by id
    - quests_by_category() / quests_by_difficulty() -> filtered views
    - seed_starter_quests() / reset() -> (re)load the starter set
    - to_snapshot() / restore() -> persistence records
    - notify() -> publish events for a QuestUpdate
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        progression: ProgressionEngine,
        lock: Optional[Union[threading.Lock, threading.RLock]] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._progression = progression
        self._lock = lock or threading.RLock()
        self._active: Dict[str, Quest] = {}
        self._completed: Dict[str, Quest] = {}

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    def active_quests(self) -> tuple[Quest, ...]:
        with self._lock:
            return tuple(self._active.values())

    def completed_quests(self) -> tuple[Quest, ...]:
        with self._lock:
            return tuple(self._completed.values())

    def get_quest(self, quest_id: str) -> Quest:
        """
        Raises:
            NotFoundError: If no active or completed quest has this id
        """
        with self._lock:
            quest = self._active.get(quest_id) or self._completed.get(quest_id)
        if quest is None:
            raise NotFoundError("quest", quest_id)
        return quest

    def quests_by_category(self, category: QuestCategory) -> tuple[Quest, ...]:
        return tuple(q for q in self._all_quests() if q.category is category)

    def quests_by_difficulty(self, difficulty: QuestDifficulty) -> tuple[Quest, ...]:
        return tuple(q for q in self._all_quests() if q.difficulty is difficulty)

    def _all_quests(self) -> List[Quest]:
        with self._lock:
            return [*self._active.values(), *self._completed.values()]

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    def add_quest(self, quest: Quest) -> None:
        """
        Register a new quest in the active set.

        Raises:
            ValidationError: If the quest is not AVAILABLE or names an unknown
                objective matcher
            InvalidOperationError: If the id is already registered
        """
        self._validate_new_quest(quest)

        with self._lock:
            if quest.id in self._active or quest.id in self._completed:
                raise InvalidOperationError(
                    "add_quest", f"quest '{quest.id}' is already registered"
                )
            self._active[quest.id] = quest
            update = self.current_state()

        self.log_operation("add_quest", quest_id=quest.id, title=quest.title)
        self.notify(update)

    def _validate_new_quest(self, quest: Quest) -> None:
        if quest.status is not QuestStatus.AVAILABLE:
            raise ValidationError("status", f"new quest must be AVAILABLE, got {quest.status.name}")
        self._validate_matchers(quest)

    @staticmethod
    def _validate_matchers(quest: Quest) -> None:
        unknown = [obj.match for obj in quest.objectives if not is_known_matcher(obj.match)]
        if unknown:
            raise ValidationError("objectives", f"unknown objective matcher(s): {unknown}")

    def on_action(self, action: DetectedAction, now: Optional[datetime] = None) -> QuestUpdate:
        """
        Advance every active quest's matching objectives by one.

        Quests whose objectives are all met move to the completed registry
        and their XP award is paid into the ProgressionEngine.

        Args:
            action: The accepted detection
            now: Completion timestamp (defaults to the action's timestamp)

        Returns:
            QuestUpdate describing changes, completions and XP awarded
        """
        stamp = now or action.timestamp
        completed: List[Quest] = []
        xp_changes: List[XpChange] = []
        changed = False

        with self._lock:
            for quest_id, quest in list(self._active.items()):
                objectives = tuple(
                    obj.advanced() if matches(obj, action) else obj for obj in quest.objectives
                )
                if objectives == quest.objectives:
                    continue

                updated = quest.with_objectives(objectives, stamp)
                changed = True

                if updated.is_completed:
                    del self._active[quest_id]
                    self._completed[quest_id] = updated
                    completed.append(updated)
                    xp_changes.append(
                        self._progression.award_quest_xp(updated.xp_award, quest_id=quest_id)
                    )
                    self.log.info(
                        f"Quest completed: {updated.title} (+{updated.xp_award} XP)",
                        extra={"quest_id": quest_id, "xp_award": updated.xp_award},
                    )
                else:
                    self._active[quest_id] = updated

            active_quests = tuple(self._active.values())
            completed_quests = tuple(self._completed.values())

        return QuestUpdate(
            changed=changed,
            completed=tuple(completed),
            xp_changes=tuple(xp_changes),
            active_quests=active_quests,
            completed_quests=completed_quests,
        )

    def current_state(self) -> QuestUpdate:
        """Registry contents as a changed QuestUpdate, for full-state publication."""
        with self._lock:
            return QuestUpdate(
                changed=True,
                active_quests=tuple(self._active.values()),
                completed_quests=tuple(self._completed.values()),
            )

    def seed_starter_quests(self, now: Optional[datetime] = None) -> None:
        """Replace both registries with a fresh starter set."""
        quests = starter_quests(now)
        with self._lock:
            self._active = {quest.id: quest for quest in quests}
            self._completed = {}

        self.log_operation("seed_starter_quests", quest_count=len(quests))

    def reset(self, now: Optional[datetime] = None) -> None:
        self.seed_starter_quests(now)

    # ========================================================================
    # Events
    # ========================================================================

    def notify(self, update: QuestUpdate) -> None:
        """Publish quest events. Must be called after the session lock is released."""
        for quest in update.completed:
            self.emit_event(
                "quest.completed",
                {"quest": quest, "xp_awarded": quest.xp_award},
                toggle_key="notifications.quest_completed",
            )
        if update.changed:
            self.emit_event(
                "quest.changed",
                {"active": update.active_quests, "completed": update.completed_quests},
            )

    # ========================================================================
    # Persistence
    # ========================================================================

    def to_snapshot(self) -> Dict[str, Any]:
        """Primitive-only record for the persistence collaborator."""
        with self._lock:
            return {
                "active_quests": [_quest_to_record(q) for q in self._active.values()],
                "completed_quests": [_quest_to_record(q) for q in self._completed.values()],
            }

    def restore(
        self,
        snapshot: Optional[Mapping[str, Any]],
        now: Optional[datetime] = None,
    ) -> int:
        """
        Replace the registries from a persistence record.

        Malformed records are skipped with a warning. When nothing could be
        restored (absent, empty or fully unreadable snapshot) the starter set
        is seeded instead.

        Returns:
            Number of skipped records
        """
        snapshot, skipped = self.snapshot_mapping(snapshot)
        records: List[Any] = []
        for key in ("active_quests", "completed_quests"):
            section, bad_section = self.snapshot_section(snapshot, key)
            records.extend(section)
            skipped += bad_section

        active: Dict[str, Quest] = {}
        completed: Dict[str, Quest] = {}

        for record in records:
            try:
                quest = _quest_from_record(record)
                self._validate_matchers(quest)
            except (SnapshotError, ValidationError) as exc:
                skipped += 1
                self.log.warning(
                    f"Skipping quest record: {exc.message}",
                    extra={"record": record},
                )
                continue

            if quest.id in active or quest.id in completed:
                skipped += 1
                self.log.warning("Skipping duplicate quest record", extra={"quest_id": quest.id})
                continue

            target = completed if quest.is_completed else active
            target[quest.id] = quest

        if not active and not completed:
            self.seed_starter_quests(now)
            return skipped

        with self._lock:
            self._active = active
            self._completed = completed

        self.log_operation(
            "restore_quests",
            active_count=len(active),
            completed_count=len(completed),
            skipped=skipped,
        )
        return skipped


# ============================================================================
# Record helpers
# ============================================================================


def _quest_to_record(quest: Quest) -> Dict[str, Any]:
    return {
        "id": quest.id,
        "title": quest.title,
        "description": quest.description,
        "category": quest.category.name,
        "base_xp_reward": quest.base_xp_reward,
        "difficulty": quest.difficulty.name,
        "status": quest.status.name,
        "created_at_millis": to_epoch_millis(quest.created_at),
        "completed_at_millis": (
            to_epoch_millis(quest.completed_at) if quest.completed_at else None
        ),
        "objectives": [
            {
                "description": obj.description,
                "target_count": obj.target_count,
                "current_count": obj.current_count,
                "match": obj.match,
            }
            for obj in quest.objectives
        ],
    }


def _enum_member(enum_cls: Any, name: Any, record: Any) -> Any:
    member = enum_cls.__members__.get(name) if isinstance(name, str) else None
    if member is None:
        raise SnapshotError("quest", f"unknown {enum_cls.__name__} {name!r}", record)
    return member


def _quest_from_record(record: Any) -> Quest:
    if not isinstance(record, Mapping):
        raise SnapshotError("quest", "record is not a mapping", record)

    try:
        completed_millis = record.get("completed_at_millis")
        return Quest(
            id=record["id"],
            title=record["title"],
            description=record.get("description", ""),
            category=_enum_member(QuestCategory, record.get("category"), record),
            base_xp_reward=int(record["base_xp_reward"]),
            difficulty=_enum_member(QuestDifficulty, record.get("difficulty"), record),
            objectives=tuple(
                QuestObjective(
                    description=obj["description"],
                    target_count=int(obj["target_count"]),
                    match=obj["match"],
                    current_count=int(obj.get("current_count", 0)),
                )
                for obj in record["objectives"]
            ),
            status=_enum_member(QuestStatus, record.get("status"), record),
            created_at=(
                from_epoch_millis(record["created_at_millis"])
                if record.get("created_at_millis") is not None
                else utc_now()
            ),
            completed_at=(
                from_epoch_millis(completed_millis) if completed_millis is not None else None
            ),
        )
    except SnapshotError:
        raise
    except (
        DomainValidationError,
        KeyError,
        TypeError,
        ValueError,
        AttributeError,
        OverflowError,
        OSError,
    ) as exc:
        raise SnapshotError("quest", f"{type(exc).__name__}: {exc}", record) from exc
