"""
Progression Engine
==================

Purpose
-------
Owns a player's monotonic XP total and append-only action history, and
derives everything else (level, level progress, title, category rollups)
from those two values on demand.

Domain
------
- XP threshold curve and its level scan (config-driven curve parameters)
- Action XP and quest XP accumulation with level-up detection
- Per-category aggregation of the action history
- Persistence snapshot export/restore

Design Notes
------------
- Mutations run under the session lock passed in by GameSession, so the
  history append, the XP change and the quest update of one detection form
  a single critical section.
- Mutating methods return an `XpChange` record instead of publishing; the
  caller publishes with `notify()` after releasing the lock.
- The history is bounded only when `Config.MAX_HISTORY_SIZE` > 0; trimming
  drops the oldest actions and never touches the XP total.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Union

from refactor_rpg.core.config.config import Config
from refactor_rpg.domain.models.base import from_epoch_millis, to_epoch_millis
from refactor_rpg.domain.models.progress import CategoryStats, PlayerProgress
from refactor_rpg.domain.models.refactoring import (
    ActionCategory,
    DetectedAction,
    RefactoringKind,
)
from refactor_rpg.modules.shared.base_service import BaseService
from refactor_rpg.modules.shared.exceptions import SnapshotError
from refactor_rpg.modules.shared.formulas import (
    DEFAULT_XP_BASE,
    DEFAULT_XP_EXPONENT,
    level_for_xp,
    level_progress,
    tier_for_level,
    title_for_level,
    xp_threshold,
)

if TYPE_CHECKING:
    from logging import Logger

    from refactor_rpg.core.config.manager import ConfigManager
    from refactor_rpg.core.event.bus import EventBus


# ============================================================================
# Result records
# ============================================================================


@dataclass(frozen=True)
class XpChange:
    """Outcome of one XP mutation, published after the lock is released."""

    amount: int
    old_total: int
    new_total: int
    old_level: int
    new_level: int
    source: str
    kind: Optional[RefactoringKind] = None

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


# ============================================================================
# Aggregation
# ============================================================================


def aggregate(history: Iterable[DetectedAction]) -> Dict[ActionCategory, CategoryStats]:
    """
    Roll a flat action history up into per-category statistics.

    Every category is present in the result, empty ones with zero counts.
    `most_frequent_kind` ties go to the kind encountered first in history
    order.

    Example:
        >>> stats = aggregate([action_rename, action_rename, action_extract])
        >>> stats[ActionCategory.STRUCTURE].most_frequent_kind
        <RefactoringKind.RENAME: ...>
    """
    counts: Dict[ActionCategory, Counter] = {category: Counter() for category in ActionCategory}
    xp_totals: Dict[ActionCategory, int] = {category: 0 for category in ActionCategory}

    for action in history:
        counts[action.category][action.kind] += 1
        xp_totals[action.category] += action.xp

    result: Dict[ActionCategory, CategoryStats] = {}
    for category in ActionCategory:
        kind_counts = counts[category]
        # Counter keeps insertion order; most_common is stable for ties.
        most_frequent = kind_counts.most_common(1)[0][0] if kind_counts else None
        result[category] = CategoryStats(
            category=category,
            action_count=sum(kind_counts.values()),
            total_xp=xp_totals[category],
            most_frequent_kind=most_frequent,
        )
    return result


# ============================================================================
# ProgressionEngine
# ============================================================================


class ProgressionEngine(BaseService):
    """
    XP, level and statistics for one player profile.

    Dependencies
    ------------
    - ConfigManager: curve base/exponent, level scan ceiling, recent limit
    - EventBus: progress.changed, progress.xp_gained, progress.level_up
    - Logger: structured logging

    Public Methods
    --------------
    - xp_threshold() / level_for() -> curve with configured parameters
    - add_action() -> append an accepted detection and add its XP
    - award_quest_xp() -> add a quest completion reward
    - snapshot() -> PlayerProgress read model
    - recent_actions() -> newest-first slice of the history
    - to_snapshot() / restore() -> persistence records
    - reset() -> wipe XP and history
    - notify() -> publish events for an XpChange
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        lock: Optional[Union[threading.Lock, threading.RLock]] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._lock = lock or threading.RLock()
        self._total_xp = 0
        self._history: List[DetectedAction] = []
        self._max_history = Config.MAX_HISTORY_SIZE

    # ========================================================================
    # Curve (configured)
    # ========================================================================

    def _curve(self) -> tuple[float, float]:
        base = self.get_config("progression.xp_curve.base", DEFAULT_XP_BASE)
        exponent = self.get_config("progression.xp_curve.exponent", DEFAULT_XP_EXPONENT)
        return base, exponent

    def xp_threshold(self, level: int) -> int:
        base, exponent = self._curve()
        return xp_threshold(level, base, exponent)

    def level_for(self, total_xp: int) -> int:
        base, exponent = self._curve()
        return level_for_xp(total_xp, base, exponent)

    # ========================================================================
    # Read API
    # ========================================================================

    @property
    def total_xp(self) -> int:
        with self._lock:
            return self._total_xp

    @property
    def level(self) -> int:
        return self.level_for(self.total_xp)

    @property
    def history(self) -> tuple[DetectedAction, ...]:
        with self._lock:
            return tuple(self._history)

    @property
    def action_count(self) -> int:
        with self._lock:
            return len(self._history)

    def recent_actions(self, limit: Optional[int] = None) -> tuple[DetectedAction, ...]:
        """
        Most recent actions, newest first.

        Args:
            limit: Maximum number of actions (defaults to history.recent_limit)
        """
        if limit is None:
            limit = self.get_config("history.recent_limit", 50)
        if limit <= 0:
            return ()
        with self._lock:
            return tuple(reversed(self._history[-limit:]))

    def snapshot(self) -> PlayerProgress:
        """Recompute the PlayerProgress read model from XP total and history."""
        with self._lock:
            total_xp = self._total_xp
            history = tuple(self._history)

        base, exponent = self._curve()
        level = self.level_for(total_xp)
        current_threshold = xp_threshold(level, base, exponent)
        recent_limit = self.get_config("history.recent_limit", 50)

        return PlayerProgress(
            total_xp=total_xp,
            level=level,
            current_level_xp=total_xp - current_threshold,
            xp_for_next_level=xp_threshold(level + 1, base, exponent),
            level_progress=level_progress(total_xp, level, base, exponent),
            title=title_for_level(level),
            tier=tier_for_level(level),
            category_stats=aggregate(history),
            action_count=len(history),
            last_action_at=max((a.timestamp for a in history), default=None),
            recent_actions=tuple(reversed(history[-recent_limit:])) if recent_limit > 0 else (),
        )

    # ========================================================================
    # Write API
    # ========================================================================

    def add_action(self, action: DetectedAction) -> XpChange:
        """
        Append an accepted detection and add its base XP.

        Args:
            action: The accepted detection

        Returns:
            XpChange with old/new totals and levels
        """
        with self._lock:
            self._history.append(action)
            if self._max_history and len(self._history) > self._max_history:
                del self._history[: len(self._history) - self._max_history]
            change = self._add_xp(action.xp, source="action", kind=action.kind)

        self.log.info(
            f"Action recorded: {action.kind.display_name} +{action.xp} XP",
            extra={
                "kind": action.kind.name,
                "xp": action.xp,
                "total_xp": change.new_total,
                "origin_file": action.origin_file,
            },
        )
        return change

    def award_quest_xp(self, amount: int, quest_id: Optional[str] = None) -> XpChange:
        """
        Add a quest completion reward.

        Raises:
            ValidationError: If amount is negative or not an integer
        """
        self.validate_non_negative_int(amount, "amount")

        with self._lock:
            change = self._add_xp(amount, source="quest")

        self.log.info(
            f"Quest XP gained: +{amount} XP",
            extra={"quest_id": quest_id, "xp": amount, "total_xp": change.new_total},
        )
        return change

    def _add_xp(self, amount: int, source: str, kind: Optional[RefactoringKind] = None) -> XpChange:
        # Caller holds the lock.
        old_total = self._total_xp
        self._total_xp = old_total + amount
        change = XpChange(
            amount=amount,
            old_total=old_total,
            new_total=self._total_xp,
            old_level=self.level_for(old_total),
            new_level=self.level_for(self._total_xp),
            source=source,
            kind=kind,
        )
        if change.leveled_up:
            self.log.info(
                f"Level up! {change.old_level} -> {change.new_level} - "
                f"{title_for_level(change.new_level)}",
                extra={
                    "old_level": change.old_level,
                    "new_level": change.new_level,
                    "total_xp": change.new_total,
                },
            )
        return change

    def reset(self) -> None:
        with self._lock:
            previous_total = self._total_xp
            previous_count = len(self._history)
            self._total_xp = 0
            self._history.clear()

        self.log_operation(
            "reset_progress",
            previous_total_xp=previous_total,
            previous_action_count=previous_count,
        )

    # ========================================================================
    # Events
    # ========================================================================

    def notify(self, changes: Iterable[XpChange], progress: PlayerProgress) -> None:
        """
        Publish the events for a batch of XP changes plus one progress.changed.

        Must be called after the session lock is released.
        """
        for change in changes:
            if change.source == "action":
                self.emit_event(
                    "progress.xp_gained",
                    {
                        "kind": change.kind,
                        "xp": change.amount,
                        "total_xp": change.new_total,
                    },
                    toggle_key="notifications.xp_gain",
                )
            if change.leveled_up:
                self.emit_event(
                    "progress.level_up",
                    {
                        "old_level": change.old_level,
                        "new_level": change.new_level,
                        "title": title_for_level(change.new_level),
                        "total_xp": change.new_total,
                    },
                    toggle_key="notifications.level_up",
                )
        self.emit_event("progress.changed", {"progress": progress})

    # ========================================================================
    # Persistence
    # ========================================================================

    def to_snapshot(self) -> Dict[str, Any]:
        """Primitive-only record for the persistence collaborator."""
        with self._lock:
            return {
                "total_xp": self._total_xp,
                "action_history": [_action_to_record(a) for a in self._history],
            }

    def restore(self, snapshot: Optional[Mapping[str, Any]]) -> int:
        """
        Replace state from a persistence record.

        Malformed action records are skipped with a warning. An invalid or
        missing total falls back to the XP of the restored history.

        Returns:
            Number of skipped records
        """
        snapshot, skipped = self.snapshot_mapping(snapshot)
        records, bad_section = self.snapshot_section(snapshot, "action_history")
        skipped += bad_section
        history: List[DetectedAction] = []

        for record in records:
            try:
                history.append(_action_from_record(record))
            except SnapshotError as exc:
                skipped += 1
                self.log.warning(
                    f"Skipping action record: {exc.message}",
                    extra={"snapshot_error": exc.to_dict()},
                )

        total_xp = snapshot.get("total_xp")
        if isinstance(total_xp, bool) or not isinstance(total_xp, int) or total_xp < 0:
            fallback = sum(action.xp for action in history)
            if total_xp is not None:
                self.log.warning(
                    "Invalid total_xp in snapshot, using history total",
                    extra={"total_xp": total_xp, "fallback": fallback},
                )
            total_xp = fallback

        with self._lock:
            self._total_xp = total_xp
            self._history = history
            if self._max_history and len(self._history) > self._max_history:
                del self._history[: len(self._history) - self._max_history]

        self.log_operation(
            "restore_progress",
            total_xp=total_xp,
            action_count=len(history),
            skipped=skipped,
        )
        return skipped


# ============================================================================
# Record helpers
# ============================================================================


def _action_to_record(action: DetectedAction) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "kind_id": action.kind.kind_id,
        "timestamp_millis": to_epoch_millis(action.timestamp),
    }
    if action.origin_file is not None:
        record["origin_file"] = action.origin_file
    if action.element_hint is not None:
        record["element_hint"] = action.element_hint
    return record


def _action_from_record(record: Any) -> DetectedAction:
    if not isinstance(record, Mapping):
        raise SnapshotError("action", "record is not a mapping", record)

    kind = RefactoringKind.from_id(str(record.get("kind_id", "")))
    if kind is None:
        raise SnapshotError("action", f"unknown kind_id {record.get('kind_id')!r}", record)

    millis = record.get("timestamp_millis")
    if isinstance(millis, bool) or not isinstance(millis, int):
        raise SnapshotError("action", "timestamp_millis must be an integer", record)

    try:
        timestamp = from_epoch_millis(millis)
    except (OverflowError, OSError, ValueError) as exc:
        raise SnapshotError("action", f"timestamp out of range: {exc}", record) from exc

    origin_file = record.get("origin_file")
    element_hint = record.get("element_hint")
    return DetectedAction(
        kind=kind,
        timestamp=timestamp,
        origin_file=origin_file if isinstance(origin_file, str) else None,
        element_hint=element_hint if isinstance(element_hint, str) else None,
    )
