"""
Deduplication gate for detections reported by more than one source.

A structured refactoring event and a generic action event often describe the
same user operation. The gate remembers when each `(kind, origin_file)` pair
was last accepted and rejects a repeat inside the window.

Thread Safety
-------------
`should_accept` is a single critical section: the check and the update
happen under one lock, so two concurrent first detections cannot both win.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Optional

from refactor_rpg.core.logging.logger import get_logger
from refactor_rpg.domain.models.refactoring import RefactoringKind

logger = get_logger(__name__)

UNKNOWN_ORIGIN = "unknown"

DedupKey = tuple[RefactoringKind, str]


class DeduplicationGate:
    """
    Time-window duplicate suppression keyed by (kind, origin file).

    Args:
        window_ms: Window in milliseconds (positive)

    Example:
        >>> gate = DeduplicationGate(window_ms=500)
        >>> gate.should_accept(RefactoringKind.RENAME, "a.py", now)
        True
        >>> gate.should_accept(RefactoringKind.RENAME, "a.py", now)
        False
    """

    def __init__(self, window_ms: int = 500) -> None:
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        self._window = timedelta(milliseconds=window_ms)
        self._last_seen: dict[DedupKey, datetime] = {}
        self._lock = threading.Lock()

    @property
    def window(self) -> timedelta:
        return self._window

    def should_accept(
        self,
        kind: RefactoringKind,
        origin_file: Optional[str],
        now: datetime,
    ) -> bool:
        """
        Decide whether a detection is new, recording it when it is.

        Returns:
            False if the same key was accepted less than one window ago
            (state left untouched), True otherwise (timestamp overwritten).
        """
        key = (kind, origin_file or UNKNOWN_ORIGIN)

        with self._lock:
            self._evict_expired(now)

            last = self._last_seen.get(key)
            if last is not None and now - last < self._window:
                logger.debug(
                    "Duplicate detection suppressed",
                    extra={
                        "kind": kind.name,
                        "origin_file": key[1],
                        "elapsed_ms": (now - last) / timedelta(milliseconds=1),
                    },
                )
                return False

            self._last_seen[key] = now
            return True

    def _evict_expired(self, now: datetime) -> None:
        # Caller holds the lock.
        expired = [key for key, seen in self._last_seen.items() if now - seen >= self._window]
        for key in expired:
            del self._last_seen[key]

    def reset(self) -> None:
        with self._lock:
            self._last_seen.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_seen)
