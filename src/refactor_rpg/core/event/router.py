"""
EventRouter: wildcard event-name matching for the RefactorRPG EventBus.

Supported Patterns
------------------
- Exact:        "quest.completed" → matches only "quest.completed"
- Global:       "*" → matches any event
- Prefix:       "progress.*" → matches "progress.changed", "progress.level_up"
- Suffix:       "*.changed" → matches "progress.changed", "quest.changed"
- Sandwich:     "a.*.c" → matches "a.b.c"

Matching is case-sensitive. Repeated wildcards ("**") collapse to one.
"""

from __future__ import annotations


class EventRouter:
    """
    Stateless wildcard matcher.

    Examples
    --------
    >>> router = EventRouter()
    >>> router.matches("progress.level_up", "progress.*")
    True
    >>> router.matches("progress.level_up", "quest.*")
    False
    """

    def matches(self, event_name: str, pattern: str) -> bool:
        if pattern == "*":
            return True

        if "*" not in pattern:
            return event_name == pattern

        while "**" in pattern:
            pattern = pattern.replace("**", "*")

        parts = pattern.split("*")

        if parts[0] and not event_name.startswith(parts[0]):
            return False

        if parts[-1] and not event_name.endswith(parts[-1]):
            return False

        # Middle pieces must appear in order, after the prefix.
        idx = len(parts[0])
        for mid in parts[1:-1]:
            if not mid:
                continue
            next_idx = event_name.find(mid, idx)
            if next_idx == -1:
                return False
            idx = next_idx + len(mid)

        # Prefix and suffix must not overlap.
        return idx <= len(event_name) - len(parts[-1])
