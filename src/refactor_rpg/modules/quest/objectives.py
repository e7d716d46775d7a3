"""
Objective matcher table.

Each QuestObjective names a matcher key; the table below is the complete,
enumerable set of keys and decides which accepted actions count toward the
objective:

    "any"                 every accepted action
    "kind:<KIND_ID>"      actions of exactly that RefactoringKind
    "category:<NAME>"     actions in that ActionCategory

Quests referring to a key outside the table are rejected when they are
added, so a typo can never leave an objective silently unreachable.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from refactor_rpg.domain.models.quest import QuestObjective
from refactor_rpg.domain.models.refactoring import (
    ActionCategory,
    DetectedAction,
    RefactoringKind,
)

ActionMatcher = Callable[[DetectedAction], bool]

MATCH_ANY = "any"


def kind_key(kind: RefactoringKind) -> str:
    return f"kind:{kind.kind_id}"


def category_key(category: ActionCategory) -> str:
    return f"category:{category.name}"


def _build_table() -> Mapping[str, ActionMatcher]:
    table: dict[str, ActionMatcher] = {MATCH_ANY: lambda action: True}
    for kind in RefactoringKind:
        table[kind_key(kind)] = lambda action, kind=kind: action.kind is kind
    for category in ActionCategory:
        table[category_key(category)] = lambda action, category=category: (
            action.category is category
        )
    return MappingProxyType(table)


OBJECTIVE_MATCHERS: Mapping[str, ActionMatcher] = _build_table()


def is_known_matcher(match: str) -> bool:
    return match in OBJECTIVE_MATCHERS


def matches(objective: QuestObjective, action: DetectedAction) -> bool:
    """
    True when `action` counts toward `objective`.

    Unknown keys never match; QuestEngine rejects them before they get here.
    """
    matcher = OBJECTIVE_MATCHERS.get(objective.match)
    return matcher is not None and matcher(action)
