"""Quest module: objective matching, starter quests and the quest registry."""

from .objectives import OBJECTIVE_MATCHERS, category_key, kind_key, matches
from .service import QuestEngine, QuestUpdate
from .starter import STARTER_QUEST_IDS, starter_quests

__all__ = [
    "OBJECTIVE_MATCHERS",
    "category_key",
    "kind_key",
    "matches",
    "QuestEngine",
    "QuestUpdate",
    "STARTER_QUEST_IDS",
    "starter_quests",
]
