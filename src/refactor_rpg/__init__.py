"""
RefactorRPG: turns refactorings performed in a code editor into XP, levels,
category statistics and quests.

Entry point for hosts is `refactor_rpg.modules.session.GameSession`.
"""

__version__ = "1.0.0"
