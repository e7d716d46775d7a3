"""Progression module: XP total, action history, level and category stats."""

from .service import ProgressionEngine, XpChange, aggregate

__all__ = ["ProgressionEngine", "XpChange", "aggregate"]
