"""Session module: per-profile composition root."""

from .context import GameSession

__all__ = ["GameSession"]
