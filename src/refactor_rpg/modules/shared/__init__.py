"""
RefactorRPG Shared Module

Domain-level foundations for the game modules:
- BaseService: logging, config access, event emission
- Domain exceptions
- Progression formulas (threshold curve, level scan, titles, tiers)
"""

from .base_service import BaseService
from .exceptions import (
    InvalidOperationError,
    NotFoundError,
    RefactorRPGDomainException,
    SnapshotError,
    ValidationError,
)
from .formulas import (
    level_for_xp,
    level_progress,
    tier_for_level,
    title_for_level,
    xp_threshold,
)

__all__ = [
    "BaseService",
    "InvalidOperationError",
    "NotFoundError",
    "RefactorRPGDomainException",
    "SnapshotError",
    "ValidationError",
    "level_for_xp",
    "level_progress",
    "tier_for_level",
    "title_for_level",
    "xp_threshold",
]
