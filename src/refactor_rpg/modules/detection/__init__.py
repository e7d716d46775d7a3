"""
Detection module: raw editor identifiers in, accepted actions out.

- classifier: two-tier mapping of raw ids onto RefactoringKind
- dedup: time-window suppression of cross-source duplicates
- sources: adapters from editor event shapes to RawDetection
- coordinator: sequencing and notification fan-out
"""

from .classifier import CLASSIFIER_RULES, EXACT_IDS, classify, looks_like_refactoring, normalize_id
from .coordinator import DetectionCoordinator, DetectionOutcome, DetectionResult
from .dedup import UNKNOWN_ORIGIN, DeduplicationGate
from .sources import (
    ActionEventSource,
    CommandEventSource,
    RawDetection,
    RefactoringEventSource,
)

__all__ = [
    "CLASSIFIER_RULES",
    "EXACT_IDS",
    "classify",
    "looks_like_refactoring",
    "normalize_id",
    "DetectionCoordinator",
    "DetectionOutcome",
    "DetectionResult",
    "UNKNOWN_ORIGIN",
    "DeduplicationGate",
    "ActionEventSource",
    "CommandEventSource",
    "RawDetection",
    "RefactoringEventSource",
]
