"""
Refactoring taxonomy and detected actions.

Purpose
-------
Define the closed set of refactoring kinds the game recognizes, the four
statistics categories they belong to, and the immutable record of one
accepted detection.

Design Notes
------------
- Each RefactoringKind carries its static metadata (display name, category,
  base XP, gameplay tag) as data. Mapping raw editor identifiers onto kinds
  is a separate pure function (see `modules.detection.classifier`).
- The enum member name is the stable persisted identifier (`kind_id`).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .base import DomainValidationError

ELEMENT_HINT_MAX_LENGTH = 50


class ActionCategory(Enum):
    """The four refactoring families used for statistics grouping."""

    STRUCTURE = ("Code Structure", "🧱")
    LOGIC = ("Logic & Complexity", "🧠")
    DATA = ("Data & State", "📦")
    COUPLING = ("Coupling", "🔗")

    def __init__(self, display_name: str, icon: str) -> None:
        self.display_name = display_name
        self.icon = icon


class RefactoringKind(Enum):
    """
    Closed enumeration of refactoring kinds.

    Attributes
    ----------
    display_name : str
        Human-readable name, e.g. "Extract Method"
    category : ActionCategory
        Statistics family
    base_xp : int
        XP awarded per accepted detection (always positive)
    gameplay_tag : str
        Cosmetic tag shown next to notifications

    Examples
    --------
    >>> RefactoringKind.EXTRACT_METHOD.base_xp
    10
    >>> RefactoringKind.from_id("RENAME") is RefactoringKind.RENAME
    True
    """

    # Structure
    EXTRACT_METHOD = ("Extract Method", ActionCategory.STRUCTURE, 10, "🧪 Clarity")
    INLINE_METHOD = ("Inline Method", ActionCategory.STRUCTURE, 8, "🗡️ Anti-boilerplate")
    INLINE_VARIABLE = ("Inline Variable", ActionCategory.STRUCTURE, 5, "🗡️ Anti-boilerplate")
    EXTRACT_CLASS = ("Extract Class", ActionCategory.STRUCTURE, 15, "🏗️ Architecture")
    MOVE_METHOD = ("Move Method", ActionCategory.STRUCTURE, 12, "🔀 Balance")
    RENAME = ("Rename", ActionCategory.STRUCTURE, 5, "✨ Clarity")
    CHANGE_SIGNATURE = ("Change Signature", ActionCategory.STRUCTURE, 10, "🔧 Design")
    INTRODUCE_PARAMETER_OBJECT = (
        "Introduce Parameter Object",
        ActionCategory.STRUCTURE,
        15,
        "🧳 Packing",
    )
    REMOVE_PARAMETER = ("Remove Parameter", ActionCategory.STRUCTURE, 8, "✂️ Simplicity")
    EXTRACT_VARIABLE = ("Extract Variable", ActionCategory.STRUCTURE, 5, "🧪 Clarity")
    EXTRACT_CONSTANT = ("Extract Constant", ActionCategory.STRUCTURE, 5, "🧪 Clarity")
    EXTRACT_FIELD = ("Extract Field", ActionCategory.STRUCTURE, 8, "🧪 Clarity")
    PULL_UP = ("Pull Up", ActionCategory.STRUCTURE, 12, "🏗️ Architecture")
    PUSH_DOWN = ("Push Down", ActionCategory.STRUCTURE, 12, "🏗️ Architecture")

    # Logic & complexity
    REPLACE_CONDITIONAL_WITH_POLYMORPHISM = (
        "Replace Conditional with Polymorphism",
        ActionCategory.LOGIC,
        20,
        "🐍 Hydra Slayer",
    )
    DECOMPOSE_CONDITIONAL = ("Decompose Conditional", ActionCategory.LOGIC, 12, "🧩 Clarity")
    CONSOLIDATE_CONDITIONALS = (
        "Consolidate Conditionals",
        ActionCategory.LOGIC,
        10,
        "👯 Deduplicator",
    )
    REMOVE_DEAD_CODE = ("Remove Dead Code", ActionCategory.LOGIC, 8, "🧟 Zombie Hunter")
    SIMPLIFY_BOOLEAN = ("Simplify Boolean", ActionCategory.LOGIC, 8, "🧠 Logic Master")

    # Data & state
    ENCAPSULATE_FIELD = ("Encapsulate Field", ActionCategory.DATA, 10, "🔒 Protector")
    REPLACE_DATA_CLASS_WITH_OBJECT = (
        "Replace Data Class with Object",
        ActionCategory.DATA,
        15,
        "📦 Enricher",
    )
    REMOVE_SETTING_METHOD = ("Remove Setting Method", ActionCategory.DATA, 10, "🔐 Immutability")
    INTRODUCE_VALUE_OBJECT = ("Introduce Value Object", ActionCategory.DATA, 15, "💎 Value Creator")

    # Coupling
    INTRODUCE_INTERFACE = ("Introduce Interface", ActionCategory.COUPLING, 15, "🔗 Decoupler")
    DEPENDENCY_INVERSION = ("Dependency Inversion", ActionCategory.COUPLING, 20, "🔗 Inverter")
    REPLACE_INHERITANCE_WITH_DELEGATION = (
        "Replace Inheritance with Delegation",
        ActionCategory.COUPLING,
        18,
        "🔗 Delegator",
    )
    BREAK_CYCLIC_DEPENDENCY = (
        "Break Cyclic Dependency",
        ActionCategory.COUPLING,
        25,
        "🌀 Cycle Breaker",
    )

    # Cleanup & modernization
    OPTIMIZE_IMPORTS = ("Optimize Imports", ActionCategory.STRUCTURE, 2, "🧹 Cleaner")
    REFORMAT_CODE = ("Reformat Code", ActionCategory.STRUCTURE, 3, "🎨 Formatter")
    REMOVE_UNUSED = ("Remove Unused", ActionCategory.STRUCTURE, 5, "🗑️ Janitor")
    CONVERT_TO_STREAM = ("Convert to Stream", ActionCategory.LOGIC, 10, "🌊 Modernizer")
    SIMPLIFY_EXPRESSION = ("Simplify Expression", ActionCategory.LOGIC, 8, "🧠 Simplifier")
    SAFE_DELETE = ("Safe Delete", ActionCategory.STRUCTURE, 5, "🗑️ Safe Remover")
    MOVE_CLASS = ("Move Class", ActionCategory.STRUCTURE, 12, "🔀 Organizer")

    def __init__(
        self,
        display_name: str,
        category: ActionCategory,
        base_xp: int,
        gameplay_tag: str,
    ) -> None:
        self.display_name = display_name
        self.category = category
        self.base_xp = base_xp
        self.gameplay_tag = gameplay_tag

    @property
    def kind_id(self) -> str:
        return self.name

    @classmethod
    def from_id(cls, kind_id: str) -> Optional["RefactoringKind"]:
        """Resolve a persisted `kind_id`; None when unknown."""
        return cls.__members__.get(kind_id)

    @classmethod
    def in_category(cls, category: ActionCategory) -> tuple["RefactoringKind", ...]:
        return tuple(kind for kind in cls if kind.category is category)


@dataclass(frozen=True, slots=True)
class DetectedAction:
    """
    One accepted refactoring detection. Immutable; appended to history.

    `element_hint` is truncated to 50 characters rather than rejected, as
    detection sources pass raw element text.
    """

    kind: RefactoringKind
    timestamp: datetime
    origin_file: Optional[str] = None
    element_hint: Optional[str] = None

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            raise DomainValidationError("timestamp must be timezone-aware", field="timestamp")
        if self.element_hint is not None and len(self.element_hint) > ELEMENT_HINT_MAX_LENGTH:
            object.__setattr__(
                self, "element_hint", self.element_hint[:ELEMENT_HINT_MAX_LENGTH]
            )

    @property
    def xp(self) -> int:
        return self.kind.base_xp

    @property
    def category(self) -> ActionCategory:
        return self.kind.category
