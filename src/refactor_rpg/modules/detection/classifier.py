"""
Refactoring identifier classifier.

Purpose
-------
Map the loosely structured identifiers raised by editor detection sources
(structured refactoring ids, camelCase action names, dotted command names)
onto the closed RefactoringKind taxonomy.

Algorithm
---------
1. Normalize: lowercase, drop `.`, `-`, `_` and whitespace separators.
2. Tier 1: exact lookup in `EXACT_IDS`. Wins over any keyword rule, which
   matters for identifiers that share vocabulary with another kind
   (a JavaScript "move module" is a method-level move, not a class move).
3. Tier 2: walk `CLASSIFIER_RULES` in order; the first predicate that holds
   decides the kind. More specific keyword combinations come first.

Returns None for anything unrecognized. Never raises.

Usage
-----
    from refactor_rpg.modules.detection.classifier import classify

    classify("refactoring.extractMethod")   # RefactoringKind.EXTRACT_METHOD
    classify("unknown.refactoring")          # None
"""

from __future__ import annotations

import re
from typing import Callable, NamedTuple, Optional

from refactor_rpg.domain.models.refactoring import RefactoringKind

_SEPARATORS = re.compile(r"[\s._\-]+")

# Substrings that make an unrecognized id worth a WARNING instead of DEBUG.
SUSPICIOUS_KEYWORDS = ("extract", "refactor", "inline", "introduce", "rename")


def normalize_id(raw_id: str) -> str:
    """
    Lowercase and strip separators.

    Example:
        >>> normalize_id("refactoring.extract-Method")
        'refactoringextractmethod'
    """
    return _SEPARATORS.sub("", raw_id.lower())


# ============================================================================
# TIER 1: EXACT IDENTIFIERS (keys are normalized)
# ============================================================================

EXACT_IDS: dict[str, RefactoringKind] = {
    "extractmethod": RefactoringKind.EXTRACT_METHOD,
    "extractfunction": RefactoringKind.EXTRACT_METHOD,
    "introducemethod": RefactoringKind.EXTRACT_METHOD,
    "introducefunction": RefactoringKind.EXTRACT_METHOD,
    "introducevariable": RefactoringKind.EXTRACT_VARIABLE,
    "introduceconstant": RefactoringKind.EXTRACT_CONSTANT,
    "introduceproperty": RefactoringKind.EXTRACT_FIELD,
    "introducefield": RefactoringKind.EXTRACT_FIELD,
    "inline": RefactoringKind.INLINE_METHOD,
    "inlinefunction": RefactoringKind.INLINE_METHOD,
    "inlinevariable": RefactoringKind.INLINE_VARIABLE,
    "move": RefactoringKind.MOVE_METHOD,
    "refactoringjavascriptes6movemodule": RefactoringKind.MOVE_METHOD,
    "rename": RefactoringKind.RENAME,
    "renameelement": RefactoringKind.RENAME,
    "changesignature": RefactoringKind.CHANGE_SIGNATURE,
    "safedelete": RefactoringKind.SAFE_DELETE,
    "extractinterface": RefactoringKind.INTRODUCE_INTERFACE,
    "optimizeimports": RefactoringKind.OPTIMIZE_IMPORTS,
    "reformatcode": RefactoringKind.REFORMAT_CODE,
}


# ============================================================================
# TIER 2: ORDERED KEYWORD RULES
# ============================================================================

Predicate = Callable[[str], bool]


class ClassifierRule(NamedTuple):
    """One keyword rule. `name` is used in logs and tests."""

    name: str
    predicate: Predicate
    kind: RefactoringKind


def _all(*words: str) -> Predicate:
    return lambda text: all(word in text for word in words)


def _any(*words: str) -> Predicate:
    return lambda text: any(word in text for word in words)


def _both(left: Predicate, right: Predicate) -> Predicate:
    return lambda text: left(text) and right(text)


def _either(left: Predicate, right: Predicate) -> Predicate:
    return lambda text: left(text) or right(text)


def _mentions_move(text: str) -> bool:
    # "remove" contains "move"
    return "move" in text.replace("remove", "")


_METHOD_LIKE = _any("method", "function")

CLASSIFIER_RULES: tuple[ClassifierRule, ...] = (
    # Extract
    ClassifierRule(
        "extract-method",
        _both(_all("extract"), _METHOD_LIKE),
        RefactoringKind.EXTRACT_METHOD,
    ),
    ClassifierRule("extract-class", _all("extract", "class"), RefactoringKind.EXTRACT_CLASS),
    ClassifierRule(
        "extract-variable",
        _all("extract", "variable"),
        RefactoringKind.EXTRACT_VARIABLE,
    ),
    ClassifierRule(
        "extract-constant",
        _all("extract", "constant"),
        RefactoringKind.EXTRACT_CONSTANT,
    ),
    ClassifierRule(
        "extract-field",
        _both(_all("extract"), _any("field", "property")),
        RefactoringKind.EXTRACT_FIELD,
    ),
    # Inline
    ClassifierRule("inline-variable", _all("inline", "variable"), RefactoringKind.INLINE_VARIABLE),
    ClassifierRule(
        "inline-method",
        _both(_all("inline"), _METHOD_LIKE),
        RefactoringKind.INLINE_METHOD,
    ),
    # Move
    ClassifierRule("move-method", _both(_mentions_move, _METHOD_LIKE), RefactoringKind.MOVE_METHOD),
    ClassifierRule("move-class", _both(_mentions_move, _all("class")), RefactoringKind.MOVE_CLASS),
    # Signature
    ClassifierRule("rename", _all("rename"), RefactoringKind.RENAME),
    ClassifierRule(
        "change-signature",
        _all("change", "signature"),
        RefactoringKind.CHANGE_SIGNATURE,
    ),
    ClassifierRule(
        "introduce-parameter-object",
        _all("introduce", "parameter", "object"),
        RefactoringKind.INTRODUCE_PARAMETER_OBJECT,
    ),
    ClassifierRule(
        "remove-parameter",
        _all("remove", "parameter"),
        RefactoringKind.REMOVE_PARAMETER,
    ),
    # Hierarchy
    ClassifierRule("pull-up", _all("pullup"), RefactoringKind.PULL_UP),
    ClassifierRule("push-down", _all("pushdown"), RefactoringKind.PUSH_DOWN),
    # Logic
    ClassifierRule(
        "replace-conditional-with-polymorphism",
        _all("replace", "conditional", "polymorphism"),
        RefactoringKind.REPLACE_CONDITIONAL_WITH_POLYMORPHISM,
    ),
    ClassifierRule(
        "decompose-conditional",
        _all("decompose", "conditional"),
        RefactoringKind.DECOMPOSE_CONDITIONAL,
    ),
    ClassifierRule(
        "consolidate-conditionals",
        _all("consolidate", "conditional"),
        RefactoringKind.CONSOLIDATE_CONDITIONALS,
    ),
    ClassifierRule(
        "simplify-boolean",
        _all("simplify", "boolean"),
        RefactoringKind.SIMPLIFY_BOOLEAN,
    ),
    ClassifierRule(
        "simplify-expression",
        _all("simplify", "expression"),
        RefactoringKind.SIMPLIFY_EXPRESSION,
    ),
    # Deletion
    ClassifierRule("safe-delete", _all("safedelete"), RefactoringKind.SAFE_DELETE),
    ClassifierRule(
        "remove-dead-code",
        _either(_all("remove", "dead"), _all("deadcode")),
        RefactoringKind.REMOVE_DEAD_CODE,
    ),
    ClassifierRule("remove-unused", _all("remove", "unused"), RefactoringKind.REMOVE_UNUSED),
    # Data
    ClassifierRule(
        "encapsulate-field",
        _both(_all("encapsulate"), _any("field", "property")),
        RefactoringKind.ENCAPSULATE_FIELD,
    ),
    ClassifierRule(
        "replace-data-class",
        _all("replace", "data", "class"),
        RefactoringKind.REPLACE_DATA_CLASS_WITH_OBJECT,
    ),
    ClassifierRule(
        "remove-setting-method",
        _both(_all("remove", "setting"), _any("method", "property")),
        RefactoringKind.REMOVE_SETTING_METHOD,
    ),
    ClassifierRule(
        "introduce-value-object",
        _all("introduce", "value", "object"),
        RefactoringKind.INTRODUCE_VALUE_OBJECT,
    ),
    # Coupling
    ClassifierRule(
        "introduce-interface",
        _both(_any("extract", "introduce"), _all("interface")),
        RefactoringKind.INTRODUCE_INTERFACE,
    ),
    ClassifierRule(
        "dependency-inversion",
        _all("dependency", "inversion"),
        RefactoringKind.DEPENDENCY_INVERSION,
    ),
    ClassifierRule(
        "replace-inheritance-with-delegation",
        _all("replace", "inheritance", "delegation"),
        RefactoringKind.REPLACE_INHERITANCE_WITH_DELEGATION,
    ),
    ClassifierRule(
        "break-cyclic-dependency",
        _both(_all("break"), _any("cyclic", "cycle")),
        RefactoringKind.BREAK_CYCLIC_DEPENDENCY,
    ),
    # Modernization and cleanup
    ClassifierRule(
        "convert-to-stream",
        _all("convert", "stream"),
        RefactoringKind.CONVERT_TO_STREAM,
    ),
    ClassifierRule(
        "optimize-imports",
        _all("optimize", "import"),
        RefactoringKind.OPTIMIZE_IMPORTS,
    ),
    ClassifierRule("reformat-code", _all("reformat", "code"), RefactoringKind.REFORMAT_CODE),
)


# ============================================================================
# PUBLIC API
# ============================================================================


def match_rule(normalized_id: str) -> Optional[ClassifierRule]:
    """First tier-2 rule whose predicate holds, or None."""
    for rule in CLASSIFIER_RULES:
        if rule.predicate(normalized_id):
            return rule
    return None


def classify(raw_id: Optional[str]) -> Optional[RefactoringKind]:
    """
    Classify a raw detection identifier.

    Args:
        raw_id: Identifier as reported by a detection source

    Returns:
        The matching RefactoringKind, or None when unrecognized

    Example:
        >>> classify("refactoring.javascript.es6.moveModule")
        <RefactoringKind.MOVE_METHOD: ...>
    """
    if not raw_id:
        return None

    normalized = normalize_id(raw_id)
    if not normalized:
        return None

    exact = EXACT_IDS.get(normalized)
    if exact is not None:
        return exact

    rule = match_rule(normalized)
    return rule.kind if rule else None


def looks_like_refactoring(raw_id: Optional[str]) -> bool:
    """True when an unrecognized id still mentions refactoring vocabulary."""
    if not raw_id:
        return False
    normalized = normalize_id(raw_id)
    return any(keyword in normalized for keyword in SUSPICIOUS_KEYWORDS)
