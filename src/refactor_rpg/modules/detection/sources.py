"""
Detection source adapters.

Each editor event subsystem reports refactorings in its own shape. These
adapters translate those shapes into a single `RawDetection` message and hand
it to a sink (normally `DetectionCoordinator.submit`), so the core never
knows how many sources exist.

Sources
-------
- RefactoringEventSource: structured "refactoring done" events, optional
  element text and file name; also relays undo.
- ActionEventSource: generic editor action ids. Skips files whose language
  the structured source already covers, leaving only the gaps to fill.
- CommandEventSource: finished command names; no file information.

Overlap between sources is expected; the DeduplicationGate absorbs it.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Protocol

from refactor_rpg.core.logging.logger import get_logger
from refactor_rpg.domain.models.refactoring import ELEMENT_HINT_MAX_LENGTH

logger = get_logger(__name__)

NATIVELY_SUPPORTED_LANGUAGES = frozenset(
    {"JAVA", "JavaScript", "TypeScript", "Python", "PHP", "Ruby", "Go", "HTML", "CSS", "XML"}
)

NATIVELY_SUPPORTED_EXTENSIONS = frozenset(
    {
        "java",
        "js", "jsx", "ts", "tsx",
        "py",
        "php",
        "rb",
        "go",
        "html", "htm",
        "css", "scss", "sass",
        "xml",
    }
)


@dataclass(frozen=True, slots=True)
class RawDetection:
    """
    One raw report from a detection source, before classification.

    `timestamp` None means "stamp on arrival".
    """

    raw_id: str
    source: str
    origin_file: Optional[str] = None
    element_hint: Optional[str] = None
    timestamp: Optional[datetime] = None


class DetectionSink(Protocol):
    def submit(self, detection: RawDetection) -> Any: ...

    def handle_undo(self, raw_id: str, source: Optional[str] = None) -> None: ...


def _truncate(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return text[:ELEMENT_HINT_MAX_LENGTH]


class RefactoringEventSource:
    """Adapter for structured refactoring lifecycle events."""

    name = "refactoring_event"

    def __init__(self, sink: DetectionSink) -> None:
        self._sink = sink

    def refactoring_started(self, refactoring_id: str) -> None:
        logger.debug("Refactoring started", extra={"raw_id": refactoring_id})

    def refactoring_done(
        self,
        refactoring_id: str,
        element_text: Optional[str] = None,
        file_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Any:
        logger.debug("Refactoring done", extra={"raw_id": refactoring_id})
        return self._sink.submit(
            RawDetection(
                raw_id=refactoring_id,
                source=self.name,
                origin_file=file_name,
                element_hint=_truncate(element_text),
                timestamp=now,
            )
        )

    def undo_refactoring(self, refactoring_id: str) -> None:
        self._sink.handle_undo(refactoring_id, source=self.name)


class ActionEventSource:
    """
    Adapter for generic editor actions.

    Actions on files in natively supported languages are ignored: the
    structured source reports those with richer data.
    """

    name = "action_event"

    def __init__(self, sink: DetectionSink) -> None:
        self._sink = sink

    @staticmethod
    def is_natively_supported(
        file_name: Optional[str] = None,
        file_extension: Optional[str] = None,
        language: Optional[str] = None,
    ) -> bool:
        if file_extension is None and file_name:
            file_extension = posixpath.splitext(file_name)[1].lstrip(".") or None
        if file_extension is not None and file_extension in NATIVELY_SUPPORTED_EXTENSIONS:
            return True
        return language is not None and language in NATIVELY_SUPPORTED_LANGUAGES

    def action_performed(
        self,
        action_id: Optional[str],
        file_name: Optional[str] = None,
        file_extension: Optional[str] = None,
        language: Optional[str] = None,
        element_text: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Any:
        """
        Returns:
            The sink's result, or None when the action was skipped
        """
        if not action_id:
            return None

        if self.is_natively_supported(file_name, file_extension, language):
            logger.debug(
                "Skipping action for natively supported file",
                extra={
                    "raw_id": action_id,
                    "file_extension": file_extension,
                    "language": language,
                },
            )
            return None

        return self._sink.submit(
            RawDetection(
                raw_id=action_id,
                source=self.name,
                origin_file=file_name,
                element_hint=_truncate(element_text),
                timestamp=now,
            )
        )


class CommandEventSource:
    """Adapter for finished editor commands. Commands carry no file."""

    name = "command"

    def __init__(self, sink: DetectionSink) -> None:
        self._sink = sink

    def command_finished(self, command_name: Optional[str], now: Optional[datetime] = None) -> Any:
        if not command_name:
            return None
        return self._sink.submit(
            RawDetection(raw_id=command_name, source=self.name, timestamp=now)
        )
