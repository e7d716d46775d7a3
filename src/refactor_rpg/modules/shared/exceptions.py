"""
Domain exceptions for RefactorRPG.

Purpose
-------
Define the structured exception hierarchy raised by services when a caller
violates a business rule at the API boundary (negative XP award, quest with
an unknown objective matcher, duplicate quest id, ...).

Design Notes
------------
- All domain exceptions inherit from `RefactorRPGDomainException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict-like)
  - `error_code`: short, stable identifier for programmatic use
- Expected outcomes (unrecognized id, duplicate detection) are NOT
  exceptions; they are logged and returned as results.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RefactorRPGDomainException(Exception):
    """
    Base exception for all RefactorRPG domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error (dict-like)
        error_code: Optional code for programmatic handling

    Example:
        >>> raise RefactorRPGDomainException(
        ...     "Quest rejected",
        ...     {"quest_id": "first-steps"}
        ... )
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}"
            ")"
        )


class NotFoundError(RefactorRPGDomainException):
    """
    Raised when a requested resource does not exist.

    Args:
        resource_type: Kind of resource (e.g. "quest")
        identifier: The identifier that was looked up
    """

    def __init__(self, resource_type: str, identifier: Any) -> None:
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(
            f"{resource_type} not found: {identifier}",
            details={"resource_type": resource_type, "identifier": identifier},
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class ValidationError(RefactorRPGDomainException):
    """
    Raised when a caller-supplied value fails domain validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={"field": field, "validation_message": message},
            error_code=f"VALIDATION_{field.upper()}",
        )


class InvalidOperationError(RefactorRPGDomainException):
    """
    Raised when an operation is not allowed in the current state.

    Args:
        action: Description of the invalid action
        reason: Explanation of why it's not allowed

    Example:
        >>> raise InvalidOperationError(
        ...     "add_quest",
        ...     "quest 'first-steps' is already registered"
        ... )
    """

    def __init__(self, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Invalid operation '{action}': {reason}",
            details={"action": action, "reason": reason},
            error_code=f"INVALID_{action.upper()}",
        )


class SnapshotError(RefactorRPGDomainException):
    """
    Raised for a single malformed persisted record.

    Restore paths catch this per record, log a warning and keep going; it
    never aborts a whole load.

    Args:
        record_type: "action" or "quest"
        reason: Why the record was rejected
        record: The offending raw record, for diagnostics
    """

    def __init__(self, record_type: str, reason: str, record: Any = None) -> None:
        self.record_type = record_type
        self.reason = reason
        super().__init__(
            f"Malformed {record_type} record: {reason}",
            details={"record_type": record_type, "reason": reason, "record": record},
            error_code=f"SNAPSHOT_{record_type.upper()}",
        )

