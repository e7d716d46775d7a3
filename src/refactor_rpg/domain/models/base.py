"""
Base domain validation for RefactorRPG.

Purpose
-------
Provide the validation error and small guard helpers used by value objects
to reject invalid states at construction time.

Non-Responsibilities
--------------------
- Persistence (snapshots are produced by services)
- Service orchestration (handled by the service layer)

Design Notes
------------
Domain objects are frozen dataclasses. Invariants are checked in
`__post_init__`, so an instance that exists is always valid; state
changes return new instances.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


class DomainValidationError(Exception):
    """
    Exception raised when domain model validation fails.

    This is the base exception for all business rule violations
    in domain models.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize validation error.

        Parameters
        ----------
        message : str
            Human-readable error message
        field : Optional[str]
            Field name that failed validation (if applicable)
        """
        super().__init__(message)
        self.field = field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)


def to_epoch_millis(moment: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds (floored)."""
    return (moment - _EPOCH) // _ONE_MILLISECOND


def from_epoch_millis(millis: int) -> datetime:
    """Inverse of `to_epoch_millis`, always UTC."""
    return _EPOCH + timedelta(milliseconds=millis)


def validate_positive(value: int, field_name: str) -> None:
    """
    Validate that a value is positive.

    Raises
    ------
    DomainValidationError
        If value is not positive
    """
    if value <= 0:
        raise DomainValidationError(
            f"{field_name} must be positive, got {value}",
            field=field_name,
        )


def validate_non_negative(value: int, field_name: str) -> None:
    """
    Validate that a value is non-negative.

    Raises
    ------
    DomainValidationError
        If value is negative
    """
    if value < 0:
        raise DomainValidationError(
            f"{field_name} must be non-negative, got {value}",
            field=field_name,
        )


def validate_not_empty(value: str, field_name: str) -> None:
    """
    Validate that a string is not empty.

    Raises
    ------
    DomainValidationError
        If value is empty or whitespace-only
    """
    if not value or not value.strip():
        raise DomainValidationError(
            f"{field_name} cannot be empty",
            field=field_name,
        )
