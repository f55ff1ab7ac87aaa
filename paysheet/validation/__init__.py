"""Payload validation package."""

from paysheet.validation.validator import (
    TransactionValidator,
    UserValidator,
    ValidationFailedError,
    ValidationIssue,
)

__all__ = [
    "TransactionValidator",
    "UserValidator",
    "ValidationFailedError",
    "ValidationIssue",
]
