from __future__ import annotations

from typing import Any, Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class NotFoundError(DomainError):
    """Raised when a referenced record or employee does not exist (or is soft-deleted)."""


class ValidationError(DomainError):
    """Raised when input data is structurally invalid for the workflow."""


class ConflictError(DomainError):
    """Raised when a uniqueness or overlap invariant would be violated."""

    def __init__(self, message: str, *, conflicts: Optional[Sequence[Any]] = None):
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class StateError(DomainError):
    """Raised when an operation is not allowed from the record's current lifecycle state."""

    def __init__(self, message: str, *, current: Any = None):
        super().__init__(message)
        self.current = current
