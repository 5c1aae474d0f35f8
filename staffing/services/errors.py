# staffing/services/errors.py
from __future__ import annotations

from uuid import UUID


class SchedulingError(Exception):
    """Base class for every error the scheduling core hands back to its caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Malformed input (e.g. end <= start). Never retried."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class ConflictError(SchedulingError):
    """The write would double-book the consultant. Never retried."""

    def __init__(self, message: str, *, conflicting_id: UUID | None = None):
        super().__init__(message)
        self.conflicting_id = conflicting_id


class NotFoundError(SchedulingError):
    pass


class ReferentialError(NotFoundError):
    """consultant_id / project_id points at a row that does not exist."""
    pass


class TransientStoreError(SchedulingError):
    """Lock contention, timeout or serialization failure. Safe to retry."""
    pass
