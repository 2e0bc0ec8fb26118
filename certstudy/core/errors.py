"""
Error taxonomy for the study engine.

- ValidationError: malformed input to a tracker or aggregator. Never clamped.
- NotFoundError: a requested class, deck, card or session does not exist.

Storage errors are not wrapped; they propagate from SQLAlchemy unchanged.
"""

from __future__ import annotations

from typing import Any


class StudyEngineError(Exception):
    """Base class for errors raised by the study engine."""


class ValidationError(StudyEngineError, ValueError):
    """Raised when an operation receives out-of-range input."""

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class NotFoundError(StudyEngineError, LookupError):
    """Raised when a requested scope or record does not exist."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier
