"""
Study Modes

Defines the closed set of study modes the card selector dispatches on:
1. Progressive - adaptive resurfacing of new, weak and due cards
2. Random - every card once, uniformly shuffled
3. All - the pool in its stored order

Free-form input (query strings, CLI options) is mapped onto this enum at the
boundary with ``StudyMode.parse``; the selector itself only sees members.
"""

from __future__ import annotations

from enum import Enum

from certstudy.core.errors import ValidationError


class StudyMode(str, Enum):
    """Card selection policy for a study session."""

    PROGRESSIVE = "progressive"
    RANDOM = "random"
    ALL = "all"

    @classmethod
    def parse(
        cls,
        value: str | StudyMode | None,
        default: StudyMode | str = "progressive",
    ) -> StudyMode:
        """
        Parse a user-supplied mode name.

        Args:
            value: Raw mode name (case-insensitive) or None
            default: Mode used when value is None or blank

        Returns:
            The matching StudyMode; unrecognized names map to ALL
        """
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            return cls(default)
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.ALL


class QuizTargetKind(str, Enum):
    """What a completed quiz was about."""

    CARD = "card"
    DECK = "deck"

    @classmethod
    def parse(cls, value: str | QuizTargetKind) -> QuizTargetKind:
        """Accept 'card' or 'deck', plus 'flashcard' as used by quiz clients."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized == "flashcard":
            return cls.CARD
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationError(
                f"quiz target kind must be card or deck, got {value!r}",
                field="target_kind",
                value=value,
            ) from None
