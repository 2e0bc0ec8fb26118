"""
Core Mastery Module.

Provides the mastery classification rules shared by the trackers, the
selector and the progress displays.

Design:
- MasteryStatus: coarse new / learning / mastered classification
- QuizMasteryThresholds: percentage cut-offs for quiz-derived mastery
- classify_quiz_mastery: average/best -> MasteryStatus
- classify_confidence_mastery: confidence rating -> MasteryStatus
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from certstudy.core.errors import ValidationError

MIN_CONFIDENCE = 1
MAX_CONFIDENCE = 5


class MasteryStatus(str, Enum):
    """Coarse mastery classification stored on progress rows."""

    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"

    @classmethod
    def from_quiz_scores(
        cls,
        average: float,
        best: float,
        thresholds: QuizMasteryThresholds | None = None,
    ) -> MasteryStatus:
        """Classify from cumulative average and best session score (0-100)."""
        return classify_quiz_mastery(average, best, thresholds)

    @classmethod
    def from_confidence(cls, level: int) -> MasteryStatus:
        """Classify from a 1-5 confidence rating."""
        return classify_confidence_mastery(level)

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def emoji(self) -> str:
        """Status glyph for CLI display."""
        return {
            MasteryStatus.NEW: "○",
            MasteryStatus.LEARNING: "◑",
            MasteryStatus.MASTERED: "●",
        }[self]

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryStatus.NEW: "dim",
            MasteryStatus.LEARNING: "yellow",
            MasteryStatus.MASTERED: "green",
        }[self]


@dataclass(frozen=True)
class QuizMasteryThresholds:
    """
    Percentage thresholds for quiz-derived mastery.

    ``mastered`` needs both the average and the best score cut-offs;
    ``learning`` needs either of its two.
    """

    mastered_average: float = 80.0
    mastered_best: float = 90.0
    learning_average: float = 60.0
    learning_best: float = 70.0


DEFAULT_QUIZ_THRESHOLDS = QuizMasteryThresholds()


def classify_quiz_mastery(
    average: float,
    best: float,
    thresholds: QuizMasteryThresholds | None = None,
) -> MasteryStatus:
    """
    Classify quiz mastery from cumulative average and best score.

    Mastered is checked first and needs both conditions, then learning needs
    either one. average=85, best=85 is therefore ``learning``.

    Args:
        average: Cumulative average score (0-100)
        best: Best single-session score (0-100)
        thresholds: Override cut-offs (defaults 80/90 and 60/70)

    Returns:
        Corresponding MasteryStatus
    """
    t = thresholds or DEFAULT_QUIZ_THRESHOLDS
    if average >= t.mastered_average and best >= t.mastered_best:
        return MasteryStatus.MASTERED
    if average >= t.learning_average or best >= t.learning_best:
        return MasteryStatus.LEARNING
    return MasteryStatus.NEW


def classify_confidence_mastery(level: int) -> MasteryStatus:
    """Map a confidence rating to a card status: 4-5 mastered, 3 learning, else new."""
    if level >= 4:
        return MasteryStatus.MASTERED
    if level >= 3:
        return MasteryStatus.LEARNING
    return MasteryStatus.NEW


def validate_confidence_level(level: object) -> int:
    """
    Check that a confidence rating is an integer in 1..5.

    Raises:
        ValidationError: for booleans, non-integers and out-of-range values
    """
    if isinstance(level, bool) or not isinstance(level, int):
        raise ValidationError(
            f"confidence level must be an integer, got {level!r}",
            field="confidence_level",
            value=level,
        )
    if not MIN_CONFIDENCE <= level <= MAX_CONFIDENCE:
        raise ValidationError(
            f"confidence level must be between {MIN_CONFIDENCE} and {MAX_CONFIDENCE}, got {level}",
            field="confidence_level",
            value=level,
        )
    return level
