"""
Domain models for the study engine.

These are plain dataclasses passed between storage, the trackers and the
selector. Optional fields are ``X | None``: ``None`` always means "never
happened" (never rated, never seen, no review due), never a sentinel number.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from certstudy.core.clock import as_utc
from certstudy.core.errors import ValidationError
from certstudy.core.mastery import MasteryStatus
from certstudy.core.modes import QuizTargetKind


@dataclass(frozen=True)
class Card:
    """A published flashcard as seen by the selector (read-only)."""

    id: UUID
    deck_id: UUID
    question: str
    answer: str
    is_published: bool = True
    position: int = 0
    deck_name: str | None = None
    class_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": str(self.id),
            "deckId": str(self.deck_id),
            "question": self.question,
            "answer": self.answer,
            "order": self.position,
            "deckName": self.deck_name,
            "className": self.class_name,
        }


@dataclass
class CardMasterySnapshot:
    """Per (learner, card) mastery state fed to the selector."""

    learner_id: str
    card_id: UUID
    confidence_level: int | None = None
    last_seen: datetime | None = None
    next_review_due: datetime | None = None
    times_seen: int = 0
    mastery_status: MasteryStatus = MasteryStatus.NEW

    @property
    def is_rated(self) -> bool:
        """True once the learner has given a confidence rating."""
        return self.confidence_level is not None

    def is_due(self, now: datetime) -> bool:
        """True when a review due date exists and has passed."""
        due = as_utc(self.next_review_due)
        return due is not None and due <= as_utc(now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "learnerId": self.learner_id,
            "flashcardId": str(self.card_id),
            "confidenceLevel": self.confidence_level,
            "timesSeen": self.times_seen,
            "lastSeen": self.last_seen.isoformat() if self.last_seen else None,
            "nextReviewDate": self.next_review_due.isoformat() if self.next_review_due else None,
            "masteryStatus": self.mastery_status.value,
        }


@dataclass
class QuizProgressAggregate:
    """
    Rolling quiz statistics for one learner and one card or deck.

    ``average_score`` is always derived from the two counters. Card targets
    carry ``mastery_status``; deck targets carry ``mastery_percentage``.
    """

    learner_id: str
    target_id: UUID
    target_kind: QuizTargetKind
    times_taken: int = 0
    total_questions_answered: int = 0
    total_correct_answers: int = 0
    average_score: float | None = None
    best_score: float | None = None
    last_score: float | None = None
    last_taken: datetime | None = None
    mastery_status: MasteryStatus | None = None
    mastery_percentage: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "learnerId": self.learner_id,
            "targetId": str(self.target_id),
            "targetKind": self.target_kind.value,
            "timesTaken": self.times_taken,
            "totalQuestionsAnswered": self.total_questions_answered,
            "totalCorrectAnswers": self.total_correct_answers,
            "averageScore": self.average_score,
            "bestScore": self.best_score,
            "lastScore": self.last_score,
            "lastTaken": self.last_taken.isoformat() if self.last_taken else None,
            "masteryStatus": self.mastery_status.value if self.mastery_status else None,
            "masteryPercentage": self.mastery_percentage,
        }


@dataclass(frozen=True)
class StudyScope:
    """
    What a study session covers: one class (optionally a subset of its decks)
    or one deck.
    """

    class_id: UUID | None = None
    deck_id: UUID | None = None
    deck_ids: tuple[UUID, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if (self.class_id is None) == (self.deck_id is None):
            raise ValidationError("study scope needs exactly one of class_id or deck_id", field="scope")
        if self.deck_id is not None and self.deck_ids:
            raise ValidationError("deck subsets only apply to class scopes", field="deck_ids")

    @classmethod
    def for_class(cls, class_id: UUID, deck_ids: list[UUID] | None = None) -> StudyScope:
        return cls(class_id=class_id, deck_ids=tuple(deck_ids or ()))

    @classmethod
    def for_deck(cls, deck_id: UUID) -> StudyScope:
        return cls(deck_id=deck_id)
