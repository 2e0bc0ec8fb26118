"""
Learner progress models.

Implements:
- UserCardProgress: confidence snapshot per (learner, flashcard)
- UserQuizProgress: quiz aggregate per (learner, flashcard)
- DeckQuizProgress: quiz aggregate per (learner, deck)
- StudySession / SessionCard: rated cards within a study session
- LearnerStats: lifetime totals and day streak per learner

Each aggregate key carries a unique constraint so a racing first insert
fails loudly instead of producing a duplicate row.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Uuid as SaUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from certstudy.core.clock import utc_now
from certstudy.core.mastery import MasteryStatus
from .base import Base

MasteryStatusType = Enum(
    MasteryStatus,
    name="mastery_status",
    native_enum=False,
    length=16,
    values_callable=lambda statuses: [s.value for s in statuses],
)


class UserCardProgress(Base):
    """Confidence-rating state for one learner and one flashcard."""

    __tablename__ = "user_card_progress"

    id: Mapped[UUID] = mapped_column(SaUuid, primary_key=True, default=uuid4)
    learner_id: Mapped[str] = mapped_column(Text, nullable=False)
    flashcard_id: Mapped[UUID] = mapped_column(
        ForeignKey("flashcards.id", ondelete="CASCADE"), nullable=False
    )

    # NULL = never rated, 1-5 = learner rating
    confidence_level: Mapped[int | None] = mapped_column(Integer)
    times_seen: Mapped[int] = mapped_column(Integer, default=0)
    last_seen: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    next_review_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    mastery_status: Mapped[MasteryStatus] = mapped_column(
        MasteryStatusType, nullable=False, default=MasteryStatus.NEW
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        UniqueConstraint("learner_id", "flashcard_id", name="uq_card_progress_learner_flashcard"),
        CheckConstraint(
            "confidence_level IS NULL OR confidence_level BETWEEN 1 AND 5",
            name="ck_card_progress_confidence_range",
        ),
        Index("idx_user_card_progress_mastery", "learner_id", "mastery_status"),
    )

    def __repr__(self) -> str:
        return f"<UserCardProgress learner={self.learner_id} card={self.flashcard_id} confidence={self.confidence_level}>"


class _QuizAggregateColumns:
    """Columns shared by the card-level and deck-level quiz aggregates."""

    id: Mapped[UUID] = mapped_column(SaUuid, primary_key=True, default=uuid4)
    learner_id: Mapped[str] = mapped_column(Text, nullable=False)

    times_taken: Mapped[int] = mapped_column(Integer, default=0)
    total_questions_answered: Mapped[int] = mapped_column(Integer, default=0)
    total_correct_answers: Mapped[int] = mapped_column(Integer, default=0)

    # Percentages (0-100)
    average_score: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False))
    best_score: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False))
    last_score: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False))
    last_taken: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


class UserQuizProgress(_QuizAggregateColumns, Base):
    """Quiz aggregate for one learner and one flashcard."""

    __tablename__ = "user_quiz_progress"

    flashcard_id: Mapped[UUID] = mapped_column(
        ForeignKey("flashcards.id", ondelete="CASCADE"), nullable=False
    )
    mastery_status: Mapped[MasteryStatus] = mapped_column(
        MasteryStatusType, nullable=False, default=MasteryStatus.NEW
    )

    __table_args__ = (
        UniqueConstraint("learner_id", "flashcard_id", name="uq_quiz_progress_learner_flashcard"),
        CheckConstraint(
            "total_correct_answers <= total_questions_answered",
            name="ck_quiz_progress_correct_le_total",
        ),
    )


class DeckQuizProgress(_QuizAggregateColumns, Base):
    """Quiz aggregate for one learner and one deck."""

    __tablename__ = "deck_quiz_progress"

    deck_id: Mapped[UUID] = mapped_column(
        ForeignKey("decks.id", ondelete="CASCADE"), nullable=False
    )
    mastery_percentage: Mapped[float | None] = mapped_column(
        Numeric(5, 2, asdecimal=False), default=0
    )

    __table_args__ = (
        UniqueConstraint("learner_id", "deck_id", name="uq_deck_quiz_progress_learner_deck"),
        CheckConstraint(
            "total_correct_answers <= total_questions_answered",
            name="ck_deck_quiz_progress_correct_le_total",
        ),
    )


class StudySession(Base):
    """A bounded period in which a learner rates cards."""

    __tablename__ = "study_sessions"

    id: Mapped[UUID] = mapped_column(SaUuid, primary_key=True, default=uuid4)
    learner_id: Mapped[str] = mapped_column(Text, nullable=False)
    deck_id: Mapped[UUID | None] = mapped_column(ForeignKey("decks.id", ondelete="SET NULL"))

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cards_studied: Mapped[int] = mapped_column(Integer, default=0)
    average_confidence: Mapped[float | None] = mapped_column(Numeric(3, 2, asdecimal=False))
    study_duration: Mapped[int | None] = mapped_column(Integer)  # seconds

    cards: Mapped[list[SessionCard]] = relationship(
        back_populates="session", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_study_sessions_learner_deck", "learner_id", "deck_id"),
        Index("idx_study_sessions_learner_started", "learner_id", "started_at"),
    )


class SessionCard(Base):
    """One confidence rating given during a study session."""

    __tablename__ = "session_cards"

    id: Mapped[UUID] = mapped_column(SaUuid, primary_key=True, default=uuid4)
    session_id: Mapped[UUID] = mapped_column(
        ForeignKey("study_sessions.id", ondelete="CASCADE"), nullable=False
    )
    flashcard_id: Mapped[UUID] = mapped_column(
        ForeignKey("flashcards.id", ondelete="CASCADE"), nullable=False
    )
    confidence_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    response_time: Mapped[int | None] = mapped_column(Integer)  # seconds
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    session: Mapped[StudySession] = relationship(back_populates="cards")


class LearnerStats(Base):
    """Lifetime study totals for one learner."""

    __tablename__ = "learner_stats"

    id: Mapped[UUID] = mapped_column(SaUuid, primary_key=True, default=uuid4)
    learner_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    total_cards_studied: Mapped[int] = mapped_column(Integer, default=0)
    total_study_time: Mapped[int] = mapped_column(Integer, default=0)  # seconds
    study_streak_days: Mapped[int] = mapped_column(Integer, default=0)
    last_active_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )
