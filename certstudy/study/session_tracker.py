"""
Study session tracking.

A session groups the confidence ratings a learner gives in one sitting.
Ending a session stores its duration and average confidence and rolls the
learner's lifetime stats forward:

- total cards studied and total study time accumulate
- the day streak continues when the previous active day was yesterday (UTC),
  restarts at 1 when it was earlier or never, and stays put on the same day
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from certstudy.core.clock import as_utc, utc_now
from certstudy.core.errors import NotFoundError, ValidationError
from certstudy.core.mastery import validate_confidence_level
from certstudy.db.models import LearnerStats, SessionCard, StudySession


def next_streak(current: int, last_active: datetime | None, now: datetime) -> int:
    """Day streak after activity at ``now``."""
    if last_active is None or current <= 0:
        return 1
    last_day: date = as_utc(last_active).date()
    today: date = as_utc(now).date()
    if last_day == today:
        return current
    if last_day == today - timedelta(days=1):
        return current + 1
    return 1


def average_confidence(ratings: Sequence[int]) -> float:
    """Mean rating rounded to two decimals; 0.0 for an empty session."""
    if not ratings:
        return 0.0
    return round(sum(ratings) / len(ratings), 2)


@dataclass
class StudySessionRecord:
    """A started study session."""

    session_id: UUID
    learner_id: str
    deck_id: UUID | None
    started_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": str(self.session_id),
            "learnerId": self.learner_id,
            "deckId": str(self.deck_id) if self.deck_id else None,
            "startedAt": self.started_at.isoformat(),
        }


@dataclass
class SessionSummary:
    """Outcome of an ended study session."""

    session_id: UUID
    cards_studied: int
    study_duration: int
    average_confidence: float
    study_streak_days: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": str(self.session_id),
            "cardsStudied": self.cards_studied,
            "studyDuration": self.study_duration,
            "averageConfidence": self.average_confidence,
            "studyStreakDays": self.study_streak_days,
        }


@dataclass
class LearnerStatsSummary:
    """Lifetime study totals; zeros for a learner who never ended a session."""

    learner_id: str
    total_cards_studied: int = 0
    total_study_time: int = 0
    study_streak_days: int = 0
    last_active_date: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "learnerId": self.learner_id,
            "totalCardsStudied": self.total_cards_studied,
            "totalStudyTime": self.total_study_time,
            "studyStreakDays": self.study_streak_days,
            "lastActiveDate": self.last_active_date.isoformat() if self.last_active_date else None,
        }


class StudySessionTracker:
    """Creates, fills and closes StudySession rows."""

    def __init__(self, session: Session, clock: Callable[[], datetime] = utc_now):
        self.session = session
        self.clock = clock

    def start_session(self, learner_id: str, deck_id: UUID | None = None) -> StudySessionRecord:
        row = StudySession(learner_id=learner_id, deck_id=deck_id, started_at=self.clock())
        self.session.add(row)
        self.session.flush()
        logger.info(f"Study session {row.id} started for learner={learner_id}")
        return StudySessionRecord(
            session_id=row.id,
            learner_id=learner_id,
            deck_id=deck_id,
            started_at=as_utc(row.started_at),
        )

    def record_session_card(
        self,
        learner_id: str,
        session_id: UUID,
        card_id: UUID,
        level: int,
        response_time: int | None = None,
    ) -> None:
        """
        Attach one rating to an open session.

        Raises:
            ValidationError: level outside 1..5, negative response_time, or
                the session already ended
            NotFoundError: no such session for this learner
        """
        validate_confidence_level(level)
        if response_time is not None and (
            isinstance(response_time, bool) or not isinstance(response_time, int) or response_time < 0
        ):
            raise ValidationError(
                f"response_time must be a non-negative integer, got {response_time!r}",
                field="response_time",
                value=response_time,
            )
        row = self._get_owned_session(learner_id, session_id)
        if row.ended_at is not None:
            raise ValidationError(f"session {session_id} has already ended", field="session_id")
        self.session.add(
            SessionCard(
                session_id=row.id,
                flashcard_id=card_id,
                confidence_rating=level,
                response_time=response_time,
            )
        )
        self.session.flush()

    def end_session(self, learner_id: str, session_id: UUID, cards_studied: int) -> SessionSummary:
        """
        Close a session and update the learner's stats.

        Raises:
            ValidationError: negative cards_studied, or the session already ended
            NotFoundError: no such session for this learner
        """
        if isinstance(cards_studied, bool) or not isinstance(cards_studied, int) or cards_studied < 0:
            raise ValidationError(
                f"cards_studied must be a non-negative integer, got {cards_studied!r}",
                field="cards_studied",
                value=cards_studied,
            )
        row = self._get_owned_session(learner_id, session_id)
        if row.ended_at is not None:
            raise ValidationError(f"session {session_id} has already ended", field="session_id")

        now = self.clock()
        duration = max(0, int((now - as_utc(row.started_at)).total_seconds()))
        ratings = self.session.scalars(
            select(SessionCard.confidence_rating).where(SessionCard.session_id == row.id)
        ).all()

        row.ended_at = now
        row.cards_studied = cards_studied
        row.study_duration = duration
        row.average_confidence = average_confidence(ratings)

        stats = self.session.scalars(
            select(LearnerStats).where(LearnerStats.learner_id == learner_id).with_for_update()
        ).one_or_none()
        if stats is None:
            stats = LearnerStats(
                learner_id=learner_id,
                total_cards_studied=0,
                total_study_time=0,
                study_streak_days=0,
            )
            self.session.add(stats)
        stats.total_cards_studied = (stats.total_cards_studied or 0) + cards_studied
        stats.total_study_time = (stats.total_study_time or 0) + duration
        stats.study_streak_days = next_streak(stats.study_streak_days or 0, stats.last_active_date, now)
        stats.last_active_date = now
        self.session.flush()

        logger.info(
            f"Study session {row.id} ended: {cards_studied} cards in {duration}s, "
            f"streak {stats.study_streak_days}d"
        )
        return SessionSummary(
            session_id=row.id,
            cards_studied=cards_studied,
            study_duration=duration,
            average_confidence=row.average_confidence,
            study_streak_days=stats.study_streak_days,
        )

    def get_learner_stats(self, learner_id: str) -> LearnerStatsSummary:
        stats = self.session.scalars(
            select(LearnerStats).where(LearnerStats.learner_id == learner_id)
        ).one_or_none()
        if stats is None:
            return LearnerStatsSummary(learner_id=learner_id)
        return LearnerStatsSummary(
            learner_id=learner_id,
            total_cards_studied=stats.total_cards_studied or 0,
            total_study_time=stats.total_study_time or 0,
            study_streak_days=stats.study_streak_days or 0,
            last_active_date=as_utc(stats.last_active_date),
        )

    def _get_owned_session(self, learner_id: str, session_id: UUID) -> StudySession:
        row = self.session.get(StudySession, session_id)
        if row is None or row.learner_id != learner_id:
            raise NotFoundError("Study session", session_id)
        return row
