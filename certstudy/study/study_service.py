"""
Study service: the single entry point used by the API and CLI.

Wires the content repository and progress store to the selector, the
mastery tracker, the quiz aggregator and the session tracker for one
database session (one unit of work).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from loguru import logger
from sqlalchemy.orm import Session

from certstudy.config import Settings, get_settings
from certstudy.core.clock import utc_now
from certstudy.core.mastery import validate_confidence_level
from certstudy.core.models import Card, CardMasterySnapshot, QuizProgressAggregate, StudyScope
from certstudy.core.modes import QuizTargetKind, StudyMode
from certstudy.db.repositories import ContentRepository, SqlProgressStore
from certstudy.study.mastery_tracker import MasteryTracker
from certstudy.study.progress import (
    ClassProgressSummary,
    DeckProgressSummary,
    summarize_class_progress,
    summarize_deck_progress,
)
from certstudy.study.quiz_aggregator import QuizAggregator, validate_quiz_result
from certstudy.study.review_schedule import next_review_due_for
from certstudy.study.selector import CardSelector
from certstudy.study.session_tracker import (
    LearnerStatsSummary,
    SessionSummary,
    StudySessionRecord,
    StudySessionTracker,
)


@dataclass
class StudySelection:
    """Ordered cards for one study session plus display metadata."""

    mode: StudyMode
    scope_name: str
    total_cards: int
    cards: list[Card] = field(default_factory=list)

    @property
    def study_cards_count(self) -> int:
        return len(self.cards)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "scopeName": self.scope_name,
            "totalCards": self.total_cards,
            "studyCardsCount": self.study_cards_count,
            "cards": [card.to_dict() for card in self.cards],
        }


class StudyService:
    """Study operations for one database session."""

    def __init__(
        self,
        session: Session,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.clock = clock

        self.content = ContentRepository(session)
        self.store = SqlProgressStore(session, max_retries=self.settings.upsert_max_retries)
        self.selector = CardSelector(
            confidence_threshold=self.settings.progressive_confidence_threshold,
            clock=clock,
        )
        self.tracker = MasteryTracker(self.store, clock=clock)
        self.quizzes = QuizAggregator(
            self.store, thresholds=self.settings.get_quiz_thresholds(), clock=clock
        )
        self.sessions = StudySessionTracker(session, clock=clock)

    # ========================================
    # Card selection
    # ========================================

    def get_study_cards(
        self,
        learner_id: str,
        scope: StudyScope,
        mode: StudyMode | str | None = None,
    ) -> StudySelection:
        """
        Ordered study cards for a class or deck.

        A missing mode uses the configured default; an unknown one means ALL.

        Raises:
            NotFoundError: class or deck missing (or deck unpublished)
        """
        study_mode = StudyMode.parse(mode, default=self.settings.default_study_mode)

        if scope.class_id is not None:
            study_class, pool = self.content.load_class_pool(scope.class_id, scope.deck_ids)
            scope_name = study_class.name
        else:
            deck, pool = self.content.load_deck_pool(scope.deck_id)
            scope_name = deck.name

        snapshots = self.store.get_card_snapshots(learner_id, [card.id for card in pool])
        cards = self.selector.select(pool, snapshots, study_mode)

        logger.info(
            f"Selected {len(cards)}/{len(pool)} cards from {scope_name!r} "
            f"for learner={learner_id} ({study_mode.value})"
        )
        return StudySelection(
            mode=study_mode,
            scope_name=scope_name,
            total_cards=len(pool),
            cards=cards,
        )

    # ========================================
    # Confidence ratings
    # ========================================

    def rate_card(
        self,
        learner_id: str,
        card_id: UUID,
        level: int,
        session_id: UUID | None = None,
    ) -> CardMasterySnapshot:
        """
        Save a confidence rating, optionally inside a study session.

        Raises:
            ValidationError: level outside 1..5
            NotFoundError: unknown card (or session)
        """
        validate_confidence_level(level)
        self.content.get_card(card_id)

        next_review_due = None
        if self.settings.schedule_next_review:
            next_review_due = next_review_due_for(level, self.clock())

        snapshot = self.tracker.record_confidence_rating(
            learner_id, card_id, level, next_review_due=next_review_due
        )
        if session_id is not None:
            self.sessions.record_session_card(learner_id, session_id, card_id, level)
        return snapshot

    def get_card_progress(self, learner_id: str, card_id: UUID) -> CardMasterySnapshot | None:
        return self.store.get_card_snapshots(learner_id, [card_id]).get(card_id)

    # ========================================
    # Quizzes
    # ========================================

    def complete_quiz(
        self,
        learner_id: str,
        target_id: UUID,
        target_kind: QuizTargetKind | str,
        correct: int,
        total: int,
    ) -> QuizProgressAggregate:
        """
        Record a completed quiz for a card or deck.

        Raises:
            ValidationError: bad counts or target kind
            NotFoundError: unknown card or deck
        """
        kind = QuizTargetKind.parse(target_kind)
        validate_quiz_result(correct, total)
        if kind == QuizTargetKind.CARD:
            self.content.get_card(target_id)
        else:
            self.content.get_published_deck(target_id)
        return self.quizzes.aggregate(learner_id, target_id, kind, correct, total)

    # ========================================
    # Progress
    # ========================================

    def get_deck_progress(self, learner_id: str, deck_id: UUID) -> DeckProgressSummary:
        """
        Card status counts and quiz mastery for one deck.

        Raises:
            NotFoundError: deck missing or unpublished
        """
        _, cards = self.content.load_deck_pool(deck_id)
        snapshots = self.store.get_card_snapshots(learner_id, [card.id for card in cards])
        summary = summarize_deck_progress(deck_id, cards, snapshots)

        quiz = self.store.get_quiz_progress(learner_id, deck_id, QuizTargetKind.DECK)
        if quiz is not None:
            summary.quiz_mastery_percentage = quiz.mastery_percentage
        return summary

    def get_class_progress(self, learner_id: str, class_id: UUID) -> ClassProgressSummary:
        """
        Studied / mastered / learning counts for a class and each of its published decks.

        Raises:
            NotFoundError: class missing
        """
        study_class, cards = self.content.load_class_pool(class_id)
        decks = self.content.list_published_decks(class_id)
        snapshots = self.store.get_card_snapshots(learner_id, [card.id for card in cards])
        return summarize_class_progress(
            class_id,
            study_class.name,
            {deck.id: deck.name for deck in decks},
            cards,
            snapshots,
        )

    def get_learner_stats(self, learner_id: str) -> LearnerStatsSummary:
        return self.sessions.get_learner_stats(learner_id)

    # ========================================
    # Sessions
    # ========================================

    def start_session(self, learner_id: str, deck_id: UUID | None = None) -> StudySessionRecord:
        if deck_id is not None:
            self.content.get_published_deck(deck_id)
        return self.sessions.start_session(learner_id, deck_id)

    def record_session_card(
        self,
        learner_id: str,
        session_id: UUID,
        card_id: UUID,
        level: int,
        response_time: int | None = None,
    ) -> None:
        """
        Log a rating against an open session without touching card progress.

        Raises:
            ValidationError: level outside 1..5, negative response_time, or the session ended
            NotFoundError: unknown card, or no such session for this learner
        """
        validate_confidence_level(level)
        self.content.get_card(card_id)
        self.sessions.record_session_card(
            learner_id, session_id, card_id, level, response_time=response_time
        )

    def end_session(self, learner_id: str, session_id: UUID, cards_studied: int) -> SessionSummary:
        return self.sessions.end_session(learner_id, session_id, cards_studied)
