"""
Database access for the study engine.

- ContentRepository: resolves a study scope to its published card pool
- SqlProgressStore: ProgressStore backed by the progress tables

Pool and snapshot reads are single batched queries (no per-card lookups).
Progress writes lock the aggregate row (SELECT ... FOR UPDATE) inside a
SAVEPOINT; a racing first insert trips the unique constraint and the whole
read-modify-write is retried.
"""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from certstudy.core.clock import as_utc
from certstudy.core.errors import NotFoundError
from certstudy.core.models import Card, CardMasterySnapshot, QuizProgressAggregate
from certstudy.core.modes import QuizTargetKind
from certstudy.db.models import (
    Deck,
    DeckQuizProgress,
    Flashcard,
    StudyClass,
    UserCardProgress,
    UserQuizProgress,
)
from certstudy.study.store import CardUpdate, QuizUpdate


def _to_card(flashcard: Flashcard, deck: Deck, class_name: str | None) -> Card:
    return Card(
        id=flashcard.id,
        deck_id=flashcard.deck_id,
        question=flashcard.question,
        answer=flashcard.answer,
        is_published=flashcard.is_published,
        position=flashcard.position,
        deck_name=deck.name,
        class_name=class_name,
    )


class ContentRepository:
    """Read-only access to classes, decks and flashcards."""

    def __init__(self, session: Session):
        self.session = session

    def get_class(self, class_id: UUID) -> StudyClass:
        study_class = self.session.get(StudyClass, class_id)
        if study_class is None:
            raise NotFoundError("Class", class_id)
        return study_class

    def get_published_deck(self, deck_id: UUID) -> Deck:
        deck = self.session.get(Deck, deck_id)
        if deck is None or not deck.is_published:
            raise NotFoundError("Deck", deck_id)
        return deck

    def get_card(self, card_id: UUID) -> Flashcard:
        flashcard = self.session.get(Flashcard, card_id)
        if flashcard is None:
            raise NotFoundError("Flashcard", card_id)
        return flashcard

    def list_published_decks(self, class_id: UUID) -> list[Deck]:
        """Published decks of a class in display order (no existence check)."""
        stmt = (
            select(Deck)
            .where(Deck.class_id == class_id, Deck.is_published.is_(True))
            .order_by(Deck.position, Deck.name)
        )
        return list(self.session.scalars(stmt))

    def load_class_pool(
        self, class_id: UUID, deck_ids: Iterable[UUID] | None = None
    ) -> tuple[StudyClass, list[Card]]:
        """
        Published cards of the class's published decks.

        Args:
            class_id: Class UUID
            deck_ids: Optional subset of the class's decks

        Returns:
            (class, cards ordered by deck position then card position)

        Raises:
            NotFoundError: the class does not exist
        """
        study_class = self.get_class(class_id)

        stmt = (
            select(Flashcard, Deck)
            .join(Deck, Flashcard.deck_id == Deck.id)
            .where(
                Deck.class_id == class_id,
                Deck.is_published.is_(True),
                Flashcard.is_published.is_(True),
            )
            .order_by(Deck.position, Deck.name, Flashcard.position, Flashcard.created_at)
        )
        selected = list(deck_ids or [])
        if selected:
            stmt = stmt.where(Deck.id.in_(selected))

        cards = [_to_card(card, deck, study_class.name) for card, deck in self.session.execute(stmt)]
        return study_class, cards

    def load_deck_pool(self, deck_id: UUID) -> tuple[Deck, list[Card]]:
        """
        Published cards of one published deck.

        Raises:
            NotFoundError: the deck does not exist or is unpublished
        """
        deck = self.get_published_deck(deck_id)
        stmt = (
            select(Flashcard)
            .where(Flashcard.deck_id == deck_id, Flashcard.is_published.is_(True))
            .order_by(Flashcard.position, Flashcard.created_at)
        )
        class_name = deck.study_class.name if deck.study_class else None
        cards = [_to_card(card, deck, class_name) for card in self.session.scalars(stmt)]
        return deck, cards


def _card_snapshot(row: UserCardProgress) -> CardMasterySnapshot:
    return CardMasterySnapshot(
        learner_id=row.learner_id,
        card_id=row.flashcard_id,
        confidence_level=row.confidence_level,
        last_seen=as_utc(row.last_seen),
        next_review_due=as_utc(row.next_review_date),
        times_seen=row.times_seen or 0,
        mastery_status=row.mastery_status,
    )


def _quiz_aggregate(
    row: UserQuizProgress | DeckQuizProgress, target_kind: QuizTargetKind
) -> QuizProgressAggregate:
    if target_kind == QuizTargetKind.CARD:
        target_id, status, percentage = row.flashcard_id, row.mastery_status, None
    else:
        target_id, status, percentage = row.deck_id, None, row.mastery_percentage
    return QuizProgressAggregate(
        learner_id=row.learner_id,
        target_id=target_id,
        target_kind=target_kind,
        times_taken=row.times_taken or 0,
        total_questions_answered=row.total_questions_answered or 0,
        total_correct_answers=row.total_correct_answers or 0,
        average_score=row.average_score,
        best_score=row.best_score,
        last_score=row.last_score,
        last_taken=as_utc(row.last_taken),
        mastery_status=status,
        mastery_percentage=percentage,
    )


class SqlProgressStore:
    """ProgressStore over the user_card_progress and quiz progress tables."""

    def __init__(self, session: Session, max_retries: int = 3):
        self.session = session
        self.max_retries = max_retries

    # ----------------------------------------------------------------
    # Reads
    # ----------------------------------------------------------------

    def get_card_snapshots(self, learner_id, card_ids):
        ids = list(card_ids)
        if not ids:
            return {}
        rows = self.session.scalars(
            select(UserCardProgress).where(
                UserCardProgress.learner_id == learner_id,
                UserCardProgress.flashcard_id.in_(ids),
            )
        )
        return {row.flashcard_id: _card_snapshot(row) for row in rows}

    def get_quiz_progress(self, learner_id, target_id, target_kind):
        row = self._load_quiz_row(learner_id, target_id, target_kind, lock=False)
        return _quiz_aggregate(row, target_kind) if row else None

    # ----------------------------------------------------------------
    # Atomic read-modify-write
    # ----------------------------------------------------------------

    def modify_card_progress(self, learner_id, card_id, update: CardUpdate):
        def attempt() -> CardMasterySnapshot:
            row = self._load_card_row(learner_id, card_id)
            snapshot = update(_card_snapshot(row) if row else None)
            if row is None:
                row = UserCardProgress(learner_id=learner_id, flashcard_id=card_id)
                self.session.add(row)
            row.confidence_level = snapshot.confidence_level
            row.times_seen = snapshot.times_seen
            row.last_seen = snapshot.last_seen
            row.next_review_date = snapshot.next_review_due
            row.mastery_status = snapshot.mastery_status
            return snapshot

        return self._with_retry(attempt, f"card progress {learner_id}/{card_id}")

    def modify_quiz_progress(self, learner_id, target_id, target_kind, update: QuizUpdate):
        def attempt() -> QuizProgressAggregate:
            row = self._load_quiz_row(learner_id, target_id, target_kind, lock=True)
            aggregate = update(_quiz_aggregate(row, target_kind) if row else None)
            if row is None:
                if target_kind == QuizTargetKind.CARD:
                    row = UserQuizProgress(learner_id=learner_id, flashcard_id=target_id)
                else:
                    row = DeckQuizProgress(learner_id=learner_id, deck_id=target_id)
                self.session.add(row)
            row.times_taken = aggregate.times_taken
            row.total_questions_answered = aggregate.total_questions_answered
            row.total_correct_answers = aggregate.total_correct_answers
            row.average_score = aggregate.average_score
            row.best_score = aggregate.best_score
            row.last_score = aggregate.last_score
            row.last_taken = aggregate.last_taken
            if target_kind == QuizTargetKind.CARD:
                row.mastery_status = aggregate.mastery_status
            else:
                row.mastery_percentage = aggregate.mastery_percentage
            return aggregate

        return self._with_retry(attempt, f"{target_kind.value} quiz progress {learner_id}/{target_id}")

    def _with_retry(self, attempt, label: str):
        for attempt_number in range(1, self.max_retries + 1):
            try:
                with self.session.begin_nested():
                    result = attempt()
                    self.session.flush()
                return result
            except IntegrityError:
                if attempt_number >= self.max_retries:
                    raise
                logger.warning(
                    f"Concurrent insert on {label}; retrying ({attempt_number}/{self.max_retries})"
                )
        raise RuntimeError("unreachable")

    def _load_card_row(self, learner_id: str, card_id: UUID) -> UserCardProgress | None:
        return self.session.scalars(
            select(UserCardProgress)
            .where(
                UserCardProgress.learner_id == learner_id,
                UserCardProgress.flashcard_id == card_id,
            )
            .with_for_update()
        ).one_or_none()

    def _load_quiz_row(
        self, learner_id: str, target_id: UUID, target_kind: QuizTargetKind, lock: bool
    ) -> UserQuizProgress | DeckQuizProgress | None:
        if target_kind == QuizTargetKind.CARD:
            stmt = select(UserQuizProgress).where(
                UserQuizProgress.learner_id == learner_id,
                UserQuizProgress.flashcard_id == target_id,
            )
        else:
            stmt = select(DeckQuizProgress).where(
                DeckQuizProgress.learner_id == learner_id,
                DeckQuizProgress.deck_id == target_id,
            )
        if lock:
            stmt = stmt.with_for_update()
        return self.session.scalars(stmt).one_or_none()
