"""
Quiz Aggregator.

Folds completed quiz sessions into per (learner, card|deck) aggregates.

Per session:
    score   = correct / total * 100
    average = cumulative correct / cumulative questions * 100
    best    = max(previous best, score)

Card targets are classified (new / learning / mastered) from the unrounded
average and the best score; deck targets store the average as
mastery_percentage instead. Stored scores keep two decimals.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from loguru import logger

from certstudy.core.clock import utc_now
from certstudy.core.errors import ValidationError
from certstudy.core.mastery import (
    DEFAULT_QUIZ_THRESHOLDS,
    MasteryStatus,
    QuizMasteryThresholds,
    classify_quiz_mastery,
)
from certstudy.core.models import QuizProgressAggregate
from certstudy.core.modes import QuizTargetKind
from certstudy.study.store import ProgressStore

SCORE_PRECISION = 2


def validate_quiz_result(correct: object, total: object) -> None:
    """
    Check a quiz result before anything is written.

    Raises:
        ValidationError: non-integer counts, total <= 0, or correct outside [0, total]
    """
    for name, value in (("correct", correct), ("total", total)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer, got {value!r}", field=name, value=value)
    if total <= 0:
        raise ValidationError(f"total must be positive, got {total}", field="total", value=total)
    if not 0 <= correct <= total:
        raise ValidationError(
            f"correct must be between 0 and {total}, got {correct}",
            field="correct",
            value=correct,
        )


def apply_quiz_result(
    existing: QuizProgressAggregate | None,
    learner_id: str,
    target_id: UUID,
    target_kind: QuizTargetKind,
    correct: int,
    total: int,
    now: datetime,
    thresholds: QuizMasteryThresholds = DEFAULT_QUIZ_THRESHOLDS,
) -> QuizProgressAggregate:
    """
    Compute the aggregate that results from one completed session.

    Args:
        existing: Current aggregate, or None for the first session
        correct: Correct answers this session (validated)
        total: Questions this session (validated, > 0)
        now: Completion timestamp
        thresholds: Mastery cut-offs for card targets

    Returns:
        New QuizProgressAggregate (existing is not modified)
    """
    session_score = correct / total * 100

    times_taken = (existing.times_taken if existing else 0) + 1
    total_questions = (existing.total_questions_answered if existing else 0) + total
    total_correct = (existing.total_correct_answers if existing else 0) + correct
    average = total_correct / total_questions * 100

    previous_best = existing.best_score if existing and existing.best_score is not None else 0.0
    best = max(previous_best, session_score)

    mastery_status = None
    mastery_percentage = None
    if target_kind == QuizTargetKind.CARD:
        mastery_status = classify_quiz_mastery(average, best, thresholds)
    else:
        mastery_percentage = round(average, SCORE_PRECISION)

    return QuizProgressAggregate(
        learner_id=learner_id,
        target_id=target_id,
        target_kind=target_kind,
        times_taken=times_taken,
        total_questions_answered=total_questions,
        total_correct_answers=total_correct,
        average_score=round(average, SCORE_PRECISION),
        best_score=round(best, SCORE_PRECISION),
        last_score=round(session_score, SCORE_PRECISION),
        last_taken=now,
        mastery_status=mastery_status,
        mastery_percentage=mastery_percentage,
    )


class QuizAggregator:
    """Maintains QuizProgressAggregate rows from quiz completions."""

    def __init__(
        self,
        store: ProgressStore,
        thresholds: QuizMasteryThresholds | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.thresholds = thresholds or DEFAULT_QUIZ_THRESHOLDS
        self.clock = clock

    def aggregate(
        self,
        learner_id: str,
        target_id: UUID,
        target_kind: QuizTargetKind | str,
        correct: int,
        total: int,
    ) -> QuizProgressAggregate:
        """
        Fold one completed session into the stored aggregate.

        Raises:
            ValidationError: invalid counts or target kind; nothing is written

        Returns:
            The stored aggregate
        """
        kind = QuizTargetKind.parse(target_kind)
        validate_quiz_result(correct, total)
        now = self.clock()

        aggregate = self.store.modify_quiz_progress(
            learner_id,
            target_id,
            kind,
            lambda existing: apply_quiz_result(
                existing, learner_id, target_id, kind, correct, total, now, self.thresholds
            ),
        )
        logger.info(
            f"Quiz {correct}/{total} recorded for learner={learner_id} {kind.value}={target_id} "
            f"(avg {aggregate.average_score}, best {aggregate.best_score})"
        )
        return aggregate

    def record_quiz_completion(
        self,
        learner_id: str,
        target_id: UUID,
        target_kind: QuizTargetKind | str,
        correct: int,
        total: int,
    ) -> MasteryStatus | None:
        """
        Record a completed quiz.

        Returns:
            MasteryStatus for card targets, None for deck targets
        """
        return self.aggregate(learner_id, target_id, target_kind, correct, total).mastery_status
