"""
Unit tests for QuizAggregator.

Tests:
- Two-attempt card scenario (learning -> mastered)
- Average derived from the counters, best is the running maximum
- Deck targets carry mastery_percentage instead of a status
- Invalid results write nothing
- Parallel completions keep every count
"""

import random
from uuid import uuid4

import pytest

from certstudy.core.errors import ValidationError
from certstudy.core.mastery import MasteryStatus, QuizMasteryThresholds
from certstudy.core.modes import QuizTargetKind
from certstudy.study.quiz_aggregator import QuizAggregator, apply_quiz_result, validate_quiz_result
from certstudy.study.store import InMemoryProgressStore
from conftest import FIXED_NOW, FixedClock

LEARNER = "learner-1"


@pytest.fixture
def store():
    return InMemoryProgressStore()


@pytest.fixture
def aggregator(store, clock):
    return QuizAggregator(store, clock=clock)


class TestCardQuizScenario:
    """8/10 then 10/10 on the same card."""

    def test_learning_then_mastered(self, aggregator):
        card_id = uuid4()

        first = aggregator.aggregate(LEARNER, card_id, "card", 8, 10)
        assert first.average_score == 80.0
        assert first.best_score == 80.0
        assert first.last_score == 80.0
        assert first.mastery_status == MasteryStatus.LEARNING

        second = aggregator.aggregate(LEARNER, card_id, "card", 10, 10)
        assert second.times_taken == 2
        assert second.total_questions_answered == 20
        assert second.total_correct_answers == 18
        assert second.average_score == 90.0
        assert second.best_score == 100.0
        assert second.last_score == 100.0
        assert second.mastery_status == MasteryStatus.MASTERED

    def test_record_quiz_completion_returns_status(self, aggregator):
        card_id = uuid4()
        assert aggregator.record_quiz_completion(LEARNER, card_id, "flashcard", 9, 10) == MasteryStatus.MASTERED

    def test_best_score_never_decreases(self, aggregator):
        card_id = uuid4()
        aggregator.aggregate(LEARNER, card_id, QuizTargetKind.CARD, 10, 10)
        after_bad = aggregator.aggregate(LEARNER, card_id, QuizTargetKind.CARD, 0, 10)
        assert after_bad.best_score == 100.0
        assert after_bad.last_score == 0.0
        assert after_bad.average_score == 50.0
        assert after_bad.mastery_status == MasteryStatus.LEARNING

    def test_scores_rounded_to_two_decimals(self, aggregator):
        aggregate = aggregator.aggregate(LEARNER, uuid4(), "card", 1, 3)
        assert aggregate.last_score == 33.33
        assert aggregate.average_score == 33.33

    def test_last_taken_is_clock_time(self, aggregator):
        aggregate = aggregator.aggregate(LEARNER, uuid4(), "card", 1, 2)
        assert aggregate.last_taken == FIXED_NOW

    def test_custom_thresholds(self, store, clock):
        strict = QuizAggregator(store, thresholds=QuizMasteryThresholds(mastered_best=100), clock=clock)
        assert strict.aggregate(LEARNER, uuid4(), "card", 9, 10).mastery_status == MasteryStatus.LEARNING


class TestDeckQuiz:
    """Deck-level aggregates."""

    def test_deck_gets_percentage_not_status(self, aggregator):
        deck_id = uuid4()
        aggregator.aggregate(LEARNER, deck_id, "deck", 6, 10)
        aggregate = aggregator.aggregate(LEARNER, deck_id, "deck", 9, 10)
        assert aggregate.mastery_status is None
        assert aggregate.mastery_percentage == 75.0
        assert aggregator.record_quiz_completion(LEARNER, deck_id, "deck", 10, 10) is None

    def test_card_and_deck_with_same_id_are_separate(self, aggregator, store):
        target = uuid4()
        aggregator.aggregate(LEARNER, target, "card", 1, 1)
        aggregator.aggregate(LEARNER, target, "deck", 0, 1)
        assert store.get_quiz_progress(LEARNER, target, QuizTargetKind.CARD).times_taken == 1
        assert store.get_quiz_progress(LEARNER, target, QuizTargetKind.DECK).times_taken == 1


class TestCounterInvariant:
    """Correct answers never exceed questions answered."""

    def test_random_sequences_keep_invariant(self, aggregator, store):
        rng = random.Random(1234)
        card_id = uuid4()
        for _ in range(200):
            total = rng.randint(1, 20)
            correct = rng.randint(0, total)
            aggregate = aggregator.aggregate(LEARNER, card_id, "card", correct, total)
            assert aggregate.total_correct_answers <= aggregate.total_questions_answered
            assert 0 <= aggregate.average_score <= 100

    def test_rejected_results_keep_invariant(self, aggregator, store):
        card_id = uuid4()
        aggregator.aggregate(LEARNER, card_id, "card", 5, 5)
        with pytest.raises(ValidationError):
            aggregator.aggregate(LEARNER, card_id, "card", 6, 5)
        stored = store.get_quiz_progress(LEARNER, card_id, QuizTargetKind.CARD)
        assert stored.total_correct_answers == 5
        assert stored.total_questions_answered == 5


class TestQuizValidation:
    """Invalid results are rejected before anything is written."""

    @pytest.mark.parametrize(
        "correct,total,field",
        [
            (1, 0, "total"),
            (0, -5, "total"),
            (11, 10, "correct"),
            (-1, 10, "correct"),
            (1.5, 10, "correct"),
            (1, "10", "total"),
            (True, 10, "correct"),
        ],
    )
    def test_invalid_counts(self, aggregator, store, correct, total, field):
        card_id = uuid4()
        with pytest.raises(ValidationError) as exc_info:
            aggregator.aggregate(LEARNER, card_id, "card", correct, total)
        assert exc_info.value.field == field
        assert store.get_quiz_progress(LEARNER, card_id, QuizTargetKind.CARD) is None

    def test_invalid_target_kind(self, aggregator):
        with pytest.raises(ValidationError):
            aggregator.aggregate(LEARNER, uuid4(), "class", 1, 1)

    def test_zero_correct_is_valid(self):
        validate_quiz_result(0, 10)


class TestApplyQuizResult:
    """Tests for the pure update function."""

    def test_classification_uses_unrounded_average(self):
        """1/3 alone stays new; adding 2/2 gives 3/5 = 60%, which is learning."""
        card_id = uuid4()
        first = apply_quiz_result(None, LEARNER, card_id, QuizTargetKind.CARD, 1, 3, FIXED_NOW)
        assert first.mastery_status == MasteryStatus.NEW
        second = apply_quiz_result(first, LEARNER, card_id, QuizTargetKind.CARD, 2, 2, FIXED_NOW)
        assert second.total_correct_answers == 3
        assert second.total_questions_answered == 5
        assert second.average_score == 60.0
        assert second.mastery_status == MasteryStatus.LEARNING


class TestConcurrentQuizzes:
    """Parallel completions on one card lose no counts."""

    def test_parallel_completions_sum_counters(self):
        from concurrent.futures import ThreadPoolExecutor

        store = InMemoryProgressStore()
        aggregator = QuizAggregator(store, clock=FixedClock())
        card_id = uuid4()
        results = [(correct, 10) for correct in range(11)] * 10

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(
                pool.map(
                    lambda result: aggregator.aggregate(LEARNER, card_id, "card", *result),
                    results,
                )
            )

        stored = store.get_quiz_progress(LEARNER, card_id, QuizTargetKind.CARD)
        assert stored.times_taken == len(results)
        assert stored.total_questions_answered == sum(total for _, total in results)
        assert stored.total_correct_answers == sum(correct for correct, _ in results)
        assert stored.total_correct_answers <= stored.total_questions_answered
        assert stored.average_score == 50.0
        assert stored.best_score == 100.0
