"""
Unit tests for MasteryTracker.

Tests:
- Rating replaces confidence and refreshes last_seen
- times_seen increments and status follows the rating
- next_review_due is opaque (kept unless supplied)
- Invalid ratings write nothing
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from certstudy.core.errors import ValidationError
from certstudy.core.mastery import MasteryStatus
from certstudy.study.mastery_tracker import MasteryTracker, apply_confidence_rating
from certstudy.study.store import InMemoryProgressStore
from conftest import FIXED_NOW, FixedClock

LEARNER = "learner-1"


@pytest.fixture
def store():
    return InMemoryProgressStore()


@pytest.fixture
def tracker(store, clock):
    return MasteryTracker(store, clock=clock)


class TestRecordConfidenceRating:
    """Tests for record_confidence_rating."""

    def test_second_rating_replaces_first(self, tracker, store, clock):
        """Rating 2 then 5: confidence ends at 5, last_seen is the second call."""
        card_id = uuid4()
        tracker.record_confidence_rating(LEARNER, card_id, 2)
        second_call = clock.advance(minutes=5)
        tracker.record_confidence_rating(LEARNER, card_id, 5)

        snapshot = store.get_card_snapshots(LEARNER, [card_id])[card_id]
        assert snapshot.confidence_level == 5
        assert snapshot.last_seen == second_call
        assert snapshot.times_seen == 2
        assert snapshot.mastery_status == MasteryStatus.MASTERED

    def test_first_rating_creates_snapshot(self, tracker):
        card_id = uuid4()
        snapshot = tracker.record_confidence_rating(LEARNER, card_id, 3)
        assert snapshot.learner_id == LEARNER
        assert snapshot.card_id == card_id
        assert snapshot.times_seen == 1
        assert snapshot.last_seen == FIXED_NOW
        assert snapshot.mastery_status == MasteryStatus.LEARNING
        assert snapshot.next_review_due is None

    def test_learners_are_isolated(self, tracker, store):
        card_id = uuid4()
        tracker.record_confidence_rating("alice", card_id, 5)
        tracker.record_confidence_rating("bob", card_id, 1)
        assert store.get_card_snapshots("alice", [card_id])[card_id].confidence_level == 5
        assert store.get_card_snapshots("bob", [card_id])[card_id].confidence_level == 1

    def test_next_review_due_kept_when_not_supplied(self, tracker, store):
        card_id = uuid4()
        due = FIXED_NOW + timedelta(days=3)
        tracker.record_confidence_rating(LEARNER, card_id, 4, next_review_due=due)
        snapshot = tracker.record_confidence_rating(LEARNER, card_id, 2)
        assert snapshot.next_review_due == due

    def test_next_review_due_replaced_when_supplied(self, tracker):
        card_id = uuid4()
        tracker.record_confidence_rating(LEARNER, card_id, 4, next_review_due=FIXED_NOW)
        later = FIXED_NOW + timedelta(days=7)
        snapshot = tracker.record_confidence_rating(LEARNER, card_id, 5, next_review_due=later)
        assert snapshot.next_review_due == later

    @pytest.mark.parametrize("level", [0, 6, 2.5, "4", None, True])
    def test_invalid_level_writes_nothing(self, tracker, store, level):
        card_id = uuid4()
        with pytest.raises(ValidationError):
            tracker.record_confidence_rating(LEARNER, card_id, level)
        assert store.get_card_snapshots(LEARNER, [card_id]) == {}

    def test_invalid_level_leaves_existing_snapshot(self, tracker, store):
        card_id = uuid4()
        tracker.record_confidence_rating(LEARNER, card_id, 3)
        with pytest.raises(ValidationError):
            tracker.record_confidence_rating(LEARNER, card_id, 9)
        snapshot = store.get_card_snapshots(LEARNER, [card_id])[card_id]
        assert snapshot.confidence_level == 3
        assert snapshot.times_seen == 1


class TestApplyConfidenceRating:
    """Tests for the pure update function."""

    def test_does_not_modify_existing(self):
        card_id = uuid4()
        existing = apply_confidence_rating(None, LEARNER, card_id, 2, FIXED_NOW)
        updated = apply_confidence_rating(existing, LEARNER, card_id, 4, FIXED_NOW + timedelta(hours=1))
        assert existing.confidence_level == 2
        assert existing.times_seen == 1
        assert updated.confidence_level == 4
        assert updated.times_seen == 2


class TestConcurrentRatings:
    """The in-memory store serializes read-modify-write."""

    def test_parallel_ratings_count_every_view(self):
        from concurrent.futures import ThreadPoolExecutor

        store = InMemoryProgressStore()
        tracker = MasteryTracker(store, clock=FixedClock())
        card_id = uuid4()

        with ThreadPoolExecutor(max_workers=8) as pool:
            levels = [1, 2, 3, 4, 5] * 20
            list(pool.map(lambda level: tracker.record_confidence_rating(LEARNER, card_id, level), levels))

        assert store.get_card_snapshots(LEARNER, [card_id])[card_id].times_seen == 100
