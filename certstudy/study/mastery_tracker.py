"""
Mastery Tracker.

Records a learner's 1-5 confidence rating for a card:
- confidence_level is replaced by the new rating
- last_seen is set to the tracker clock's "now"
- times_seen is incremented
- mastery_status is re-derived from the rating

next_review_due is opaque here: it is written only when the caller supplies
one, and left untouched otherwise.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from loguru import logger

from certstudy.core.clock import utc_now
from certstudy.core.mastery import classify_confidence_mastery, validate_confidence_level
from certstudy.core.models import CardMasterySnapshot
from certstudy.study.store import ProgressStore


def apply_confidence_rating(
    existing: CardMasterySnapshot | None,
    learner_id: str,
    card_id: UUID,
    level: int,
    now: datetime,
    next_review_due: datetime | None = None,
) -> CardMasterySnapshot:
    """
    Compute the snapshot that results from one confidence rating.

    Args:
        existing: Current snapshot, or None on the first rating
        learner_id: Learner identifier
        card_id: Card UUID
        level: Validated confidence level (1-5)
        now: Rating timestamp
        next_review_due: Externally derived due date, if any

    Returns:
        New CardMasterySnapshot (existing is not modified)
    """
    if next_review_due is None and existing is not None:
        next_review_due = existing.next_review_due

    return CardMasterySnapshot(
        learner_id=learner_id,
        card_id=card_id,
        confidence_level=level,
        last_seen=now,
        next_review_due=next_review_due,
        times_seen=(existing.times_seen if existing else 0) + 1,
        mastery_status=classify_confidence_mastery(level),
    )


class MasteryTracker:
    """Upserts CardMasterySnapshot rows from confidence ratings."""

    def __init__(self, store: ProgressStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def record_confidence_rating(
        self,
        learner_id: str,
        card_id: UUID,
        level: int,
        next_review_due: datetime | None = None,
    ) -> CardMasterySnapshot:
        """
        Save a confidence rating.

        Raises:
            ValidationError: if level is not an integer in 1..5

        Returns:
            The stored snapshot
        """
        validate_confidence_level(level)
        now = self.clock()

        snapshot = self.store.modify_card_progress(
            learner_id,
            card_id,
            lambda existing: apply_confidence_rating(
                existing, learner_id, card_id, level, now, next_review_due
            ),
        )
        logger.debug(
            f"Confidence {level} saved for learner={learner_id} card={card_id} "
            f"(seen {snapshot.times_seen}x, {snapshot.mastery_status.value})"
        )
        return snapshot
