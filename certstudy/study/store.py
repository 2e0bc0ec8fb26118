"""
Progress storage interface.

The trackers never read-then-write on their own: they hand the store a pure
update function, and the store applies it atomically to one aggregate row.
``SqlProgressStore`` (certstudy.db.repositories) is the production
implementation; ``InMemoryProgressStore`` serves tests and database-less use.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from certstudy.core.models import CardMasterySnapshot, QuizProgressAggregate
from certstudy.core.modes import QuizTargetKind

CardUpdate = Callable[[CardMasterySnapshot | None], CardMasterySnapshot]
QuizUpdate = Callable[[QuizProgressAggregate | None], QuizProgressAggregate]


class ProgressStore(Protocol):
    """Interface for mastery and quiz progress persistence."""

    def get_card_snapshots(
        self, learner_id: str, card_ids: Iterable[UUID]
    ) -> dict[UUID, CardMasterySnapshot]:
        """Batched snapshot lookup; cards never studied are absent."""
        ...

    def get_quiz_progress(
        self, learner_id: str, target_id: UUID, target_kind: QuizTargetKind
    ) -> QuizProgressAggregate | None:
        """Single aggregate lookup."""
        ...

    def modify_card_progress(
        self, learner_id: str, card_id: UUID, update: CardUpdate
    ) -> CardMasterySnapshot:
        """Atomically apply ``update`` to the (learner, card) snapshot."""
        ...

    def modify_quiz_progress(
        self,
        learner_id: str,
        target_id: UUID,
        target_kind: QuizTargetKind,
        update: QuizUpdate,
    ) -> QuizProgressAggregate:
        """Atomically apply ``update`` to the (learner, target) aggregate."""
        ...


class InMemoryProgressStore:
    """
    Dictionary-backed ProgressStore.

    A single lock serializes every read-modify-write, so concurrent updates
    to the same aggregate never lose counts. Stored objects are copied on the
    way in and out.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cards: dict[tuple[str, UUID], CardMasterySnapshot] = {}
        self._quizzes: dict[tuple[str, UUID, QuizTargetKind], QuizProgressAggregate] = {}

    def get_card_snapshots(self, learner_id, card_ids):
        with self._lock:
            found = {}
            for card_id in card_ids:
                snapshot = self._cards.get((learner_id, card_id))
                if snapshot is not None:
                    found[card_id] = replace(snapshot)
            return found

    def get_quiz_progress(self, learner_id, target_id, target_kind):
        with self._lock:
            aggregate = self._quizzes.get((learner_id, target_id, target_kind))
            return replace(aggregate) if aggregate else None

    def modify_card_progress(self, learner_id, card_id, update):
        key = (learner_id, card_id)
        with self._lock:
            existing = self._cards.get(key)
            updated = update(replace(existing) if existing else None)
            self._cards[key] = replace(updated)
            return updated

    def modify_quiz_progress(self, learner_id, target_id, target_kind, update):
        key = (learner_id, target_id, target_kind)
        with self._lock:
            existing = self._quizzes.get(key)
            updated = update(replace(existing) if existing else None)
            self._quizzes[key] = replace(updated)
            return updated
