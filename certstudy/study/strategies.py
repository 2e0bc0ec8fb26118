"""
Study Mode Strategies.

Each strategy is a pure ordering function over a card pool:

- all:          the pool in stored order
- random:       every card exactly once, uniformly shuffled per call
- progressive:  unstudied, low-confidence and due cards, weakest first

``build_strategies`` returns one instance per StudyMode member, so the
selector's dispatch is total.
"""

from __future__ import annotations

import random
import secrets
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import ClassVar
from uuid import UUID

from certstudy.core.clock import EPOCH, as_utc
from certstudy.core.models import Card, CardMasterySnapshot
from certstudy.core.modes import StudyMode

DEFAULT_CONFIDENCE_THRESHOLD = 4


class StudyModeStrategy(ABC):
    """Strategy pattern for mode-specific card ordering."""

    mode: ClassVar[StudyMode]

    @abstractmethod
    def order(
        self,
        pool: Sequence[Card],
        snapshots: Mapping[UUID, CardMasterySnapshot],
        now: datetime,
    ) -> list[Card]:
        """Return a new list of cards to study; never mutates the inputs."""
        ...


class AllModeStrategy(StudyModeStrategy):
    """Canonical pass: no filtering, no shuffling."""

    mode = StudyMode.ALL

    def order(self, pool, snapshots, now):
        return list(pool)


class RandomModeStrategy(StudyModeStrategy):
    """
    Uniform shuffle of the whole pool.

    Uses the OS randomness source unless a seeded ``random.Random`` is
    injected (tests).
    """

    mode = StudyMode.RANDOM

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or secrets.SystemRandom()

    def order(self, pool, snapshots, now):
        shuffled = list(pool)
        # random.shuffle is Fisher-Yates
        self.rng.shuffle(shuffled)
        return shuffled


class ProgressiveModeStrategy(StudyModeStrategy):
    """
    Adaptive resurfacing.

    Filter: keep a card if it has no snapshot, its confidence is below the
    threshold, or its review is due.

    Sort (stable):
    1. Unstudied cards first, in pool order
    2. Lower confidence first (unrated counts as 0)
    3. Older last_seen first (never seen counts as the epoch)
    """

    mode = StudyMode.PROGRESSIVE

    def __init__(self, confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD):
        self.confidence_threshold = confidence_threshold

    def should_include(self, snapshot: CardMasterySnapshot | None, now: datetime) -> bool:
        """Decide whether a card belongs in a progressive session."""
        if snapshot is None:
            return True
        if snapshot.confidence_level is not None and snapshot.confidence_level < self.confidence_threshold:
            return True
        return snapshot.is_due(now)

    @staticmethod
    def sort_key(snapshot: CardMasterySnapshot | None) -> tuple[int, int, datetime]:
        if snapshot is None:
            return (0, 0, EPOCH)
        return (
            1,
            snapshot.confidence_level or 0,
            as_utc(snapshot.last_seen) or EPOCH,
        )

    def order(self, pool, snapshots, now):
        selected = [card for card in pool if self.should_include(snapshots.get(card.id), now)]
        selected.sort(key=lambda card: self.sort_key(snapshots.get(card.id)))
        return selected


def build_strategies(
    confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD,
    rng: random.Random | None = None,
) -> dict[StudyMode, StudyModeStrategy]:
    """Instantiate one strategy per mode with the given tuning."""
    return {
        StudyMode.PROGRESSIVE: ProgressiveModeStrategy(confidence_threshold),
        StudyMode.RANDOM: RandomModeStrategy(rng),
        StudyMode.ALL: AllModeStrategy(),
    }
