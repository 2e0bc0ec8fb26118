"""
Card Selector.

Turns a published card pool plus the learner's mastery snapshots into the
ordered sequence of cards for one study session.

Rules:
- Dispatch to the strategy for the requested StudyMode (unknown -> all)
- A mode result that filters down to nothing falls back to the full pool
- An empty pool yields an empty list, never an error
- Inputs are never mutated; the result is always a new list
"""

from __future__ import annotations

import random
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from uuid import UUID

from loguru import logger

from certstudy.core.clock import utc_now
from certstudy.core.models import Card, CardMasterySnapshot
from certstudy.core.modes import StudyMode
from certstudy.study.strategies import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    StudyModeStrategy,
    build_strategies,
)


class CardSelector:
    """
    Select and order study cards for a session.

    Holds no per-learner state; one instance can serve any number of
    requests.
    """

    def __init__(
        self,
        confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize selector.

        Args:
            confidence_threshold: Progressive mode keeps rated cards below this
            rng: Optional seeded generator for the random mode
            clock: Source of "now" for due-date comparisons
        """
        self._strategies: dict[StudyMode, StudyModeStrategy] = build_strategies(
            confidence_threshold=confidence_threshold,
            rng=rng,
        )
        self._clock = clock

    def select(
        self,
        pool: Sequence[Card],
        snapshots: Mapping[UUID, CardMasterySnapshot],
        mode: StudyMode | str,
        now: datetime | None = None,
    ) -> list[Card]:
        """
        Order a card pool for study.

        Args:
            pool: Published cards in storage order
            snapshots: Mastery snapshots keyed by card id (missing = never studied)
            mode: Study mode; strings are parsed and unknown names mean ALL
            now: Comparison time for due reviews (defaults to the clock)

        Returns:
            New list of cards to present, in order
        """
        if not pool:
            return []

        study_mode = StudyMode.parse(mode, default=StudyMode.ALL)
        strategy = self._strategies[study_mode]
        selected = strategy.order(pool, snapshots, now or self._clock())

        if not selected:
            logger.debug(
                f"{study_mode.value} mode selected no cards from {len(pool)}; returning full pool"
            )
            return list(pool)

        logger.debug(f"{study_mode.value} mode selected {len(selected)}/{len(pool)} cards")
        return selected


def select_study_cards(
    pool: Sequence[Card],
    snapshots: Mapping[UUID, CardMasterySnapshot],
    mode: StudyMode | str,
    now: datetime | None = None,
) -> list[Card]:
    """Select study cards with the default selector configuration."""
    return CardSelector().select(pool, snapshots, mode, now=now)
