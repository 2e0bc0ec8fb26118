"""
Deck and class progress summaries for progress displays.

Counts each card of a deck by its confidence-derived mastery status; cards
without a snapshot count as new. Class summaries roll the same snapshots up
into studied counts per published deck.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from uuid import UUID

from certstudy.core.mastery import MasteryStatus
from certstudy.core.models import Card, CardMasterySnapshot


@dataclass
class DeckProgressSummary:
    """Card status counts for one learner and one deck."""

    deck_id: UUID
    total_cards: int = 0
    cards_new: int = 0
    cards_learning: int = 0
    cards_mastered: int = 0
    quiz_mastery_percentage: float | None = None

    @property
    def mastery_percentage(self) -> float:
        """Share of mastered cards (0-100, two decimals)."""
        if self.total_cards <= 0:
            return 0.0
        return round(self.cards_mastered / self.total_cards * 100, 2)

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        return {
            "deckId": str(self.deck_id),
            "totalCards": self.total_cards,
            "cardsNew": self.cards_new,
            "cardsLearning": self.cards_learning,
            "cardsMastered": self.cards_mastered,
            "masteryPercentage": self.mastery_percentage,
            "quizMasteryPercentage": self.quiz_mastery_percentage,
        }


def summarize_deck_progress(
    deck_id: UUID,
    cards: Sequence[Card],
    snapshots: Mapping[UUID, CardMasterySnapshot],
) -> DeckProgressSummary:
    """Tally new / learning / mastered cards for a deck."""
    summary = DeckProgressSummary(deck_id=deck_id, total_cards=len(cards))
    for card in cards:
        snapshot = snapshots.get(card.id)
        status = snapshot.mastery_status if snapshot else MasteryStatus.NEW
        if status == MasteryStatus.MASTERED:
            summary.cards_mastered += 1
        elif status == MasteryStatus.LEARNING:
            summary.cards_learning += 1
        else:
            summary.cards_new += 1
    return summary


def _whole_percent(part: int, whole: int) -> int:
    """Integer percentage, halves rounded up."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (whole * 2)


@dataclass
class DeckStudyProgress:
    """How much of one deck a learner has touched."""

    deck_id: UUID
    name: str
    card_count: int = 0
    studied_count: int = 0

    @property
    def progress(self) -> int:
        return _whole_percent(self.studied_count, self.card_count)

    def to_dict(self) -> dict:
        return {
            "deckId": str(self.deck_id),
            "name": self.name,
            "cardCount": self.card_count,
            "studiedCount": self.studied_count,
            "progress": self.progress,
        }


@dataclass
class ClassProgressSummary:
    """
    Class-wide card counts plus a per-deck breakdown.

    A card is studied once it has a snapshot; ``new_cards`` counts the cards
    never rated, so it excludes studied cards whose status is still new.
    """

    class_id: UUID
    class_name: str
    total_cards: int = 0
    studied_cards: int = 0
    mastered_cards: int = 0
    learning_cards: int = 0
    decks: list[DeckStudyProgress] = field(default_factory=list)

    @property
    def new_cards(self) -> int:
        return self.total_cards - self.studied_cards

    @property
    def progress(self) -> int:
        """Studied share of the class (0-100, whole number)."""
        return _whole_percent(self.studied_cards, self.total_cards)

    def to_dict(self) -> dict:
        return {
            "classId": str(self.class_id),
            "className": self.class_name,
            "totalCards": self.total_cards,
            "studiedCards": self.studied_cards,
            "masteredCards": self.mastered_cards,
            "learningCards": self.learning_cards,
            "newCards": self.new_cards,
            "progress": self.progress,
            "decks": [deck.to_dict() for deck in self.decks],
        }


def summarize_class_progress(
    class_id: UUID,
    class_name: str,
    deck_names: Mapping[UUID, str],
    cards: Sequence[Card],
    snapshots: Mapping[UUID, CardMasterySnapshot],
) -> ClassProgressSummary:
    """
    Tally studied / mastered / learning cards for a class.

    Args:
        deck_names: Published decks in display order; decks without cards
            still get a (zero) row
        cards: Published cards of those decks
        snapshots: The learner's snapshots keyed by card id
    """
    decks = {deck_id: DeckStudyProgress(deck_id=deck_id, name=name) for deck_id, name in deck_names.items()}
    summary = ClassProgressSummary(class_id=class_id, class_name=class_name)

    for card in cards:
        deck = decks.get(card.deck_id)
        if deck is None:
            continue
        summary.total_cards += 1
        deck.card_count += 1

        snapshot = snapshots.get(card.id)
        if snapshot is None:
            continue
        summary.studied_cards += 1
        deck.studied_count += 1
        if snapshot.mastery_status == MasteryStatus.MASTERED:
            summary.mastered_cards += 1
        elif snapshot.mastery_status == MasteryStatus.LEARNING:
            summary.learning_cards += 1

    summary.decks = list(decks.values())
    return summary
