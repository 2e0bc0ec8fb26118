"""
Unit tests for deck and class progress summaries.
"""

from uuid import uuid4

from certstudy.core.mastery import MasteryStatus
from certstudy.study.progress import (
    ClassProgressSummary,
    DeckProgressSummary,
    DeckStudyProgress,
    summarize_class_progress,
    summarize_deck_progress,
)
from conftest import make_card, make_snapshot


class TestSummarizeDeckProgress:
    """Tests for summarize_deck_progress."""

    def test_counts_by_status(self):
        deck_id = uuid4()
        cards = [make_card(f"Q{i}", deck_id=deck_id) for i in range(5)]
        snapshots = {}
        for card, status in zip(
            cards[:4],
            [MasteryStatus.MASTERED, MasteryStatus.MASTERED, MasteryStatus.LEARNING, MasteryStatus.NEW],
        ):
            snapshot = make_snapshot(card, confidence_level=3)
            snapshot.mastery_status = status
            snapshots[card.id] = snapshot

        summary = summarize_deck_progress(deck_id, cards, snapshots)
        assert summary.total_cards == 5
        assert summary.cards_mastered == 2
        assert summary.cards_learning == 1
        assert summary.cards_new == 2
        assert summary.mastery_percentage == 40.0

    def test_empty_deck(self):
        summary = summarize_deck_progress(uuid4(), [], {})
        assert summary.total_cards == 0
        assert summary.mastery_percentage == 0.0

    def test_percentage_rounding(self):
        summary = DeckProgressSummary(deck_id=uuid4(), total_cards=3, cards_mastered=1)
        assert summary.mastery_percentage == 33.33

    def test_to_dict_keys(self):
        deck_id = uuid4()
        summary = DeckProgressSummary(deck_id=deck_id, total_cards=2, cards_new=2, quiz_mastery_percentage=55.5)
        data = summary.to_dict()
        assert data["deckId"] == str(deck_id)
        assert data["cardsNew"] == 2
        assert data["masteryPercentage"] == 0.0
        assert data["quizMasteryPercentage"] == 55.5


def _rated(card, status):
    snapshot = make_snapshot(card, confidence_level=3)
    snapshot.mastery_status = status
    return snapshot


class TestSummarizeClassProgress:
    """Tests for summarize_class_progress."""

    def test_counts_per_class_and_deck(self):
        first_deck, second_deck = uuid4(), uuid4()
        first_cards = [make_card(f"A{i}", deck_id=first_deck) for i in range(3)]
        second_cards = [make_card(f"B{i}", deck_id=second_deck) for i in range(2)]
        snapshots = {
            first_cards[0].id: _rated(first_cards[0], MasteryStatus.MASTERED),
            first_cards[1].id: _rated(first_cards[1], MasteryStatus.NEW),
            second_cards[0].id: _rated(second_cards[0], MasteryStatus.LEARNING),
        }

        summary = summarize_class_progress(
            uuid4(),
            "CCNA",
            {first_deck: "Routing", second_deck: "Security"},
            first_cards + second_cards,
            snapshots,
        )
        assert summary.total_cards == 5
        assert summary.studied_cards == 3
        assert summary.mastered_cards == 1
        assert summary.learning_cards == 1
        assert summary.new_cards == 2
        assert summary.progress == 60
        assert [(d.name, d.card_count, d.studied_count, d.progress) for d in summary.decks] == [
            ("Routing", 3, 2, 67),
            ("Security", 2, 1, 50),
        ]

    def test_deck_without_cards_is_listed(self):
        empty_deck = uuid4()
        summary = summarize_class_progress(uuid4(), "CCNA", {empty_deck: "Empty"}, [], {})
        assert summary.progress == 0
        assert summary.decks[0].card_count == 0
        assert summary.decks[0].progress == 0

    def test_cards_outside_listed_decks_ignored(self):
        card = make_card(deck_id=uuid4())
        summary = summarize_class_progress(uuid4(), "CCNA", {}, [card], {card.id: _rated(card, MasteryStatus.MASTERED)})
        assert summary.total_cards == 0
        assert summary.studied_cards == 0

    def test_progress_rounds_halves_up(self):
        assert DeckStudyProgress(deck_id=uuid4(), name="D", card_count=8, studied_count=1).progress == 13
        assert ClassProgressSummary(class_id=uuid4(), class_name="C", total_cards=8, studied_cards=3).progress == 38

    def test_to_dict_keys(self):
        class_id = uuid4()
        data = ClassProgressSummary(class_id=class_id, class_name="C", total_cards=4, studied_cards=1).to_dict()
        assert data["classId"] == str(class_id)
        assert data["newCards"] == 3
        assert data["progress"] == 25
        assert data["decks"] == []
