"""
Unit tests for study mode and quiz target parsing.
"""

import pytest

from certstudy.core.errors import ValidationError
from certstudy.core.modes import QuizTargetKind, StudyMode


class TestStudyModeParse:
    """Tests for StudyMode.parse."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("progressive", StudyMode.PROGRESSIVE),
            ("random", StudyMode.RANDOM),
            ("all", StudyMode.ALL),
            ("  Random ", StudyMode.RANDOM),
            ("PROGRESSIVE", StudyMode.PROGRESSIVE),
        ],
    )
    def test_known_names(self, raw, expected):
        assert StudyMode.parse(raw) == expected

    @pytest.mark.parametrize("raw", ["spaced", "shuffle", "123"])
    def test_unknown_names_map_to_all(self, raw):
        """Unknown modes never raise."""
        assert StudyMode.parse(raw) == StudyMode.ALL

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_uses_default(self, raw):
        assert StudyMode.parse(raw) == StudyMode.PROGRESSIVE
        assert StudyMode.parse(raw, default="random") == StudyMode.RANDOM
        assert StudyMode.parse(raw, default=StudyMode.ALL) == StudyMode.ALL

    def test_member_passes_through(self):
        assert StudyMode.parse(StudyMode.RANDOM) is StudyMode.RANDOM


class TestQuizTargetKindParse:
    """Tests for QuizTargetKind.parse."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("card", QuizTargetKind.CARD),
            ("flashcard", QuizTargetKind.CARD),
            ("Deck", QuizTargetKind.DECK),
            (QuizTargetKind.DECK, QuizTargetKind.DECK),
        ],
    )
    def test_valid_kinds(self, raw, expected):
        assert QuizTargetKind.parse(raw) == expected

    @pytest.mark.parametrize("raw", ["class", "", "quiz"])
    def test_invalid_kind_raises(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            QuizTargetKind.parse(raw)
        assert exc_info.value.field == "target_kind"
