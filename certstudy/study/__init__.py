"""
Study Module - Adaptive card selection and progress tracking.

Components:
- strategies: progressive / random / all ordering strategies
- selector: CardSelector dispatching on StudyMode
- mastery_tracker: confidence ratings -> CardMasterySnapshot
- quiz_aggregator: quiz completions -> QuizProgressAggregate
- review_schedule: confidence-based next review dates
- progress: per-deck status counts and per-class studied counts
- store: ProgressStore interface and in-memory implementation

The database-bound pieces (session_tracker, study_service) are imported
from their modules directly.
"""

from certstudy.study.mastery_tracker import MasteryTracker, apply_confidence_rating
from certstudy.study.progress import (
    ClassProgressSummary,
    DeckProgressSummary,
    DeckStudyProgress,
    summarize_class_progress,
    summarize_deck_progress,
)
from certstudy.study.quiz_aggregator import QuizAggregator, apply_quiz_result, validate_quiz_result
from certstudy.study.review_schedule import next_review_due_for
from certstudy.study.selector import CardSelector, select_study_cards
from certstudy.study.store import InMemoryProgressStore, ProgressStore
from certstudy.study.strategies import (
    AllModeStrategy,
    ProgressiveModeStrategy,
    RandomModeStrategy,
    StudyModeStrategy,
    build_strategies,
)

__all__ = [
    # Selection
    "CardSelector",
    "select_study_cards",
    "StudyModeStrategy",
    "AllModeStrategy",
    "RandomModeStrategy",
    "ProgressiveModeStrategy",
    "build_strategies",
    # Tracking
    "MasteryTracker",
    "apply_confidence_rating",
    "QuizAggregator",
    "apply_quiz_result",
    "validate_quiz_result",
    "next_review_due_for",
    # Progress
    "DeckProgressSummary",
    "summarize_deck_progress",
    "ClassProgressSummary",
    "DeckStudyProgress",
    "summarize_class_progress",
    # Storage
    "ProgressStore",
    "InMemoryProgressStore",
]
