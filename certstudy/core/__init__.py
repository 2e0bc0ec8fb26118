"""
Core Module - Shared domain models and rules.

Components:
- clock: UTC helpers
- errors: ValidationError / NotFoundError taxonomy
- mastery: MasteryStatus and the classification rules
- models: Card, CardMasterySnapshot, QuizProgressAggregate, StudyScope
- modes: StudyMode and QuizTargetKind enums

All other packages import shared concepts from here rather than
redefining them.
"""

from certstudy.core.errors import NotFoundError, StudyEngineError, ValidationError
from certstudy.core.mastery import (
    MasteryStatus,
    QuizMasteryThresholds,
    classify_confidence_mastery,
    classify_quiz_mastery,
    validate_confidence_level,
)
from certstudy.core.models import (
    Card,
    CardMasterySnapshot,
    QuizProgressAggregate,
    StudyScope,
)
from certstudy.core.modes import QuizTargetKind, StudyMode

__all__ = [
    # Errors
    "StudyEngineError",
    "ValidationError",
    "NotFoundError",
    # Mastery
    "MasteryStatus",
    "QuizMasteryThresholds",
    "classify_quiz_mastery",
    "classify_confidence_mastery",
    "validate_confidence_level",
    # Models
    "Card",
    "CardMasterySnapshot",
    "QuizProgressAggregate",
    "StudyScope",
    # Modes
    "StudyMode",
    "QuizTargetKind",
]
