# SQLAlchemy models
from .base import Base
from .content import Deck, Flashcard, StudyClass
from .progress import (
    DeckQuizProgress,
    LearnerStats,
    SessionCard,
    StudySession,
    UserCardProgress,
    UserQuizProgress,
)

__all__ = [
    # Base
    "Base",
    # Content
    "StudyClass",
    "Deck",
    "Flashcard",
    # Progress
    "UserCardProgress",
    "UserQuizProgress",
    "DeckQuizProgress",
    # Sessions
    "StudySession",
    "SessionCard",
    "LearnerStats",
]
