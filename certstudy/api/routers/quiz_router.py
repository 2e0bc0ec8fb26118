"""
Quiz router.

Records completed quiz sessions for a flashcard or a whole deck and
returns the session score with the updated mastery.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from certstudy.api.deps import get_learner_id, get_study_service
from certstudy.core.errors import ValidationError
from certstudy.core.modes import QuizTargetKind
from certstudy.study.study_service import StudyService

router = APIRouter()


class QuizCompleteRequest(BaseModel):
    """Request model for a completed quiz session."""

    model_config = ConfigDict(populate_by_name=True)

    quiz_type: str = Field(..., alias="quizType", description="flashcard or deck")
    flashcard_id: UUID | None = Field(None, alias="flashcardId")
    deck_id: UUID | None = Field(None, alias="deckId")
    total_questions: int = Field(..., alias="totalQuestions")
    correct_answers: int = Field(..., alias="correctAnswers")


@router.post("/complete", summary="Record a completed quiz")
def complete_quiz(
    request: QuizCompleteRequest,
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    kind = QuizTargetKind.parse(request.quiz_type)
    target_id = request.flashcard_id if kind == QuizTargetKind.CARD else request.deck_id
    if target_id is None:
        field = "flashcardId" if kind == QuizTargetKind.CARD else "deckId"
        raise ValidationError(f"{field} is required for {request.quiz_type} quizzes", field=field)

    aggregate = service.complete_quiz(
        learner_id,
        target_id,
        kind,
        request.correct_answers,
        request.total_questions,
    )
    logger.debug(f"Quiz completion response for {kind.value}={target_id}: {aggregate.last_score}%")
    return {
        "scorePercentage": aggregate.last_score,
        "masteryStatus": aggregate.mastery_status.value if aggregate.mastery_status else None,
        "masteryPercentage": aggregate.mastery_percentage,
        "averageScore": aggregate.average_score,
        "bestScore": aggregate.best_score,
        "timesTaken": aggregate.times_taken,
    }
