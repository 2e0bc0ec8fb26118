"""
Progress router.

Endpoints for:
- Saving a confidence rating (optionally inside a study session)
- Reading one card's mastery snapshot
- Per-deck and per-class progress summaries
- Lifetime study stats (totals and day streak)
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from certstudy.api.deps import get_learner_id, get_study_service
from certstudy.study.study_service import StudyService

router = APIRouter()


# ========================================
# Request Models
# ========================================


class CardRatingRequest(BaseModel):
    """Request model for a confidence rating."""

    model_config = ConfigDict(populate_by_name=True)

    flashcard_id: UUID = Field(..., alias="flashcardId")
    confidence_level: int = Field(..., alias="confidenceLevel", description="1 (no idea) to 5 (certain)")
    session_id: UUID | None = Field(None, alias="sessionId")


# ========================================
# Endpoints
# ========================================


@router.post("/card", summary="Save a confidence rating")
def save_card_progress(
    request: CardRatingRequest,
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    snapshot = service.rate_card(
        learner_id,
        request.flashcard_id,
        request.confidence_level,
        session_id=request.session_id,
    )
    return snapshot.to_dict()


@router.get("/card", summary="Get a card's mastery snapshot")
def get_card_progress(
    flashcard_id: UUID = Query(..., alias="flashcardId"),
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any] | None:
    """Snapshot for the card, or null when the learner has never rated it."""
    snapshot = service.get_card_progress(learner_id, flashcard_id)
    return snapshot.to_dict() if snapshot else None


@router.get("/decks/{deck_id}", summary="Get deck progress")
def get_deck_progress(
    deck_id: UUID,
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    return service.get_deck_progress(learner_id, deck_id).to_dict()


@router.get("/classes/{class_id}", summary="Get class progress")
def get_class_progress(
    class_id: UUID,
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    """Class-wide counts plus studied counts for each published deck."""
    return service.get_class_progress(learner_id, class_id).to_dict()


@router.get("/stats", summary="Get lifetime study stats")
def get_learner_stats(
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    return service.get_learner_stats(learner_id).to_dict()
