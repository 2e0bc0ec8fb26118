"""
Study session router.

Endpoints for opening a study session, logging rated cards into it and
closing it.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from certstudy.api.deps import get_learner_id, get_study_service
from certstudy.study.study_service import StudyService

router = APIRouter()


class SessionCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deck_id: UUID | None = Field(None, alias="deckId")


class SessionCardRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: UUID = Field(..., alias="sessionId")
    flashcard_id: UUID = Field(..., alias="flashcardId")
    confidence_rating: int = Field(..., alias="confidenceRating")
    response_time: int | None = Field(None, alias="responseTime", description="Seconds spent on the card")


class SessionEndRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: UUID = Field(..., alias="sessionId")
    cards_studied: int = Field(..., alias="cardsStudied")


@router.post("/create", summary="Start a study session")
def create_session(
    request: SessionCreateRequest | None = None,
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    deck_id = request.deck_id if request else None
    return service.start_session(learner_id, deck_id).to_dict()


@router.post("/end", summary="End a study session")
def end_session(
    request: SessionEndRequest,
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    return service.end_session(learner_id, request.session_id, request.cards_studied).to_dict()


@router.post("/card", summary="Log a rated card into a session")
def record_session_card(
    request: SessionCardRequest,
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    service.record_session_card(
        learner_id,
        request.session_id,
        request.flashcard_id,
        request.confidence_rating,
        response_time=request.response_time,
    )
    return {"success": True}
