"""
Study router.

Endpoints for:
- Ordered study cards for a class (optionally a subset of its decks)
- Ordered study cards for a single deck
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from certstudy.api.deps import get_learner_id, get_study_service
from certstudy.core.errors import ValidationError
from certstudy.core.models import StudyScope
from certstudy.study.study_service import StudyService

router = APIRouter()


def _parse_deck_ids(decks: str | None) -> list[UUID]:
    """Parse a comma-separated ``decks`` query value."""
    if not decks:
        return []
    deck_ids = []
    for raw in decks.split(","):
        raw = raw.strip()
        if not raw:
            continue
        try:
            deck_ids.append(UUID(raw))
        except ValueError:
            raise ValidationError(f"invalid deck id: {raw!r}", field="decks", value=raw) from None
    return deck_ids


@router.get("/classes/{class_id}/study", summary="Study cards for a class")
def get_class_study_cards(
    class_id: UUID,
    mode: str | None = Query(None, description="progressive, random or all"),
    decks: str | None = Query(None, description="Comma-separated deck ids to restrict to"),
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    """
    Ordered cards for a class.

    Omitting ``mode`` uses the configured default; an unknown mode studies all cards.
    """
    scope = StudyScope.for_class(class_id, _parse_deck_ids(decks))
    selection = service.get_study_cards(learner_id, scope, mode)
    result = selection.to_dict()
    result["className"] = selection.scope_name
    return result


@router.get("/decks/{deck_id}/study", summary="Study cards for a deck")
def get_deck_study_cards(
    deck_id: UUID,
    mode: str | None = Query(None, description="progressive, random or all"),
    learner_id: str = Depends(get_learner_id),
    service: StudyService = Depends(get_study_service),
) -> dict[str, Any]:
    """Ordered cards for one published deck."""
    selection = service.get_study_cards(learner_id, StudyScope.for_deck(deck_id), mode)
    result = selection.to_dict()
    result["deckName"] = selection.scope_name
    return result
