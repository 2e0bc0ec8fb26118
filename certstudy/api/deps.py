"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from certstudy.db.database import get_session
from certstudy.study.study_service import StudyService


def get_learner_id(x_learner_id: str | None = Header(default=None)) -> str:
    """Learner identity from the ``X-Learner-Id`` header."""
    if x_learner_id is None or not x_learner_id.strip():
        raise HTTPException(status_code=401, detail="X-Learner-Id header is required")
    return x_learner_id.strip()


def get_study_service(session: Session = Depends(get_session)) -> StudyService:
    return StudyService(session)
