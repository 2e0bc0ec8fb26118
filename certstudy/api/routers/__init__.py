"""API routers for the certstudy engine."""

from certstudy.api.routers import (
    progress_router,
    quiz_router,
    sessions_router,
    study_router,
)

__all__ = [
    "study_router",
    "progress_router",
    "quiz_router",
    "sessions_router",
]
