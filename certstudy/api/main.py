"""
FastAPI application for the certstudy engine.

Provides REST API for:
- Adaptive study card selection (progressive / random / all)
- Confidence ratings and per-card mastery
- Quiz completion aggregates
- Study sessions and deck progress
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from certstudy import __version__
from certstudy.config import get_settings
from certstudy.core.errors import NotFoundError, ValidationError
from certstudy.core.log_config import configure_logging
from certstudy.db.database import get_engine, init_db


def _check_database_health() -> tuple[str, str | None]:
    """
    Check database connectivity.

    Returns:
        Tuple of (status, error_message). Status is "ok" or "error".
    """
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok", None
    except SQLAlchemyError as e:
        return "error", str(e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    logger.info("Starting certstudy API...")
    init_db()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    logger.info("Shutting down certstudy API...")


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.debug(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc), "field": exc.field})


async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Build the FastAPI application with all routers mounted."""
    app = FastAPI(
        title="CertStudy Engine",
        description="""
    Adaptive study scheduling for certification flashcards.

    ## Features

    - **Study**: ordered cards per class or deck in progressive, random or all mode
    - **Progress**: 1-5 confidence ratings with derived mastery and review dates
    - **Quizzes**: rolling per-card and per-deck quiz aggregates
    - **Sessions**: study session durations and day streaks

    Learner endpoints identify the learner with the `X-Learner-Id` header.
    """,
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)

    @app.get("/health", tags=["Health"])
    def health_check() -> dict[str, Any]:
        """Health check with an actual database round trip."""
        db_status, db_error = _check_database_health()
        result: dict[str, Any] = {
            "status": "healthy" if db_status == "ok" else "unhealthy",
            "version": __version__,
            "components": {"database": db_status},
        }
        if db_error:
            result["errors"] = {"database": db_error}
        return result

    # ========================================
    # Mount routers
    # ========================================

    from certstudy.api.routers import (
        progress_router,
        quiz_router,
        sessions_router,
        study_router,
    )

    app.include_router(study_router.router, tags=["Study"])
    app.include_router(progress_router.router, prefix="/progress", tags=["Progress"])
    app.include_router(quiz_router.router, prefix="/quiz-sessions", tags=["Quiz"])
    app.include_router(sessions_router.router, prefix="/sessions", tags=["Sessions"])

    return app


app = create_app()
