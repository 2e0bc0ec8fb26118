"""
Configuration settings for the certstudy engine.

Uses Pydantic Settings for environment variable management with .env file support.
Every setting can be overridden with a ``CERTSTUDY_`` prefixed environment variable.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CERTSTUDY_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///./certstudy.db",
        description="SQLAlchemy connection string (PostgreSQL in production)",
    )
    upsert_max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts for a progress upsert that races another first insert",
    )

    # ========================================
    # Study Selection
    # ========================================
    default_study_mode: Literal["progressive", "random", "all"] = Field(
        default="progressive",
        description="Mode used when a study request does not name one",
    )
    progressive_confidence_threshold: int = Field(
        default=4,
        ge=1,
        le=6,
        description="Rated cards below this confidence stay in progressive sessions",
    )

    # ========================================
    # Quiz Mastery Thresholds (percentages)
    # ========================================
    quiz_mastered_average: float = Field(
        default=80.0,
        description="Minimum cumulative average for 'mastered'",
    )
    quiz_mastered_best: float = Field(
        default=90.0,
        description="Minimum best session score for 'mastered'",
    )
    quiz_learning_average: float = Field(
        default=60.0,
        description="Cumulative average that is enough for 'learning'",
    )
    quiz_learning_best: float = Field(
        default=70.0,
        description="Best session score that is enough for 'learning'",
    )

    # ========================================
    # Review Scheduling
    # ========================================
    schedule_next_review: bool = Field(
        default=True,
        description="Derive next_review_due from the confidence level when a rating is saved",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )

    def get_quiz_thresholds(self):
        """Build the quiz mastery thresholds from the configured percentages."""
        from certstudy.core.mastery import QuizMasteryThresholds

        return QuizMasteryThresholds(
            mastered_average=self.quiz_mastered_average,
            mastered_best=self.quiz_mastered_best,
            learning_average=self.quiz_learning_average,
            learning_best=self.quiz_learning_best,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
