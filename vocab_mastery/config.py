"""
Configuration settings for vocab-mastery.

Uses Pydantic Settings for environment variable management with .env file support.
Every variable is prefixed with ``VOCAB_MASTERY_`` (e.g. ``VOCAB_MASTERY_DATABASE_URL``).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vocab_mastery.core.intervals import IntervalPolicy
from vocab_mastery.rewards.calculator import RewardPolicy

DEFAULT_DB_PATH = Path.home() / ".vocab_mastery" / "mastery.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="VOCAB_MASTERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default=f"sqlite:///{DEFAULT_DB_PATH}",
        description="SQLAlchemy connection string (sqlite or postgresql)",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional rotating log file path",
    )

    # ========================================
    # Scheduling
    # ========================================
    review_intervals_days: list[int] = Field(
        default=[1, 3, 7, 14, 30],
        description="Review interval table, indexed by streak",
    )
    failure_review_hours: int = Field(
        default=4,
        description="Hours until an item answered wrongly is shown again",
    )
    max_distractors: int = Field(
        default=3,
        description="Distractors per review exercise",
    )
    review_session_limit: int | None = Field(
        default=None,
        description="Maximum exercises per review session (None = all due items)",
    )

    # ========================================
    # Grading & Rewards
    # ========================================
    speak_repeat_threshold: float = Field(
        default=0.7,
        description="Minimum transcript similarity for a speak-repeat answer to count",
    )
    review_base_xp: int = Field(
        default=10,
        description="Base XP for review-only sessions",
    )

    # ========================================
    # Progress API
    # ========================================
    progress_api_url: str | None = Field(
        default=None,
        description="Base URL of the progress persistence service",
    )
    progress_api_key: str | None = Field(
        default=None,
        description="API key sent as X-API-Key to the progress service",
    )
    progress_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout for progress uploads",
    )

    @field_validator("review_intervals_days")
    @classmethod
    def _intervals_positive(cls, value: list[int]) -> list[int]:
        if not value or any(days <= 0 for days in value):
            raise ValueError("review_intervals_days must be a non-empty list of positive integers")
        return value

    @field_validator("review_base_xp", "failure_review_hours")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    def has_progress_api_configured(self) -> bool:
        """Check if session summaries should be uploaded."""
        return bool(self.progress_api_url)

    def get_interval_policy(self) -> IntervalPolicy:
        """Build the interval policy from the configured table."""
        return IntervalPolicy(
            table=tuple(self.review_intervals_days),
            failure_offset_hours=self.failure_review_hours,
        )

    def get_reward_policy(self) -> RewardPolicy:
        """Build the reward policy with the configured review base XP."""
        return RewardPolicy(review_base_xp=self.review_base_xp)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
