"""
Application configuration settings.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Self


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Adaptive Screener"
    APP_VERSION: str = "0.1.0"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Adaptive screener termination criteria (~20 minute grade-level screener)
    ADAPTIVE_MAX_QUESTIONS: int = Field(
        default=25, description="Hard cap on questions per session"
    )
    ADAPTIVE_MIN_QUESTIONS: int = Field(
        default=15, description="Questions required before early stopping"
    )
    # Advisory only: callers check elapsed time themselves
    ADAPTIVE_MAX_TIME_MINUTES: int = 20
    ADAPTIVE_TARGET_STANDARD_ERROR: float = Field(
        default=0.30, gt=0.0, le=1.0, description="Stop once SE falls to this"
    )
    ADAPTIVE_REQUIRE_ALL_STRANDS: bool = True
    # Share of required strands that must reach the per-strand minimum
    ADAPTIVE_REQUIRED_COVERAGE: float = Field(default=0.75, gt=0.0, le=1.0)
    ADAPTIVE_MIN_STRANDS_TOUCHED: int = Field(default=3, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env not defined in Settings
    )

    @model_validator(mode="after")
    def validate_question_bounds(self) -> Self:
        """Validate min/max question counts and the time cap."""
        if self.ADAPTIVE_MIN_QUESTIONS <= 0:
            raise ValueError(
                f"ADAPTIVE_MIN_QUESTIONS must be positive, got {self.ADAPTIVE_MIN_QUESTIONS}"
            )
        if self.ADAPTIVE_MIN_QUESTIONS > self.ADAPTIVE_MAX_QUESTIONS:
            raise ValueError(
                "ADAPTIVE_MIN_QUESTIONS must not exceed ADAPTIVE_MAX_QUESTIONS, got "
                f"{self.ADAPTIVE_MIN_QUESTIONS} > {self.ADAPTIVE_MAX_QUESTIONS}"
            )
        if self.ADAPTIVE_MAX_TIME_MINUTES <= 0:
            raise ValueError(
                f"ADAPTIVE_MAX_TIME_MINUTES must be positive, got {self.ADAPTIVE_MAX_TIME_MINUTES}"
            )
        return self


settings = Settings()
