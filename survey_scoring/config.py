"""Application configuration with validation."""
from typing import Optional, Literal
from functools import lru_cache
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Scoring engine settings, read from the environment or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Survey Scoring Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # Scoring
    UNKNOWN_BAND_LABEL: str = Field(
        default="Unknown",
        min_length=1,
        description="Label returned by threshold rules when no band contains the value"
    )
    LOG_RULE_FAILURES: bool = Field(
        default=True,
        description="Emit a warning event for every rule that scores to null"
    )
    SCORE_PRECISION: Optional[int] = Field(
        default=None,
        ge=0,
        le=10,
        description="Decimal places for numeric scores printed by the CLI (None = unrounded)"
    )

    # Analytics
    HIGH_VARIABILITY_CV: float = Field(default=0.5, gt=0, le=10)

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Production runs must not be in debug mode."""
        if self.APP_ENV == "production" and self.DEBUG:
            raise ValueError("DEBUG must be False in production")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
