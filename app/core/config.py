"""Application configuration settings."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.schemas.grading import DEFAULT_COURSE_UNITS, ScoreRangePolicy, ScoringScheme


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Transcript Manager"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Database (key-value store of collections)
    DATABASE_URL: str = "sqlite:///./transcripts.db"

    # Upload Settings
    MAX_UPLOAD_SIZE_MB: int = 10
    ALLOWED_EXTENSIONS: list[str] = [".xlsx"]

    # Grading
    COURSE_UNITS: list[str] = list(DEFAULT_COURSE_UNITS)
    SCORING_SCHEME: ScoringScheme = ScoringScheme.CAT_EXAM
    SCORE_RANGE_POLICY: ScoreRangePolicy = ScoreRangePolicy.ACCEPT

    @field_validator("COURSE_UNITS")
    @classmethod
    def validate_course_units(cls, v: list[str]) -> list[str]:
        names = [name.strip() for name in v if name and name.strip()]
        if len(set(names)) != len(names):
            raise ValueError("COURSE_UNITS must not contain duplicate names")
        return names


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
