"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="SceneSleuth", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_language: str = Field(default="en-US", alias="TMDB_LANGUAGE")
    catalog_timeout_seconds: float = Field(
        default=8.0, alias="CATALOG_TIMEOUT", gt=0, le=60
    )

    openrouter_api_key: str | None = Field(
        default=None, alias="OPENROUTER_API_KEY"
    )
    openrouter_model: str = Field(
        default="google/gemini-2.5-flash-lite", alias="OPENROUTER_MODEL"
    )
    openrouter_api_url: HttpUrl = Field(
        default="https://openrouter.ai/api/v1", alias="OPENROUTER_API_URL"
    )
    inference_timeout_seconds: float = Field(
        default=20.0, alias="INFERENCE_TIMEOUT", gt=0, le=120
    )

    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES", ge=1
    )
    max_queries: int = Field(default=8, alias="MAX_QUERIES", ge=1, le=20)
    candidate_limit: int = Field(default=5, alias="CANDIDATE_LIMIT", ge=1, le=5)

    heuristic_confidence: float = Field(
        default=0.45, alias="HEURISTIC_CONFIDENCE", gt=0, lt=1
    )
    heuristic_low_confidence: float = Field(
        default=0.40, alias="HEURISTIC_LOW_CONFIDENCE", gt=0, lt=1
    )
    confident_indicator_score: int = Field(
        default=2, alias="CONFIDENT_INDICATOR_SCORE", ge=1
    )
    small_image_bytes: int = Field(
        default=500_000, alias="SMALL_IMAGE_BYTES", ge=0
    )

    title_weight: float = Field(default=3.0, alias="TITLE_WEIGHT", ge=0)
    synopsis_weight: float = Field(default=1.0, alias="SYNOPSIS_WEIGHT", ge=0)
    title_match_weight: float = Field(
        default=10.0, alias="TITLE_MATCH_WEIGHT", ge=0
    )
    high_rating_threshold: float = Field(
        default=8.0, alias="HIGH_RATING_THRESHOLD", ge=0, le=10
    )
    high_rating_bonus: float = Field(default=2.0, alias="HIGH_RATING_BONUS", ge=0)
    good_rating_threshold: float = Field(
        default=7.0, alias="GOOD_RATING_THRESHOLD", ge=0, le=10
    )
    good_rating_bonus: float = Field(default=1.0, alias="GOOD_RATING_BONUS", ge=0)

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("tmdb_api_key", "openrouter_api_key", mode="before")
    @classmethod
    def _blank_keys_are_missing(cls, value: object) -> object:
        """Treat blank credentials as absent configuration."""

        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        if value is None:
            return "INFO"
        level = str(value).strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        return level

    @model_validator(mode="after")
    def _check_confidence_bands(self) -> "Settings":
        """Keep the heuristic-only confidence constants ordered."""

        if self.heuristic_low_confidence > self.heuristic_confidence:
            raise ValueError(
                "HEURISTIC_LOW_CONFIDENCE must not exceed HEURISTIC_CONFIDENCE"
            )
        if self.good_rating_threshold > self.high_rating_threshold:
            raise ValueError(
                "GOOD_RATING_THRESHOLD must not exceed HIGH_RATING_THRESHOLD"
            )
        return self

    @property
    def inference_configured(self) -> bool:
        """Return whether an inference credential is available."""

        return bool(self.openrouter_api_key)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
