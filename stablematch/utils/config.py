"""
Configuration management for stablematch.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stablematch.utils.constants import (
    ALLOWED_INSIGHT_ALGORITHMS,
    DEFAULT_RUN_COUNT_PER_ALGO,
)


class MatchingSettings(BaseSettings):
    """Problem construction configuration."""

    model_config = SettingsConfigDict(env_prefix="MATCHING_")

    # Reject individuals that score every candidate identically
    reject_uniform_preferences: bool = True

    # Reject fitness functions that ignore every satisfaction value
    reject_uniform_fitness: bool = True


class SolverSettings(BaseSettings):
    """Reference search driver configuration."""

    model_config = SettingsConfigDict(env_prefix="SOLVER_")

    population_size: int = Field(default=50, ge=2)
    generations: int = Field(default=40, ge=1)
    run_count: int = Field(default=DEFAULT_RUN_COUNT_PER_ALGO, ge=1)
    algorithms: list[str] = Field(default_factory=lambda: list(ALLOWED_INSIGHT_ALGORITHMS))

    # Thread pool width for candidate evaluation (1 = sequential)
    max_workers: int = Field(default=1, ge=1)

    seed: Optional[int] = None

    # Variation operator rates
    crossover_rate: float = Field(default=0.9, ge=0.0, le=1.0)
    mutation_rate: float = Field(default=0.1, ge=0.0, le=1.0)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Optional[Path] = None
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept lower-case level names from the environment."""
        return v.upper() if isinstance(v, str) else v


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "stablematch"
    version: str = "0.1.0"
    description: str = "Generalized stable matching engine"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    solver: SolverSettings = Field(default_factory=SolverSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings
