"""
Application configuration settings.
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, Literal, Self


# Tolerance for floating-point ratio summation checks
_RATIO_SUM_TOLERANCE = 1e-6

_DIFFICULTY_KEYS = {"easy", "medium", "hard"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Simulation Builder"
    APP_VERSION: str = "0.1.0"
    ENV: Literal["development", "test", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    # The engine only reads; the surrounding application owns migrations.
    DATABASE_URL: str = "sqlite:///./simulation_builder.db"
    DB_POOL_PRE_PING: bool = True

    # Smart random selection
    # Candidates fetched per bucket = target count * factor, leaving room for
    # shuffling and topic interleaving before truncation.
    SELECTION_OVERFETCH_FACTOR: int = Field(
        default=3,
        ge=1,
        description="Multiplier applied to each bucket target when fetching candidates",
    )
    SELECTION_DEFAULT_DIFFICULTY_MIX: str = "BALANCED"
    # Named difficulty mixes. Keys are matched case-insensitively by the resolver.
    SELECTION_DIFFICULTY_PRESETS: Dict[str, Dict[str, float]] = {
        "BALANCED": {"easy": 0.30, "medium": 0.50, "hard": 0.20},
        "EASY_FOCUS": {"easy": 0.50, "medium": 0.40, "hard": 0.10},
        "HARD_FOCUS": {"easy": 0.10, "medium": 0.40, "hard": 0.50},
        "MEDIUM_ONLY": {"easy": 0.0, "medium": 1.0, "hard": 0.0},
        "MIXED": {"easy": 0.33, "medium": 0.34, "hard": 0.33},
    }

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env not defined in Settings
    )

    @model_validator(mode="after")
    def validate_difficulty_presets(self) -> Self:
        """Validate SELECTION_DIFFICULTY_PRESETS: easy/medium/hard ratios summing to 1.0."""
        for name, ratios in self.SELECTION_DIFFICULTY_PRESETS.items():
            if set(ratios.keys()) != _DIFFICULTY_KEYS:
                raise ValueError(
                    f"Difficulty preset {name!r} keys must be {sorted(_DIFFICULTY_KEYS)}, "
                    f"got {sorted(ratios.keys())}"
                )
            negative = [k for k, v in ratios.items() if v < 0]
            if negative:
                raise ValueError(
                    f"Difficulty preset {name!r} has negative ratios: {negative}"
                )
            total = sum(ratios.values())
            if abs(total - 1.0) > _RATIO_SUM_TOLERANCE:
                raise ValueError(
                    f"Difficulty preset {name!r} must sum to 1.0, got {total}"
                )
        return self

    @model_validator(mode="after")
    def validate_default_difficulty_mix(self) -> Self:
        """The default mix must name one of the configured presets."""
        known = {name.upper() for name in self.SELECTION_DIFFICULTY_PRESETS}
        if self.SELECTION_DEFAULT_DIFFICULTY_MIX.upper() not in known:
            raise ValueError(
                f"SELECTION_DEFAULT_DIFFICULTY_MIX must be one of {sorted(known)}, "
                f"got {self.SELECTION_DEFAULT_DIFFICULTY_MIX!r}"
            )
        return self


settings = Settings()
