"""
Reconciler configuration.
Uses PR_RECONCILER_ prefix; the alias table and match window live here so they
can change without touching matching logic.
"""
from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TEAM_ALIASES: dict[str, list[str]] = {
    "chelsea": ["chelsea", "chelsea fc"],
    "arsenal": ["arsenal", "arsenal fc"],
    "liverpool": ["liverpool", "liverpool fc"],
    "tottenham": ["tottenham", "tottenham hotspur", "spurs"],
    "manchester city": ["manchester city", "man city", "man. city"],
    "manchester united": ["manchester united", "man united", "man utd", "man. utd"],
}


class ReconcilerSettings(BaseSettings):
    """Matching and merge defaults for the reconciliation engine."""

    model_config = SettingsConfigDict(
        env_prefix="PR_RECONCILER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Matching window for proximity/alias/scored tiers
    match_window_hours: float = Field(default=24.0, description="Max kickoff gap for name-based tiers")

    # Canonical team -> aliases (JSON in env)
    team_aliases: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_TEAM_ALIASES.items()},
        description="Canonical team name mapped to the spellings that resolve to it",
    )

    # Scored fallback (lowest tier), off by default
    fuzzy_fallback_enabled: bool = Field(default=False, description="Rank remaining candidates by similarity")
    fuzzy_threshold: float = Field(default=80.0, description="Minimum combined score (0-100) to accept")
    fuzzy_name_weight: float = Field(default=0.8, description="Weight of name similarity; rest is time proximity")

    # Source labels stamped on merged records
    default_fixture_source: str = "external-api"
    default_prediction_source: str = "backend-api"

    @field_validator("match_window_hours")
    @classmethod
    def _positive_window(cls, v: float) -> float:
        if v < 0:
            raise ValueError("match_window_hours must be >= 0")
        return v

    @field_validator("fuzzy_name_weight")
    @classmethod
    def _unit_weight(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("fuzzy_name_weight must be within [0, 1]")
        return v


def get_reconciler_settings() -> ReconcilerSettings:
    """Load reconciler settings from env / .env."""
    return ReconcilerSettings()
