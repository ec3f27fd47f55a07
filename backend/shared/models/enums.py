"""Domain enumerations for the prediction reconciler."""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


def status_token(value: Any) -> str:
    """Provider status folded to a lower_snake token ("IN-PLAY" -> "in_play"); "" when missing."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    s = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    return "cancelled" if s == "canceled" else s


class FixtureStatus(str, Enum):
    SCHEDULED = "scheduled"
    TIMED = "timed"
    LIVE = "live"
    IN_PLAY = "in_play"
    PAUSED = "paused"
    FINISHED = "finished"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"
    AWARDED = "awarded"

    @classmethod
    def parse(cls, value: Any) -> Optional["FixtureStatus"]:
        """Map provider spellings (IN_PLAY, in-play, "In Play") onto the enum; None if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(status_token(value))
        except ValueError:
            return None


class PredictionStatus(str, Enum):
    PENDING = "pending"
    SCORED = "scored"


class MatchTier(str, Enum):
    """Strategy that associated a fixture with a prediction."""
    IDENTIFIER = "identifier"
    KEY = "key"
    PROXIMITY = "proximity"
    ALIAS = "alias"
    SCORED = "scored"


class IssueScope(str, Enum):
    FIXTURE = "fixture"
    PREDICTION = "prediction"


class ErrorType(str, Enum):
    DATA_MERGE_ERROR = "DATA_MERGE_ERROR"
