"""
Pydantic v2 domain models for the prediction reconciler.
Field names are snake_case; serialization uses camelCase aliases for the presentation layer.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from shared.models.enums import ErrorType, FixtureStatus, IssueScope, MatchTier, PredictionStatus, status_token
from shared.utils.timeutils import parse_kickoff, to_iso, utcnow


# ── Base ────────────────────────────────────────────────────────────────
class DomainModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
        coerce_numbers_to_str=True,
    )


# ── Inputs (read-only) ──────────────────────────────────────────────────
class Fixture(DomainModel):
    """A scheduled or completed match as supplied by the fixture provider."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    date: Optional[str] = None
    status: Optional[FixtureStatus] = None
    raw_status: Optional[str] = None
    venue: Optional[str] = None
    referee: Optional[str] = None
    competition: Optional[str] = None
    competition_code: Optional[str] = None
    gameweek: Optional[int] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    source: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _date_as_iso(cls, v: Any) -> Optional[str]:
        return to_iso(v)

    @model_validator(mode="before")
    @classmethod
    def _keep_raw_status(cls, data: Any) -> Any:
        # Statuses outside FixtureStatus still need a key for stats and filters
        if isinstance(data, dict) and "raw_status" not in data and "rawStatus" not in data:
            token = status_token(data.get("status"))
            if token:
                data = {**data, "raw_status": token}
        return data

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v: Any) -> Optional[FixtureStatus]:
        return FixtureStatus.parse(v)

    @property
    def status_key(self) -> Optional[str]:
        """Known status value, else the provider's own status token."""
        if self.status is not None:
            return self.status.value
        return self.raw_status or None

    @property
    def kickoff(self) -> Optional[datetime]:
        return parse_kickoff(self.date)


class Prediction(DomainModel):
    """A user's forecast for one fixture, as stored by the prediction backend."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    match_id: Optional[str] = None
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    date: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    # Sides ("home", "away") whose submitted score was present but not a whole number
    invalid_scores: list[str] = Field(default_factory=list)
    home_scorers: list[str] = Field(default_factory=list)
    away_scorers: list[str] = Field(default_factory=list)
    chips: list[str] = Field(default_factory=list)
    submitted_at: Optional[str] = None
    status: PredictionStatus = PredictionStatus.PENDING
    actual_home_scorers: Optional[list[str]] = None
    actual_away_scorers: Optional[list[str]] = None

    @field_validator("date", "submitted_at", mode="before")
    @classmethod
    def _dates_as_iso(cls, v: Any) -> Optional[str]:
        return to_iso(v)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, v: Any) -> PredictionStatus:
        # Anything the backend reports other than pending means the fixture has been scored.
        if isinstance(v, PredictionStatus):
            return v
        s = str(v or "").strip().lower()
        if s in ("", "pending", "upcoming", "open"):
            return PredictionStatus.PENDING
        return PredictionStatus.SCORED

    @property
    def kickoff(self) -> Optional[datetime]:
        return parse_kickoff(self.date)


# ── Merge output ────────────────────────────────────────────────────────
class PredictionSummary(DomainModel):
    """Display subset of a matched prediction."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    # Sides ("home", "away") whose submitted score was present but not a whole number
    invalid_scores: list[str] = Field(default_factory=list)
    home_scorers: list[str] = Field(default_factory=list)
    away_scorers: list[str] = Field(default_factory=list)
    chips: list[str] = Field(default_factory=list)
    submitted_at: Optional[str] = None
    status: PredictionStatus = PredictionStatus.PENDING
    actual_home_scorers: Optional[list[str]] = None
    actual_away_scorers: Optional[list[str]] = None

    @classmethod
    def from_prediction(cls, prediction: Prediction) -> "PredictionSummary":
        return cls(
            id=prediction.id,
            home_team=prediction.home_team,
            away_team=prediction.away_team,
            home_score=prediction.home_score,
            away_score=prediction.away_score,
            invalid_scores=list(prediction.invalid_scores),
            home_scorers=list(prediction.home_scorers),
            away_scorers=list(prediction.away_scorers),
            chips=list(prediction.chips),
            submitted_at=prediction.submitted_at,
            status=prediction.status,
            actual_home_scorers=_copy_list(prediction.actual_home_scorers),
            actual_away_scorers=_copy_list(prediction.actual_away_scorers),
        )


class MergeInfo(DomainModel):
    model_config = ConfigDict(frozen=True)

    prediction_matched: bool
    fixture_key: str
    match_tier: Optional[MatchTier] = None
    merged_at: datetime = Field(default_factory=utcnow)


class DataSources(DomainModel):
    model_config = ConfigDict(frozen=True)

    fixture: str
    prediction: Optional[str] = None


class MergedFixture(Fixture):
    """A fixture annotated with the user's prediction, if one was found."""
    predicted: bool = False
    user_prediction: Optional[PredictionSummary] = None
    actual_home_scorers: Optional[list[str]] = None
    actual_away_scorers: Optional[list[str]] = None
    merge_info: MergeInfo
    data_sources: Optional[DataSources] = None

    @model_validator(mode="after")
    def _predicted_tracks_summary(self) -> "MergedFixture":
        if self.predicted != (self.user_prediction is not None):
            raise ValueError("predicted must be True exactly when user_prediction is set")
        return self


# ── Stats ───────────────────────────────────────────────────────────────
class BreakdownEntry(DomainModel):
    total: int = 0
    predicted: int = 0
    prediction_rate: float = 0.0


class Stats(DomainModel):
    total: int = 0
    predicted: int = 0
    unpredicted: int = 0
    prediction_rate: float = 0.0
    by_competition: dict[str, BreakdownEntry] = Field(default_factory=dict)
    by_status: dict[str, BreakdownEntry] = Field(default_factory=dict)
    upcoming_predictions: int = 0
    completed_predictions: int = 0


# ── Validation ──────────────────────────────────────────────────────────
class FixtureIssue(DomainModel):
    index: int
    fixture_id: Optional[str] = None
    errors: list[str] = Field(default_factory=list)


class PredictionIssue(DomainModel):
    index: int
    fixture_id: Optional[str] = None
    prediction_id: Optional[str] = None
    errors: list[str] = Field(default_factory=list)


class ValidationWarning(DomainModel):
    index: int
    scope: IssueScope = IssueScope.FIXTURE
    fixture_id: Optional[str] = None
    prediction_id: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


class ValidationReport(DomainModel):
    total_fixtures: int = 0
    valid_fixtures: int = 0
    invalid_fixtures: int = 0
    fixture_errors: list[FixtureIssue] = Field(default_factory=list)
    prediction_errors: list[PredictionIssue] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)


# ── Orchestrator result ─────────────────────────────────────────────────
class ProcessMeta(DomainModel):
    total_fixtures: int
    predicted_fixtures: int
    prediction_rate: float
    processed_at: datetime = Field(default_factory=utcnow)
    data_quality: float = 1.0
    is_empty: bool = False


class ProcessData(DomainModel):
    fixtures: list[MergedFixture] = Field(default_factory=list)
    stats: Stats = Field(default_factory=Stats)
    validation: ValidationReport = Field(default_factory=ValidationReport)
    meta: ProcessMeta


class ProcessError(DomainModel):
    message: str
    type: ErrorType = ErrorType.DATA_MERGE_ERROR
    timestamp: datetime = Field(default_factory=utcnow)


class ProcessResult(DomainModel):
    success: bool
    data: Optional[ProcessData] = None
    error: Optional[ProcessError] = None


def _copy_list(values: Optional[list[str]]) -> Optional[list[str]]:
    return list(values) if values is not None else None
