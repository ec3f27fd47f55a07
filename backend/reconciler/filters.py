"""Post-merge filtering of MergedFixture records. All criteria are optional and ANDed."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pydantic import field_validator

from shared.models.domain import DomainModel, MergedFixture
from shared.models.enums import status_token
from shared.utils.timeutils import parse_kickoff


class FixtureFilters(DomainModel):
    competition: Optional[str] = None
    predicted: Optional[bool] = None
    status: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    teams: Optional[list[str]] = None
    gameweek: Optional[int] = None

    @field_validator("status", mode="before")
    @classmethod
    def _status_token(cls, v: Any) -> Optional[str]:
        # Kept as a token so provider-specific statuses filter too; unknown ones match nothing
        return status_token(v) or None

    @field_validator("date_from", "date_to", mode="before")
    @classmethod
    def _parse_bound(cls, v: Any) -> Optional[datetime]:
        if v is None or v == "":
            return None
        parsed = parse_kickoff(v)
        if parsed is None:
            raise ValueError(f"unparseable date bound: {v!r}")
        return parsed

    @property
    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


def _competition_matches(fixture: MergedFixture, competition: str) -> bool:
    name = (fixture.competition or "").lower()
    return competition.lower() in name or fixture.competition_code == competition


def _team_matches(fixture: MergedFixture, teams: Sequence[str]) -> bool:
    home = (fixture.home_team or "").lower()
    away = (fixture.away_team or "").lower()
    return any(t.lower() in home or t.lower() in away for t in teams)


def filter_fixtures(fixtures: Sequence[MergedFixture], filters: Optional[FixtureFilters]) -> list[MergedFixture]:
    """Return the records that satisfy every set criterion, preserving order."""
    result = list(fixtures)
    if filters is None or filters.is_empty:
        return result

    if filters.competition:
        result = [f for f in result if _competition_matches(f, filters.competition)]
    if filters.predicted is not None:
        result = [f for f in result if f.predicted == filters.predicted]
    if filters.status is not None:
        result = [f for f in result if f.status_key == filters.status]
    # Records without a parseable kickoff cannot satisfy a date bound
    if filters.date_from is not None:
        result = [f for f in result if f.kickoff is not None and f.kickoff >= filters.date_from]
    if filters.date_to is not None:
        result = [f for f in result if f.kickoff is not None and f.kickoff <= filters.date_to]
    if filters.teams:
        result = [f for f in result if _team_matches(f, filters.teams)]
    if filters.gameweek is not None:
        result = [f for f in result if f.gameweek == filters.gameweek]
    return result
