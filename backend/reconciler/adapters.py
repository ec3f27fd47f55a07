"""
Input adapters: project provider/store record shapes onto Fixture and Prediction.
The same field may arrive as homeTeam/home/home_team, date/matchDate/utcDate,
or as a nested football-data.org object. Raw records are only read, never mutated.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from shared.models.domain import Fixture, Prediction
from shared.utils.logging import get_logger
from shared.utils.timeutils import to_iso

logger = get_logger(__name__)

HOME_TEAM_KEYS = ("homeTeam", "home_team", "home")
AWAY_TEAM_KEYS = ("awayTeam", "away_team", "away")
DATE_KEYS = ("date", "matchDate", "match_date", "utcDate", "kickoff")
MATCH_ID_KEYS = ("matchId", "match_id", "fixtureId", "fixture_id")


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    """First present, non-empty value among keys."""
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _safe_int(val: Any) -> Optional[int]:
    if val is None or val == "":
        return None
    try:
        return int(val)
    except (ValueError, TypeError):
        return None


def _score(val: Any) -> tuple[Optional[int], bool]:
    """(score, invalid): whole numbers pass, anything else present is flagged rather than coerced."""
    if val is None or val == "":
        return None, False
    if isinstance(val, bool):
        return None, True
    if isinstance(val, int):
        return val, False
    if isinstance(val, str):
        try:
            return int(val.strip()), False
        except ValueError:
            try:
                val = float(val)
            except ValueError:
                return None, True
    if isinstance(val, float) and val.is_integer():
        return int(val), False
    return None, True


def _as_id(val: Any) -> Optional[str]:
    if val is None or val == "":
        return None
    return str(val)


def _team_name(val: Any) -> Optional[str]:
    """Flatten a team or venue value; football-data objects prefer shortName over name."""
    if val is None:
        return None
    if isinstance(val, Mapping):
        name = val.get("shortName") or val.get("name")
        return str(name) if name else None
    s = str(val).strip()
    return s or None


def _names(val: Any) -> list[str]:
    if not val:
        return []
    out: list[str] = []
    for item in val:
        if isinstance(item, Mapping):
            item = item.get("name")
        if item:
            out.append(str(item))
    return out


def _optional_names(val: Any) -> Optional[list[str]]:
    if val is None:
        return None
    return _names(val)


def _referee(record: Mapping[str, Any]) -> Optional[str]:
    ref = record.get("referee")
    if ref:
        return _team_name(ref)
    for official in record.get("referees") or []:
        if isinstance(official, Mapping) and official.get("type", "REFEREE") == "REFEREE" and official.get("name"):
            return str(official["name"])
    return None


def _scores(record: Mapping[str, Any]) -> tuple[Any, Any]:
    """Raw (home, away) score values from flat keys or a nested score object."""
    home = _first(record, "homeScore", "home_score")
    away = _first(record, "awayScore", "away_score")
    if home is not None or away is not None:
        return home, away
    score = record.get("score")
    if isinstance(score, Mapping):
        full_time = score.get("fullTime") if isinstance(score.get("fullTime"), Mapping) else score
        return full_time.get("home"), full_time.get("away")
    return None, None


def fixture_from_raw(record: Any) -> Fixture:
    """Build a Fixture from a provider record (dict) or pass a Fixture through."""
    if isinstance(record, Fixture):
        return record
    if not isinstance(record, Mapping):
        raise TypeError(f"fixture record must be a mapping, got {type(record).__name__}")

    competition = record.get("competition")
    if isinstance(competition, Mapping):
        competition_name = competition.get("name")
        competition_code = _first(record, "competitionCode", "competition_code") or competition.get("code")
    else:
        competition_name = competition
        competition_code = _first(record, "competitionCode", "competition_code")

    home_score, away_score = _scores(record)
    return Fixture(
        id=_as_id(_first(record, "id", "externalId")),
        home_team=_team_name(_first(record, *HOME_TEAM_KEYS)),
        away_team=_team_name(_first(record, *AWAY_TEAM_KEYS)),
        date=to_iso(_first(record, *DATE_KEYS)),
        status=record.get("status"),
        venue=_team_name(_first(record, "venue")),
        referee=_referee(record),
        competition=competition_name or None,
        competition_code=competition_code,
        gameweek=_safe_int(_first(record, "gameweek", "matchday", "round")),
        home_score=_safe_int(home_score),
        away_score=_safe_int(away_score),
        source=_first(record, "source"),
    )


def prediction_from_raw(record: Any) -> Prediction:
    """Build a Prediction from a prediction-store record (dict) or pass a Prediction through."""
    if isinstance(record, Prediction):
        return record
    if not isinstance(record, Mapping):
        raise TypeError(f"prediction record must be a mapping, got {type(record).__name__}")

    home_raw, away_raw = _scores(record)
    home_score, home_invalid = _score(home_raw)
    away_score, away_invalid = _score(away_raw)
    invalid = [side for side, bad in (("home", home_invalid), ("away", away_invalid)) if bad]
    return Prediction(
        id=_as_id(record.get("id")),
        match_id=_as_id(_first(record, *MATCH_ID_KEYS)),
        home_team=_team_name(_first(record, *HOME_TEAM_KEYS)),
        away_team=_team_name(_first(record, *AWAY_TEAM_KEYS)),
        date=to_iso(_first(record, *DATE_KEYS)),
        home_score=home_score,
        away_score=away_score,
        invalid_scores=invalid,
        home_scorers=_names(_first(record, "homeScorers", "home_scorers")),
        away_scorers=_names(_first(record, "awayScorers", "away_scorers")),
        chips=[str(c) for c in (record.get("chips") or [])],
        submitted_at=to_iso(_first(record, "submittedAt", "submitted_at")),
        status=record.get("status"),
        actual_home_scorers=_optional_names(_first(record, "actualHomeScorers", "actual_home_scorers")),
        actual_away_scorers=_optional_names(_first(record, "actualAwayScorers", "actual_away_scorers")),
    )


def _as_sequence(records: Any, label: str) -> list[Any]:
    if records is None:
        return []
    if isinstance(records, (list, tuple)):
        return list(records)
    logger.warning("adapter_input_not_a_list", input=label, received=type(records).__name__)
    return []


def adapt_fixtures(records: Optional[Iterable[Any]]) -> list[Fixture]:
    return [fixture_from_raw(r) for r in _as_sequence(records, "fixtures")]


def adapt_predictions(records: Optional[Iterable[Any]]) -> list[Prediction]:
    return [prediction_from_raw(r) for r in _as_sequence(records, "predictions")]
