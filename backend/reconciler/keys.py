"""Canonical fixture keys: "{home}_{away}_{YYYY-MM-DD}"."""
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Protocol

_WHITESPACE = re.compile(r"\s+")
_NON_KEY_CHARS = re.compile(r"[^a-z0-9_]")


class MatchLike(Protocol):
    """Anything exposing both team names and a kickoff (Fixture, Prediction, MergedFixture)."""

    @property
    def home_team(self) -> Optional[str]: ...

    @property
    def away_team(self) -> Optional[str]: ...

    @property
    def kickoff(self) -> Optional[datetime]: ...


def normalize_team_key(name: Optional[str]) -> str:
    """Lower-case, drop periods, whitespace runs to "_", drop anything outside [a-z0-9_]."""
    s = (name or "").strip().lower().replace(".", "")
    s = _WHITESPACE.sub("_", s)
    return _NON_KEY_CHARS.sub("", s)


def date_key(kickoff: Optional[datetime]) -> str:
    return kickoff.date().isoformat() if kickoff else ""


def fixture_key(record: MatchLike) -> str:
    """
    Canonical key used for tier-2 matching.

    Missing names or an unparseable date contribute an empty segment, which
    loosens the key rather than failing.
    """
    home = normalize_team_key(record.home_team)
    away = normalize_team_key(record.away_team)
    return f"{home}_{away}_{date_key(record.kickoff)}"
