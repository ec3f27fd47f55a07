"""
Tiered fixture -> prediction matching.

Tiers, cheapest first, stopping at the first success:
    1. identifier   fixture.id == prediction.match_id
    2. key          canonical "{home}_{away}_{date}" keys are equal
    3. proximity    kickoffs within the window, and each fixture team name
                    contains the first token of the prediction's team name
    4. alias        kickoffs within the window, and both sides resolve to the
                    same canonical teams in the alias table
    5. scored       optional; best weighted name/time similarity above a threshold

Tiers 1-4 are first-match-wins: predictions are scanned in input order and the
first one that clears any tier is returned. Tier 5 only runs when tiers 1-4
found nothing for any prediction.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Optional, Sequence

from rapidfuzz import fuzz

from shared.models.domain import Fixture, Prediction
from shared.models.enums import MatchTier
from shared.utils.logging import get_logger

from reconciler.aliases import TeamAliasTable, clean_name
from reconciler.config import ReconcilerSettings, get_reconciler_settings
from reconciler.keys import fixture_key

logger = get_logger(__name__)


def _first_token(name: Optional[str]) -> str:
    parts = (name or "").lower().split()
    return parts[0] if parts else ""


def _has_teams(key: str) -> bool:
    # key is "{home}_{away}_{date}"; a bare "__date" carries no team signal
    return key.rsplit("_", 1)[0].strip("_") != ""


class PredictionMatcher:
    """Finds at most one prediction for a fixture."""

    def __init__(
        self,
        settings: Optional[ReconcilerSettings] = None,
        aliases: Optional[TeamAliasTable] = None,
    ) -> None:
        self._settings = settings or get_reconciler_settings()
        self._aliases = aliases or TeamAliasTable(self._settings.team_aliases)
        self._window = timedelta(hours=self._settings.match_window_hours)

    def find_match(self, fixture: Fixture, predictions: Sequence[Prediction]) -> Optional[Prediction]:
        prediction, _ = self.match_with_tier(fixture, predictions)
        return prediction

    def match_with_tier(
        self,
        fixture: Fixture,
        predictions: Sequence[Prediction],
    ) -> tuple[Optional[Prediction], Optional[MatchTier]]:
        """Return (prediction, tier) for the first prediction clearing any tier, else (None, None)."""
        if not predictions:
            return None, None
        key = fixture_key(fixture)
        for prediction in predictions:
            tier = self.match_tier(fixture, prediction, key)
            if tier is not None:
                return prediction, tier
        if self._settings.fuzzy_fallback_enabled:
            best = self._best_scored(fixture, predictions)
            if best is not None:
                return best, MatchTier.SCORED
        return None, None

    def match_tier(
        self,
        fixture: Fixture,
        prediction: Prediction,
        key: Optional[str] = None,
    ) -> Optional[MatchTier]:
        """Tier (1-4) at which this fixture/prediction pair matches, or None."""
        if fixture.id and prediction.match_id and fixture.id == prediction.match_id:
            return MatchTier.IDENTIFIER

        key = key if key is not None else fixture_key(fixture)
        if _has_teams(key) and key == fixture_key(prediction):
            return MatchTier.KEY

        if not self._within_window(fixture, prediction):
            return None
        if self._partial_names_match(fixture, prediction):
            return MatchTier.PROXIMITY
        if self._aliases.same_team(fixture.home_team, prediction.home_team) and self._aliases.same_team(
            fixture.away_team, prediction.away_team
        ):
            return MatchTier.ALIAS
        return None

    # ── Tier helpers ────────────────────────────────────────────────────

    def _time_gap(self, fixture: Fixture, prediction: Prediction) -> Optional[timedelta]:
        a, b = fixture.kickoff, prediction.kickoff
        if a is None or b is None:
            return None
        return abs(a - b)

    def _within_window(self, fixture: Fixture, prediction: Prediction) -> bool:
        gap = self._time_gap(fixture, prediction)
        return gap is not None and gap <= self._window

    @staticmethod
    def _partial_names_match(fixture: Fixture, prediction: Prediction) -> bool:
        home_token = _first_token(prediction.home_team)
        away_token = _first_token(prediction.away_team)
        if not home_token or not away_token:
            return False
        return (
            home_token in (fixture.home_team or "").lower()
            and away_token in (fixture.away_team or "").lower()
        )

    def _canonical(self, name: Optional[str]) -> str:
        return self._aliases.resolve(name) or clean_name(name)

    def score(self, fixture: Fixture, prediction: Prediction) -> Optional[float]:
        """Weighted 0-100 similarity for the scored tier; None outside the window or without names."""
        gap = self._time_gap(fixture, prediction)
        if gap is None or gap > self._window:
            return None
        names = (fixture.home_team, fixture.away_team, prediction.home_team, prediction.away_team)
        if not all(names):
            return None
        home = fuzz.token_set_ratio(self._canonical(fixture.home_team), self._canonical(prediction.home_team))
        away = fuzz.token_set_ratio(self._canonical(fixture.away_team), self._canonical(prediction.away_team))
        window_s = self._window.total_seconds()
        proximity = 100.0 if window_s == 0 else 100.0 * (1.0 - gap.total_seconds() / window_s)
        w = self._settings.fuzzy_name_weight
        return w * (home + away) / 2.0 + (1.0 - w) * proximity

    def _best_scored(self, fixture: Fixture, predictions: Sequence[Prediction]) -> Optional[Prediction]:
        best: Optional[Prediction] = None
        best_score = self._settings.fuzzy_threshold
        for prediction in predictions:
            s = self.score(fixture, prediction)
            if s is None:
                continue
            # Strictly better wins, so ties keep input order
            if s > best_score or (best is None and s >= best_score):
                best, best_score = prediction, s
        if best is not None:
            logger.debug(
                "scored_fallback_match",
                fixture_id=fixture.id,
                prediction_id=best.id,
                score=round(best_score, 2),
            )
        return best
