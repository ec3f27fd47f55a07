"""
Unit tests for tiered fixture -> prediction matching.

Run: pytest backend/tests/test_matcher.py -v
"""
from __future__ import annotations

import pytest

from shared.models.domain import Fixture, Prediction
from shared.models.enums import MatchTier
from reconciler.aliases import TeamAliasTable
from reconciler.config import ReconcilerSettings
from reconciler.matcher import PredictionMatcher


@pytest.fixture
def matcher() -> PredictionMatcher:
    return PredictionMatcher(ReconcilerSettings())


@pytest.fixture
def fuzzy_matcher() -> PredictionMatcher:
    return PredictionMatcher(ReconcilerSettings(fuzzy_fallback_enabled=True))


# ── Tier 1: identifier ──────────────────────────────────────────────────

def test_identifier_match_scenario_a(matcher: PredictionMatcher) -> None:
    fixture = Fixture(id=1, home_team="Arsenal", away_team="Chelsea", date="2025-01-15T15:00:00Z")
    prediction = Prediction(id=10, match_id=1, home_score=2, away_score=1)
    found, tier = matcher.match_with_tier(fixture, [prediction])
    assert found is prediction
    assert tier == MatchTier.IDENTIFIER


def test_identifier_match_ignores_team_names(matcher: PredictionMatcher) -> None:
    fixture = Fixture(id=1, home_team="Man. City", away_team="Chelsea", date="2025-01-15T15:00:00Z")
    prediction = Prediction(id=10, match_id="1", home_team="Something Else", away_team="Entirely")
    assert matcher.match_tier(fixture, prediction) == MatchTier.IDENTIFIER


def test_identifier_requires_both_ids(matcher: PredictionMatcher) -> None:
    fixture = Fixture(home_team="Arsenal", away_team="Chelsea")
    prediction = Prediction(id=10, home_team="Everton", away_team="Fulham")
    assert matcher.match_tier(fixture, prediction) is None


# ── Tier 2: key ─────────────────────────────────────────────────────────

def test_key_match_with_stale_match_id(matcher: PredictionMatcher) -> None:
    fixture = Fixture(id=5, home_team="Aston Villa", away_team="Everton", date="2025-03-01T12:30:00Z")
    prediction = Prediction(id=20, match_id=999, home_team="aston villa", away_team="Everton.", date="2025-03-01T20:00:00Z")
    assert matcher.match_tier(fixture, prediction) == MatchTier.KEY


def test_empty_records_do_not_match_on_degenerate_key(matcher: PredictionMatcher) -> None:
    assert matcher.find_match(Fixture(), [Prediction(id=1)]) is None


# ── Tier 3: proximity + partial name ────────────────────────────────────

def test_proximity_first_token_match(matcher: PredictionMatcher) -> None:
    fixture = Fixture(id=7, home_team="Manchester United", away_team="Newcastle United", date="2025-02-01T15:00:00Z")
    prediction = Prediction(id=30, home_team="Manchester Utd", away_team="Newcastle", date="2025-02-01T18:00:00Z")
    assert matcher.match_tier(fixture, prediction) == MatchTier.PROXIMITY


def test_proximity_outside_window(matcher: PredictionMatcher) -> None:
    fixture = Fixture(id=7, home_team="Manchester United", away_team="Newcastle United", date="2025-02-01T15:00:00Z")
    prediction = Prediction(id=30, home_team="Manchester Utd", away_team="Newcastle", date="2025-02-02T21:00:00Z")
    assert matcher.match_tier(fixture, prediction) is None


def test_window_boundary_is_inclusive(matcher: PredictionMatcher) -> None:
    fixture = Fixture(home_team="Brentford", away_team="Fulham", date="2025-02-01T15:00:00Z")
    prediction = Prediction(home_team="Brentford FC", away_team="Fulham FC", date="2025-02-02T15:00:00Z")
    assert matcher.match_tier(fixture, prediction) == MatchTier.PROXIMITY


def test_proximity_needs_both_dates(matcher: PredictionMatcher) -> None:
    fixture = Fixture(home_team="Brentford", away_team="Fulham", date="2025-02-01T15:00:00Z")
    prediction = Prediction(home_team="Brentford FC", away_team="Fulham FC")
    assert matcher.match_tier(fixture, prediction) is None


def test_empty_prediction_names_never_match_by_proximity(matcher: PredictionMatcher) -> None:
    fixture = Fixture(home_team="Brentford", away_team="Fulham", date="2025-02-01T15:00:00Z")
    prediction = Prediction(home_team="", away_team="", date="2025-02-01T15:00:00Z")
    assert matcher.match_tier(fixture, prediction) is None


# ── Tier 4: alias ───────────────────────────────────────────────────────

def test_alias_match_scenario_b(matcher: PredictionMatcher) -> None:
    fixture = Fixture(id=2, home_team="Tottenham", away_team="Liverpool", date="2025-02-01T15:00:00Z")
    prediction = Prediction(
        id=11, home_team="Spurs", away_team="Liverpool", date="2025-02-01T14:00:00Z", home_score=1, away_score=1
    )
    found, tier = matcher.match_with_tier(fixture, [prediction])
    assert found is prediction
    assert tier == MatchTier.ALIAS


def test_alias_requires_both_sides_to_resolve(matcher: PredictionMatcher) -> None:
    fixture = Fixture(home_team="Tottenham", away_team="Everton", date="2025-02-01T15:00:00Z")
    prediction = Prediction(home_team="Spurs", away_team="Toffees", date="2025-02-01T15:00:00Z")
    assert matcher.match_tier(fixture, prediction) is None


def test_injected_alias_table() -> None:
    aliases = TeamAliasTable({"everton": ["everton", "toffees"], "tottenham": ["tottenham", "spurs"]})
    matcher = PredictionMatcher(ReconcilerSettings(), aliases=aliases)
    fixture = Fixture(home_team="Tottenham", away_team="Everton", date="2025-02-01T15:00:00Z")
    prediction = Prediction(home_team="Spurs", away_team="Toffees", date="2025-02-01T15:00:00Z")
    assert matcher.match_tier(fixture, prediction) == MatchTier.ALIAS


def test_configured_window() -> None:
    matcher = PredictionMatcher(ReconcilerSettings(match_window_hours=0.5))
    fixture = Fixture(id=2, home_team="Tottenham", away_team="Liverpool", date="2025-02-01T15:00:00Z")
    prediction = Prediction(id=11, home_team="Spurs", away_team="Liverpool", date="2025-02-01T14:00:00Z")
    assert matcher.match_tier(fixture, prediction) is None


# ── Tie-break ───────────────────────────────────────────────────────────

def test_first_prediction_in_input_order_wins(matcher: PredictionMatcher) -> None:
    fixture = Fixture(id=3, home_team="Arsenal", away_team="Chelsea", date="2025-01-15T15:00:00Z")
    loose = Prediction(id=1, home_team="Arsenal FC", away_team="Chelsea FC", date="2025-01-15T13:00:00Z")
    exact = Prediction(id=2, match_id=3)
    found, tier = matcher.match_with_tier(fixture, [loose, exact])
    assert found is loose
    assert tier == MatchTier.PROXIMITY


def test_no_predictions(matcher: PredictionMatcher) -> None:
    fixture = Fixture(id=3, home_team="Arsenal", away_team="Chelsea", date="2025-01-15T15:00:00Z")
    assert matcher.match_with_tier(fixture, []) == (None, None)


# ── Tier 5: scored fallback ─────────────────────────────────────────────

class TestScoredFallback:

    fixture = Fixture(id=8, home_team="Nottingham Forest", away_team="Fulham", date="2025-04-05T14:00:00Z")
    variant = Prediction(id=40, home_team="Notts Forest", away_team="Fulham", date="2025-04-05T16:00:00Z")

    def test_disabled_by_default(self, matcher: PredictionMatcher) -> None:
        assert matcher.find_match(self.fixture, [self.variant]) is None

    def test_accepts_close_spelling(self, fuzzy_matcher: PredictionMatcher) -> None:
        found, tier = fuzzy_matcher.match_with_tier(self.fixture, [self.variant])
        assert found is self.variant
        assert tier == MatchTier.SCORED

    def test_rejects_below_threshold(self, fuzzy_matcher: PredictionMatcher) -> None:
        other = Prediction(id=41, home_team="Leeds United", away_team="Fulham", date="2025-04-05T16:00:00Z")
        assert fuzzy_matcher.find_match(self.fixture, [other]) is None

    def test_picks_best_candidate_not_first(self, fuzzy_matcher: PredictionMatcher) -> None:
        far = Prediction(id=42, home_team="Notts Forest", away_team="Fulham", date="2025-04-05T20:00:00Z")
        found = fuzzy_matcher.find_match(self.fixture, [far, self.variant])
        assert found is self.variant

    def test_score_none_outside_window(self, fuzzy_matcher: PredictionMatcher) -> None:
        late = Prediction(id=43, home_team="Notts Forest", away_team="Fulham", date="2025-04-09T16:00:00Z")
        assert fuzzy_matcher.score(self.fixture, late) is None

    def test_score_is_bounded(self, fuzzy_matcher: PredictionMatcher) -> None:
        s = fuzzy_matcher.score(self.fixture, self.variant)
        assert s is not None
        assert 0.0 <= s <= 100.0
