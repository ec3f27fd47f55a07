"""
Merge pipeline: run every fixture through the matcher and build MergedFixture records.
O(fixtures x predictions); inputs are read, never mutated.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Optional, Sequence

from pydantic import Field

from shared.models.domain import (
    DataSources,
    DomainModel,
    Fixture,
    MergedFixture,
    MergeInfo,
    Prediction,
    PredictionSummary,
)
from shared.models.enums import MatchTier
from shared.utils.logging import get_logger
from shared.utils.metrics import MATCH_TIER_HITS, UNMATCHED_FIXTURES
from shared.utils.timeutils import utcnow

from reconciler.config import ReconcilerSettings, get_reconciler_settings
from reconciler.filters import FixtureFilters
from reconciler.keys import fixture_key
from reconciler.matcher import PredictionMatcher

logger = get_logger(__name__)


class MergeOptions(DomainModel):
    include_unpredicted: bool = True
    sort_by_date: bool = True
    mark_source: bool = True
    filters: Optional[FixtureFilters] = Field(default=None)


def build_merged_fixture(
    fixture: Fixture,
    prediction: Optional[Prediction],
    tier: Optional[MatchTier],
    merged_at: datetime,
    mark_source: bool = True,
    settings: Optional[ReconcilerSettings] = None,
) -> MergedFixture:
    """Project one fixture and its (possibly absent) prediction onto a MergedFixture."""
    summary = PredictionSummary.from_prediction(prediction) if prediction is not None else None
    data_sources = None
    if mark_source:
        settings = settings or get_reconciler_settings()
        data_sources = DataSources(
            fixture=fixture.source or settings.default_fixture_source,
            prediction=settings.default_prediction_source if prediction is not None else None,
        )
    fields = fixture.model_dump(include=set(Fixture.model_fields))
    if data_sources is not None:
        fields["source"] = data_sources.fixture
    return MergedFixture(
        **fields,
        predicted=summary is not None,
        user_prediction=summary,
        actual_home_scorers=summary.actual_home_scorers if summary else None,
        actual_away_scorers=summary.actual_away_scorers if summary else None,
        merge_info=MergeInfo(
            prediction_matched=summary is not None,
            fixture_key=fixture_key(fixture),
            match_tier=tier,
            merged_at=merged_at,
        ),
        data_sources=data_sources,
    )


def _sort_key(indexed: tuple[int, MergedFixture]) -> tuple[int, float, int]:
    # Unparseable kickoffs sort last, keeping their input order
    idx, merged = indexed
    kickoff = merged.kickoff
    if kickoff is None:
        return (1, 0.0, idx)
    return (0, kickoff.timestamp(), idx)


def _log_shared_predictions(matched: dict[str, list[Optional[str]]]) -> None:
    for prediction_id, fixture_ids in matched.items():
        if len(fixture_ids) > 1:
            logger.warning(
                "prediction_matched_multiple_fixtures",
                prediction_id=prediction_id,
                fixture_ids=fixture_ids,
            )


def merge_fixtures(
    fixtures: Sequence[Fixture],
    predictions: Sequence[Prediction],
    options: Optional[MergeOptions] = None,
    matcher: Optional[PredictionMatcher] = None,
    settings: Optional[ReconcilerSettings] = None,
) -> list[MergedFixture]:
    """
    Merge fixtures with predictions.

    Args:
        fixtures: Normalized fixtures from the provider.
        predictions: Normalized predictions from the store.
        options: include_unpredicted / sort_by_date / mark_source.
        matcher: Matcher to use; built from settings when omitted.

    Returns:
        New MergedFixture records, one per kept fixture.
    """
    options = options or MergeOptions()
    settings = settings or get_reconciler_settings()
    matcher = matcher or PredictionMatcher(settings)
    merged_at = utcnow()

    merged: list[MergedFixture] = []
    matched_by_prediction: dict[str, list[Optional[str]]] = defaultdict(list)
    for fixture in fixtures:
        prediction, tier = matcher.match_with_tier(fixture, predictions)
        if tier is not None:
            MATCH_TIER_HITS.labels(tier=tier.value).inc()
        else:
            UNMATCHED_FIXTURES.inc()
        if prediction is not None and prediction.id is not None:
            matched_by_prediction[prediction.id].append(fixture.id)
        merged.append(
            build_merged_fixture(fixture, prediction, tier, merged_at, options.mark_source, settings)
        )

    # One prediction claimed by several fixtures is reported, not resolved
    _log_shared_predictions(matched_by_prediction)

    if not options.include_unpredicted:
        merged = [m for m in merged if m.predicted]

    if options.sort_by_date:
        merged = [m for _, m in sorted(enumerate(merged), key=_sort_key)]

    logger.debug(
        "fixtures_merged",
        fixtures=len(fixtures),
        predictions=len(predictions),
        kept=len(merged),
        predicted=sum(1 for m in merged if m.predicted),
    )
    return merged
