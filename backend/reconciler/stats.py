"""Prediction coverage statistics over merged fixtures."""
from __future__ import annotations

from typing import Sequence

from shared.models.domain import BreakdownEntry, MergedFixture, Stats
from shared.models.enums import PredictionStatus

UNKNOWN_COMPETITION = "Unknown"
UNKNOWN_STATUS = "unknown"


def prediction_rate(predicted: int, total: int) -> float:
    """Percentage of predicted fixtures; exactly 0.0 when there are none."""
    if total <= 0:
        return 0.0
    return predicted / total * 100.0


def _bump(bucket: dict[str, list[int]], key: str, predicted: bool) -> None:
    counts = bucket.setdefault(key, [0, 0])
    counts[0] += 1
    if predicted:
        counts[1] += 1


def _entries(bucket: dict[str, list[int]]) -> dict[str, BreakdownEntry]:
    return {
        key: BreakdownEntry(total=total, predicted=predicted, prediction_rate=prediction_rate(predicted, total))
        for key, (total, predicted) in bucket.items()
    }


def compute_stats(fixtures: Sequence[MergedFixture]) -> Stats:
    """
    Single pass over merged fixtures.

    Counts predicted/unpredicted globally, per competition and per fixture
    status, and splits matched predictions into upcoming (pending) and
    completed (scored).
    """
    predicted = 0
    upcoming = 0
    completed = 0
    by_competition: dict[str, list[int]] = {}
    by_status: dict[str, list[int]] = {}

    for fixture in fixtures:
        if fixture.predicted:
            predicted += 1
            if fixture.user_prediction and fixture.user_prediction.status == PredictionStatus.SCORED:
                completed += 1
            else:
                upcoming += 1

        _bump(by_competition, fixture.competition or UNKNOWN_COMPETITION, fixture.predicted)
        _bump(by_status, fixture.status_key or UNKNOWN_STATUS, fixture.predicted)

    total = len(fixtures)
    return Stats(
        total=total,
        predicted=predicted,
        unpredicted=total - predicted,
        prediction_rate=prediction_rate(predicted, total),
        by_competition=_entries(by_competition),
        by_status=_entries(by_status),
        upcoming_predictions=upcoming,
        completed_predictions=completed,
    )
