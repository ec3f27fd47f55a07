"""
Structural diagnostics over merged fixtures.
Purely observational: nothing is dropped, reordered or modified.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from shared.models.domain import (
    FixtureIssue,
    MergedFixture,
    PredictionIssue,
    PredictionSummary,
    ValidationReport,
    ValidationWarning,
)
from shared.models.enums import IssueScope
from shared.utils.logging import get_logger
from shared.utils.metrics import VALIDATION_ISSUES
from shared.utils.timeutils import parse_kickoff

logger = get_logger(__name__)

SHARED_PREDICTION_WARNING = "Prediction matched by multiple fixtures"


@dataclass
class RecordCheck:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def check_fixture(fixture: MergedFixture) -> RecordCheck:
    check = RecordCheck()
    if not fixture.id:
        check.errors.append("Missing fixture ID")
    if not fixture.home_team:
        check.errors.append("Missing home team")
    if not fixture.away_team:
        check.errors.append("Missing away team")
    if not fixture.date:
        check.errors.append("Missing fixture date")
    elif parse_kickoff(fixture.date) is None:
        check.errors.append("Invalid date format")

    if not fixture.venue:
        check.warnings.append("Missing venue")
    if not fixture.competition:
        check.warnings.append("Missing competition")
    if not fixture.referee:
        check.warnings.append("Missing referee")
    return check


def check_prediction(prediction: PredictionSummary) -> RecordCheck:
    check = RecordCheck()
    if not prediction.id:
        check.errors.append("Missing prediction ID")
    if not prediction.home_team:
        check.errors.append("Missing home team")
    if not prediction.away_team:
        check.errors.append("Missing away team")
    for side, score in (("home", prediction.home_score), ("away", prediction.away_score)):
        if side in prediction.invalid_scores:
            check.errors.append(f"Invalid {side} score")
        elif score is None:
            check.errors.append(f"Missing {side} score")
        elif score < 0:
            check.errors.append(f"Invalid {side} score (negative)")

    if not prediction.submitted_at:
        check.warnings.append("Missing submission timestamp")
    if not prediction.home_scorers:
        check.warnings.append("Missing home scorers")
    return check


def validate_merged(fixtures: Sequence[MergedFixture]) -> ValidationReport:
    """Check every record independently and collect errors and warnings by index."""
    report = ValidationReport(total_fixtures=len(fixtures))
    claimed = Counter(
        f.user_prediction.id for f in fixtures if f.user_prediction is not None and f.user_prediction.id
    )

    for index, fixture in enumerate(fixtures):
        fixture_check = check_fixture(fixture)
        if fixture_check.valid:
            report.valid_fixtures += 1
        else:
            report.invalid_fixtures += 1
            report.fixture_errors.append(
                FixtureIssue(index=index, fixture_id=fixture.id, errors=fixture_check.errors)
            )
        if fixture_check.warnings:
            report.warnings.append(
                ValidationWarning(
                    index=index,
                    scope=IssueScope.FIXTURE,
                    fixture_id=fixture.id,
                    warnings=fixture_check.warnings,
                )
            )

        prediction = fixture.user_prediction
        if not fixture.predicted or prediction is None:
            continue

        prediction_check = check_prediction(prediction)
        if prediction.id and claimed[prediction.id] > 1:
            prediction_check.warnings.append(SHARED_PREDICTION_WARNING)
        if not prediction_check.valid:
            report.prediction_errors.append(
                PredictionIssue(
                    index=index,
                    fixture_id=fixture.id,
                    prediction_id=prediction.id,
                    errors=prediction_check.errors,
                )
            )
        if prediction_check.warnings:
            report.warnings.append(
                ValidationWarning(
                    index=index,
                    scope=IssueScope.PREDICTION,
                    fixture_id=fixture.id,
                    prediction_id=prediction.id,
                    warnings=prediction_check.warnings,
                )
            )

    VALIDATION_ISSUES.labels(kind="fixture_error").inc(len(report.fixture_errors))
    VALIDATION_ISSUES.labels(kind="prediction_error").inc(len(report.prediction_errors))
    VALIDATION_ISSUES.labels(kind="warning").inc(len(report.warnings))
    if report.invalid_fixtures:
        logger.warning(
            "validation_issues_found",
            invalid_fixtures=report.invalid_fixtures,
            prediction_errors=len(report.prediction_errors),
        )
    return report
