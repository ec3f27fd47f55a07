"""
Reconciliation orchestrator.
adapt -> merge -> filter -> stats -> validate -> meta, wrapped so that callers
always get a ProcessResult and never an exception.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence, Union

from shared.models.domain import ProcessData, ProcessError, ProcessMeta, ProcessResult, ValidationReport
from shared.models.enums import ErrorType
from shared.utils.logging import get_logger
from shared.utils.metrics import RECONCILE_LATENCY, RECONCILE_RUNS, track_latency
from shared.utils.timeutils import utcnow

from reconciler.adapters import adapt_fixtures, adapt_predictions
from reconciler.aliases import TeamAliasTable
from reconciler.config import ReconcilerSettings, get_reconciler_settings
from reconciler.filters import filter_fixtures
from reconciler.matcher import PredictionMatcher
from reconciler.merge import MergeOptions, merge_fixtures
from reconciler.stats import compute_stats
from reconciler.validation import validate_merged

logger = get_logger(__name__)

OptionsLike = Union[MergeOptions, Mapping[str, Any], None]


def data_quality(report: ValidationReport) -> float:
    """Share of structurally valid fixtures; 1.0 for an empty result."""
    if report.total_fixtures == 0:
        return 1.0
    return report.valid_fixtures / report.total_fixtures


def _coerce_options(options: OptionsLike) -> MergeOptions:
    if options is None:
        return MergeOptions()
    if isinstance(options, MergeOptions):
        return options
    return MergeOptions.model_validate(dict(options))


class FixtureReconciler:
    """
    One-shot merge of provider fixtures with a user's predictions.

    Stateless between calls: the matcher and alias table are built once from
    settings and only read afterwards, so one instance can serve concurrent
    callers.
    """

    def __init__(
        self,
        settings: Optional[ReconcilerSettings] = None,
        aliases: Optional[TeamAliasTable] = None,
    ) -> None:
        self._settings = settings or get_reconciler_settings()
        self._matcher = PredictionMatcher(self._settings, aliases)

    def _run(self, fixtures: Sequence[Any], predictions: Sequence[Any], options: MergeOptions) -> ProcessData:
        with track_latency(RECONCILE_LATENCY, stage="adapt"):
            fixture_models = adapt_fixtures(fixtures)
            prediction_models = adapt_predictions(predictions)

        with track_latency(RECONCILE_LATENCY, stage="merge"):
            merged = merge_fixtures(
                fixture_models,
                prediction_models,
                options,
                matcher=self._matcher,
                settings=self._settings,
            )
            if options.filters is not None:
                merged = filter_fixtures(merged, options.filters)

        with track_latency(RECONCILE_LATENCY, stage="report"):
            stats = compute_stats(merged)
            validation = validate_merged(merged)

        meta = ProcessMeta(
            total_fixtures=len(merged),
            predicted_fixtures=stats.predicted,
            prediction_rate=stats.prediction_rate,
            processed_at=utcnow(),
            data_quality=data_quality(validation),
            is_empty=not merged,
        )
        return ProcessData(fixtures=merged, stats=stats, validation=validation, meta=meta)

    def process(
        self,
        fixtures: Optional[Sequence[Any]],
        predictions: Optional[Sequence[Any]],
        options: OptionsLike = None,
    ) -> ProcessResult:
        """
        Merge fixtures with predictions and report stats and data quality.

        Args:
            fixtures: Provider fixtures (dicts in any supported shape, or Fixture models).
            predictions: Stored predictions (dicts or Prediction models).
            options: MergeOptions or an equivalent mapping (snake_case or camelCase keys).

        Returns:
            ProcessResult with success=True and data, or success=False and a
            DATA_MERGE_ERROR describing the failure.
        """
        try:
            data = self._run(fixtures or [], predictions or [], _coerce_options(options))
        except Exception as e:
            logger.exception("data_merge_failed", error=str(e))
            RECONCILE_RUNS.labels(outcome="error").inc()
            return ProcessResult(
                success=False,
                error=ProcessError(message=str(e), type=ErrorType.DATA_MERGE_ERROR, timestamp=utcnow()),
            )

        RECONCILE_RUNS.labels(outcome="success").inc()
        logger.info(
            "data_merge_completed",
            total_fixtures=data.meta.total_fixtures,
            predicted=data.stats.predicted,
            invalid_fixtures=data.validation.invalid_fixtures,
            data_quality=round(data.meta.data_quality, 3),
        )
        return ProcessResult(success=True, data=data)


def process_merged_data(
    fixtures: Optional[Sequence[Any]],
    predictions: Optional[Sequence[Any]],
    options: OptionsLike = None,
    settings: Optional[ReconcilerSettings] = None,
) -> ProcessResult:
    """Convenience wrapper: build a FixtureReconciler and run one call."""
    return FixtureReconciler(settings).process(fixtures, predictions, options)
