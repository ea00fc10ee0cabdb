"""
Woodland pipeline: per-acre carbon for each team's plot.

Each team measures every stem in a 1/10-acre subplot. Stem carbon is summed
within each (team, year, time point) group and scaled to a full acre by the
plot expansion factor.

Plots are summed over the stems present at each time point. When a plot was
only partly remeasured the two sums cover different stems; such plots are
flagged with stem_count_mismatch and reported in the result warnings.
"""
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple

from .config_loader import CarbonSettings, load_settings
from .derived_metrics import BiomassResult, compute_biomass_result
from .exceptions import DataError, IncompleteTimeSeriesWarning, UnknownSpeciesError
from .logging_config import get_logger, log_pipeline_summary, log_row_error
from .measurement import StemRow, TimePoint
from .records import PipelineResult, PlotAggregate, RowError
from .sequestration import SequestrationCalculator
from .utils import normalize_team

__all__ = ['build_plot_aggregates', 'group_stem_results']

logger = get_logger(__name__)

PlotKey = Tuple[str, Optional[int]]


def group_stem_results(
    stems: Iterable[StemRow],
    settings: CarbonSettings,
    strict: bool = False,
) -> Tuple["OrderedDict[PlotKey, Dict[TimePoint, List[BiomassResult]]]", List[RowError], int]:
    """Compute per-stem results and group them by plot and time point.

    Plots appear in the order their first stem appears in the input.

    Returns:
        (groups, errors, number of rows read)
    """
    groups: "OrderedDict[PlotKey, Dict[TimePoint, List[BiomassResult]]]" = OrderedDict()
    errors: List[RowError] = []
    n_rows = 0

    for index, stem in enumerate(stems):
        n_rows += 1
        try:
            results = [compute_biomass_result(m, settings) for m in stem.to_measurements()]
        except (UnknownSpeciesError, DataError) as e:
            if strict:
                raise
            team = normalize_team(stem.team)
            log_row_error(logger, index, team, e)
            errors.append(RowError(index=index, team=team, error=e))
            continue

        key = (results[0].team, results[0].measurement.year)
        by_time = groups.setdefault(key, {TimePoint.BEFORE: [], TimePoint.AFTER: []})
        for r in results:
            by_time[r.time_point].append(r)

    return groups, errors, n_rows


def build_plot_aggregates(
    stems: Iterable[StemRow],
    settings: Optional[CarbonSettings] = None,
    strict: bool = False,
    require_complete_remeasurement: bool = False,
) -> PipelineResult[PlotAggregate]:
    """Compute one PlotAggregate per (team, year).

    Excluded teams are kept here so they still appear in raw listings;
    ranking and chart series drop them.

    Args:
        stems: Stem rows in input order
        settings: Conversion settings (default: packaged settings)
        strict: Raise on the first bad row instead of collecting it
        require_complete_remeasurement: Withhold sequestration from plots
            whose stem counts differ between the two times

    Returns:
        PipelineResult with one aggregate per plot, rejected rows, and
        warnings for plots without (or with partial) remeasurement
    """
    settings = settings or load_settings()
    calculator = SequestrationCalculator(settings)
    groups, errors, n_rows = group_stem_results(stems, settings, strict)

    result: PipelineResult[PlotAggregate] = PipelineResult(errors=errors)
    for (team, year), by_time in groups.items():
        aggregate = calculator.plot_aggregate(
            team,
            year,
            by_time[TimePoint.BEFORE],
            by_time[TimePoint.AFTER],
            require_complete_remeasurement=require_complete_remeasurement,
        )
        result.records.append(aggregate)

        if aggregate.n_stems_2 == 0:
            result.warnings.append(IncompleteTimeSeriesWarning(team, year))
        elif aggregate.stem_count_mismatch:
            detail = (f"{aggregate.n_stems_1} stems at first measurement, "
                      f"{aggregate.n_stems_2} at second")
            logger.warning("Plot %s (%s): %s", team, year, detail)
            result.warnings.append(IncompleteTimeSeriesWarning(team, year, detail))

    log_pipeline_summary(
        logger, 'woodland', n_rows, len(result.records), len(result.errors),
        sum(1 for r in result.records if not r.is_complete),
    )
    return result
