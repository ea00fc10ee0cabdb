"""
Single-tree pipeline: one TreeRecord per tree per reporting year.

Rows are processed independently. A row with an unknown species group or an
unusable diameter is skipped and reported in PipelineResult.errors; the rest
of the batch is still computed.
"""
from typing import Iterable, Optional

from .config_loader import CarbonSettings, load_settings
from .derived_metrics import compute_biomass_result
from .exceptions import DataError, IncompleteTimeSeriesWarning, UnknownSpeciesError
from .logging_config import get_logger, log_pipeline_summary, log_row_error
from .measurement import TimePoint, TreeRow
from .records import PipelineResult, RowError, TreeRecord
from .sequestration import SequestrationCalculator
from .utils import normalize_team

__all__ = ['build_tree_records', 'compute_tree_record']

logger = get_logger(__name__)


def compute_tree_record(row: TreeRow, settings: Optional[CarbonSettings] = None) -> TreeRecord:
    """Compute the TreeRecord for one row.

    Raises:
        UnknownSpeciesError: If the species label is not known
        InvalidMeasurementError: If a diameter is missing or invalid
        InvalidDataError: If the team name is blank
    """
    settings = settings or load_settings()
    results = {
        m.time_point: compute_biomass_result(m, settings)
        for m in row.to_measurements()
    }
    calculator = SequestrationCalculator(settings)
    return calculator.tree_record(results[TimePoint.BEFORE], results.get(TimePoint.AFTER))


def build_tree_records(
    rows: Iterable[TreeRow],
    settings: Optional[CarbonSettings] = None,
    strict: bool = False,
) -> PipelineResult[TreeRecord]:
    """Compute TreeRecords for a sequence of tree rows.

    Args:
        rows: Tree rows in input order
        settings: Conversion settings (default: packaged settings)
        strict: Raise on the first bad row instead of collecting it

    Returns:
        PipelineResult with records in input order, rejected rows, and an
        IncompleteTimeSeriesWarning for each tree without a second measurement
    """
    settings = settings or load_settings()
    result: PipelineResult[TreeRecord] = PipelineResult()

    n_rows = 0
    for index, row in enumerate(rows):
        n_rows += 1
        try:
            record = compute_tree_record(row, settings)
        except (UnknownSpeciesError, DataError) as e:
            if strict:
                raise
            team = normalize_team(row.team)
            log_row_error(logger, index, team, e)
            result.errors.append(RowError(index=index, team=team, error=e))
            continue

        result.records.append(record)
        if not record.is_complete:
            result.warnings.append(IncompleteTimeSeriesWarning(record.team, record.year))

    log_pipeline_summary(
        logger, 'tree', n_rows, len(result.records), len(result.errors), len(result.warnings)
    )
    return result
