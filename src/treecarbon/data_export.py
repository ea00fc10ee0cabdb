"""
DataFrame output for the presentation layer.

Charting and table styling are done elsewhere; this module only shapes
computed records into pandas DataFrames, including the long (tidy) form
used for paired before/after charts.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .config_loader import CarbonSettings, load_settings
from .records import RowError, TreeRecord

__all__ = ['DataExporter', 'TIME_POINT_LABELS']

TIME_POINT_LABELS = {1: 'Before', 2: 'After'}


class DataExporter:
    """Shapes pipeline output into DataFrames.

    Attributes:
        settings: Supplies the excluded-team set for chart series
    """

    def __init__(self, settings: Optional[CarbonSettings] = None):
        self.settings = settings or load_settings()

    @staticmethod
    def records_to_dataframe(records: Iterable[Any]) -> pd.DataFrame:
        """One row per record with every record field as a column."""
        return pd.DataFrame([r.to_dict() for r in records])

    @staticmethod
    def rows_to_dataframe(rows: Sequence[Dict[str, Any]]) -> pd.DataFrame:
        """DataFrame from projected rows, keeping label order."""
        return pd.DataFrame(list(rows))

    @staticmethod
    def errors_to_dataframe(errors: Iterable[RowError]) -> pd.DataFrame:
        """One row per rejected input row."""
        columns = ['index', 'team', 'error_type', 'message']
        return pd.DataFrame([e.to_dict() for e in errors], columns=columns)

    def paired_time_series(
        self,
        records: Iterable[Any],
        value_fields: Sequence[str] = ('carbon_1', 'carbon_2'),
        id_fields: Sequence[str] = ('team',),
        excluded_teams: Optional[Iterable[str]] = None,
    ) -> pd.DataFrame:
        """Long-form before/after series for a paired chart.

        Only records with both time points are included, and excluded
        teams are dropped.

        Args:
            records: TreeRecords or PlotAggregates
            value_fields: The (time 1, time 2) value fields
            id_fields: Fields identifying each entity
            excluded_teams: Defaults to the settings' excluded teams

        Returns:
            DataFrame with id_fields plus 'time_point' ('Before'/'After')
            and 'value' columns, ordered by entity then time
        """
        if len(value_fields) != 2:
            raise ValueError("value_fields must name exactly two fields (time 1, time 2)")
        if excluded_teams is None:
            excluded_teams = self.settings.excluded_teams
        excluded = frozenset(excluded_teams)

        first, second = value_fields
        wide = pd.DataFrame([
            {**{f: getattr(r, f) for f in id_fields}, first: getattr(r, first), second: getattr(r, second)}
            for r in records
            if r.team not in excluded and getattr(r, first) is not None and getattr(r, second) is not None
        ], columns=[*id_fields, first, second])
        wide['_order'] = range(len(wide))

        long = wide.melt(
            id_vars=[*id_fields, '_order'],
            value_vars=[first, second],
            var_name='time_point',
            value_name='value',
        )
        long['time_point'] = long['time_point'].map({first: TIME_POINT_LABELS[1], second: TIME_POINT_LABELS[2]})
        long = long.sort_values(['_order', 'time_point'], key=_time_sort_key, kind='stable')
        return long.drop(columns='_order').reset_index(drop=True)

    @staticmethod
    def team_summary(records: Iterable[TreeRecord]) -> pd.DataFrame:
        """Per-team, per-year totals of single-tree records.

        Sums cover only one team's trees in one reporting year; records
        without a year form their own group. Sequestration totals use
        remeasured trees only.
        """
        df = pd.DataFrame([r.to_dict() for r in records])
        columns = ['team', 'year', 'n_trees', 'carbon_1', 'carbon_2', 'carbon_sequestered', 'co2e_sequestered']
        if df.empty:
            return pd.DataFrame(columns=columns)
        numeric = columns[3:]
        df[numeric] = df[numeric].apply(pd.to_numeric)
        summary = df.groupby(['team', 'year'], sort=False, dropna=False).agg(
            n_trees=('carbon_1', 'size'),
            carbon_1=('carbon_1', 'sum'),
            carbon_2=('carbon_2', 'sum'),
            carbon_sequestered=('carbon_sequestered', 'sum'),
            co2e_sequestered=('co2e_sequestered', 'sum'),
        )
        return summary.reset_index()[columns]


def _time_sort_key(series: pd.Series) -> pd.Series:
    if series.name == 'time_point':
        order = {label: key for key, label in TIME_POINT_LABELS.items()}
        return series.map(order)
    return series
