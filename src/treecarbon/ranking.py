"""
Ranking and projection of computed records for presentation.

Projection selects named fields, applies display labels and optional
rounding, and never changes the records themselves. Ranking additionally
drops excluded teams and records without a value for the sort key, sorts
stably (ties keep input order), and caps the number of rows.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence

from .config_loader import CarbonSettings, load_settings
from .exceptions import ConfigurationError

__all__ = [
    'ColumnSpec',
    'TREE_COLUMNS',
    'TREE_LISTING_COLUMNS',
    'PLOT_COLUMNS',
    'PLOT_LISTING_COLUMNS',
    'project',
    'listing',
    'RankingProjector',
]


@dataclass(frozen=True)
class ColumnSpec:
    """One output column: record field, display label, display decimals."""
    field: str
    label: str
    decimals: Optional[int] = None

    def format(self, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        if self.decimals is not None and isinstance(value, (int, float)) and not isinstance(value, bool):
            return round(value, self.decimals)
        return value


TREE_COLUMNS = (
    ColumnSpec('team', 'Team'),
    ColumnSpec('species', 'Species'),
    ColumnSpec('diameter_1', 'DBH 1 (in)'),
    ColumnSpec('diameter_2', 'DBH 2 (in)'),
    ColumnSpec('carbon_1', 'Carbon 1 (lb)'),
    ColumnSpec('carbon_2', 'Carbon 2 (lb)'),
    ColumnSpec('carbon_sequestered', 'Carbon Sequestered (lb)'),
    ColumnSpec('co2e_sequestered', 'CO2e Sequestered (lb)'),
)

TREE_LISTING_COLUMNS = (
    ColumnSpec('team', 'Team'),
    ColumnSpec('species', 'Species'),
    ColumnSpec('diameter_1', 'DBH (in)'),
    ColumnSpec('carbon_1', 'Carbon (lb)'),
    ColumnSpec('co2e_1', 'CO2e (lb)'),
)

PLOT_COLUMNS = (
    ColumnSpec('team', 'Team'),
    ColumnSpec('tons_per_acre_1', 'Carbon 1 (tons/acre)', 2),
    ColumnSpec('tons_per_acre_2', 'Carbon 2 (tons/acre)', 2),
    ColumnSpec('tons_sequestered', 'Carbon Sequestered (tons/acre)', 2),
    ColumnSpec('co2e_sequestered', 'CO2e Sequestered (lb/acre)', 0),
)

PLOT_LISTING_COLUMNS = (
    ColumnSpec('team', 'Team'),
    ColumnSpec('n_stems_1', 'Stems'),
    ColumnSpec('carbon_per_acre_1', 'Carbon (lb/acre)', 0),
    ColumnSpec('tons_per_acre_1', 'Carbon (tons/acre)', 2),
)


def _check_fields(records: Sequence[Any], names: Iterable[str]) -> None:
    if not records:
        return
    sample = records[0]
    unknown = [name for name in names if not hasattr(sample, name)]
    if unknown:
        raise ConfigurationError(
            f"Unknown field(s) {unknown} for {type(sample).__name__}"
        )


def _project_row(record: Any, columns: Sequence[ColumnSpec]) -> Dict[str, Any]:
    return {col.label: col.format(getattr(record, col.field)) for col in columns}


def project(
    records: Iterable[Any],
    columns: Sequence[ColumnSpec],
    sort_key: Optional[str] = None,
    descending: bool = True,
    limit: Optional[int] = None,
    excluded_teams: Iterable[str] = (),
) -> List[Dict[str, Any]]:
    """Select, relabel, filter, sort and cap records for presentation.

    Args:
        records: TreeRecords or PlotAggregates in input order
        columns: Columns to output, in order
        sort_key: Record field to sort by; records where it is None are
            dropped. If None, input order is kept and nothing is dropped.
        descending: Sort largest first
        limit: Maximum number of rows (None for no cap)
        excluded_teams: Teams to leave out

    Returns:
        List of {label: value} rows

    Raises:
        ConfigurationError: If a column or the sort key is not a record field
    """
    records = list(records)
    names = [col.field for col in columns]
    if sort_key is not None:
        names.append(sort_key)
    _check_fields(records, names)

    excluded = frozenset(excluded_teams)
    selected = [r for r in records if getattr(r, 'team', None) not in excluded]

    if sort_key is not None:
        selected = [r for r in selected if getattr(r, sort_key) is not None]
        # sorted() is stable for reverse=True as well
        selected = sorted(selected, key=lambda r: getattr(r, sort_key), reverse=descending)

    if limit is not None:
        selected = selected[:limit]

    return [_project_row(r, columns) for r in selected]


def listing(records: Iterable[Any], columns: Sequence[ColumnSpec]) -> List[Dict[str, Any]]:
    """Unranked listing of every record in input order.

    Includes records without a second measurement and excluded teams.
    """
    return project(records, columns)


@dataclass(frozen=True)
class RankingProjector:
    """A configured ranking: columns, sort key, row cap and excluded teams.

    Attributes:
        columns: Output columns
        sort_key: Field to rank by
        descending: Largest first
        limit: Maximum rows (None for no cap)
        excluded_teams: Teams left out of ranked output
        listing_columns: Columns for the unranked listing
    """
    columns: Sequence[ColumnSpec]
    sort_key: str
    descending: bool = True
    limit: Optional[int] = 40
    excluded_teams: FrozenSet[str] = field(default_factory=frozenset)
    listing_columns: Optional[Sequence[ColumnSpec]] = None

    @classmethod
    def for_trees(cls, settings: Optional[CarbonSettings] = None, **kwargs) -> 'RankingProjector':
        """Rank trees by carbon sequestered, largest first."""
        settings = settings or load_settings()
        options = dict(
            columns=TREE_COLUMNS,
            sort_key='carbon_sequestered',
            limit=settings.display_row_cap,
            excluded_teams=settings.excluded_teams,
            listing_columns=TREE_LISTING_COLUMNS,
        )
        options.update(kwargs)
        return cls(**options)

    @classmethod
    def for_plots(cls, settings: Optional[CarbonSettings] = None, **kwargs) -> 'RankingProjector':
        """Rank plots by tons of carbon sequestered per acre, largest first."""
        settings = settings or load_settings()
        options = dict(
            columns=PLOT_COLUMNS,
            sort_key='tons_sequestered',
            limit=settings.display_row_cap,
            excluded_teams=settings.excluded_teams,
            listing_columns=PLOT_LISTING_COLUMNS,
        )
        options.update(kwargs)
        return cls(**options)

    def project(self, records: Iterable[Any]) -> List[Dict[str, Any]]:
        """Ranked rows for the presentation sink."""
        return project(
            records,
            self.columns,
            sort_key=self.sort_key,
            descending=self.descending,
            limit=self.limit,
            excluded_teams=self.excluded_teams,
        )

    def listing(self, records: Iterable[Any]) -> List[Dict[str, Any]]:
        """Unranked rows of every record, using the listing columns."""
        return listing(records, self.listing_columns or self.columns)

    @property
    def labels(self) -> List[str]:
        return [col.label for col in self.columns]
