"""
Result records produced by the tree and woodland pipelines.
"""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

from .exceptions import IncompleteTimeSeriesWarning, TreeCarbonError
from .species import SpeciesGroup

__all__ = [
    'TreeRecord',
    'PlotAggregate',
    'RowError',
    'PipelineResult',
]


@dataclass(frozen=True)
class TreeRecord:
    """Before/after carbon for one tree in one reporting year.

    Diameters are rounded to 0.1 inch and masses to whole pounds. Time-2
    and sequestration fields are None when the tree has not been remeasured.
    """
    team: str
    species: SpeciesGroup
    diameter_1: float
    carbon_1: int
    co2e_1: int
    diameter_2: Optional[float] = None
    carbon_2: Optional[int] = None
    co2e_2: Optional[int] = None
    carbon_sequestered: Optional[int] = None
    co2e_sequestered: Optional[int] = None
    year: Optional[int] = None
    tree_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """True when both measurements exist and sequestration is defined."""
        return self.carbon_sequestered is not None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['species'] = self.species.value
        return data


@dataclass(frozen=True)
class PlotAggregate:
    """Per-acre carbon for one team's woodland plot in one reporting year.

    Per-acre values are plot sums multiplied by the plot expansion factor.
    Time-2 and sequestration fields are None when no stem was remeasured.

    Attributes:
        stem_count_mismatch: True when the number of stems measured at the
            second time differs from the first, so the difference may
            partly reflect sample size rather than growth
    """
    team: str
    n_stems_1: int
    carbon_per_acre_1: float
    co2e_per_acre_1: float
    tons_per_acre_1: float
    n_stems_2: int = 0
    carbon_per_acre_2: Optional[float] = None
    co2e_per_acre_2: Optional[float] = None
    tons_per_acre_2: Optional[float] = None
    tons_sequestered: Optional[float] = None
    co2e_sequestered: Optional[float] = None
    stem_count_mismatch: bool = False
    year: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        """True when sequestration is defined for this plot."""
        return self.tons_sequestered is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RowError:
    """An input row that was rejected, with the reason."""
    index: int
    team: Optional[str]
    error: TreeCarbonError

    @property
    def message(self) -> str:
        return str(self.error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'team': self.team,
            'error_type': type(self.error).__name__,
            'message': self.message,
        }


RecordT = TypeVar('RecordT')


@dataclass
class PipelineResult(Generic[RecordT]):
    """Records computed by a pipeline run plus everything it rejected or flagged.

    Attributes:
        records: Computed records in input order
        errors: Rows that could not be processed
        warnings: Records without a second measurement, or plots with a
            stem count mismatch
    """
    records: List[RecordT] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)
    warnings: List[IncompleteTimeSeriesWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when no row was rejected."""
        return not self.errors

    @property
    def complete_records(self) -> List[RecordT]:
        return [r for r in self.records if r.is_complete]

    @property
    def incomplete_records(self) -> List[RecordT]:
        return [r for r in self.records if not r.is_complete]

    def raise_for_errors(self) -> None:
        """Re-raise the first row error, if any."""
        if self.errors:
            raise self.errors[0].error

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)
