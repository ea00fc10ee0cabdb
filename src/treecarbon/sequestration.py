"""
Sequestration: change in stored carbon between two measurement times.

Sequestration is only defined when both time points exist. Single trees
are compared directly; woodland plots are compared on a per-acre basis.
"""
from typing import Optional, Sequence

from .config_loader import CarbonSettings, load_settings
from .derived_metrics import BiomassResult
from .records import PlotAggregate, TreeRecord

__all__ = [
    'sequestration',
    'SequestrationCalculator',
]

DIAMETER_DECIMALS = 1


def sequestration(value_1: Optional[float], value_2: Optional[float]) -> Optional[float]:
    """Return value_2 - value_1, or None if either value is missing."""
    if value_1 is None or value_2 is None:
        return None
    return value_2 - value_1


def _round_or_none(value: Optional[float], ndigits: Optional[int] = None):
    if value is None:
        return None
    return round(value, ndigits) if ndigits is not None else round(value)


class SequestrationCalculator:
    """Builds tree records and plot aggregates from biomass results.

    Attributes:
        settings: Conversion settings used for per-acre scaling
    """

    def __init__(self, settings: Optional[CarbonSettings] = None):
        self.settings = settings or load_settings()

    def tree_record(
        self,
        result_1: BiomassResult,
        result_2: Optional[BiomassResult] = None,
    ) -> TreeRecord:
        """Build a TreeRecord from a tree's first and optional second result.

        Surfaced values are rounded; sequestration is computed from the
        unrounded carbon and CO2e and then rounded.
        """
        first = result_1.measurement
        carbon_2 = result_2.carbon_lb if result_2 is not None else None
        co2e_2 = result_2.co2e_lb if result_2 is not None else None
        diameter_2 = result_2.measurement.diameter_in if result_2 is not None else None

        return TreeRecord(
            team=first.team,
            species=first.species,
            year=first.year,
            tree_id=first.stem_id,
            diameter_1=round(first.diameter_in, DIAMETER_DECIMALS),
            carbon_1=round(result_1.carbon_lb),
            co2e_1=round(result_1.co2e_lb),
            diameter_2=_round_or_none(diameter_2, DIAMETER_DECIMALS),
            carbon_2=_round_or_none(carbon_2),
            co2e_2=_round_or_none(co2e_2),
            carbon_sequestered=_round_or_none(sequestration(result_1.carbon_lb, carbon_2)),
            co2e_sequestered=_round_or_none(sequestration(result_1.co2e_lb, co2e_2)),
        )

    def per_acre(self, plot_total_lb: float) -> float:
        """Scale a plot total to a per-acre value."""
        return plot_total_lb * self.settings.plot_expansion_factor

    def to_tons(self, pounds: Optional[float]) -> Optional[float]:
        if pounds is None:
            return None
        return pounds / self.settings.lb_per_ton

    def plot_aggregate(
        self,
        team: str,
        year: Optional[int],
        results_1: Sequence[BiomassResult],
        results_2: Sequence[BiomassResult] = (),
        require_complete_remeasurement: bool = False,
    ) -> PlotAggregate:
        """Build a PlotAggregate from one plot's per-stem results.

        Args:
            team: Team that owns the plot
            year: Reporting year
            results_1: Results for stems measured at the first time
            results_2: Results for stems measured at the second time
            require_complete_remeasurement: If True, a plot whose stem
                counts differ between times gets no sequestration value

        Returns:
            PlotAggregate for the plot
        """
        n_1, n_2 = len(results_1), len(results_2)

        carbon_1 = self.per_acre(sum(r.carbon_lb for r in results_1))
        co2e_1 = self.per_acre(sum(r.co2e_lb for r in results_1))

        carbon_2 = co2e_2 = None
        if n_2:
            carbon_2 = self.per_acre(sum(r.carbon_lb for r in results_2))
            co2e_2 = self.per_acre(sum(r.co2e_lb for r in results_2))

        mismatch = n_2 > 0 and n_1 != n_2
        tons_1 = self.to_tons(carbon_1)
        tons_2 = self.to_tons(carbon_2)

        if mismatch and require_complete_remeasurement:
            tons_sequestered = co2e_sequestered = None
        else:
            tons_sequestered = sequestration(tons_1, tons_2)
            co2e_sequestered = sequestration(co2e_1, co2e_2)

        return PlotAggregate(
            team=team,
            year=year,
            n_stems_1=n_1,
            n_stems_2=n_2,
            carbon_per_acre_1=carbon_1,
            co2e_per_acre_1=co2e_1,
            tons_per_acre_1=tons_1,
            carbon_per_acre_2=carbon_2,
            co2e_per_acre_2=co2e_2,
            tons_per_acre_2=tons_2,
            tons_sequestered=tons_sequestered,
            co2e_sequestered=co2e_sequestered,
            stem_count_mismatch=mismatch,
        )
