"""
Carbon and CO2-equivalent from aboveground biomass.

carbon = biomass * carbon_fraction (0.5)
co2e   = carbon * co2_to_carbon_ratio (3.667, molar mass CO2 / C)
"""
import math
from dataclasses import dataclass
from typing import Optional

from .allometry import create_biomass_model
from .config_loader import CarbonSettings, load_settings
from .exceptions import InvalidMeasurementError
from .measurement import Measurement

__all__ = [
    'CARBON_FRACTION',
    'CO2_TO_CARBON_RATIO',
    'BiomassResult',
    'derive_carbon',
    'derive_co2e',
    'compute_biomass_result',
]

CARBON_FRACTION = 0.5
CO2_TO_CARBON_RATIO = 3.667


def derive_carbon(biomass_lb: float, carbon_fraction: float = CARBON_FRACTION) -> float:
    """Carbon mass (lb) in a given dry biomass (lb)."""
    return biomass_lb * carbon_fraction


def derive_co2e(carbon_lb: float, co2_ratio: float = CO2_TO_CARBON_RATIO) -> float:
    """CO2-equivalent mass (lb) of a given carbon mass (lb)."""
    return carbon_lb * co2_ratio


@dataclass(frozen=True)
class BiomassResult:
    """Biomass, carbon and CO2e for one Measurement (all in pounds)."""
    measurement: Measurement
    aboveground_biomass_lb: float
    carbon_lb: float
    co2e_lb: float

    @property
    def team(self) -> str:
        return self.measurement.team

    @property
    def time_point(self):
        return self.measurement.time_point


def compute_biomass_result(
    measurement: Measurement,
    settings: Optional[CarbonSettings] = None,
) -> BiomassResult:
    """Run the allometric model and derived metrics for one measurement.

    Args:
        measurement: A validated Measurement
        settings: Conversion settings (default: packaged settings)

    Returns:
        BiomassResult for the measurement

    Raises:
        InvalidMeasurementError: If the diameter gives a biomass too large
            to represent
    """
    settings = settings or load_settings()
    model = create_biomass_model(measurement.species, settings.coefficient_file)
    biomass = model.calculate_biomass(
        measurement.diameter_in,
        inches_to_cm=settings.inches_to_cm,
        kg_to_lb=settings.kg_to_lb,
    )
    carbon = derive_carbon(biomass, settings.carbon_fraction)
    co2e = derive_co2e(carbon, settings.co2_to_carbon_ratio)
    if not math.isfinite(co2e):
        raise InvalidMeasurementError(
            f"diameter_{int(measurement.time_point)}", measurement.diameter_in, "biomass out of range"
        )
    return BiomassResult(
        measurement=measurement,
        aboveground_biomass_lb=biomass,
        carbon_lb=carbon,
        co2e_lb=co2e,
    )
