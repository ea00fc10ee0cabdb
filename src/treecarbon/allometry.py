"""
Aboveground biomass from diameter using the Jenkins et al. (2003)
national-scale allometric equations.

    bm = exp(b1 + b2 * ln(dbh_cm))

where bm is aboveground dry biomass in kilograms and dbh_cm is diameter at
breast height in centimeters. Field data are recorded in inches and results
are reported in pounds, so the model converts on the way in and out.
"""
import math
from typing import Dict, Optional, Tuple

from .config_loader import CarbonSettings, load_settings
from .exceptions import InvalidMeasurementError, validate_diameter
from .model_base import ParameterizedModel
from .species import SpeciesGroup

__all__ = [
    'JenkinsBiomassModel',
    'create_biomass_model',
    'calculate_aboveground_biomass',
    'clear_biomass_model_cache',
    'get_all_species_coefficients',
]


class JenkinsBiomassModel(ParameterizedModel):
    """Jenkins aboveground biomass model for one species group.

    Coefficients come from jenkins_biomass_coefficients.json. The built-in
    table below is used only if that file is missing, and covers every
    species group.
    """

    COEFFICIENT_FILE = 'jenkins_biomass_coefficients.json'
    COEFFICIENT_KEY = 'species_coefficients'
    REQUIRED_COEFFICIENTS = ('b1', 'b2')
    FALLBACK_PARAMETERS = {
        'Aspen': {'b1': -2.2094, 'b2': 2.3867},
        'Cedar/larch': {'b1': -2.0336, 'b2': 2.2592},
        'Maple-oak-hickory-beech': {'b1': -2.0127, 'b2': 2.4342},
        'Mixed-hardwood': {'b1': -2.4800, 'b2': 2.4835},
        'Pine': {'b1': -2.5356, 'b2': 2.4349},
        'Soft-maple-birch': {'b1': -1.9123, 'b2': 2.3651},
        'Spruce': {'b1': -2.0773, 'b2': 2.3323},
        'True-fir-hemlock': {'b1': -2.5384, 'b2': 2.4814},
    }

    def __init__(self, species, coefficient_file: Optional[str] = None):
        """Initialize with species-group coefficients.

        Args:
            species: SpeciesGroup or species label (e.g. "Pine")
            coefficient_file: Overrides the packaged coefficient file

        Raises:
            UnknownSpeciesError: If the label is not a known species group
        """
        super().__init__(species, coefficient_file)
        self.b1 = float(self.coefficients['b1'])
        self.b2 = float(self.coefficients['b2'])

    def calculate_biomass_kg(self, dbh_cm: float) -> float:
        """Aboveground dry biomass in kilograms for a DBH in centimeters.

        Raises:
            InvalidMeasurementError: If dbh_cm is not a finite positive number,
                or the biomass is too large to represent
        """
        dbh_cm = validate_diameter(dbh_cm, 'dbh_cm')
        try:
            return math.exp(self.b1 + self.b2 * math.log(dbh_cm))
        except OverflowError as e:
            raise InvalidMeasurementError('dbh_cm', dbh_cm, "biomass out of range") from e

    def calculate_biomass(
        self,
        diameter_in: float,
        inches_to_cm: float = 2.54,
        kg_to_lb: float = 2.20462,
    ) -> float:
        """Aboveground dry biomass in pounds for a DBH in inches.

        Args:
            diameter_in: Diameter at breast height (inches)
            inches_to_cm: Inch to centimeter factor
            kg_to_lb: Kilogram to pound factor

        Returns:
            Aboveground biomass (lb)

        Raises:
            InvalidMeasurementError: If diameter_in is not a finite positive number
        """
        diameter_in = validate_diameter(diameter_in)
        biomass_lb = self.calculate_biomass_kg(diameter_in * inches_to_cm) * kg_to_lb
        if not math.isfinite(biomass_lb):
            raise InvalidMeasurementError('diameter_in', diameter_in, "biomass out of range")
        return biomass_lb

    def get_coefficient_pair(self) -> Tuple[float, float]:
        """Return the (b1, b2) pair for this species group."""
        return self.b1, self.b2


# Module-level cache of models, keyed by (species group, coefficient file)
_biomass_models: Dict[Tuple[SpeciesGroup, str], JenkinsBiomassModel] = {}


def create_biomass_model(species, coefficient_file: Optional[str] = None) -> JenkinsBiomassModel:
    """Get a cached biomass model for a species group.

    Args:
        species: SpeciesGroup or species label
        coefficient_file: Coefficient file name (default: packaged table)

    Returns:
        JenkinsBiomassModel instance (cached)

    Raises:
        UnknownSpeciesError: If the label is not a known species group
    """
    group = SpeciesGroup.from_string(species)
    filename = coefficient_file or JenkinsBiomassModel.COEFFICIENT_FILE
    key = (group, filename)
    if key not in _biomass_models:
        _biomass_models[key] = JenkinsBiomassModel(group, filename)
    return _biomass_models[key]


def clear_biomass_model_cache() -> None:
    """Drop cached models, e.g. after a coefficient file changes."""
    _biomass_models.clear()


def calculate_aboveground_biomass(
    species,
    diameter_in: float,
    settings: Optional[CarbonSettings] = None,
) -> float:
    """Calculate aboveground biomass in pounds.

    biomass = exp(b1 + b2 * ln(diameter_in * 2.54)) * 2.20462

    Args:
        species: SpeciesGroup or species label
        diameter_in: Diameter at breast height (inches), must be positive
        settings: Conversion settings (default: packaged settings)

    Returns:
        Aboveground biomass (lb)

    Raises:
        UnknownSpeciesError: If the species label is not a known group
        InvalidMeasurementError: If the diameter is missing or not positive
    """
    settings = settings or load_settings()
    model = create_biomass_model(species, settings.coefficient_file)
    return model.calculate_biomass(
        diameter_in,
        inches_to_cm=settings.inches_to_cm,
        kg_to_lb=settings.kg_to_lb,
    )


def get_all_species_coefficients(coefficient_file: Optional[str] = None) -> Dict[SpeciesGroup, Tuple[float, float]]:
    """Get the (b1, b2) pair for every species group.

    Raises:
        ConfigurationError: If the coefficient table misses any group
    """
    return {
        group: create_biomass_model(group, coefficient_file).get_coefficient_pair()
        for group in SpeciesGroup
    }
