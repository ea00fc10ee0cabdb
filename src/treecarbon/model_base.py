"""
Base class for species-parameterized allometric models.

Provides common functionality for loading species-group coefficients
from JSON configuration files with caching.

Unlike a lookup with a default, a species group that is missing from the
coefficient table is an error: a model can never be built with empty or
borrowed coefficients.

Usage:
    class JenkinsBiomassModel(ParameterizedModel):
        COEFFICIENT_FILE = 'jenkins_biomass_coefficients.json'
        COEFFICIENT_KEY = 'species_coefficients'
        REQUIRED_COEFFICIENTS = ('b1', 'b2')
        FALLBACK_PARAMETERS = {
            'Pine': {'b1': -2.5356, 'b2': 2.4349},
        }
"""
from abc import ABC
from typing import Any, Dict, Optional, Tuple

from .config_loader import load_coefficient_file
from .exceptions import ConfigFileNotFoundError, ConfigurationError
from .logging_config import get_logger
from .species import SpeciesGroup

logger = get_logger(__name__)


class ParameterizedModel(ABC):
    """Base class for models with species-group-specific coefficients.

    Subclasses must define:
        COEFFICIENT_FILE: str - Name of the JSON file containing coefficients
        COEFFICIENT_KEY: str - Key in the JSON file containing species coefficients
        FALLBACK_PARAMETERS: dict - Coefficients by species label, used only
            when the coefficient file cannot be found

    Optional class attributes:
        REQUIRED_COEFFICIENTS: tuple - Coefficient names every species must define

    Attributes:
        species: The species group for this model instance
        coefficients: The loaded coefficients for the species
        raw_data: The complete raw data loaded from the coefficient file
    """

    # Subclasses must override these
    COEFFICIENT_FILE: str = None
    COEFFICIENT_KEY: str = 'species_coefficients'
    FALLBACK_PARAMETERS: Dict[str, Dict[str, Any]] = {}
    REQUIRED_COEFFICIENTS: Tuple[str, ...] = ()

    def __init__(self, species, coefficient_file: Optional[str] = None):
        """Initialize the model with species-specific parameters.

        Args:
            species: SpeciesGroup or species label
            coefficient_file: Overrides COEFFICIENT_FILE

        Raises:
            UnknownSpeciesError: If the species label is not a known group
            ConfigurationError: If the coefficient table lacks the species or
                any required coefficient
        """
        self.species = SpeciesGroup.from_string(species)
        self.coefficient_file = coefficient_file or self.COEFFICIENT_FILE
        self.coefficients: Dict[str, Any] = {}
        self.raw_data: Dict[str, Any] = {}
        self._load_parameters()

    def _get_coefficient_data(self) -> Optional[Dict[str, Any]]:
        """Load coefficient data from JSON file using ConfigLoader with caching.

        Returns:
            Dictionary containing the full coefficient file data,
            or None if the file does not exist.
        """
        if self.coefficient_file is None:
            raise NotImplementedError(
                f"{self.__class__.__name__} must define COEFFICIENT_FILE class attribute"
            )

        try:
            return load_coefficient_file(self.coefficient_file)
        except ConfigFileNotFoundError:
            logger.warning(
                "Coefficient file %s not found, using built-in coefficients",
                self.coefficient_file,
            )
            return None

    def _load_parameters(self) -> None:
        """Load species-specific parameters from configuration.

        This method:
        1. Loads the coefficient file data (cached)
        2. Extracts the coefficients for this species group
        3. Falls back to FALLBACK_PARAMETERS only if the file does not exist

        Raises:
            ConfigurationError: If the file has no coefficient table, or the
                species group or a required coefficient is absent
        """
        data = self._get_coefficient_data()

        if data is None:
            self.raw_data = {}
            table = self.FALLBACK_PARAMETERS
            source = f"{self.__class__.__name__}.FALLBACK_PARAMETERS"
        else:
            self.raw_data = data
            table = data.get(self.COEFFICIENT_KEY) if isinstance(data, dict) else None
            source = self.coefficient_file
            if not isinstance(table, dict) or not table:
                raise ConfigurationError(
                    f"Coefficient file {source} has no '{self.COEFFICIENT_KEY}' table"
                )

        if self.species.value not in table:
            raise ConfigurationError(
                f"No coefficients for species group '{self.species.value}' in {source}"
            )

        coefficients = dict(table[self.species.value])
        missing = [name for name in self.REQUIRED_COEFFICIENTS if coefficients.get(name) is None]
        if missing:
            raise ConfigurationError(
                f"Coefficients {missing} missing for species group "
                f"'{self.species.value}' in {source}"
            )
        self.coefficients = coefficients

    def get_species_coefficients(self) -> Dict[str, Any]:
        """Get the coefficients for this species.

        Returns:
            Dictionary containing species-specific coefficients.
        """
        return self.coefficients.copy()

    def get_raw_data(self) -> Dict[str, Any]:
        """Get the full raw data loaded from the coefficient file."""
        return self.raw_data.copy()

    def get_coefficient(self, key: str) -> Any:
        """Get a specific coefficient value.

        Raises:
            ConfigurationError: If the coefficient is not defined
        """
        if key not in self.coefficients:
            raise ConfigurationError(
                f"Coefficient '{key}' not defined for species group '{self.species.value}'"
            )
        return self.coefficients[key]

    def __repr__(self) -> str:
        """Return string representation of the model."""
        return f"{self.__class__.__name__}(species='{self.species.value}')"


__all__ = ['ParameterizedModel']
