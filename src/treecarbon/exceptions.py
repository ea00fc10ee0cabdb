"""
Custom exceptions for treecarbon.
Provides domain-specific error handling with informative messages.
"""
import math
from typing import Any, Optional


class TreeCarbonError(Exception):
    """Base exception for all treecarbon errors."""
    pass


class ConfigurationError(TreeCarbonError):
    """Raised when there are configuration-related issues."""
    pass


class ConfigFileNotFoundError(ConfigurationError):
    """Raised when a configuration or coefficient file does not exist."""
    def __init__(self, file_path, file_type: str = "configuration file"):
        self.file_path = str(file_path)
        self.file_type = file_type
        super().__init__(f"Required {file_type} not found: {file_path}")


class UnknownSpeciesError(ConfigurationError):
    """Raised when a species group label is not one of the known groups."""
    def __init__(self, label: Any, valid_labels: Optional[list] = None):
        self.label = label
        self.valid_labels = valid_labels or []
        message = f"Unknown species group '{label}'."
        if self.valid_labels:
            message += f" Valid species groups: {', '.join(self.valid_labels)}"
        super().__init__(message)


class DataError(TreeCarbonError):
    """Raised when there are data-related issues."""
    pass


class InvalidMeasurementError(DataError):
    """Raised when a diameter measurement is missing or not usable."""
    def __init__(self, field: str, value: Any, reason: str = ""):
        self.field = field
        self.value = value
        self.reason = reason
        message = f"Invalid value for '{field}': {value!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidDataError(DataError):
    """Raised when input data is malformed or invalid."""
    def __init__(self, data_description: str, reason: str):
        self.data_description = data_description
        self.reason = reason
        super().__init__(f"Invalid {data_description}: {reason}")


class IncompleteTimeSeriesWarning(UserWarning):
    """Flags a tree or plot that lacks a second measurement.

    Not raised. Instances are collected on the pipeline result so callers
    can see which entities have no sequestration value.
    """
    def __init__(self, team: str, year: Any = None, detail: str = "no second measurement"):
        self.team = team
        self.year = year
        self.detail = detail
        where = f"team '{team}'" if year is None else f"team '{team}' ({year})"
        super().__init__(f"Incomplete time series for {where}: {detail}")


# Validation utilities
def validate_positive(value: float, param_name: str) -> float:
    """Validate that a value is positive.

    Args:
        value: Value to validate
        param_name: Parameter name for error message

    Returns:
        The validated value

    Raises:
        ConfigurationError: If value is not positive
    """
    if value is None or value <= 0:
        raise ConfigurationError(
            f"Invalid value for setting '{param_name}': {value} (must be positive)"
        )
    return value


def validate_diameter(value: Any, field: str = "diameter_in") -> float:
    """Validate a diameter reading in inches.

    Args:
        value: Diameter to validate
        field: Field name for error message

    Returns:
        The diameter as a float

    Raises:
        InvalidMeasurementError: If the diameter is missing, non-numeric,
            non-finite or not positive
    """
    if value is None:
        raise InvalidMeasurementError(field, value, "diameter is required")
    try:
        diameter = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidMeasurementError(field, value, "not a number") from e
    if not math.isfinite(diameter):
        raise InvalidMeasurementError(field, value, "must be finite")
    if diameter <= 0:
        raise InvalidMeasurementError(field, value, "must be positive")
    return diameter
