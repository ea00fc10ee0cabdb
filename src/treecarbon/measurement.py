"""
Input records: field rows and the diameter measurements derived from them.

Field sheets are wide: one row per tree (or per stem in a woodland plot)
with a diameter column for each measurement time. The pipelines reshape
each row into long form, one Measurement per time point that was actually
measured.
"""
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, List, Optional

from .exceptions import InvalidDataError, validate_diameter
from .species import SpeciesGroup
from .utils import normalize_team

__all__ = [
    'TimePoint',
    'Measurement',
    'TreeRow',
    'StemRow',
    'is_missing',
    'parse_year',
]


class TimePoint(IntEnum):
    """Measurement time within a reporting year."""
    BEFORE = 1
    AFTER = 2


def is_missing(value: Any) -> bool:
    """True for None, NaN, and blank strings as read from a spreadsheet."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def parse_year(value: Any) -> Optional[int]:
    """Convert a reporting-year cell to an int; missing cells become None.

    Raises:
        InvalidDataError: If the value is not a whole number
    """
    if is_missing(value):
        return None
    try:
        year = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidDataError("year", f"{value!r} is not a year") from e
    if not math.isfinite(year) or not year.is_integer():
        raise InvalidDataError("year", f"{value!r} is not a year")
    return int(year)


@dataclass(frozen=True)
class Measurement:
    """One diameter reading of one stem at one time point.

    Attributes:
        team: Team (plot owner) that took the measurement
        species: Species group of the stem
        diameter_in: Diameter at breast height (inches), positive
        time_point: BEFORE or AFTER
        year: Reporting year, if known
        stem_id: Stem or tree identifier within the team, if known
    """
    team: str
    species: SpeciesGroup
    diameter_in: float
    time_point: TimePoint = TimePoint.BEFORE
    year: Optional[int] = None
    stem_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'species', SpeciesGroup.from_string(self.species))
        field = f"diameter_{int(TimePoint(self.time_point))}"
        object.__setattr__(self, 'diameter_in', validate_diameter(self.diameter_in, field))
        object.__setattr__(self, 'time_point', TimePoint(self.time_point))
        object.__setattr__(self, 'year', parse_year(self.year))


@dataclass(frozen=True)
class _FieldRow:
    team: str
    species: Any
    diameter_1: Any
    diameter_2: Any = None
    year: Optional[int] = None

    @property
    def identifier(self) -> Optional[str]:
        return None

    @property
    def has_second_measurement(self) -> bool:
        return not is_missing(self.diameter_2)

    def to_measurements(self) -> List[Measurement]:
        """Reshape this row into one Measurement per measured time point.

        Raises:
            UnknownSpeciesError: If the species label is not known
            InvalidMeasurementError: If a present diameter is invalid or
                diameter_1 is missing
            InvalidDataError: If the team name is blank or the year is not a year
        """
        return _reshape(self.team, self.species, self.diameter_1, self.diameter_2,
                        self.year, self.identifier)


@dataclass(frozen=True)
class TreeRow(_FieldRow):
    """One tree from the single-tree data sheet.

    Attributes:
        team: Team name
        species: Species group label as entered
        diameter_1: Diameter at the first measurement (inches)
        diameter_2: Diameter at the second measurement, if taken
        year: Reporting year
        tree_id: Optional tree tag
    """
    tree_id: Optional[str] = None

    @property
    def identifier(self) -> Optional[str]:
        return self.tree_id


@dataclass(frozen=True)
class StemRow(_FieldRow):
    """One stem from a woodland plot data sheet.

    Attributes:
        team: Team name; one team owns one plot per year
        species: Species group label as entered
        diameter_1: Diameter at the first measurement (inches)
        diameter_2: Diameter at the second measurement, if taken
        year: Reporting year
        stem_id: Optional stem tag within the plot
    """
    stem_id: Optional[str] = None

    @property
    def identifier(self) -> Optional[str]:
        return self.stem_id


def _reshape(team, species, diameter_1, diameter_2, year, stem_id) -> List[Measurement]:
    team = normalize_team(team)
    if team is None:
        raise InvalidDataError("row", "team name is required")
    group = SpeciesGroup.from_string(species)
    first = Measurement(
        team=team,
        species=group,
        diameter_in=None if is_missing(diameter_1) else diameter_1,
        time_point=TimePoint.BEFORE,
        year=year,
        stem_id=stem_id,
    )
    measurements = [first]
    if not is_missing(diameter_2):
        measurements.append(Measurement(
            team=team,
            species=group,
            diameter_in=diameter_2,
            time_point=TimePoint.AFTER,
            year=year,
            stem_id=stem_id,
        ))
    return measurements
