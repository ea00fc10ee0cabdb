"""
Species group enumeration for type-safe allometry lookups.

This module provides a SpeciesGroup enum that inherits from (str, Enum) so a
group can be used anywhere its spreadsheet label is expected, while keeping
the set of groups closed. The groups are the Jenkins et al. (2003) national
biomass species groups used by the field crews.

Usage:
    from treecarbon.species import SpeciesGroup

    group = SpeciesGroup.PINE
    print(group.value)  # "Pine"

    group = SpeciesGroup.from_string("cedar/larch")

    if SpeciesGroup.is_valid("Pine"):
        print("Valid species group")
"""

from enum import Enum

from .exceptions import UnknownSpeciesError
from .utils import normalize_label


class SpeciesGroup(str, Enum):
    """
    Jenkins species groups supported by the biomass model.

    Each member's value is the label used in field data sheets.
    """

    # =========================================================================
    # Hardwoods
    # =========================================================================

    ASPEN = "Aspen"
    """Aspen/alder/cottonwood/willow group."""

    MAPLE_OAK_HICKORY_BEECH = "Maple-oak-hickory-beech"
    """Hard maple/oak/hickory/beech group."""

    MIXED_HARDWOOD = "Mixed-hardwood"
    """Mixed hardwood group - catch-all for other deciduous trees."""

    SOFT_MAPLE_BIRCH = "Soft-maple-birch"
    """Soft maple/birch group."""

    # =========================================================================
    # Softwoods
    # =========================================================================

    CEDAR_LARCH = "Cedar/larch"
    """Cedar/larch group."""

    PINE = "Pine"
    """Pine group."""

    SPRUCE = "Spruce"
    """Spruce group."""

    TRUE_FIR_HEMLOCK = "True-fir-hemlock"
    """True fir/hemlock group."""

    @classmethod
    def from_string(cls, label) -> "SpeciesGroup":
        """
        Convert a species label to a SpeciesGroup enum member.

        Args:
            label: A species group label (case-insensitive) or a SpeciesGroup

        Returns:
            The corresponding SpeciesGroup enum member

        Raises:
            UnknownSpeciesError: If the label is not a known species group

        Example:
            >>> SpeciesGroup.from_string("pine")
            SpeciesGroup.PINE
        """
        if isinstance(label, cls):
            return label

        normalized = normalize_label(label)
        for member in cls:
            if normalize_label(member.value) == normalized:
                return member

        raise UnknownSpeciesError(label, cls.list_all_labels())

    @classmethod
    def is_valid(cls, label) -> bool:
        """
        Check if a label names a known species group.

        Example:
            >>> SpeciesGroup.is_valid("Spruce")
            True
            >>> SpeciesGroup.is_valid("Douglas-fir")
            False
        """
        if label is None:
            return False
        normalized = normalize_label(label)
        return any(normalize_label(member.value) == normalized for member in cls)

    @classmethod
    def get_softwood_groups(cls) -> list["SpeciesGroup"]:
        """Get the softwood (conifer) species groups."""
        return [cls.CEDAR_LARCH, cls.PINE, cls.SPRUCE, cls.TRUE_FIR_HEMLOCK]

    @classmethod
    def get_hardwood_groups(cls) -> list["SpeciesGroup"]:
        """Get the hardwood species groups."""
        return [
            cls.ASPEN,
            cls.MAPLE_OAK_HICKORY_BEECH,
            cls.MIXED_HARDWOOD,
            cls.SOFT_MAPLE_BIRCH,
        ]

    @classmethod
    def list_all_labels(cls) -> list[str]:
        """Get a sorted list of all valid species group labels."""
        return sorted(member.value for member in cls)

    def __str__(self) -> str:
        """Return the species group label."""
        return self.value

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return f"SpeciesGroup.{self.name}"


# =============================================================================
# Module-level convenience functions
# =============================================================================

def get_species_group(label) -> SpeciesGroup:
    """
    Convert a label to a SpeciesGroup enum (convenience function).

    This is an alias for SpeciesGroup.from_string().

    Raises:
        UnknownSpeciesError: If the label is not valid
    """
    return SpeciesGroup.from_string(label)


def validate_species_group(label) -> bool:
    """
    Check if a species label is valid (convenience function).

    This is an alias for SpeciesGroup.is_valid().
    """
    return SpeciesGroup.is_valid(label)


# =============================================================================
# Default exports
# =============================================================================

__all__ = [
    "SpeciesGroup",
    "get_species_group",
    "validate_species_group",
]
