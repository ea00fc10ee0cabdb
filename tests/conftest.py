"""
Shared pytest fixtures for treecarbon tests.

This module provides the settings, rows and stems used across test files.
"""
import pytest

from treecarbon.allometry import clear_biomass_model_cache
from treecarbon.config_loader import CarbonSettings, load_settings
from treecarbon.measurement import StemRow, TreeRow


# =============================================================================
# Cache Management
# =============================================================================

@pytest.fixture(autouse=True)
def clear_caches():
    """Clear cached biomass models before and after each test."""
    clear_biomass_model_cache()
    yield
    clear_biomass_model_cache()


# =============================================================================
# Settings
# =============================================================================

@pytest.fixture
def settings():
    """Packaged default settings."""
    return load_settings()


@pytest.fixture
def default_settings():
    """Settings built from dataclass defaults, independent of cfg files."""
    return CarbonSettings()


# =============================================================================
# Single-Tree Rows
# =============================================================================

@pytest.fixture
def tree_rows():
    """Single-tree rows covering remeasured, unmeasured and bad data.

    Returns rows in this order:
    - 0: Maples, remeasured soft maple
    - 1: Pines, pine without a second measurement
    - 2: Oaks, remeasured hard maple/oak
    - 3: Typos, unknown species group 'Oak'
    - 4: Zeros, zero first diameter
    - 5: Spruces, remeasured spruce
    """
    return [
        TreeRow(team="Maples", species="Soft-maple-birch", diameter_1=8.2, diameter_2=8.9, year=2024),
        TreeRow(team="Pines", species="Pine", diameter_1=12.0, year=2024),
        TreeRow(team="Oaks", species="Maple-oak-hickory-beech", diameter_1=10.5, diameter_2=11.1, year=2024),
        TreeRow(team="Typos", species="Oak", diameter_1=9.0, diameter_2=9.5, year=2024),
        TreeRow(team="Zeros", species="Aspen", diameter_1=0.0, diameter_2=1.0, year=2024),
        TreeRow(team="Spruces", species="Spruce", diameter_1=6.0, diameter_2=6.4, year=2024),
    ]


# =============================================================================
# Woodland Stems
# =============================================================================

@pytest.fixture
def plot_stems():
    """Stems from three woodland plots, all remeasured.

    - North: two stems
    - South: three stems
    - East: one stem
    """
    return [
        StemRow(team="North", species="Pine", diameter_1=10.0, diameter_2=10.6, year=2024, stem_id="N1"),
        StemRow(team="South", species="Aspen", diameter_1=5.0, diameter_2=5.5, year=2024, stem_id="S1"),
        StemRow(team="North", species="Spruce", diameter_1=7.0, diameter_2=7.3, year=2024, stem_id="N2"),
        StemRow(team="South", species="Aspen", diameter_1=6.0, diameter_2=6.2, year=2024, stem_id="S2"),
        StemRow(team="East", species="Mixed-hardwood", diameter_1=14.0, diameter_2=14.8, year=2024, stem_id="E1"),
        StemRow(team="South", species="Cedar/larch", diameter_1=4.0, diameter_2=4.1, year=2024, stem_id="S3"),
    ]
