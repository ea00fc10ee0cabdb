"""
treecarbon: aboveground carbon and sequestration for trees and woodland plots

Estimates aboveground biomass from diameter with the Jenkins et al. (2003)
species-group equations, converts it to carbon and CO2-equivalent, and
compares two measurements to report sequestration per tree and per acre.

Quick Start:
    >>> from treecarbon import TreeRow, build_tree_records, RankingProjector
    >>> result = build_tree_records([TreeRow("Oaks", "Maple-oak-hickory-beech", 10.5, 11.1)])
    >>> RankingProjector.for_trees().project(result.records)
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__author__ = "treecarbon Development Team"

# =============================================================================
# Species
# =============================================================================
from .species import SpeciesGroup, get_species_group, validate_species_group

# =============================================================================
# Configuration Loading
# =============================================================================
from .config_loader import (
    CarbonSettings,
    ConfigLoader,
    get_config_loader,
    load_settings,
)

# =============================================================================
# Allometry and Derived Metrics
# =============================================================================
from .allometry import (
    JenkinsBiomassModel,
    create_biomass_model,
    calculate_aboveground_biomass,
    get_all_species_coefficients,
)
from .derived_metrics import (
    BiomassResult,
    derive_carbon,
    derive_co2e,
    compute_biomass_result,
)

# =============================================================================
# Records
# =============================================================================
from .measurement import TimePoint, Measurement, TreeRow, StemRow
from .records import TreeRecord, PlotAggregate, RowError, PipelineResult

# =============================================================================
# Pipelines
# =============================================================================
from .sequestration import SequestrationCalculator, sequestration
from .tree_pipeline import build_tree_records, compute_tree_record
from .woodland_pipeline import build_plot_aggregates

# =============================================================================
# Ranking and Output
# =============================================================================
from .ranking import (
    ColumnSpec,
    RankingProjector,
    project,
    listing,
    TREE_COLUMNS,
    TREE_LISTING_COLUMNS,
    PLOT_COLUMNS,
    PLOT_LISTING_COLUMNS,
)
from .data_import import read_table, tree_rows_from_frame, stem_rows_from_frame
from .data_export import DataExporter

# =============================================================================
# Logging
# =============================================================================
from .logging_config import get_logger, setup_logging

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    TreeCarbonError,
    ConfigurationError,
    ConfigFileNotFoundError,
    UnknownSpeciesError,
    DataError,
    InvalidMeasurementError,
    InvalidDataError,
    IncompleteTimeSeriesWarning,
)

# =============================================================================
# Base Classes (for extension)
# =============================================================================
from .model_base import ParameterizedModel

# =============================================================================
# Entry Point
# =============================================================================
from .main import main

# =============================================================================
# Public API Definition
# =============================================================================
__all__ = [
    # Package Metadata
    "__version__",
    "__author__",
    # Species
    "SpeciesGroup",
    "get_species_group",
    "validate_species_group",
    # Configuration
    "CarbonSettings",
    "ConfigLoader",
    "get_config_loader",
    "load_settings",
    # Allometry and Derived Metrics
    "JenkinsBiomassModel",
    "create_biomass_model",
    "calculate_aboveground_biomass",
    "get_all_species_coefficients",
    "BiomassResult",
    "derive_carbon",
    "derive_co2e",
    "compute_biomass_result",
    # Records
    "TimePoint",
    "Measurement",
    "TreeRow",
    "StemRow",
    "TreeRecord",
    "PlotAggregate",
    "RowError",
    "PipelineResult",
    # Pipelines
    "SequestrationCalculator",
    "sequestration",
    "build_tree_records",
    "compute_tree_record",
    "build_plot_aggregates",
    # Ranking and Output
    "ColumnSpec",
    "RankingProjector",
    "project",
    "listing",
    "TREE_COLUMNS",
    "TREE_LISTING_COLUMNS",
    "PLOT_COLUMNS",
    "PLOT_LISTING_COLUMNS",
    "read_table",
    "tree_rows_from_frame",
    "stem_rows_from_frame",
    "DataExporter",
    # Logging
    "get_logger",
    "setup_logging",
    # Exceptions
    "TreeCarbonError",
    "ConfigurationError",
    "ConfigFileNotFoundError",
    "UnknownSpeciesError",
    "DataError",
    "InvalidMeasurementError",
    "InvalidDataError",
    "IncompleteTimeSeriesWarning",
    # Base Classes
    "ParameterizedModel",
    # Entry Point
    "main",
]
