"""
Configuration loader for treecarbon.
Provides unified access to YAML, TOML, and JSON configuration files.

Supports:
- YAML (.yaml, .yml) - conversion factors and reporting settings
- TOML (.toml) - the same settings, for users who prefer it
- JSON (.json) - coefficient files (Jenkins biomass coefficients)

Features:
- Packaged defaults in cfg/carbon_settings.yaml
- User settings files merged over the defaults
- Coefficient file caching
"""
import json
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional, Union

import yaml

from .exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    InvalidDataError,
    validate_positive,
)

__all__ = [
    'CarbonSettings',
    'ConfigLoader',
    'DEFAULT_SETTINGS_FILE',
    'get_config_loader',
    'load_settings',
    'load_coefficient_file',
]

DEFAULT_SETTINGS_FILE = 'carbon_settings.yaml'

# Settings sections and the CarbonSettings fields they populate
_SECTION_FIELDS = {
    'conversion': (
        'carbon_fraction',
        'co2_to_carbon_ratio',
        'inches_to_cm',
        'kg_to_lb',
        'plot_expansion_factor',
        'lb_per_ton',
    ),
    'reporting': ('display_row_cap', 'excluded_teams'),
}


@dataclass(frozen=True)
class CarbonSettings:
    """Conversion factors and reporting settings for one run.

    A single instance is passed through a pipeline run so every stage uses
    the same factors.

    Attributes:
        carbon_fraction: Fraction of biomass that is carbon
        co2_to_carbon_ratio: CO2-equivalent mass per unit carbon mass
        inches_to_cm: Inches to centimeters
        kg_to_lb: Kilograms to pounds
        plot_expansion_factor: Multiplier from plot sums to per-acre values
        lb_per_ton: Pounds per (short) ton
        display_row_cap: Maximum rows in ranked output
        excluded_teams: Teams withheld from ranked output and charts
        coefficient_file: Name of the Jenkins coefficient file
    """
    carbon_fraction: float = 0.5
    co2_to_carbon_ratio: float = 3.667
    inches_to_cm: float = 2.54
    kg_to_lb: float = 2.20462
    plot_expansion_factor: float = 10.0
    lb_per_ton: float = 2000.0
    display_row_cap: int = 40
    excluded_teams: FrozenSet[str] = field(default_factory=frozenset)
    coefficient_file: str = 'jenkins_biomass_coefficients.json'

    def __post_init__(self):
        for name in ('carbon_fraction', 'co2_to_carbon_ratio', 'inches_to_cm',
                     'kg_to_lb', 'plot_expansion_factor', 'lb_per_ton',
                     'display_row_cap'):
            validate_positive(getattr(self, name), name)
        if not isinstance(self.display_row_cap, int):
            raise ConfigurationError(
                f"Invalid value for setting 'display_row_cap': "
                f"{self.display_row_cap!r} (must be an integer)"
            )
        # Accept any iterable of names, stored as a frozenset
        object.__setattr__(self, 'excluded_teams', _as_team_set(self.excluded_teams))

    def with_overrides(self, **overrides: Any) -> 'CarbonSettings':
        """Return a copy with the given settings replaced.

        Raises:
            ConfigurationError: If an override names an unknown setting
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown settings: {unknown}. Known settings: {sorted(known)}"
            )
        return replace(self, **overrides)

    def is_excluded(self, team: Optional[str]) -> bool:
        """Check whether a team is withheld from ranked output."""
        return team is not None and team in self.excluded_teams

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a nested dictionary in settings-file layout."""
        data: Dict[str, Any] = {}
        for section, names in _SECTION_FIELDS.items():
            data[section] = {name: getattr(self, name) for name in names}
        data['reporting']['excluded_teams'] = sorted(self.excluded_teams)
        data['coefficient_file'] = self.coefficient_file
        return data


def _as_team_set(teams: Union[None, str, Iterable[str]]) -> FrozenSet[str]:
    if teams is None:
        return frozenset()
    if isinstance(teams, str):
        teams = [teams]
    return frozenset(str(t).strip() for t in teams if str(t).strip())


class ConfigLoader:
    """Loads and manages treecarbon configuration from the cfg/ directory.

    Provides unified access to:
    - Conversion and reporting settings (YAML/TOML/JSON)
    - Coefficient files (JSON) with caching

    Attributes:
        cfg_dir: Path to the base configuration directory
        settings_file: Optional user settings file merged over the defaults
        settings: The resolved CarbonSettings
    """

    def __init__(self, cfg_dir: Path = None, settings_file: Union[str, Path] = None):
        """Initialize the configuration loader.

        Args:
            cfg_dir: Path to the configuration directory. Defaults to the
                cfg/ directory inside the package.
            settings_file: Optional settings file whose values override the
                packaged defaults.
        """
        if cfg_dir is None:
            cfg_dir = Path(__file__).parent / 'cfg'
        self.cfg_dir = Path(cfg_dir)
        self.settings_file = Path(settings_file) if settings_file is not None else None

        # Cache for coefficient files (loaded once, reused)
        self._coefficient_cache: Dict[str, Dict[str, Any]] = {}

        self._load_main_config()

    def _load_config_file(self, file_path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML, TOML or JSON file.

        Args:
            file_path: Path to the configuration file

        Returns:
            Dictionary containing configuration data

        Raises:
            ConfigFileNotFoundError: If the file does not exist
            ConfigurationError: If the file format is not supported or
                parsing fails
        """
        if not file_path.exists():
            raise ConfigFileNotFoundError(file_path)

        suffix = file_path.suffix.lower()

        try:
            if suffix in ['.yaml', '.yml']:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
                    if data is None:
                        raise InvalidDataError("YAML file", "file is empty or contains only comments")
                    return data
            elif suffix == '.toml':
                with open(file_path, 'rb') as f:
                    return tomllib.load(f)
            elif suffix == '.json':
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                    if data is None:
                        raise InvalidDataError("JSON file", "file is empty or contains null")
                    return data
            else:
                raise ConfigurationError(f"Unsupported configuration file format: {suffix}. "
                                         f"Supported formats: .yaml, .yml, .toml, .json")
        except yaml.YAMLError as e:
            raise InvalidDataError("YAML configuration", f"parsing error: {str(e)}") from e
        except json.JSONDecodeError as e:
            raise InvalidDataError("JSON configuration", f"parsing error: {str(e)}") from e
        except tomllib.TOMLDecodeError as e:
            raise InvalidDataError("TOML configuration", f"parsing error: {str(e)}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration from {file_path}: {str(e)}") from e

    def _load_main_config(self):
        """Load packaged defaults, then merge the user settings file over them."""
        defaults = self._load_config_file(self.cfg_dir / DEFAULT_SETTINGS_FILE)
        self.raw_config = defaults

        if self.settings_file is not None:
            user_config = self._load_config_file(self.settings_file)
            self.raw_config = _merge_config(defaults, user_config)

        self.settings = self._settings_from_config(self.raw_config)

    @staticmethod
    def _settings_from_config(config: Dict[str, Any]) -> CarbonSettings:
        """Build CarbonSettings from a nested settings dictionary."""
        values: Dict[str, Any] = {}
        for section, names in _SECTION_FIELDS.items():
            section_data = config.get(section) or {}
            if not isinstance(section_data, dict):
                raise InvalidDataError(f"'{section}' settings", "expected a mapping")
            unknown = sorted(set(section_data) - set(names))
            if unknown:
                raise ConfigurationError(
                    f"Unknown settings in '{section}': {unknown}. "
                    f"Known settings: {list(names)}"
                )
            values.update(section_data)
        if 'coefficient_file' in config:
            values['coefficient_file'] = config['coefficient_file']
        if 'display_row_cap' in values:
            values['display_row_cap'] = int(values['display_row_cap'])
        return CarbonSettings(**values)

    def load_coefficient_file(self, filename: str = None) -> Dict[str, Any]:
        """Load a JSON coefficient file with caching.

        Coefficient files are loaded once and cached. Absolute paths are
        used as-is; bare names are resolved against cfg_dir.

        Args:
            filename: Coefficient file name. Defaults to the file named in
                the settings.

        Returns:
            Dictionary containing coefficient data

        Raises:
            ConfigurationError: If the file cannot be found or parsed
        """
        filename = filename or self.settings.coefficient_file
        if filename not in self._coefficient_cache:
            file_path = Path(filename)
            if not file_path.is_absolute():
                file_path = self.cfg_dir / filename
            self._coefficient_cache[filename] = self._load_config_file(file_path)
        return self._coefficient_cache[filename]

    def clear_coefficient_cache(self) -> None:
        """Clear the coefficient file cache.

        Useful for testing or when configuration files may have changed.
        """
        self._coefficient_cache.clear()

    def save_settings(self, file_path: Union[str, Path], settings: CarbonSettings = None) -> None:
        """Save settings to a YAML or JSON file.

        Args:
            file_path: Destination path
            settings: Settings to save. Defaults to this loader's settings.
        """
        file_path = Path(file_path)
        data = (settings or self.settings).to_dict()
        file_path.parent.mkdir(parents=True, exist_ok=True)

        suffix = file_path.suffix.lower()
        if suffix in ['.yaml', '.yml']:
            with open(file_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        elif suffix == '.json':
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        else:
            raise ConfigurationError(f"Unsupported settings file format for saving: {suffix}")


def _merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


# Global configuration loader for the packaged defaults
_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Get the shared configuration loader for the packaged defaults."""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_settings(settings_file: Union[str, Path] = None, **overrides: Any) -> CarbonSettings:
    """Load settings from the packaged defaults, a settings file, and overrides.

    Args:
        settings_file: Optional YAML/TOML/JSON file overriding the defaults
        **overrides: Individual settings to replace (e.g. excluded_teams=['X'])

    Returns:
        Resolved CarbonSettings
    """
    if settings_file is None:
        settings = get_config_loader().settings
    else:
        settings = ConfigLoader(settings_file=settings_file).settings
    if overrides:
        settings = settings.with_overrides(**overrides)
    return settings


def load_coefficient_file(filename: str = None) -> Dict[str, Any]:
    """Convenience function to load a JSON coefficient file with caching.

    Args:
        filename: Name of the coefficient file. Defaults to the packaged
            Jenkins coefficient file.
    """
    return get_config_loader().load_coefficient_file(filename)
