"""
Tests for settings loading and overrides.
"""
import json

import pytest
import yaml

from treecarbon.config_loader import CarbonSettings, ConfigLoader, get_config_loader, load_settings
from treecarbon.exceptions import ConfigFileNotFoundError, ConfigurationError, InvalidDataError


class TestPackagedDefaults:

    def test_defaults(self, settings):
        assert settings.carbon_fraction == 0.5
        assert settings.co2_to_carbon_ratio == 3.667
        assert settings.inches_to_cm == 2.54
        assert settings.kg_to_lb == 2.20462
        assert settings.plot_expansion_factor == 10
        assert settings.lb_per_ton == 2000
        assert settings.display_row_cap == 40
        assert settings.excluded_teams == frozenset()

    def test_packaged_file_matches_dataclass_defaults(self, settings, default_settings):
        assert settings == default_settings

    def test_loader_is_shared(self):
        assert get_config_loader() is get_config_loader()


class TestSettingsFiles:
    """User settings files are merged over the packaged defaults."""

    def test_yaml_override(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({
            "conversion": {"plot_expansion_factor": 4},
            "reporting": {"excluded_teams": ["Team 7"], "display_row_cap": 10},
        }))
        settings = load_settings(path)
        assert settings.plot_expansion_factor == 4
        assert settings.excluded_teams == frozenset({"Team 7"})
        assert settings.display_row_cap == 10
        assert settings.carbon_fraction == 0.5

    def test_json_override(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"conversion": {"carbon_fraction": 0.47}}))
        assert load_settings(path).carbon_fraction == 0.47

    def test_toml_override(self, tmp_path):
        path = tmp_path / "settings.toml"
        path.write_text('[reporting]\nexcluded_teams = ["A", "B"]\n')
        assert load_settings(path).excluded_teams == frozenset({"A", "B"})

    def test_keyword_overrides_win(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({"conversion": {"plot_expansion_factor": 4}}))
        assert load_settings(path, plot_expansion_factor=5).plot_expansion_factor == 5

    def test_unknown_setting(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({"conversion": {"carbon_fractoin": 0.5}}))
        with pytest.raises(ConfigurationError, match="carbon_fractoin"):
            load_settings(path)

    @pytest.mark.parametrize("section,name,value", [
        pytest.param("conversion", "carbon_fraction", -0.5, id="negative_fraction"),
        pytest.param("conversion", "plot_expansion_factor", 0, id="zero_expansion"),
        pytest.param("reporting", "display_row_cap", 0, id="zero_row_cap"),
    ])
    def test_invalid_value(self, tmp_path, section, name, value):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({section: {name: value}}))
        with pytest.raises(ConfigurationError, match=name):
            load_settings(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError):
            load_settings(tmp_path / "absent.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "settings.ini"
        path.write_text("[conversion]\n")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            load_settings(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("conversion: [unclosed\n")
        with pytest.raises(InvalidDataError):
            load_settings(path)

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("# nothing here\n")
        with pytest.raises(InvalidDataError):
            load_settings(path)

    def test_save_and_reload(self, tmp_path, default_settings):
        settings = default_settings.with_overrides(excluded_teams=["B", "A"], display_row_cap=12)
        path = tmp_path / "out" / "settings.yaml"
        ConfigLoader().save_settings(path, settings)
        assert load_settings(path) == settings


class TestCarbonSettings:

    def test_with_overrides_returns_copy(self, default_settings):
        changed = default_settings.with_overrides(lb_per_ton=2204.62)
        assert changed.lb_per_ton == 2204.62
        assert default_settings.lb_per_ton == 2000.0

    def test_unknown_override(self, default_settings):
        with pytest.raises(ConfigurationError, match="Unknown settings"):
            default_settings.with_overrides(tons_per_lb=1)

    def test_excluded_teams_normalized(self):
        settings = CarbonSettings(excluded_teams=[" Team 7 ", "", "Team 9"])
        assert settings.excluded_teams == frozenset({"Team 7", "Team 9"})
        assert settings.is_excluded("Team 7")
        assert not settings.is_excluded(None)

    def test_single_team_string(self):
        assert CarbonSettings(excluded_teams="Team 7").excluded_teams == frozenset({"Team 7"})

    def test_row_cap_must_be_integer(self):
        with pytest.raises(ConfigurationError, match="integer"):
            CarbonSettings(display_row_cap=2.5)

    def test_to_dict_layout(self, default_settings):
        data = default_settings.with_overrides(excluded_teams=["B", "A"]).to_dict()
        assert data["reporting"]["excluded_teams"] == ["A", "B"]
        assert data["conversion"]["carbon_fraction"] == 0.5
        assert data["coefficient_file"] == "jenkins_biomass_coefficients.json"
