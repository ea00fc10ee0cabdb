"""
Tests for plot aggregation and the woodland pipeline.
"""
import math

import pytest

from treecarbon.derived_metrics import BiomassResult, compute_biomass_result
from treecarbon.exceptions import InvalidDataError, InvalidMeasurementError, UnknownSpeciesError
from treecarbon.measurement import Measurement, StemRow, TimePoint
from treecarbon.sequestration import SequestrationCalculator, sequestration
from treecarbon.woodland_pipeline import build_plot_aggregates


def fixed_result(team, carbon, time_point=TimePoint.BEFORE):
    """A BiomassResult with a chosen carbon mass."""
    return BiomassResult(
        measurement=Measurement(team, "Pine", 5.0, time_point=time_point),
        aboveground_biomass_lb=carbon * 2,
        carbon_lb=carbon,
        co2e_lb=carbon * 3.667,
    )


def stem_carbon(species, diameter, settings):
    return compute_biomass_result(Measurement("x", species, diameter), settings).carbon_lb


class TestSequestration:

    @pytest.mark.parametrize("v1,v2,expected", [
        (10.0, 15.0, 5.0),
        (15.0, 10.0, -5.0),
        (None, 10.0, None),
        (10.0, None, None),
    ])
    def test_difference(self, v1, v2, expected):
        assert sequestration(v1, v2) == expected


class TestPlotAggregate:
    """Per-acre scaling of plot sums."""

    def test_per_acre_scaling(self, default_settings):
        calculator = SequestrationCalculator(default_settings)
        aggregate = calculator.plot_aggregate(
            "North", 2024, [fixed_result("North", 5.0), fixed_result("North", 7.0)]
        )
        assert aggregate.carbon_per_acre_1 == pytest.approx(120.0)
        assert aggregate.tons_per_acre_1 == pytest.approx(0.06)
        assert aggregate.co2e_per_acre_1 == pytest.approx(120.0 * 3.667)
        assert aggregate.n_stems_1 == 2
        assert aggregate.tons_per_acre_2 is None
        assert aggregate.tons_sequestered is None
        assert not aggregate.stem_count_mismatch

    def test_sequestration_per_acre(self, default_settings):
        calculator = SequestrationCalculator(default_settings)
        aggregate = calculator.plot_aggregate(
            "North", 2024,
            [fixed_result("North", 5.0), fixed_result("North", 7.0)],
            [fixed_result("North", 6.0, TimePoint.AFTER), fixed_result("North", 8.0, TimePoint.AFTER)],
        )
        assert aggregate.tons_per_acre_2 == pytest.approx(0.07)
        assert aggregate.tons_sequestered == pytest.approx(0.01)
        assert aggregate.co2e_sequestered == pytest.approx(20.0 * 3.667)
        assert aggregate.is_complete

    def test_custom_expansion_factor(self, default_settings):
        calculator = SequestrationCalculator(default_settings.with_overrides(plot_expansion_factor=4))
        aggregate = calculator.plot_aggregate("North", None, [fixed_result("North", 5.0)])
        assert aggregate.carbon_per_acre_1 == pytest.approx(20.0)

    def test_stem_count_mismatch(self, default_settings):
        calculator = SequestrationCalculator(default_settings)
        results_1 = [fixed_result("North", 5.0), fixed_result("North", 7.0)]
        results_2 = [fixed_result("North", 6.0, TimePoint.AFTER)]

        aggregate = calculator.plot_aggregate("North", 2024, results_1, results_2)
        assert aggregate.stem_count_mismatch
        assert aggregate.tons_sequestered == pytest.approx((60.0 - 120.0) / 2000)

        strict = calculator.plot_aggregate(
            "North", 2024, results_1, results_2, require_complete_remeasurement=True
        )
        assert strict.stem_count_mismatch
        assert strict.tons_per_acre_2 == pytest.approx(0.03)
        assert strict.tons_sequestered is None
        assert strict.co2e_sequestered is None


class TestBuildPlotAggregates:

    def test_one_aggregate_per_team_in_input_order(self, plot_stems, settings):
        result = build_plot_aggregates(plot_stems, settings)
        assert [a.team for a in result.records] == ["North", "South", "East"]
        assert [a.n_stems_1 for a in result.records] == [2, 3, 1]
        assert [a.n_stems_2 for a in result.records] == [2, 3, 1]
        assert result.ok
        assert result.warnings == []

    def test_plot_sums_only_own_stems(self, plot_stems, settings):
        north = build_plot_aggregates(plot_stems, settings).records[0]
        expected_1 = 10 * (stem_carbon("Pine", 10.0, settings) + stem_carbon("Spruce", 7.0, settings))
        expected_2 = 10 * (stem_carbon("Pine", 10.6, settings) + stem_carbon("Spruce", 7.3, settings))
        assert north.carbon_per_acre_1 == pytest.approx(expected_1)
        assert north.carbon_per_acre_2 == pytest.approx(expected_2)
        assert north.tons_sequestered == pytest.approx((expected_2 - expected_1) / 2000)

    def test_years_kept_apart(self, settings):
        stems = [
            StemRow("North", "Pine", 10.0, 10.5, year=2023),
            StemRow("North", "Pine", 10.5, 11.0, year=2024),
            StemRow("North", "Pine", 8.0, 8.4, year=2023),
        ]
        records = build_plot_aggregates(stems, settings).records
        assert [(a.team, a.year, a.n_stems_1) for a in records] == [
            ("North", 2023, 2),
            ("North", 2024, 1),
        ]

    def test_year_cells_parsed_before_grouping(self, settings):
        stems = [
            StemRow("North", "Pine", 10.0, 10.5, year="2023"),
            StemRow("North", "Pine", 8.0, 8.4, year=2023.0),
            StemRow("North", "Pine", 9.0, 9.3, year=2023),
        ]
        (aggregate,) = build_plot_aggregates(stems, settings).records
        assert aggregate.year == 2023
        assert aggregate.n_stems_1 == 3

    def test_bad_year_rejected_per_stem(self, plot_stems, settings):
        stems = plot_stems + [StemRow("North", "Pine", 9.0, 9.3, year="spring")]
        result = build_plot_aggregates(stems, settings)
        assert [e.index for e in result.errors] == [6]
        assert isinstance(result.errors[0].error, InvalidDataError)
        assert result.records == build_plot_aggregates(plot_stems, settings).records

    def test_oversized_stem_rejected_per_row(self, plot_stems, settings):
        stems = plot_stems + [StemRow("East", "Pine", 1e200, 1e201, year=2024)]
        result = build_plot_aggregates(stems, settings)
        assert [e.index for e in result.errors] == [6]
        assert isinstance(result.errors[0].error, InvalidMeasurementError)
        assert [a.team for a in result.records] == ["North", "South", "East"]

    def test_error_team_names_stripped(self, settings):
        result = build_plot_aggregates([StemRow(" North ", "Oak", 9.0)], settings)
        assert result.errors[0].team == "North"

    def test_plot_without_remeasurement(self, settings):
        stems = [StemRow("West", "Aspen", 5.0), StemRow("West", "Aspen", 6.0)]
        result = build_plot_aggregates(stems, settings)
        (aggregate,) = result.records
        assert aggregate.n_stems_2 == 0
        assert aggregate.tons_per_acre_2 is None
        assert aggregate.tons_sequestered is None
        assert not aggregate.stem_count_mismatch
        assert [w.team for w in result.warnings] == ["West"]

    def test_partial_remeasurement_flagged(self, settings):
        stems = [StemRow("West", "Aspen", 5.0, 5.4), StemRow("West", "Aspen", 6.0)]
        result = build_plot_aggregates(stems, settings)
        (aggregate,) = result.records
        assert aggregate.stem_count_mismatch
        assert aggregate.tons_sequestered is not None
        assert "2 stems at first measurement, 1 at second" in str(result.warnings[0])

        withheld = build_plot_aggregates(stems, settings, require_complete_remeasurement=True)
        assert withheld.records[0].tons_sequestered is None

    def test_bad_stem_skipped(self, plot_stems, settings):
        stems = plot_stems + [StemRow("North", "Oak", 9.0, 9.2)]
        result = build_plot_aggregates(stems, settings)
        assert [e.index for e in result.errors] == [6]
        assert result.records == build_plot_aggregates(plot_stems, settings).records

    def test_strict_mode_raises(self, settings):
        with pytest.raises(UnknownSpeciesError):
            build_plot_aggregates([StemRow("North", "Oak", 9.0)], settings, strict=True)

    def test_excluded_teams_still_aggregated(self, plot_stems, settings):
        excluded = settings.with_overrides(excluded_teams=["South"])
        teams = [a.team for a in build_plot_aggregates(plot_stems, excluded).records]
        assert "South" in teams

    def test_totals_are_finite(self, plot_stems, settings):
        for aggregate in build_plot_aggregates(plot_stems, settings).records:
            assert math.isfinite(aggregate.tons_per_acre_1)
            assert math.isfinite(aggregate.tons_sequestered)
