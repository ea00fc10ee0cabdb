"""
Tests for the command-line entry point and logging setup.
"""
import logging

import pytest

from treecarbon.logging_config import PACKAGE_LOGGER, get_logger, setup_logging
from treecarbon.main import build_parser, main

TREE_CSV = """team,species,dbh_1,dbh_2,year
Oaks,Maple-oak-hickory-beech,10.5,11.1,2024
Pines,Pine,12.0,,2024
Maples,Soft-maple-birch,8.2,8.9,2024
"""

PLOT_CSV = """team,species,dbh_1,dbh_2,year,stem_id
North,Pine,10.0,10.6,2024,N1
North,Spruce,7.0,7.3,2024,N2
South,Aspen,5.0,5.5,2024,S1
"""


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Remove handlers installed by setup_logging."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if getattr(handler, '_treecarbon_handler', False):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def tree_csv(tmp_path):
    path = tmp_path / "trees.csv"
    path.write_text(TREE_CSV)
    return path


@pytest.fixture
def plot_csv(tmp_path):
    path = tmp_path / "plots.csv"
    path.write_text(PLOT_CSV)
    return path


class TestCommandLine:

    def test_parser_defaults(self):
        args = build_parser().parse_args(["trees", "trees.csv"])
        assert args.category == "trees"
        assert args.exclude_team == []
        assert args.limit is None
        assert not args.strict

    def test_repeatable_exclusions(self):
        args = build_parser().parse_args(
            ["plots", "p.csv", "--exclude-team", "A", "--exclude-team", "B"]
        )
        assert args.exclude_team == ["A", "B"]

    def test_trees(self, tree_csv, capsys):
        assert main(["trees", str(tree_csv)]) == 0
        out = capsys.readouterr().out
        assert "Carbon sequestered by tree" in out
        assert "1 without a complete second measurement" in out

    def test_plots_with_listing(self, plot_csv, capsys):
        assert main(["plots", str(plot_csv), "--listing", "--limit", "1"]) == 0
        out = capsys.readouterr().out
        assert "Carbon sequestered per acre by plot" in out
        assert "First measurement" in out

    def test_rejected_rows_exit_code(self, tmp_path, capsys):
        path = tmp_path / "trees.csv"
        path.write_text(TREE_CSV + "Typos,Oak,9.0,9.5,2024\n")
        assert main(["trees", str(path)]) == 2
        assert "1 row(s) rejected" in capsys.readouterr().out

    def test_strict_stops_on_bad_row(self, tmp_path):
        path = tmp_path / "trees.csv"
        path.write_text(TREE_CSV + "Typos,Oak,9.0,9.5,2024\n")
        assert main(["trees", str(path), "--strict"]) == 1

    def test_missing_input(self, tmp_path, capsys):
        assert main(["trees", str(tmp_path / "absent.csv")]) == 1
        assert "Error" in capsys.readouterr().out

    def test_bad_config(self, tree_csv, tmp_path):
        config = tmp_path / "settings.yaml"
        config.write_text("conversion:\n  carbon_fraction: -1\n")
        assert main(["trees", str(tree_csv), "--config", str(config)]) == 1


class TestLogging:

    def test_get_logger_prefixes_package(self):
        assert get_logger("treecarbon.allometry").name == "treecarbon.allometry"
        assert get_logger("scripts").name == "treecarbon.scripts"

    def test_setup_logging_replaces_handlers(self, tmp_path):
        setup_logging("INFO")
        logger = setup_logging("DEBUG", log_file=tmp_path / "logs" / "run.log")
        ours = [h for h in logger.handlers if getattr(h, '_treecarbon_handler', False)]
        assert len(ours) == 2
        assert logger.level == logging.DEBUG

        get_logger("tests").debug("written to file")
        for handler in ours:
            handler.flush()
        assert "written to file" in (tmp_path / "logs" / "run.log").read_text()

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logging("CHATTY")
