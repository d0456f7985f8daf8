"""
Tests for the simulation harness.
"""

import json

import pytest

from rockfall.evaluation.run_sim import save_results, simulate_targets
from rockfall.sim_core.config_loader import load_config
from rockfall.sim_core.errors import ParseError


SAMPLE_WIND = ">>><<><>><<<>><>>><<<>>><<<><<<>><>><<>>"


@pytest.fixture
def config():
    return load_config()


class TestSimulateTargets:
    """Test running several targets on one tape."""

    def test_default_targets(self, config):
        """Without explicit targets both configured parts are run."""
        summary = simulate_targets(SAMPLE_WIND, config=config)
        assert [r.target for r in summary.results] == [2022, 1000000000000]
        assert summary.heights == [3068, 1514285714288]
        assert summary.wind_length == 40

    def test_explicit_targets_keep_order(self, config):
        """Results come back in the order targets were given."""
        summary = simulate_targets(SAMPLE_WIND, targets=[10, 0, 5], config=config)
        assert [r.target for r in summary.results] == [10, 0, 5]
        assert summary.results[1].height == 0

    def test_bad_tape_fails_before_simulating(self, config):
        """Parse errors propagate to the caller."""
        with pytest.raises(ParseError):
            simulate_targets("<<?>", config=config)

    def test_verbose_summary(self, config, capsys):
        """Verbose mode prints a summary block."""
        simulate_targets(SAMPLE_WIND, targets=[2022], config=config, verbose=True)
        out = capsys.readouterr().out
        assert "SIMULATION SUMMARY" in out
        assert "3068" in out

    def test_save_results(self, config, tmp_path):
        """Results serialise to JSON, including the cycle found."""
        summary = simulate_targets(SAMPLE_WIND, config=config)
        path = tmp_path / "results.json"
        save_results(summary, str(path))

        with open(path) as f:
            data = json.load(f)
        assert [r["height"] for r in data["results"]] == [3068, 1514285714288]
        assert data["results"][1]["cycle"]["period"] > 0
