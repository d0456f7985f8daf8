"""
Tests for cycle detection and height extrapolation.
"""

from dataclasses import replace

import pytest

from rockfall.sim_core.config_loader import load_config
from rockfall.sim_core.cycle_detector import (
    Cycle,
    EpochWindowDetector,
    ProfileCycleDetector,
    make_detector,
)
from rockfall.sim_core.extrapolation import extrapolate_height, simulate, tower_height
from rockfall.sim_core.placement import PlacementEngine, parse_wind
from rockfall.sim_core.shape_catalog import ShapeCatalog


SAMPLE_WIND = ">>><<><>><<<>><>>><<<>>><<<><<<>><>><<>>"


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def epoch_config(config):
    return replace(config, cycle=replace(config.cycle, strategy="epoch"))


@pytest.fixture
def catalog(config):
    return ShapeCatalog(config)


def run_until_cycle(wind_text, detector, config, catalog, limit=5000):
    """Drop pieces until the detector confirms a cycle."""
    engine = PlacementEngine(parse_wind(wind_text), catalog=catalog, config=config)
    for _ in range(limit):
        event = engine.step()
        if detector.observe(event, engine.well) is not None:
            break
    return engine


class TestSampleHeights:
    """Known answers for the sample wind tape."""

    def test_2022_drops(self, config):
        """2022 drops stack to 3068."""
        assert tower_height(SAMPLE_WIND, 2022, config) == 3068

    def test_trillion_drops(self, config):
        """10^12 drops stack to 1514285714288."""
        assert tower_height(SAMPLE_WIND, 1000000000000, config) == 1514285714288

    def test_direct_simulation_2022(self, config):
        """Brute force agrees on 2022 drops."""
        result = simulate(SAMPLE_WIND, 2022, config=config, use_cycles=False)
        assert result.height == 3068
        assert not result.extrapolated
        assert result.placements_simulated == 2022

    def test_trillion_stops_early(self, config):
        """The large target is extrapolated after a short simulation."""
        result = simulate(SAMPLE_WIND, 1000000000000, config=config)
        assert result.extrapolated
        assert result.cycle is not None
        assert result.placements_simulated < 2022

    def test_zero_drops(self, config):
        """No drops, no height."""
        assert tower_height(SAMPLE_WIND, 0, config) == 0

    def test_negative_target_rejected(self, config):
        """A negative drop count is a caller error."""
        with pytest.raises(ValueError):
            simulate(SAMPLE_WIND, -1, config=config)


class TestExtrapolationAgreement:
    """Extrapolated and simulated heights must match exactly."""

    @pytest.mark.parametrize("target", [1, 17, 100, 555, 1000, 2022])
    def test_cycles_agree_with_brute_force(self, config, target):
        """Same answer with and without cycle detection."""
        fast = simulate(SAMPLE_WIND, target, config=config)
        slow = simulate(SAMPLE_WIND, target, config=config, use_cycles=False)
        assert fast.height == slow.height

    def test_forced_extrapolation_inside_log(self, config, catalog):
        """Projecting to any count already simulated gives the recorded height."""
        detector = ProfileCycleDetector()
        engine = run_until_cycle(SAMPLE_WIND, detector, config, catalog)
        cycle = detector.cycle
        assert cycle is not None

        well = engine.well
        for target in range(cycle.start, len(well) + 1):
            assert extrapolate_height(target, cycle, well) == well.height_after(target)

    def test_height_is_monotonic_in_target(self, config):
        """More drops never gives a shorter tower."""
        heights = [tower_height(SAMPLE_WIND, t, config) for t in (0, 10, 500, 2022, 10**6, 10**12)]
        assert heights == sorted(heights)

    def test_target_before_cycle_rejected(self, config, catalog):
        """Extrapolation only works from the cycle start onwards."""
        detector = ProfileCycleDetector()
        engine = run_until_cycle(SAMPLE_WIND, detector, config, catalog)
        cycle = detector.cycle
        if cycle.start == 0:
            pytest.skip("cycle starts at the first placement")
        with pytest.raises(ValueError):
            extrapolate_height(cycle.start - 1, cycle, engine.well)

    def test_short_log_rejected(self, config, catalog):
        """The log must cover one full period."""
        engine = PlacementEngine(parse_wind(SAMPLE_WIND), catalog=catalog, config=config)
        for _ in range(5):
            engine.step()
        cycle = Cycle(start=0, period=35, height_per_period=53, wind_phase=0, piece_phase=0)
        with pytest.raises(ValueError):
            extrapolate_height(100, cycle, engine.well)


class TestProfileDetector:
    """Test the phase + skyline detector."""

    def test_cycle_is_self_consistent(self, config, catalog):
        """Reported height per period matches the recorded log."""
        detector = ProfileCycleDetector()
        engine = run_until_cycle(SAMPLE_WIND, detector, config, catalog)
        cycle = detector.cycle
        well = engine.well

        assert cycle.period % len(catalog) == 0
        gained = well.height_after(cycle.start + cycle.period) - well.height_after(cycle.start)
        assert gained == cycle.height_per_period
        assert len(well) >= cycle.start + 2 * cycle.period

    def test_cycle_is_not_mutated(self, config, catalog):
        """Further observations keep returning the first cycle."""
        detector = ProfileCycleDetector()
        engine = run_until_cycle(SAMPLE_WIND, detector, config, catalog)
        first = detector.cycle
        for _ in range(20):
            assert detector.observe(engine.step(), engine.well) is first

    def test_search_limit(self, config, catalog):
        """The detector gives up after search_limit observations."""
        detector = ProfileCycleDetector(search_limit=10)
        engine = PlacementEngine(parse_wind(SAMPLE_WIND), catalog=catalog, config=config)
        for _ in range(30):
            assert detector.observe(engine.step(), engine.well) is None
        assert detector.exhausted
        assert detector.observed == 10

    def test_search_limit_falls_back_to_simulation(self, config):
        """With no cycle in reach, every drop is simulated."""
        limited = replace(config, cycle=replace(config.cycle, search_limit=5))
        result = simulate(SAMPLE_WIND, 500, config=limited)
        assert not result.extrapolated
        assert result.placements_simulated == 500
        assert result.height == simulate(SAMPLE_WIND, 500, config=config, use_cycles=False).height


class TestLeftWallTape:
    """A tape of pure left pushes repeats every five pieces, 11 rows each."""

    def test_direct_height(self, config):
        """404 full groups of 11 rows plus a bar and a plus."""
        result = simulate("<", 2022, config=config, use_cycles=False)
        assert result.height == 4448

    def test_profile_extrapolation(self, config):
        """Profile detector copes with columns that are never filled."""
        result = simulate("<", 2022, config=config)
        assert result.extrapolated
        assert result.cycle.period == 5
        assert result.cycle.height_per_period == 11
        assert result.height == 4448

    def test_epoch_detector_fires(self, epoch_config):
        """Epoch windows of 1 * 5 placements match right away."""
        result = simulate("<", 2022, config=epoch_config)
        assert result.extrapolated
        assert result.placements_simulated == 10
        assert result.cycle == Cycle(start=0, period=5, height_per_period=11, wind_phase=0, piece_phase=0)
        assert result.height == 4448


class TestEpochDetector:
    """Test the fixed-window detector."""

    def test_epoch_length(self):
        """L = wind length * catalog size."""
        assert EpochWindowDetector(40, 5).epoch == 200

    def test_waits_for_two_epochs(self, config, catalog):
        """No comparison happens before 2L settle events."""
        detector = EpochWindowDetector(1, 5)
        engine = PlacementEngine(parse_wind("<"), catalog=catalog, config=config)
        for _ in range(9):
            assert detector.observe(engine.step(), engine.well) is None
        assert detector.observe(engine.step(), engine.well) is not None


class TestMakeDetector:
    """Test detector construction by name."""

    def test_known_strategies(self):
        """profile and epoch build the matching classes."""
        assert isinstance(make_detector("profile", 40, 5), ProfileCycleDetector)
        assert isinstance(make_detector("epoch", 40, 5), EpochWindowDetector)

    def test_unknown_strategy(self):
        """Unknown names are rejected."""
        with pytest.raises(ValueError):
            make_detector("fourier", 40, 5)
