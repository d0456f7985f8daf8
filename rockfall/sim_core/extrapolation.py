"""
Height Extrapolation
====================

Projects the stack height for a drop count far beyond what is simulated,
using a confirmed cycle and the heights already recorded in the well log.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from rockfall.sim_core.config_loader import GameConfig, get_config
from rockfall.sim_core.cycle_detector import Cycle, make_detector
from rockfall.sim_core.placement import Direction, PlacementEngine, parse_wind
from rockfall.sim_core.shape_catalog import ShapeCatalog
from rockfall.sim_core.well import Well


@dataclass
class SimulationResult:
    """Outcome of a simulate() call."""
    height: int
    target: int
    placements_simulated: int
    cycle: Optional[Cycle]
    extrapolated: bool


def extrapolate_height(target: int, cycle: Cycle, well: Well) -> int:
    """
    Height after target placements, given a cycle found in well.

    Args:
        target: Total drop count.
        cycle: Confirmed cycle.
        well: Well whose log covers at least start + period placements.

    Returns:
        Projected stack height.

    Raises:
        ValueError: If target precedes the cycle or the log is too short.
    """
    if target < cycle.start:
        raise ValueError(f"Target {target} precedes cycle start {cycle.start}")
    if len(well) < cycle.start + cycle.period:
        raise ValueError(
            f"Well log has {len(well)} placements, cycle needs {cycle.start + cycle.period}"
        )

    periods, remainder = divmod(target - cycle.start, cycle.period)
    height_at_start = well.height_after(cycle.start)
    remainder_height = well.height_after(cycle.start + remainder) - height_at_start
    return height_at_start + periods * cycle.height_per_period + remainder_height


def simulate(
    wind: Union[str, Sequence[Direction]],
    target: int,
    config: Optional[GameConfig] = None,
    catalog: Optional[ShapeCatalog] = None,
    use_cycles: bool = True,
    debug: bool = False
) -> SimulationResult:
    """
    Drop target pieces and report the stack height.

    Simulation stops early as soon as a cycle is confirmed; the rest of
    the drops are extrapolated from it.

    Args:
        wind: Wind tape text or parsed directions.
        target: Number of pieces to drop.
        config: Simulation configuration. Uses default if None.
        catalog: Shape catalog. Built from config if None.
        use_cycles: If False, always simulate every drop.
        debug: Print engine and cycle progress.

    Returns:
        SimulationResult.
    """
    if target < 0:
        raise ValueError(f"Target drop count must be >= 0, got {target}")
    if config is None:
        config = get_config()
    if isinstance(wind, str):
        wind = parse_wind(wind)

    engine = PlacementEngine(wind, catalog=catalog, config=config, debug=debug)
    detector = None
    if use_cycles:
        detector = make_detector(
            config.cycle.strategy,
            wind_length=len(engine.wind),
            catalog_size=len(engine.catalog),
            search_limit=config.cycle.search_limit,
            profile_depth=config.cycle.profile_depth
        )

    while engine.piece_count < target:
        event = engine.step()
        if detector is None:
            continue

        cycle = detector.observe(event, engine.well)
        if cycle is not None:
            height = extrapolate_height(target, cycle, engine.well)
            if debug:
                print(f"[DEBUG] cycle start={cycle.start} period={cycle.period} "
                      f"height/period={cycle.height_per_period} "
                      f"after {engine.piece_count} drops -> height {height}")
            return SimulationResult(
                height=height,
                target=target,
                placements_simulated=engine.piece_count,
                cycle=cycle,
                extrapolated=True
            )

    return SimulationResult(
        height=engine.well.height,
        target=target,
        placements_simulated=engine.piece_count,
        cycle=None,
        extrapolated=False
    )


def tower_height(wind_text: str, target: int, config: Optional[GameConfig] = None) -> int:
    """Stack height after target drops for the given wind tape text."""
    return simulate(wind_text, target, config=config).height
