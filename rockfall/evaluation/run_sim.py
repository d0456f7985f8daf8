"""
Simulation Harness
==================

Runs one wind tape against a list of drop-count targets and reports heights.

Usage:
    from rockfall.evaluation import simulate_targets

    summary = simulate_targets(tape_text)
    print([r.height for r in summary.results])
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rockfall.sim_core.config_loader import GameConfig, get_config
from rockfall.sim_core.cycle_detector import Cycle
from rockfall.sim_core.extrapolation import simulate
from rockfall.sim_core.placement import parse_wind
from rockfall.sim_core.shape_catalog import ShapeCatalog


@dataclass
class RunResult:
    """Result for a single target."""
    target: int
    height: int
    extrapolated: bool
    placements_simulated: int
    cycle: Optional[Cycle]
    elapsed_time: float


@dataclass
class RunSummary:
    """Results across all targets."""
    wind_length: int
    total_time: float
    results: List[RunResult]

    @property
    def heights(self) -> List[int]:
        return [r.height for r in self.results]


def simulate_targets(
    wind_text: str,
    targets: Optional[Sequence[int]] = None,
    config: Optional[GameConfig] = None,
    verbose: bool = False
) -> RunSummary:
    """
    Simulate the wind tape for every target.

    Args:
        wind_text: Wind tape text.
        targets: Drop counts. Uses the configured part one/two targets if None.
        config: Simulation configuration. Uses default if None.
        verbose: If True, print progress and a summary.

    Returns:
        RunSummary with one RunResult per target, in order.
    """
    if config is None:
        config = get_config()
    if targets is None:
        targets = config.run.targets

    # Parse once; a bad tape fails before any simulation starts
    wind = parse_wind(wind_text)
    catalog = ShapeCatalog(config)

    if verbose:
        print(f"Simulating {len(targets)} targets, wind length {len(wind)}...")

    results: List[RunResult] = []
    total_start = time.perf_counter()

    for i, target in enumerate(targets):
        start = time.perf_counter()
        outcome = simulate(wind, target, config=config, catalog=catalog)
        elapsed = time.perf_counter() - start

        result = RunResult(
            target=target,
            height=outcome.height,
            extrapolated=outcome.extrapolated,
            placements_simulated=outcome.placements_simulated,
            cycle=outcome.cycle,
            elapsed_time=elapsed
        )
        results.append(result)

        if verbose:
            mode = "extrapolated" if result.extrapolated else "simulated"
            print(f"[{i+1}/{len(targets)}] target={target}: height={result.height} "
                  f"({mode}, {result.placements_simulated} drops, {elapsed:.2f}s)")

    total_time = time.perf_counter() - total_start

    summary = RunSummary(
        wind_length=len(wind),
        total_time=total_time,
        results=results
    )

    if verbose:
        print()
        print("=" * 50)
        print("SIMULATION SUMMARY")
        print("=" * 50)
        for result in results:
            print(f"Target {result.target:>16}: {result.height}")
        print(f"Total time:      {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_results(summary: RunSummary, output_path: str) -> None:
    """Save simulation results to JSON."""
    data = {
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "wind_length": summary.wind_length,
        "total_time": summary.total_time,
        "results": [
            {
                "target": r.target,
                "height": r.height,
                "extrapolated": r.extrapolated,
                "placements_simulated": r.placements_simulated,
                "cycle": None if r.cycle is None else {
                    "start": r.cycle.start,
                    "period": r.cycle.period,
                    "height_per_period": r.cycle.height_per_period,
                },
                "elapsed_time": r.elapsed_time
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)
