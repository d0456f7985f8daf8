"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Optional

import yaml


CYCLE_STRATEGIES = ("profile", "epoch")


@dataclass(frozen=True)
class BoardConfig:
    """Lane geometry and spawn placement."""
    width: int           # Lane width in cells
    spawn_offset_x: int  # Distance from the left wall to a new piece
    spawn_gap_y: int     # Empty rows left between stack top and a new piece


@dataclass(frozen=True)
class ShapeConfig:
    """Raw definition of a single catalog shape."""
    name: str
    pattern: str


@dataclass(frozen=True)
class CycleConfig:
    """Cycle detection parameters."""
    strategy: str
    search_limit: int
    profile_depth: int   # Skyline depths are clamped to this


@dataclass(frozen=True)
class RunConfig:
    """Default drop-count targets."""
    part_one_target: int
    part_two_target: int

    @property
    def targets(self) -> Tuple[int, int]:
        return (self.part_one_target, self.part_two_target)


@dataclass(frozen=True)
class GameConfig:
    """
    Complete simulation configuration loaded from YAML.

    All values are immutable so a run cannot change its own parameters.
    """
    board: BoardConfig
    shapes: Tuple[ShapeConfig, ...]
    cycle: CycleConfig
    run: RunConfig

    @property
    def width(self) -> int:
        """Lane width."""
        return self.board.width

    @property
    def num_shapes(self) -> int:
        """Number of shapes in the catalog."""
        return len(self.shapes)


def _parse_shape(shape_data: dict) -> ShapeConfig:
    """Parse a single shape entry from YAML."""
    if "pattern" not in shape_data:
        raise ValueError(f"Shape entry is missing 'pattern': {shape_data}")
    return ShapeConfig(
        name=str(shape_data.get("name", "shape")),
        pattern=str(shape_data["pattern"])
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.board.width < 1:
        raise ValueError(f"board.width must be positive, got {config.board.width}")

    if not 0 <= config.board.spawn_offset_x < config.board.width:
        raise ValueError(
            f"board.spawn_offset_x ({config.board.spawn_offset_x}) must lie "
            f"inside the lane [0, {config.board.width})"
        )

    if config.board.spawn_gap_y < 0:
        raise ValueError(f"board.spawn_gap_y must be >= 0, got {config.board.spawn_gap_y}")

    if not config.shapes:
        raise ValueError("At least one shape must be defined")

    if config.cycle.strategy not in CYCLE_STRATEGIES:
        raise ValueError(
            f"cycle.strategy must be one of {CYCLE_STRATEGIES}, "
            f"got '{config.cycle.strategy}'"
        )

    if config.cycle.search_limit < 1:
        raise ValueError(f"cycle.search_limit must be >= 1, got {config.cycle.search_limit}")

    if config.cycle.profile_depth < 1:
        raise ValueError(f"cycle.profile_depth must be >= 1, got {config.cycle.profile_depth}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate simulation configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    board_data = raw["board"]
    board = BoardConfig(
        width=int(board_data.get("width", 7)),
        spawn_offset_x=int(board_data.get("spawn_offset_x", 2)),
        spawn_gap_y=int(board_data.get("spawn_gap_y", 3))
    )

    shapes = tuple(_parse_shape(s) for s in raw.get("shapes") or [])

    # Cycle and run sections are optional
    cycle_data = raw.get("cycle", {})
    cycle = CycleConfig(
        strategy=str(cycle_data.get("strategy", "profile")),
        search_limit=int(cycle_data.get("search_limit", 100000)),
        profile_depth=int(cycle_data.get("profile_depth", 64))
    )

    run_data = raw.get("run", {})
    run = RunConfig(
        part_one_target=int(run_data.get("part_one_target", 2022)),
        part_two_target=int(run_data.get("part_two_target", 1000000000000))
    )

    config = GameConfig(
        board=board,
        shapes=shapes,
        cycle=cycle,
        run=run
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
