"""
Rockfall Core - the falling-piece stacking simulator.

Main exports:
- simulate / tower_height: Drop N pieces, extrapolating via cycles when possible
- PlacementEngine: Tick-based spawn/fall/settle state machine
- Well: Append-only log of settled pieces
- ShapeCatalog: Piece shapes loaded from game_config.yaml
- GameConfig: Configuration loaded from game_config.yaml
"""

from rockfall.sim_core.config_loader import GameConfig, load_config
from rockfall.sim_core.errors import (
    RockfallError,
    ParseError,
    ShapeDefinitionError,
    EmptyInputError,
)
from rockfall.sim_core.geometry import Point, Rectangle, bounding_box
from rockfall.sim_core.shape_catalog import Shape, ShapeCatalog, parse_shape
from rockfall.sim_core.well import PlacedShape, Well
from rockfall.sim_core.placement import (
    Direction,
    PieceState,
    PlacementEngine,
    SettleEvent,
    parse_wind,
)
from rockfall.sim_core.cycle_detector import (
    Cycle,
    EpochWindowDetector,
    ProfileCycleDetector,
    make_detector,
)
from rockfall.sim_core.extrapolation import (
    SimulationResult,
    extrapolate_height,
    simulate,
    tower_height,
)

__all__ = [
    "GameConfig",
    "load_config",
    "RockfallError",
    "ParseError",
    "ShapeDefinitionError",
    "EmptyInputError",
    "Point",
    "Rectangle",
    "bounding_box",
    "Shape",
    "ShapeCatalog",
    "parse_shape",
    "PlacedShape",
    "Well",
    "Direction",
    "PieceState",
    "PlacementEngine",
    "SettleEvent",
    "parse_wind",
    "Cycle",
    "EpochWindowDetector",
    "ProfileCycleDetector",
    "make_detector",
    "SimulationResult",
    "extrapolate_height",
    "simulate",
    "tower_height",
]
