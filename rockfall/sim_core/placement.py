"""
Placement Engine
================

Drives one piece at a time through push/fall ticks until it settles.

One tick = one lateral push from the wind tape, then one fall step.
A blocked push is ignored; a blocked fall settles the piece.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from rockfall.sim_core.config_loader import GameConfig, get_config
from rockfall.sim_core.errors import ParseError
from rockfall.sim_core.geometry import Point
from rockfall.sim_core.shape_catalog import ShapeCatalog, get_catalog
from rockfall.sim_core.well import PlacedShape, Well


class Direction(Enum):
    """Lateral push direction."""
    LEFT = "<"
    RIGHT = ">"

    @property
    def vector(self) -> Point:
        return Point(-1, 0) if self is Direction.LEFT else Point(1, 0)


class PieceState(Enum):
    """Lifecycle of the current piece."""
    SPAWNING = "spawning"
    FALLING = "falling"
    SETTLED = "settled"


DOWN = Point(0, -1)


def parse_wind(text: str) -> Tuple[Direction, ...]:
    """
    Parse a wind tape.

    Args:
        text: Characters from {<, >}; surrounding whitespace is trimmed.

    Returns:
        Tuple of Directions in tape order.

    Raises:
        ParseError: On any other character, or if the tape is empty.
    """
    tape = text.strip()
    if not tape:
        raise ParseError("wind tape is empty")

    directions = []
    for position, c in enumerate(tape):
        if c == "<":
            directions.append(Direction.LEFT)
        elif c == ">":
            directions.append(Direction.RIGHT)
        else:
            raise ParseError(f"not a valid wind character: {c!r} at position {position}", position)
    return tuple(directions)


@dataclass(frozen=True)
class SettleEvent:
    """Emitted once per settled piece."""
    index: int        # 0-based placement index
    piece_phase: int  # Next piece index mod catalog size
    wind_phase: int   # Next wind index mod tape length
    height: int       # Well height after this placement
    piece: PlacedShape


class PlacementEngine:
    """
    Tick-based spawn/fall/settle state machine.

    The only state besides the well is the pair of tape phases, which is
    what lets the cycle detector recognise repetition.
    """

    def __init__(
        self,
        wind: Sequence[Direction],
        catalog: Optional[ShapeCatalog] = None,
        config: Optional[GameConfig] = None,
        debug: bool = False
    ):
        """
        Initialize engine.

        Args:
            wind: Parsed wind tape (see parse_wind()).
            catalog: Shape catalog. Built from config if None.
            config: Simulation configuration. Uses default if None.
            debug: Print spawn/settle progress.
        """
        if config is None:
            config = get_config()
        if catalog is None:
            catalog = get_catalog(config)
        if not wind:
            raise ParseError("wind tape is empty")

        self._config = config
        self._catalog = catalog
        self._wind: Tuple[Direction, ...] = tuple(wind)
        self._debug = debug

        self._well = Well(config.board.width)
        self._spawn_x = config.board.spawn_offset_x
        self._spawn_gap = config.board.spawn_gap_y

        self._piece_index: int = 0
        self._wind_index: int = 0
        self._state = PieceState.SPAWNING
        self._current: Optional[PlacedShape] = None

    @property
    def well(self) -> Well:
        return self._well

    @property
    def catalog(self) -> ShapeCatalog:
        return self._catalog

    @property
    def wind(self) -> Tuple[Direction, ...]:
        return self._wind

    @property
    def state(self) -> PieceState:
        return self._state

    @property
    def current_piece(self) -> Optional[PlacedShape]:
        """The falling piece, or None between pieces."""
        return self._current

    @property
    def piece_count(self) -> int:
        """Number of settled pieces."""
        return len(self._well)

    @property
    def piece_phase(self) -> int:
        return self._piece_index

    @property
    def wind_phase(self) -> int:
        return self._wind_index

    def spawn_next_piece(self) -> PlacedShape:
        """
        Spawn the next catalog shape above the stack.

        Returns:
            The newly falling piece.
        """
        if self._state is PieceState.FALLING:
            raise RuntimeError("A piece is already falling")

        shape = self._catalog.piece(self._piece_index)
        self._piece_index = (self._piece_index + 1) % len(self._catalog)

        anchor = Point(self._spawn_x, self._well.height + self._spawn_gap)
        self._current = PlacedShape(shape, anchor)
        self._state = PieceState.FALLING

        if self._debug:
            print(f"[DEBUG] spawn #{self.piece_count} {shape.name} at {anchor!r}")
        return self._current

    def _is_free(self, piece: PlacedShape) -> bool:
        return self._well.in_lane(piece.bounds) and not self._well.collides(piece)

    def tick(self) -> Optional[SettleEvent]:
        """
        Advance the falling piece by one push and one fall.

        Returns:
            SettleEvent if the piece settled this tick, else None.
        """
        if self._state is not PieceState.FALLING:
            raise RuntimeError("No piece is falling; call spawn_next_piece() first")

        direction = self._wind[self._wind_index]
        self._wind_index = (self._wind_index + 1) % len(self._wind)

        pushed = self._current.moved(direction.vector)
        if self._is_free(pushed):
            self._current = pushed

        dropped = self._current.moved(DOWN)
        if self._is_free(dropped):
            self._current = dropped
            return None

        return self._settle()

    def _settle(self) -> SettleEvent:
        piece = self._current
        index = self._well.place(piece)
        event = SettleEvent(
            index=index,
            piece_phase=self._piece_index,
            wind_phase=self._wind_index,
            height=self._well.height,
            piece=piece
        )
        self._current = None
        self._state = PieceState.SETTLED

        if self._debug:
            print(f"[DEBUG] settle #{index} {piece.shape.name} at {piece.anchor!r}, "
                  f"height={event.height}")
        return event

    def step(self) -> SettleEvent:
        """
        Drop one piece: spawn if needed, then tick until it settles.

        Returns:
            The SettleEvent for the piece.
        """
        if self._state is not PieceState.FALLING:
            self.spawn_next_piece()

        while True:
            event = self.tick()
            if event is not None:
                return event
