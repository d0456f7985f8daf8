"""
Shape Catalog
=============

Provides the fixed set of piece shapes, parsed from config patterns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Iterator, Optional, Tuple

import numpy as np

from rockfall.sim_core.config_loader import GameConfig, get_config
from rockfall.sim_core.errors import ShapeDefinitionError
from rockfall.sim_core.geometry import Point, Rectangle, Size


_CELL_VALUES = {"#": True, ".": False}


@dataclass(frozen=True, eq=False)
class Shape:
    """
    Immutable piece definition.

    mask is indexed [row, col] with row 0 at the bottom of the piece.
    """
    name: str
    mask: np.ndarray = field(repr=False)

    @property
    def size(self) -> Size:
        height, width = self.mask.shape
        return Size(width, height)

    @property
    def width(self) -> int:
        return self.mask.shape[1]

    @property
    def height(self) -> int:
        return self.mask.shape[0]

    @property
    def bounds(self) -> Rectangle:
        """Local bounds, (0, 0) to (w-1, h-1)."""
        return Rectangle(Point(0, 0), Point(self.width - 1, self.height - 1))

    @property
    def cell_count(self) -> int:
        return int(self.mask.sum())

    def contains(self, point: Point) -> bool:
        """True if local cell (x, y) is occupied; out of range is never occupied."""
        if point.x < 0 or point.x >= self.width or point.y < 0 or point.y >= self.height:
            return False
        return bool(self.mask[point.y, point.x])

    @cached_property
    def cells(self) -> Tuple[Point, ...]:
        """Occupied local cells."""
        ys, xs = np.nonzero(self.mask)
        return tuple(Point(int(x), int(y)) for x, y in zip(xs, ys))

    def render(self) -> str:
        """Top-down text pattern, the same form the shape was authored in."""
        return "\n".join(
            "".join("#" if cell else "." for cell in row)
            for row in self.mask[::-1]
        )

    def __repr__(self) -> str:
        return f"Shape({self.name}, {self.size!r})"


def parse_shape(name: str, pattern: str) -> Shape:
    """
    Parse a top-down text pattern into a Shape.

    Args:
        name: Shape name.
        pattern: Rows of '#' and '.', first row is the top of the piece.
            Surrounding whitespace and per-line indentation are ignored.

    Returns:
        Shape with its mask flipped so row 0 is the bottom.

    Raises:
        ShapeDefinitionError: On empty patterns, unknown characters or
            rows of different widths.
    """
    lines = [line.strip() for line in pattern.strip().splitlines()]
    if not lines or not lines[0]:
        raise ShapeDefinitionError(f"Shape '{name}' has an empty pattern")

    rows = []
    for line in lines:
        row = []
        for c in line:
            if c not in _CELL_VALUES:
                raise ShapeDefinitionError(f"Shape '{name}': unrecognized character {c!r}")
            row.append(_CELL_VALUES[c])
        rows.append(row)

    widths = {len(row) for row in rows}
    if len(widths) != 1:
        raise ShapeDefinitionError(
            f"Shape '{name}': not all rows are the same width ({sorted(widths)})"
        )

    mask = np.flipud(np.array(rows, dtype=bool))
    mask.setflags(write=False)
    return Shape(name=name, mask=mask)


class ShapeCatalog:
    """
    Ordered collection of piece shapes.

    Pieces are dealt cyclically in catalog order (see piece()).
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._shapes: Tuple[Shape, ...] = tuple(
            parse_shape(shape_config.name, shape_config.pattern)
            for shape_config in config.shapes
        )

    def __len__(self) -> int:
        return len(self._shapes)

    def __getitem__(self, shape_id: int) -> Shape:
        """Get shape by catalog index."""
        if 0 <= shape_id < len(self._shapes):
            return self._shapes[shape_id]
        raise IndexError(f"Shape ID {shape_id} out of range [0, {len(self._shapes)})")

    def __iter__(self) -> Iterator[Shape]:
        return iter(self._shapes)

    @property
    def all_shapes(self) -> Tuple[Shape, ...]:
        return self._shapes

    def piece(self, piece_index: int) -> Shape:
        """Shape dealt for the given (unbounded) piece index."""
        return self._shapes[piece_index % len(self._shapes)]

    def get_by_name(self, name: str) -> Optional[Shape]:
        """Get shape by name (case-insensitive)."""
        name_lower = name.lower()
        for shape in self._shapes:
            if shape.name.lower() == name_lower:
                return shape
        return None


# Module-level singleton
_cached_catalog: Optional[ShapeCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> ShapeCatalog:
    """
    Get the shape catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        ShapeCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = ShapeCatalog(config)
    return _cached_catalog
