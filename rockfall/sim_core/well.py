"""
Well State
==========

The append-only log of settled pieces plus the running bounds of the stack.

Collision queries go broad-phase first (well bounds, then a row-bucket
index, then per-piece bounds) and only fall through to the per-cell mask
check for pieces whose bounds actually overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from rockfall.sim_core.geometry import Point, Rectangle, bounding_box
from rockfall.sim_core.shape_catalog import Shape


@dataclass(frozen=True)
class PlacedShape:
    """A shape anchored at its bottom-left corner in well coordinates."""
    shape: Shape
    anchor: Point

    @property
    def bounds(self) -> Rectangle:
        return Rectangle(
            self.anchor,
            Point(self.anchor.x + self.shape.width - 1, self.anchor.y + self.shape.height - 1)
        )

    def moved(self, vector: Point) -> PlacedShape:
        return PlacedShape(self.shape, self.anchor.add(vector))

    def contains(self, point: Point) -> bool:
        return self.shape.contains(point.subtract(self.anchor))

    def cells(self) -> Tuple[Point, ...]:
        """Occupied cells in well coordinates."""
        return tuple(cell.add(self.anchor) for cell in self.shape.cells)

    def intersects(self, other: PlacedShape) -> bool:
        """True if any occupied cell is shared with other."""
        a, b = self.bounds, other.bounds
        if not a.intersects(b):
            return False

        # Narrow phase over the overlapping region only
        x0, x1 = max(a.min.x, b.min.x), min(a.max.x, b.max.x)
        y0, y1 = max(a.min.y, b.min.y), min(a.max.y, b.max.y)
        mine = self.shape.mask[
            y0 - self.anchor.y:y1 - self.anchor.y + 1,
            x0 - self.anchor.x:x1 - self.anchor.x + 1
        ]
        theirs = other.shape.mask[
            y0 - other.anchor.y:y1 - other.anchor.y + 1,
            x0 - other.anchor.x:x1 - other.anchor.x + 1
        ]
        return bool(np.any(mine & theirs))


class Well:
    """
    Accumulating stack of settled pieces.

    Pieces are never removed or mutated once placed; the placement order is
    kept because extrapolation reads heights back out of the log.
    """

    def __init__(self, width: int):
        """
        Initialize an empty well.

        Args:
            width: Lane width in cells.
        """
        if width < 1:
            raise ValueError(f"Well width must be positive, got {width}")

        self._width = width
        self._pieces: List[PlacedShape] = []
        self._bounds: Optional[Rectangle] = None

        # y -> indices of pieces whose bounds cover row y
        self._rows: Dict[int, List[int]] = {}
        self._column_tops: List[int] = [-1] * width

        # Entry k describes the well after k placements
        self._heights: List[int] = [0]
        self._bounds_history: List[Optional[Rectangle]] = [None]

    @property
    def width(self) -> int:
        return self._width

    @property
    def bounds(self) -> Optional[Rectangle]:
        """Union of all placed bounds, or None while empty."""
        return self._bounds

    @property
    def height(self) -> int:
        """Stack height; 0 when empty."""
        return self._heights[-1]

    @property
    def pieces(self) -> Tuple[PlacedShape, ...]:
        return tuple(self._pieces)

    def __len__(self) -> int:
        return len(self._pieces)

    def __getitem__(self, index: int) -> PlacedShape:
        return self._pieces[index]

    def in_lane(self, rect: Rectangle) -> bool:
        """True if rect stays between the walls and above the floor."""
        return rect.min.x >= 0 and rect.max.x <= self._width - 1 and rect.min.y >= 0

    def candidates(self, rect: Rectangle) -> Set[int]:
        """Indices of placed pieces sharing at least one row with rect."""
        found: Set[int] = set()
        for y in range(rect.min.y, rect.max.y + 1):
            found.update(self._rows.get(y, ()))
        return found

    def collides(self, piece: PlacedShape) -> bool:
        """True if piece overlaps any settled piece."""
        if self._bounds is None:
            return False
        bounds = piece.bounds
        if not self._bounds.intersects(bounds):
            return False
        return any(
            self._pieces[i].intersects(piece) for i in self.candidates(bounds)
        )

    def place(self, piece: PlacedShape) -> int:
        """
        Append a settled piece.

        Args:
            piece: The piece to settle. Caller has already checked it is free.

        Returns:
            Placement index of the new piece.

        Raises:
            ValueError: If the piece pokes outside the lane.
        """
        bounds = piece.bounds
        if not self.in_lane(bounds):
            raise ValueError(f"Piece {bounds!r} is outside the lane of width {self._width}")

        index = len(self._pieces)
        self._pieces.append(piece)
        self._bounds = bounds if self._bounds is None else self._bounds.union(bounds)

        for y in range(bounds.min.y, bounds.max.y + 1):
            self._rows.setdefault(y, []).append(index)
        for cell in piece.cells():
            if cell.y > self._column_tops[cell.x]:
                self._column_tops[cell.x] = cell.y

        self._heights.append(self._bounds.max.y + 1)
        self._bounds_history.append(self._bounds)
        return index

    def height_after(self, count: int) -> int:
        """Well height after the first count placements."""
        if not 0 <= count < len(self._heights):
            raise IndexError(f"No height recorded after {count} placements (have {len(self._pieces)})")
        return self._heights[count]

    def bounds_after(self, count: int) -> Optional[Rectangle]:
        """Recorded well bounds after the first count placements."""
        if not 0 <= count < len(self._bounds_history):
            raise IndexError(f"No bounds recorded after {count} placements (have {len(self._pieces)})")
        return self._bounds_history[count]

    def replay_bounds(self, count: int) -> Optional[Rectangle]:
        """Recompute the bounds of the first count placements from the log."""
        if count == 0:
            return None
        corners = []
        for piece in self._pieces[:count]:
            bounds = piece.bounds
            corners.extend((bounds.min, bounds.max))
        return bounding_box(corners)

    def window_bounds(self, start: int, stop: int) -> Rectangle:
        """Union bounds of placements [start, stop)."""
        corners = []
        for piece in self._pieces[start:stop]:
            bounds = piece.bounds
            corners.extend((bounds.min, bounds.max))
        return bounding_box(corners)

    def skyline(self, depth: Optional[int] = None) -> Tuple[int, ...]:
        """
        Per-column depth of the highest occupied cell below the stack top.

        Args:
            depth: If given, depths are clamped to this value.
        """
        top = self.height - 1
        depths = (top - column_top for column_top in self._column_tops)
        if depth is None:
            return tuple(depths)
        return tuple(min(d, depth) for d in depths)

    def occupancy_grid(self) -> np.ndarray:
        """Bool array (height, width) with row 0 at the floor."""
        grid = np.zeros((self.height, self._width), dtype=bool)
        for piece in self._pieces:
            x, y = piece.anchor.x, piece.anchor.y
            h, w = piece.shape.mask.shape
            grid[y:y + h, x:x + w] |= piece.shape.mask
        return grid
