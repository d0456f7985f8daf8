"""
Geometry Primitives
===================

Integer points and inclusive axis-aligned rectangles.

y grows upward from 0 (the lane floor); x is bounded by the lane walls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from rockfall.sim_core.errors import EmptyInputError


@dataclass(frozen=True)
class Point:
    """Integer (x, y) pair."""
    x: int
    y: int

    def add(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def subtract(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __repr__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True)
class Size:
    """Width and height of a rectangle, in cells."""
    width: int
    height: int

    def __repr__(self) -> str:
        return f"({self.width} x {self.height})"


@dataclass(frozen=True)
class Rectangle:
    """
    Axis-aligned rectangle with inclusive bounds.

    Corners are normalised on construction, so min is always the
    componentwise minimum of the two points given.
    """
    min: Point
    max: Point

    def __post_init__(self):
        lo = Point(min(self.min.x, self.max.x), min(self.min.y, self.max.y))
        hi = Point(max(self.min.x, self.max.x), max(self.min.y, self.max.y))
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    @property
    def size(self) -> Size:
        return Size(self.max.x - self.min.x + 1, self.max.y - self.min.y + 1)

    def offset(self, vector: Point) -> Rectangle:
        """Translate both corners. No bounds checks."""
        return Rectangle(self.min.add(vector), self.max.add(vector))

    def intersects(self, other: Rectangle) -> bool:
        """Separating-axis test; shared edges count as overlap."""
        return not (
            other.min.x > self.max.x
            or other.max.x < self.min.x
            or other.min.y > self.max.y
            or other.max.y < self.min.y
        )

    def union(self, other: Rectangle) -> Rectangle:
        """Smallest rectangle covering both."""
        return bounding_box((self.min, self.max, other.min, other.max))

    def __repr__(self) -> str:
        return f"(min={self.min!r}, max={self.max!r}, size={self.size!r})"


def bounding_box(points: Iterable[Point]) -> Rectangle:
    """
    Compute the bounding box of a set of points.

    Args:
        points: Any iterable of Points.

    Returns:
        Rectangle spanning the componentwise min/max.

    Raises:
        EmptyInputError: If no points were given.
    """
    iterator = iter(points)
    first = next(iterator, None)
    if first is None:
        raise EmptyInputError("bounding box requires at least one point")

    min_x = max_x = first.x
    min_y = max_y = first.y
    for p in iterator:
        min_x = min(min_x, p.x)
        min_y = min(min_y, p.y)
        max_x = max(max_x, p.x)
        max_y = max(max_y, p.y)
    return Rectangle(Point(min_x, min_y), Point(max_x, max_y))

