"""
Errors
======

Failure types raised by the simulator. None of them are retried.
"""

from __future__ import annotations


class RockfallError(Exception):
    """Base class for all simulator failures."""


class ParseError(RockfallError, ValueError):
    """Wind tape contains a character outside {<, >} or is empty."""

    def __init__(self, message: str, position: int = -1):
        super().__init__(message)
        self.position = position


class ShapeDefinitionError(RockfallError, ValueError):
    """A shape pattern is malformed (ragged rows, empty, bad characters)."""


class EmptyInputError(RockfallError, ValueError):
    """A bounding box was requested over zero points."""
