"""
Cycle Detector
==============

Watches settle events for a repeating structural pattern and reports the
period and height gained per period once it is confirmed.

Two strategies are available:

- profile: keys every settle on (piece phase, wind phase, skyline), with
  skyline depths clamped so never-filled columns do not grow the key. When the
  same key has been seen three times at equal spacing, and both windows
  between those sightings gained the same height over the same x-extent,
  the spacing is taken as the period.
- epoch: fixed windows of L = wind length * catalog size placements. Once
  2L placements exist, the two most recent windows are compared on phase at
  window start, height gained and x-extent. Cheaper to reason about but
  only a heuristic; L need not be a multiple of the true period.

Both give up (and stop recording) after search_limit observations, leaving
the caller to simulate directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from rockfall.sim_core.placement import SettleEvent
from rockfall.sim_core.well import Well


@dataclass(frozen=True)
class Cycle:
    """A confirmed repeating run of placements."""
    start: int              # Placement count at which the repetition begins
    period: int             # Placements per repetition
    height_per_period: int
    wind_phase: int         # Phases of the state at start
    piece_phase: int


class CycleDetector:
    """Shared bookkeeping for detector strategies."""

    def __init__(self, search_limit: int = 100000):
        self._search_limit = search_limit
        self._observed: int = 0
        self._cycle: Optional[Cycle] = None

    @property
    def cycle(self) -> Optional[Cycle]:
        """First confirmed cycle, or None."""
        return self._cycle

    @property
    def observed(self) -> int:
        """Settle events inspected so far."""
        return self._observed

    @property
    def exhausted(self) -> bool:
        """True once the search limit passed without a cycle."""
        return self._cycle is None and self._observed >= self._search_limit

    def observe(self, event: SettleEvent, well: Well) -> Optional[Cycle]:
        """
        Inspect one settle event.

        Args:
            event: The event just emitted by the engine.
            well: The well the event settled into.

        Returns:
            The confirmed cycle (now or earlier), else None.
        """
        if self._cycle is not None or self.exhausted:
            return self._cycle
        self._observed += 1
        self._cycle = self._check(event, well)
        if self.exhausted:
            self._release()
        return self._cycle

    def _check(self, event: SettleEvent, well: Well) -> Optional[Cycle]:
        raise NotImplementedError

    def _release(self) -> None:
        """Drop recorded history once the search is abandoned."""


def _same_extent(well: Well, a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    first = well.window_bounds(*a)
    second = well.window_bounds(*b)
    return first.min.x == second.min.x and first.max.x == second.max.x


class ProfileCycleDetector(CycleDetector):
    """Detects repetition of (piece phase, wind phase, skyline)."""

    def __init__(self, search_limit: int = 100000, depth: Optional[int] = 64):
        super().__init__(search_limit)
        self._depth = depth
        # key -> [(placement count, height), ...]
        self._seen: Dict[Tuple, List[Tuple[int, int]]] = {}

    def _check(self, event: SettleEvent, well: Well) -> Optional[Cycle]:
        key = (event.piece_phase, event.wind_phase, well.skyline(self._depth))
        sightings = self._seen.setdefault(key, [])
        sightings.append((event.index + 1, event.height))
        if len(sightings) < 3:
            return None

        (c0, h0), (c1, h1), (c2, h2) = sightings[-3:]
        if c1 - c0 != c2 - c1 or h1 - h0 != h2 - h1:
            return None
        if not _same_extent(well, (c0, c1), (c1, c2)):
            return None

        return Cycle(
            start=c0,
            period=c1 - c0,
            height_per_period=h1 - h0,
            wind_phase=event.wind_phase,
            piece_phase=event.piece_phase
        )

    def _release(self) -> None:
        self._seen.clear()


class EpochWindowDetector(CycleDetector):
    """Compares the two most recent windows of wind_length * catalog_size placements."""

    def __init__(self, wind_length: int, catalog_size: int, search_limit: int = 100000):
        super().__init__(search_limit)
        self._epoch = wind_length * catalog_size
        # Entry k holds (wind phase, piece phase) after k placements
        self._phases: List[Tuple[int, int]] = [(0, 0)]

    @property
    def epoch(self) -> int:
        return self._epoch

    def _check(self, event: SettleEvent, well: Well) -> Optional[Cycle]:
        self._phases.append((event.wind_phase, event.piece_phase))
        count = event.index + 1
        if count < 2 * self._epoch:
            return None

        first = count - 2 * self._epoch
        second = count - self._epoch
        if self._phases[first] != self._phases[second]:
            return None

        gained_first = well.height_after(second) - well.height_after(first)
        gained_second = well.height_after(count) - well.height_after(second)
        if gained_first != gained_second:
            return None
        if not _same_extent(well, (first, second), (second, count)):
            return None

        wind_phase, piece_phase = self._phases[first]
        return Cycle(
            start=first,
            period=self._epoch,
            height_per_period=gained_first,
            wind_phase=wind_phase,
            piece_phase=piece_phase
        )

    def _release(self) -> None:
        self._phases = []


def make_detector(
    strategy: str,
    wind_length: int,
    catalog_size: int,
    search_limit: int = 100000,
    profile_depth: Optional[int] = 64
) -> CycleDetector:
    """
    Build a detector by strategy name.

    Raises:
        ValueError: If strategy is not "profile" or "epoch".
    """
    if strategy == "profile":
        return ProfileCycleDetector(search_limit, profile_depth)
    if strategy == "epoch":
        return EpochWindowDetector(wind_length, catalog_size, search_limit)
    raise ValueError(f"Unknown cycle strategy: '{strategy}'")
