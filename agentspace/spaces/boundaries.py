"""Boundary handling and metric primitives for grid and continuous spaces.

A ``BoundaryPolicy`` bundles the extent of a space with one periodic flag per
dimension. It corrects candidate positions (wrap or clamp, dimension by
dimension), computes shortest wrapped deltas, and answers the euclidean
distance and shortest direction between two positions. Mixed spaces, periodic
along some axes and bounded along others, are legal.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from itertools import product

import numpy as np

from agentspace.errors import (
    ConfigurationError,
    DimensionMismatchError,
    OutOfBoundsError,
)


def _grid_coordinate(value, position, extent) -> int:
    if isinstance(value, int | np.integer):
        return int(value)
    if isinstance(value, float | np.floating) and math.isfinite(value):
        if float(value).is_integer():
            return int(value)
    raise OutOfBoundsError(position, extent, "grid coordinates must be finite integers")


class BoundaryPolicy:
    """Defines the extent of a space and how each dimension treats its edges.

    Attributes:
        extent: size of each dimension
        periodic: one flag per dimension, True if the dimension wraps around
        discrete: True for integer grid coordinates, False for float coordinates
        ndims: number of dimensions
    """

    def __init__(
        self,
        extent: Sequence[float],
        periodic: bool | Sequence[bool] = True,
        discrete: bool = False,
    ):
        """Initialize a boundary policy.

        Args:
            extent: size of each dimension, positions satisfy ``0 <= x < extent``
            periodic: whether dimensions wrap around, either one flag for all
                dimensions or one flag per dimension
            discrete: whether positions are integer grid coordinates

        Examples:
            # 2D torus
            policy = BoundaryPolicy((10.0, 10.0), periodic=True)

            # a cylinder: wraps along x, walls along y
            policy = BoundaryPolicy((10, 5), periodic=(True, False), discrete=True)
        """
        self.discrete = discrete
        self.ndims = len(extent)
        self.extent = tuple(int(e) if discrete else float(e) for e in extent)

        if isinstance(periodic, bool | np.bool_):
            periodic = (bool(periodic),) * self.ndims
        periodic = tuple(bool(p) for p in periodic)
        if len(periodic) != self.ndims:
            raise ConfigurationError(
                "periodic", f"expected {self.ndims} flags, got {len(periodic)}"
            )
        self.periodic = periodic

        # Pre-compute numpy views for the vectorised paths
        self._extent = np.array(self.extent, dtype=float)
        self._periodic = np.array(self.periodic, dtype=bool)
        if discrete:
            self._upper = self._extent - 1
        else:
            # largest float strictly below the half-open upper bound
            self._upper = np.array([math.nextafter(e, 0.0) for e in self.extent])

        # translations of a target by -1, 0 or +1 extent along each periodic dimension
        choices = [(-1, 0, 1) if p else (0,) for p in self.periodic]
        self._translations = np.array(list(product(*choices)), dtype=float) * self._extent

    @property
    def any_periodic(self) -> bool:
        """True if at least one dimension wraps around."""
        return any(self.periodic)

    def check_dimensions(self, vector: Sequence) -> None:
        """Raise DimensionMismatchError if vector does not have one entry per dimension."""
        if len(vector) != self.ndims:
            raise DimensionMismatchError(vector, self.ndims)

    def contains(self, position: Sequence[float]) -> bool:
        """Check if position lies inside the extent, without correcting it."""
        if len(position) != self.ndims:
            return False
        for x, e in zip(position, self.extent):
            if self.discrete and not isinstance(x, int | np.integer):
                return False
            if not 0 <= x < e:
                return False
        return True

    def apply(self, position: Sequence[float]) -> tuple:
        """Correct a candidate position into the extent.

        Periodic dimensions wrap into ``[0, extent)``. Bounded dimensions clamp to
        ``[0, extent - 1]`` on grids and to ``[0, extent)`` in continuous space,
        where the upper value is the largest float below the extent.

        Args:
            position: candidate position

        Returns:
            the corrected position as a tuple

        Raises:
            DimensionMismatchError: if position has the wrong number of coordinates
            OutOfBoundsError: if a coordinate is not finite (or not an integer on a grid)
        """
        self.check_dimensions(position)

        if self.discrete:
            corrected = []
            for x, e, p in zip(position, self.extent, self.periodic):
                x = _grid_coordinate(x, position, self.extent)
                corrected.append(x % e if p else min(max(x, 0), e - 1))
            return tuple(corrected)

        pos = np.asarray(position, dtype=float)
        if not np.all(np.isfinite(pos)):
            raise OutOfBoundsError(position, self.extent, "coordinates must be finite")

        wrapped = np.mod(pos, self._extent)
        # x % e can round up to e itself for tiny negative x
        wrapped = np.where(wrapped >= self._extent, 0.0, wrapped)
        clamped = np.clip(pos, 0.0, self._upper)
        return tuple(float(x) for x in np.where(self._periodic, wrapped, clamped))

    def wrap_delta(self, delta: Sequence[float]) -> np.ndarray:
        """Return the shortest signed delta along each periodic dimension.

        Along a periodic dimension the result is whichever of ``d``, ``d - extent``
        and ``d + extent`` has the smallest magnitude, preferring ``d`` on ties.
        Bounded dimensions are returned unchanged.
        """
        self.check_dimensions(delta)
        d = np.asarray(delta, dtype=float)
        candidates = np.stack([d, d - self._extent, d + self._extent])
        shortest = candidates[np.argmin(np.abs(candidates), axis=0), np.arange(self.ndims)]
        return np.where(self._periodic, shortest, d)

    def distance(self, pos1: Sequence[float], pos2: Sequence[float]) -> float:
        """Euclidean distance between two positions, taking the short way around periodic dimensions."""
        self.check_dimensions(pos1)
        self.check_dimensions(pos2)
        delta = np.abs(np.subtract(pos2, pos1, dtype=float))
        delta = np.where(self._periodic, np.minimum(delta, self._extent - delta), delta)
        return float(np.sqrt(np.dot(delta, delta)))

    def direction(self, source: Sequence[float], target: Sequence[float]) -> tuple:
        """Vector that leads from source to target along the shortest path.

        Every combination of -1, 0 and +1 extent translations of target along the
        periodic dimensions is tried, and the translate closest to source wins. The
        number of candidates grows as ``3 ** ndims``, which is fine for the low
        dimensional spaces simulations use.
        """
        self.check_dimensions(source)
        self.check_dimensions(target)
        best = np.subtract(target, source, dtype=float)

        if self.any_periodic:
            candidates = best + self._translations
            squared = np.einsum("ij,ij->i", candidates, candidates)
            index = int(np.argmin(squared))
            if squared[index] < np.dot(best, best):
                best = candidates[index]

        if self.discrete:
            return tuple(int(round(x)) for x in best)
        return tuple(float(x) for x in best)

    def random_position(self, rng: np.random.Generator) -> tuple:
        """Generate a uniformly distributed position inside the extent.

        Args:
            rng: NumPy random number generator
        """
        if self.discrete:
            return tuple(int(rng.integers(e)) for e in self.extent)
        pos = np.minimum(rng.random(self.ndims) * self._extent, self._upper)
        return tuple(float(x) for x in pos)

    def __repr__(self) -> str:  # noqa: D105
        return f"{type(self).__name__}(extent={self.extent}, periodic={self.periodic})"
