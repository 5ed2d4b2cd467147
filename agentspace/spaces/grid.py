"""Discrete grid space with integer coordinates.

Every cell of the grid has a bucket in a dense occupancy index, so placing,
moving and looking up agents is O(1). Neighborhoods are built from cached
offsets under one of three metrics:

- chebyshev: the box around a cell, (2r+1)^n - 1 cells (Moore neighborhood)
- manhattan: cells within r orthogonal steps (von Neumann neighborhood)
- euclidean: cells whose center lies within distance r

Each dimension either wraps around (torus) or ends in a wall, independently.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from itertools import product
from typing import TYPE_CHECKING

import numpy as np

from agentspace.agentspace_logging import create_module_logger, method_logger
from agentspace.errors import ConfigurationError, SpaceFullError
from agentspace.spaces.boundaries import BoundaryPolicy
from agentspace.spaces.index import DenseGridIndex
from agentspace.spaces.space import MetricSpace, Neighborhood

if TYPE_CHECKING:
    from agentspace.agent import Agent

METRICS = ("chebyshev", "manhattan", "euclidean")

_logger = create_module_logger()


class GridSpace(MetricSpace):
    """A grid of integer positions ``0 <= x < dimension`` along each axis.

    Attributes:
        dimensions (tuple[int, ...]): the dimensions of the grid
        metric (str): the default metric for neighborhoods
        rng (np.random.Generator): the random number generator

    Notes:
        width and height are accessible via properties, higher dimensions can be retrieved via dimensions

    """

    @property
    def width(self) -> int:
        """Convenience access to the width of the grid."""
        return self.dimensions[0]

    @property
    def height(self) -> int:
        """Convenience access to the height of the grid."""
        return self.dimensions[1]

    @method_logger(__name__)
    def __init__(
        self,
        dimensions: Sequence[int],
        periodic: bool | Sequence[bool] = True,
        metric: str = "chebyshev",
        rng: np.random.Generator | int | None = None,
    ) -> None:
        """Initialise the grid.

        Args:
            dimensions: the dimensions of the space
            periodic: whether the space wraps, for all dimensions or per dimension
            metric: default metric of neighborhoods, one of chebyshev, manhattan or euclidean
            rng: a random number generator
        """
        super().__init__(rng=rng)
        self.dimensions = tuple(dimensions)
        self.metric = metric
        self._validate_parameters()
        self.boundary = BoundaryPolicy(self.dimensions, periodic, discrete=True)
        self._index = DenseGridIndex(self.dimensions)
        self._offsets: dict[tuple[float, str], list[tuple[int, ...]]] = {}
        self._try_random = True

    def _validate_parameters(self):
        if not self.dimensions or not all(
            isinstance(dim, int | np.integer) and dim > 0 for dim in self.dimensions
        ):
            raise ConfigurationError(
                "dimensions", "must be a non-empty sequence of positive integers"
            )
        self.dimensions = tuple(int(dim) for dim in self.dimensions)
        self._validate_metric(self.metric)

    @staticmethod
    def _validate_metric(metric: str) -> None:
        if metric not in METRICS:
            raise ConfigurationError("metric", f"must be one of {METRICS}, got {metric!r}")

    def positions(self) -> Iterator[tuple[int, ...]]:
        """Iterate over all cells of the grid in row-major order."""
        return np.ndindex(*self.dimensions)

    def _neighborhood_offsets(self, r: float, metric: str) -> list[tuple[int, ...]]:
        key = (r, metric)
        try:
            return self._offsets[key]
        except KeyError:
            pass

        bound = math.floor(r)
        ranges = []
        for d, p in zip(self.dimensions, self.periodic):
            if p:
                # one offset per wrapped coordinate, the one of smallest magnitude
                ranges.append(range(max(-bound, -((d - 1) // 2)), min(bound, d // 2) + 1))
            else:
                reach = min(bound, d - 1)
                ranges.append(range(-reach, reach + 1))

        offsets = []
        for offset in product(*ranges):
            if not any(offset):
                continue
            if metric == "manhattan" and sum(abs(o) for o in offset) > r:
                continue
            if metric == "euclidean" and sum(o * o for o in offset) > r * r:
                continue
            offsets.append(offset)

        self._offsets[key] = offsets
        return offsets

    def nearby_positions(self, pos, r=1, metric: str | None = None) -> Neighborhood:
        """Positions within radius r of pos, excluding pos.

        Args:
            pos: the center of the neighborhood
            r: the radius, in the units of the chosen metric
            metric: overrides the metric of the grid for this query

        Returns:
            a lazy sequence of positions; wraps around periodic dimensions, stops at the
            walls of bounded ones, and never yields a position twice even if several
            offsets wrap onto it.
        """
        center = self.validate_position(pos)
        self._check_radius(r)
        metric = self.metric if metric is None else metric
        self._validate_metric(metric)
        offsets = self._neighborhood_offsets(r, metric)
        dimensions = self.dimensions
        periodic = self.periodic

        def positions():
            seen = {center}
            for offset in offsets:
                candidate = []
                for c, o, d, p in zip(center, offset, dimensions, periodic):
                    x = c + o
                    if p:
                        x %= d
                    elif not 0 <= x < d:
                        break
                    candidate.append(x)
                else:
                    candidate = tuple(candidate)
                    if candidate not in seen:
                        seen.add(candidate)
                        yield candidate

        return Neighborhood(positions)

    def walk(self, agent: Agent, delta: Sequence[int], ifempty: bool = False) -> None:
        """Move agent by delta cells, wrapping or stopping at the walls.

        Args:
            agent: the agent to move
            delta: integer offset, one entry per dimension
            ifempty: only move if the target cell is empty; an occupied target
                leaves the agent where it is
        """
        target = self._walk_target(agent, delta)
        if ifempty and not self._index.is_empty(target):
            return
        self.move_agent(agent, target)

    def random_walk(self, agent: Agent, ifempty: bool = False) -> None:
        """Walk by an offset drawn uniformly from {-1, 0, 1} along each dimension."""
        delta = tuple(int(d) for d in self.rng.integers(-1, 2, size=self.ndims))
        self.walk(agent, delta, ifempty=ifempty)

    def random_empty(self) -> tuple[int, ...] | None:
        """Return a random empty position, or None if the grid is full."""
        # Try random sampling first, it is O(1) as long as the grid is not nearly full.
        # After that fall back on scanning the empty mask.
        if self._try_random:
            for _ in range(50):
                pos = self.boundary.random_position(self.rng)
                if self._index.is_empty(pos):
                    return pos

        empty_coords = np.argwhere(self._index.empty)
        if len(empty_coords) == 0:
            return None
        coord = empty_coords[self.rng.integers(len(empty_coords))]
        return tuple(int(c) for c in coord)

    def add_agent_single(self, agent: Agent) -> tuple[int, ...]:
        """Place agent on a random empty cell and return that cell.

        Raises:
            SpaceFullError: if no cell is empty
        """
        pos = self.random_empty()
        if pos is None:
            raise SpaceFullError(self)
        self.add_agent(agent, pos)
        return pos

    def __repr__(self) -> str:  # noqa: D105
        return (
            f"{type(self).__name__}(dimensions={self.dimensions}, "
            f"periodic={self.periodic}, metric={self.metric!r})"
        )
