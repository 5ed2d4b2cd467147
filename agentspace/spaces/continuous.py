"""Continuous space with float coordinates.

Agents are indexed in a cell list: the extent is partitioned into a regular
grid of cells at least ``spacing`` wide, and a radius query only inspects the
cells overlapping the radius, wrapping around the border of the cell grid along
periodic dimensions. The candidates are then filtered by exact distance.

A good spacing is around the radius used by most queries; the default is a
twentieth of the smallest extent.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from agentspace.agentspace_logging import create_module_logger, method_logger
from agentspace.errors import ConfigurationError, UnsupportedOperationError
from agentspace.protocols import position_of
from agentspace.spaces.boundaries import BoundaryPolicy
from agentspace.spaces.index import CellListIndex
from agentspace.spaces.space import MetricSpace, Neighborhood

if TYPE_CHECKING:
    from agentspace.agent import Agent

_logger = create_module_logger()


class ContinuousSpace(MetricSpace):
    """A continuous space of positions ``0 <= x < extent`` along each axis.

    Attributes:
        spacing (float): the minimal cell size of the cell list
        rng (np.random.Generator): the random number generator
    """

    @method_logger(__name__)
    def __init__(
        self,
        extent: Sequence[float],
        periodic: bool | Sequence[bool] = True,
        spacing: float | None = None,
        rng: np.random.Generator | int | None = None,
    ) -> None:
        """Create a new continuous space.

        Args:
            extent: size of the space along each dimension
            periodic: whether the space wraps, for all dimensions or per dimension
            spacing: minimal cell size of the spatial index, defaults to min(extent) / 20
            rng: a random number generator
        """
        super().__init__(rng=rng)
        self._validate_parameters(extent, spacing)
        extent = tuple(float(e) for e in extent)
        self.spacing = float(spacing) if spacing is not None else min(extent) / 20
        self.boundary = BoundaryPolicy(extent, periodic)
        self._index = CellListIndex(extent, self.spacing, self.boundary.periodic)

    @staticmethod
    def _validate_parameters(extent, spacing) -> None:
        if len(extent) == 0 or not all(
            isinstance(e, int | float | np.number) and math.isfinite(e) and e > 0
            for e in extent
        ):
            raise ConfigurationError(
                "extent", "must be a non-empty sequence of positive finite numbers"
            )
        if spacing is not None and not (math.isfinite(spacing) and spacing > 0):
            raise ConfigurationError("spacing", "must be a positive finite number")

    def _neighbors_within(self, center, r):
        for agent_id, pos in self._index.candidates(center, r):
            if self.boundary.distance(center, pos) <= r:
                yield agent_id, pos

    def nearby_ids(self, agent_or_pos, r=1, **kwargs) -> Neighborhood:
        """Ids of the agents within distance r of a position or agent.

        When an agent is given, that agent is left out of the result.
        """
        center, exclude = self._query_center(agent_or_pos)
        self._check_radius(r)

        def ids():
            for agent_id, _ in self._neighbors_within(center, r):
                if agent_id != exclude:
                    yield agent_id

        return Neighborhood(ids)

    def nearby_positions(self, pos, r=1, **kwargs) -> Neighborhood:
        """Distinct occupied positions within distance r of pos, excluding pos."""
        center = self.validate_position(position_of(pos))
        self._check_radius(r)

        def positions():
            seen = {center}
            for _, other in self._neighbors_within(center, r):
                if other not in seen:
                    seen.add(other)
                    yield other

        return Neighborhood(positions)

    def nearest_neighbor(self, agent: Agent, r: float) -> Agent | None:
        """Return the agent closest to agent within distance r, or None if there is none."""
        nearest = None
        best = math.inf
        for agent_id in self.nearby_ids(agent, r):
            d = self.boundary.distance(agent.pos, self._agents[agent_id].pos)
            if d < best:
                nearest, best = self._agents[agent_id], d
        return nearest

    def walk(self, agent: Agent, delta: Sequence[float], ifempty: bool = False) -> None:
        """Move agent by delta, wrapping or clamping at the edges.

        Args:
            agent: the agent to move
            delta: offset, one entry per dimension
            ifempty: not available in continuous space
        """
        if ifempty:
            raise UnsupportedOperationError("walk with ifempty", self)
        self.move_agent(agent, self._walk_target(agent, delta))

    def random_walk(self, agent: Agent, ifempty: bool = False) -> None:
        """Walk by an offset drawn uniformly from [-1, 1] along each dimension."""
        delta = 2.0 * self.rng.random(self.ndims) - 1.0
        self.walk(agent, tuple(float(d) for d in delta), ifempty=ifempty)

    def move_towards(
        self, agent: Agent, target, distance: float, *, clamp: bool = True
    ) -> float:
        """Move agent toward target by at most ``distance`` and return the moved distance.

        Args:
            agent: the agent to move
            target: a position or an agent
            distance: the step length
            clamp: stop at the target instead of overshooting it
        """
        if distance < 0:
            raise ValueError("distance must be non-negative")

        delta = np.asarray(self.direction(agent, target))
        dist = float(np.linalg.norm(delta))
        if dist == 0:
            return 0.0

        step = min(distance, dist) if clamp else distance
        self.walk(agent, tuple(float(d) for d in (delta / dist) * step))
        return step

    def __repr__(self) -> str:  # noqa: D105
        return (
            f"{type(self).__name__}(extent={self.extent}, "
            f"periodic={self.periodic}, spacing={self.spacing})"
        )
