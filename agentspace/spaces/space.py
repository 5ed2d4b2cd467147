"""Base classes shared by all spaces.

Space provides the functionality every topology needs:
- Agent placement, relocation and removal
- Keeping ``agent.pos`` and the occupancy index in agreement
- Lookups of the agents at a position
- The common shape of neighbor queries

MetricSpace adds what grid and continuous spaces share: a BoundaryPolicy that
corrects positions, and euclidean distance and shortest direction that honor
periodic dimensions.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable, Iterator, Sequence
from itertools import chain
from numbers import Real
from typing import TYPE_CHECKING

import numpy as np

from agentspace.agentspace_logging import create_module_logger
from agentspace.errors import (
    AgentStateError,
    InvalidRadiusError,
    OutOfBoundsError,
    UnsupportedOperationError,
)
from agentspace.protocols import Locatable, Position, position_of

if TYPE_CHECKING:
    from agentspace.agent import Agent
    from agentspace.spaces.boundaries import BoundaryPolicy
    from agentspace.spaces.index import OccupancyIndex

_logger = create_module_logger()


class Neighborhood:
    """The lazy result of a neighbor query.

    Nothing is computed until the neighborhood is iterated, and every iteration
    runs the query again, so a neighborhood can be consumed more than once and a
    caller can stop early. The results never contain duplicates or the origin of
    the query.
    """

    __slots__ = ("_query",)

    def __init__(self, query: Callable[[], Iterator]):
        """Wrap a zero-argument callable that returns a fresh iterator of results."""
        self._query = query

    def __iter__(self) -> Iterator:  # noqa: D105
        return self._query()

    def __contains__(self, item) -> bool:  # noqa: D105
        return any(item == other for other in self)

    def __repr__(self) -> str:  # noqa: D105
        return f"{type(self).__name__}({list(self)})"


class Space:
    """Base class for all spaces.

    Attributes:
        rng (np.random.Generator): the random number generator

    Notes:
        A `UserWarning` is issued if `rng=None`. You can resolve this warning by explicitly
        passing a random number generator. In most cases, this will be the seeded random number
        generator in the model. So, you would do `rng=model.rng`.

    """

    _index: OccupancyIndex

    def __init__(self, rng: np.random.Generator | int | None = None):
        """Instantiate a space.

        Args:
            rng: random number generator, or a seed for one
        """
        if rng is None:
            warnings.warn(
                "Random number generator not specified, this can make models non-reproducible. Please pass a random number generator explicitly",
                UserWarning,
                stacklevel=2,
            )
        self.rng = np.random.default_rng(rng)
        self._agents: dict[int, Agent] = {}

    # positions
    def normalize_position(self, pos) -> Position:
        """Correct pos into the space, raising OutOfBoundsError when that is impossible."""
        raise NotImplementedError

    def validate_position(self, pos) -> Position:
        """Return the canonical form of pos, raising OutOfBoundsError if it is not in the space."""
        return self.normalize_position(pos)

    def random_position(self) -> Position:
        """Return a uniformly chosen position of the space."""
        raise UnsupportedOperationError("random_position", self)

    def positions(self) -> Iterator[Position]:
        """Iterate over all positions of the space."""
        raise UnsupportedOperationError("positions", self)

    # occupancy
    @property
    def agents(self) -> list[Agent]:
        """All agents placed in the space."""
        return list(self._agents.values())

    def __len__(self) -> int:  # noqa: D105
        return len(self._agents)

    def __contains__(self, agent: Agent) -> bool:  # noqa: D105
        return self._agents.get(agent.unique_id) is agent

    def occupants_at(self, pos) -> list[int]:
        """Return the ids of the agents at pos."""
        return self._index.occupants_at(self.validate_position(pos))

    def agents_at(self, pos) -> list[Agent]:
        """Return the agents at pos."""
        return [self._agents[i] for i in self.occupants_at(pos)]

    def is_empty(self, pos) -> bool:
        """Check if there are no agents at pos."""
        return self._index.is_empty(self.validate_position(pos))

    # movement
    def add_agent(self, agent: Agent, pos) -> None:
        """Place agent at pos.

        Args:
            agent: the agent to place, it must not be in a space already
            pos: the position, corrected into the space if needed
        """
        if agent.space is not None:
            raise AgentStateError(
                f"Agent {agent.unique_id} is already placed at {agent.pos}"
            )
        pos = self.normalize_position(pos)
        self._index.add(agent.unique_id, pos)
        self._agents[agent.unique_id] = agent
        agent._pos = pos
        agent._space = self
        _logger.debug(f"added agent {agent.unique_id} at {pos}")

    def remove_agent(self, agent: Agent) -> None:
        """Remove agent from the space, its position becomes None."""
        self._check_placed(agent)
        self._index.remove(agent.unique_id, agent.pos)
        del self._agents[agent.unique_id]
        agent._pos = None
        agent._space = None
        _logger.debug(f"removed agent {agent.unique_id}")

    def move_agent(self, agent: Agent, pos) -> None:
        """Move agent to pos, corrected into the space if needed.

        The target is validated before anything changes, so a failing move leaves
        both the agent and the index untouched.
        """
        self._check_placed(agent)
        pos = self.normalize_position(pos)
        self._index.move(agent.unique_id, agent.pos, pos)
        agent._pos = pos

    def walk(self, agent: Agent, delta, ifempty: bool = False) -> None:
        """Move agent by delta."""
        raise UnsupportedOperationError("walk", self)

    def random_walk(self, agent: Agent, ifempty: bool = False) -> None:
        """Move agent by a random step."""
        raise UnsupportedOperationError("random_walk", self)

    def _check_placed(self, agent: Agent) -> None:
        if agent.space is not self:
            raise AgentStateError(f"Agent {agent.unique_id} is not placed in this space")

    # metric
    def distance(self, pos1, pos2) -> float:
        """Euclidean distance between two positions or agents."""
        raise UnsupportedOperationError("distance", self)

    def direction(self, source, target) -> tuple:
        """Shortest vector from source to target (positions or agents)."""
        raise UnsupportedOperationError("direction", self)

    # neighbor queries
    def nearby_positions(self, pos, r=1, **kwargs) -> Neighborhood:
        """Positions within radius r of pos, excluding pos itself."""
        raise NotImplementedError

    def nearby_ids(self, agent_or_pos, r=1, **kwargs) -> Neighborhood:
        """Ids of the agents at, or within radius r of, a position or agent.

        When an agent is given, that agent is left out of the result.
        """
        center, exclude = self._query_center(agent_or_pos)
        positions = self.nearby_positions(center, r, **kwargs)

        def ids():
            for pos in chain((center,), positions):
                for agent_id in self._index.occupants_at(pos):
                    if agent_id != exclude:
                        yield agent_id

        return Neighborhood(ids)

    def nearby_agents(self, agent_or_pos, r=1, **kwargs) -> Neighborhood:
        """Same as nearby_ids, but yields the agents themselves."""
        ids = self.nearby_ids(agent_or_pos, r, **kwargs)
        return Neighborhood(lambda: (self._agents[i] for i in ids))

    def _query_center(self, agent_or_pos) -> tuple[Position, int | None]:
        if isinstance(agent_or_pos, Locatable):
            self._check_placed(agent_or_pos)
            return agent_or_pos.pos, agent_or_pos.unique_id
        return self.validate_position(agent_or_pos), None

    def _check_radius(self, r) -> None:
        if isinstance(r, bool) or not isinstance(r, Real) or not np.isfinite(r):
            raise InvalidRadiusError(r, "must be a finite number")
        if r <= 0:
            raise InvalidRadiusError(r)

    def __repr__(self) -> str:  # noqa: D105
        return f"{type(self).__name__}(agents={len(self._agents)})"


class MetricSpace(Space):
    """Base class for grid and continuous spaces.

    Attributes:
        boundary (BoundaryPolicy): extent and periodicity of the space
    """

    boundary: BoundaryPolicy

    @property
    def extent(self) -> tuple:
        """Size of the space along each dimension."""
        return self.boundary.extent

    @property
    def periodic(self) -> tuple[bool, ...]:
        """Whether each dimension wraps around."""
        return self.boundary.periodic

    @property
    def ndims(self) -> int:
        """Number of dimensions."""
        return self.boundary.ndims

    def normalize_position(self, pos) -> tuple:  # noqa: D102
        return self.boundary.apply(pos)

    def validate_position(self, pos) -> tuple:  # noqa: D102
        corrected = self.boundary.apply(pos)
        if corrected != tuple(pos):
            raise OutOfBoundsError(pos, self.extent)
        return corrected

    def random_position(self) -> tuple:  # noqa: D102
        return self.boundary.random_position(self.rng)

    def distance(self, pos1, pos2) -> float:  # noqa: D102
        return self.boundary.distance(
            self.validate_position(position_of(pos1)),
            self.validate_position(position_of(pos2)),
        )

    def direction(self, source, target) -> tuple:  # noqa: D102
        return self.boundary.direction(
            self.validate_position(position_of(source)),
            self.validate_position(position_of(target)),
        )

    def _walk_target(self, agent: Agent, delta: Sequence) -> tuple:
        self._check_placed(agent)
        self.boundary.check_dimensions(delta)
        return self.boundary.apply(tuple(x + d for x, d in zip(agent.pos, delta)))
