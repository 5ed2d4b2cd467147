"""Space-agnostic functions for moving agents and querying their surroundings.

These are thin wrappers that dispatch to the space, so agent code can be
written once and run on any topology::

    from agentspace.space_interaction import nearby_ids, walk

    def step(agent, space):
        crowd = list(nearby_ids(agent, space, r=2))
        if len(crowd) > 3:
            walk(agent, "random", space)

Grid and continuous spaces support distance, direction and walking. Graph-based
spaces measure neighborhoods in hops and raise UnsupportedOperationError for
the metric functions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from agentspace.agentspace_logging import function_logger
from agentspace.protocols import position_of

if TYPE_CHECKING:
    from agentspace.agent import Agent
    from agentspace.protocols import Position
    from agentspace.spaces.space import Neighborhood, Space

__all__ = [
    "add_agent_to_space",
    "direction",
    "distance",
    "move_agent",
    "nearby_agents",
    "nearby_ids",
    "nearby_positions",
    "neighbor_agents",
    "neighbor_positions",
    "random_position",
    "random_walk",
    "remove_agent_from_space",
    "walk",
]


def distance(a, b, space: Space) -> float:
    """Return the euclidean distance between a and b (agents or positions).

    Periodic dimensions are crossed the short way around.
    """
    return space.distance(position_of(a), position_of(b))


def direction(source, target, space: Space) -> tuple:
    """Return the vector that leads from source to target along the shortest path."""
    return space.direction(position_of(source), position_of(target))


def nearby_positions(agent_or_pos, space: Space, r=1, **kwargs) -> Neighborhood:
    """Return the positions within radius r, never including the center itself.

    Args:
        agent_or_pos: the center, an agent or a position
        space: the space
        r: a distance on grid and continuous spaces, a hop count on graph spaces
        kwargs: passed on to the space, e.g. ``metric`` or ``neighbor_type``
    """
    return space.nearby_positions(position_of(agent_or_pos), r, **kwargs)


def nearby_ids(agent_or_pos, space: Space, r=1, **kwargs) -> Neighborhood:
    """Return the ids of the agents within radius r of an agent or position.

    Agents sharing the center position are included. When an agent is given, the
    agent itself is not.
    """
    return space.nearby_ids(agent_or_pos, r, **kwargs)


def nearby_agents(agent_or_pos, space: Space, r=1, **kwargs) -> Neighborhood:
    """Same as nearby_ids, but yields the agents."""
    return space.nearby_agents(agent_or_pos, r, **kwargs)


neighbor_positions = nearby_positions
neighbor_agents = nearby_ids


@function_logger(__name__)
def add_agent_to_space(agent: Agent, pos: Position, space: Space) -> None:
    """Place agent at pos, corrected into the space if needed."""
    space.add_agent(agent, pos)


@function_logger(__name__)
def remove_agent_from_space(agent: Agent, space: Space) -> None:
    """Remove agent from space."""
    space.remove_agent(agent)


def move_agent(agent: Agent, pos: Position, space: Space) -> None:
    """Move agent to pos; periodic dimensions wrap, bounded ones clamp."""
    space.move_agent(agent, pos)


def random_walk(agent: Agent, space: Space, ifempty: bool = False) -> None:
    """Move agent by a random step.

    Grids step by -1, 0 or 1 cells along each dimension, continuous spaces by a
    uniform offset in [-1, 1], graph spaces to a random adjacent vertex.
    """
    space.random_walk(agent, ifempty=ifempty)


def walk(agent: Agent, delta, space: Space, ifempty: bool = False) -> None:
    """Move agent by delta, respecting the boundaries of the space.

    Args:
        agent: the agent to move
        delta: the offset, one entry per dimension (integers on grids). Pass
            ``"random"`` or the ``random_walk`` function for a random step.
        space: the space
        ifempty: grids only; do not move if the target cell is occupied
    """
    if delta is random_walk or (isinstance(delta, str) and delta == "random"):
        random_walk(agent, space, ifempty=ifempty)
    else:
        space.walk(agent, delta, ifempty=ifempty)


def random_position(space: Space) -> Position:
    """Return a uniformly chosen position of the space."""
    return space.random_position()
