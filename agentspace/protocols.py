"""Position types and the ``Locatable`` protocol shared by all spaces.

Positions are immutable values compared by structural equality:

- ``GridPosition``: a tuple of ints, one per dimension, 0-based
- ``ContinuousPosition``: a tuple of floats, one per dimension
- ``VertexPosition``: a node id of a networkx graph
- road networks use ``AtVertex`` / ``OnRoad`` from ``agentspace.spaces.road_network``

Anything with a ``pos`` attribute satisfies ``Locatable``, so the space
interaction functions accept agents and plain positions interchangeably.
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import Protocol, runtime_checkable

GridPosition = tuple[int, ...]
ContinuousPosition = tuple[float, ...]
VertexPosition = Hashable

# Type alias for positions across all space types.
Position = GridPosition | ContinuousPosition | VertexPosition


@runtime_checkable
class Locatable(Protocol):
    """Protocol for any object that has a position in a space.

    Examples:
        Using as a type hint for space-agnostic functions::

            from agentspace.protocols import Locatable

            def same_place(a: Locatable, b: Locatable) -> bool:
                return a.pos == b.pos

    """

    @property
    def pos(self) -> Position | None:
        """The position of this object in its space, None if it is not placed."""
        ...


def position_of(agent_or_pos) -> Position:
    """Return the position of a Locatable, or the argument itself if it is a position."""
    if isinstance(agent_or_pos, Locatable):
        return agent_or_pos.pos
    return agent_or_pos
