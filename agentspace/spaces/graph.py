"""Graph space whose positions are the vertices of a NetworkX graph.

Any number of agents can share a vertex. Neighborhoods are measured in hops:
the vertices reachable in at most r steps along the edges. On directed graphs
the direction of the edges that count can be chosen per query.

Vertices and edges can be added and removed while the model runs.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator
from itertools import chain
from numbers import Integral
from typing import TYPE_CHECKING, Any

import networkx as nx
import numpy as np

from agentspace.agentspace_logging import create_module_logger, method_logger
from agentspace.errors import ConfigurationError, InvalidRadiusError, OutOfBoundsError
from agentspace.spaces.index import VertexIndex
from agentspace.spaces.space import Neighborhood, Space

if TYPE_CHECKING:
    from agentspace.agent import Agent

NEIGHBOR_TYPES = ("default", "out", "in", "all")

_logger = create_module_logger()


def check_hops(r) -> None:
    """Raise InvalidRadiusError unless r is a positive integer hop count."""
    if isinstance(r, bool) or not isinstance(r, Integral):
        raise InvalidRadiusError(r, "hop counts must be integers")
    if r <= 0:
        raise InvalidRadiusError(r)


def check_neighbor_type(neighbor_type: str) -> None:
    """Raise ConfigurationError for an unknown neighbor_type."""
    if neighbor_type not in NEIGHBOR_TYPES:
        raise ConfigurationError(
            "neighbor_type", f"must be one of {NEIGHBOR_TYPES}, got {neighbor_type!r}"
        )


def adjacent_vertices(
    graph: nx.Graph, vertex: Hashable, neighbor_type: str = "default"
) -> Iterable[Hashable]:
    """Return the vertices one hop away from vertex.

    Args:
        graph: the graph
        vertex: the vertex
        neighbor_type: for directed graphs, "default" and "out" follow outgoing
            edges, "in" follows incoming edges, "all" follows both. Undirected graphs
            ignore it.
    """
    check_neighbor_type(neighbor_type)
    if not graph.is_directed() or neighbor_type in ("default", "out"):
        return graph.neighbors(vertex)
    if neighbor_type == "in":
        return graph.predecessors(vertex)
    return chain(graph.successors(vertex), graph.predecessors(vertex))


def expand_hops(
    graph: nx.Graph, center: Hashable, r: int, neighbor_type: str = "default"
) -> Iterator[Hashable]:
    """Breadth first expansion from center, yielding each vertex within r hops once.

    The center itself is never yielded, even if a cycle leads back to it.
    """
    seen = {center}
    frontier = [center]
    for _ in range(r):
        next_frontier = []
        for vertex in frontier:
            for neighbor in adjacent_vertices(graph, vertex, neighbor_type):
                if neighbor not in seen:
                    seen.add(neighbor)
                    next_frontier.append(neighbor)
                    yield neighbor
        if not next_frontier:
            return
        frontier = next_frontier


class GraphSpace(Space):
    """A space on the vertices of a graph.

    Attributes:
        graph (nx.Graph): the underlying NetworkX graph, directed or not
        rng (np.random.Generator): the random number generator
    """

    @method_logger(__name__)
    def __init__(
        self, graph: Any, rng: np.random.Generator | int | None = None
    ) -> None:
        """Create a graph space.

        Args:
            graph: a NetworkX Graph or DiGraph instance
            rng: a random number generator
        """
        super().__init__(rng=rng)
        if not isinstance(graph, nx.Graph):
            raise ConfigurationError("graph", "must be a networkx graph")
        self.graph = graph
        self._index = VertexIndex(self.graph.nodes)

    def normalize_position(self, pos) -> Hashable:  # noqa: D102
        if pos not in self.graph:
            raise OutOfBoundsError(pos, self.number_of_vertices(), "no such vertex")
        return pos

    def number_of_vertices(self) -> int:
        """Return the number of vertices of the graph."""
        return self.graph.number_of_nodes()

    def number_of_edges(self) -> int:
        """Return the number of edges of the graph."""
        return self.graph.number_of_edges()

    def positions(self) -> Iterator[Hashable]:
        """Iterate over the vertices."""
        return iter(list(self.graph.nodes))

    def random_position(self) -> Hashable:  # noqa: D102
        vertices = list(self.graph.nodes)
        return vertices[self.rng.integers(len(vertices))]

    def nearby_positions(self, pos, r=1, neighbor_type: str = "default") -> Neighborhood:
        """Vertices within r hops of pos, excluding pos itself.

        Args:
            pos: the center vertex
            r: the number of hops, a positive integer
            neighbor_type: which edges to follow on directed graphs, see adjacent_vertices
        """
        center = self.validate_position(pos)
        check_hops(r)
        check_neighbor_type(neighbor_type)
        return Neighborhood(lambda: expand_hops(self.graph, center, r, neighbor_type))

    def random_walk(self, agent: Agent, ifempty: bool = False) -> None:
        """Move agent to a uniformly chosen adjacent vertex.

        Args:
            agent: the agent to move
            ifempty: only choose among empty adjacent vertices

        An agent on a vertex without (empty) neighbors stays where it is.
        """
        self._check_placed(agent)
        choices = list(adjacent_vertices(self.graph, agent.pos))
        if ifempty:
            choices = [v for v in choices if self._index.is_empty(v)]
        if choices:
            self.move_agent(agent, choices[self.rng.integers(len(choices))])

    def add_vertex(self, vertex: Hashable, **attr) -> None:
        """Add a vertex to the graph."""
        self.graph.add_node(vertex, **attr)
        self._index.add_vertex(vertex)

    def remove_vertex(self, vertex: Hashable) -> None:
        """Remove a vertex, and all agents on it, from the space."""
        self.validate_position(vertex)
        for agent_id in self._index.occupants_at(vertex):
            self.remove_agent(self._agents[agent_id])
        self.graph.remove_node(vertex)
        self._index.remove_vertex(vertex)
        _logger.debug(f"removed vertex {vertex}")

    def add_edge(self, u: Hashable, v: Hashable, **attr) -> None:
        """Connect two existing vertices."""
        self.validate_position(u)
        self.validate_position(v)
        self.graph.add_edge(u, v, **attr)

    def remove_edge(self, u: Hashable, v: Hashable) -> None:
        """Remove the edge between u and v."""
        self.graph.remove_edge(u, v)

    def __repr__(self) -> str:  # noqa: D105
        return (
            f"{type(self).__name__}(vertices={self.number_of_vertices()}, "
            f"edges={self.number_of_edges()}, agents={len(self)})"
        )
