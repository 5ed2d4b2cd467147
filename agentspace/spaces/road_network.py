"""Road network space built on a NetworkX graph with road lengths.

Vertices are intersections, edges are roads. An agent either stands on an
intersection, ``AtVertex(v)``, or somewhere along a road, ``OnRoad(start, end,
offset)`` with ``offset`` the distance travelled from ``start`` towards ``end``.
On directed graphs a road can only be used in the direction of its edge.

Road lengths come from an edge attribute (``length`` by default, as in
OpenStreetMap exports), else from the euclidean distance between the vertex
coordinates, else they are 1. Vertex coordinates are read from a ``pos``
attribute or from ``x`` and ``y`` attributes; when present, a KD-tree answers
nearest vertex and nearest road lookups for arbitrary points.
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterator, Sequence
from dataclasses import dataclass
from itertools import chain
from typing import Any

import networkx as nx
import numpy as np
from scipy.spatial import KDTree

from agentspace.agentspace_logging import create_module_logger, method_logger
from agentspace.errors import (
    ConfigurationError,
    OutOfBoundsError,
    UnsupportedOperationError,
)
from agentspace.spaces.graph import check_hops, check_neighbor_type, expand_hops
from agentspace.spaces.index import RoadIndex
from agentspace.spaces.space import Neighborhood, Space

_logger = create_module_logger()


@dataclass(frozen=True, slots=True)
class AtVertex:
    """A position on an intersection of the road network."""

    vertex: Hashable


@dataclass(frozen=True, slots=True)
class OnRoad:
    """A position on the road from start to end, offset length units from start."""

    start: Hashable
    end: Hashable
    offset: float


RoadPosition = AtVertex | OnRoad


class RoadNetworkSpace(Space):
    """A space of intersections and the roads between them.

    Attributes:
        graph (nx.Graph): the road graph, directed for one-way roads
        length_attribute (str): the edge attribute holding road lengths
        rng (np.random.Generator): the random number generator
    """

    @method_logger(__name__)
    def __init__(
        self,
        graph: Any,
        length_attribute: str = "length",
        rng: np.random.Generator | int | None = None,
    ) -> None:
        """Create a road network space.

        Args:
            graph: a NetworkX Graph or DiGraph instance
            length_attribute: name of the edge attribute with the road lengths
            rng: a random number generator
        """
        super().__init__(rng=rng)
        if not isinstance(graph, nx.Graph) or graph.is_multigraph():
            raise ConfigurationError("graph", "must be a networkx Graph or DiGraph")
        self.graph = graph
        self.length_attribute = length_attribute
        self._validate_lengths()
        self._vertex_order = {vertex: i for i, vertex in enumerate(self.graph.nodes)}
        self._build_kdtree()
        self._index = RoadIndex(self.graph.nodes, self.nearest_vertex)

    def _validate_lengths(self) -> None:
        for u, v in self.graph.edges:
            length = self.road_length(u, v)
            if not (math.isfinite(length) and length > 0):
                raise ConfigurationError(
                    self.length_attribute,
                    f"road ({u}, {v}) has length {length}, lengths must be positive",
                )

    def _coordinates(self, vertex: Hashable) -> np.ndarray | None:
        data = self.graph.nodes[vertex]
        if "pos" in data:
            return np.asarray(data["pos"], dtype=float)
        if "x" in data and "y" in data:
            return np.array([data["x"], data["y"]], dtype=float)
        return None

    def _build_kdtree(self) -> None:
        """Build the KD-Tree for fast nearest-vertex lookups."""
        self._kdtree_vertices = []
        coordinates = []
        for vertex in self.graph.nodes:
            coords = self._coordinates(vertex)
            if coords is not None:
                self._kdtree_vertices.append(vertex)
                coordinates.append(coords)

        self._kdtree = KDTree(np.array(coordinates)) if coordinates else None

    def number_of_vertices(self) -> int:
        """Return the number of intersections."""
        return self.graph.number_of_nodes()

    def number_of_edges(self) -> int:
        """Return the number of roads."""
        return self.graph.number_of_edges()

    def road_length(self, start: Hashable, end: Hashable) -> float:
        """Return the length of the road from start to end."""
        data = self.graph.get_edge_data(start, end)
        if data is None:
            raise OutOfBoundsError((start, end), self.number_of_vertices(), "no such road")
        if self.length_attribute in data:
            return float(data[self.length_attribute])

        a = self._coordinates(start)
        b = self._coordinates(end)
        if a is not None and b is not None:
            return float(np.linalg.norm(b - a))
        return 1.0

    def normalize_position(self, pos) -> RoadPosition:
        """Return the canonical road position for pos.

        Offsets are clamped onto the road, and an offset of 0 or of the full road
        length collapses to the vertex at that end. On undirected graphs a road is
        always written from the endpoint that was added to the graph first, so
        ``OnRoad(b, a, length - x)`` becomes ``OnRoad(a, b, x)``. A bare vertex id
        is accepted as ``AtVertex``.
        """
        if isinstance(pos, OnRoad):
            start, end = pos.start, pos.end
            length = self.road_length(start, end)
            if not math.isfinite(pos.offset):
                raise OutOfBoundsError(pos, self.number_of_vertices(), "offset must be finite")
            offset = min(max(float(pos.offset), 0.0), length)
            if offset == 0.0:
                return AtVertex(start)
            if offset == length:
                return AtVertex(end)
            if (
                not self.graph.is_directed()
                and self._vertex_order[end] < self._vertex_order[start]
            ):
                start, end, offset = end, start, length - offset
            return OnRoad(start, end, offset)

        vertex = pos.vertex if isinstance(pos, AtVertex) else pos
        if vertex not in self.graph:
            raise OutOfBoundsError(pos, self.number_of_vertices(), "no such vertex")
        return AtVertex(vertex)

    def validate_position(self, pos) -> RoadPosition:  # noqa: D102
        corrected = self.normalize_position(pos)
        if isinstance(pos, OnRoad) and not (
            0 <= pos.offset <= self.road_length(pos.start, pos.end)
        ):
            raise OutOfBoundsError(pos, self.number_of_vertices(), "offset is off the road")
        return corrected

    def positions(self) -> Iterator[AtVertex]:
        """Iterate over the intersections."""
        return (AtVertex(v) for v in list(self.graph.nodes))

    def random_position(self) -> RoadPosition:
        """Return a uniformly chosen road and a uniform offset along it."""
        edges = list(self.graph.edges)
        if not edges:
            vertices = list(self.graph.nodes)
            return AtVertex(vertices[self.rng.integers(len(vertices))])
        start, end = edges[self.rng.integers(len(edges))]
        offset = self.rng.random() * self.road_length(start, end)
        return self.normalize_position(OnRoad(start, end, offset))

    def nearest_vertex(self, pos) -> Hashable:
        """Return the vertex nearest to a road position, a vertex, or a point.

        Args:
            pos: an AtVertex or OnRoad position, a vertex id, or coordinates. On a
                road, ties between both ends go to the start of its canonical form.

        Raises:
            UnsupportedOperationError: for coordinates when no vertex has coordinates
        """
        if isinstance(pos, AtVertex):
            return pos.vertex
        if isinstance(pos, OnRoad):
            if pos.offset <= self.road_length(pos.start, pos.end) / 2:
                return pos.start
            return pos.end
        if pos in self.graph:
            return pos
        return self._nearest_vertex_to_point(np.asarray(pos, dtype=float))

    def _nearest_vertex_to_point(self, point: np.ndarray) -> Hashable:
        if self._kdtree is None:
            raise UnsupportedOperationError("nearest vertex lookup by coordinates", self)
        _, index = self._kdtree.query(point)
        return self._kdtree_vertices[index]

    def nearest_road(self, point: Sequence[float]) -> RoadPosition:
        """Project a point onto the nearest road leaving or entering its nearest vertex.

        Only the roads incident to the nearest vertex are considered. If no road is
        closer than the vertex itself, the vertex is returned.
        """
        point = np.asarray(point, dtype=float)
        vertex = self._nearest_vertex_to_point(point)
        best = AtVertex(vertex)
        best_distance = float(np.linalg.norm(point - self._coordinates(vertex)))

        if self.graph.is_directed():
            roads = chain(
                ((vertex, n) for n in self.graph.successors(vertex)),
                ((n, vertex) for n in self.graph.predecessors(vertex)),
            )
        else:
            roads = ((vertex, n) for n in self.graph.neighbors(vertex))

        for start, end in roads:
            a, b = self._coordinates(start), self._coordinates(end)
            if a is None or b is None:
                continue
            segment = b - a
            norm2 = float(np.dot(segment, segment))
            if norm2 == 0:
                continue
            t = min(max(float(np.dot(point - a, segment)) / norm2, 0.0), 1.0)
            d = float(np.linalg.norm(point - (a + t * segment)))
            if d < best_distance:
                best_distance = d
                best = self.normalize_position(
                    OnRoad(start, end, t * self.road_length(start, end))
                )
        return best

    def nearby_positions(self, pos, r=1, neighbor_type: str = "default") -> Neighborhood:
        """Intersections within r hops of the vertex nearest to pos.

        For a position on a road, its nearest vertex is part of the result; for a
        position on a vertex, that vertex is not.
        """
        center = self.validate_position(pos)
        check_hops(r)
        check_neighbor_type(neighbor_type)
        origin = self.nearest_vertex(center)

        def positions():
            if center != AtVertex(origin):
                yield AtVertex(origin)
            for vertex in expand_hops(self.graph, origin, r, neighbor_type):
                yield AtVertex(vertex)

        return Neighborhood(positions)

    def nearby_ids(self, agent_or_pos, r=1, neighbor_type: str = "default") -> Neighborhood:
        """Ids of the agents whose nearest vertex is within r hops of the center's nearest vertex.

        When an agent is given, that agent is left out of the result.
        """
        center, exclude = self._query_center(agent_or_pos)
        check_hops(r)
        check_neighbor_type(neighbor_type)
        origin = self.nearest_vertex(center)

        def ids():
            hops = expand_hops(self.graph, origin, r, neighbor_type)
            for vertex in chain((origin,), hops):
                for agent_id in self._index.occupants_near(vertex):
                    if agent_id != exclude:
                        yield agent_id

        return Neighborhood(ids)

    def __repr__(self) -> str:  # noqa: D105
        return (
            f"{type(self).__name__}(vertices={self.number_of_vertices()}, "
            f"roads={self.number_of_edges()}, agents={len(self)})"
        )
