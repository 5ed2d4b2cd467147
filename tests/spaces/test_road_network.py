"""Tests for RoadNetworkSpace."""

import math

import networkx as nx
import pytest

from agentspace import Agent, Model
from agentspace.errors import (
    ConfigurationError,
    OutOfBoundsError,
    UnsupportedOperationError,
)
from agentspace.spaces import AtVertex, OnRoad, RoadNetworkSpace


@pytest.fixture
def model():
    """A seeded model."""
    return Model(rng=42)


@pytest.fixture
def roads(model):
    """Three intersections: A (0, 0), B (10, 0), C (10, 10).

    A-B has no length attribute, so its length comes from the coordinates.
    B-C is 20 long.
    """
    graph = nx.Graph()
    graph.add_node("A", pos=(0.0, 0.0))
    graph.add_node("B", x=10.0, y=0.0)
    graph.add_node("C", pos=(10.0, 10.0))
    graph.add_edge("A", "B")
    graph.add_edge("B", "C", length=20.0)
    return RoadNetworkSpace(graph, rng=model.rng)


class TestInit:
    """Tests for building road network spaces."""

    def test_road_lengths(self, roads):
        """Lengths come from the attribute, then the coordinates, then default to 1."""
        assert roads.road_length("A", "B") == pytest.approx(10.0)
        assert roads.road_length("C", "B") == 20.0
        assert roads.number_of_vertices() == 3
        assert roads.number_of_edges() == 2
        with pytest.raises(OutOfBoundsError, match="no such road"):
            roads.road_length("A", "C")

        plain = RoadNetworkSpace(nx.path_graph(3), rng=42)
        assert plain.road_length(0, 1) == 1.0

    def test_invalid_graphs(self):
        """Multigraphs and non positive lengths are rejected."""
        with pytest.raises(ConfigurationError, match="graph"):
            RoadNetworkSpace(nx.MultiGraph([(1, 2)]), rng=42)
        with pytest.raises(ConfigurationError, match="graph"):
            RoadNetworkSpace([(1, 2)], rng=42)

        graph = nx.Graph()
        graph.add_edge(1, 2, length=0.0)
        with pytest.raises(ConfigurationError, match="length"):
            RoadNetworkSpace(graph, rng=42)

        graph = nx.Graph()
        graph.add_edge(1, 2, cost=-1.0)
        with pytest.raises(ConfigurationError, match="cost"):
            RoadNetworkSpace(graph, length_attribute="cost", rng=42)


class TestPositions:
    """Tests for road positions."""

    def test_normalize(self, roads):
        """Offsets are clamped, and road ends collapse to the intersections."""
        assert roads.normalize_position("A") == AtVertex("A")
        assert roads.normalize_position(AtVertex("B")) == AtVertex("B")
        assert roads.normalize_position(OnRoad("A", "B", 4)) == OnRoad("A", "B", 4.0)
        assert roads.normalize_position(OnRoad("A", "B", 0)) == AtVertex("A")
        assert roads.normalize_position(OnRoad("A", "B", 10.0)) == AtVertex("B")
        assert roads.normalize_position(OnRoad("A", "B", 15.0)) == AtVertex("B")
        assert roads.normalize_position(OnRoad("A", "B", -1.0)) == AtVertex("A")

        with pytest.raises(OutOfBoundsError, match="no such vertex"):
            roads.normalize_position("Z")
        with pytest.raises(OutOfBoundsError, match="no such road"):
            roads.normalize_position(OnRoad("A", "C", 1.0))
        with pytest.raises(OutOfBoundsError, match="finite"):
            roads.normalize_position(OnRoad("A", "B", math.nan))

    def test_undirected_roads_have_one_spelling(self, roads):
        """A spot on an undirected road is written from the earlier added endpoint."""
        assert roads.normalize_position(OnRoad("B", "A", 6.0)) == OnRoad("A", "B", 4.0)
        assert roads.normalize_position(OnRoad("C", "B", 5.0)) == OnRoad("B", "C", 15.0)
        assert roads.normalize_position(OnRoad("B", "A", 10.0)) == AtVertex("A")

    def test_reversed_spelling_finds_occupants(self, model, roads):
        """Both spellings of a spot refer to the same occupants."""
        agent = Agent(model)
        roads.add_agent(agent, OnRoad("A", "B", 4.0))
        assert roads.occupants_at(OnRoad("B", "A", 6.0)) == [agent.unique_id]

        roads.move_agent(agent, OnRoad("B", "A", 6.0))
        assert agent.pos == OnRoad("A", "B", 4.0)
        assert roads.occupants_at(OnRoad("A", "B", 4.0)) == [agent.unique_id]

        other = Agent(model)
        roads.add_agent(other, OnRoad("B", "A", 6.0))
        assert roads.occupants_at(OnRoad("A", "B", 4.0)) == [
            agent.unique_id,
            other.unique_id,
        ]

    def test_directed_roads_keep_their_direction(self, model):
        """One-way roads are not reoriented."""
        graph = nx.DiGraph()
        graph.add_edge("B", "A", length=10.0)
        space = RoadNetworkSpace(graph, rng=model.rng)
        assert space.normalize_position(OnRoad("B", "A", 6.0)) == OnRoad("B", "A", 6.0)

    def test_validate(self, roads):
        """Lookups reject offsets that are off the road."""
        assert roads.validate_position(OnRoad("B", "C", 5.0)) == OnRoad("B", "C", 5.0)
        with pytest.raises(OutOfBoundsError, match="off the road"):
            roads.validate_position(OnRoad("B", "C", 25.0))

    def test_positions_and_random_position(self, roads):
        """Positions are the intersections, random positions lie on roads."""
        assert list(roads.positions()) == [AtVertex("A"), AtVertex("B"), AtVertex("C")]
        for _ in range(20):
            pos = roads.random_position()
            assert roads.validate_position(pos) == pos


class TestNearest:
    """Tests for nearest vertex and nearest road lookups."""

    def test_nearest_vertex(self, roads):
        """Road positions snap to the closer end, ties go to the start."""
        assert roads.nearest_vertex(AtVertex("C")) == "C"
        assert roads.nearest_vertex(OnRoad("A", "B", 4.0)) == "A"
        assert roads.nearest_vertex(OnRoad("A", "B", 5.0)) == "A"
        assert roads.nearest_vertex(OnRoad("A", "B", 6.0)) == "B"
        assert roads.nearest_vertex("B") == "B"
        assert roads.nearest_vertex((9.0, 1.0)) == "B"

    def test_nearest_road(self, roads):
        """Points are projected onto the roads around their nearest vertex."""
        assert roads.nearest_road((4.0, 1.0)) == OnRoad("A", "B", pytest.approx(4.0))
        assert roads.nearest_road((0.0, 0.0)) == AtVertex("A")

    def test_no_coordinates(self):
        """Point lookups need vertex coordinates."""
        space = RoadNetworkSpace(nx.path_graph(3), rng=42)
        with pytest.raises(UnsupportedOperationError):
            space.nearest_vertex((0.5, 0.5))


class TestQueries:
    """Tests for neighbor queries and movement on roads."""

    def test_nearby_positions(self, roads):
        """Hops are counted from the nearest vertex."""
        assert list(roads.nearby_positions(AtVertex("A"), 1)) == [AtVertex("B")]
        assert list(roads.nearby_positions("A", 2)) == [AtVertex("B"), AtVertex("C")]
        assert list(roads.nearby_positions(OnRoad("A", "B", 4.0), 1)) == [
            AtVertex("A"),
            AtVertex("B"),
        ]

    def test_nearby_ids(self, model, roads):
        """Agents are found through their nearest vertex."""
        a, b, c = Agent(model), Agent(model), Agent(model)
        roads.add_agent(a, OnRoad("A", "B", 4.0))
        roads.add_agent(b, "B")
        roads.add_agent(c, OnRoad("B", "C", 15.0))

        assert b.pos == AtVertex("B")
        assert roads.occupants_at(OnRoad("A", "B", 4.0)) == [a.unique_id]
        assert list(roads.nearby_ids(a, 1)) == [b.unique_id]
        assert list(roads.nearby_ids(a, 2)) == [b.unique_id, c.unique_id]
        assert set(roads.nearby_ids("B", 1)) == {a.unique_id, b.unique_id, c.unique_id}

    def test_move_updates_nearest_vertex(self, model, roads):
        """Moving along a road changes which vertex the agent is near."""
        agent = Agent(model)
        roads.add_agent(agent, OnRoad("A", "B", 1.0))
        assert list(roads.nearby_ids(AtVertex("A"), 1)) == [agent.unique_id]

        roads.move_agent(agent, OnRoad("B", "C", 18.0))
        assert roads.is_empty(OnRoad("A", "B", 1.0))
        assert list(roads.nearby_ids(AtVertex("A"), 1)) == []
        assert list(roads.nearby_ids(AtVertex("C"), 1)) == [agent.unique_id]

        roads.move_agent(agent, OnRoad("B", "C", 50.0))
        assert agent.pos == AtVertex("C")

    def test_one_way_roads(self, model):
        """On directed graphs roads only exist in the direction of their edge."""
        space = RoadNetworkSpace(nx.DiGraph([("A", "B")]), rng=model.rng)
        assert list(space.nearby_positions("A", 1)) == [AtVertex("B")]
        assert list(space.nearby_positions("B", 1)) == []
        assert list(space.nearby_positions("B", 1, neighbor_type="in")) == [
            AtVertex("A")
        ]
        with pytest.raises(OutOfBoundsError):
            space.add_agent(Agent(model), OnRoad("B", "A", 0.5))

    def test_metric_operations_unsupported(self, roads):
        """Road networks measure neighborhoods in hops only."""
        with pytest.raises(UnsupportedOperationError):
            roads.distance(AtVertex("A"), AtVertex("B"))
        with pytest.raises(UnsupportedOperationError):
            roads.direction(AtVertex("A"), AtVertex("B"))
