"""Tests for GraphSpace."""

import networkx as nx
import pytest

from agentspace import Agent, Model
from agentspace.errors import (
    ConfigurationError,
    InvalidRadiusError,
    OutOfBoundsError,
    UnsupportedOperationError,
)
from agentspace.spaces import GraphSpace
from agentspace.spaces.graph import adjacent_vertices, expand_hops


@pytest.fixture
def model():
    """A seeded model."""
    return Model(rng=42)


@pytest.fixture
def path_space(model):
    """Graph space on the path 1 - 2 - 3 - 4 - 5."""
    return GraphSpace(nx.path_graph([1, 2, 3, 4, 5]), rng=model.rng)


def test_graph_init():
    """Only networkx graphs are accepted."""
    space = GraphSpace(nx.cycle_graph(4), rng=42)
    assert space.number_of_vertices() == 4
    assert space.number_of_edges() == 4
    assert list(space.positions()) == [0, 1, 2, 3]

    with pytest.raises(ConfigurationError, match="graph"):
        GraphSpace({1: [2]}, rng=42)


class TestExpandHops:
    """Tests for the hop expansion helpers."""

    def test_cycle_does_not_return_center(self):
        """Cycles leading back to the center do not yield it."""
        graph = nx.cycle_graph(3)
        assert sorted(expand_hops(graph, 0, 5)) == [1, 2]

    def test_breadth_first_order(self):
        """Closer vertices come first."""
        graph = nx.path_graph(6)
        assert list(expand_hops(graph, 0, 3)) == [1, 2, 3]

    def test_directed_neighbor_types(self):
        """On directed graphs the edge direction can be chosen."""
        graph = nx.DiGraph([(1, 2), (3, 1)])
        assert list(adjacent_vertices(graph, 1)) == [2]
        assert list(adjacent_vertices(graph, 1, "out")) == [2]
        assert list(adjacent_vertices(graph, 1, "in")) == [3]
        assert sorted(adjacent_vertices(graph, 1, "all")) == [2, 3]
        with pytest.raises(ConfigurationError, match="neighbor_type"):
            adjacent_vertices(graph, 1, "sideways")


class TestNearbyPositions:
    """Tests for hop neighborhoods."""

    def test_path_graph(self, path_space):
        """Two hops from the middle of a path reach both ends."""
        assert set(path_space.nearby_positions(3, 2)) == {1, 2, 4, 5}
        assert list(path_space.nearby_positions(1, 1)) == [2]
        assert sorted(path_space.nearby_positions(1, 10)) == [2, 3, 4, 5]

    def test_directed(self, model):
        """Directed graphs follow the requested edge direction."""
        space = GraphSpace(nx.DiGraph([(1, 2), (2, 3), (4, 2)]), rng=model.rng)
        assert list(space.nearby_positions(2, 1)) == [3]
        assert list(space.nearby_positions(2, 1, neighbor_type="in")) == [1, 4]
        assert set(space.nearby_positions(2, 1, neighbor_type="all")) == {1, 3, 4}
        assert set(space.nearby_positions(1, 2)) == {2, 3}

    def test_invalid_queries(self, path_space):
        """Hop counts must be positive integers and the center must exist."""
        for r in (0, -1, 1.5, True):
            with pytest.raises(InvalidRadiusError):
                path_space.nearby_positions(3, r)
        with pytest.raises(OutOfBoundsError, match="no such vertex"):
            path_space.nearby_positions(42, 1)
        with pytest.raises(ConfigurationError):
            path_space.nearby_positions(3, 1, neighbor_type="sideways")


class TestAgents:
    """Tests for agents on graph vertices."""

    def test_add_and_query(self, model, path_space):
        """Many agents can share a vertex and see each other."""
        a, b, c, d = (Agent(model) for _ in range(4))
        path_space.add_agent(a, 3)
        path_space.add_agent(b, 3)
        path_space.add_agent(c, 4)
        path_space.add_agent(d, 1)

        assert path_space.occupants_at(3) == [a.unique_id, b.unique_id]
        assert list(path_space.nearby_ids(a, 1)) == [b.unique_id, c.unique_id]
        assert set(path_space.nearby_ids(3, 2)) == {
            a.unique_id,
            b.unique_id,
            c.unique_id,
            d.unique_id,
        }
        assert list(path_space.nearby_agents(d, 1)) == []

    def test_unknown_vertex(self, model, path_space):
        """Vertices that are not in the graph are rejected."""
        agent = Agent(model)
        with pytest.raises(OutOfBoundsError):
            path_space.add_agent(agent, 6)
        path_space.add_agent(agent, 1)
        with pytest.raises(OutOfBoundsError):
            path_space.move_agent(agent, 0)
        assert agent.pos == 1

    def test_metric_operations_unsupported(self, model, path_space):
        """Graph spaces have no distance, direction or walk by delta."""
        agent = Agent(model)
        path_space.add_agent(agent, 1)
        with pytest.raises(UnsupportedOperationError, match="distance"):
            path_space.distance(1, 2)
        with pytest.raises(UnsupportedOperationError, match="direction"):
            path_space.direction(1, 2)
        with pytest.raises(UnsupportedOperationError, match="walk"):
            path_space.walk(agent, (1,))

    def test_random_walk(self, model, path_space):
        """A random walk moves to an adjacent vertex."""
        agent = Agent(model)
        path_space.add_agent(agent, 3)
        for _ in range(20):
            before = agent.pos
            path_space.random_walk(agent)
            assert abs(agent.pos - before) == 1

    def test_random_walk_ifempty(self, model, path_space):
        """With ifempty only empty neighbors are chosen, and none means staying."""
        walker, left, right = Agent(model), Agent(model), Agent(model)
        path_space.add_agent(walker, 3)
        path_space.add_agent(left, 2)
        path_space.random_walk(walker, ifempty=True)
        assert walker.pos == 4

        path_space.move_agent(walker, 3)
        path_space.add_agent(right, 4)
        path_space.random_walk(walker, ifempty=True)
        assert walker.pos == 3

    def test_isolated_vertex(self, model):
        """An agent on a vertex without neighbors stays put."""
        graph = nx.Graph()
        graph.add_node("solo")
        space = GraphSpace(graph, rng=model.rng)
        agent = Agent(model)
        space.add_agent(agent, "solo")
        space.random_walk(agent)
        assert agent.pos == "solo"
        assert list(space.nearby_positions("solo", 3)) == []


class TestMutation:
    """Tests for changing the graph while agents live on it."""

    def test_add_vertex_and_edge(self, model, path_space):
        """New vertices can be connected and occupied."""
        path_space.add_vertex(6)
        path_space.add_edge(5, 6)
        agent = Agent(model)
        path_space.add_agent(agent, 6)
        assert 6 in path_space.nearby_positions(5, 1)
        assert path_space.occupants_at(6) == [agent.unique_id]

        with pytest.raises(OutOfBoundsError):
            path_space.add_edge(6, 7)

    def test_remove_vertex_removes_agents(self, model, path_space):
        """Agents on a removed vertex are removed from the space."""
        a, b = Agent(model), Agent(model)
        path_space.add_agent(a, 3)
        path_space.add_agent(b, 2)
        path_space.remove_vertex(3)

        assert a.pos is None
        assert a not in path_space
        assert b in path_space
        assert path_space.number_of_vertices() == 4
        assert list(path_space.nearby_positions(2, 5)) == [1]

    def test_remove_edge(self, path_space):
        """Removing an edge splits the neighborhood."""
        path_space.remove_edge(2, 3)
        assert set(path_space.nearby_positions(3, 5)) == {4, 5}
