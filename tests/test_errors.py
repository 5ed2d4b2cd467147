"""Tests for the agentspace exception hierarchy."""

import networkx as nx
import pytest

import agentspace
from agentspace.errors import (
    AgentSpaceError,
    AgentStateError,
    ConfigurationError,
    DimensionMismatchError,
    InvalidRadiusError,
    OutOfBoundsError,
    SpaceError,
    SpaceFullError,
    UnsupportedOperationError,
)
from agentspace.spaces import GraphSpace, GridSpace


def test_version_in_message():
    """Every error carries the package version."""
    error = AgentSpaceError("something broke")
    assert str(error) == f"[agentspace {agentspace.__version__}] something broke"
    assert error.original_message == "something broke"


def test_configuration_error():
    """ConfigurationError names the offending parameter when given one."""
    error = ConfigurationError("dimensions", "must be positive")
    assert error.param_name == "dimensions"
    assert "Invalid configuration for 'dimensions': must be positive" in str(error)

    generic = ConfigurationError("just a message")
    assert generic.param_name is None
    assert generic.original_message == "just a message"


@pytest.mark.parametrize(
    "error",
    [
        OutOfBoundsError((5, 5), (3, 3)),
        SpaceFullError(GridSpace((1,), rng=42)),
        DimensionMismatchError((1, 2, 3), 2),
        InvalidRadiusError(0),
        UnsupportedOperationError("distance", GraphSpace(nx.Graph(), rng=42)),
    ],
)
def test_space_errors(error):
    """Space errors share a base class."""
    assert isinstance(error, SpaceError)
    assert isinstance(error, AgentSpaceError)


def test_messages():
    """Messages describe what went wrong."""
    assert "out of bounds for extent (3, 3): no such cell." in str(
        OutOfBoundsError((5, 5), (3, 3), "no such cell")
    )
    assert "has 3 components but the space has 2 dimensions" in str(
        DimensionMismatchError((1, 2, 3), 2)
    )
    assert "Invalid radius 0: must be positive." in str(InvalidRadiusError(0))
    assert "GridSpace has no empty position left." in str(
        SpaceFullError(GridSpace((1,), rng=42))
    )


def test_agent_state_error_is_not_a_space_error():
    """Lifecycle errors are agent errors."""
    assert not issubclass(AgentStateError, SpaceError)
    assert issubclass(AgentStateError, AgentSpaceError)
