"""Spaces agents can live in.

Four topologies are provided:
- GridSpace: integer coordinates on a (partially) periodic grid
- ContinuousSpace: float coordinates, indexed by a cell list
- GraphSpace: the vertices of a NetworkX graph, neighborhoods in hops
- RoadNetworkSpace: intersections and positions along the roads between them

All of them keep the position stored on each agent and their occupancy index
in agreement; agents are only ever moved through the space.
"""

from agentspace.spaces.boundaries import BoundaryPolicy
from agentspace.spaces.continuous import ContinuousSpace
from agentspace.spaces.graph import GraphSpace
from agentspace.spaces.grid import GridSpace
from agentspace.spaces.index import (
    CellListIndex,
    DenseGridIndex,
    OccupancyIndex,
    RoadIndex,
    VertexIndex,
)
from agentspace.spaces.road_network import AtVertex, OnRoad, RoadNetworkSpace
from agentspace.spaces.space import MetricSpace, Neighborhood, Space

__all__ = [
    "AtVertex",
    "BoundaryPolicy",
    "CellListIndex",
    "ContinuousSpace",
    "DenseGridIndex",
    "GraphSpace",
    "GridSpace",
    "MetricSpace",
    "Neighborhood",
    "OccupancyIndex",
    "OnRoad",
    "RoadIndex",
    "RoadNetworkSpace",
    "Space",
    "VertexIndex",
]
