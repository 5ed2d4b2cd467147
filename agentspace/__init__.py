"""agentspace: the spatial layer of agent-based models.

Core Objects: Agent, Model, and the spaces in agentspace.spaces
"""

import datetime

__title__ = "agentspace"
__version__ = "0.3.0"
__license__ = "Apache 2.0"
_this_year = datetime.datetime.now(tz=datetime.UTC).date().year
__copyright__ = f"Copyright {_this_year} agentspace contributors"

import agentspace.space_interaction as space_interaction  # noqa: E402
from agentspace.agent import Agent  # noqa: E402
from agentspace.model import Model  # noqa: E402
from agentspace.spaces import (  # noqa: E402
    AtVertex,
    ContinuousSpace,
    GraphSpace,
    GridSpace,
    OnRoad,
    RoadNetworkSpace,
)

__all__ = [
    "Agent",
    "AtVertex",
    "ContinuousSpace",
    "GraphSpace",
    "GridSpace",
    "Model",
    "OnRoad",
    "RoadNetworkSpace",
    "space_interaction",
]
