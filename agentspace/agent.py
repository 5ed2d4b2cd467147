"""The agent record consumed by the spatial layer.

Core Objects: Agent
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agentspace.model import Model
    from agentspace.protocols import Position
    from agentspace.spaces.space import Space


class Agent:
    """Base class for an agent that can be placed in a space.

    Attributes:
        model (Model): A reference to the model instance.
        unique_id (int): A unique identifier for this agent, assigned by the model.
        pos (Position): The current position of the agent, None if not placed.
        space (Space): The space the agent is placed in, None if not placed.

    Notes:
        ``pos`` is read-only. It is written only by the space the agent lives in,
        together with that space's occupancy index, so the two cannot diverge. Use
        ``space.add_agent``, ``space.move_agent`` and ``space.remove_agent`` (or the
        functions in ``agentspace.space_interaction``) to change it.
    """

    def __init__(self, model: Model, *args, **kwargs) -> None:
        """Create a new agent.

        Args:
            model: The model instance in which the agent exists.
            args: passed on to super
            kwargs: passed on to super
        """
        super().__init__(*args, **kwargs)

        self.model: Model = model
        self.unique_id: int | None = None
        self._pos: Position | None = None
        self._space: Space | None = None
        self.model.register_agent(self)

    @property
    def pos(self) -> Position | None:
        """The position of the agent in its space."""
        return self._pos

    @property
    def space(self) -> Space | None:
        """The space the agent is placed in."""
        return self._space

    def remove(self) -> None:
        """Remove the agent from its space and deregister it from the model."""
        if self._space is not None:
            self._space.remove_agent(self)
        self.model.deregister_agent(self)

    def __repr__(self) -> str:  # noqa: D105
        return f"{type(self).__name__}(unique_id={self.unique_id}, pos={self._pos})"
