"""The host container for agents and their space.

Core Objects: Model
"""

# Postpone annotation evaluation to avoid NameError from forward references (PEP 563).
from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import numpy as np

from agentspace.agentspace_logging import create_module_logger, method_logger
from agentspace.errors import AgentError, ConfigurationError

if TYPE_CHECKING:
    from agentspace.agent import Agent
    from agentspace.protocols import Position
    from agentspace.spaces.space import Space

SeedLike = int | np.integer | Sequence[int] | np.random.SeedSequence
RNGLike = np.random.Generator | np.random.BitGenerator


_logger = create_module_logger()


class Model:
    """Minimal container holding the agents, their space, and a seeded rng.

    The model does not step anything. It hands out unique agent ids, keeps the
    registry that turns the ids returned by neighbor queries back into agents,
    and owns the random number generator shared with its space.

    Attributes:
        rng: a seeded numpy.random.Generator
        space: the space agents are placed in, None until assigned
        agent_id_counter: the id handed to the next registered agent

    """

    @method_logger(__name__)
    def __init__(
        self,
        *args: Any,
        rng: RNGLike | SeedLike | None = None,
        space: Space | None = None,
        **kwargs: Any,
    ) -> None:
        """Create a new model.

        Args:
            args: arguments to pass onto super
            rng: Pseudorandom number generator state. When `rng` is None, a new `numpy.random.Generator` is created
                  using entropy from the operating system. Types other than `numpy.random.Generator` are passed to
                  `numpy.random.default_rng` to instantiate a `Generator`.
            space: the space agents are placed in
            kwargs: keyword arguments to pass onto super

        """
        super().__init__(*args, **kwargs)
        self.rng: np.random.Generator = np.random.default_rng(rng)
        self._rng = self.rng.bit_generator.state  # this allows for reproducing the rng
        self.agent_id_counter: int = 1
        self.space = space

        # the hard references to all agents in the model, keyed by unique_id
        self._agents: dict[int, Agent] = {}

    @property
    def agents(self) -> list[Agent]:
        """All agents registered with the model, in registration order."""
        return list(self._agents.values())

    def __getitem__(self, unique_id: int) -> Agent:
        """Return the agent with the given unique_id."""
        return self._agents[unique_id]

    def __contains__(self, agent_or_id) -> bool:  # noqa: D105
        unique_id = getattr(agent_or_id, "unique_id", agent_or_id)
        return unique_id in self._agents

    def __len__(self) -> int:  # noqa: D105
        return len(self._agents)

    def register_agent(self, agent: Agent):
        """Register the agent with the model.

        Args:
            agent: The agent to register.

        Notes:
            This method is called automatically by ``Agent.__init__``, so there
            is no need to use this if you are subclassing Agent and calling its
            super in the ``__init__`` method.
        """
        agent.unique_id = self.agent_id_counter
        self.agent_id_counter += 1
        self._agents[agent.unique_id] = agent
        _logger.debug(
            f"registered {agent.__class__.__name__} with agent_id {agent.unique_id}"
        )

    def deregister_agent(self, agent: Agent):
        """Deregister the agent with the model.

        Args:
            agent: The agent to deregister.

        Notes:
            This method is called automatically by ``Agent.remove``

        """
        del self._agents[agent.unique_id]
        _logger.debug(f"deregistered agent with agent_id {agent.unique_id}")

    def add_agent(self, agent: Agent, pos: Position) -> None:
        """Place a registered agent in the model's space at pos."""
        if self.space is None:
            raise ConfigurationError("space", "the model has no space to place agents in")
        self.space.add_agent(agent, pos)

    def random_agent(self) -> Agent:
        """Return a uniformly chosen agent, using the model's rng."""
        if not self._agents:
            raise AgentError("the model has no agents")
        ids = list(self._agents)
        return self._agents[ids[self.rng.integers(len(ids))]]

    def remove_all_agents(self):
        """Remove all agents from the model and its space."""
        # we need to wrap values in a list to avoid a RunTimeError: dictionary changed size during iteration
        for agent in list(self._agents.values()):
            agent.remove()

    def reset_rng(self, rng: RNGLike | SeedLike | None = None) -> None:
        """Reset the model random number generator.

        Args:
            rng: A new seed for the RNG; if None, reset using the current seed

        Notes:
            A space created with ``rng=model.rng`` keeps the old generator; pass the
            new ``model.rng`` to the space if it should follow the reset.
        """
        if rng is None:
            # Restore from saved initial state
            bg_class = getattr(np.random, self._rng["bit_generator"])
            bg = bg_class()
            bg.state = self._rng
            self.rng = np.random.Generator(bg)
        else:
            self.rng = np.random.default_rng(rng)
            self._rng = self.rng.bit_generator.state
