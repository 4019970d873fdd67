"""Background execution of agent actions."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from agentry.agents.base import BaseAgent
from agentry.util.logging import get_logger


@dataclass(frozen=True)
class GenerationJob:
    """A deferred call of one agent action.

    Attributes:
        agent_class: Agent class to instantiate.
        action: Name of the action to process.
        args: Positional arguments for the action.
        kwargs: Keyword arguments for the action.
        agent_kwargs: Keyword arguments used to construct the agent.
    """

    agent_class: type[BaseAgent]
    action: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    agent_kwargs: dict[str, Any] = field(default_factory=dict)

    def perform(self) -> Any:
        """Build the agent and run the action.

        Exceptions the agent did not rescue are handed to the agent class's
        ``handle_exception`` when it has one, in which case None is returned.

        Raises:
            Exception: The original exception when the agent class has no
                class-level handler.
        """

        logger = get_logger(self.__class__.__name__)
        logger.debug("Performing %s.%s.", self.agent_class.__name__, self.action)
        try:
            agent = self.agent_class(**self.agent_kwargs)
            return agent.process(self.action, *self.args, **self.kwargs)
        except Exception as exception:
            self.handle_exception_with_agent_class(exception)
            return None

    async def perform_async(self) -> Any:
        """Run :meth:`perform` in a worker thread."""

        return await asyncio.to_thread(self.perform)

    def handle_exception_with_agent_class(self, exception: Exception) -> None:
        handler = getattr(self.agent_class, "handle_exception", None)
        if handler is None:
            raise exception
        handler(exception)
