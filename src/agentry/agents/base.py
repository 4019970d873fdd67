"""Base agent abstractions."""

from __future__ import annotations

import re
from typing import Any

from agentry.agents.rescue import Rescuable
from agentry.errors import AgentActionError
from agentry.llm.client import LLMClient
from agentry.util.logging import get_logger


class BaseAgent:
    """Base class that routes named actions to agent methods.

    Actions are the public methods declared on an agent subclass. Calling
    :meth:`process` with an action name runs that method; actions usually
    build a prompt and call :meth:`generate` or :meth:`prompt`.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        *,
        agent_id: str | None = None,
        temperature: float = 0.2,
    ) -> None:
        """Initialize the agent with its dependencies.

        Args:
            llm_client: Client used to query the language model.
            agent_id: Identifier for the agent. Defaults to the snake_cased
                class name.
            temperature: Sampling temperature used for generations.
        """

        self._llm_client = llm_client
        self._agent_id = agent_id or _snake_case(type(self).__name__)
        self._temperature = temperature
        self._logger = get_logger(self.__class__.__name__)

    @property
    def agent_id(self) -> str:
        """Return the agent's identifier."""

        return self._agent_id

    @classmethod
    def action_methods(cls) -> frozenset[str]:
        """Return the names of the actions this agent can process."""

        excluded = {name for klass in _framework_classes() for name in dir(klass)}
        # Rescue handlers are not actions.
        if issubclass(cls, Rescuable):
            excluded.update(
                entry.handler
                for entry in cls.rescue_handlers()
                if isinstance(entry.handler, str)
            )
        return frozenset(
            name
            for name in dir(cls)
            if not name.startswith("_")
            and name not in excluded
            and callable(getattr(cls, name))
        )

    def process(self, action: str, *args: Any, **kwargs: Any) -> Any:
        """Run a named action.

        Args:
            action: Name of a public action method on the agent.
            *args: Positional arguments for the action.
            **kwargs: Keyword arguments for the action.

        Returns:
            Whatever the action returns.

        Raises:
            AgentActionError: If the agent has no such action.
        """

        if action not in self.action_methods():
            raise AgentActionError(f"{type(self).__name__} has no action '{action}'")
        self._logger.debug("Processing action '%s' on agent '%s'.", action, self.agent_id)
        return getattr(self, action)(*args, **kwargs)

    def generate(self, messages: list[dict[str, str]], max_tokens: int | None = None) -> str:
        """Send chat messages to the LLM and return the reply text."""

        return self._llm_client.complete_chat(
            messages, temperature=self._temperature, max_tokens=max_tokens
        )

    def prompt(self, content: str, *, system: str | None = None) -> str:
        """Send a single user message, optionally preceded by a system message."""

        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": content})
        return self.generate(messages)


class Agent(Rescuable, BaseAgent):
    """Agent with declarative exception handling around :meth:`process`."""


def _framework_classes() -> tuple[type, ...]:
    return (BaseAgent, Rescuable, Agent)


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()
