"""Agent framework with Azure OpenAI provider options and declarative rescue handlers."""

from agentry.agents import Agent, BaseAgent, Rescuable, rescue_from
from agentry.errors import (
    AgentActionError,
    AppConfigError,
    LLMClientError,
    LLMConfigurationError,
)
from agentry.jobs import GenerationJob
from agentry.providers import AzureOpenAIOptions, OpenAIOptions

__all__ = [
    "Agent",
    "AgentActionError",
    "AppConfigError",
    "AzureOpenAIOptions",
    "BaseAgent",
    "GenerationJob",
    "LLMClientError",
    "LLMConfigurationError",
    "OpenAIOptions",
    "Rescuable",
    "rescue_from",
]
