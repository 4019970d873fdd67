"""Exception hierarchy shared across agentry."""

from __future__ import annotations


class LLMClientError(RuntimeError):
    """Base exception for LLM client failures."""


class LLMConfigurationError(LLMClientError):
    """Raised when provider configuration is invalid or cannot be used."""


class AgentActionError(RuntimeError):
    """Raised when an agent is asked to process an action it does not define."""


class AppConfigError(RuntimeError):
    """Raised when an application configuration file cannot be loaded."""
