"""LLM client package."""

from agentry.errors import LLMClientError, LLMConfigurationError
from agentry.llm.client import LLMClient, OpenAICompatibleClient
from agentry.llm.registry import create_llm_client, create_options, options_class_for

__all__ = [
    "LLMClient",
    "LLMClientError",
    "LLMConfigurationError",
    "OpenAICompatibleClient",
    "create_llm_client",
    "create_options",
    "options_class_for",
]
