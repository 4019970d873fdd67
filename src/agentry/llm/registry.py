"""Provider registry and client factory utilities."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import requests  # type: ignore[import-untyped]

from agentry.llm.client import OpenAICompatibleClient
from agentry.providers.azure import AzureOpenAIOptions
from agentry.providers.options import OpenAIOptions, normalize_settings

PROVIDERS: dict[str, type[OpenAIOptions]] = {
    "openai": OpenAIOptions,
    "azure": AzureOpenAIOptions,
    "azure_openai": AzureOpenAIOptions,
}


def options_class_for(provider: str) -> type[OpenAIOptions]:
    """Return the options class registered for a provider name.

    Raises:
        ValueError: If the provider is unknown.
    """

    key = provider.strip().lower().replace("-", "_")
    try:
        return PROVIDERS[key]
    except KeyError as exc:
        raise ValueError(f"Unknown LLM provider: {provider}") from exc


def create_options(
    settings: Mapping[str, Any],
    *,
    env: Mapping[str, str] | None = None,
) -> OpenAIOptions:
    """Build provider options from a settings mapping.

    Args:
        settings: Provider settings; ``provider`` selects the options class and
            defaults to ``openai``.
        env: Optional environment lookup passed through to the options.

    Returns:
        Resolved options. They are not validated here.
    """

    normalized = normalize_settings(settings)
    provider = str(normalized.pop("provider", None) or "openai")
    return options_class_for(provider)(normalized, env=env)


def create_llm_client(
    settings: Mapping[str, Any],
    *,
    env: Mapping[str, str] | None = None,
    session: requests.Session | None = None,
) -> OpenAICompatibleClient:
    """Create a chat client for the configured provider.

    Raises:
        ValueError: If the provider is unknown.
        LLMConfigurationError: If the resolved options are invalid.
    """

    return OpenAICompatibleClient(create_options(settings, env=env), session=session)
