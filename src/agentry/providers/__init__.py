"""Provider connection options."""

from agentry.providers.azure import DEFAULT_API_VERSION, AzureOpenAIOptions
from agentry.providers.options import OpenAIOptions, normalize_settings

__all__ = [
    "DEFAULT_API_VERSION",
    "AzureOpenAIOptions",
    "OpenAIOptions",
    "normalize_settings",
]
