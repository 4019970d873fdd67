"""Connection options for the Azure OpenAI Service.

Azure OpenAI differs from the public OpenAI API in three ways:

- Endpoint: ``https://{resource}.openai.azure.com/openai/deployments/{deployment}``
- Authentication: an ``api-key`` header instead of ``Authorization: Bearer``
- Versioning: a required ``api-version`` query parameter

Options can be configured either from ``azure_resource`` and ``deployment_id``::

    AzureOpenAIOptions(
        api_key="...",
        azure_resource="mycompany",
        deployment_id="gpt-4-deployment",
    )

or from a direct ``host``/``base_url`` for custom domains and Azure AI Foundry::

    AzureOpenAIOptions(
        api_key="...",
        host="https://mycompany.cognitiveservices.azure.com/openai/deployments/gpt-4",
    )
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, ClassVar

from agentry.errors import LLMConfigurationError
from agentry.providers.options import (
    BLANK_MESSAGE,
    OpenAIOptions,
    first_present,
    normalize_settings,
    optional_str,
)

DEFAULT_API_VERSION = "2024-10-21"
API_VERSION_ENV_VAR = "AZURE_OPENAI_API_VERSION"
MISSING_ENDPOINT_MESSAGE = "Either host or azure_resource + deployment_id must be provided"


class AzureOpenAIOptions(OpenAIOptions):
    """Resolved connection settings for an Azure OpenAI deployment."""

    DEFAULT_API_VERSION: ClassVar[str] = DEFAULT_API_VERSION
    API_KEY_ENV_VARS: ClassVar[tuple[str, ...]] = (
        "AZURE_OPENAI_API_KEY",
        "AZURE_OPENAI_ACCESS_TOKEN",
    )
    KNOWN_KEYS: ClassVar[frozenset[str]] = OpenAIOptions.KNOWN_KEYS | {
        "azure_resource",
        "deployment_id",
        "api_version",
    }

    def __init__(
        self,
        settings: Mapping[Any, Any] | None = None,
        *,
        env: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> None:
        merged = normalize_settings({**dict(settings or {}), **overrides})
        lookup: Mapping[str, str] = os.environ if env is None else env
        merged["api_version"] = self._resolve_api_version(merged, lookup)
        # host is an alias of base_url in the parent, so capture it before
        # the parent folds the two together.
        self._explicit_host = _first_supplied(merged.get("host"), merged.get("base_url"))
        super().__init__(merged, env=lookup)
        self._azure_resource = optional_str(merged.get("azure_resource"))
        self._deployment_id = optional_str(merged.get("deployment_id"))
        self._api_version: str = merged["api_version"]

    @property
    def explicit_host(self) -> str | None:
        return self._explicit_host

    @property
    def explicit_host_provided(self) -> bool:
        return self._explicit_host is not None

    @property
    def azure_resource(self) -> str | None:
        return self._azure_resource

    @property
    def deployment_id(self) -> str | None:
        return self._deployment_id

    @property
    def api_version(self) -> str:
        return self._api_version

    @property
    def base_url(self) -> str:
        """Return the deployment endpoint.

        A direct host wins over ``azure_resource``/``deployment_id``.

        Raises:
            LLMConfigurationError: If neither a host nor both deployment
                identifiers were configured.
        """

        if self._explicit_host:
            return self._explicit_host
        if self._azure_resource and self._deployment_id:
            return (
                f"https://{self._azure_resource}.openai.azure.com"
                f"/openai/deployments/{self._deployment_id}"
            )
        raise LLMConfigurationError(MISSING_ENDPOINT_MESSAGE)

    def auth_headers(self) -> dict[str, str]:
        return {"api-key": self.api_key or ""}

    def auth_query_params(self) -> dict[str, str]:
        return {"api-version": self.api_version}

    def to_dict(self, *, redact: bool = True) -> dict[str, Any]:
        data = super().to_dict(redact=redact)
        data.pop("organization_id")
        data.pop("project_id")
        data["base_url"] = self._explicit_host
        data.update(
            azure_resource=self.azure_resource,
            deployment_id=self.deployment_id,
            api_version=self.api_version,
        )
        return data

    def _validation_errors(self) -> list[tuple[str, str]]:
        errors = super()._validation_errors()
        if not self.explicit_host_provided:
            if not self._azure_resource:
                errors.append(("azure_resource", BLANK_MESSAGE))
            if not self._deployment_id:
                errors.append(("deployment_id", BLANK_MESSAGE))
        return errors

    def _resolve_api_version(
        self, settings: Mapping[str, Any], env: Mapping[str, str]
    ) -> str:
        return (
            first_present(settings.get("api_version"), env.get(API_VERSION_ENV_VAR))
            or self.DEFAULT_API_VERSION
        )

    # Azure OpenAI has no organization or project concept.
    def _resolve_organization_id(self, settings: Mapping[str, Any]) -> str | None:
        return None

    def _resolve_project_id(self, settings: Mapping[str, Any]) -> str | None:
        return None


def _first_supplied(*values: Any) -> str | None:
    # Blankness decides presence; the value itself is kept as given.
    for value in values:
        if optional_str(value) is not None:
            return str(value)
    return None
