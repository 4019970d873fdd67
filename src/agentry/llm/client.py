"""HTTP chat client driven by provider options."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any, cast

import requests  # type: ignore[import-untyped]

from agentry.errors import LLMClientError, LLMConfigurationError
from agentry.providers.options import OpenAIOptions
from agentry.util.logging import get_logger


class LLMClient(ABC):
    """Abstract interface for LLM clients."""

    @abstractmethod
    def complete_chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a chat completion response.

        Args:
            messages: Ordered list of chat messages.
            temperature: Sampling temperature for the model.
            max_tokens: Optional limit on generated tokens.

        Returns:
            The assistant response text.
        """


class OpenAICompatibleClient(LLMClient):
    """Chat completions client for OpenAI and Azure OpenAI endpoints.

    Endpoint, authentication headers and query parameters all come from the
    options object, so the same client serves every provider.
    """

    def __init__(
        self,
        options: OpenAIOptions,
        *,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            options: Resolved provider options.
            session: Optional requests session for testing or reuse.

        Raises:
            LLMConfigurationError: If the options fail validation.
        """

        if not options.is_valid():
            raise LLMConfigurationError(
                f"Invalid {type(options).__name__}: " + "; ".join(options.full_messages())
            )
        self._options = options
        self._base_url = options.base_url.rstrip("/")
        self._session = session or requests.Session()
        self._logger = get_logger(self.__class__.__name__)

    @property
    def options(self) -> OpenAIOptions:
        return self._options

    def complete_chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a chat completion response."""

        payload = self._build_payload(messages, temperature=temperature, max_tokens=max_tokens)
        self._logger.debug(
            "Requesting chat completion from %s with %d messages.",
            self._base_url,
            len(messages),
        )
        response_data = self._post("/chat/completions", payload)
        try:
            content = response_data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMClientError("Unexpected response format from chat completions API.") from exc
        if not isinstance(content, str):
            raise LLMClientError("Unexpected response format from chat completions API.")
        return content

    def _build_payload(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "messages": messages,
            "temperature": temperature,
        }
        # Azure addresses the model through the deployment in the URL.
        if self._options.model:
            payload["model"] = self._options.model
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        headers = self._options.auth_headers()
        params = self._options.auth_query_params()
        max_retries = self._options.max_retries
        last_error: Exception | None = None

        for attempt in range(max_retries + 1):
            try:
                response = self._session.post(
                    url,
                    json=payload,
                    headers=headers,
                    params=params,
                    timeout=self._options.timeout_s,
                )
                if response.status_code >= 400:
                    if self._should_retry(response.status_code) and attempt < max_retries:
                        self._logger.warning(
                            "Retrying after status %s (attempt %d of %d).",
                            response.status_code,
                            attempt + 1,
                            max_retries,
                        )
                        time.sleep(0.5 * (attempt + 1))
                        continue
                    raise LLMClientError(
                        "Chat completions request failed with status "
                        f"{response.status_code}: {response.text}"
                    )
                data = response.json()
                if not isinstance(data, dict):
                    raise LLMClientError("Unexpected response format from chat completions API.")
                return cast(dict[str, Any], data)
            except requests.RequestException as exc:
                last_error = exc
                if attempt < max_retries:
                    time.sleep(0.5 * (attempt + 1))
                    continue
                raise LLMClientError("Chat completions request failed.") from exc

        raise LLMClientError("Chat completions request failed.") from last_error

    @staticmethod
    def _should_retry(status_code: int) -> bool:
        return status_code in {429, 500, 502, 503, 504}
