"""Connection options for OpenAI-compatible providers."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, ClassVar

from agentry.util.logging import get_logger

BLANK_MESSAGE = "can't be blank"
NEGATIVE_MESSAGE = "must be greater than or equal to 0"

_logger = get_logger(__name__)


def normalize_settings(settings: Mapping[Any, Any]) -> dict[str, Any]:
    """Return a copy of ``settings`` with canonical keys.

    Keys are stripped, lower-cased and have dashes replaced by underscores, so
    ``"API-Key"`` and ``"api_key"`` address the same setting. Nested mappings
    are normalized as well.
    """

    normalized: dict[str, Any] = {}
    for key, value in settings.items():
        canonical = str(key).strip().lower().replace("-", "_")
        if isinstance(value, Mapping):
            value = normalize_settings(value)
        normalized[canonical] = value
    return normalized


def optional_str(value: Any) -> str | None:
    """Return ``value`` as a stripped string, or None when blank."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def first_present(*values: Any) -> str | None:
    """Return the first non-blank value as a string."""

    for value in values:
        text = optional_str(value)
        if text is not None:
            return text
    return None


class OpenAIOptions:
    """Resolved connection settings for an OpenAI-compatible API.

    Options are built once from a settings mapping plus the process
    environment and are read-only afterwards. Validation does not raise:
    call :meth:`is_valid` and inspect :attr:`errors` before use.

    Example:
        >>> options = OpenAIOptions({"api_key": "sk-test"}, env={})
        >>> options.base_url
        'https://api.openai.com/v1'
    """

    DEFAULT_BASE_URL: ClassVar[str] = "https://api.openai.com/v1"
    DEFAULT_TIMEOUT_S: ClassVar[float] = 600.0
    DEFAULT_MAX_RETRIES: ClassVar[int] = 2
    API_KEY_ENV_VARS: ClassVar[tuple[str, ...]] = ("OPENAI_API_KEY", "OPENAI_ACCESS_TOKEN")
    ORGANIZATION_ENV_VAR: ClassVar[str] = "OPENAI_ORG_ID"
    PROJECT_ENV_VAR: ClassVar[str] = "OPENAI_PROJECT_ID"
    KNOWN_KEYS: ClassVar[frozenset[str]] = frozenset(
        {
            "provider",
            "api_key",
            "access_token",
            "base_url",
            "host",
            "organization_id",
            "organization",
            "project_id",
            "project",
            "model",
            "timeout_s",
            "max_retries",
        }
    )

    def __init__(
        self,
        settings: Mapping[Any, Any] | None = None,
        *,
        env: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> None:
        """Resolve options from explicit settings and the environment.

        Args:
            settings: Mapping of configuration keys.
            env: Environment lookup used for fallbacks. Defaults to ``os.environ``.
            **overrides: Keyword settings merged over ``settings``.
        """

        merged = normalize_settings({**dict(settings or {}), **overrides})
        self._env: Mapping[str, str] = os.environ if env is None else env
        self._warn_unknown_keys(merged)

        self._api_key = self._resolve_api_key(merged)
        self._base_url = first_present(merged.get("base_url"), merged.get("host"))
        self._organization_id = self._resolve_organization_id(merged)
        self._project_id = self._resolve_project_id(merged)
        self._model = optional_str(merged.get("model"))
        self._timeout_s = _coerce_float(merged.get("timeout_s"), self.DEFAULT_TIMEOUT_S)
        self._max_retries = _coerce_int(merged.get("max_retries"), self.DEFAULT_MAX_RETRIES)
        self._errors: dict[str, list[str]] = {}

    @property
    def api_key(self) -> str | None:
        return self._api_key

    @property
    def base_url(self) -> str:
        """Return the API root URL requests are sent to."""

        return self._base_url or self.DEFAULT_BASE_URL

    @property
    def organization_id(self) -> str | None:
        return self._organization_id

    @property
    def project_id(self) -> str | None:
        return self._project_id

    @property
    def model(self) -> str | None:
        return self._model

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def errors(self) -> dict[str, list[str]]:
        """Field errors found by the most recent :meth:`validate` call."""

        return {field: list(messages) for field, messages in self._errors.items()}

    def validate(self) -> dict[str, list[str]]:
        """Run all validation rules and return errors keyed by field name."""

        errors: dict[str, list[str]] = {}
        for field, message in self._validation_errors():
            errors.setdefault(field, []).append(message)
        self._errors = errors
        return self.errors

    def is_valid(self) -> bool:
        return not self.validate()

    def full_messages(self) -> list[str]:
        """Return human-readable messages such as ``"api_key can't be blank"``."""

        return [
            f"{field} {message}"
            for field, messages in self._errors.items()
            for message in messages
        ]

    def auth_headers(self) -> dict[str, str]:
        """Return the authentication headers sent with every request."""

        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self.organization_id:
            headers["OpenAI-Organization"] = self.organization_id
        if self.project_id:
            headers["OpenAI-Project"] = self.project_id
        return headers

    def auth_query_params(self) -> dict[str, str]:
        """Return query parameters appended to every request."""

        return {}

    def to_dict(self, *, redact: bool = True) -> dict[str, Any]:
        """Return the resolved settings, hiding the API key by default."""

        api_key = self.api_key
        if redact and api_key:
            api_key = "***"
        return {
            "api_key": api_key,
            "base_url": self._base_url,
            "organization_id": self.organization_id,
            "project_id": self.project_id,
            "model": self.model,
            "timeout_s": self.timeout_s,
            "max_retries": self.max_retries,
        }

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self.to_dict().items())
        return f"{type(self).__name__}({fields})"

    def _validation_errors(self) -> list[tuple[str, str]]:
        errors: list[tuple[str, str]] = []
        if not self.api_key:
            errors.append(("api_key", BLANK_MESSAGE))
        if self.timeout_s < 0:
            errors.append(("timeout_s", NEGATIVE_MESSAGE))
        if self.max_retries < 0:
            errors.append(("max_retries", NEGATIVE_MESSAGE))
        return errors

    def _resolve_api_key(self, settings: Mapping[str, Any]) -> str | None:
        return first_present(
            settings.get("api_key"),
            settings.get("access_token"),
            *(self._env.get(name) for name in self.API_KEY_ENV_VARS),
        )

    def _resolve_organization_id(self, settings: Mapping[str, Any]) -> str | None:
        return first_present(
            settings.get("organization_id"),
            settings.get("organization"),
            self._env.get(self.ORGANIZATION_ENV_VAR),
        )

    def _resolve_project_id(self, settings: Mapping[str, Any]) -> str | None:
        return first_present(
            settings.get("project_id"),
            settings.get("project"),
            self._env.get(self.PROJECT_ENV_VAR),
        )

    def _warn_unknown_keys(self, settings: Mapping[str, Any]) -> None:
        unknown = sorted(set(settings) - self.KNOWN_KEYS)
        if unknown:
            _logger.warning(
                "Ignoring unknown %s settings: %s", type(self).__name__, ", ".join(unknown)
            )


def _coerce_float(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    return float(value)


def _coerce_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)
