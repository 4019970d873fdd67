"""Configuration models and loaders for agentry."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agentry.errors import AppConfigError

CONFIG_FILE_NAMES: tuple[str, ...] = ("agentry.yaml", "agentry.yml", "pyproject.toml")


@dataclass(frozen=True)
class AppConfig:
    """Top-level configuration for the application.

    Attributes:
        log_level: Logging level name applied by the CLI.
        default_provider: Provider used when none is requested explicitly.
        providers: Raw settings per provider name, resolved later into
            provider options.
    """

    log_level: str = "INFO"
    default_provider: str = "openai"
    providers: dict[str, dict[str, Any]] = field(default_factory=dict)


def load_config(path: Path | None = None) -> AppConfig:
    """Load application configuration from disk.

    Args:
        path: Optional path to a configuration file or directory. Without
            one, ``agentry.yaml``, ``agentry.yml`` and ``pyproject.toml`` in
            the current directory are tried in that order.

    Returns:
        Parsed AppConfig with defaults applied when no config exists.

    Raises:
        AppConfigError: If the file cannot be parsed.
    """

    directory = Path(".") if path is None else path
    if directory.is_dir():
        found = [directory / name for name in CONFIG_FILE_NAMES if (directory / name).exists()]
        if not found:
            return AppConfig()
        path = found[0]

    document = _read_document(path)
    if path.name == "pyproject.toml":
        document = document.get("tool", {}).get("agentry", {})
    return _parse_app_config(document, source=path)


def provider_settings(config: AppConfig, name: str | None = None) -> dict[str, Any]:
    """Return the settings of one provider.

    ``provider`` defaults to the section name, so a section called ``azure``
    builds Azure options without repeating itself.

    Raises:
        AppConfigError: If no section exists for the provider.
    """

    provider = name or config.default_provider
    if provider not in config.providers:
        if name is None and not config.providers:
            return {"provider": provider}
        raise AppConfigError(f"No settings configured for provider '{provider}'.")
    settings = dict(config.providers[provider])
    settings.setdefault("provider", provider)
    return settings


def config_to_dict(config: AppConfig) -> dict[str, Any]:
    """Serialize an AppConfig into a JSON-compatible dictionary."""

    return {
        "log_level": config.log_level,
        "default_provider": config.default_provider,
        "providers": {name: dict(settings) for name, settings in config.providers.items()},
    }


def _read_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".toml":
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise AppConfigError(f"Invalid TOML in {path}: {exc}") from exc
    if path.suffix not in {".yaml", ".yml"}:
        raise AppConfigError(f"Unsupported config file type: {path}")
    # JSON is valid YAML, and needs no PyYAML.
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as exc:
        raise AppConfigError(
            "PyYAML is required to parse non-JSON YAML configuration files."
        ) from exc
    try:
        return yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise AppConfigError(f"Invalid YAML in {path}: {exc}") from exc


def _parse_app_config(raw_data: Any, *, source: Path) -> AppConfig:
    if not isinstance(raw_data, dict):
        raise AppConfigError(f"Configuration in {source} must be a mapping.")
    providers_raw = raw_data.get("providers", {})
    if not isinstance(providers_raw, dict):
        raise AppConfigError("providers must be a mapping of provider names to settings.")
    providers: dict[str, dict[str, Any]] = {}
    for name, settings in providers_raw.items():
        if not isinstance(settings, dict):
            raise AppConfigError(f"Settings for provider '{name}' must be a mapping.")
        providers[str(name)] = dict(settings)

    return AppConfig(
        log_level=str(raw_data.get("log_level", "INFO")),
        default_provider=str(raw_data.get("default_provider", "openai")),
        providers=providers,
    )
