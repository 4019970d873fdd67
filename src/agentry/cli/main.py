"""CLI entrypoints for agentry."""

from __future__ import annotations

from pathlib import Path

import typer

from agentry.config import load_config, provider_settings
from agentry.errors import AppConfigError, LLMConfigurationError
from agentry.llm.registry import create_options
from agentry.util.logging import configure_logging

app = typer.Typer(help="Inspect agentry provider configuration.")


@app.callback()
def main(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (e.g., DEBUG, INFO, WARNING).",
    ),
) -> None:
    """Configure CLI-level options."""

    configure_logging(log_level)


@app.command("check")
def check_command(
    provider: str = typer.Argument(None, help="Provider section to check."),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file or directory.",
    ),
) -> None:
    """Resolve a provider's options and report whether they are usable."""

    try:
        config = load_config(config_path)
        settings = provider_settings(config, provider)
        options = create_options(settings)
    except (AppConfigError, ValueError) as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=1) from exc

    if not options.is_valid():
        typer.echo(f"Invalid configuration for '{settings['provider']}':")
        for message in options.full_messages():
            typer.echo(f"  - {message}")
        raise typer.Exit(code=1)

    try:
        base_url = options.base_url
    except LLMConfigurationError as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=1) from exc

    typer.echo(f"Provider: {settings['provider']}")
    typer.echo(f"Base URL: {base_url}")
    typer.echo("Auth headers: " + ", ".join(sorted(options.auth_headers())))
    query = options.auth_query_params()
    if query:
        typer.echo(
            "Query params: " + ", ".join(f"{key}={value}" for key, value in sorted(query.items()))
        )
