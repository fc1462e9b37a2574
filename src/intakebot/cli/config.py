"""Configuration CLI commands."""

from __future__ import annotations

import click
from rich.table import Table

from intakebot.cli.ui import console
from intakebot.config import effective_oracle_provider, get_settings


@click.group()
def config() -> None:
    """Inspect configuration."""


@config.command("show")
def config_show() -> None:
    """Show key configuration settings."""
    settings = get_settings()
    table = Table(title="intakebot Configuration", show_lines=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Environment", settings.environment)
    table.add_row("Oracle Provider", effective_oracle_provider(settings))
    table.add_row("Llama Stack URL", settings.llama_stack_url)
    table.add_row("Model", settings.llama_stack_model)
    table.add_row("Oracle Timeout (s)", f"{settings.oracle_timeout_seconds:g}")
    table.add_row("Session Retention (h)", f"{settings.session_retention_hours:g}")
    table.add_row("Sweep Interval (s)", f"{settings.session_sweep_interval_seconds:g}")
    table.add_row(
        "Circuit Breaker",
        "enabled" if settings.circuit_breaker_enabled else "disabled",
    )
    table.add_row("Log Level", settings.log_level)

    console.print(table)


def register(cli: click.Group) -> None:
    cli.add_command(config)
