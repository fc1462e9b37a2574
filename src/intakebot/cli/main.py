"""intakebot command-line interface."""

from __future__ import annotations

import click

from intakebot.app_version import get_app_version
from intakebot.observability import init_observability


@click.group()
@click.version_option(version=get_app_version(), prog_name="intakebot")
def cli() -> None:
    """intakebot - conversational project requirements intake."""
    init_observability()


def _register_commands() -> None:
    from intakebot.cli import chat, config, fields

    chat.register(cli)
    config.register(cli)
    fields.register(cli)


_register_commands()


if __name__ == "__main__":
    cli()
