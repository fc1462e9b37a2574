"""Requirement schema CLI commands."""

from __future__ import annotations

import click
from rich.table import Table

from intakebot.cli.ui import console
from intakebot.conversation.schema import get_all_fields, known_problem_types


@click.command("fields")
@click.argument("category", type=click.Choice(known_problem_types()))
def fields(category: str) -> None:
    """List the requirement fields gathered for CATEGORY, in question order."""
    table = Table(title=f"{category} requirements", show_lines=False)
    table.add_column("Key", style="cyan")
    table.add_column("Label", style="white")
    table.add_column("Type", style="magenta")
    table.add_column("Required", style="bold")
    table.add_column("Description", style="white")

    for field in get_all_fields(category):
        table.add_row(
            field.key,
            field.label,
            field.type,
            "[green]yes[/green]" if field.required else "no",
            field.description,
        )

    console.print(table)


def register(cli: click.Group) -> None:
    cli.add_command(fields)
