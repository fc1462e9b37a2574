"""Shared CLI UI helpers (Rich formatting)."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from intakebot.conversation.models import ConversationSession, Phase, SessionSummary

console = Console()


def format_phase(phase: Phase | str) -> str:
    """Return colorized phase string for terminal output."""
    value = Phase(phase).value
    colors = {
        Phase.GATHERING.value: "cyan",
        Phase.CONFIRMATION_FIRST.value: "yellow",
        Phase.CLARIFYING.value: "magenta",
        Phase.CONFIRMATION_SECOND.value: "yellow",
        Phase.HUMAN_ESCALATION.value: "red",
        Phase.COMPLETE.value: "green",
    }
    color = colors.get(value, "white")
    return f"[{color}]{value}[/{color}]"


def _timestamp(value: datetime | None) -> str:
    return value.isoformat(timespec="seconds") if isinstance(value, datetime) else "-"


def render_sessions_table(sessions: Iterable[SessionSummary]) -> None:
    """Render a table of session summaries using Rich."""
    table = Table(title="Sessions", show_lines=False)
    table.add_column("Session ID", style="white")
    table.add_column("Category", style="cyan")
    table.add_column("Phase", style="bold")
    table.add_column("Messages", justify="right")
    table.add_column("Updated", style="white")

    for summary in sessions:
        table.add_row(
            summary.id,
            summary.problem_type or "-",
            format_phase(summary.phase),
            str(summary.message_count),
            _timestamp(summary.updated_at),
        )

    console.print(table)


def render_session(session: ConversationSession) -> None:
    """Print the accumulated state of one session."""
    console.print(f"[bold]Session[/bold] {session.id}")
    console.print(f"  Category:  {session.problem_type or '-'}")
    console.print(f"  Phase:     {format_phase(session.phase)}")
    console.print(f"  Readiness: {session.readiness_score}%")
    if session.escalation_reason:
        console.print(f"  Escalated: {escape(session.escalation_reason)}")
    if session.requirements:
        console.print_json(data=session.requirements, default=str)
