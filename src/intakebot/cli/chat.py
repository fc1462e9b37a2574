"""Interactive chat session against the conversation orchestrator."""

from __future__ import annotations

from typing import Optional

import anyio
import click
from rich.markup import escape

from intakebot.cli.ui import console, format_phase, render_session, render_sessions_table
from intakebot.conversation.cleanup import SessionSweeper
from intakebot.conversation.models import ChatRequest
from intakebot.conversation.orchestrator import ConversationOrchestrator
from intakebot.errors import ConfigurationError, TurnFailedError
from intakebot.factory import create_orchestrator, create_sweeper

_HELP = "Commands: /session (current state), /sessions (all sessions), /quit"


def _read_line() -> str:
    return click.prompt("you", prompt_suffix="> ", default="", show_default=False)


async def _chat_loop(
    orchestrator: ConversationOrchestrator,
    sweeper: SessionSweeper,
    *,
    session_id: Optional[str],
    user_id: Optional[str],
) -> None:
    async with anyio.create_task_group() as tg:
        await tg.start(sweeper.run)
        try:
            while True:
                try:
                    line = (await anyio.to_thread.run_sync(_read_line)).strip()
                except click.Abort:
                    break

                if not line:
                    continue
                if line == "/quit":
                    break
                if line == "/sessions":
                    render_sessions_table(orchestrator.list_sessions())
                    continue
                if line == "/session":
                    session = orchestrator.get_session(session_id) if session_id else None
                    if session is None:
                        console.print("[grey62]No session yet.[/grey62]")
                    else:
                        render_session(session)
                    continue

                request = ChatRequest(session_id=session_id, message=line, user_id=user_id)
                try:
                    response = await orchestrator.handle_message(request)
                except TurnFailedError as exc:
                    console.print(f"[red]{exc.user_message}[/red]")
                    continue

                session_id = response.session_id
                phase = format_phase(response.phase)
                console.print(f"[bold]bot[/bold] ({phase})> {escape(response.response)}")
                if response.estimate_ready and response.requirements:
                    console.print_json(data=response.requirements, default=str)
        finally:
            sweeper.stop()

    if session_id:
        console.print(f"[grey62]Session {session_id}[/grey62]")


@click.command("chat")
@click.option("--session-id", default=None, help="Resume an existing session id")
@click.option("--user-id", default=None, help="Attach a user id to new sessions")
def chat(session_id: Optional[str], user_id: Optional[str]) -> None:
    """Talk to the intake assistant in the terminal."""
    try:
        orchestrator = create_orchestrator()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    sweeper = create_sweeper(orchestrator.store)
    console.print(_HELP)

    async def _run() -> None:
        await _chat_loop(orchestrator, sweeper, session_id=session_id, user_id=user_id)

    anyio.run(_run)


def register(cli: click.Group) -> None:
    cli.add_command(chat)
