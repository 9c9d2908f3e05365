"""
adapters.cli.main - CLI adapter for the chat agent backend.

Mirrors src/adapters/rest/ but for terminal use. Uses the same
ServiceFactory, SessionService and ConversationAgent as the WebSocket
gateway so intent handling, tools and replies are identical.

Commands
--------
  serve      Run the HTTP/WebSocket server
  chat       Interactive chat session against a local session
  ask        One-shot question
  tools      List registered tools and their parameters
  call-tool  Run one tool with JSON parameters

Usage
-----
  python src/adapters/cli/main.py chat
  python src/adapters/cli/main.py ask "What's the weather in Tokyo?"
  python src/adapters/cli/main.py call-tool weather --params '{"location": "Oslo"}'
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from uuid import uuid4

# ── Ensure src/ is on the path ──
_SRC = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_SRC))

import typer
from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from domain.entities import Message
from factory import ServiceFactory, VERSION
from infrastructure.config import Settings

console = Console()
app = typer.Typer(
    help="BrightSky chat agent CLI",
    add_completion=False,
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

async def _make_factory() -> ServiceFactory:
    config = Settings.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    factory = ServiceFactory(config)
    with console.status("[bold cyan]Starting services…", spinner="dots"):
        await factory.initialize()
    return factory


async def _turn(factory: ServiceFactory, agent, session_id: str, text: str):
    """Run one turn exactly like the gateway does: persist, answer, persist."""
    sessions = factory.sessions
    await sessions.add_message(session_id, Message(role="user", content=text))
    session = await sessions.get_session(session_id)
    response = await agent.process_message(
        text, session.conversation_history, session.context,
    )
    await sessions.add_message(session_id, Message(
        role="assistant", content=response.content, metadata=response.metadata,
    ))
    if response.updated_context:
        await sessions.update_context(session_id, response.updated_context)
    return response


def _print_reply(response) -> None:
    title = "Assistant"
    if response.tools_used:
        title += f"  [dim](tools: {', '.join(response.tools_used)})[/dim]"
    if response.metadata.get("fallback"):
        title += "  [yellow](offline reply)[/yellow]"
    console.print(Panel(Markdown(response.content), title=title, border_style="green"))


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"brightsky-agent v{VERSION}")
        raise typer.Exit()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Interface to bind."),
    port: int = typer.Option(None, help="Port (default: PORT or 3001)."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
) -> None:
    """Run the HTTP/WebSocket server."""
    import uvicorn

    config = Settings.from_env()
    logging.basicConfig(level=config.log_level)
    uvicorn.run(
        "adapters.rest.app:app",
        host=host,
        port=port or config.port,
        reload=reload,
    )


@app.command()
def ask(
    query: str = typer.Argument(..., help="Your question."),
) -> None:
    """Ask a one-shot question."""

    async def _run() -> None:
        factory = await _make_factory()
        try:
            agent = factory.create_agent()
            session_id = f"cli-{uuid4().hex[:8]}"
            await factory.sessions.create_session(session_id)
            with console.status("[bold cyan]Thinking…", spinner="dots"):
                response = await _turn(factory, agent, session_id, query)
            _print_reply(response)
        finally:
            await factory.shutdown()

    asyncio.run(_run())


@app.command()
def chat(
    session_id: str = typer.Option(
        None, "--session", "-s",
        help="Resume this session id instead of starting a new one.",
    ),
) -> None:
    """Start an interactive chat session."""

    async def _run() -> None:
        factory = await _make_factory()
        try:
            agent = factory.create_agent()
            sid = session_id or f"cli-{uuid4().hex[:8]}"
            session = await factory.sessions.get_or_create_session(sid)

            console.print(Panel(
                f"[bold]BrightSky Chat[/bold]\n"
                f"Session [bold]{sid}[/bold] "
                f"({len(session.conversation_history)} earlier messages, "
                f"storage: {factory.session_backend_name})\n"
                "Type your message, or [bold]exit[/bold] / [bold]quit[/bold] to stop.",
                border_style="cyan",
            ))

            while True:
                try:
                    user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if user_input.strip().lower() in ("exit", "quit", "q", "bye"):
                    console.print("[dim]Goodbye![/dim]")
                    break

                if not user_input.strip():
                    continue

                with console.status("[bold cyan]Thinking…", spinner="dots"):
                    response = await _turn(factory, agent, sid, user_input)

                console.print()
                _print_reply(response)
        finally:
            await factory.shutdown()

    asyncio.run(_run())


@app.command()
def tools() -> None:
    """List registered tools and their parameters."""

    async def _run() -> None:
        factory = await _make_factory()
        try:
            for tool in factory.orchestrator.get_available_tools():
                t = Table(box=box.SIMPLE, padding=(0, 2))
                t.add_column("Parameter", style="bold")
                t.add_column("Type")
                t.add_column("Required")
                t.add_column("Constraint")
                t.add_column("Description")
                for name, param in tool.parameters.items():
                    constraint = ""
                    if param.enum:
                        constraint = " | ".join(param.enum)
                    elif param.format:
                        constraint = param.format
                    t.add_row(
                        name,
                        param.type,
                        "yes" if param.required else "[dim]no[/dim]",
                        constraint or "[dim]-[/dim]",
                        param.description,
                    )
                console.print(Panel(
                    t, title=f"{tool.name}: {tool.description}", border_style="blue",
                ))
        finally:
            await factory.shutdown()

    asyncio.run(_run())


@app.command("call-tool")
def call_tool(
    name: str = typer.Argument(..., help="Tool name."),
    params: str = typer.Option("{}", "--params", "-p", help="Parameters as a JSON object."),
) -> None:
    """Run one tool through the orchestrator and print the result envelope."""
    try:
        parsed = json.loads(params)
    except ValueError as e:
        console.print(f"[bold red]--params is not valid JSON:[/bold red] {e}")
        raise typer.Exit(code=2)
    if not isinstance(parsed, dict):
        console.print("[bold red]--params must be a JSON object.[/bold red]")
        raise typer.Exit(code=2)

    async def _run() -> bool:
        factory = await _make_factory()
        try:
            result = await factory.orchestrator.execute(name, parsed)
        finally:
            await factory.shutdown()
        console.print_json(json.dumps(result.to_dict()))
        return result.success

    if not asyncio.run(_run()):
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Global version option
# ---------------------------------------------------------------------------

@app.callback()
def _callback(
    version: bool = typer.Option(
        False, "--version", "-v",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """BrightSky chat agent CLI"""


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
