from __future__ import annotations
import asyncio
import logging
from pathlib import Path
from importlib.metadata import version as pkg_version, PackageNotFoundError
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape

from .bootstrap import build_app
from .commands import CommandContext, handle_slash_command
from .core.errors import ProviderError, ProviderNotConfiguredError
from .logging_setup import parse_level
from .providers.types import AssistantMessage
from .ui.banner import render_banner

app = typer.Typer(add_completion=False)
logger = logging.getLogger(__name__)


def _render_reply(console: Console, reply: AssistantMessage, show_reasoning: bool) -> None:
    if show_reasoning and reply.reasoning:
        console.print(reply.reasoning, style="dim italic")
    if reply.content:
        console.print(Markdown(reply.content))
    if reply.tool_calls:
        console.print(f"[yellow]Model requested {len(reply.tool_calls)} tool call(s); tools are not enabled.[/yellow]")


@app.callback(invoke_without_command=True)
def chat(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
    temperature: Optional[float] = typer.Option(None, "--temperature", "-t", help="Temperature for generation"),
    system: Optional[str] = typer.Option(None, "--system", "-s", help="Custom system message"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
    log_level: str = typer.Option("info", "--log-level", help="debug, info, warn, error"),
    logs: bool = typer.Option(True, "--logs/--no-logs", help="Write logs under .corrin/logs"),
):
    console = Console()

    if debug:
        level = logging.DEBUG
    else:
        try:
            level = parse_level(log_level)
        except ValueError:
            console.print(f"[yellow]Invalid log level: {log_level}. Using 'info'.[/yellow]")
            level = logging.INFO

    try:
        app_ver = f"v{pkg_version('corrin')}"
    except PackageNotFoundError:
        app_ver = None
    render_banner(console, version=app_ver)

    ctx = build_app(config, system_prompt=system, temperature=temperature, log_level=level, logs_enabled=logs)
    for w in ctx["warnings"]:
        console.print(f"[yellow]{escape(w)}[/yellow]")

    session = ctx["session"]
    cmd_ctx = CommandContext(
        session=session,
        manager=ctx["manager"],
        console=console,
        secrets=ctx["secrets"],
        settings=ctx["settings"],
        prompt_secret=lambda label: typer.prompt(label, hide_input=True, default="", show_default=False),
    )

    console.print(f"Corrin chat using [bold]{session.model}[/bold]. Type /help for commands. Ctrl+C to quit.")
    while True:
        try:
            user_input = input("corrin> ").strip()
        except (EOFError, KeyboardInterrupt):
            console.print("\nBye.")
            logger.info("CLI shutting down")
            return

        if not user_input:
            continue

        if user_input.startswith("/"):
            try:
                keep_going = asyncio.run(handle_slash_command(user_input, cmd_ctx))
            except KeyboardInterrupt:
                console.print("\n(cancelled)")
                continue
            except ProviderError as e:
                console.print(f"[red]{escape(str(e))}[/red]")
                continue
            if not keep_going:
                console.print("Bye.")
                logger.info("CLI shutting down")
                return
            continue

        # Normal turn; Ctrl+C cancels the in-flight request
        try:
            reply = asyncio.run(session.run_turn(user_input))
        except KeyboardInterrupt:
            logger.info("Turn cancelled by user")
            console.print("\n(cancelled)")
            continue
        except ProviderNotConfiguredError as e:
            console.print(f"[yellow]{escape(str(e))}[/yellow] Use /login to set an API key.")
            continue
        except ProviderError as e:
            logger.error("Turn failed: %s", e)
            console.print(f"[red]{escape(str(e))}[/red]")
            continue
        _render_reply(console, reply, cmd_ctx.show_reasoning)
