from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core.chat_session import ChatSession
from .providers.manager import ProviderManager
from .providers.types import ProviderState
from .secrets.sources import SecretsResolver
from .storage.settings import LocalSettings

logger = logging.getLogger(__name__)


@dataclass
class CommandContext:
    session: ChatSession
    manager: ProviderManager
    console: Console
    secrets: Optional[SecretsResolver] = None
    settings: Optional[LocalSettings] = None
    prompt_secret: Optional[Callable[[str], str]] = None
    show_reasoning: bool = False


Handler = Callable[[CommandContext, List[str]], Awaitable[bool]]


@dataclass(frozen=True)
class Command:
    name: str
    description: str
    handler: Handler


_COMMANDS: Dict[str, Command] = {}


def command(name: str, description: str, aliases: tuple = ()) -> Callable[[Handler], Handler]:
    def deco(fn: Handler) -> Handler:
        cmd = Command(name, description, fn)
        for key in (name, *aliases):
            _COMMANDS[key] = cmd
        return fn
    return deco


def available_commands() -> List[Command]:
    seen: Dict[str, Command] = {}
    for cmd in _COMMANDS.values():
        seen.setdefault(cmd.name, cmd)
    return list(seen.values())


async def handle_slash_command(line: str, ctx: CommandContext) -> bool:
    """
    Run a '/command arg...' line. Returns False when the session should end.
    """
    parts = line.strip()[1:].split()
    name = parts[0].lower() if parts else ""
    args = parts[1:]
    cmd = _COMMANDS.get(name)
    if cmd is None:
        logger.info("Unknown command /%s", name)
        ctx.console.print(f"[yellow]Unknown command '/{name}'. Type /help for a list.[/yellow]")
        return True

    # Arguments are not logged; /login carries a credential.
    logger.info("Command /%s", cmd.name)
    try:
        return await cmd.handler(ctx, args)
    except Exception:
        logger.exception("Command /%s failed", cmd.name)
        raise


@command("help", "Show available commands")
async def _help(ctx: CommandContext, args: List[str]) -> bool:
    table = Table(show_header=False, box=None)
    for cmd in available_commands():
        table.add_row(f"/{cmd.name}", escape(cmd.description))
    ctx.console.print(table)
    return True


@command("models", "List models from every configured provider")
async def _models(ctx: CommandContext, args: List[str]) -> bool:
    table = Table(title="Models")
    table.add_column("Provider")
    table.add_column("Model")
    table.add_column("Name")
    table.add_column("Context", justify="right")
    for pid, group in ctx.manager.group_models_by_provider().items():
        for m in group.models:
            marker = "* " if m.id == ctx.session.model else ""
            table.add_row(group.provider.name, f"{marker}{m.id}", m.name,
                          str(m.context_window) if m.context_window else "")
    ctx.console.print(table)
    return True


@command("model", "Show or switch the active model: /model [id]")
async def _model(ctx: CommandContext, args: List[str]) -> bool:
    if not args:
        ctx.console.print(f"Current model: [bold]{ctx.session.model}[/bold]")
        return await _models(ctx, args)
    try:
        provider = ctx.session.switch_model(args[0])
    except ValueError as e:
        ctx.console.print(f"[red]{escape(str(e))}[/red]")
        return True
    if ctx.settings is not None:
        ctx.settings.set_default_model(args[0])
    ctx.console.print(f"Using [bold]{args[0]}[/bold] via {provider.name}")
    if provider.state is ProviderState.UNAUTHENTICATED:
        ctx.console.print(f"[yellow]{provider.name} has no API key; use /login {provider.provider_id}[/yellow]")
    return True


@command("login", "Set the API key for a provider: /login [provider] [key]")
async def _login(ctx: CommandContext, args: List[str]) -> bool:
    if args:
        provider_id = args[0]
    else:
        current = ctx.manager.find_provider_for_model(ctx.session.model)
        provider_id = current.provider_id if current is not None else ""
    if ctx.manager.get_provider(provider_id) is None:
        ctx.console.print(f"[red]Unknown provider '{provider_id}'[/red]")
        return True

    key = args[1] if len(args) > 1 else None
    if key is None and ctx.prompt_secret is not None:
        key = ctx.prompt_secret(f"API key for {provider_id}")
    if not key:
        ctx.console.print("[yellow]No key given; nothing changed.[/yellow]")
        return True

    ctx.manager.set_credential_for_provider(provider_id, key)
    stored = ctx.secrets.store(provider_id, key) if ctx.secrets is not None else False
    ctx.console.print(f"API key set for {provider_id}" + (" and saved to keyring" if stored else " for this session"))
    return True


@command("status", "Check connectivity of every provider")
async def _status(ctx: CommandContext, args: List[str]) -> bool:
    statuses = await ctx.manager.check_all_provider_status()
    table = Table(title="Providers")
    table.add_column("Provider")
    table.add_column("Auth")
    table.add_column("Status")
    for pid, status in statuses.items():
        provider = ctx.manager.get_provider(pid)
        auth = provider.state.value if provider is not None else "-"
        text = "[green]connected[/green]" if status.connected else f"[red]{escape(status.error or 'disconnected')}[/red]"
        table.add_row(pid, auth, text)
    ctx.console.print(table)
    return True


@command("clear", "Clear the conversation history")
async def _clear(ctx: CommandContext, args: List[str]) -> bool:
    ctx.session.reset()
    ctx.console.print("History cleared.")
    return True


@command("reasoning", "Toggle display of model reasoning")
async def _reasoning(ctx: CommandContext, args: List[str]) -> bool:
    ctx.show_reasoning = not ctx.show_reasoning
    ctx.console.print(f"Reasoning display {'on' if ctx.show_reasoning else 'off'}.")
    return True


@command("id", "Print the session id")
async def _id(ctx: CommandContext, args: List[str]) -> bool:
    ctx.console.print(ctx.session.transcript.session_id)
    return True


@command("exit", "Quit", aliases=("quit",))
async def _exit(ctx: CommandContext, args: List[str]) -> bool:
    return False
