"""dadbot CLI: run the bot or try the rules locally."""

from __future__ import annotations

import asyncio
import random

import discord
import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from dadbot.channels.base import MessageEvent
from dadbot.config import get_config
from dadbot.logging import setup_logging
from dadbot.main import ChannelDisabledError, GatewayClosedError, MissingTokenError, run_bot
from dadbot.remarks.fetcher import RemarkFetcher
from dadbot.responder.dispatcher import Dispatcher, build_dispatcher

app = typer.Typer(
    name="dadbot",
    help="dadbot: the Discord bot that is, in fact, Dad",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
logger = structlog.get_logger()

LOCAL_BOT_ID = "dadbot"
LOCAL_CHANNEL_ID = "local"


def _local_dispatcher(outbox: list[str], seed: int | None) -> Dispatcher:
    config = get_config()

    async def _send(_channel_id: str, text: str) -> bool:
        outbox.append(text)
        return True

    return build_dispatcher(
        config.responder,
        send=_send,
        self_id=lambda: LOCAL_BOT_ID,
        fetcher=RemarkFetcher(config.remarks),
        rng=random.Random(seed),
    )


@app.command()
def run(
    token: str = typer.Option("", "--token", "-t", envvar="DISCORD_BOT_TOKEN", help="Discord bot token"),
    log_level: str = typer.Option("", "--log-level", help="Override log level (DEBUG, INFO, ...)"),
    log_format: str = typer.Option("", "--log-format", help="'json' or 'console'"),
) -> None:
    """Connect to Discord and respond until interrupted."""
    config = get_config()
    if token:
        config.channels.discord.token = token
    if log_level:
        config.log_level = log_level
    if log_format:
        config.log_format = log_format

    setup_logging(level=config.log_level, fmt=config.log_format)

    try:
        asyncio.run(run_bot(config))
    except MissingTokenError as e:
        logger.error("dadbot.missing_token", error=str(e))
        raise typer.Exit(1)
    except ChannelDisabledError as e:
        logger.error("dadbot.channel_disabled", error=str(e))
        raise typer.Exit(1)
    except discord.LoginFailure as e:
        logger.error("dadbot.login_failed", error=str(e))
        raise typer.Exit(1)
    except GatewayClosedError as e:
        logger.error("dadbot.gateway_closed", error=str(e))
        raise typer.Exit(1)


@app.command()
def say(
    messages: list[str] = typer.Argument(..., help="Messages to dispatch, in order"),
    author: str = typer.Option("user", "--author", "-a", help=f"Author id ('{LOCAL_BOT_ID}' is the bot itself)"),
    seed: int | None = typer.Option(None, "--seed", help="Seed for random reply and pause picks"),
) -> None:
    """Dispatch messages locally and print what dadbot would reply."""
    outbox: list[str] = []
    dispatcher = _local_dispatcher(outbox, seed)

    async def _run_all() -> None:
        for text in messages:
            result = await dispatcher.handle(
                MessageEvent(author_id=author, channel_id=LOCAL_CHANNEL_ID, content=text)
            )
            console.print(f"[bold green]you[/bold green]> {escape(text)}")
            if result.reply is not None:
                console.print(f"[bold cyan]dadbot[/bold cyan]> {escape(result.reply)}")
                console.print(f"[dim]rule: {result.rule}  │  outcome: {result.outcome}[/dim]")
            else:
                console.print(f"[dim](no reply: {result.outcome})[/dim]")

    asyncio.run(_run_all())


@app.command()
def rules() -> None:
    """Show the trigger rules in evaluation order."""
    dispatcher = _local_dispatcher([], seed=None)

    table = Table(title="Trigger rules", border_style="blue")
    table.add_column("#", justify="right")
    table.add_column("Rule", style="cyan")
    table.add_column("Matcher")
    table.add_column("Cooldown", justify="right")

    for rule in dispatcher.rules:
        cooldown = getattr(rule, "cooldown", None)
        table.add_row(
            str(rule.priority),
            rule.name,
            escape(rule.matcher.describe()),
            f"{cooldown.window:g}s" if cooldown is not None else "-",
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def version() -> None:
    """Show dadbot version."""
    from dadbot import __version__
    console.print(Panel(f"dadbot v{__version__}", border_style="blue"))


def main() -> None:
    """Entrypoint."""
    app()


if __name__ == "__main__":
    main()
