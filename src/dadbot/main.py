"""dadbot runtime entrypoint."""

from __future__ import annotations

import asyncio
import signal

import structlog

from dadbot import __version__
from dadbot.channels.discord.provider import DiscordChannelProvider
from dadbot.config import DadbotConfig
from dadbot.remarks.fetcher import RemarkFetcher
from dadbot.responder.dispatcher import build_dispatcher

logger = structlog.get_logger()


class MissingTokenError(RuntimeError):
    """No Discord bot token was configured."""


class ChannelDisabledError(RuntimeError):
    """The Discord channel is switched off in config, so there is nothing to run."""


class GatewayClosedError(RuntimeError):
    """The Discord connection ended with an error before a stop was requested."""


async def run_bot(config: DadbotConfig) -> None:
    """Connect to Discord and dispatch messages until SIGINT/SIGTERM."""
    discord_config = config.channels.discord
    if not discord_config.token.strip():
        raise MissingTokenError(
            "No Discord bot token provided. Pass -t/--token or set DISCORD_BOT_TOKEN."
        )
    if not discord_config.enabled:
        raise ChannelDisabledError("Discord channel is disabled (channels.discord.enabled is false).")

    fetcher = RemarkFetcher(config.remarks)

    provider: DiscordChannelProvider | None = None

    def _self_id() -> str | None:
        return provider.self_id if provider is not None else None

    async def _send(channel_id: str, text: str) -> bool:
        if provider is None:
            return False
        return await provider.send_message(channel_id, text)

    dispatcher = build_dispatcher(
        config.responder,
        send=_send,
        self_id=_self_id,
        fetcher=fetcher,
    )
    provider = DiscordChannelProvider(
        config=discord_config,
        inbound_handler=dispatcher.handle,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:  # pragma: no cover - Windows
            pass

    logger.info(
        "dadbot.starting",
        version=__version__,
        rules=[rule.name for rule in dispatcher.rules],
        event_name="startup",
    )
    await provider.start()
    logger.info("dadbot.running", message="Bot is now running. Press Ctrl + C to exit.")

    stop_task = asyncio.create_task(stop_event.wait(), name="dadbot-stop-signal")
    closed_task = asyncio.create_task(provider.wait_closed(), name="dadbot-provider-closed")
    try:
        await asyncio.wait({stop_task, closed_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stop_task.cancel()
        closed_task.cancel()
        logger.info("dadbot.shutting_down", event_name="shutdown")
        await provider.stop()
        logger.info("dadbot.stopped")

    if not stop_event.is_set() and provider.error is not None:
        raise GatewayClosedError(f"Discord connection closed: {provider.error}") from provider.error
