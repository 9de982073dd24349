"""Discord channel provider (gateway connection via discord.py)."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import discord
import structlog

from dadbot.channels.base import ChannelProvider, ChannelStatus, MessageEvent
from dadbot.config import DiscordChannelConfig

logger = structlog.get_logger()

InboundHandler = Callable[[MessageEvent], Awaitable[Any]]

MAX_MESSAGE_CHARS = 2000


class _DiscordClient(discord.Client):
    """Thin client that forwards gateway events to the provider."""

    def __init__(self, *, provider: DiscordChannelProvider, intents: discord.Intents) -> None:
        super().__init__(intents=intents, allowed_mentions=discord.AllowedMentions.none())
        self._provider = provider

    async def on_ready(self) -> None:  # pragma: no cover - network call
        self._provider._on_ready(self.user)

    async def on_message(self, message: discord.Message) -> None:  # pragma: no cover - network call
        await self._provider._on_message(message)


class DiscordChannelProvider(ChannelProvider):
    def __init__(
        self,
        *,
        config: DiscordChannelConfig,
        inbound_handler: InboundHandler,
    ) -> None:
        self.config = config
        self.inbound_handler = inbound_handler

        self._client: discord.Client | None = None
        self._task: asyncio.Task[None] | None = None
        self._closed = asyncio.Event()
        self._self_id: str | None = None
        self._error: Exception | None = None
        self._status = ChannelStatus(
            channel="discord",
            running=False,
            enabled=self.enabled,
        )

    @property
    def name(self) -> str:
        return "discord"

    @property
    def enabled(self) -> bool:
        return bool(self.config.enabled and self.config.token.strip())

    @property
    def self_id(self) -> str | None:
        return self._self_id

    @property
    def error(self) -> Exception | None:
        """The exception that ended the gateway connection, if any."""
        return self._error

    def status(self) -> ChannelStatus:
        return self._status

    async def start(self) -> None:
        if not self.enabled:
            logger.warning("channels.discord.disabled", reason="disabled_or_no_token")
            self._closed.set()
            return

        intents = discord.Intents.default()
        intents.guild_messages = True
        intents.message_content = True
        client = _DiscordClient(provider=self, intents=intents)

        # login() raises LoginFailure on a bad token; let it reach the caller
        await client.login(self.config.token.strip())

        self._client = client
        self._error = None
        self._closed.clear()
        self._set_status(running=True)
        self._task = asyncio.create_task(self._connect_loop(client), name="channel-discord-gateway")

    async def stop(self) -> None:
        if self._client is not None and not self._client.is_closed():
            await self._client.close()
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._set_status(running=False)
        self._closed.set()

    async def wait_closed(self) -> None:
        """Block until the gateway connection ends for any reason."""
        await self._closed.wait()

    async def send_message(self, channel_id: str, text: str) -> bool:
        if self._client is None:
            logger.warning("channels.discord.send_failed", reason="not_connected", channel_id=channel_id)
            return False

        try:
            channel = self._client.get_channel(int(channel_id))
            if channel is None:
                channel = await self._client.fetch_channel(int(channel_id))
            for chunk in self._chunk_text(text):
                await channel.send(chunk, allowed_mentions=discord.AllowedMentions.none())
        except (discord.HTTPException, ValueError) as exc:
            logger.warning("channels.discord.send_failed", channel_id=channel_id, error=str(exc))
            self._set_status(last_error=str(exc))
            return False

        self._set_status(last_outbound_at=self._now_iso())
        return True

    async def _connect_loop(self, client: discord.Client) -> None:
        try:
            await client.connect(reconnect=True)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._error = exc
            logger.error("channels.discord.connection_failed", error=str(exc))
            self._set_status(last_error=str(exc))
        finally:
            self._set_status(running=False)
            self._closed.set()

    def _on_ready(self, user: discord.ClientUser | None) -> None:
        if user is not None:
            self._self_id = str(user.id)
            self._set_status(self_id=self._self_id)
        logger.info(
            "channels.discord.ready",
            self_id=self._self_id,
            event_name="startup",
        )

    async def _on_message(self, message: discord.Message) -> None:
        event = MessageEvent(
            author_id=str(message.author.id),
            channel_id=str(message.channel.id),
            content=message.content or "",
            message_id=str(message.id),
        )
        self._set_status(last_inbound_at=self._now_iso())
        try:
            await self.inbound_handler(event)
        except Exception as exc:
            logger.exception(
                "channels.discord.handler_failed",
                channel_id=event.channel_id,
                error=str(exc),
            )

    def _chunk_text(self, text: str) -> list[str]:
        content = (text or "").strip()
        if not content:
            return []
        if len(content) <= MAX_MESSAGE_CHARS:
            return [content]

        chunks: list[str] = []
        start = 0
        while start < len(content):
            end = min(start + MAX_MESSAGE_CHARS, len(content))
            chunks.append(content[start:end])
            start = end
        return chunks

    def _set_status(
        self,
        *,
        running: bool | None = None,
        self_id: str | None = None,
        last_error: str | None = None,
        last_inbound_at: str | None = None,
        last_outbound_at: str | None = None,
    ) -> None:
        if running is not None:
            self._status.running = running
        if self_id is not None:
            self._status.self_id = self_id
        if last_error is not None:
            self._status.last_error = last_error
        if last_inbound_at is not None:
            self._status.last_inbound_at = last_inbound_at
        if last_outbound_at is not None:
            self._status.last_outbound_at = last_outbound_at

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(UTC).isoformat()
