"""Core channel abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class MessageEvent:
    """Normalized inbound chat message from a channel provider."""

    author_id: str
    channel_id: str
    content: str
    message_id: str | None = None


@dataclass
class ChannelStatus:
    """Runtime status snapshot for a channel provider."""

    channel: str
    running: bool
    enabled: bool
    self_id: str | None = None
    last_error: str | None = None
    last_inbound_at: str | None = None
    last_outbound_at: str | None = None


class ChannelProvider(ABC):
    """Interface implemented by all channel providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def enabled(self) -> bool:
        ...

    @property
    @abstractmethod
    def self_id(self) -> str | None:
        """Identity of the bot account on this channel, once connected."""
        ...

    @abstractmethod
    async def start(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    def status(self) -> ChannelStatus:
        ...

    @abstractmethod
    async def send_message(self, channel_id: str, text: str) -> bool:
        """Send text to a channel. Best effort; returns False on failure."""
        ...
