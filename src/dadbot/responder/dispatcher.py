"""Per-message trigger dispatch."""

from __future__ import annotations

import random
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import structlog

from dadbot.channels.base import MessageEvent
from dadbot.config import ResponderConfig
from dadbot.remarks.fetcher import RemarkFetcher
from dadbot.responder.models import DispatchResult
from dadbot.responder.pause import PauseState
from dadbot.responder.rules import TriggerRule, default_rules

logger = structlog.get_logger()

Sender = Callable[[str, str], Awaitable[Any]]
IdentityProvider = Callable[[], str | None]


class Dispatcher:
    """Single entrypoint for inbound chat messages.

    Each call drops self-authored and paused events, then walks the rules
    in priority order and sends at most one reply.
    """

    def __init__(
        self,
        *,
        rules: Sequence[TriggerRule],
        pause: PauseState,
        send: Sender,
        self_id: IdentityProvider,
    ) -> None:
        self.rules = sorted(rules, key=lambda rule: rule.priority)
        self.pause = pause
        self.send = send
        self.self_id = self_id

    async def handle(self, event: MessageEvent) -> DispatchResult:
        """Handle one inbound message end-to-end."""
        own_id = self.self_id()
        if own_id is not None and event.author_id == own_id:
            logger.debug("dispatch.self_authored", channel_id=event.channel_id)
            return DispatchResult(outcome="self_authored")

        if self.pause.is_active():
            logger.debug(
                "dispatch.paused",
                channel_id=event.channel_id,
                remaining_s=round(self.pause.remaining(), 1),
                event_name="message_skipped_paused",
            )
            return DispatchResult(outcome="paused")

        for rule in self.rules:
            match = rule.match(event.content)
            if match is None:
                continue
            reply = await rule.respond(match)
            if reply is None:
                continue

            sent = await self._send(event.channel_id, reply.text, rule=rule.name)
            logger.info(
                "dispatch.handled",
                rule=rule.name,
                outcome=reply.outcome,
                channel_id=event.channel_id,
                sent=sent,
                **reply.fields,
            )
            return DispatchResult(outcome=reply.outcome, rule=rule.name, reply=reply.text, sent=sent)

        logger.info("dispatch.unhandled", channel_id=event.channel_id, event_name="message_processed")
        return DispatchResult(outcome="unhandled")

    async def _send(self, channel_id: str, text: str, *, rule: str) -> bool:
        try:
            result = await self.send(channel_id, text)
        except Exception as exc:
            logger.warning("dispatch.send_failed", rule=rule, channel_id=channel_id, error=str(exc))
            return False
        return result is not False


def build_dispatcher(
    config: ResponderConfig,
    *,
    send: Sender,
    self_id: IdentityProvider,
    fetcher: RemarkFetcher,
    rng: random.Random | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> Dispatcher:
    """Wire the default rule table with fresh pause and cooldown state."""
    pause = PauseState(clock=clock)
    rules = default_rules(config, pause=pause, fetcher=fetcher, rng=rng, clock=clock)
    return Dispatcher(rules=rules, pause=pause, send=send, self_id=self_id)
