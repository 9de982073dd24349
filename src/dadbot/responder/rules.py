"""Trigger rules and the default rule table."""

from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

import structlog

from dadbot.config import ResponderConfig
from dadbot.remarks.fetcher import RemarkFetcher, TransportError
from dadbot.responder.cooldown import CooldownGuard
from dadbot.responder.matchers import Matcher, PhraseMatcher, RegexMatcher
from dadbot.responder.models import MatchResult, Reply
from dadbot.responder.pause import PauseState

logger = structlog.get_logger()

PAUSE_PATTERN = r"\b(cigs|cigarettes?|milk)\b"
NAME_PATTERN = r"\bI(?:['’]?m|\s+am)\s+(.*\S)"

WIN_LOSE_GIF = "https://tenor.com/view/are-ya-winning-son-gif-18099517"
DAD_PARADOX = "No, I'm dad!"
JOKE_FALLBACK = "Gosh dang joke AI always breakin. Tell Clutch to fix it."
BUDGET_REPLY = "Every dollar not spent on genetically engineering cat girls is a dollar wasted."

GOODNIGHT_MESSAGES = (
    "Goodnight Snore-osaurus Rex.",
    "Goodnight? I’ll try… but I’ve been practicing for the greatnight.",
    "Goodnight! Sleep tight!",
    "Goodnight? Careful… last time I went to bed early, I woke up in tomorrow.",
    "Goodnight! Don’t let the bedbugs byte… they’re terrible at debugging.",
    "Don't forget to brush your teeth",
)

THERMOSTAT_MESSAGES = (
    "Don't touch that thermostat!",
    "Don't touch the thermostat! You don't pay the bills around here!",
)


class TriggerRule(ABC):
    """A matcher paired with a responder.

    ``respond`` returns None when the rule matched but declines to handle
    the message (cooldown miss); the dispatcher then moves on.
    """

    def __init__(self, *, name: str, priority: int, matcher: Matcher) -> None:
        self.name = name
        self.priority = priority
        self.matcher = matcher

    def match(self, text: str) -> MatchResult | None:
        return self.matcher.match(text)

    @abstractmethod
    async def respond(self, match: MatchResult) -> Reply | None:
        ...

    def __repr__(self) -> str:
        return f"<TriggerRule {self.name} p={self.priority}>"


class PauseRule(TriggerRule):
    """Consumption break: pause all replies for a random number of minutes."""

    def __init__(
        self,
        *,
        pause: PauseState,
        rng: random.Random,
        min_minutes: int,
        max_minutes: int,
        priority: int = 10,
    ) -> None:
        super().__init__(name="pause", priority=priority, matcher=RegexMatcher(PAUSE_PATTERN))
        self.pause = pause
        self.rng = rng
        self.min_minutes = min_minutes
        self.max_minutes = max_minutes

    async def respond(self, match: MatchResult) -> Reply | None:
        minutes = self.rng.randint(self.min_minutes, self.max_minutes)
        self.pause.pause(minutes * 60)
        return Reply(
            text=f"Be back in 20, gonna go grab some {match.text}",
            outcome="pause_triggered",
            fields={"pause_minutes": minutes, "trigger": match.text},
        )


class NameRule(TriggerRule):
    """Answers an introduction with the classic dad greeting."""

    def __init__(self, *, priority: int = 20) -> None:
        super().__init__(name="dad", priority=priority, matcher=RegexMatcher(NAME_PATTERN))

    async def respond(self, match: MatchResult) -> Reply | None:
        extracted = match.groups[0].strip() if match.groups else ""
        if not extracted:
            return None
        if extracted.lower() == "dad":
            return Reply(text=DAD_PARADOX, outcome="dad_paradox", fields={"event_name": "dad_response_sent"})
        return Reply(
            text=f"Hi {extracted}, I'm Dad!",
            outcome="dad_joke",
            fields={"event_name": "dad_response_sent"},
        )


class PhraseReplyRule(TriggerRule):
    """Exact phrase answered with a random pick from a fixed pool."""

    def __init__(
        self,
        *,
        name: str,
        priority: int,
        phrases: Sequence[str],
        replies: Sequence[str],
        outcome: str,
        rng: random.Random,
        cooldown: CooldownGuard | None = None,
    ) -> None:
        if not replies:
            raise ValueError(f"rule {name!r} needs at least one reply")
        super().__init__(name=name, priority=priority, matcher=PhraseMatcher(phrases))
        self.replies = tuple(replies)
        self.outcome = outcome
        self.rng = rng
        self.cooldown = cooldown

    async def respond(self, match: MatchResult) -> Reply | None:
        if self.cooldown is not None and not self.cooldown.try_acquire():
            _log_rate_limited(self.name, self.cooldown)
            return None
        text = self.replies[0] if len(self.replies) == 1 else self.rng.choice(self.replies)
        return Reply(text=text, outcome=self.outcome, fields={"trigger": match.text.lower()})


class JokeRule(TriggerRule):
    """Fetches a joke from the remote service, rate limited."""

    def __init__(
        self,
        *,
        fetcher: RemarkFetcher,
        cooldown: CooldownGuard,
        priority: int = 40,
    ) -> None:
        super().__init__(name="joke", priority=priority, matcher=PhraseMatcher(["tell me a joke"]))
        self.fetcher = fetcher
        self.cooldown = cooldown

    async def respond(self, match: MatchResult) -> Reply | None:
        if not self.cooldown.try_acquire():
            _log_rate_limited(self.name, self.cooldown)
            return None

        try:
            joke = await self.fetcher.fetch()
        except TransportError as exc:
            logger.error(
                "responder.joke_failed",
                rule=self.name,
                error=str(exc),
                event_name="joke_request_failed",
            )
            return Reply(text=JOKE_FALLBACK, outcome="joke_request_failed", fields={"error": str(exc)})

        return Reply(text=joke, outcome="joke_request_fulfilled")


def _log_rate_limited(rule: str, cooldown: CooldownGuard) -> None:
    logger.debug(
        "responder.rate_limited",
        rule=rule,
        retry_in_s=round(cooldown.remaining(), 3),
        event_name=f"{rule}_rate_limited",
    )


def default_rules(
    config: ResponderConfig,
    *,
    pause: PauseState,
    fetcher: RemarkFetcher,
    rng: random.Random | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> list[TriggerRule]:
    """Build the standard rule table, highest priority first."""
    rng = rng or random.Random()
    rules: list[TriggerRule] = [
        PauseRule(
            pause=pause,
            rng=rng,
            min_minutes=config.pause_min_minutes,
            max_minutes=config.pause_max_minutes,
        ),
        NameRule(),
        PhraseReplyRule(
            name="frustration",
            priority=30,
            phrases=["can't win", "cant win", "keep losing"],
            replies=[WIN_LOSE_GIF],
            outcome="win_lose_response",
            rng=rng,
        ),
        PhraseReplyRule(
            name="goodnight",
            priority=31,
            phrases=["good night", "goodnight"],
            replies=GOODNIGHT_MESSAGES,
            outcome="goodnight_triggered",
            rng=rng,
            cooldown=CooldownGuard("goodnight", config.goodnight_cooldown_s, clock=clock),
        ),
        PhraseReplyRule(
            name="thermostat",
            priority=32,
            phrases=["too hot", "too cold"],
            replies=THERMOSTAT_MESSAGES,
            outcome="thermostat_triggered",
            rng=rng,
        ),
        PhraseReplyRule(
            name="budget",
            priority=33,
            phrases=["budget", "money", "dollar", "dollars"],
            replies=[BUDGET_REPLY],
            outcome="meow_triggered",
            rng=rng,
        ),
        JokeRule(
            fetcher=fetcher,
            cooldown=CooldownGuard("joke", config.joke_cooldown_s, clock=clock),
        ),
    ]
    return sorted(rules, key=lambda rule: rule.priority)
