"""Responder value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

DropOutcome = Literal["self_authored", "paused", "unhandled"]


@dataclass(frozen=True)
class MatchResult:
    """What a matcher found: the matched span and any captured groups."""

    text: str
    groups: tuple[str, ...] = ()


@dataclass
class Reply:
    """Text a rule wants sent, plus how the outcome should be logged."""

    text: str
    outcome: str
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class DispatchResult:
    """Terminal outcome of one dispatched event."""

    outcome: str
    rule: str | None = None
    reply: str | None = None
    sent: bool = False
