"""Declarative text matchers used by trigger rules."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Protocol

from dadbot.responder.models import MatchResult


class Matcher(Protocol):
    def match(self, text: str) -> MatchResult | None:
        ...

    def describe(self) -> str:
        ...


class RegexMatcher:
    """Case-insensitive regex search anywhere in the message."""

    def __init__(self, pattern: str) -> None:
        self.pattern = re.compile(pattern, re.IGNORECASE)

    def match(self, text: str) -> MatchResult | None:
        found = self.pattern.search(text or "")
        if found is None:
            return None
        groups = tuple(group for group in found.groups() if group is not None)
        return MatchResult(text=found.group(0), groups=groups)

    def describe(self) -> str:
        return f"/{self.pattern.pattern}/i"


class PhraseMatcher:
    """Whole-message, case-insensitive match against a fixed phrase set.

    Surrounding whitespace is ignored; inner text must match exactly.
    """

    def __init__(self, phrases: Iterable[str]) -> None:
        self.phrases = tuple(phrases)
        self._normalized = frozenset(phrase.strip().lower() for phrase in self.phrases)

    def match(self, text: str) -> MatchResult | None:
        candidate = (text or "").strip()
        if candidate.lower() in self._normalized:
            return MatchResult(text=candidate)
        return None

    def describe(self) -> str:
        return " | ".join(self.phrases)
