"""Trigger dispatch: pattern rules, pause mode and cooldowns."""

from dadbot.responder.cooldown import CooldownGuard
from dadbot.responder.dispatcher import Dispatcher, build_dispatcher
from dadbot.responder.models import DispatchResult, MatchResult, Reply
from dadbot.responder.pause import PauseState
from dadbot.responder.rules import TriggerRule, default_rules

__all__ = [
    "CooldownGuard",
    "DispatchResult",
    "Dispatcher",
    "MatchResult",
    "PauseState",
    "Reply",
    "TriggerRule",
    "build_dispatcher",
    "default_rules",
]
