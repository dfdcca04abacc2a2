"""
Progress events of the move adapter.

Observers (a UI, a test) can subscribe with a callback. Nothing in the adapter depends on whether anyone listens.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Optional


class AttemptOutcome(StrEnum):
    ACCEPTED = "accepted"
    ILLEGAL_MOVE = "illegal_move"
    UNPARSEABLE = "unparseable"
    TRANSPORT_ERROR = "transport_error"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class MoveAttemptEvent:
    model: str
    attempt: int
    outcome: AttemptOutcome
    reason: Optional[str] = None
    raw_reply: Optional[str] = None
    move: Optional[str] = None


EventCallback = Callable[[MoveAttemptEvent], None]
