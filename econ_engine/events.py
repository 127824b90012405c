"""Structured events emitted next to each log entry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, auto


class EventKind(IntEnum):
    """Tag presentation layers switch on instead of parsing log text."""

    ROUND_STARTED = auto()
    WORKPLACE_OPENED = auto()
    WORKER_PLACED = auto()
    CARDS_DRAWN = auto()
    INCOME = auto()
    WORKER_HIRED = auto()
    STRUCTURE_BUILT = auto()
    CARDS_DISCARDED = auto()
    ACTION_CANCELLED = auto()
    PAYDAY_STARTED = auto()
    WAGES_PAID = auto()
    STRUCTURE_SOLD = auto()
    DEBT_INCURRED = auto()
    STRUCTURE_DEMOLISHED = auto()
    GAME_ENDED = auto()


@dataclass(frozen=True, slots=True)
class GameEvent:
    """A typed event.

    Attributes:
        kind: Event tag
        player: Player concerned, None for table-wide events
        amount: Numeric payload (cash, cards, debt markers)
        def_id: Card definition concerned, if any
        heavy: For STRUCTURE_BUILT, whether the structure costs 4 or more
    """

    kind: EventKind
    player: int | None = None
    amount: int = 0
    def_id: str | None = None
    heavy: bool = False


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One append-only log line.

    `seq` orders entries across the whole match and stands in for a
    timestamp so replays stay deterministic.
    """

    seq: int
    round: int
    text: str
    event: GameEvent | None = None
