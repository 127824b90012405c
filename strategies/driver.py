"""Bot entry points: a pure decision function and a version-aware driver."""

from __future__ import annotations

import logging
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from econ_engine.move_generator import generate_legal_moves
from econ_engine.view import player_view
from strategies.heuristic import HeuristicStrategy
from strategies.lookahead import LookaheadStrategy
from strategies.random_strategy import RandomStrategy

if TYPE_CHECKING:
    from econ_engine.moves import Move
    from econ_engine.state import GameState
    from strategies.base import Strategy

logger = logging.getLogger(__name__)


class Difficulty(IntEnum):
    """Bot strength tier."""

    RANDOM = auto()  # Weighted random legal moves
    GREEDY = auto()  # Heuristic move scoring
    LOOKAHEAD = auto()  # One-ply simulation with position evaluation


def create_strategy(difficulty: Difficulty, seed: int | str | None = None, salt: int | str | None = None) -> Strategy:
    """Strategy instance for a tier."""
    match difficulty:
        case Difficulty.RANDOM:
            return RandomStrategy(seed=seed, salt=salt)
        case Difficulty.GREEDY:
            return HeuristicStrategy(seed=seed)
        case Difficulty.LOOKAHEAD:
            return LookaheadStrategy(seed=seed)
    raise ValueError(f"Unknown difficulty: {difficulty!r}")


def decide_move(
    state: GameState,
    player: int,
    difficulty: Difficulty = Difficulty.GREEDY,
    seed: int = 0,
) -> Move | None:
    """Choose a legal move for `player`, or None if they may not act.

    Only the player's own view is consulted, and the randomness is derived
    from (seed, state.version, player), so the same call on the same state
    always returns the same move.
    """
    view = player_view(state, player)
    legal_moves = generate_legal_moves(view, player)
    if not legal_moves:
        return None
    strategy = create_strategy(
        difficulty, seed=f"{seed}:{state.version}:{player}", salt=f"{seed}:{player}"
    )
    return strategy.select_move(view, player, legal_moves)


class BotDriver:
    """Polls a bot seat and acts at most once per state version.

    Hosts call `poll` after every state change; repeated polls of the same
    snapshot return None instead of a duplicate move.
    """

    def __init__(self, player: int, difficulty: Difficulty = Difficulty.GREEDY, seed: int = 0):
        self.player = player
        self.difficulty = difficulty
        self.seed = seed
        self._last_version: int | None = None

    def poll(self, state: GameState) -> Move | None:
        if state.version == self._last_version:
            return None
        move = decide_move(state, self.player, self.difficulty, self.seed)
        if move is not None:
            self._last_version = state.version
            logger.debug("P%d (%s) chooses %s at version %d", self.player + 1, self.difficulty.name, move, state.version)
        return move

    def reset(self) -> None:
        self._last_version = None
