"""One-ply lookahead strategy.

Each candidate move is played on the acting player's own view; if it opens
a follow-up selection (build, discard, design office, dual construction)
the heuristic policy finishes it, and the resulting position is rated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from econ_engine.executor import IllegalMoveError, execute_move
from econ_engine.move_generator import generate_legal_moves
from econ_engine.moves import CancelAction
from econ_engine.rules import wage_owed
from econ_engine.scoring import score_player
from econ_engine.state import FINAL_ROUND, GamePhase
from strategies.heuristic import HeuristicStrategy, card_retain_value

if TYPE_CHECKING:
    from econ_engine.moves import Move
    from econ_engine.state import GameState

FOLLOW_UP_PHASES = frozenset(
    {GamePhase.BUILD, GamePhase.DISCARD, GamePhase.DESIGN_OFFICE, GamePhase.DUAL_CONSTRUCTION}
)
MAX_FOLLOW_UP_MOVES = 30
HAND_WEIGHT = 0.4
WORKER_ROUND_VALUE = 2
DEBT_PENALTY = 3


def evaluate_position(state: GameState, player: int) -> float:
    """Rough worth of a position for `player`, in VP."""
    p = state.players[player]
    if state.final_scores is not None:
        return float(next(s.total for s in state.final_scores if s.player == player))

    value = float(score_player(state.catalog, player, p).total)
    value += HAND_WEIGHT * sum(min(card_retain_value(state, player, c), 10) for c in p.hand)

    rounds_left = FINAL_ROUND - state.round
    value += WORKER_ROUND_VALUE * rounds_left * p.workers
    if state.phase not in (GamePhase.PAYDAY, GamePhase.CLEANUP):
        projected_debt = max(0, wage_owed(p, state.round) - p.money)
        value -= DEBT_PENALTY * projected_debt
    return value


class LookaheadStrategy(HeuristicStrategy):
    """Plays every candidate one step ahead and keeps the best outcome.

    Multi-step selections are left to the heuristic planner.
    """

    @property
    def name(self) -> str:
        return "Lookahead"

    def choose(self, state: GameState, player: int, legal_moves: list[Move]) -> Move:
        if len(legal_moves) == 1:
            return legal_moves[0]

        scored_moves = [(self._simulate(state, player, move), move) for move in legal_moves]
        best_score = max(score for score, _ in scored_moves)
        best_moves = [move for score, move in scored_moves if score == best_score]
        return self._rng.choice(best_moves)

    def _simulate(self, state: GameState, player: int, move: Move) -> float:
        if isinstance(move, CancelAction):
            return float("-inf")
        try:
            result = execute_move(state, player, move)
        except IllegalMoveError:
            return float("-inf")

        steps = 0
        while (
            result.phase in FOLLOW_UP_PHASES
            and result.current_player == player
            and steps < MAX_FOLLOW_UP_MOVES
        ):
            follow_ups = generate_legal_moves(result, player)
            if not follow_ups:
                break
            result = execute_move(result, player, self._follow_up(result, player, follow_ups))
            steps += 1
        return evaluate_position(result, player)

    def _follow_up(self, state: GameState, player: int, legal_moves: list[Move]) -> Move:
        """Heuristic policy used inside a simulation."""
        if state.phase in (GamePhase.BUILD, GamePhase.DESIGN_OFFICE):
            return HeuristicStrategy.choose(self, state, player, legal_moves)
        return super().select_move(state, player, legal_moves)
