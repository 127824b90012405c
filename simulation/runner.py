"""Game runner for National Economy simulations."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from econ_engine.catalog import Edition
from econ_engine.executor import execute_move
from econ_engine.move_generator import generate_legal_moves
from econ_engine.rules import acting_players
from econ_engine.state import create_initial_state
from econ_engine.view import player_view, state_to_dict

if TYPE_CHECKING:
    from econ_engine.state import GameState
    from strategies.base import Strategy

logger = logging.getLogger(__name__)


@dataclass
class GameResult:
    """Result of a completed game."""

    game_id: str
    winner: int | None  # None if the move cap was hit first
    completed: bool
    rounds: int
    final_scores: tuple[int, ...]  # indexed by seat
    player_strategies: tuple[str, ...]
    seed: int | None
    duration_ms: float
    move_count: int


@dataclass
class MoveRecord:
    """Record of a single move."""

    round: int
    player: int
    move: str
    state_after: dict


@dataclass
class GameLog:
    """Complete log of a game."""

    game_id: str
    timestamp: str
    seed: int | None
    player_strategies: tuple[str, ...]
    initial_state: dict
    edition: str = Edition.BASE.name
    moves: list[MoveRecord] = field(default_factory=list)
    result: GameResult | None = None
    final_state: dict | None = None


class GameRunner:
    """Runs National Economy games between 2 to 4 strategies."""

    def __init__(
        self,
        strategies: Sequence[Strategy],
        edition: Edition = Edition.BASE,
        max_moves: int = 5000,
        log_moves: bool = True,
    ):
        """Initialize the game runner.

        Args:
            strategies: One strategy per seat, seat 0 first.
            edition: Card set to play with.
            max_moves: Maximum moves before the game is abandoned.
            log_moves: Whether to log individual moves.
        """
        self.strategies = tuple(strategies)
        self.edition = edition
        self.max_moves = max_moves
        self.log_moves = log_moves

    def run_game(self, seed: int | None = None) -> tuple[GameResult, GameLog | None]:
        """Run a single game.

        Args:
            seed: Random seed for reproducibility.

        Returns:
            Tuple of (result, log). Log is None if log_moves is False.
        """
        import time

        start_time = time.perf_counter()
        game_id = str(uuid.uuid4())
        names = tuple(s.name for s in self.strategies)

        # Initialize game
        state = create_initial_state(len(self.strategies), seed=seed, edition=self.edition)

        # Notify strategies
        for i, strategy in enumerate(self.strategies):
            strategy.on_game_start(player_view(state, i), i)

        # Create log if needed
        game_log = None
        if self.log_moves:
            game_log = GameLog(
                game_id=game_id,
                timestamp=datetime.now().isoformat(),
                seed=state.seed,
                player_strategies=names,
                initial_state=state_to_dict(state),
                edition=self.edition.name,
            )

        move_count = 0

        # Game loop
        while not state.is_game_over and move_count < self.max_moves:
            # Simultaneous phases are settled one seat at a time
            acting_player = acting_players(state)[0]

            view = player_view(state, acting_player)
            legal_moves = generate_legal_moves(view, acting_player)

            if not legal_moves:
                # Shouldn't happen in a valid game
                logger.warning("P%d has no legal move in %s", acting_player + 1, state.phase.name)
                break

            # Select move
            strategy = self.strategies[acting_player]
            move = strategy.select_move(view, acting_player, legal_moves)

            # Execute move
            new_state = execute_move(state, acting_player, move)
            move_count += 1

            # Log move
            if game_log:
                game_log.moves.append(
                    MoveRecord(
                        round=state.round,
                        player=acting_player,
                        move=str(move),
                        state_after=state_to_dict(new_state),
                    )
                )

            # Notify strategies
            for i, other in enumerate(self.strategies):
                other.on_move_made(player_view(new_state, i), move, acting_player)

            state = new_state

        # Game ended
        duration_ms = (time.perf_counter() - start_time) * 1000

        result = GameResult(
            game_id=game_id,
            winner=state.final_scores[0].player if state.is_game_over else None,
            completed=state.is_game_over,
            rounds=state.round,
            final_scores=self._seat_scores(state),
            player_strategies=names,
            seed=state.seed,
            duration_ms=duration_ms,
            move_count=move_count,
        )
        if not result.completed:
            logger.warning("Game %s stopped after %d moves in round %d", game_id, move_count, state.round)

        if game_log:
            game_log.result = result
            game_log.final_state = state_to_dict(state)

        # Notify strategies
        for strategy in self.strategies:
            strategy.on_game_end(state, state.final_scores or ())

        return result, game_log

    def _seat_scores(self, state: GameState) -> tuple[int, ...]:
        if not state.is_game_over:
            return tuple(0 for _ in state.players)
        by_seat = {s.player: s.total for s in state.final_scores}
        return tuple(by_seat[i] for i in range(state.num_players))


def save_game_log(log: GameLog, base_dir: str = "logs/games") -> Path:
    """Save a game log to disk.

    Args:
        log: Game log to save.
        base_dir: Base directory for logs.

    Returns:
        Path to the saved file.
    """
    # Create directory structure
    date_str = log.timestamp[:10]  # YYYY-MM-DD
    dir_path = Path(base_dir) / date_str
    dir_path.mkdir(parents=True, exist_ok=True)

    # Save as JSON
    file_path = dir_path / f"game_{log.game_id}.json"

    data = {
        "game_id": log.game_id,
        "timestamp": log.timestamp,
        "seed": log.seed,
        "player_strategies": log.player_strategies,
        "edition": log.edition,
        "initial_state": log.initial_state,
        "moves": [
            {
                "round": m.round,
                "player": m.player,
                "move": m.move,
                "state_after": m.state_after,
            }
            for m in log.moves
        ],
        "result": {
            "winner": log.result.winner,
            "completed": log.result.completed,
            "rounds": log.result.rounds,
            "player_strategies": log.result.player_strategies,
            "final_scores": log.result.final_scores,
            "duration_ms": log.result.duration_ms,
            "move_count": log.result.move_count,
        }
        if log.result
        else None,
        "final_state": log.final_state,
    }

    with open(file_path, "w") as f:
        json.dump(data, f, indent=2)

    return file_path


def run_batch(
    strategies: Sequence[Strategy],
    num_games: int,
    start_seed: int = 0,
    edition: Edition = Edition.BASE,
    log_moves: bool = False,
) -> list[GameResult]:
    """Run multiple games.

    Args:
        strategies: One strategy per seat.
        num_games: Number of games to run.
        start_seed: Starting seed (incremented for each game).
        edition: Card set to play with.
        log_moves: Whether to log moves (slower).

    Returns:
        List of game results.
    """
    runner = GameRunner(strategies, edition=edition, log_moves=log_moves)
    results = []

    for i in range(num_games):
        result, _ = runner.run_game(seed=start_seed + i)
        results.append(result)

    return results
