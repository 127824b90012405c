"""Command-line interface for National Economy."""

from __future__ import annotations

import argparse
import logging
import time
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from econ_engine.catalog import Edition
from econ_engine.config import EngineConfig
from econ_engine.executor import execute_move
from econ_engine.move_generator import generate_legal_moves
from econ_engine.rules import acting_players, wage_per_worker
from econ_engine.state import GamePhase, create_initial_state
from econ_engine.view import player_view

if TYPE_CHECKING:
    from econ_engine.moves import Move
    from econ_engine.state import GameState

logger = logging.getLogger(__name__)


def format_state(state: GameState, viewer: int | None = None) -> str:
    """Format game state for display; hands other than `viewer`'s are counted only."""
    catalog = state.catalog
    lines = []

    lines.append("=" * 60)
    lines.append(
        f"Round {state.round} | Phase: {state.phase.name} | "
        f"Wage ${wage_per_worker(state.round)} | Household ${state.household}"
    )
    lines.append("=" * 60)

    occupied = []
    for workplace in state.workplaces:
        marks = ",".join(f"P{w + 1}" for w in workplace.workers) or "-"
        occupied.append(f"{workplace.name}[{marks}]")
    lines.append("Workplaces: " + "  ".join(occupied))

    for i, player in enumerate(state.players):
        prefix = "→ " if i == state.current_player else "  "
        lines.append(
            f"\n{prefix}P{i + 1}: ${player.money} | workers {player.available_workers}/{player.workers}"
            f" | tokens {player.vp_tokens} | debts {player.unpaid_debts}"
        )
        lines.append("-" * 40)
        if viewer is None or i == viewer:
            hand_str = ", ".join(catalog.get(c.def_id).name for c in player.hand) or "(empty)"
            lines.append(f"  Hand: {hand_str}")
        else:
            lines.append(f"  Hand: [{len(player.hand)} cards]")
        built = ", ".join(
            catalog.get(b.card.def_id).name + ("*" if b.worker_placed else "") for b in player.buildings
        )
        lines.append(f"  Built: {built or '(none)'}")

    lines.append(f"\nDeck: {len(state.deck)} cards | Discard: {len(state.discard)} cards")

    if state.is_game_over:
        lines.append("\n" + "=" * 60)
        for rank, score in enumerate(state.final_scores, start=1):
            lines.append(
                f"{rank}. P{score.player + 1}: {score.total} VP "
                f"(structures {score.building_vp}, bonus {score.bonus_vp}, "
                f"cash {score.money_vp}, debt {score.debt_vp})"
            )
        lines.append("=" * 60)

    return "\n".join(lines)


def format_moves(moves: list[Move]) -> str:
    """Format available moves for display."""
    lines = ["Available moves:"]
    for i, move in enumerate(moves):
        lines.append(f"  {i + 1}. {move}")
    return "\n".join(lines)


def play_interactive(config: EngineConfig) -> None:
    """Play an interactive game as P1 against bots."""
    from strategies.driver import BotDriver, Difficulty

    state = create_initial_state(config.num_players, seed=config.seed, edition=config.edition)
    bots = {
        i: BotDriver(i, Difficulty[config.difficulty], seed=state.seed)
        for i in range(1, config.num_players)
    }

    print("\nWelcome to National Economy!")
    print("You are P1. Type the number of a move to play.")
    print("Type 'q' to quit.\n")

    while not state.is_game_over:
        acting = acting_players(state)
        if 0 in acting:
            view = player_view(state, 0)
            print(format_state(view, viewer=0))
            legal_moves = generate_legal_moves(view, 0)
            print(f"\n{format_moves(legal_moves)}")

            while True:
                try:
                    choice = input("\nYour move: ").strip()
                    if choice.lower() == "q":
                        print("Goodbye!")
                        return

                    move_idx = int(choice) - 1
                    if 0 <= move_idx < len(legal_moves):
                        move = legal_moves[move_idx]
                        break
                    else:
                        print(f"Please enter a number 1-{len(legal_moves)}")
                except ValueError:
                    print("Please enter a valid number or 'q' to quit")
            state = execute_move(state, 0, move)
        else:
            player = acting[0]
            move = bots[player].poll(state)
            print(f"P{player + 1} plays: {move}")
            state = execute_move(state, player, move)
        print()

    print(format_state(state))


def watch_game(config: EngineConfig, delay: float = 0.5) -> None:
    """Watch bots play against each other."""
    from strategies.driver import BotDriver, Difficulty

    state = create_initial_state(config.num_players, seed=config.seed, edition=config.edition)
    bots = [
        BotDriver(i, Difficulty[config.difficulty], seed=state.seed) for i in range(config.num_players)
    ]

    print(f"\nWatching {config.num_players} {config.difficulty} bots (seed {state.seed})")
    print("Press Ctrl+C to stop.\n")

    try:
        while not state.is_game_over:
            player = acting_players(state)[0]
            move = bots[player].poll(state)
            previous_round = state.round
            state = execute_move(state, player, move)
            print(f"P{player + 1} plays: {move}")
            if state.round != previous_round or state.phase == GamePhase.GAME_END:
                print(format_state(state, viewer=None))
                time.sleep(delay)

    except KeyboardInterrupt:
        print("\nStopped.")

    print(format_state(state))


def run_tournament(config: EngineConfig, num_games: int = 100, seed: int = 42) -> None:
    """Run every bot tier against the random baseline."""
    from simulation.runner import run_batch
    from strategies.driver import Difficulty, create_strategy

    tiers = [Difficulty.RANDOM, Difficulty.GREEDY, Difficulty.LOOKAHEAD]
    for tier in tiers:
        strategies = [create_strategy(tier, seed=seed)] + [
            create_strategy(Difficulty.RANDOM, seed=seed + i) for i in range(1, config.num_players)
        ]
        print(f"\nRunning {num_games} games: {tier.name} vs RANDOM")
        results = run_batch(strategies, num_games, start_seed=seed, edition=config.edition)

        wins = sum(1 for r in results if r.winner == 0)
        finished = sum(1 for r in results if r.completed)
        avg_score = sum(r.final_scores[0] for r in results) / len(results)
        avg_moves = sum(r.move_count for r in results) / len(results)
        avg_duration = sum(r.duration_ms for r in results) / len(results)

        print(f"\nResults ({tier.name} as P1):")
        print(f"  P1 wins: {wins} ({100*wins/num_games:.1f}%)")
        print(f"  Completed games: {finished}/{num_games}")
        print(f"  Average P1 score: {avg_score:.1f}")
        print(f"  Average moves: {avg_moves:.1f}")
        print(f"  Average duration: {avg_duration:.2f}ms")


def main() -> None:
    """Main entry point for the CLI."""
    load_dotenv()
    config = EngineConfig.from_env()

    parser = argparse.ArgumentParser(description="National Economy simulator")
    parser.add_argument("--players", type=int, default=config.num_players, help="Number of players (2-4)")
    parser.add_argument(
        "--edition", choices=[e.name.lower() for e in Edition], default=config.edition.name.lower()
    )
    parser.add_argument(
        "--difficulty",
        choices=["random", "greedy", "lookahead"],
        default=config.difficulty.lower(),
        help="Bot tier",
    )
    parser.add_argument("--log-level", default=config.log_level, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play against bots")
    play_parser.add_argument("--seed", type=int, default=config.seed, help="Random seed")

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Watch bots play")
    watch_parser.add_argument("--seed", type=int, default=config.seed, help="Random seed")
    watch_parser.add_argument(
        "--delay", type=float, default=0.5, help="Delay between rounds (seconds)"
    )

    # Tournament command
    tournament_parser = subparsers.add_parser("tournament", help="Run tournament")
    tournament_parser.add_argument(
        "--games", type=int, default=100, help="Number of games"
    )
    tournament_parser.add_argument("--seed", type=int, default=42, help="Random seed")

    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config.num_players = args.players
    config.edition = Edition[args.edition.upper()]
    config.difficulty = args.difficulty.upper()

    if args.command == "play":
        config.seed = args.seed
        play_interactive(config)
    elif args.command == "watch":
        config.seed = args.seed
        watch_game(config, delay=args.delay)
    elif args.command == "tournament":
        run_tournament(config, num_games=args.games, seed=args.seed)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
