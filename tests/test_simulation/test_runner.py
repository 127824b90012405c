"""Tests for the headless game runner."""

import json

from econ_engine.catalog import Edition
from simulation.runner import GameRunner, run_batch, save_game_log
from strategies import HeuristicStrategy, RandomStrategy


class TestGameRunner:
    def test_game_completes(self):
        runner = GameRunner([RandomStrategy(seed=1), RandomStrategy(seed=2)], log_moves=False)
        result, log = runner.run_game(seed=42)

        assert log is None
        assert result.completed
        assert result.rounds == 9
        assert result.seed == 42
        assert len(result.final_scores) == 2
        assert result.winner == max(range(2), key=lambda i: (result.final_scores[i], -i))
        assert result.player_strategies == ("Random", "Random")
        assert result.move_count > 0

    def test_move_cap(self):
        runner = GameRunner([RandomStrategy(seed=1), RandomStrategy(seed=2)], max_moves=5, log_moves=False)
        result, _ = runner.run_game(seed=42)
        assert not result.completed
        assert result.winner is None
        assert result.move_count == 5
        assert result.final_scores == (0, 0)

    def test_log_records_every_move(self):
        runner = GameRunner([HeuristicStrategy(seed=1), RandomStrategy(seed=2), RandomStrategy(seed=3)])
        result, log = runner.run_game(seed=7)
        assert log is not None
        assert len(log.moves) == result.move_count
        assert log.result is result
        assert log.initial_state["round"] == 1
        # Hosts never see a hand in the stored snapshots
        assert all(c["def_id"] == "HIDDEN" for c in log.moves[0].state_after["players"][0]["hand"])

    def test_glory_edition(self):
        runner = GameRunner([RandomStrategy(seed=1), RandomStrategy(seed=2)], edition=Edition.GLORY, log_moves=False)
        result, _ = runner.run_game(seed=3)
        assert result.completed


class TestSaveGameLog:
    def test_writes_json(self, tmp_path):
        runner = GameRunner([RandomStrategy(seed=1), RandomStrategy(seed=2)], max_moves=20)
        _, log = runner.run_game(seed=5)
        path = save_game_log(log, base_dir=str(tmp_path))

        assert path.exists()
        assert path.parent.name == log.timestamp[:10]
        data = json.loads(path.read_text())
        assert data["game_id"] == log.game_id
        assert len(data["moves"]) == 20
        assert data["result"]["move_count"] == 20
        assert data["edition"] == "BASE"
        assert data["final_state"]["version"] == 20


class TestRunBatch:
    def test_batch(self):
        results = run_batch([RandomStrategy(seed=1), RandomStrategy(seed=2)], num_games=3, start_seed=10)
        assert [r.seed for r in results] == [10, 11, 12]
        assert all(r.completed for r in results)
