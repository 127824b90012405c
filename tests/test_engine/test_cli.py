"""Tests for the command-line host."""

from econ_engine import cli
from econ_engine.config import EngineConfig
from econ_engine.state import create_initial_state
from econ_engine.view import player_view


class TestFormatState:
    def test_other_hands_counted_only(self):
        state = create_initial_state(2, seed=3, start_player=0)
        text = cli.format_state(player_view(state, 0), viewer=0)
        assert "Hand: [3 cards]" in text
        assert "Round 1" in text


class TestPlayInteractive:
    def test_human_moves_come_from_own_view(self, monkeypatch, capsys):
        seen = []
        real = cli.generate_legal_moves

        def recording(state, player):
            seen.append((state, player))
            return real(state, player)

        answers = iter(["1", "q"])
        monkeypatch.setattr(cli, "generate_legal_moves", recording)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

        cli.play_interactive(EngineConfig(num_players=2, seed=3))

        assert "Goodbye!" in capsys.readouterr().out
        assert len(seen) >= 2
        for view, player in seen:
            assert player == 0
            assert view.seed == 0
            assert all(c.is_hidden for c in view.deck)
            assert all(c.is_hidden for c in view.players[1].hand)
