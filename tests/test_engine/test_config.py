"""Tests for environment configuration."""

import pytest

from econ_engine.catalog import Edition
from econ_engine.config import EngineConfig


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig.from_env({})
        assert config.num_players == 2
        assert config.edition == Edition.BASE
        assert config.seed is None
        assert config.difficulty == "GREEDY"
        assert config.cors_origins == ["http://localhost:5173", "http://localhost:3000"]

    def test_from_env(self):
        config = EngineConfig.from_env(
            {
                "ECON_PLAYERS": "4",
                "ECON_EDITION": "glory",
                "ECON_SEED": "12",
                "ECON_DIFFICULTY": "lookahead",
                "ECON_LOG_LEVEL": "debug",
                "FRONTEND_URL": "https://example.org",
            }
        )
        assert config.to_dict() == {
            "num_players": 4,
            "edition": "GLORY",
            "seed": 12,
            "difficulty": "LOOKAHEAD",
            "log_level": "DEBUG",
            "cors_origins": ["http://localhost:5173", "http://localhost:3000", "https://example.org"],
        }

    def test_empty_seed_ignored(self):
        assert EngineConfig.from_env({"ECON_SEED": ""}).seed is None

    @pytest.mark.parametrize("env", [{"ECON_PLAYERS": "5"}, {"ECON_PLAYERS": "1"}, {"ECON_EDITION": "deluxe"}])
    def test_bad_values(self, env):
        with pytest.raises(ValueError):
            EngineConfig.from_env(env)

    def test_defaults_not_shared(self):
        EngineConfig.from_env({"FRONTEND_URL": "https://example.org"})
        assert EngineConfig().cors_origins == ["http://localhost:5173", "http://localhost:3000"]
