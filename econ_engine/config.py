"""Host configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from econ_engine.catalog import Edition
from econ_engine.state import MAX_PLAYERS, MIN_PLAYERS


@dataclass
class EngineConfig:
    """Defaults for the command line and the HTTP host.

    Every field can be set through an ECON_* environment variable; the
    launchers load a `.env` file first.
    """

    num_players: int = 2
    edition: Edition = Edition.BASE
    seed: int | None = None
    difficulty: str = "GREEDY"
    log_level: str = "INFO"
    cors_origins: list[str] = field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EngineConfig:
        """Build a config from environment variables.

        Raises:
            ValueError: If a variable holds an unusable value.
        """
        env = os.environ if environ is None else environ
        config = cls()

        if "ECON_PLAYERS" in env:
            config.num_players = int(env["ECON_PLAYERS"])
            if not MIN_PLAYERS <= config.num_players <= MAX_PLAYERS:
                raise ValueError(f"ECON_PLAYERS must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
        if "ECON_EDITION" in env:
            try:
                config.edition = Edition[env["ECON_EDITION"].upper()]
            except KeyError:
                raise ValueError(f"Unknown ECON_EDITION: {env['ECON_EDITION']}") from None
        if env.get("ECON_SEED"):
            config.seed = int(env["ECON_SEED"])
        if "ECON_DIFFICULTY" in env:
            config.difficulty = env["ECON_DIFFICULTY"].upper()
        if "ECON_LOG_LEVEL" in env:
            config.log_level = env["ECON_LOG_LEVEL"].upper()

        # Add production frontend URL if set
        frontend_url = env.get("FRONTEND_URL")
        if frontend_url:
            config.cors_origins.append(frontend_url)
        return config

    def to_dict(self) -> dict[str, Any]:
        return {
            "num_players": self.num_players,
            "edition": self.edition.name,
            "seed": self.seed,
            "difficulty": self.difficulty,
            "log_level": self.log_level,
            "cors_origins": list(self.cors_origins),
        }
