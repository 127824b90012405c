"""Game session management for the web API."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from econ_engine.catalog import Edition
from econ_engine.executor import apply_move
from econ_engine.move_generator import generate_legal_moves
from econ_engine.rules import acting_players
from econ_engine.state import create_initial_state
from econ_engine.view import move_to_dict, player_view, state_to_dict
from strategies.driver import BotDriver, Difficulty

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from econ_engine.moves import Move
    from econ_engine.state import GameState

# Upper bound on bot moves applied in one go
MAX_BOT_MOVES = 2000


class PlayerType(str, Enum):
    """Type of player."""
    HUMAN = "human"
    BOT = "bot"


@dataclass
class PlayerConfig:
    """Configuration for a seat in a game session."""
    player_type: PlayerType
    difficulty: Difficulty | None = None  # None for human players


@dataclass
class GameSession:
    """An active game session.

    Every state change goes through `apply`; bots act through their
    `BotDriver`, which refuses to answer twice for the same version.
    """

    id: str
    player_configs: tuple[PlayerConfig, ...]
    state: GameState
    bots: dict[int, BotDriver]
    created_at: datetime
    move_history: list[dict] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def human_seats(self) -> list[int]:
        return [i for i, c in enumerate(self.player_configs) if c.player_type == PlayerType.HUMAN]

    @property
    def waiting_for(self) -> list[int]:
        """Seats that may act now."""
        return list(acting_players(self.state))

    def legal_moves(self, player: int) -> list[Move]:
        """Legal moves for one seat, computed from that seat's view."""
        return generate_legal_moves(player_view(self.state, player), player)

    def apply(self, player: int, move: Move) -> bool:
        """Apply a move for a seat. Returns whether it was accepted."""
        old_state = self.state
        self.state = apply_move(old_state, player, move)
        accepted = self.state.version != old_state.version
        if accepted:
            self.move_history.append(
                {
                    "version": self.state.version,
                    "round": old_state.round,
                    "player": player,
                    "move": move_to_dict(move),
                    "timestamp": datetime.now().isoformat(),
                }
            )
        else:
            logger.info("Session %s: rejected %s from P%d", self.id, move, player + 1)
        return accepted

    def run_bots(self) -> int:
        """Let bot seats act until only humans (or nobody) may act.

        Returns:
            Number of bot moves applied.
        """
        applied = 0
        while not self.state.is_game_over and applied < MAX_BOT_MOVES:
            progressed = False
            for player in acting_players(self.state):
                bot = self.bots.get(player)
                if bot is None:
                    continue
                move = bot.poll(self.state)
                if move is not None and self.apply(player, move):
                    applied += 1
                    progressed = True
                    break
            if not progressed:
                break
        if applied:
            logger.info("Session %s: bots made %d moves, now version %d", self.id, applied, self.state.version)
        return applied

    def to_client_state(self, viewer: int | None = None) -> dict:
        """Redacted state for one seat (None for a spectator)."""
        data = state_to_dict(self.state, viewer)
        data["game_id"] = self.id
        return data

    def moves_to_client(self, player: int) -> list[dict]:
        return [{"index": i, **move_to_dict(m)} for i, m in enumerate(self.legal_moves(player))]

    def summary(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "round": self.state.round,
            "phase": self.state.phase.name,
            "version": self.state.version,
            "is_game_over": self.state.is_game_over,
            "winner": self.state.final_scores[0].player if self.state.is_game_over else None,
            "players": [
                {
                    "type": c.player_type.value,
                    "difficulty": c.difficulty.name if c.difficulty else None,
                }
                for c in self.player_configs
            ],
        }


class GameSessionManager:
    """Manages all active game sessions."""

    def __init__(self):
        self._sessions: dict[str, GameSession] = {}

    def create_session(
        self,
        player_configs: list[PlayerConfig],
        seed: int | None = None,
        edition: Edition = Edition.BASE,
    ) -> GameSession:
        """Create a new game session.

        Raises:
            ValueError: If the seat count is out of range.
        """
        session_id = str(uuid.uuid4())

        # Create initial game state
        state = create_initial_state(len(player_configs), seed=seed, edition=edition)

        bots = {
            i: BotDriver(i, c.difficulty or Difficulty.GREEDY, seed=state.seed)
            for i, c in enumerate(player_configs)
            if c.player_type == PlayerType.BOT
        }
        session = GameSession(
            id=session_id,
            player_configs=tuple(player_configs),
            state=state,
            bots=bots,
            created_at=datetime.now(),
        )

        self._sessions[session_id] = session
        logger.info("Created session %s with %d players (seed %d)", session_id, len(player_configs), state.seed)
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Delete a session."""
        if session_id in self._sessions:
            del self._sessions[session_id]
            return True
        return False

    def list_sessions(self) -> list[dict]:
        """List all active sessions."""
        return [s.summary() for s in self._sessions.values()]

    async def run_bots(self, session: GameSession) -> int:
        """Run bot turns off the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, session.run_bots)


# Global session manager instance
session_manager = GameSessionManager()
