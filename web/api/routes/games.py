"""Game API routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from econ_engine.catalog import Edition
from econ_engine.moves import move_from_name
from econ_engine.state import MAX_PLAYERS, MIN_PLAYERS
from strategies.driver import Difficulty
from web.api.session_manager import (
    GameSession,
    PlayerConfig,
    PlayerType,
    session_manager,
)

router = APIRouter(tags=["games"])


# Request/Response models
class PlayerConfigRequest(BaseModel):
    """Seat configuration for game creation."""

    player_type: str = Field("human", description="'human' or 'bot'")
    difficulty: str | None = Field(None, description="'random', 'greedy' or 'lookahead' for bots")


class CreateGameRequest(BaseModel):
    """Request to create a new game."""

    players: list[PlayerConfigRequest] = Field(
        ..., min_length=MIN_PLAYERS, max_length=MAX_PLAYERS, description="One entry per seat"
    )
    seed: int | None = Field(None, description="Random seed for reproducibility")
    edition: str = Field("base", description="'base' or 'glory'")


class MoveRequest(BaseModel):
    """Request to make a move."""

    player: int = Field(..., description="Seat making the move")
    name: str = Field(..., description="Move name, e.g. 'placeWorker'")
    args: list[Any] = Field(default_factory=list, description="Move arguments")


def _get_session(game_id: str) -> GameSession:
    session = session_manager.get_session(game_id)
    if not session:
        raise HTTPException(status_code=404, detail="Game not found")
    return session


def _check_seat(session: GameSession, player: int | None) -> None:
    if player is not None and not 0 <= player < session.state.num_players:
        raise HTTPException(status_code=400, detail=f"Invalid player index: {player}")


def _to_config(req: PlayerConfigRequest) -> PlayerConfig:
    try:
        player_type = PlayerType(req.player_type.lower())
        difficulty = None
        if player_type == PlayerType.BOT:
            difficulty = Difficulty[(req.difficulty or "greedy").upper()]
    except (ValueError, KeyError):
        raise HTTPException(status_code=400, detail=f"Invalid player config: {req}") from None
    return PlayerConfig(player_type=player_type, difficulty=difficulty)


def _response(session: GameSession, viewer: int | None) -> dict:
    return {
        "game_id": session.id,
        "state": session.to_client_state(viewer=viewer),
        "legal_moves": session.moves_to_client(viewer) if viewer is not None else [],
        "waiting_for": session.waiting_for,
    }


# REST Endpoints


@router.post("/games", response_model=dict)
async def create_game(request: CreateGameRequest):
    """Create a new game session and let bots act first if due."""
    configs = [_to_config(p) for p in request.players]
    try:
        edition = Edition[request.edition.upper()]
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown edition: {request.edition}") from None

    try:
        session = session_manager.create_session(configs, seed=request.seed, edition=edition)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    async with session.lock:
        await session_manager.run_bots(session)

    humans = session.human_seats
    return _response(session, humans[0] if humans else None)


@router.get("/games", response_model=list[dict])
async def list_games():
    """List all active game sessions."""
    return session_manager.list_sessions()


@router.get("/games/{game_id}")
async def get_game(game_id: str, viewer: int | None = None):
    """Get the state of a game as seen by `viewer` (spectator if omitted)."""
    session = _get_session(game_id)
    _check_seat(session, viewer)
    return {**_response(session, viewer), "move_history": session.move_history}


@router.get("/games/{game_id}/moves")
async def get_legal_moves(game_id: str, player: int):
    """Get legal moves for one seat."""
    session = _get_session(game_id)
    _check_seat(session, player)
    return {"moves": session.moves_to_client(player)}


@router.post("/games/{game_id}/move")
async def make_move(game_id: str, request: MoveRequest):
    """Apply a move for a seat, then let bots respond.

    Illegal moves leave the game unchanged and report `accepted: false`.
    """
    session = _get_session(game_id)
    _check_seat(session, request.player)
    if request.player not in session.human_seats:
        raise HTTPException(status_code=400, detail=f"Seat {request.player} is played by a bot")

    try:
        move = move_from_name(request.name, *request.args)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    async with session.lock:
        accepted = session.apply(request.player, move)
        if accepted:
            await session_manager.run_bots(session)

    return {"accepted": accepted, **_response(session, request.player)}


@router.delete("/games/{game_id}")
async def delete_game(game_id: str):
    """Delete a game session."""
    if session_manager.delete_session(game_id):
        return {"deleted": True}
    raise HTTPException(status_code=404, detail="Game not found")
