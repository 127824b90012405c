"""National Economy game engine."""

from econ_engine.catalog import Card, CardDefinition, Catalog, Edition, default_catalog
from econ_engine.state import GameState, PlayerState, GamePhase, create_initial_state
from econ_engine.moves import (
    Move,
    PlaceWorker,
    PlaceWorkerOnBuilding,
    SelectBuildCard,
    ToggleDualCard,
    ConfirmDualConstruction,
    SelectDesignOfficeCard,
    ToggleDiscard,
    ConfirmDiscard,
    TogglePaydaySell,
    ConfirmPaydaySell,
    CancelAction,
)
from econ_engine.executor import IllegalMoveError, apply_move, execute_move
from econ_engine.move_generator import generate_legal_moves
from econ_engine.scoring import ScoreBreakdown, compute_scores
from econ_engine.view import player_view

__all__ = [
    "Card",
    "CardDefinition",
    "Catalog",
    "Edition",
    "default_catalog",
    "GameState",
    "PlayerState",
    "GamePhase",
    "create_initial_state",
    "Move",
    "PlaceWorker",
    "PlaceWorkerOnBuilding",
    "SelectBuildCard",
    "ToggleDualCard",
    "ConfirmDualConstruction",
    "SelectDesignOfficeCard",
    "ToggleDiscard",
    "ConfirmDiscard",
    "TogglePaydaySell",
    "ConfirmPaydaySell",
    "CancelAction",
    "IllegalMoveError",
    "apply_move",
    "execute_move",
    "generate_legal_moves",
    "ScoreBreakdown",
    "compute_scores",
    "player_view",
]
