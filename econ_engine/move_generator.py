"""Legal move generation for National Economy."""

from __future__ import annotations

from econ_engine.moves import (
    CancelAction,
    ConfirmDiscard,
    ConfirmDualConstruction,
    ConfirmPaydaySell,
    Move,
    PlaceWorker,
    PlaceWorkerOnBuilding,
    SelectBuildCard,
    SelectDesignOfficeCard,
    ToggleDiscard,
    ToggleDualCard,
    TogglePaydaySell,
)
from econ_engine.rules import (
    can_build_card,
    can_dual_build_pair,
    can_place_on_building,
    can_place_on_workplace,
    can_toggle_cleanup,
    can_toggle_discard,
    can_toggle_dual,
    can_toggle_payday_sell,
    discard_complete,
    is_acting,
    payday_selection_valid,
)
from econ_engine.state import GamePhase, GameState


def generate_legal_moves(state: GameState, player: int) -> list[Move]:
    """Generate all legal moves for a player.

    Args:
        state: Current game state (a player view works too).
        player: Seat to generate moves for.

    Returns:
        Every move `execute_move` would accept from this player, empty when
        the player may not act.
    """
    if state.is_game_over or not is_acting(state, player):
        return []

    match state.phase:
        case GamePhase.WORK:
            return _generate_work_moves(state, player)
        case GamePhase.BUILD:
            return _generate_build_moves(state, player)
        case GamePhase.DISCARD:
            return _generate_discard_moves(state, player)
        case GamePhase.DESIGN_OFFICE:
            moves: list[Move] = [
                SelectDesignOfficeCard(i) for i in range(len(state.design_office_state.revealed))
            ]
            moves.append(CancelAction())
            return moves
        case GamePhase.DUAL_CONSTRUCTION:
            return _generate_dual_moves(state, player)
        case GamePhase.PAYDAY:
            return _generate_payday_moves(state, player)
        case GamePhase.CLEANUP:
            return _generate_cleanup_moves(state, player)

    return []


def _generate_work_moves(state: GameState, player: int) -> list[Move]:
    moves: list[Move] = [
        PlaceWorker(workplace.id)
        for workplace in state.workplaces
        if can_place_on_workplace(state, player, workplace)
    ]
    for building in state.players[player].buildings:
        if can_place_on_building(state, player, building.card.uid):
            moves.append(PlaceWorkerOnBuilding(building.card.uid))
    return moves


def _generate_build_moves(state: GameState, player: int) -> list[Move]:
    p = state.players[player]
    moves: list[Move] = [
        SelectBuildCard(i)
        for i in range(len(p.hand))
        if can_build_card(state, p, i, state.build_state)
    ]
    moves.append(CancelAction())
    return moves


def _generate_discard_moves(state: GameState, player: int) -> list[Move]:
    hand = state.players[player].hand
    discard = state.discard_state
    moves: list[Move] = [
        ToggleDiscard(i) for i in range(len(hand)) if can_toggle_discard(hand, discard, i)
    ]
    if discard_complete(hand, discard):
        moves.append(ConfirmDiscard())
    moves.append(CancelAction())
    return moves


def _generate_dual_moves(state: GameState, player: int) -> list[Move]:
    p = state.players[player]
    selected = state.dual_construction_state.selected
    moves: list[Move] = [
        ToggleDualCard(i) for i in range(len(p.hand)) if can_toggle_dual(state, p, selected, i)
    ]
    if len(selected) == 2 and can_dual_build_pair(state, p, *selected):
        moves.append(ConfirmDualConstruction())
    moves.append(CancelAction())
    return moves


def _generate_payday_moves(state: GameState, player: int) -> list[Move]:
    p = state.players[player]
    moves: list[Move] = [
        TogglePaydaySell(i)
        for i in range(len(p.buildings))
        if can_toggle_payday_sell(state, p, i)
    ]
    if payday_selection_valid(state, player):
        moves.append(ConfirmPaydaySell())
    return moves


def _generate_cleanup_moves(state: GameState, player: int) -> list[Move]:
    hand = state.players[player].hand
    record = state.cleanup_state.players[player]
    moves: list[Move] = [
        ToggleDiscard(i) for i in range(len(hand)) if can_toggle_cleanup(hand, record, i)
    ]
    if len(record.selected) == record.excess_count:
        moves.append(ConfirmDiscard())
    return moves
