"""Move execution - applies moves to game state.

`execute_move` validates and applies a move, raising IllegalMoveError on
rejection. `apply_move` is the host-facing entry point: a rejected move is
a silent no-op that returns the very same snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from econ_engine.effects import (
    complete_build,
    discard_hand_cards,
    draw_cards,
    enter_discard,
    gain_money,
    resolve_structure,
    resolve_workplace,
)
from econ_engine.events import EventKind, GameEvent
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
from econ_engine.phases import advance_turn, finish_cleanup_if_done, finish_payday_if_done, pay_wages
from econ_engine.rules import (
    can_build_card,
    can_dual_build_pair,
    can_place_on_building,
    can_place_on_workplace,
    can_toggle_cleanup,
    can_toggle_discard,
    can_toggle_dual,
    can_toggle_payday_sell,
    card_cost,
    definition_of,
    discard_complete,
    dual_pair_cost,
    income_payout,
    is_acting,
    is_valid_index,
    payday_selection_valid,
)
from econ_engine.state import (
    Building,
    BuildState,
    DiscardReason,
    DiscardState,
    GamePhase,
    WorkerOrigin,
)
from econ_engine.workplaces import WorkplaceEffect, sold_building_workplace

if TYPE_CHECKING:
    from econ_engine.state import GameState

logger = logging.getLogger(__name__)


class IllegalMoveError(Exception):
    """Raised when attempting an illegal move."""


def apply_move(state: GameState, player: int, move: Move) -> GameState:
    """Apply a move, or return `state` unchanged if it is rejected."""
    try:
        return execute_move(state, player, move)
    except IllegalMoveError as e:
        logger.debug("Rejected %s from player %s: %s", move, player, e)
        return state


def execute_move(state: GameState, player: int, move: Move) -> GameState:
    """Execute a move and return the new state.

    Args:
        state: Current game state
        player: Seat submitting the move
        move: Move to execute

    Returns:
        New game state with `version` incremented by one

    Raises:
        IllegalMoveError: If the move is illegal or malformed
    """
    if state.is_game_over:
        raise IllegalMoveError("Game is over")
    if not is_valid_index(player, state.num_players):
        raise IllegalMoveError(f"No such player: {player!r}")
    if not is_acting(state, player):
        raise IllegalMoveError(f"P{player + 1} may not act in {state.phase.name}")

    match move:
        case PlaceWorker():
            new_state = _execute_place_worker(state, player, move)
        case PlaceWorkerOnBuilding():
            new_state = _execute_place_on_building(state, player, move)
        case SelectBuildCard():
            new_state = _execute_select_build(state, player, move)
        case ToggleDualCard():
            new_state = _execute_toggle_dual(state, player, move)
        case ConfirmDualConstruction():
            new_state = _execute_confirm_dual(state, player)
        case SelectDesignOfficeCard():
            new_state = _execute_design_office(state, player, move)
        case ToggleDiscard():
            new_state = _execute_toggle_discard(state, player, move)
        case ConfirmDiscard():
            new_state = _execute_confirm_discard(state, player)
        case TogglePaydaySell():
            new_state = _execute_toggle_payday(state, player, move)
        case ConfirmPaydaySell():
            new_state = _execute_confirm_payday(state, player)
        case CancelAction():
            new_state = _execute_cancel(state, player)
        case _:
            raise IllegalMoveError(f"Unknown move: {move!r}")

    return new_state.updated(version=state.version + 1)


def _require_phase(state: GameState, *phases: GamePhase) -> None:
    if state.phase not in phases:
        raise IllegalMoveError(f"Not allowed during {state.phase.name}")


def _label(player: int) -> str:
    return f"P{player + 1}"


# ---------------------------------------------------------------------------
# Work phase
# ---------------------------------------------------------------------------


def _execute_place_worker(state: GameState, player: int, move: PlaceWorker) -> GameState:
    _require_phase(state, GamePhase.WORK)
    workplace = state.workplace(move.workplace_id) if isinstance(move.workplace_id, str) else None
    if workplace is None:
        raise IllegalMoveError(f"No such workplace: {move.workplace_id!r}")
    if not can_place_on_workplace(state, player, workplace):
        raise IllegalMoveError(f"Cannot place on {workplace.name}")

    p = state.players[player]
    workers = 1
    payout = 0
    if workplace.effect == WorkplaceEffect.SOLD_BUILDING:
        definition = definition_of(state, workplace.source_card)
        workers = definition.worker_req
        payout = income_payout(state, p, definition)

    state = state.with_player(player, p.updated(available_workers=p.available_workers - workers))
    state = state.with_workplace(workplace.with_workers(workplace.workers + (player,) * workers))
    state = state.logged(
        f"{_label(player)} places a worker on [{workplace.name}]",
        GameEvent(EventKind.WORKER_PLACED, player=player, amount=workers, def_id=workplace.source_def_id),
    )
    origin = WorkerOrigin(workplace_id=workplace.id, workers=workers)
    return resolve_workplace(state, player, state.workplace(workplace.id), origin, payout)


def _execute_place_on_building(state: GameState, player: int, move: PlaceWorkerOnBuilding) -> GameState:
    _require_phase(state, GamePhase.WORK)
    if not isinstance(move.card_uid, str) or not can_place_on_building(state, player, move.card_uid):
        raise IllegalMoveError(f"Cannot place on structure {move.card_uid!r}")

    p = state.players[player]
    index = p.building_index(move.card_uid)
    building = p.buildings[index]
    definition = definition_of(state, building.card)
    payout = income_payout(state, p, definition)

    buildings = list(p.buildings)
    buildings[index] = Building(card=building.card, worker_placed=True)
    p = p.updated(
        available_workers=p.available_workers - definition.worker_req,
        buildings=tuple(buildings),
    )
    state = state.with_player(player, p)
    state = state.logged(
        f"{_label(player)} places a worker on own [{definition.name}]",
        GameEvent(EventKind.WORKER_PLACED, player=player, amount=definition.worker_req, def_id=definition.id),
    )
    origin = WorkerOrigin(building_uid=building.card.uid, workers=definition.worker_req)
    return resolve_structure(state, player, definition, origin, payout)


# ---------------------------------------------------------------------------
# Build, dual construction, design office
# ---------------------------------------------------------------------------


def _execute_select_build(state: GameState, player: int, move: SelectBuildCard) -> GameState:
    _require_phase(state, GamePhase.BUILD)
    build = state.build_state
    p = state.players[player]
    if not is_valid_index(move.index, len(p.hand)) or not can_build_card(state, p, move.index, build):
        raise IllegalMoveError(f"Cannot build hand card {move.index!r}")

    card = p.hand[move.index]
    cost = card_cost(state, p, card, build.cost_reduction)
    if cost == 0:
        return complete_build(state, player, (card.uid,), build)

    name = definition_of(state, card).name
    return enter_discard(
        state,
        DiscardState(
            count=cost,
            reason=DiscardReason.BUILD_COST,
            origin=build.origin,
            build_uids=(card.uid,),
            build=build,
            description=f"Build [{name}]: discard {cost}",
        ),
    )


def _execute_toggle_dual(state: GameState, player: int, move: ToggleDualCard) -> GameState:
    _require_phase(state, GamePhase.DUAL_CONSTRUCTION)
    dual = state.dual_construction_state
    if not can_toggle_dual(state, state.players[player], dual.selected, move.index):
        raise IllegalMoveError(f"Cannot toggle hand card {move.index!r} for dual construction")
    return state.updated(dual_construction_state=replace(dual, selected=_toggled(dual.selected, move.index)))


def _execute_confirm_dual(state: GameState, player: int) -> GameState:
    _require_phase(state, GamePhase.DUAL_CONSTRUCTION)
    dual = state.dual_construction_state
    p = state.players[player]
    if len(dual.selected) != 2 or not can_dual_build_pair(state, p, *dual.selected):
        raise IllegalMoveError("Select two cards of equal cost")

    uids = tuple(p.hand[i].uid for i in dual.selected)
    cost = dual_pair_cost(state, p, *dual.selected)
    build = BuildState(dual.origin)
    if cost == 0:
        return complete_build(state, player, uids, build)
    return enter_discard(
        state,
        DiscardState(
            count=cost,
            reason=DiscardReason.DUAL_BUILD_COST,
            origin=dual.origin,
            build_uids=uids,
            build=build,
            description=f"Dual construction: discard {cost}",
        ),
    )


def _execute_design_office(state: GameState, player: int, move: SelectDesignOfficeCard) -> GameState:
    _require_phase(state, GamePhase.DESIGN_OFFICE)
    revealed = state.design_office_state.revealed
    if not is_valid_index(move.index, len(revealed)):
        raise IllegalMoveError(f"Bad reveal index: {move.index!r}")

    kept = revealed[move.index]
    rest = tuple(card for i, card in enumerate(revealed) if i != move.index)
    p = state.players[player]
    state = state.with_player(player, p.with_hand(p.hand + (kept,)))
    state = state.with_discard(state.discard + rest)
    state = state.logged(
        f"{_label(player)} keeps one of {len(revealed)} revealed cards",
        GameEvent(EventKind.CARDS_DRAWN, player=player, amount=1),
    )
    return advance_turn(state)


# ---------------------------------------------------------------------------
# Discards (effect, build cost and cleanup)
# ---------------------------------------------------------------------------


def _toggled(selected: tuple[int, ...], index: int) -> tuple[int, ...]:
    if index in selected:
        return tuple(i for i in selected if i != index)
    return selected + (index,)


def _execute_toggle_discard(state: GameState, player: int, move: ToggleDiscard) -> GameState:
    _require_phase(state, GamePhase.DISCARD, GamePhase.CLEANUP)
    hand = state.players[player].hand

    if state.phase == GamePhase.CLEANUP:
        record = state.cleanup_state.players[player]
        if not can_toggle_cleanup(hand, record, move.index):
            raise IllegalMoveError(f"Cannot toggle hand card {move.index!r}")
        record = replace(record, selected=_toggled(record.selected, move.index))
        return state.updated(cleanup_state=state.cleanup_state.with_player(player, record))

    discard = state.discard_state
    if not can_toggle_discard(hand, discard, move.index):
        raise IllegalMoveError(f"Cannot toggle hand card {move.index!r}")
    return state.updated(discard_state=replace(discard, selected=_toggled(discard.selected, move.index)))


def _execute_confirm_discard(state: GameState, player: int) -> GameState:
    _require_phase(state, GamePhase.DISCARD, GamePhase.CLEANUP)

    if state.phase == GamePhase.CLEANUP:
        record = state.cleanup_state.players[player]
        if len(record.selected) != record.excess_count:
            raise IllegalMoveError(f"Select exactly {record.excess_count} card(s)")
        state = discard_hand_cards(state, player, record.selected)
        state = state.logged(
            f"{_label(player)} discards {record.excess_count} card(s) down to the hand limit",
            GameEvent(EventKind.CARDS_DISCARDED, player=player, amount=record.excess_count),
        )
        record = replace(record, selected=(), confirmed=True)
        state = state.updated(cleanup_state=state.cleanup_state.with_player(player, record))
        return finish_cleanup_if_done(state)

    discard = state.discard_state
    if not discard_complete(state.players[player].hand, discard):
        raise IllegalMoveError(f"Selection does not pay {discard.count}")
    state = discard_hand_cards(state, player, discard.selected)
    state = state.logged(
        f"{_label(player)} discards {len(discard.selected)} card(s)",
        GameEvent(EventKind.CARDS_DISCARDED, player=player, amount=len(discard.selected)),
    )

    match discard.reason:
        case DiscardReason.SELL | DiscardReason.INCOME:
            state = gain_money(state, player, discard.payout)
        case DiscardReason.DRAW:
            state = draw_cards(state, player, discard.payout)
        case DiscardReason.BUILD_COST | DiscardReason.DUAL_BUILD_COST:
            return complete_build(state, player, discard.build_uids, discard.build)
    return advance_turn(state)


# ---------------------------------------------------------------------------
# Payday
# ---------------------------------------------------------------------------


def _execute_toggle_payday(state: GameState, player: int, move: TogglePaydaySell) -> GameState:
    _require_phase(state, GamePhase.PAYDAY)
    record = state.payday_state.players[player]
    p = state.players[player]
    if not can_toggle_payday_sell(state, p, move.building_index):
        raise IllegalMoveError(f"Cannot sell structure {move.building_index!r}")
    record = replace(record, selected=_toggled(record.selected, move.building_index))
    return state.updated(payday_state=state.payday_state.with_player(player, record))


def _execute_confirm_payday(state: GameState, player: int) -> GameState:
    _require_phase(state, GamePhase.PAYDAY)
    record = state.payday_state.players[player]
    if record.confirmed:
        raise IllegalMoveError("Payday already settled")
    if not payday_selection_valid(state, player):
        raise IllegalMoveError("Invalid sale selection")

    p = state.players[player]
    sold = set(record.selected)
    workplaces = list(state.workplaces)
    for i in sorted(sold):
        card = p.buildings[i].card
        definition = definition_of(state, card)
        workplaces.append(sold_building_workplace(card, definition, state.round))
        state = state.logged(
            f"{_label(player)} sells [{definition.name}] for ${definition.vp}",
            GameEvent(EventKind.STRUCTURE_SOLD, player=player, amount=definition.vp, def_id=definition.id),
        )
        p = p.with_money(p.money + definition.vp)
    p = p.with_buildings(tuple(b for i, b in enumerate(p.buildings) if i not in sold))
    state = state.with_player(player, p).updated(workplaces=tuple(workplaces))

    state = pay_wages(state, player, record.total_wage)
    record = replace(record, selected=(), confirmed=True)
    state = state.updated(payday_state=state.payday_state.with_player(player, record))
    return finish_payday_if_done(state)


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------


def _execute_cancel(state: GameState, player: int) -> GameState:
    _require_phase(state, GamePhase.BUILD, GamePhase.DISCARD, GamePhase.DESIGN_OFFICE, GamePhase.DUAL_CONSTRUCTION)
    origin = state.sub_state.origin

    if state.design_office_state is not None:
        state = state.with_deck(state.design_office_state.revealed + state.deck)

    p = state.players[player]
    p = p.updated(available_workers=p.available_workers + origin.workers)
    if origin.building_uid is not None:
        index = p.building_index(origin.building_uid)
        buildings = list(p.buildings)
        buildings[index] = Building(card=buildings[index].card)
        p = p.with_buildings(tuple(buildings))
    state = state.with_player(player, p)

    if origin.workplace_id is not None:
        workplace = state.workplace(origin.workplace_id)
        occupants = list(workplace.workers)
        for _ in range(origin.workers):
            del occupants[len(occupants) - 1 - occupants[::-1].index(player)]
        state = state.with_workplace(workplace.with_workers(tuple(occupants)))

    state = state.with_phase(GamePhase.WORK)
    return state.logged(
        f"{_label(player)} cancels and takes the worker back",
        GameEvent(EventKind.ACTION_CANCELLED, player=player, amount=origin.workers),
    )
