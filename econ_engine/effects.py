"""Card movement helpers and workplace/structure effect resolution."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Sequence

from econ_engine.catalog import BUILD_EFFECTS, CONSUMABLE_DEF_ID, Card, Effect
from econ_engine.events import EventKind, GameEvent
from econ_engine.phases import advance_turn
from econ_engine.rules import build_state_for
from econ_engine.state import (
    Building,
    BuildState,
    DesignOfficeState,
    DiscardReason,
    DiscardState,
    DualConstructionState,
    GamePhase,
)
from econ_engine.workplaces import WorkplaceEffect

if TYPE_CHECKING:
    from econ_engine.catalog import CardDefinition
    from econ_engine.state import GameState, PlayerState, WorkerOrigin
    from econ_engine.workplaces import Workplace

HEAVY_BUILD_COST = 4

# Passive effects applied once when the structure is built.
HAND_LIMIT_BONUS = {"warehouse": 4}
WORKER_CAP_BONUS = {"company_housing": 1}
TOKENS_ON_BUILD = {"gl_relic": 2}


def _label(player_idx: int) -> str:
    return f"P{player_idx + 1}"


# ---------------------------------------------------------------------------
# Card movement
# ---------------------------------------------------------------------------


def take_from_deck(state: GameState, count: int) -> tuple[GameState, tuple[Card, ...]]:
    """Take up to `count` cards from the top, reshuffling the discard pile when empty."""
    deck = list(state.deck)
    discard = list(state.discard)
    shuffles = state.shuffle_count
    drawn: list[Card] = []
    for _ in range(count):
        if not deck:
            if not discard:
                break
            deck, discard = discard, []
            random.Random(f"{state.seed}:{shuffles}").shuffle(deck)
            shuffles += 1
        drawn.append(deck.pop(0))
    state = state.updated(deck=tuple(deck), discard=tuple(discard), shuffle_count=shuffles)
    return state, tuple(drawn)


def draw_cards(state: GameState, player_idx: int, count: int) -> GameState:
    state, drawn = take_from_deck(state, count)
    if not drawn:
        return state
    player = state.players[player_idx]
    state = state.with_player(player_idx, player.with_hand(player.hand + drawn))
    return state.logged(
        f"{_label(player_idx)} draws {len(drawn)} card(s)",
        GameEvent(EventKind.CARDS_DRAWN, player=player_idx, amount=len(drawn)),
    )


def gain_consumables(state: GameState, player_idx: int, count: int) -> GameState:
    if count <= 0:
        return state
    start = state.next_consumable
    new_cards = tuple(Card(uid=f"k{start + i}", def_id=CONSUMABLE_DEF_ID) for i in range(count))
    player = state.players[player_idx]
    state = state.with_player(player_idx, player.with_hand(player.hand + new_cards))
    state = state.updated(next_consumable=start + count)
    return state.logged(
        f"{_label(player_idx)} gains {count} consumable(s)",
        GameEvent(EventKind.CARDS_DRAWN, player=player_idx, amount=count, def_id=CONSUMABLE_DEF_ID),
    )


def gain_money(state: GameState, player_idx: int, amount: int) -> GameState:
    """Move cash from the household to a player."""
    player = state.players[player_idx]
    state = state.with_player(player_idx, player.with_money(player.money + amount))
    state = state.updated(household=state.household - amount)
    return state.logged(
        f"{_label(player_idx)} takes ${amount} from the household",
        GameEvent(EventKind.INCOME, player=player_idx, amount=amount),
    )


def discard_hand_cards(state: GameState, player_idx: int, indices: Sequence[int]) -> GameState:
    """Remove the given hand cards; non-consumables go to the discard pile."""
    player = state.players[player_idx]
    chosen = set(indices)
    removed = [card for i, card in enumerate(player.hand) if i in chosen]
    kept = tuple(card for i, card in enumerate(player.hand) if i not in chosen)
    state = state.with_player(player_idx, player.with_hand(kept))
    return state.with_discard(state.discard + tuple(c for c in removed if not c.is_consumable))


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def build_structure(state: GameState, player_idx: int, card_uid: str) -> GameState:
    """Move a hand card into the player's structures and apply its passive effect."""
    player = state.players[player_idx]
    card = next(c for c in player.hand if c.uid == card_uid)
    definition = state.catalog.get(card.def_id)
    player = player.updated(
        hand=tuple(c for c in player.hand if c.uid != card_uid),
        buildings=player.buildings + (Building(card=card),),
        hand_limit=player.hand_limit + HAND_LIMIT_BONUS.get(card.def_id, 0),
        worker_cap=player.worker_cap + WORKER_CAP_BONUS.get(card.def_id, 0),
        vp_tokens=player.vp_tokens + TOKENS_ON_BUILD.get(card.def_id, 0),
    )
    state = state.with_player(player_idx, player)
    return state.logged(
        f"{_label(player_idx)} builds [{definition.name}]",
        GameEvent(
            EventKind.STRUCTURE_BUILT,
            player=player_idx,
            def_id=card.def_id,
            heavy=definition.cost >= HEAVY_BUILD_COST,
        ),
    )


def complete_build(
    state: GameState, player_idx: int, card_uids: Sequence[str], build: BuildState
) -> GameState:
    """Build the cards, apply after-build bonuses and pass the turn on."""
    for uid in card_uids:
        state = build_structure(state, player_idx, uid)
    if build.draw_after:
        state = draw_cards(state, player_idx, build.draw_after)
    if build.consumables_after:
        state = gain_consumables(state, player_idx, build.consumables_after)
    if build.draw_if_empty and not state.players[player_idx].hand:
        state = draw_cards(state, player_idx, build.draw_if_empty)
    return advance_turn(state)


def enter_build(state: GameState, build: BuildState) -> GameState:
    return state.with_phase(GamePhase.BUILD, build_state=build)


def enter_discard(state: GameState, discard: DiscardState) -> GameState:
    return state.with_phase(GamePhase.DISCARD, discard_state=discard)


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


def resolve_workplace(
    state: GameState, player_idx: int, workplace: Workplace, origin: WorkerOrigin, payout: int = 0
) -> GameState:
    """Apply a public workplace after the worker was placed."""
    player = state.players[player_idx]
    match workplace.effect:
        case WorkplaceEffect.START_PLAYER_DRAW:
            state = draw_cards(state, player_idx, workplace.amount)
            state = state.updated(start_player=player_idx)
        case WorkplaceEffect.DRAW:
            state = draw_cards(state, player_idx, workplace.amount)
        case WorkplaceEffect.HIRE:
            state = _hire(state, player_idx, player.updated(workers=player.workers + 1))
        case WorkplaceEffect.HIRE_IMMEDIATE:
            state = _hire(
                state,
                player_idx,
                player.updated(
                    workers=player.workers + 1, available_workers=player.available_workers + 1
                ),
            )
        case WorkplaceEffect.EXPAND:
            state = _hire(state, player_idx, player.updated(workers=workplace.amount))
        case WorkplaceEffect.BUILD:
            return enter_build(state, BuildState(origin))
        case WorkplaceEffect.SELL:
            return enter_discard(
                state,
                DiscardState(
                    count=workplace.discard,
                    reason=DiscardReason.SELL,
                    origin=origin,
                    payout=workplace.amount,
                    description=f"{workplace.name}: discard {workplace.discard} for ${workplace.amount}",
                ),
            )
        case WorkplaceEffect.RUINS:
            state = state.with_player(player_idx, player.updated(vp_tokens=player.vp_tokens + 1))
            state = gain_consumables(state, player_idx, 1)
        case WorkplaceEffect.SOLD_BUILDING:
            definition = state.catalog.get(workplace.source_card.def_id)
            return resolve_structure(state, player_idx, definition, origin, payout)
    return advance_turn(state)


def _hire(state: GameState, player_idx: int, player: PlayerState) -> GameState:
    state = state.with_player(player_idx, player)
    return state.logged(
        f"{_label(player_idx)} now has {player.workers} workers",
        GameEvent(EventKind.WORKER_HIRED, player=player_idx, amount=player.workers),
    )


def resolve_structure(
    state: GameState,
    player_idx: int,
    definition: CardDefinition,
    origin: WorkerOrigin,
    payout: int = 0,
) -> GameState:
    """Apply a structure's worker effect (own structure or sold workplace)."""
    player = state.players[player_idx]
    effect = definition.effect
    if effect in BUILD_EFFECTS:
        return enter_build(state, build_state_for(definition, origin))

    match effect:
        case Effect.CONSUMABLES:
            state = gain_consumables(state, player_idx, definition.amount)
        case Effect.ORCHARD:
            state = gain_consumables(state, player_idx, definition.amount - len(player.hand))
        case Effect.POULTRY:
            extra = 1 if len(player.hand) % 2 == 1 else 0
            state = gain_consumables(state, player_idx, definition.amount + extra)
        case Effect.DRAW:
            state = draw_cards(state, player_idx, definition.amount)
        case Effect.CHEMICAL:
            state = draw_cards(state, player_idx, 4 if not player.hand else 2)
        case Effect.STUDIO:
            state = state.with_player(player_idx, player.updated(vp_tokens=player.vp_tokens + 1))
            state = draw_cards(state, player_idx, 1)
        case Effect.INCOME | Effect.GAME_CAFE | Effect.MUSEUM:
            state = gain_money(state, player_idx, payout)
        case Effect.DISCARD_DRAW:
            return enter_discard(
                state,
                DiscardState(
                    count=definition.discard,
                    reason=DiscardReason.DRAW,
                    origin=origin,
                    payout=definition.amount,
                    description=f"{definition.name}: discard {definition.discard}, draw {definition.amount}",
                ),
            )
        case Effect.DISCARD_INCOME:
            return enter_discard(
                state,
                DiscardState(
                    count=definition.discard,
                    reason=DiscardReason.INCOME,
                    origin=origin,
                    payout=definition.amount,
                    description=f"{definition.name}: discard {definition.discard} for ${definition.amount}",
                ),
            )
        case Effect.DUAL_BUILD:
            return state.with_phase(
                GamePhase.DUAL_CONSTRUCTION,
                dual_construction_state=DualConstructionState(origin=origin),
            )
        case Effect.DESIGN_OFFICE:
            state, revealed = take_from_deck(state, definition.amount)
            if revealed:
                return state.with_phase(
                    GamePhase.DESIGN_OFFICE,
                    design_office_state=DesignOfficeState(revealed=revealed, origin=origin),
                )
        case Effect.ROBOT:
            state = _hire(
                state,
                player_idx,
                player.updated(
                    workers=player.workers + 1,
                    robot_workers=player.robot_workers + 1,
                    available_workers=player.available_workers + 1,
                ),
            )
    return advance_turn(state)
