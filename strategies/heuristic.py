"""Heuristic strategy for National Economy.

Scores every legal move and plays the best one, breaking ties at random.
The weights follow a few observations about the game:

1. Cash at payday matters most; a debt marker costs 3 VP.
2. Extra workers pay off early and are a burden late.
3. Selling consumables is the cheapest way to raise cash.
4. Structures with a worker effect are worth more the earlier they come.
5. Scoring structures are worth holding on to for the last rounds.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from econ_engine.catalog import BUILD_EFFECTS, Effect
from econ_engine.moves import (
    CancelAction,
    PlaceWorker,
    PlaceWorkerOnBuilding,
    SelectBuildCard,
    SelectDesignOfficeCard,
)
from econ_engine.rules import (
    build_state_for,
    can_build_card,
    card_cost,
    income_payout,
    wage_owed,
    wage_per_worker,
)
from econ_engine.scoring import score_player
from econ_engine.state import FINAL_ROUND, BuildState, Building, WorkerOrigin
from econ_engine.workplaces import WorkplaceEffect
from strategies.base import SelectionStrategy

if TYPE_CHECKING:
    from econ_engine.catalog import Card, CardDefinition
    from econ_engine.moves import Move
    from econ_engine.state import GameState, PlayerState
    from econ_engine.workplaces import Workplace

SCORING_STRUCTURES = frozenset(
    {
        "real_estate",
        "agri_coop",
        "labor_union",
        "headquarters",
        "railroad",
        "gl_consumers_coop",
        "gl_guild_hall",
        "gl_ivory_tower",
        "gl_revolution_square",
        "gl_harvest_festival",
        "gl_tech_exhibition",
        "gl_temple_of_purification",
    }
)
KEY_ENGINES = frozenset({"dual_construction", "auto_factory", "steel_mill", "chemical_plant"})
CASH_ENGINES = frozenset({"restaurant", "coffee_shop", "gl_theater", "gl_museum", "gl_game_cafe"})

# Value of a card we cannot see (drawn in a simulated view)
UNKNOWN_CARD_VALUE = 5.0


def game_stage(round_number: int) -> str:
    if round_number <= 3:
        return "early"
    if round_number <= 6:
        return "mid"
    return "late"


def cash_shortfall(state: GameState, player: PlayerState) -> int:
    """How much cash is missing for this round's wages."""
    return wage_owed(player, state.round) - player.money


def bonus_gain_if_built(state: GameState, player_idx: int, card: Card) -> int:
    """Change in final score if `card` were built right now."""
    player = state.players[player_idx]
    before = score_player(state.catalog, player_idx, player).total
    after_player = player.updated(
        hand=tuple(c for c in player.hand if c.uid != card.uid),
        buildings=player.buildings + (Building(card=card),),
    )
    return score_player(state.catalog, player_idx, after_player).total - before


def build_score(state: GameState, player_idx: int, card: Card) -> float:
    """Desirability of building `card`."""
    definition = state.catalog.get(card.def_id)
    player = state.players[player_idx]
    rounds_left = FINAL_ROUND - state.round
    score = float(bonus_gain_if_built(state, player_idx, card))
    if definition.effect is not None:
        score += 2 * rounds_left
    if definition.id in KEY_ENGINES:
        score += rounds_left
    if player.owns(definition.id) and definition.effect is not None:
        score -= 4
    if definition.id == "warehouse" and len(player.hand) > player.hand_limit:
        score += 6
    return score


def evaluate_build_opportunity(state: GameState, player_idx: int, build: BuildState) -> float:
    """Value of entering a build with the given parameters."""
    player = state.players[player_idx]
    best = 0.0
    for i, card in enumerate(player.hand):
        if can_build_card(state, player, i, build):
            best = max(best, build_score(state, player_idx, card))
    if best <= 0:
        return 0.0
    build_bonus = 30 if not player.buildings else 15 if len(player.buildings) < 3 else 5
    draw_bonus = 8 if build.draw_after or build.draw_if_empty else 0
    return min(100.0, 55 + best / 2.5 + build_bonus + draw_bonus)


def evaluate_structure(state: GameState, player_idx: int, definition: CardDefinition) -> float:
    """Value of using a structure's worker effect now."""
    player = state.players[player_idx]
    shortfall = cash_shortfall(state, player)
    cash_need = 30 if shortfall > 0 else 0
    effect = definition.effect
    if effect in BUILD_EFFECTS:
        return evaluate_build_opportunity(state, player_idx, build_state_for(definition, WorkerOrigin())) + 5

    match effect:
        case Effect.CONSUMABLES | Effect.POULTRY:
            return 40 + definition.amount * 5
        case Effect.ORCHARD:
            return 40 + max(0, definition.amount - len(player.hand)) * 5
        case Effect.DRAW:
            return 45 + definition.amount * 4
        case Effect.CHEMICAL:
            return 45 + (4 if not player.hand else 2) * 4
        case Effect.STUDIO:
            return 50
        case Effect.INCOME | Effect.GAME_CAFE | Effect.MUSEUM:
            return 50 + income_payout(state, player, definition) * 2 + cash_need
        case Effect.DISCARD_DRAW:
            return 45 + (definition.amount - definition.discard) * 6
        case Effect.DISCARD_INCOME:
            return 55 + definition.amount + cash_need
        case Effect.DUAL_BUILD:
            return 90
        case Effect.DESIGN_OFFICE:
            return 50
        case Effect.ROBOT:
            return 70
    return 0


def evaluate_workplace(state: GameState, player_idx: int, workplace: Workplace) -> float:
    """Value of placing a worker on a public workplace."""
    player = state.players[player_idx]
    stage = game_stage(state.round)
    shortfall = cash_shortfall(state, player)
    is_last_worker = player.available_workers == 1
    wage = wage_per_worker(state.round)

    match workplace.effect:
        case WorkplaceEffect.SELL:
            efficiency_bonus = (workplace.amount / 6 - 1) * 8
            pays_with_consumables = player.consumable_count >= workplace.discard
            if shortfall > 0:
                base = 90 if pays_with_consumables else 80
                return min(base + efficiency_bonus, 100)
            if pays_with_consumables:
                if stage == "late":
                    return min(85 + efficiency_bonus, 98)
                return min(40 + efficiency_bonus, 70)
            if len(player.hand) > player.hand_limit:
                return min(45 + efficiency_bonus, 75)
            if stage == "late":
                return min(40 + efficiency_bonus, 75)
            return min(10 + efficiency_bonus, 50)
        case WorkplaceEffect.HIRE:
            if is_last_worker and shortfall > 0:
                return 10
            if shortfall > wage * 2 and stage != "early":
                return 5
            if stage == "early":
                return 150 if player.workers <= 2 else 110 if player.workers == 3 else 80
            if stage == "mid":
                return 80 if player.workers <= 3 else 5
            return 3
        case WorkplaceEffect.HIRE_IMMEDIATE:
            return 60 if shortfall + wage <= 0 else 15
        case WorkplaceEffect.EXPAND:
            if is_last_worker and shortfall > 0:
                return 10
            return 70 if stage != "late" else 5
        case WorkplaceEffect.BUILD:
            return evaluate_build_opportunity(state, player_idx, BuildState(WorkerOrigin()))
        case WorkplaceEffect.START_PLAYER_DRAW:
            return 35 + (10 if len(player.hand) <= 2 else 0)
        case WorkplaceEffect.DRAW:
            return 30 - len(player.hand) * 2
        case WorkplaceEffect.RUINS:
            return 45
        case WorkplaceEffect.SOLD_BUILDING:
            definition = state.catalog.get(workplace.source_def_id)
            return evaluate_structure(state, player_idx, definition)
    return 0


def card_retain_value(state: GameState, player_idx: int, card: Card) -> float:
    """Value of keeping a hand card (low means fine to discard)."""
    player = state.players[player_idx]
    if card.is_consumable:
        return 8 if player.owns("agri_coop") else 1
    if card.is_hidden:
        return UNKNOWN_CARD_VALUE

    definition = state.catalog.get(card.def_id)
    stage = game_stage(state.round)
    value = float(definition.vp)
    if definition.id in KEY_ENGINES:
        value += 20
    if definition.id in SCORING_STRUCTURES:
        value += 25 if stage == "late" else 12
    if definition.id in CASH_ENGINES:
        value += 10
    if definition.effect in BUILD_EFFECTS:
        value += 8
    if player.owns(definition.id):
        value -= 10
    if stage == "late" and definition.cost <= 1 and definition.vp <= 8:
        value -= 8
    if len(player.hand) - 1 >= card_cost(state, player, card):
        value += 4
    return value


def structure_sale_value(state: GameState, player_idx: int, building_index: int) -> float:
    """Value of keeping a structure through payday (low means sell first)."""
    player = state.players[player_idx]
    definition = state.catalog.get(player.buildings[building_index].card.def_id)
    value = float(definition.vp)
    if definition.effect in BUILD_EFFECTS or definition.id in CASH_ENGINES:
        value += 15
    if definition.effect in (Effect.DRAW, Effect.CONSUMABLES, Effect.ORCHARD):
        value -= 5
    return value


class HeuristicStrategy(SelectionStrategy):
    """Strategy scoring each legal move with hand-tuned evaluators.

    Work placements are rated by what they would yield for the current
    cash position and game stage, builds by the score they would add, and
    discards drop the cards with the lowest retain value.
    """

    def __init__(self, seed: int | str | None = None):
        self._rng = random.Random(seed)

    @property
    def name(self) -> str:
        return "Heuristic"

    def choose(self, state: GameState, player: int, legal_moves: list[Move]) -> Move:
        """Select a move based on heuristic evaluation."""
        scored_moves = [(self._score_move(state, player, move), move) for move in legal_moves]

        best_score = max(score for score, _ in scored_moves)

        # Pick randomly among tied best moves
        best_moves = [move for score, move in scored_moves if score == best_score]
        return self._rng.choice(best_moves)

    def _score_move(self, state: GameState, player: int, move: Move) -> float:
        """Score a move (higher is better)."""
        match move:
            case PlaceWorker(workplace_id=workplace_id):
                return evaluate_workplace(state, player, state.workplace(workplace_id))
            case PlaceWorkerOnBuilding(card_uid=card_uid):
                p = state.players[player]
                building = p.buildings[p.building_index(card_uid)]
                return evaluate_structure(state, player, state.catalog.get(building.card.def_id))
            case SelectBuildCard(index=index):
                p = state.players[player]
                card = p.hand[index]
                cost = card_cost(state, p, card, state.build_state.cost_reduction)
                return build_score(state, player, card) - cost
            case SelectDesignOfficeCard(index=index):
                return card_retain_value(state, player, state.design_office_state.revealed[index])
            case CancelAction():
                return -1000
        return 0

    def card_value(self, state: GameState, player: int, card: Card) -> float:
        return card_retain_value(state, player, card)

    def sale_value(self, state: GameState, player: int, building_index: int) -> float:
        return structure_sale_value(state, player, building_index)

    def pair_value(self, state: GameState, player: int, i: int, j: int) -> float:
        hand = state.players[player].hand
        return build_score(state, player, hand[i]) + build_score(state, player, hand[j])
