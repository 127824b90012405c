"""Pure rule queries shared by the executor, the move generator and bots.

Nothing here changes state; each function answers whether something is
allowed or what it costs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from econ_engine.catalog import BUILD_EFFECTS, Effect
from econ_engine.state import BuildState, GamePhase, WorkerOrigin
from econ_engine.workplaces import WorkplaceEffect

if TYPE_CHECKING:
    from econ_engine.catalog import Card, CardDefinition
    from econ_engine.state import CleanupPlayerState, DiscardState, GameState, PlayerState
    from econ_engine.workplaces import Workplace

FREE_BUILD = 99


def wage_per_worker(round_number: int) -> int:
    """Wage per human worker: 2 up to round 2, 3 up to 5, 4 up to 7, then 5."""
    if round_number <= 2:
        return 2
    if round_number <= 5:
        return 3
    if round_number <= 7:
        return 4
    return 5


def wage_owed(player: PlayerState, round_number: int) -> int:
    """Total wage a player owes this payday; robots draw no wage."""
    return wage_per_worker(round_number) * player.human_workers


def acting_players(state: GameState) -> tuple[int, ...]:
    """Players allowed to submit a move right now."""
    match state.phase:
        case GamePhase.GAME_END:
            return ()
        case GamePhase.PAYDAY:
            return state.payday_state.pending_players if state.payday_state else ()
        case GamePhase.CLEANUP:
            return state.cleanup_state.pending_players if state.cleanup_state else ()
        case _:
            return (state.current_player,)


def is_acting(state: GameState, player: int) -> bool:
    return player in acting_players(state)


def next_player_with_workers(state: GameState) -> int | None:
    """Next seat clockwise from the current player that can still place."""
    n = state.num_players
    for offset in range(1, n + 1):
        idx = (state.current_player + offset) % n
        if state.players[idx].available_workers > 0:
            return idx
    return None


# ---------------------------------------------------------------------------
# Building costs
# ---------------------------------------------------------------------------


def definition_of(state: GameState, card: Card) -> CardDefinition:
    return state.catalog.get(card.def_id)


def card_cost(state: GameState, player: PlayerState, card: Card, cost_reduction: int = 0) -> int:
    """Cards to discard to build `card`, never below zero."""
    definition = definition_of(state, card)
    return max(0, definition.effective_cost(player.vp_tokens) - cost_reduction)


def payment_value(hand: Sequence[Card], exclude_uids: Sequence[str] = (), consumable_weight: int = 1) -> int:
    """What the cards in hand (minus the excluded ones) can pay."""
    return sum(
        consumable_weight if card.is_consumable else 1
        for card in hand
        if card.uid not in exclude_uids
    )


def can_build_card(state: GameState, player: PlayerState, index: int, build: BuildState) -> bool:
    """Whether hand card `index` can be chosen in the given build."""
    if not 0 <= index < len(player.hand):
        return False
    card = player.hand[index]
    if not card.is_building:
        return False
    if build.farm_only and not definition_of(state, card).is_farm:
        return False
    cost = card_cost(state, player, card, build.cost_reduction)
    return payment_value(player.hand, (card.uid,), build.consumable_weight) >= cost


def can_build_anything(state: GameState, player: PlayerState, build: BuildState) -> bool:
    return any(can_build_card(state, player, i, build) for i in range(len(player.hand)))


def dual_pair_cost(state: GameState, player: PlayerState, i: int, j: int) -> int | None:
    """Shared cost of building hand cards i and j together, None if not a valid pair."""
    if i == j or not (0 <= i < len(player.hand) and 0 <= j < len(player.hand)):
        return None
    first, second = player.hand[i], player.hand[j]
    if not (first.is_building and second.is_building):
        return None
    cost_a = card_cost(state, player, first)
    cost_b = card_cost(state, player, second)
    if cost_a != cost_b:
        return None
    return cost_a


def can_dual_build_pair(state: GameState, player: PlayerState, i: int, j: int) -> bool:
    cost = dual_pair_cost(state, player, i, j)
    return cost is not None and len(player.hand) - 2 >= cost


def can_dual_construct(state: GameState, player: PlayerState) -> bool:
    n = len(player.hand)
    return any(can_dual_build_pair(state, player, i, j) for i in range(n) for j in range(i + 1, n))


def build_state_for(definition: CardDefinition, origin: WorkerOrigin) -> BuildState:
    """Build parameters granted by a build-type structure."""
    match definition.effect:
        case Effect.BUILD:
            return BuildState(origin, cost_reduction=definition.amount)
        case Effect.BUILD_DRAW:
            return BuildState(origin, draw_after=definition.amount)
        case Effect.BUILD_FARM_FREE:
            return BuildState(origin, cost_reduction=FREE_BUILD, farm_only=True)
        case Effect.BUILD_FREE:
            return BuildState(origin, cost_reduction=FREE_BUILD)
        case Effect.BUILD_CONSUMABLE:
            return BuildState(origin, consumables_after=definition.amount)
        case Effect.BUILD_SKYSCRAPER:
            return BuildState(origin, draw_if_empty=definition.amount)
        case Effect.BUILD_MODERNISM:
            return BuildState(origin, consumable_weight=2)
    raise ValueError(f"{definition.id} does not build")


# ---------------------------------------------------------------------------
# Worker placement
# ---------------------------------------------------------------------------


def is_last_action(state: GameState, workers_spent: int = 1) -> bool:
    """Whether spending these workers leaves nobody with a worker this round."""
    return state.total_available_workers - workers_spent <= 0


def income_payout(state: GameState, player: PlayerState, definition: CardDefinition) -> int:
    """Cash an income structure pays if used now (worker not yet spent)."""
    match definition.effect:
        case Effect.GAME_CAFE:
            return 10 if is_last_action(state, definition.worker_req) else 5
        case Effect.MUSEUM:
            return 14 if len(player.hand) == 5 else 7
        case Effect.INCOME | Effect.DISCARD_INCOME:
            return definition.amount
    return 0


def structure_effect_allowed(state: GameState, player: PlayerState, definition: CardDefinition) -> bool:
    """Resource gate for using a structure's effect (own or sold)."""
    effect = definition.effect
    if effect is None:
        return False
    if player.available_workers < definition.worker_req:
        return False
    if effect in BUILD_EFFECTS:
        return can_build_anything(state, player, build_state_for(definition, WorkerOrigin()))
    match effect:
        case Effect.INCOME | Effect.GAME_CAFE | Effect.MUSEUM:
            return state.household >= income_payout(state, player, definition)
        case Effect.DISCARD_DRAW:
            return len(player.hand) >= definition.discard
        case Effect.DISCARD_INCOME:
            return len(player.hand) >= definition.discard and state.household >= definition.amount
        case Effect.DUAL_BUILD:
            return can_dual_construct(state, player)
        case Effect.ROBOT:
            return player.workers < player.worker_cap
    return True


def can_place_on_workplace(state: GameState, player_idx: int, workplace: Workplace) -> bool:
    """Eligibility of a public workplace for the given player."""
    player = state.players[player_idx]
    if player.available_workers <= 0:
        return False
    if not workplace.multiple_allowed and workplace.is_occupied:
        return False
    match workplace.effect:
        case WorkplaceEffect.HIRE | WorkplaceEffect.HIRE_IMMEDIATE:
            return player.workers < player.worker_cap
        case WorkplaceEffect.EXPAND:
            return player.workers < workplace.amount
        case WorkplaceEffect.BUILD:
            return can_build_anything(state, player, BuildState(WorkerOrigin()))
        case WorkplaceEffect.SELL:
            return len(player.hand) >= workplace.discard and state.household >= workplace.amount
        case WorkplaceEffect.SOLD_BUILDING:
            return structure_effect_allowed(state, player, definition_of(state, workplace.source_card))
    return True


def can_place_on_building(state: GameState, player_idx: int, card_uid: str) -> bool:
    """Eligibility of one of the player's own structures."""
    player = state.players[player_idx]
    index = player.building_index(card_uid)
    if index is None:
        return False
    building = player.buildings[index]
    if building.worker_placed:
        return False
    return structure_effect_allowed(state, player, definition_of(state, building.card))


# ---------------------------------------------------------------------------
# Selections
# ---------------------------------------------------------------------------


def is_valid_index(index: object, length: int) -> bool:
    """Index is a real int inside [0, length)."""
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < length


def discard_weights(hand: Sequence[Card], selected: Sequence[int], consumable_weight: int) -> list[int]:
    return [consumable_weight if hand[i].is_consumable else 1 for i in selected]


def can_toggle_discard(hand: Sequence[Card], discard: DiscardState, index: object) -> bool:
    """Whether hand card `index` may be toggled in an effect/build discard."""
    if not is_valid_index(index, len(hand)):
        return False
    if hand[index].uid in discard.build_uids:
        return False
    if index in discard.selected:
        return True
    paid = sum(discard_weights(hand, discard.selected, discard.consumable_weight))
    return paid < discard.count


def discard_complete(hand: Sequence[Card], discard: DiscardState) -> bool:
    """Whether the selection pays the discard exactly (no redundant card)."""
    weights = discard_weights(hand, discard.selected, discard.consumable_weight)
    if discard.consumable_weight == 1:
        return len(weights) == discard.count
    total = sum(weights)
    if total < discard.count:
        return False
    return not weights or total - min(weights) < discard.count


def sellable_indices(state: GameState, player: PlayerState) -> list[int]:
    return [
        i
        for i, building in enumerate(player.buildings)
        if not definition_of(state, building.card).unsellable
    ]


def payday_selection_valid(state: GameState, player_idx: int) -> bool:
    """Whether the player's payday selection may be confirmed.

    Rejects an empty selection while short of cash; an oversell, i.e.
    dropping the lowest-valued selected structure would still cover the
    wage; and a shortfall while sellable structures remain unselected.
    """
    record = state.payday_state.players[player_idx]
    player = state.players[player_idx]
    values = [definition_of(state, player.buildings[i].card).vp for i in record.selected]
    funds = player.money + sum(values)
    if not values and player.money < record.total_wage:
        return False
    if values and funds - min(values) >= record.total_wage:
        return False
    all_selected = len(record.selected) == len(sellable_indices(state, player))
    if funds < record.total_wage and not all_selected:
        return False
    return True


def can_toggle_dual(state: GameState, player: PlayerState, selected: Sequence[int], index: object) -> bool:
    """Whether hand card `index` may be toggled in a dual construction."""
    if not is_valid_index(index, len(player.hand)):
        return False
    if index in selected:
        return True
    if not selected:
        return any(can_dual_build_pair(state, player, index, j) for j in range(len(player.hand)))
    return len(selected) == 1 and can_dual_build_pair(state, player, selected[0], index)


def can_toggle_cleanup(hand: Sequence[Card], record: CleanupPlayerState, index: object) -> bool:
    if not is_valid_index(index, len(hand)):
        return False
    return index in record.selected or len(record.selected) < record.excess_count


def can_toggle_payday_sell(state: GameState, player: PlayerState, index: object) -> bool:
    if not is_valid_index(index, len(player.buildings)):
        return False
    return not definition_of(state, player.buildings[index].card).unsellable
