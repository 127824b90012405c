"""Phase transitions: turn order, payday, cleanup, round start and game end."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from econ_engine.events import EventKind, GameEvent
from econ_engine.rules import next_player_with_workers, sellable_indices, wage_owed, wage_per_worker
from econ_engine.state import (
    FINAL_ROUND,
    Building,
    CleanupPlayerState,
    CleanupState,
    GamePhase,
    PaydayPlayerState,
    PaydayState,
)
from econ_engine.workplaces import round_workplace

if TYPE_CHECKING:
    from econ_engine.state import GameState

logger = logging.getLogger(__name__)

DEMOLISHED_ON_ROUND_START = "slash_burn"


def advance_turn(state: GameState) -> GameState:
    """Return to the work phase after an action, or start payday."""
    state = state.with_phase(GamePhase.WORK)
    if state.total_available_workers == 0:
        return start_payday(state)
    nxt = next_player_with_workers(state)
    return state.with_current_player(nxt)


# ---------------------------------------------------------------------------
# Payday
# ---------------------------------------------------------------------------


def pay_wages(state: GameState, player_idx: int, owed: int) -> GameState:
    """Pay `owed` from cash; any shortfall becomes debt markers, cash floors at 0."""
    player = state.players[player_idx]
    label = f"P{player_idx + 1}"
    if player.money >= owed:
        state = state.with_player(player_idx, player.with_money(player.money - owed))
        state = state.updated(household=state.household + owed)
        return state.logged(
            f"{label} pays ${owed} in wages (${player.money - owed} left)",
            GameEvent(EventKind.WAGES_PAID, player=player_idx, amount=owed),
        )

    paid = player.money
    debt = owed - paid
    player = player.updated(money=0, unpaid_debts=player.unpaid_debts + debt)
    state = state.with_player(player_idx, player).updated(household=state.household + paid)
    state = state.logged(
        f"{label} pays ${paid} of ${owed}; {debt} unpaid (debts: {player.unpaid_debts})",
        GameEvent(EventKind.DEBT_INCURRED, player=player_idx, amount=debt),
    )
    return state


def start_payday(state: GameState) -> GameState:
    """Settle wages; players who must sell structures get an open record."""
    wage = wage_per_worker(state.round)
    state = state.logged(
        f"--- Payday (wage ${wage} per worker) ---",
        GameEvent(EventKind.PAYDAY_STARTED, amount=wage),
    )
    records = []
    for i, player in enumerate(state.players):
        owed = wage_owed(player, state.round)
        if player.money < owed and sellable_indices(state, player):
            records.append(PaydayPlayerState(total_wage=owed, needs_selling=True, confirmed=False))
            continue
        state = pay_wages(state, i, owed)
        records.append(PaydayPlayerState(total_wage=owed))

    payday = PaydayState(wage_per_worker=wage, players=tuple(records))
    if payday.all_confirmed:
        return start_cleanup(state)
    logger.debug("Payday waiting on players %s", payday.pending_players)
    return state.with_phase(GamePhase.PAYDAY, payday_state=payday)


def finish_payday_if_done(state: GameState) -> GameState:
    if state.payday_state.all_confirmed:
        return start_cleanup(state)
    return state


# ---------------------------------------------------------------------------
# Cleanup
# ---------------------------------------------------------------------------


def start_cleanup(state: GameState) -> GameState:
    """Open a record for every player holding more than the hand limit."""
    records = []
    for player in state.players:
        excess = max(0, len(player.hand) - player.hand_limit)
        records.append(CleanupPlayerState(excess_count=excess, confirmed=excess == 0))
    cleanup = CleanupState(players=tuple(records))
    if cleanup.all_confirmed:
        return finish_round(state)
    logger.debug("Cleanup waiting on players %s", cleanup.pending_players)
    return state.with_phase(GamePhase.CLEANUP, cleanup_state=cleanup)


def finish_cleanup_if_done(state: GameState) -> GameState:
    if state.cleanup_state.all_confirmed:
        return finish_round(state)
    return state


def finish_round(state: GameState) -> GameState:
    if state.round >= FINAL_ROUND:
        return end_game(state)
    return start_next_round(state)


# ---------------------------------------------------------------------------
# Round start and game end
# ---------------------------------------------------------------------------


def start_next_round(state: GameState) -> GameState:
    """Open the next round: new workplace, workers back, used slash-and-burn discarded."""
    round_number = state.round + 1
    state = state.updated(round=round_number)
    state = state.logged(
        f"=== Round {round_number} ===",
        GameEvent(EventKind.ROUND_STARTED, player=state.start_player, amount=round_number),
    )

    discard = list(state.discard)
    workplaces = []
    for workplace in state.workplaces:
        if workplace.source_def_id == DEMOLISHED_ON_ROUND_START and workplace.is_occupied:
            discard.append(workplace.source_card)
            state = state.logged(
                f"Public [{workplace.name}] was used up and discarded",
                GameEvent(EventKind.STRUCTURE_DEMOLISHED, def_id=workplace.source_def_id),
            )
            continue
        workplaces.append(workplace.with_workers(()))

    opened = round_workplace(round_number, state.num_players)
    if opened is not None:
        workplaces.append(opened)

    players = []
    for i, player in enumerate(state.players):
        kept = []
        for building in player.buildings:
            if building.card.def_id == DEMOLISHED_ON_ROUND_START and building.worker_placed:
                discard.append(building.card)
                state = state.logged(
                    f"P{i + 1}'s [{state.catalog.get(building.card.def_id).name}] was used up and discarded",
                    GameEvent(EventKind.STRUCTURE_DEMOLISHED, player=i, def_id=building.card.def_id),
                )
                continue
            kept.append(Building(card=building.card))
        players.append(
            player.updated(available_workers=player.workers, buildings=tuple(kept))
        )

    state = state.updated(
        players=tuple(players),
        discard=tuple(discard),
        workplaces=tuple(workplaces),
        current_player=state.start_player,
    )
    if opened is not None:
        state = state.logged(
            f"New workplace [{opened.name}] opens",
            GameEvent(EventKind.WORKPLACE_OPENED, amount=round_number),
        )
    return state.with_phase(GamePhase.WORK)


def end_game(state: GameState) -> GameState:
    """Compute final scores and enter the terminal phase."""
    from econ_engine.scoring import compute_scores, rank_scores

    scores = rank_scores(compute_scores(state))
    state = state.with_phase(GamePhase.GAME_END).updated(final_scores=tuple(scores))
    winner = scores[0]
    logger.debug("Game over, P%d wins with %d", winner.player + 1, winner.total)
    return state.logged(
        f"=== Game over: P{winner.player + 1} wins with {winner.total} VP ===",
        GameEvent(EventKind.GAME_ENDED, player=winner.player, amount=winner.total),
    )
