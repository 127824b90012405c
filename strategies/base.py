"""Base strategy interface for National Economy bots."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

from econ_engine.moves import (
    ConfirmDiscard,
    ConfirmDualConstruction,
    ConfirmPaydaySell,
    ToggleDiscard,
    ToggleDualCard,
    TogglePaydaySell,
)
from econ_engine.rules import can_dual_build_pair, sellable_indices
from econ_engine.state import GamePhase

if TYPE_CHECKING:
    from econ_engine.catalog import Card
    from econ_engine.moves import Move
    from econ_engine.scoring import ScoreBreakdown
    from econ_engine.state import GameState


class Strategy(ABC):
    """Abstract base class for player strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this strategy."""
        ...

    @abstractmethod
    def select_move(self, state: GameState, player: int, legal_moves: list[Move]) -> Move:
        """Select a move from the list of legal moves.

        Args:
            state: Current game state, usually the player's own view.
            player: Seat this strategy is acting for.
            legal_moves: List of all legal moves for that seat.

        Returns:
            The selected move.
        """
        ...

    def on_game_start(self, state: GameState, player_index: int) -> None:
        """Called when a game starts.

        Override to initialize per-game state.
        """
        pass

    def on_game_end(self, state: GameState, scores: Sequence[ScoreBreakdown]) -> None:
        """Called when a game ends with the ranked scores."""
        pass

    def on_move_made(self, state: GameState, move: Move, player: int) -> None:
        """Called after any move is made (by any player)."""
        pass


class SelectionStrategy(Strategy):
    """Strategy that settles multi-step selections one toggle at a time.

    Discards, cleanup, payday sales and dual construction are driven by
    computing an ideal selection, then deselecting what is not in it,
    selecting what is missing, and finally confirming. Subclasses decide
    how cards and structures are valued and what to do in other phases.
    """

    @abstractmethod
    def choose(self, state: GameState, player: int, legal_moves: list[Move]) -> Move:
        """Pick a move in the work, build and design office phases."""
        ...

    @abstractmethod
    def card_value(self, state: GameState, player: int, card: Card) -> float:
        """How much keeping a hand card is worth (low means discard first)."""
        ...

    @abstractmethod
    def sale_value(self, state: GameState, player: int, building_index: int) -> float:
        """How much keeping a structure is worth at payday (low means sell first)."""
        ...

    @abstractmethod
    def pair_value(self, state: GameState, player: int, i: int, j: int) -> float:
        """How good building hand cards i and j together is."""
        ...

    def select_move(self, state: GameState, player: int, legal_moves: list[Move]) -> Move:
        if not legal_moves:
            raise ValueError("No legal moves available")

        match state.phase:
            case GamePhase.DISCARD:
                discard = state.discard_state
                ideal = self.discard_selection(state, player)
                move = _step_toward(ideal, discard.selected, ToggleDiscard, ConfirmDiscard(), legal_moves)
            case GamePhase.CLEANUP:
                record = state.cleanup_state.players[player]
                ideal = self.cleanup_selection(state, player)
                move = _step_toward(ideal, record.selected, ToggleDiscard, ConfirmDiscard(), legal_moves)
            case GamePhase.PAYDAY:
                record = state.payday_state.players[player]
                ideal = self.payday_selection(state, player)
                move = _step_toward(
                    ideal, record.selected, TogglePaydaySell, ConfirmPaydaySell(), legal_moves
                )
            case GamePhase.DUAL_CONSTRUCTION:
                selected = state.dual_construction_state.selected
                ideal = self.dual_selection(state, player)
                move = _step_toward(
                    ideal, selected, ToggleDualCard, ConfirmDualConstruction(), legal_moves
                )
            case _:
                move = None

        if move is None:
            move = self.choose(state, player, legal_moves)
        return move

    # -- ideal selections ---------------------------------------------------

    def discard_selection(self, state: GameState, player: int) -> list[int]:
        """Cheapest cards whose (weighted) total pays the discard exactly."""
        discard = state.discard_state
        hand = state.players[player].hand
        weight = discard.consumable_weight
        candidates = [i for i, card in enumerate(hand) if card.uid not in discard.build_uids]
        candidates.sort(key=lambda i: self.card_value(state, player, hand[i]))

        def worth(i: int) -> int:
            return weight if hand[i].is_consumable else 1

        chosen: list[int] = []
        total = 0
        for i in candidates:
            if total >= discard.count:
                break
            chosen.append(i)
            total += worth(i)

        # Drop cards the rest of the selection already covers, most valuable first
        for i in sorted(chosen, key=lambda i: -self.card_value(state, player, hand[i])):
            if total - worth(i) >= discard.count:
                chosen.remove(i)
                total -= worth(i)
        return chosen

    def cleanup_selection(self, state: GameState, player: int) -> list[int]:
        record = state.cleanup_state.players[player]
        hand = state.players[player].hand
        order = sorted(range(len(hand)), key=lambda i: self.card_value(state, player, hand[i]))
        return order[: record.excess_count]

    def payday_selection(self, state: GameState, player: int) -> list[int]:
        """Sell the least valued structures until the wage is covered, with no surplus sale."""
        record = state.payday_state.players[player]
        p = state.players[player]
        candidates = sellable_indices(state, p)
        candidates.sort(key=lambda i: self.sale_value(state, player, i))

        def vp(i: int) -> int:
            return state.catalog.get(p.buildings[i].card.def_id).vp

        chosen: list[int] = []
        funds = p.money
        for i in candidates:
            if funds >= record.total_wage:
                break
            chosen.append(i)
            funds += vp(i)
        if funds >= record.total_wage:
            for i in sorted(chosen, key=lambda i: -self.sale_value(state, player, i)):
                if funds - vp(i) >= record.total_wage:
                    chosen.remove(i)
                    funds -= vp(i)
        return chosen

    def dual_selection(self, state: GameState, player: int) -> list[int]:
        p = state.players[player]
        n = len(p.hand)
        pairs = [
            (i, j) for i in range(n) for j in range(i + 1, n) if can_dual_build_pair(state, p, i, j)
        ]
        if not pairs:
            return []
        best = max(pairs, key=lambda pair: self.pair_value(state, player, *pair))
        return list(best)


def _step_toward(
    ideal: Sequence[int],
    selected: Sequence[int],
    toggle: type,
    confirm: Move,
    legal_moves: list[Move],
) -> Move | None:
    """Next single move that brings `selected` closer to `ideal`.

    Returns None when no legal step exists so the caller can fall back.
    """
    for i in selected:
        if i not in ideal and toggle(i) in legal_moves:
            return toggle(i)
    for i in ideal:
        if i not in selected and toggle(i) in legal_moves:
            return toggle(i)
    if confirm in legal_moves:
        return confirm
    return None
