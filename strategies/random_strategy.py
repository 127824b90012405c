"""Random strategy for baseline testing."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from econ_engine.moves import CancelAction
from strategies.base import SelectionStrategy

if TYPE_CHECKING:
    from econ_engine.catalog import Card
    from econ_engine.moves import Move
    from econ_engine.state import GameState

# Relative weight of backing out of a half-finished action
CANCEL_WEIGHT = 0.05


class RandomStrategy(SelectionStrategy):
    """Strategy that selects moves at random.

    Work placements are uniform. Cancelling is rarely chosen, and
    selections are random but always complete, so games finish.
    """

    def __init__(self, seed: int | str | None = None, salt: int | str | None = None):
        """Initialize the random strategy.

        Args:
            seed: Optional random seed for reproducibility.
            salt: Seed for the per-card values used in selections. These
                must not change between the toggles of one selection, so
                callers reseeding every move keep the salt fixed.
        """
        self._rng = random.Random(seed)
        self._salt = seed if salt is None else salt

    @property
    def name(self) -> str:
        return "Random"

    def choose(self, state: GameState, player: int, legal_moves: list[Move]) -> Move:
        weights = [CANCEL_WEIGHT if isinstance(m, CancelAction) else 1.0 for m in legal_moves]
        return self._rng.choices(legal_moves, weights=weights, k=1)[0]

    def card_value(self, state: GameState, player: int, card: Card) -> float:
        return self._stable_value(card.uid)

    def sale_value(self, state: GameState, player: int, building_index: int) -> float:
        return self._stable_value(state.players[player].buildings[building_index].card.uid)

    def pair_value(self, state: GameState, player: int, i: int, j: int) -> float:
        hand = state.players[player].hand
        return self._stable_value(f"{hand[i].uid}+{hand[j].uid}")

    def _stable_value(self, key: str) -> float:
        return random.Random(f"{self._salt}:{key}").random()
