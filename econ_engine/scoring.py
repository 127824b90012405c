"""Final scoring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable

if TYPE_CHECKING:
    from econ_engine.catalog import Catalog
    from econ_engine.state import GameState, PlayerState

DEBT_PENALTY = 3
LAW_OFFICE_EXEMPTION = 5


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    """One player's final score.

    Attributes:
        player: Seat index
        building_vp: Sum of printed VP of owned structures
        bonus_vp: End-of-game structure bonuses plus VP token points
        money_vp: Cash, 1 VP per dollar
        debt_vp: Penalty for unpaid debts (zero or negative)
        total: building_vp + bonus_vp + money_vp + debt_vp
        raw_debts: Unpaid-debt markers held
        exempted_debts: Markers waived by a law office
        token_vp: Part of bonus_vp coming from VP tokens
        bonuses: (definition id, points) for each scoring structure
    """

    player: int
    building_vp: int
    bonus_vp: int
    money_vp: int
    debt_vp: int
    total: int
    raw_debts: int = 0
    exempted_debts: int = 0
    token_vp: int = 0
    bonuses: tuple[tuple[str, int], ...] = ()


def token_vp(tokens: int) -> int:
    """Every full set of three tokens scores 10, leftovers score 1 each."""
    return 10 * (tokens // 3) + tokens % 3


def _vp_of(catalog: Catalog, player: PlayerState, predicate: Callable) -> int:
    total = 0
    for building in player.buildings:
        definition = catalog.get(building.card.def_id)
        if predicate(definition):
            total += definition.vp
    return total


def _count(catalog: Catalog, player: PlayerState, predicate: Callable) -> int:
    return sum(1 for b in player.buildings if predicate(catalog.get(b.card.def_id)))


def structure_bonuses(catalog: Catalog, player: PlayerState) -> list[tuple[str, int]]:
    """End-of-game bonus of every scoring structure the player owns."""
    bonuses: list[tuple[str, int]] = []
    owned = {b.card.def_id for b in player.buildings}

    def add(def_id: str, points: int) -> None:
        if def_id in owned:
            bonuses.append((def_id, points))

    add("real_estate", 3 * len(player.buildings))
    add("agri_coop", 3 * player.consumable_count)
    add("labor_union", 6 * player.workers)
    add("headquarters", 6 * _count(catalog, player, lambda d: d.unsellable))
    add("railroad", 8 * _count(catalog, player, lambda d: d.is_factory))

    # Glory structures: all-or-nothing conditions
    farms = _count(catalog, player, lambda d: d.is_farm)
    factories = _count(catalog, player, lambda d: d.is_factory)
    unsellable = _count(catalog, player, lambda d: d.unsellable)
    add("gl_consumers_coop", 18 if _vp_of(catalog, player, lambda d: d.is_farm) >= 20 else 0)
    add("gl_guild_hall", 20 if farms and factories else 0)
    add("gl_ivory_tower", 22 if player.vp_tokens >= 7 else 0)
    add("gl_revolution_square", 18 if player.human_workers >= 5 else 0)
    add("gl_harvest_festival", 26 if player.consumable_count >= 4 else 0)
    add("gl_tech_exhibition", 24 if _vp_of(catalog, player, lambda d: d.is_factory) >= 30 else 0)
    add("gl_temple_of_purification", 30 if unsellable == 1 else 0)
    return bonuses


def score_player(catalog: Catalog, index: int, player: PlayerState) -> ScoreBreakdown:
    building_vp = _vp_of(catalog, player, lambda d: True)
    bonuses = tuple(structure_bonuses(catalog, player))
    tokens = token_vp(player.vp_tokens)
    bonus_vp = sum(points for _, points in bonuses) + tokens

    exempted = 0
    if player.owns("law_office"):
        exempted = min(player.unpaid_debts, LAW_OFFICE_EXEMPTION)
    debt_vp = -DEBT_PENALTY * (player.unpaid_debts - exempted)

    return ScoreBreakdown(
        player=index,
        building_vp=building_vp,
        bonus_vp=bonus_vp,
        money_vp=player.money,
        debt_vp=debt_vp,
        total=building_vp + bonus_vp + player.money + debt_vp,
        raw_debts=player.unpaid_debts,
        exempted_debts=exempted,
        token_vp=tokens,
        bonuses=bonuses,
    )


def compute_scores(state: GameState) -> list[ScoreBreakdown]:
    """Score every player, in seat order."""
    return [score_player(state.catalog, i, p) for i, p in enumerate(state.players)]


def rank_scores(scores: Iterable[ScoreBreakdown]) -> list[ScoreBreakdown]:
    """Order by total descending; ties go to the lower seat index."""
    return sorted(scores, key=lambda s: (-s.total, s.player))
