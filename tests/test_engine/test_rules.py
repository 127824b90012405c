"""Tests for rule queries."""

import pytest

from econ_engine.catalog import CONSUMABLE_DEF_ID, Card
from econ_engine.rules import (
    acting_players,
    can_build_card,
    can_dual_build_pair,
    can_place_on_workplace,
    card_cost,
    discard_complete,
    income_payout,
    payday_selection_valid,
    wage_owed,
    wage_per_worker,
)
from econ_engine.state import (
    Building,
    BuildState,
    DiscardReason,
    DiscardState,
    GamePhase,
    PaydayPlayerState,
    PaydayState,
    PlayerState,
    WorkerOrigin,
    create_initial_state,
)
from econ_engine.workplaces import round_workplace


def consumable(n):
    return Card(f"k{n}", CONSUMABLE_DEF_ID)


def state_with_hand(hand, **player_changes):
    state = create_initial_state(2, seed=1, start_player=0)
    player = state.players[0].updated(hand=tuple(hand), **player_changes)
    return state.with_player(0, player)


class TestWages:
    @pytest.mark.parametrize(
        "round_number,wage",
        [(1, 2), (2, 2), (3, 3), (5, 3), (6, 4), (7, 4), (8, 5), (9, 5)],
    )
    def test_wage_per_worker(self, round_number, wage):
        assert wage_per_worker(round_number) == wage

    def test_robots_draw_no_wage(self):
        player = PlayerState(hand=(), money=0, workers=4, robot_workers=1)
        assert wage_owed(player, 6) == 12


class TestActingPlayers:
    def test_work_phase_is_exclusive(self):
        state = create_initial_state(3, seed=2, start_player=2)
        assert acting_players(state) == (2,)

    def test_payday_lists_pending_players(self):
        state = create_initial_state(3, seed=2)
        payday = PaydayState(
            wage_per_worker=2,
            players=(
                PaydayPlayerState(total_wage=4, needs_selling=True, confirmed=False),
                PaydayPlayerState(total_wage=4),
                PaydayPlayerState(total_wage=4, needs_selling=True, confirmed=False),
            ),
        )
        state = state.with_phase(GamePhase.PAYDAY, payday_state=payday)
        assert acting_players(state) == (0, 2)


class TestBuildCosts:
    def test_cost_reduction_floors_at_zero(self):
        state = state_with_hand([Card("a", "farm")])
        assert card_cost(state, state.players[0], state.players[0].hand[0], 3) == 0

    def test_build_needs_enough_other_cards(self):
        state = state_with_hand([Card("a", "factory"), Card("b", "farm")])
        player = state.players[0]
        # factory costs 2, only one other card
        assert not can_build_card(state, player, 0, BuildState(WorkerOrigin()))
        assert can_build_card(state, player, 1, BuildState(WorkerOrigin()))

    def test_consumables_cannot_be_built(self):
        state = state_with_hand([consumable(0), consumable(1)])
        assert not can_build_card(state, state.players[0], 0, BuildState(WorkerOrigin(), cost_reduction=99))

    def test_farm_only_build(self):
        state = state_with_hand([Card("a", "coffee_shop"), Card("b", "farm")])
        build = BuildState(WorkerOrigin(), cost_reduction=99, farm_only=True)
        assert not can_build_card(state, state.players[0], 0, build)
        assert can_build_card(state, state.players[0], 1, build)

    def test_consumables_pay_double_for_modernism(self):
        state = state_with_hand([Card("a", "factory"), consumable(0)])
        player = state.players[0]
        assert not can_build_card(state, player, 0, BuildState(WorkerOrigin()))
        assert can_build_card(state, player, 0, BuildState(WorkerOrigin(), consumable_weight=2))

    def test_dual_pair_needs_equal_cost(self):
        hand = [Card("a", "farm"), Card("b", "coffee_shop"), Card("c", "factory"), Card("d", "farm")]
        state = state_with_hand(hand)
        player = state.players[0]
        assert can_dual_build_pair(state, player, 0, 1)
        assert not can_dual_build_pair(state, player, 0, 2)
        assert not can_dual_build_pair(state, player, 0, 0)


class TestWorkplaceEligibility:
    def test_hand_size_gate(self):
        state = state_with_hand([Card("a", "farm")])
        market = round_workplace(3, 2)
        state = state.updated(workplaces=state.workplaces + (market,), household=50)
        assert not can_place_on_workplace(state, 0, market)

    def test_household_must_cover_payout(self):
        state = state_with_hand([Card("a", "farm")])
        stall = round_workplace(2, 2)
        state = state.updated(workplaces=state.workplaces + (stall,), household=5)
        assert not can_place_on_workplace(state, 0, stall)
        assert can_place_on_workplace(state.updated(household=6), 0, stall)

    def test_occupied_workplace(self):
        state = create_initial_state(2, seed=1, start_player=0)
        school = state.workplace("school").with_workers((1,))
        state = state.with_workplace(school)
        assert not can_place_on_workplace(state, 0, school)

    def test_school_respects_worker_cap(self):
        state = state_with_hand([], workers=5, available_workers=1)
        assert not can_place_on_workplace(state, 0, state.workplace("school"))

    def test_no_workers_left(self):
        state = state_with_hand([], available_workers=0)
        assert not can_place_on_workplace(state, 0, state.workplace("mine"))


class TestIncomePayout:
    def test_museum_pays_double_with_five_cards(self):
        hand = [Card(f"x{i}", "farm") for i in range(5)]
        state = state_with_hand(hand)
        museum = state.catalog.get("gl_museum")
        assert income_payout(state, state.players[0], museum) == 14
        state = state_with_hand(hand[:4])
        assert income_payout(state, state.players[0], museum) == 7

    def test_game_cafe_pays_double_as_last_action(self):
        state = create_initial_state(2, seed=1, start_player=0)
        cafe = state.catalog.get("gl_game_cafe")
        assert income_payout(state, state.players[0], cafe) == 5
        players = (
            state.players[0].updated(available_workers=1),
            state.players[1].updated(available_workers=0),
        )
        assert income_payout(state.with_players(players), players[0], cafe) == 10


class TestDiscardComplete:
    def test_exact_count(self):
        hand = (Card("a", "farm"), Card("b", "farm"), Card("c", "farm"))
        discard = DiscardState(count=2, reason=DiscardReason.SELL, origin=WorkerOrigin())
        assert not discard_complete(hand, discard)
        assert discard_complete(hand, DiscardState(2, DiscardReason.SELL, WorkerOrigin(), selected=(0, 2)))

    def test_weighted_selection_must_not_be_redundant(self):
        hand = (consumable(0), consumable(1), Card("c", "farm"))
        build = BuildState(WorkerOrigin(), consumable_weight=2)
        base = dict(count=3, reason=DiscardReason.BUILD_COST, origin=WorkerOrigin(), build=build)
        # 2 + 1 pays 3 exactly
        assert discard_complete(hand, DiscardState(selected=(0, 2), **base))
        # 2 + 2 pays 4; dropping either leaves 2 < 3, still fine
        assert discard_complete(hand, DiscardState(selected=(0, 1), **base))
        # 2 + 2 + 1: the farm is redundant
        assert not discard_complete(hand, DiscardState(selected=(0, 1, 2), **base))


class TestPaydaySelection:
    def payday_state(self, money, buildings, selected, wage=8):
        state = create_initial_state(2, seed=1, start_player=0)
        player = state.players[0].updated(
            money=money, buildings=tuple(Building(Card(f"b{i}", d)) for i, d in enumerate(buildings))
        )
        record = PaydayPlayerState(total_wage=wage, needs_selling=True, selected=selected, confirmed=False)
        payday = PaydayState(wage_per_worker=4, players=(record, PaydayPlayerState(total_wage=8)))
        return state.with_player(0, player).with_phase(GamePhase.PAYDAY, payday_state=payday)

    def test_empty_selection_while_short(self):
        state = self.payday_state(2, ["farm", "coffee_shop"], ())
        assert not payday_selection_valid(state, 0)

    def test_covering_sale(self):
        # $2 + farm $6 covers $8
        state = self.payday_state(2, ["farm", "coffee_shop"], (0,))
        assert payday_selection_valid(state, 0)

    def test_oversell_rejected(self):
        # dropping the farm still covers the wage
        state = self.payday_state(2, ["farm", "coffee_shop"], (0, 1))
        assert not payday_selection_valid(state, 0)

    def test_short_with_unselected_structures(self):
        state = self.payday_state(0, ["farm", "coffee_shop"], (0,))
        assert not payday_selection_valid(state, 0)

    def test_short_after_selling_everything(self):
        state = self.payday_state(0, ["farm", "warehouse"], (0,))
        assert payday_selection_valid(state, 0)
