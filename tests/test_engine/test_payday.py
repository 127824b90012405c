"""Tests for payday, cleanup and round transitions."""

import pytest

from econ_engine.catalog import CONSUMABLE_DEF_ID, Card
from econ_engine.events import EventKind
from econ_engine.executor import IllegalMoveError, apply_move, execute_move
from econ_engine.move_generator import generate_legal_moves
from econ_engine.moves import (
    ConfirmDiscard,
    ConfirmPaydaySell,
    PlaceWorker,
    ToggleDiscard,
    TogglePaydaySell,
)
from econ_engine.rules import acting_players
from econ_engine.state import Building, GamePhase, create_initial_state
from econ_engine.workplaces import WorkplaceEffect


def last_action_state(p0=None, p1=None, round_number=1):
    """P1 holds the last worker of the round; the next placement ends it.

    `p0` and `p1` are field overrides for the two players.
    """
    state = create_initial_state(2, seed=11, start_player=0).updated(round=round_number)
    first = state.players[0].updated(available_workers=1, **(p0 or {}))
    second = state.players[1].updated(available_workers=0, **(p1 or {}))
    return state.with_players((first, second))


def structures(*def_ids, prefix="s"):
    return tuple(Building(Card(f"{prefix}{i}", d)) for i, d in enumerate(def_ids))


def events(state, kind):
    return [e.event for e in state.log if e.event is not None and e.event.kind == kind]


class TestWages:
    def test_everyone_pays(self):
        state = last_action_state({"money": 5}, {"money": 6})
        state = execute_move(state, 0, PlaceWorker("mine"))

        assert state.players[0].money == 1
        assert state.players[1].money == 2
        assert state.household == 8
        assert len(events(state, EventKind.WAGES_PAID)) == 2

    def test_debt_without_structures(self):
        state = last_action_state({"money": 1}, {"money": 6})
        state = execute_move(state, 0, PlaceWorker("mine"))

        player = state.players[0]
        assert player.money == 0
        assert player.unpaid_debts == 3
        assert state.household == 1 + 4
        assert events(state, EventKind.DEBT_INCURRED)[0].amount == 3

    def test_only_unsellable_structures(self):
        state = last_action_state({"money": 0, "buildings": structures("warehouse")}, {"money": 6})
        state = execute_move(state, 0, PlaceWorker("mine"))
        assert state.phase == GamePhase.WORK
        assert state.players[0].unpaid_debts == 4
        assert len(state.players[0].buildings) == 1


class TestPaydaySales:
    def selling_state(self):
        state = last_action_state(
            {"money": 0, "buildings": structures("farm", "coffee_shop")}, {"money": 6}
        )
        return execute_move(state, 0, PlaceWorker("mine"))

    def test_payday_waits_for_seller(self):
        state = self.selling_state()
        assert state.phase == GamePhase.PAYDAY
        assert acting_players(state) == (0,)
        # P2 already paid
        assert state.players[1].money == 2
        assert generate_legal_moves(state, 0) == [TogglePaydaySell(0), TogglePaydaySell(1)]
        assert generate_legal_moves(state, 1) == []

    def test_empty_selection_rejected(self):
        state = self.selling_state()
        with pytest.raises(IllegalMoveError):
            execute_move(state, 0, ConfirmPaydaySell())

    def test_oversell_rejected(self):
        state = self.selling_state()
        state = execute_move(state, 0, TogglePaydaySell(0))
        state = execute_move(state, 0, TogglePaydaySell(1))
        assert ConfirmPaydaySell() not in generate_legal_moves(state, 0)
        assert apply_move(state, 0, ConfirmPaydaySell()) is state

    def test_sell_and_pay(self):
        state = self.selling_state()
        state = execute_move(state, 0, TogglePaydaySell(0))
        state = execute_move(state, 0, ConfirmPaydaySell())

        player = state.players[0]
        # Farm sold for $6, $4 wages paid
        assert player.money == 2
        assert [b.card.def_id for b in player.buildings] == ["coffee_shop"]
        assert state.household == 8
        assert events(state, EventKind.STRUCTURE_SOLD)[0].amount == 6

        sold = state.workplace("sold_s0")
        assert sold.effect == WorkplaceEffect.SOLD_BUILDING
        assert sold.source_card == Card("s0", "farm")
        assert state.round == 2

    def test_sold_structure_becomes_public(self):
        state = self.selling_state()
        state = execute_move(state, 0, TogglePaydaySell(0))
        state = execute_move(state, 0, ConfirmPaydaySell())
        assert state.current_player == 0

        state = execute_move(state, 0, PlaceWorker("sold_s0"))
        hand = state.players[0].hand
        assert hand[-2:] == (Card("k0", CONSUMABLE_DEF_ID), Card("k1", CONSUMABLE_DEF_ID))
        assert state.workplace("sold_s0").workers == (0,)

    def test_unsellable_cannot_be_toggled(self):
        state = last_action_state(
            {"money": 0, "buildings": structures("warehouse", "farm")}, {"money": 6}
        )
        state = execute_move(state, 0, PlaceWorker("mine"))
        assert apply_move(state, 0, TogglePaydaySell(0)) is state
        assert apply_move(state, 0, TogglePaydaySell(2)) is state


class TestSimultaneousPayday:
    def both_selling(self):
        state = last_action_state(
            {"money": 0, "buildings": structures("farm")},
            {"money": 0, "buildings": structures("farm", prefix="t")},
        )
        return execute_move(state, 0, PlaceWorker("mine"))

    def test_any_order(self):
        state = self.both_selling()
        assert acting_players(state) == (0, 1)

        state = execute_move(state, 1, TogglePaydaySell(0))
        state = execute_move(state, 1, ConfirmPaydaySell())
        assert state.phase == GamePhase.PAYDAY
        assert acting_players(state) == (0,)

        state = execute_move(state, 0, TogglePaydaySell(0))
        state = execute_move(state, 0, ConfirmPaydaySell())
        assert state.phase == GamePhase.WORK
        assert state.round == 2

    def test_confirm_is_idempotent(self):
        state = self.both_selling()
        state = execute_move(state, 1, TogglePaydaySell(0))
        state = execute_move(state, 1, ConfirmPaydaySell())
        money = state.players[1].money

        with pytest.raises(IllegalMoveError):
            execute_move(state, 1, ConfirmPaydaySell())
        after = apply_move(state, 1, ConfirmPaydaySell())
        assert after is state
        assert after.players[1].money == money


class TestCleanup:
    def over_limit(self):
        hand = (
            Card("k0", CONSUMABLE_DEF_ID),
            Card("k1", CONSUMABLE_DEF_ID),
            Card("a", "farm"),
            Card("b", "farm"),
            Card("c", "farm"),
            Card("d", "farm"),
        )
        state = last_action_state({"hand": hand}, {"money": 6})
        # The mine draw brings P1 to 7 cards
        return execute_move(state, 0, PlaceWorker("mine"))

    def test_cleanup_opens(self):
        state = self.over_limit()
        assert state.phase == GamePhase.CLEANUP
        assert state.cleanup_state.players[0].excess_count == 2
        assert acting_players(state) == (0,)

    def test_selection_capped_at_excess(self):
        state = self.over_limit()
        state = execute_move(state, 0, ToggleDiscard(0))
        state = execute_move(state, 0, ToggleDiscard(1))
        with pytest.raises(IllegalMoveError):
            execute_move(state, 0, ToggleDiscard(2))

    def test_must_discard_exact_count(self):
        state = self.over_limit()
        state = execute_move(state, 0, ToggleDiscard(0))
        assert apply_move(state, 0, ConfirmDiscard()) is state

    def test_discard_down_to_limit(self):
        state = self.over_limit()
        discard = state.discard
        state = execute_move(state, 0, ToggleDiscard(0))
        state = execute_move(state, 0, ToggleDiscard(1))
        state = execute_move(state, 0, ConfirmDiscard())

        assert len(state.players[0].hand) == 5
        # Consumables vanish instead of reaching the discard pile
        assert state.discard == discard
        assert state.round == 2
        assert state.phase == GamePhase.WORK

    def test_warehouse_raises_limit(self):
        hand = tuple(Card(f"x{i}", "farm") for i in range(6))
        state = last_action_state({"hand": hand, "hand_limit": 9}, {"money": 6})
        state = execute_move(state, 0, PlaceWorker("mine"))
        assert state.round == 2


class TestRoundTransition:
    def test_new_round(self):
        state = last_action_state({"money": 5}, {"money": 6})
        state = execute_move(state, 0, PlaceWorker("mine"))

        assert state.round == 2
        assert state.phase == GamePhase.WORK
        assert state.current_player == state.start_player
        assert all(p.available_workers == p.workers for p in state.players)
        assert all(not w.workers for w in state.workplaces)
        assert state.workplace("stall") is not None
        events_ = events(state, EventKind.ROUND_STARTED)
        assert events_[-1].amount == 2

    def test_used_slash_and_burn_is_discarded(self):
        buildings = (Building(Card("s", "slash_burn"), worker_placed=True), Building(Card("f", "farm")))
        state = last_action_state({"money": 5, "buildings": buildings}, {"money": 6})
        state = execute_move(state, 0, PlaceWorker("mine"))
        assert [b.card.uid for b in state.players[0].buildings] == ["f"]
        assert Card("s", "slash_burn") in state.discard

    def test_unused_slash_and_burn_stays(self):
        state = last_action_state({"money": 5, "buildings": structures("slash_burn")}, {"money": 6})
        state = execute_move(state, 0, PlaceWorker("mine"))
        assert len(state.players[0].buildings) == 1

    def test_game_ends_after_round_nine(self):
        state = last_action_state({"money": 20}, {"money": 20}, round_number=9)
        state = execute_move(state, 0, PlaceWorker("mine"))

        assert state.phase == GamePhase.GAME_END
        assert state.is_game_over
        state.check_sub_state()
        # $20 - 2 workers x $5 each; tie goes to the lower seat
        assert [s.player for s in state.final_scores] == [0, 1]
        assert [s.total for s in state.final_scores] == [10, 10]
        assert generate_legal_moves(state, 0) == []
        assert apply_move(state, 0, PlaceWorker("mine")) is state
