"""Tests for final scoring."""

from econ_engine.catalog import CONSUMABLE_DEF_ID, Card, default_catalog
from econ_engine.scoring import ScoreBreakdown, compute_scores, rank_scores, score_player, token_vp
from econ_engine.state import Building, PlayerState, create_initial_state


def player_with(*def_ids, **changes):
    buildings = tuple(Building(Card(f"b{i}", d)) for i, d in enumerate(def_ids))
    return PlayerState(hand=(), money=0, buildings=buildings).updated(**changes)


def score(player):
    return score_player(default_catalog(), 0, player)


class TestScorePlayer:
    def test_components_sum_to_total(self):
        result = score(player_with("coffee_shop", "farm", money=7, unpaid_debts=2))
        assert result.building_vp == 14
        assert result.money_vp == 7
        assert result.debt_vp == -6
        assert result.bonus_vp == 0
        assert result.total == result.building_vp + result.bonus_vp + result.money_vp + result.debt_vp
        assert result.total == 15

    def test_law_office_exempts_debts(self):
        result = score(player_with("law_office", unpaid_debts=7))
        assert result.exempted_debts == 5
        assert result.debt_vp == -6

    def test_real_estate(self):
        result = score(player_with("real_estate", "farm", "farm"))
        assert result.bonuses == (("real_estate", 9),)

    def test_agri_coop_counts_consumables(self):
        hand = (Card("k0", CONSUMABLE_DEF_ID), Card("k1", CONSUMABLE_DEF_ID), Card("a", "farm"))
        result = score(player_with("agri_coop", hand=hand))
        assert result.bonuses == (("agri_coop", 6),)

    def test_labor_union(self):
        result = score(player_with("labor_union", workers=4))
        assert dict(result.bonuses)["labor_union"] == 24

    def test_headquarters_counts_unsellable(self):
        result = score(player_with("headquarters", "warehouse", "farm"))
        assert dict(result.bonuses)["headquarters"] == 12

    def test_railroad_counts_factories(self):
        result = score(player_with("railroad", "factory", "steel_mill"))
        assert dict(result.bonuses)["railroad"] == 16

    def test_tokens(self):
        result = score(player_with(vp_tokens=7))
        assert result.token_vp == 21
        assert result.bonus_vp == 21

    def test_guild_hall_needs_farm_and_factory(self):
        assert dict(score(player_with("gl_guild_hall", "farm")).bonuses)["gl_guild_hall"] == 0
        assert dict(score(player_with("gl_guild_hall", "farm", "factory")).bonuses)["gl_guild_hall"] == 20

    def test_temple_alone(self):
        assert dict(score(player_with("gl_temple_of_purification")).bonuses)["gl_temple_of_purification"] == 30
        with_more = score(player_with("gl_temple_of_purification", "warehouse"))
        assert dict(with_more.bonuses)["gl_temple_of_purification"] == 0


class TestTokenVp:
    def test_sets_of_three(self):
        assert token_vp(0) == 0
        assert token_vp(2) == 2
        assert token_vp(3) == 10
        assert token_vp(8) == 22


class TestRanking:
    def test_tie_goes_to_lower_seat(self):
        scores = [
            ScoreBreakdown(player=2, building_vp=0, bonus_vp=0, money_vp=10, debt_vp=0, total=10),
            ScoreBreakdown(player=0, building_vp=0, bonus_vp=0, money_vp=10, debt_vp=0, total=10),
            ScoreBreakdown(player=1, building_vp=0, bonus_vp=0, money_vp=12, debt_vp=0, total=12),
        ]
        assert [s.player for s in rank_scores(scores)] == [1, 0, 2]

    def test_compute_scores_in_seat_order(self):
        state = create_initial_state(3, seed=4, start_player=0)
        scores = compute_scores(state)
        assert [s.player for s in scores] == [0, 1, 2]
        assert [s.total for s in scores] == [5, 6, 7]
