"""Tests for card definitions and the catalog."""

import pytest

from econ_engine.catalog import (
    BASE_DEFINITIONS,
    CONSUMABLE_DEF_ID,
    HIDDEN_DEF_ID,
    Card,
    Catalog,
    Edition,
    UnknownCardError,
    default_catalog,
)
from econ_engine.workplaces import WorkplaceEffect, create_initial_workplaces, round_workplace


class TestCard:
    def test_consumable(self):
        card = Card("k0", CONSUMABLE_DEF_ID)
        assert card.is_consumable
        assert not card.is_building

    def test_hidden(self):
        card = Card("c3", HIDDEN_DEF_ID)
        assert card.is_hidden
        assert not card.is_building

    def test_building(self):
        card = Card("c0", "farm")
        assert card.is_building
        assert str(card) == "farm#c0"


class TestCatalog:
    def test_lookup(self):
        catalog = default_catalog()
        farm = catalog.get("farm")
        assert farm.cost == 1
        assert farm.vp == 6
        assert farm.is_farm
        assert "farm" in catalog

    def test_unknown_id_raises(self):
        with pytest.raises(UnknownCardError):
            default_catalog().get("no_such_card")

    def test_unknown_id_is_a_key_error(self):
        with pytest.raises(KeyError):
            default_catalog()["no_such_card"]

    def test_duplicate_definition_rejected(self):
        farm = BASE_DEFINITIONS[0]
        with pytest.raises(ValueError):
            Catalog(base=(farm, farm), glory=())

    def test_base_deck_size_and_uids(self):
        catalog = default_catalog()
        deck = catalog.build_deck(Edition.BASE)
        assert len(deck) == sum(d.copies for d in catalog.deck_definitions(Edition.BASE))
        assert deck[0].uid == "c0"
        assert len({c.uid for c in deck}) == len(deck)

    def test_glory_deck_uses_glory_definitions(self):
        catalog = default_catalog()
        deck = catalog.build_deck(Edition.GLORY)
        assert deck
        assert all(c.def_id.startswith("gl_") for c in deck)

    def test_token_cost(self):
        steam = default_catalog().get("gl_steam_factory")
        assert steam.effective_cost(0) == 2
        assert steam.effective_cost(1) == 2
        assert steam.effective_cost(2) == 1

    def test_unsellable_scoring_structures(self):
        catalog = default_catalog()
        for def_id in ("warehouse", "law_office", "real_estate", "headquarters", "mansion"):
            assert catalog.get(def_id).unsellable


class TestWorkplaces:
    def test_two_player_board(self):
        ids = [w.id for w in create_initial_workplaces(2)]
        assert ids == ["quarry", "mine", "school", "carpenter"]

    @pytest.mark.parametrize("num_players,carpenters", [(2, 1), (3, 2), (4, 3)])
    def test_carpenters_scale_with_players(self, num_players, carpenters):
        workplaces = create_initial_workplaces(num_players)
        assert sum(1 for w in workplaces if w.effect == WorkplaceEffect.BUILD) == carpenters

    def test_glory_adds_ruins(self):
        ids = [w.id for w in create_initial_workplaces(2, Edition.GLORY)]
        assert "ruins" in ids

    def test_only_mine_allows_multiple_workers(self):
        workplaces = create_initial_workplaces(2)
        assert [w.id for w in workplaces if w.multiple_allowed] == ["mine"]

    def test_round_workplaces(self):
        assert round_workplace(1, 2) is None
        stall = round_workplace(2, 2)
        assert stall.effect == WorkplaceEffect.SELL
        assert (stall.discard, stall.amount) == (1, 6)
        assert not stall.multiple_allowed
        assert round_workplace(2, 3).multiple_allowed
        assert round_workplace(9, 2).amount == 30
