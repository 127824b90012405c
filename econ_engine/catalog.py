"""Card definitions and the read-only catalog for National Economy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, auto
from functools import lru_cache
from typing import Iterable

CONSUMABLE_DEF_ID = "__consumable__"
HIDDEN_DEF_ID = "HIDDEN"


class Edition(IntEnum):
    """Which card set the deck is built from."""

    BASE = auto()
    GLORY = auto()


class CardTag(IntEnum):
    """Category tags used by scoring bonuses and farm-only builds."""

    FARM = auto()
    FACTORY = auto()


class Effect(IntEnum):
    """What happens when a worker is placed on a structure."""

    CONSUMABLES = auto()  # gain `amount` consumables
    ORCHARD = auto()  # gain consumables until the hand holds `amount`
    POULTRY = auto()  # gain `amount` consumables, one more if the hand is odd
    DRAW = auto()  # draw `amount` cards
    CHEMICAL = auto()  # draw 4 with an empty hand, otherwise 2
    STUDIO = auto()  # draw 1 card and gain 1 VP token
    INCOME = auto()  # take `amount` from the household
    GAME_CAFE = auto()  # $5, or $10 as the last action of the round
    MUSEUM = auto()  # $7, or $14 with exactly five cards in hand
    DISCARD_DRAW = auto()  # discard `discard`, draw `amount`
    DISCARD_INCOME = auto()  # discard `discard`, take `amount` from the household
    BUILD = auto()  # build with cost reduction `amount`
    BUILD_DRAW = auto()  # build, then draw `amount`
    BUILD_FARM_FREE = auto()
    BUILD_FREE = auto()
    BUILD_CONSUMABLE = auto()  # build, then gain `amount` consumables
    BUILD_SKYSCRAPER = auto()  # build, then draw `amount` if the hand is empty
    BUILD_MODERNISM = auto()  # build, consumables pay double
    DUAL_BUILD = auto()
    DESIGN_OFFICE = auto()  # reveal `amount`, keep one
    ROBOT = auto()  # gain a robot worker


BUILD_EFFECTS = frozenset(
    {
        Effect.BUILD,
        Effect.BUILD_DRAW,
        Effect.BUILD_FARM_FREE,
        Effect.BUILD_FREE,
        Effect.BUILD_CONSUMABLE,
        Effect.BUILD_SKYSCRAPER,
        Effect.BUILD_MODERNISM,
    }
)


class UnknownCardError(KeyError):
    """Raised for a definition id the catalog does not know.

    This is a programming error: every card in play comes from the catalog.
    """


@dataclass(frozen=True, slots=True)
class Card:
    """A single card instance: a unique id plus its definition id."""

    uid: str
    def_id: str

    @property
    def is_consumable(self) -> bool:
        return self.def_id == CONSUMABLE_DEF_ID

    @property
    def is_hidden(self) -> bool:
        return self.def_id == HIDDEN_DEF_ID

    @property
    def is_building(self) -> bool:
        """Whether this card can be built (not a consumable or placeholder)."""
        return self.def_id not in (CONSUMABLE_DEF_ID, HIDDEN_DEF_ID)

    def __str__(self) -> str:
        return f"{self.def_id}#{self.uid}"


@dataclass(frozen=True, slots=True)
class CardDefinition:
    """Static description of a building card.

    Attributes:
        id: Definition id referenced by Card.def_id
        name: Display name
        cost: Base build cost (cards discarded from hand)
        vp: Victory points, also the cash value when sold at payday
        copies: Number of copies in the deck
        tags: Category tags
        unsellable: Cannot be sold at payday
        effect: Worker-placement effect, None if the structure takes no worker
        amount: Main effect parameter (cards, consumables, cash, reduction)
        discard: Cards discarded to use the effect
        worker_req: Workers spent to use the effect
        token_cost: (tokens, cost) -- cost drops to `cost` with that many VP tokens
        effect_text: Display text only
    """

    id: str
    name: str
    cost: int
    vp: int
    copies: int
    tags: frozenset[CardTag] = frozenset()
    unsellable: bool = False
    effect: Effect | None = None
    amount: int = 0
    discard: int = 0
    worker_req: int = 1
    token_cost: tuple[int, int] | None = None
    effect_text: str = ""

    @property
    def is_farm(self) -> bool:
        return CardTag.FARM in self.tags

    @property
    def is_factory(self) -> bool:
        return CardTag.FACTORY in self.tags

    def effective_cost(self, vp_tokens: int = 0) -> int:
        """Build cost before workplace reductions."""
        if self.token_cost is not None and vp_tokens >= self.token_cost[0]:
            return self.token_cost[1]
        return self.cost


_FARM = frozenset({CardTag.FARM})
_FACTORY = frozenset({CardTag.FACTORY})

CONSUMABLE_DEFINITION = CardDefinition(
    id=CONSUMABLE_DEF_ID, name="Consumable", cost=0, vp=0, copies=0, effect_text="Consumable"
)
HIDDEN_DEFINITION = CardDefinition(
    id=HIDDEN_DEF_ID, name="Hidden", cost=0, vp=0, copies=0, effect_text=""
)


BASE_DEFINITIONS: tuple[CardDefinition, ...] = (
    CardDefinition("farm", "Farm", 1, 6, 5, _FARM, effect=Effect.CONSUMABLES, amount=2,
                   effect_text="Gain 2 consumables"),
    CardDefinition("slash_burn", "Slash-and-Burn", 1, 0, 2, _FARM, unsellable=True,
                   effect=Effect.CONSUMABLES, amount=5,
                   effect_text="Gain 5 consumables; discarded at the next round start"),
    CardDefinition("design_office", "Design Office", 1, 8, 3, effect=Effect.DESIGN_OFFICE, amount=5,
                   effect_text="Reveal 5 cards, keep 1"),
    CardDefinition("coffee_shop", "Coffee Shop", 1, 8, 3, effect=Effect.INCOME, amount=5,
                   effect_text="Take $5 from the household"),
    CardDefinition("factory", "Factory", 2, 12, 4, _FACTORY, effect=Effect.DISCARD_DRAW,
                   amount=4, discard=2, effect_text="Discard 2, draw 4"),
    CardDefinition("construction_co", "Construction Company", 2, 10, 3, effect=Effect.BUILD,
                   amount=1, effect_text="Build with cost -1"),
    CardDefinition("warehouse", "Warehouse", 2, 10, 2, unsellable=True,
                   effect_text="Hand limit +4"),
    CardDefinition("company_housing", "Company Housing", 2, 8, 2, unsellable=True,
                   effect_text="Worker cap +1"),
    CardDefinition("law_office", "Law Office", 2, 8, 2, unsellable=True,
                   effect_text="Up to 5 unpaid debts are exempted at scoring"),
    CardDefinition("orchard", "Orchard", 2, 10, 3, _FARM, effect=Effect.ORCHARD, amount=4,
                   effect_text="Gain consumables until you hold 4 cards"),
    CardDefinition("pioneer", "Pioneer", 2, 10, 2, effect=Effect.BUILD_FARM_FREE,
                   effect_text="Build a farm for free"),
    CardDefinition("large_farm", "Large Farm", 3, 12, 3, _FARM, effect=Effect.CONSUMABLES,
                   amount=3, effect_text="Gain 3 consumables"),
    CardDefinition("restaurant", "Restaurant", 3, 16, 2, effect=Effect.DISCARD_INCOME,
                   amount=15, discard=1, effect_text="Discard 1, take $15 from the household"),
    CardDefinition("dual_construction", "Dual Construction", 3, 14, 2, effect=Effect.DUAL_BUILD,
                   effect_text="Build two cards of equal cost, paying one cost"),
    CardDefinition("agri_coop", "Agricultural Co-op", 3, 12, 1, unsellable=True,
                   effect_text="Scoring: +3 per consumable in hand"),
    CardDefinition("labor_union", "Labor Union", 4, 12, 1, unsellable=True,
                   effect_text="Scoring: +6 per worker"),
    CardDefinition("steel_mill", "Steel Mill", 4, 16, 2, _FACTORY, effect=Effect.DRAW, amount=3,
                   effect_text="Draw 3"),
    CardDefinition("chemical_plant", "Chemical Plant", 4, 18, 2, _FACTORY, effect=Effect.CHEMICAL,
                   effect_text="Draw 4 with an empty hand, otherwise 2"),
    CardDefinition("general_contractor", "General Contractor", 4, 20, 2, effect=Effect.BUILD_DRAW,
                   amount=2, effect_text="Build, then draw 2"),
    CardDefinition("auto_factory", "Auto Factory", 5, 24, 2, _FACTORY, effect=Effect.DISCARD_DRAW,
                   amount=7, discard=3, effect_text="Discard 3, draw 7"),
    CardDefinition("real_estate", "Real Estate", 5, 10, 1, unsellable=True,
                   effect_text="Scoring: +3 per structure"),
    CardDefinition("headquarters", "Headquarters", 5, 20, 1, unsellable=True,
                   effect_text="Scoring: +6 per unsellable structure"),
    CardDefinition("railroad", "Railroad", 5, 18, 1, unsellable=True,
                   effect_text="Scoring: +8 per factory"),
    CardDefinition("mansion", "Mansion", 6, 28, 1, unsellable=True, effect_text="No effect"),
)

GLORY_DEFINITIONS: tuple[CardDefinition, ...] = (
    CardDefinition("gl_relic", "Relic", 0, 0, 3, unsellable=True,
                   effect_text="On build: gain 2 VP tokens"),
    CardDefinition("gl_village", "Village", 1, 6, 6, _FARM, effect=Effect.CONSUMABLES, amount=2,
                   effect_text="Gain 2 consumables"),
    CardDefinition("gl_colonist", "Colonist", 1, 6, 5, effect=Effect.BUILD_CONSUMABLE, amount=1,
                   effect_text="Build, then gain 1 consumable"),
    CardDefinition("gl_studio", "Studio", 1, 8, 5, _FACTORY, effect=Effect.STUDIO,
                   effect_text="Draw 1 and gain 1 VP token"),
    CardDefinition("gl_steam_factory", "Steam Factory", 2, 10, 8, _FACTORY,
                   effect=Effect.DISCARD_DRAW, amount=4, discard=2, token_cost=(2, 1),
                   effect_text="Discard 2, draw 4"),
    CardDefinition("gl_poultry_farm", "Poultry Farm", 2, 12, 4, _FARM, effect=Effect.POULTRY,
                   amount=2, effect_text="Gain 2 consumables, 3 if your hand is odd"),
    CardDefinition("gl_skyscraper", "Skyscraper Construction", 2, 10, 3,
                   effect=Effect.BUILD_SKYSCRAPER, amount=2,
                   effect_text="Build, then draw 2 if your hand is empty"),
    CardDefinition("gl_game_cafe", "Game Cafe", 2, 10, 3, effect=Effect.GAME_CAFE,
                   effect_text="Take $5, or $10 as the last action of the round"),
    CardDefinition("gl_cotton_farm", "Cotton Farm", 3, 14, 3, _FARM, effect=Effect.CONSUMABLES,
                   amount=5, worker_req=2, effect_text="Two workers: gain 5 consumables"),
    CardDefinition("gl_museum", "Museum", 3, 14, 2, effect=Effect.MUSEUM,
                   effect_text="Take $7, or $14 holding exactly 5 cards"),
    CardDefinition("gl_monument", "Monument", 3, 24, 2, unsellable=True, effect_text="No effect"),
    CardDefinition("gl_consumers_coop", "Consumers Co-op", 3, 18, 1, unsellable=True,
                   effect_text="Scoring: +18 if your farms are worth 20 or more"),
    CardDefinition("gl_automaton", "Automaton", 4, 2, 5, unsellable=True, effect=Effect.ROBOT,
                   effect_text="Gain a robot worker"),
    CardDefinition("gl_coal_mine", "Coal Mine", 4, 20, 2, effect=Effect.DRAW, amount=5,
                   worker_req=2, effect_text="Two workers: draw 5"),
    CardDefinition("gl_modernism_construction", "Modernism Construction", 4, 18, 2,
                   effect=Effect.BUILD_MODERNISM,
                   effect_text="Build; consumables pay 2 each toward the cost"),
    CardDefinition("gl_theater", "Theater", 4, 20, 2, effect=Effect.DISCARD_INCOME, amount=20,
                   discard=2, effect_text="Discard 2, take $20 from the household"),
    CardDefinition("gl_guild_hall", "Guild Hall", 4, 20, 1, unsellable=True,
                   effect_text="Scoring: +20 owning a farm and a factory"),
    CardDefinition("gl_ivory_tower", "Ivory Tower", 4, 22, 1, unsellable=True,
                   effect_text="Scoring: +22 with 7 or more VP tokens"),
    CardDefinition("gl_refinery", "Refinery", 5, 16, 3, _FACTORY, effect=Effect.DRAW, amount=3,
                   token_cost=(3, 3), effect_text="Draw 3"),
    CardDefinition("gl_teleporter", "Teleporter", 5, 22, 2, effect=Effect.BUILD_FREE,
                   worker_req=2, effect_text="Two workers: build for free"),
    CardDefinition("gl_revolution_square", "Revolution Square", 5, 18, 1, unsellable=True,
                   effect_text="Scoring: +18 with 5 human workers"),
    CardDefinition("gl_harvest_festival", "Harvest Festival", 5, 26, 1, unsellable=True,
                   effect_text="Scoring: +26 with 4 or more consumables in hand"),
    CardDefinition("gl_tech_exhibition", "Tech Exhibition", 5, 24, 1, unsellable=True,
                   effect_text="Scoring: +24 if your factories are worth 30 or more"),
    CardDefinition("gl_greenhouse", "Greenhouse", 6, 18, 2, _FARM, effect=Effect.CONSUMABLES,
                   amount=4, token_cost=(4, 4), effect_text="Gain 4 consumables"),
    CardDefinition("gl_temple_of_purification", "Temple of Purification", 6, 30, 1,
                   unsellable=True,
                   effect_text="Scoring: +30 if it is your only unsellable structure"),
    CardDefinition("gl_locomotive_factory", "Locomotive Factory", 7, 24, 2, _FACTORY,
                   effect=Effect.DISCARD_DRAW, amount=7, discard=3, token_cost=(5, 4),
                   effect_text="Discard 3, draw 7"),
)


class Catalog:
    """Immutable lookup of card definitions.

    Loaded once and passed to the engine through GameState; nothing mutates
    it after construction.
    """

    __slots__ = ("_by_id", "_editions")

    def __init__(
        self,
        base: Iterable[CardDefinition] = BASE_DEFINITIONS,
        glory: Iterable[CardDefinition] = GLORY_DEFINITIONS,
    ):
        editions = {Edition.BASE: tuple(base), Edition.GLORY: tuple(glory)}
        by_id: dict[str, CardDefinition] = {
            CONSUMABLE_DEF_ID: CONSUMABLE_DEFINITION,
            HIDDEN_DEF_ID: HIDDEN_DEFINITION,
        }
        for definitions in editions.values():
            for definition in definitions:
                if definition.id in by_id:
                    raise ValueError(f"Duplicate card definition: {definition.id}")
                by_id[definition.id] = definition
        self._by_id = by_id
        self._editions = editions

    def get(self, def_id: str) -> CardDefinition:
        """Look up a definition.

        Raises:
            UnknownCardError: If the id is not in the catalog.
        """
        try:
            return self._by_id[def_id]
        except KeyError:
            raise UnknownCardError(def_id) from None

    def __contains__(self, def_id: object) -> bool:
        return def_id in self._by_id

    def deck_definitions(self, edition: Edition) -> tuple[CardDefinition, ...]:
        """Definitions that make up the deck for an edition."""
        return self._editions[edition]

    def build_deck(self, edition: Edition) -> list[Card]:
        """Unshuffled deck with sequential instance ids."""
        cards: list[Card] = []
        for definition in self.deck_definitions(edition):
            for _ in range(definition.copies):
                cards.append(Card(uid=f"c{len(cards)}", def_id=definition.id))
        return cards


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """The process-wide catalog built from the bundled definitions."""
    return Catalog()
