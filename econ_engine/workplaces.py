"""Public workplaces: the shared board slots workers are placed on."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from econ_engine.catalog import Edition

if TYPE_CHECKING:
    from econ_engine.catalog import Card, CardDefinition


class WorkplaceEffect(IntEnum):
    """Specialised effect of a public workplace."""

    START_PLAYER_DRAW = auto()  # draw `amount` and become start player
    DRAW = auto()  # draw `amount`
    HIRE = auto()  # +1 worker from next round
    HIRE_IMMEDIATE = auto()  # +1 worker usable this round
    EXPAND = auto()  # raise workers to `amount`
    BUILD = auto()
    SELL = auto()  # discard `discard` cards, take `amount` from the household
    RUINS = auto()  # +1 VP token and +1 consumable
    SOLD_BUILDING = auto()  # effect of the sold structure in `source_card`


@dataclass(frozen=True, slots=True)
class Workplace:
    """A public workplace.

    Attributes:
        id: Stable identifier used by PlaceWorker
        name: Display name
        effect: Effect tag driving eligibility and resolution
        amount: Effect parameter (cards drawn, cash, worker target)
        discard: Cards discarded by selling workplaces
        multiple_allowed: Whether several workers may occupy it in a round
        workers: Player ids currently occupying it
        round_added: Round the workplace appeared (0 for initial ones)
        source_card: Sold structure this workplace was created from
        effect_text: Display text only
    """

    id: str
    name: str
    effect: WorkplaceEffect
    amount: int = 0
    discard: int = 0
    multiple_allowed: bool = False
    workers: tuple[int, ...] = ()
    round_added: int = 0
    source_card: Card | None = None
    effect_text: str = ""

    @property
    def is_occupied(self) -> bool:
        return len(self.workers) > 0

    @property
    def source_def_id(self) -> str | None:
        return self.source_card.def_id if self.source_card is not None else None

    def with_workers(self, workers: tuple[int, ...]) -> Workplace:
        """Return new workplace with updated occupants."""
        return replace(self, workers=workers)


def create_initial_workplaces(num_players: int, edition: Edition = Edition.BASE) -> tuple[Workplace, ...]:
    """Workplaces available from round 1."""
    carpenter = Workplace(
        "carpenter", "Carpenter", WorkplaceEffect.BUILD, effect_text="Build one structure"
    )
    workplaces = [
        Workplace(
            "quarry",
            "Quarry",
            WorkplaceEffect.START_PLAYER_DRAW,
            amount=1,
            effect_text="Draw 1 card and become start player",
        ),
        Workplace(
            "mine",
            "Mine",
            WorkplaceEffect.DRAW,
            amount=1,
            multiple_allowed=True,
            effect_text="Draw 1 card (multiple workers allowed)",
        ),
        Workplace("school", "School", WorkplaceEffect.HIRE, effect_text="+1 worker from next round"),
        carpenter,
    ]
    carpenters = 1 if num_players <= 2 else 2 if num_players == 3 else 3
    for i in range(1, carpenters):
        workplaces.append(replace(carpenter, id=f"carpenter_{i + 1}"))
    if edition == Edition.GLORY:
        workplaces.append(
            Workplace(
                "ruins",
                "Ruins",
                WorkplaceEffect.RUINS,
                effect_text="Gain 1 VP token and 1 consumable",
            )
        )
    return tuple(workplaces)


# round -> (id, name, effect, amount, discard, multiple allowed with 3+ players, text)
_ROUND_WORKPLACES: dict[int, tuple[str, str, WorkplaceEffect, int, int, bool, str]] = {
    2: ("stall", "Stall", WorkplaceEffect.SELL, 6, 1, True, "Discard 1, take $6"),
    3: ("market", "Market", WorkplaceEffect.SELL, 12, 2, True, "Discard 2, take $12"),
    4: ("high_school", "High School", WorkplaceEffect.EXPAND, 4, 0, False, "Workers become 4"),
    5: ("supermarket", "Supermarket", WorkplaceEffect.SELL, 18, 3, True, "Discard 3, take $18"),
    6: ("university", "University", WorkplaceEffect.EXPAND, 5, 0, False, "Workers become 5"),
    7: ("dept_store", "Department Store", WorkplaceEffect.SELL, 24, 4, True, "Discard 4, take $24"),
    8: ("vocational", "Vocational School", WorkplaceEffect.HIRE_IMMEDIATE, 0, 0, False,
        "+1 worker usable this round"),
    9: ("expo", "Expo", WorkplaceEffect.SELL, 30, 5, True, "Discard 5, take $30"),
}


def round_workplace(round_number: int, num_players: int) -> Workplace | None:
    """Workplace opened at the start of a round, if any."""
    entry = _ROUND_WORKPLACES.get(round_number)
    if entry is None:
        return None
    workplace_id, name, effect, amount, discard, multiple_3p, text = entry
    return Workplace(
        workplace_id,
        name,
        effect,
        amount=amount,
        discard=discard,
        multiple_allowed=multiple_3p and num_players >= 3,
        round_added=round_number,
        effect_text=text,
    )


def sold_building_workplace(card: Card, definition: CardDefinition, round_number: int) -> Workplace:
    """Public workplace created when a structure is sold at payday."""
    return Workplace(
        f"sold_{card.uid}",
        definition.name,
        WorkplaceEffect.SOLD_BUILDING,
        round_added=round_number,
        source_card=card,
        effect_text=definition.effect_text,
    )
