"""Move types for National Economy.

The move set is closed: every move a player can submit is one of the
classes below, and `MOVE_CLASSES` maps the wire names used by hosts onto
them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum, auto


class MoveType(IntEnum):
    """Type of move."""

    PLACE_WORKER = auto()
    PLACE_WORKER_ON_BUILDING = auto()
    SELECT_BUILD_CARD = auto()
    TOGGLE_DUAL_CARD = auto()
    CONFIRM_DUAL_CONSTRUCTION = auto()
    SELECT_DESIGN_OFFICE_CARD = auto()
    TOGGLE_DISCARD = auto()
    CONFIRM_DISCARD = auto()
    TOGGLE_PAYDAY_SELL = auto()
    CONFIRM_PAYDAY_SELL = auto()
    CANCEL_ACTION = auto()


@dataclass(frozen=True, slots=True)
class Move(ABC):
    """Base class for all moves."""

    @property
    @abstractmethod
    def move_type(self) -> MoveType:
        """The type of this move."""
        ...

    @abstractmethod
    def __str__(self) -> str:
        """Human-readable move description."""
        ...


@dataclass(frozen=True, slots=True)
class PlaceWorker(Move):
    """Place a worker on a public workplace."""

    workplace_id: str

    @property
    def move_type(self) -> MoveType:
        return MoveType.PLACE_WORKER

    def __str__(self) -> str:
        return f"Place worker on {self.workplace_id}"


@dataclass(frozen=True, slots=True)
class PlaceWorkerOnBuilding(Move):
    """Place a worker on one of the player's own structures."""

    card_uid: str

    @property
    def move_type(self) -> MoveType:
        return MoveType.PLACE_WORKER_ON_BUILDING

    def __str__(self) -> str:
        return f"Place worker on own structure {self.card_uid}"


@dataclass(frozen=True, slots=True)
class SelectBuildCard(Move):
    """Choose the hand card to build."""

    index: int

    @property
    def move_type(self) -> MoveType:
        return MoveType.SELECT_BUILD_CARD

    def __str__(self) -> str:
        return f"Build hand card {self.index}"


@dataclass(frozen=True, slots=True)
class ToggleDualCard(Move):
    """Select or deselect a hand card for dual construction."""

    index: int

    @property
    def move_type(self) -> MoveType:
        return MoveType.TOGGLE_DUAL_CARD

    def __str__(self) -> str:
        return f"Toggle dual construction card {self.index}"


@dataclass(frozen=True, slots=True)
class ConfirmDualConstruction(Move):
    """Build the two selected cards."""

    @property
    def move_type(self) -> MoveType:
        return MoveType.CONFIRM_DUAL_CONSTRUCTION

    def __str__(self) -> str:
        return "Confirm dual construction"


@dataclass(frozen=True, slots=True)
class SelectDesignOfficeCard(Move):
    """Keep one of the cards revealed by a design office."""

    index: int

    @property
    def move_type(self) -> MoveType:
        return MoveType.SELECT_DESIGN_OFFICE_CARD

    def __str__(self) -> str:
        return f"Keep revealed card {self.index}"


@dataclass(frozen=True, slots=True)
class ToggleDiscard(Move):
    """Select or deselect a hand card for the pending discard."""

    index: int

    @property
    def move_type(self) -> MoveType:
        return MoveType.TOGGLE_DISCARD

    def __str__(self) -> str:
        return f"Toggle discard {self.index}"


@dataclass(frozen=True, slots=True)
class ConfirmDiscard(Move):
    """Discard the selected cards."""

    @property
    def move_type(self) -> MoveType:
        return MoveType.CONFIRM_DISCARD

    def __str__(self) -> str:
        return "Confirm discard"


@dataclass(frozen=True, slots=True)
class TogglePaydaySell(Move):
    """Select or deselect a structure to sell at payday."""

    building_index: int

    @property
    def move_type(self) -> MoveType:
        return MoveType.TOGGLE_PAYDAY_SELL

    def __str__(self) -> str:
        return f"Toggle sale of structure {self.building_index}"


@dataclass(frozen=True, slots=True)
class ConfirmPaydaySell(Move):
    """Sell the selected structures and pay wages."""

    @property
    def move_type(self) -> MoveType:
        return MoveType.CONFIRM_PAYDAY_SELL

    def __str__(self) -> str:
        return "Confirm payday"


@dataclass(frozen=True, slots=True)
class CancelAction(Move):
    """Abort the pending selection and take the worker back."""

    @property
    def move_type(self) -> MoveType:
        return MoveType.CANCEL_ACTION

    def __str__(self) -> str:
        return "Cancel"


MOVE_CLASSES: dict[str, type[Move]] = {
    "placeWorker": PlaceWorker,
    "placeWorkerOnBuilding": PlaceWorkerOnBuilding,
    "selectBuildCard": SelectBuildCard,
    "toggleDualCard": ToggleDualCard,
    "confirmDualConstruction": ConfirmDualConstruction,
    "selectDesignOfficeCard": SelectDesignOfficeCard,
    "toggleDiscard": ToggleDiscard,
    "confirmDiscard": ConfirmDiscard,
    "togglePaydaySell": TogglePaydaySell,
    "confirmPaydaySell": ConfirmPaydaySell,
    "cancelAction": CancelAction,
}

_MOVE_NAMES = {cls: name for name, cls in MOVE_CLASSES.items()}


def move_from_name(name: str, *args: object) -> Move:
    """Build a move from its wire name and primitive arguments.

    Raises:
        ValueError: Unknown name or wrong arguments.
    """
    cls = MOVE_CLASSES.get(name)
    if cls is None:
        raise ValueError(f"Unknown move: {name}")
    try:
        return cls(*args)
    except TypeError as e:
        raise ValueError(f"Bad arguments for {name}: {args}") from e


def move_name(move: Move) -> str:
    """Wire name of a move."""
    return _MOVE_NAMES[type(move)]


def move_args(move: Move) -> list[object]:
    """Primitive arguments of a move, in declaration order."""
    match move:
        case PlaceWorker(workplace_id=workplace_id):
            return [workplace_id]
        case PlaceWorkerOnBuilding(card_uid=card_uid):
            return [card_uid]
        case SelectBuildCard(index=i) | ToggleDualCard(index=i) | SelectDesignOfficeCard(
            index=i
        ) | ToggleDiscard(index=i):
            return [i]
        case TogglePaydaySell(building_index=i):
            return [i]
        case _:
            return []
