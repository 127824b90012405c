"""Immutable game state models for National Economy."""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from enum import IntEnum, auto
from typing import TYPE_CHECKING, Iterator

from econ_engine.catalog import Card, Catalog, Edition, default_catalog
from econ_engine.events import EventKind, GameEvent, LogEntry
from econ_engine.workplaces import Workplace, create_initial_workplaces

if TYPE_CHECKING:
    from econ_engine.scoring import ScoreBreakdown

MIN_PLAYERS = 2
MAX_PLAYERS = 4
FINAL_ROUND = 9
STARTING_HAND = 3
STARTING_MONEY = 5
STARTING_WORKERS = 2
WORKER_CAP = 5
HAND_LIMIT = 5


class GamePhase(IntEnum):
    """Current phase of the game."""

    WORK = auto()  # Current player places a worker
    BUILD = auto()  # Current player picks a card to build
    DISCARD = auto()  # Current player discards for an effect or a build cost
    DESIGN_OFFICE = auto()  # Current player keeps one revealed card
    DUAL_CONSTRUCTION = auto()  # Current player picks two equal-cost cards
    PAYDAY = auto()  # Every short player settles wages independently
    CLEANUP = auto()  # Every player over the hand limit discards independently
    GAME_END = auto()  # Terminal; final scores are populated


class StateInvariantError(RuntimeError):
    """Raised when the state breaks an engine invariant (programming error)."""


@dataclass(frozen=True, slots=True)
class Building:
    """A built structure and whether a worker used it this round."""

    card: Card
    worker_placed: bool = False


@dataclass(frozen=True, slots=True)
class PlayerState:
    """State of a single player.

    Attributes:
        hand: Cards in hand (hidden from other players)
        money: Cash; clamped at zero when wages cannot be paid
        workers: Workers owned, robots included
        available_workers: Workers not yet placed this round
        worker_cap: Maximum workers
        buildings: Built structures
        vp_tokens: Victory point tokens
        robot_workers: Workers that draw no wage
        unpaid_debts: Unpaid-debt markers
        hand_limit: Cards kept at cleanup
    """

    hand: tuple[Card, ...]
    money: int
    workers: int = STARTING_WORKERS
    available_workers: int = STARTING_WORKERS
    worker_cap: int = WORKER_CAP
    buildings: tuple[Building, ...] = ()
    vp_tokens: int = 0
    robot_workers: int = 0
    unpaid_debts: int = 0
    hand_limit: int = HAND_LIMIT

    @property
    def human_workers(self) -> int:
        """Workers that draw wages."""
        return max(0, self.workers - self.robot_workers)

    @property
    def consumable_count(self) -> int:
        return sum(1 for card in self.hand if card.is_consumable)

    def building_index(self, card_uid: str) -> int | None:
        """Index of the structure with the given card uid."""
        for i, building in enumerate(self.buildings):
            if building.card.uid == card_uid:
                return i
        return None

    def owns(self, def_id: str) -> bool:
        return any(b.card.def_id == def_id for b in self.buildings)

    def with_hand(self, hand: tuple[Card, ...]) -> PlayerState:
        """Return new state with updated hand."""
        return replace(self, hand=hand)

    def with_money(self, money: int) -> PlayerState:
        """Return new state with updated cash."""
        return replace(self, money=money)

    def with_buildings(self, buildings: tuple[Building, ...]) -> PlayerState:
        """Return new state with updated structures."""
        return replace(self, buildings=buildings)

    def updated(self, **changes) -> PlayerState:
        """Return new state with arbitrary fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class WorkerOrigin:
    """Where the worker(s) behind a pending sub-phase were placed.

    Exactly one of workplace_id / building_uid is set. Used to hand the
    worker back on cancel.
    """

    workplace_id: str | None = None
    building_uid: str | None = None
    workers: int = 1


class DiscardReason(IntEnum):
    """What a confirmed discard pays for."""

    SELL = auto()  # household pays `payout`
    DRAW = auto()  # draw `payout` cards
    INCOME = auto()  # household pays `payout` (structure effect)
    BUILD_COST = auto()  # build the card in `build_uids`
    DUAL_BUILD_COST = auto()  # build both cards in `build_uids`


@dataclass(frozen=True, slots=True)
class BuildState:
    """Pending build selection.

    Attributes:
        origin: Worker placement that opened the build
        cost_reduction: Subtracted from every card's cost
        draw_after: Cards drawn after building
        consumables_after: Consumables gained after building
        draw_if_empty: Cards drawn after building if the hand is then empty
        farm_only: Only farm-tagged cards may be chosen
        consumable_weight: How much each discarded consumable pays
    """

    origin: WorkerOrigin
    cost_reduction: int = 0
    draw_after: int = 0
    consumables_after: int = 0
    draw_if_empty: int = 0
    farm_only: bool = False
    consumable_weight: int = 1


@dataclass(frozen=True, slots=True)
class DiscardState:
    """Pending discard selection for an effect or a build cost.

    Attributes:
        count: Cards (or weighted cost) that must be discarded
        reason: What the discard pays for
        origin: Worker placement that opened the discard
        selected: Selected hand indices, in selection order
        payout: Cash or cards received for SELL, INCOME and DRAW
        build_uids: Cards being built; they cannot be discarded
        build: Build parameters for BUILD_COST / DUAL_BUILD_COST
        description: Display text
    """

    count: int
    reason: DiscardReason
    origin: WorkerOrigin
    selected: tuple[int, ...] = ()
    payout: int = 0
    build_uids: tuple[str, ...] = ()
    build: BuildState | None = None
    description: str = ""

    @property
    def consumable_weight(self) -> int:
        return self.build.consumable_weight if self.build is not None else 1


@dataclass(frozen=True, slots=True)
class DesignOfficeState:
    """Cards revealed by a design office, waiting for a pick."""

    revealed: tuple[Card, ...]
    origin: WorkerOrigin


@dataclass(frozen=True, slots=True)
class DualConstructionState:
    """Pending dual construction: up to two selected hand indices."""

    origin: WorkerOrigin
    selected: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class PaydayPlayerState:
    """One player's wage settlement.

    Players who paid automatically start confirmed; those who must sell
    start unconfirmed and flip their own flag exactly once.
    """

    total_wage: int
    needs_selling: bool = False
    selected: tuple[int, ...] = ()
    confirmed: bool = True


@dataclass(frozen=True, slots=True)
class PaydayState:
    """Per-player wage settlement records."""

    wage_per_worker: int
    players: tuple[PaydayPlayerState, ...]

    @property
    def pending_players(self) -> tuple[int, ...]:
        return tuple(i for i, p in enumerate(self.players) if p.needs_selling and not p.confirmed)

    @property
    def all_confirmed(self) -> bool:
        return all(p.confirmed for p in self.players)

    def with_player(self, index: int, record: PaydayPlayerState) -> PaydayState:
        players = list(self.players)
        players[index] = record
        return replace(self, players=tuple(players))


@dataclass(frozen=True, slots=True)
class CleanupPlayerState:
    """One player's end-of-round discard down to the hand limit."""

    excess_count: int = 0
    selected: tuple[int, ...] = ()
    confirmed: bool = True

    @property
    def needs_action(self) -> bool:
        return self.excess_count > 0


@dataclass(frozen=True, slots=True)
class CleanupState:
    """Per-player cleanup records."""

    players: tuple[CleanupPlayerState, ...]

    @property
    def pending_players(self) -> tuple[int, ...]:
        return tuple(i for i, p in enumerate(self.players) if p.needs_action and not p.confirmed)

    @property
    def all_confirmed(self) -> bool:
        return all(p.confirmed for p in self.players)

    def with_player(self, index: int, record: CleanupPlayerState) -> CleanupState:
        players = list(self.players)
        players[index] = record
        return replace(self, players=tuple(players))


_SUB_STATE_FIELDS = {
    GamePhase.BUILD: "build_state",
    GamePhase.DISCARD: "discard_state",
    GamePhase.DESIGN_OFFICE: "design_office_state",
    GamePhase.DUAL_CONSTRUCTION: "dual_construction_state",
    GamePhase.PAYDAY: "payday_state",
    GamePhase.CLEANUP: "cleanup_state",
}


@dataclass(frozen=True, slots=True)
class GameState:
    """Complete immutable game state.

    Attributes:
        players: One PlayerState per seat
        deck: Draw pile, index 0 is the top
        discard: Discard pile
        workplaces: Public workplaces in board order
        phase: Current game phase
        round: Current round (1..9)
        start_player: Who opens the next work phase
        current_player: Who acts in sequential phases
        household: Shared treasury
        log: Append-only log
        build_state .. cleanup_state: Sub-state matching the phase, at most one set
        final_scores: Ranked score breakdowns once the game ended
        version: Incremented by every accepted move
        seed: Seed for reshuffles
        shuffle_count: Reshuffles so far
        next_consumable: Counter for consumable instance ids
        edition: Card set in use
        catalog: Read-only definitions (not part of equality)
    """

    players: tuple[PlayerState, ...]
    deck: tuple[Card, ...]
    discard: tuple[Card, ...]
    workplaces: tuple[Workplace, ...]
    phase: GamePhase = GamePhase.WORK
    round: int = 1
    start_player: int = 0
    current_player: int = 0
    household: int = 0
    log: tuple[LogEntry, ...] = ()
    build_state: BuildState | None = None
    discard_state: DiscardState | None = None
    design_office_state: DesignOfficeState | None = None
    dual_construction_state: DualConstructionState | None = None
    payday_state: PaydayState | None = None
    cleanup_state: CleanupState | None = None
    final_scores: tuple[ScoreBreakdown, ...] | None = None
    version: int = 0
    seed: int = 0
    shuffle_count: int = 0
    next_consumable: int = 0
    edition: Edition = Edition.BASE
    catalog: Catalog = field(default_factory=default_catalog, compare=False, repr=False)

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def is_game_over(self) -> bool:
        """Whether the game has ended."""
        return self.phase == GamePhase.GAME_END

    @property
    def total_available_workers(self) -> int:
        return sum(p.available_workers for p in self.players)

    @property
    def sub_state(self) -> object | None:
        """The populated phase sub-state, if any."""
        name = _SUB_STATE_FIELDS.get(self.phase)
        return getattr(self, name) if name else None

    def check_sub_state(self) -> None:
        """Verify that exactly the sub-state matching the phase is populated.

        Raises:
            StateInvariantError: On any mismatch.
        """
        expected = _SUB_STATE_FIELDS.get(self.phase)
        for phase, name in _SUB_STATE_FIELDS.items():
            value = getattr(self, name)
            if name == expected and value is None:
                raise StateInvariantError(f"{self.phase.name} without {name}")
            if name != expected and value is not None:
                raise StateInvariantError(f"{name} populated during {self.phase.name}")
        if (self.phase == GamePhase.GAME_END) != (self.final_scores is not None):
            raise StateInvariantError("final scores must be set exactly at game end")

    def workplace(self, workplace_id: str) -> Workplace | None:
        for workplace in self.workplaces:
            if workplace.id == workplace_id:
                return workplace
        return None

    def iter_cards(self) -> Iterator[Card]:
        """Every card instance in any container."""
        yield from self.deck
        yield from self.discard
        for player in self.players:
            yield from player.hand
            for building in player.buildings:
                yield building.card
        for workplace in self.workplaces:
            if workplace.source_card is not None:
                yield workplace.source_card
        if self.design_office_state is not None:
            yield from self.design_office_state.revealed

    def card_uids(self) -> list[str]:
        """Uids of all non-consumable cards, for conservation checks."""
        return [card.uid for card in self.iter_cards() if not card.is_consumable]

    def with_player(self, index: int, player: PlayerState) -> GameState:
        """Return new state with one player replaced."""
        players = list(self.players)
        players[index] = player
        return replace(self, players=tuple(players))

    def with_players(self, players: tuple[PlayerState, ...]) -> GameState:
        """Return new state with updated players."""
        return replace(self, players=players)

    def with_deck(self, deck: tuple[Card, ...]) -> GameState:
        """Return new state with updated deck."""
        return replace(self, deck=deck)

    def with_discard(self, discard: tuple[Card, ...]) -> GameState:
        """Return new state with updated discard pile."""
        return replace(self, discard=discard)

    def with_workplace(self, workplace: Workplace) -> GameState:
        """Return new state with the workplace of the same id replaced."""
        return replace(
            self,
            workplaces=tuple(workplace if w.id == workplace.id else w for w in self.workplaces),
        )

    def with_phase(self, phase: GamePhase, **sub_state) -> GameState:
        """Enter a phase, clearing every sub-state except the ones given."""
        cleared = {name: None for name in _SUB_STATE_FIELDS.values()}
        cleared.update(sub_state)
        return replace(self, phase=phase, **cleared)

    def with_current_player(self, current_player: int) -> GameState:
        """Return new state with updated current player."""
        return replace(self, current_player=current_player)

    def updated(self, **changes) -> GameState:
        """Return new state with arbitrary fields replaced."""
        return replace(self, **changes)

    def logged(self, text: str, event: GameEvent | None = None) -> GameState:
        """Return new state with one log entry appended."""
        entry = LogEntry(seq=len(self.log), round=self.round, text=text, event=event)
        return replace(self, log=self.log + (entry,))


def starting_money(player: int, start_player: int, num_players: int) -> int:
    """$5 for the start player, one more per seat after it."""
    return STARTING_MONEY + (player - start_player) % num_players


def create_initial_state(
    num_players: int = 2,
    seed: int | None = None,
    edition: Edition = Edition.BASE,
    catalog: Catalog | None = None,
    deck: list[Card] | None = None,
    start_player: int | None = None,
) -> GameState:
    """Create the initial game state.

    Args:
        num_players: 2 to 4.
        seed: Seed for the shuffle, the start player and later reshuffles.
            A random one is drawn (and stored) if None.
        edition: Card set to build the deck from.
        catalog: Definitions to use; the process-wide catalog by default.
        deck: Optional pre-ordered deck (top first). Skips the shuffle.
        start_player: Optional fixed start player.

    Returns:
        Round 1 work phase with hands dealt.
    """
    if not MIN_PLAYERS <= num_players <= MAX_PLAYERS:
        raise ValueError(f"num_players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
    catalog = catalog or default_catalog()
    if seed is None:
        seed = random.randrange(2**31)
    rng = random.Random(seed)

    if deck is None:
        deck = catalog.build_deck(edition)
        rng.shuffle(deck)
        # Number after the shuffle so a uid says nothing about its definition
        deck = [Card(uid=f"c{i}", def_id=card.def_id) for i, card in enumerate(deck)]
    if start_player is None:
        start_player = rng.randrange(num_players)

    players = []
    for i in range(num_players):
        hand = tuple(deck[i * STARTING_HAND:(i + 1) * STARTING_HAND])
        players.append(
            PlayerState(hand=hand, money=starting_money(i, start_player, num_players))
        )

    state = GameState(
        players=tuple(players),
        deck=tuple(deck[num_players * STARTING_HAND:]),
        discard=(),
        workplaces=create_initial_workplaces(num_players, edition),
        start_player=start_player,
        current_player=start_player,
        seed=seed,
        edition=edition,
        catalog=catalog,
    )
    return state.logged(
        f"=== Round 1 ({num_players} players, P{start_player + 1} starts) ===",
        GameEvent(EventKind.ROUND_STARTED, player=start_player, amount=1),
    )
