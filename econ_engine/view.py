"""Per-player redaction and a JSON-friendly projection of the state."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any

from econ_engine.catalog import HIDDEN_DEF_ID, Card
from econ_engine.moves import Move, move_args, move_name
from econ_engine.rules import acting_players

if TYPE_CHECKING:
    from econ_engine.state import GameState


def _hidden(cards: tuple[Card, ...]) -> tuple[Card, ...]:
    """Keep uids, drop definitions."""
    return tuple(Card(uid=c.uid, def_id=HIDDEN_DEF_ID) for c in cards)


def _placeholders(prefix: str, count: int) -> tuple[Card, ...]:
    return tuple(Card(uid=f"{prefix}{i}", def_id=HIDDEN_DEF_ID) for i in range(count))


def player_view(state: GameState, viewer: int | None) -> GameState:
    """What `viewer` is allowed to see.

    Other players' hand cards become hidden placeholders with their uids
    kept, deck and discard become placeholders of the same length, cards
    revealed by a design office are hidden from everyone but the actor, and
    the shuffle seed is zeroed. `viewer=None` is a spectator who sees no hand.
    """
    players = tuple(
        p if i == viewer else p.with_hand(_hidden(p.hand))
        for i, p in enumerate(state.players)
    )
    design_office = state.design_office_state
    if design_office is not None and viewer != state.current_player:
        design_office = replace(design_office, revealed=_hidden(design_office.revealed))
    return state.updated(
        players=players,
        deck=_placeholders("deck", len(state.deck)),
        discard=_placeholders("discard", len(state.discard)),
        design_office_state=design_office,
        seed=0,
    )


def card_to_dict(state: GameState, card: Card) -> dict[str, Any]:
    definition = state.catalog.get(card.def_id)
    return {
        "uid": card.uid,
        "def_id": card.def_id,
        "name": definition.name,
        "cost": definition.effective_cost(),
        "vp": definition.vp,
    }


def move_to_dict(move: Move) -> dict[str, Any]:
    return {"name": move_name(move), "args": move_args(move), "description": str(move)}


def state_to_dict(state: GameState, viewer: int | None = None) -> dict[str, Any]:
    """Serialize `player_view(state, viewer)` for a client."""
    view = player_view(state, viewer)

    def cards(seq: tuple[Card, ...]) -> list[dict[str, Any]]:
        return [card_to_dict(view, c) for c in seq]

    sub_state: dict[str, Any] | None = None
    if view.discard_state is not None:
        d = view.discard_state
        sub_state = {
            "count": d.count,
            "reason": d.reason.name,
            "selected": list(d.selected),
            "build_uids": list(d.build_uids),
            "description": d.description,
        }
    elif view.build_state is not None:
        b = view.build_state
        sub_state = {"cost_reduction": b.cost_reduction, "farm_only": b.farm_only}
    elif view.design_office_state is not None:
        sub_state = {"revealed": cards(view.design_office_state.revealed)}
    elif view.dual_construction_state is not None:
        sub_state = {"selected": list(view.dual_construction_state.selected)}
    elif view.payday_state is not None:
        sub_state = {
            "wage_per_worker": view.payday_state.wage_per_worker,
            "players": [
                {
                    "total_wage": r.total_wage,
                    "needs_selling": r.needs_selling,
                    "selected": list(r.selected),
                    "confirmed": r.confirmed,
                }
                for r in view.payday_state.players
            ],
        }
    elif view.cleanup_state is not None:
        sub_state = {
            "players": [
                {"excess_count": r.excess_count, "selected": list(r.selected), "confirmed": r.confirmed}
                for r in view.cleanup_state.players
            ]
        }

    return {
        "phase": view.phase.name,
        "round": view.round,
        "version": view.version,
        "start_player": view.start_player,
        "current_player": view.current_player,
        "acting_players": list(acting_players(view)),
        "household": view.household,
        "deck_count": len(view.deck),
        "discard_count": len(view.discard),
        "edition": view.edition.name,
        "workplaces": [
            {
                "id": w.id,
                "name": w.name,
                "effect_text": w.effect_text,
                "workers": list(w.workers),
                "multiple_allowed": w.multiple_allowed,
                "round_added": w.round_added,
            }
            for w in view.workplaces
        ],
        "players": [
            {
                "index": i,
                "hand": cards(p.hand),
                "hand_count": len(p.hand),
                "money": p.money,
                "workers": p.workers,
                "available_workers": p.available_workers,
                "robot_workers": p.robot_workers,
                "vp_tokens": p.vp_tokens,
                "unpaid_debts": p.unpaid_debts,
                "hand_limit": p.hand_limit,
                "buildings": [
                    {**card_to_dict(view, b.card), "worker_placed": b.worker_placed}
                    for b in p.buildings
                ],
            }
            for i, p in enumerate(view.players)
        ],
        "sub_state": sub_state,
        "final_scores": (
            [
                {
                    "player": s.player,
                    "total": s.total,
                    "building_vp": s.building_vp,
                    "bonus_vp": s.bonus_vp,
                    "money_vp": s.money_vp,
                    "debt_vp": s.debt_vp,
                }
                for s in view.final_scores
            ]
            if view.final_scores is not None
            else None
        ),
        "log": [{"seq": e.seq, "round": e.round, "text": e.text} for e in view.log[-30:]],
    }
