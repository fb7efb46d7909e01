"""
Economy - Who may act, what acting costs, and what the clock pays out.

Two action economies:
- PER_TURN: only the current faction acts; each unit has one move slot
  and one attack slot (attack or capture) per turn
- ACTION_POINTS: any faction acts while its shared pool has points;
  every move / attack / capture costs one point, and the pool refills
  one point per ap_recovery_ms on tick

The helpers here mutate the state copy they're given. The reducer
calls them on its own clone, never on the caller's state.
"""

from __future__ import annotations
import logging

from .action import ActionResult, ErrorCode, TickOutcome
from .board import Unit
from .capture import collect_income
from .rules import ActionEconomy, IncomeModel, Ruleset
from .state import FactionState, MatchState

logger = logging.getLogger(__name__)

MOVE_SLOT = "move"
ATTACK_SLOT = "attack"


def check_can_act(state: MatchState, unit: Unit, slot: str | None = None) -> ActionResult | None:
    """
    Economy gate for commanding unit.

    slot None checks that the unit can do anything at all (selection).
    Returns a failure result, or None if the unit may act.
    """
    ruleset = state.ruleset

    if ruleset.action_economy == ActionEconomy.ACTION_POINTS:
        faction = state.factions.get(unit.faction)
        if faction is None or faction.action_points < 1:
            return ActionResult.failure(
                f"{unit.faction} has no action points left",
                ErrorCode.NO_ACTIONS_LEFT,
                state,
            )
        return None

    if unit.faction != state.current_faction:
        return ActionResult.failure(
            f"{unit.unit_id} belongs to {unit.faction}, it is {state.current_faction}'s turn",
            ErrorCode.NOT_YOUR_UNIT,
            state,
        )
    if slot is None and unit.has_moved and unit.has_attacked:
        return ActionResult.failure(
            f"{unit.unit_id} has no actions left this turn",
            ErrorCode.NO_ACTIONS_LEFT,
            state,
        )
    if slot == MOVE_SLOT and unit.has_moved:
        return ActionResult.failure(
            f"{unit.unit_id} has already moved this turn",
            ErrorCode.ALREADY_ACTED,
            state,
        )
    if slot == ATTACK_SLOT and unit.has_attacked:
        return ActionResult.failure(
            f"{unit.unit_id} has already attacked this turn",
            ErrorCode.ALREADY_ACTED,
            state,
        )
    return None


def spend_action(state: MatchState, unit: Unit, slot: str) -> None:
    """
    Record that unit used slot, paying an action point if needed.

    Spending from a full pool starts the recovery timer at the match
    clock, so the point comes back one whole interval later.
    """
    if slot == MOVE_SLOT:
        unit.has_moved = True
    else:
        unit.has_attacked = True
    if state.ruleset.action_economy == ActionEconomy.ACTION_POINTS:
        faction = state.factions[unit.faction]
        if faction.action_points >= state.ruleset.max_action_points:
            faction.last_recovery_ms = max(faction.last_recovery_ms, state.clock_ms)
        faction.action_points = max(0, faction.action_points - 1)


def next_faction(order: list[str], current: str) -> str:
    index = order.index(current)
    return order[(index + 1) % len(order)]


def reset_unit_actions(state: MatchState, faction: str) -> None:
    for unit in state.board.units_of(faction):
        unit.has_moved = False
        unit.has_attacked = False


def advance_turn(state: MatchState) -> list[str]:
    """
    Hand the turn to the next faction.

    Resets that faction's unit flags and pays turn-start income.
    Returns human-readable changes.
    """
    previous = state.current_faction
    state.current_faction = next_faction(state.faction_order, previous)
    state.turn_number += 1
    state.selection = None
    reset_unit_actions(state, state.current_faction)

    changes = [f"{previous} ended their turn"]
    if state.ruleset.income_model == IncomeModel.TURN_START:
        credited = collect_income(
            state.board,
            state.factions,
            state.ruleset.income_amount,
            only=state.current_faction,
        )
        for faction, amount in credited.items():
            changes.append(f"{faction} collected {amount} income")
    changes.append(f"Turn {state.turn_number}: {state.current_faction} to play")
    return changes


def recover_action_points(faction: FactionState, now_ms: int, ruleset: Ruleset) -> int:
    """
    Refill faction's pool for the whole intervals elapsed since its last recovery.

    At the cap the recovery timer restarts at now_ms. Returns points gained.
    """
    if now_ms <= faction.last_recovery_ms:
        return 0
    if faction.action_points >= ruleset.max_action_points:
        faction.last_recovery_ms = now_ms
        return 0

    intervals = (now_ms - faction.last_recovery_ms) // ruleset.ap_recovery_ms
    if intervals <= 0:
        return 0

    gained = min(intervals, ruleset.max_action_points - faction.action_points)
    faction.action_points += gained
    if faction.action_points >= ruleset.max_action_points:
        faction.last_recovery_ms = now_ms
    else:
        faction.last_recovery_ms += intervals * ruleset.ap_recovery_ms
    return gained


def collect_realtime_income(state: MatchState, now_ms: int) -> dict[str, int]:
    """Pay income for every whole income interval since the last payout."""
    ruleset = state.ruleset
    if now_ms <= state.last_income_ms:
        return {}
    intervals = (now_ms - state.last_income_ms) // ruleset.income_interval_ms
    if intervals <= 0:
        return {}
    state.last_income_ms += intervals * ruleset.income_interval_ms
    return collect_income(
        state.board,
        state.factions,
        ruleset.income_amount,
        intervals=intervals,
    )


def advance_clock(state: MatchState, now_ms: int) -> TickOutcome:
    """Apply time-driven effects up to now_ms."""
    outcome = TickOutcome()
    ruleset = state.ruleset
    state.clock_ms = max(state.clock_ms, now_ms)

    if ruleset.action_economy == ActionEconomy.ACTION_POINTS:
        for faction_id in state.faction_order:
            gained = recover_action_points(state.factions[faction_id], now_ms, ruleset)
            if gained:
                outcome.action_points_recovered[faction_id] = gained

    if ruleset.income_model == IncomeModel.REALTIME:
        outcome.income = collect_realtime_income(state, now_ms)

    if outcome.action_points_recovered or outcome.income:
        logger.debug(
            f"Tick {now_ms}ms in {state.match_id}: "
            f"ap={outcome.action_points_recovered} income={outcome.income}"
        )
    return outcome
