"""
Reducer - Applies commands to match state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state, the input is never mutated
- Validates against the original state, then mutates a clone
- Returns ActionResult with success/failure; rule violations are never raised
- Structural board errors are translated to error codes
"""

from __future__ import annotations
import logging
from dataclasses import dataclass

from .action import (
    Action,
    ActionResult,
    ActionType,
    AttackOutcome,
    CaptureOutcome,
    ErrorCode,
    MoveOutcome,
    PurchaseOutcome,
    SelectionOutcome,
)
from .board import Unit
from .capture import attempt_capture
from .combat import apply_damage, resolve_attack
from .economy import (
    ATTACK_SLOT,
    MOVE_SLOT,
    advance_clock,
    advance_turn,
    check_can_act,
    spend_action,
)
from .errors import BoardError, EmptyTileError, OutOfBoundsError, TileOccupiedError
from .reachability import reachable_tiles
from .rules import ActionEconomy, Position
from .setup import new_match
from .state import GamePhase, MatchState, Selection, SelectionMode
from .targeting import attackable_tiles, in_attack_range

logger = logging.getLogger(__name__)

BOARD_ERROR_CODES = {
    OutOfBoundsError: ErrorCode.OUT_OF_BOUNDS,
    TileOccupiedError: ErrorCode.TILE_OCCUPIED,
    EmptyTileError: ErrorCode.EMPTY_TILE,
}


@dataclass
class Reducer:
    """
    Reducer applies commands to match state.

    Stateless - all state is in MatchState, rules travel with it.
    """
    record_history: bool = True

    def apply(self, state: MatchState, action: Action) -> ActionResult:
        """
        Apply a command to the match state.

        Returns ActionResult with the new state, or the untouched input
        state and an error code.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            return validation_error

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                ErrorCode.INVALID_ACTION,
                state,
            )

        try:
            result = handler(state, action)
        except BoardError as e:
            code = BOARD_ERROR_CODES.get(type(e), ErrorCode.INVALID_ACTION)
            result = ActionResult.failure(str(e), code, state)

        if result.success:
            if self.record_history and self._should_record(action, result):
                result.new_state.action_history.append(action)
            logger.debug(f"{state.match_id}: {action.action_type.value} -> {result.status}")
        else:
            logger.debug(
                f"{state.match_id}: {action.action_type.value} rejected "
                f"({result.error_code.value if result.error_code else '-'}): {result.error}"
            )
        return result

    def _validate_action(self, state: MatchState, action: Action) -> ActionResult | None:
        """Phase and payload checks shared by all commands."""
        if state.phase == GamePhase.GAME_OVER and action.action_type != ActionType.RESET:
            return ActionResult.failure(
                f"Game is over - {state.winner or 'nobody'} won",
                ErrorCode.GAME_ALREADY_OVER,
                state,
            )

        payload = action.payload
        needs_position = {
            ActionType.SELECT_UNIT,
            ActionType.MOVE,
            ActionType.ATTACK,
            ActionType.CAPTURE,
            ActionType.PURCHASE_UNIT,
        }
        if action.action_type in needs_position and payload.position is None:
            return ActionResult.failure(
                f"{action.action_type.value} needs a position",
                ErrorCode.INVALID_ACTION,
                state,
            )
        if action.action_type in {ActionType.MOVE, ActionType.ATTACK} and payload.target is None:
            return ActionResult.failure(
                f"{action.action_type.value} needs a target position",
                ErrorCode.INVALID_ACTION,
                state,
            )
        if action.action_type == ActionType.PURCHASE_UNIT and not payload.unit_kind:
            return ActionResult.failure(
                "purchase_unit needs a unit kind",
                ErrorCode.INVALID_ACTION,
                state,
            )
        if action.action_type == ActionType.TICK and payload.now_ms is None:
            return ActionResult.failure("tick needs now_ms", ErrorCode.INVALID_ACTION, state)
        return None

    def _should_record(self, action: Action, result: ActionResult) -> bool:
        """Resets start a fresh history; idle ticks are not worth keeping."""
        if action.action_type == ActionType.RESET:
            return False
        if action.action_type == ActionType.TICK:
            outcome = result.outcome
            return bool(outcome.action_points_recovered or outcome.income)
        return True

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.SELECT_UNIT: self._handle_select_unit,
            ActionType.DESELECT: self._handle_deselect,
            ActionType.MOVE: self._handle_move,
            ActionType.ATTACK: self._handle_attack,
            ActionType.CAPTURE: self._handle_capture,
            ActionType.PURCHASE_UNIT: self._handle_purchase_unit,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.TICK: self._handle_tick,
            ActionType.RESET: self._handle_reset,
        }
        return handlers.get(action_type)

    # -- unit commands ---------------------------------------------------------

    def _unit_at(self, state: MatchState, pos: Position) -> Unit | ActionResult:
        unit = state.board.unit_at(pos)
        if unit is None:
            return ActionResult.failure(f"No unit at {pos}", ErrorCode.EMPTY_TILE, state)
        return unit

    def _handle_select_unit(self, state: MatchState, action: Action) -> ActionResult:
        """Select a unit and cache where it can move and what it can hit."""
        pos = action.payload.position
        unit = self._unit_at(state, pos)
        if isinstance(unit, ActionResult):
            return unit
        blocked = check_can_act(state, unit)
        if blocked:
            return blocked

        per_turn = state.ruleset.action_economy == ActionEconomy.PER_TURN
        if per_turn and unit.has_moved:
            mode = SelectionMode.ATTACK_PENDING
            reachable = frozenset()
        else:
            mode = SelectionMode.MOVE_PENDING
            reachable = reachable_tiles(state.board, state.catalog, pos, state.ruleset.movement_model)
        if per_turn and unit.has_attacked:
            targets = frozenset()
        else:
            targets = attackable_tiles(state.board, state.catalog, pos)

        new_state = state.clone()
        new_state.selection = Selection(pos, mode, reachable, targets)
        return ActionResult.success_with_state(
            new_state,
            changes=[f"Selected {unit.kind} {unit.unit_id} at {pos}"],
            outcome=SelectionOutcome(pos, mode.value, reachable, targets),
        )

    def _handle_deselect(self, state: MatchState, action: Action) -> ActionResult:
        new_state = state.clone()
        new_state.selection = None
        return ActionResult.success_with_state(new_state, changes=["Selection cleared"])

    def _handle_move(self, state: MatchState, action: Action) -> ActionResult:
        """Move a unit to a reachable empty tile."""
        from_pos = action.payload.position
        to_pos = action.payload.target
        unit = self._unit_at(state, from_pos)
        if isinstance(unit, ActionResult):
            return unit
        blocked = check_can_act(state, unit, MOVE_SLOT)
        if blocked:
            return blocked

        dest = state.board.tile_at(to_pos)
        if to_pos == from_pos or dest.unit is not None:
            return ActionResult.failure(
                f"{to_pos} is not a valid destination",
                ErrorCode.INVALID_DESTINATION,
                state,
            )
        reachable = reachable_tiles(state.board, state.catalog, from_pos, state.ruleset.movement_model)
        if to_pos not in reachable:
            return ActionResult.failure(
                f"{unit.unit_id} cannot reach {to_pos}",
                ErrorCode.NOT_REACHABLE,
                state,
            )

        new_state = state.clone()
        new_state.board.move_unit(from_pos, to_pos)
        moved = new_state.board.unit_at(to_pos)
        spend_action(new_state, moved, MOVE_SLOT)

        targets = frozenset()
        if check_can_act(new_state, moved, ATTACK_SLOT) is None:
            targets = attackable_tiles(new_state.board, new_state.catalog, to_pos)
        new_state.selection = (
            Selection(to_pos, SelectionMode.ATTACK_PENDING, frozenset(), targets)
            if targets else None
        )

        return ActionResult.success_with_state(
            new_state,
            changes=[f"{moved.kind} {moved.unit_id} moved from {from_pos} to {to_pos}"],
            outcome=MoveOutcome(moved.unit_id, from_pos, to_pos, targets),
        )

    def _handle_attack(self, state: MatchState, action: Action) -> ActionResult:
        """Resolve one attack; the attacker stays where it is."""
        attacker_pos = action.payload.position
        target_pos = action.payload.target
        attacker = self._unit_at(state, attacker_pos)
        if isinstance(attacker, ActionResult):
            return attacker
        blocked = check_can_act(state, attacker, ATTACK_SLOT)
        if blocked:
            return blocked

        defender = state.board.unit_at(target_pos)
        if defender is None or defender.faction == attacker.faction:
            return ActionResult.failure(
                f"No enemy unit at {target_pos}",
                ErrorCode.INVALID_TARGET,
                state,
            )
        if not in_attack_range(state.archetype_of(attacker), attacker_pos, target_pos):
            return ActionResult.failure(
                f"{target_pos} is out of range of {attacker.unit_id}",
                ErrorCode.OUT_OF_RANGE,
                state,
            )

        new_state = state.clone()
        attacker = new_state.board.unit_at(attacker_pos)
        defender = new_state.board.unit_at(target_pos)
        ruleset = new_state.ruleset
        damage = resolve_attack(
            attacker,
            defender,
            new_state.archetype_of(attacker),
            new_state.archetype_of(defender),
            new_state.terrain_at(target_pos),
            ruleset.damage_model,
            ruleset.min_damage,
        )
        remaining = apply_damage(defender, damage)
        spend_action(new_state, attacker, ATTACK_SLOT)
        new_state.selection = None

        changes = [f"{attacker.unit_id} hit {defender.unit_id} for {damage} damage"]
        destroyed = remaining == 0
        if destroyed:
            new_state.board.remove_unit(target_pos)
            changes.append(f"{defender.unit_id} was destroyed")

        winner = self._check_winner(new_state)
        if new_state.is_over:
            changes.append(f"Game over - {winner or 'nobody'} wins")

        return ActionResult.success_with_state(
            new_state,
            changes=changes,
            outcome=AttackOutcome(
                attacker.unit_id,
                defender.unit_id,
                damage,
                remaining,
                destroyed,
                winner,
            ),
        )

    def _handle_capture(self, state: MatchState, action: Action) -> ActionResult:
        """Advance capture of the objective the unit stands on."""
        pos = action.payload.position
        unit = self._unit_at(state, pos)
        if isinstance(unit, ActionResult):
            return unit
        blocked = check_can_act(state, unit, ATTACK_SLOT)
        if blocked:
            return blocked

        if not state.archetype_of(unit).can_capture:
            return ActionResult.failure(
                f"{unit.kind} units cannot capture",
                ErrorCode.NOT_CAPTURE_CAPABLE,
                state,
            )
        tile = state.board.tile_at(pos)
        if tile.objective is None:
            return ActionResult.failure(
                f"{tile.terrain} at {pos} is not an objective",
                ErrorCode.NOT_AN_OBJECTIVE,
                state,
            )
        if tile.objective.owner == unit.faction:
            return ActionResult.failure(
                f"{unit.faction} already owns {pos}",
                ErrorCode.ALREADY_OWNED,
                state,
            )

        new_state = state.clone()
        tile = new_state.board.tile_at(pos)
        unit = tile.unit
        ruleset = new_state.ruleset
        report = attempt_capture(tile, unit, ruleset.capture_increment, ruleset.capture_threshold)
        spend_action(new_state, unit, ATTACK_SLOT)
        new_state.selection = None

        if report.captured:
            change = f"{unit.faction} captured the {tile.terrain} at {pos}"
        else:
            change = (
                f"{unit.unit_id} capturing {tile.terrain} at {pos}: "
                f"{report.progress}/{ruleset.capture_threshold}"
            )
        return ActionResult.success_with_state(
            new_state,
            changes=[change],
            outcome=CaptureOutcome(report.progress, report.captured, report.owner),
        )

    # -- faction commands --------------------------------------------------

    def _handle_purchase_unit(self, state: MatchState, action: Action) -> ActionResult:
        """Buy a unit on a deployable objective the buyer owns."""
        pos = action.payload.position
        archetype = state.catalog.archetype(action.payload.unit_kind)
        tile = state.board.tile_at(pos)

        if tile.objective is None or tile.terrain not in state.catalog.deployable_kinds:
            return ActionResult.failure(
                f"Units can't be deployed at {pos}",
                ErrorCode.NOT_AN_OBJECTIVE,
                state,
            )
        owner = tile.objective.owner
        if owner is None:
            return ActionResult.failure(
                f"{tile.terrain} at {pos} has no owner",
                ErrorCode.NOT_AN_OBJECTIVE,
                state,
            )
        if (
            state.ruleset.action_economy == ActionEconomy.PER_TURN
            and owner != state.current_faction
        ):
            return ActionResult.failure(
                f"{owner} can't buy units during {state.current_faction}'s turn",
                ErrorCode.NOT_YOUR_TURN,
                state,
            )
        if tile.unit is not None:
            return ActionResult.failure(f"{pos} is occupied", ErrorCode.TILE_OCCUPIED, state)
        funds = state.factions[owner].resources
        if funds < archetype.cost:
            return ActionResult.failure(
                f"{archetype.kind} costs {archetype.cost}, {owner} has {funds}",
                ErrorCode.INSUFFICIENT_FUNDS,
                state,
            )

        new_state = state.clone()
        unit = Unit(
            unit_id=f"{owner}-{new_state.next_unit_serial}",
            kind=archetype.kind,
            faction=owner,
            health=archetype.max_health,
            position=pos,
        )
        new_state.board.place_unit(pos, unit)
        new_state.next_unit_serial += 1
        new_state.factions[owner].resources -= archetype.cost

        return ActionResult.success_with_state(
            new_state,
            changes=[f"{owner} bought {archetype.kind} {unit.unit_id} at {pos}"],
            outcome=PurchaseOutcome(unit),
        )

    def _handle_end_turn(self, state: MatchState, action: Action) -> ActionResult:
        new_state = state.clone()
        changes = advance_turn(new_state)
        return ActionResult.success_with_state(new_state, changes=changes)

    # -- system commands ---------------------------------------------------

    def _handle_tick(self, state: MatchState, action: Action) -> ActionResult:
        new_state = state.clone()
        outcome = advance_clock(new_state, action.payload.now_ms)
        changes = [
            f"{faction} recovered {points} action point(s)"
            for faction, points in outcome.action_points_recovered.items()
        ] + [
            f"{faction} collected {amount} income"
            for faction, amount in outcome.income.items()
        ]
        return ActionResult.success_with_state(new_state, changes=changes, outcome=outcome)

    def _handle_reset(self, state: MatchState, action: Action) -> ActionResult:
        """Rebuild the match from its stored config (same seed, same board)."""
        new_state = new_match(
            state.config,
            state.rules,
            now_ms=state.clock_ms,
            match_id=state.match_id,
        )
        logger.info(f"Match {state.match_id} reset")
        return ActionResult.success_with_state(new_state, changes=["Match reset"])

    def _check_winner(self, state: MatchState) -> str | None:
        """End the match once at most one faction has units left."""
        live = state.live_factions()
        if len(live) > 1:
            return None
        state.phase = GamePhase.GAME_OVER
        state.winner = live[0] if live else None
        state.selection = None
        logger.info(f"Match {state.match_id} over, winner: {state.winner}")
        return state.winner


_default_reducer = Reducer()


def apply_action(state: MatchState, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Uses a shared stateless Reducer.
    """
    return _default_reducer.apply(state, action)


def select_unit(state: MatchState, position: Position) -> ActionResult:
    return apply_action(state, Action.select_unit(position))


def deselect(state: MatchState) -> ActionResult:
    return apply_action(state, Action.deselect())


def move(state: MatchState, from_pos: Position, to_pos: Position) -> ActionResult:
    return apply_action(state, Action.move(from_pos, to_pos))


def attack(state: MatchState, attacker_pos: Position, target_pos: Position) -> ActionResult:
    return apply_action(state, Action.attack(attacker_pos, target_pos))


def capture(state: MatchState, unit_pos: Position) -> ActionResult:
    return apply_action(state, Action.capture(unit_pos))


def purchase_unit(state: MatchState, objective_pos: Position, unit_kind: str) -> ActionResult:
    return apply_action(state, Action.purchase_unit(objective_pos, unit_kind))


def end_turn(state: MatchState) -> ActionResult:
    return apply_action(state, Action.end_turn())


def tick(state: MatchState, now_ms: int) -> ActionResult:
    return apply_action(state, Action.tick(now_ms))


def reset(state: MatchState) -> ActionResult:
    return apply_action(state, Action.reset())
