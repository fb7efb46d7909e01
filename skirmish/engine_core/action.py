"""
Action System - Commands, payloads, results and outcomes.

Actions represent:
1. Unit commands (select, move, attack, capture)
2. Faction commands (purchase unit, end turn)
3. System commands (clock tick, reset)

All state changes flow through actions. Rule violations come back as
failed ActionResults carrying an ErrorCode; they are never raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .rules import Position


class ActionType(Enum):
    """Types of commands in the system."""
    # Unit commands
    SELECT_UNIT = "select_unit"
    DESELECT = "deselect"
    MOVE = "move"
    ATTACK = "attack"
    CAPTURE = "capture"

    # Faction commands
    PURCHASE_UNIT = "purchase_unit"
    END_TURN = "end_turn"

    # System commands
    TICK = "tick"
    RESET = "reset"


class ErrorCode(str, Enum):
    """Why a command was rejected."""
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    TILE_OCCUPIED = "TILE_OCCUPIED"
    EMPTY_TILE = "EMPTY_TILE"
    NOT_YOUR_UNIT = "NOT_YOUR_UNIT"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    NO_ACTIONS_LEFT = "NO_ACTIONS_LEFT"
    ALREADY_ACTED = "ALREADY_ACTED"
    INVALID_DESTINATION = "INVALID_DESTINATION"
    NOT_REACHABLE = "NOT_REACHABLE"
    INVALID_TARGET = "INVALID_TARGET"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    NOT_CAPTURE_CAPABLE = "NOT_CAPTURE_CAPABLE"
    NOT_AN_OBJECTIVE = "NOT_AN_OBJECTIVE"
    ALREADY_OWNED = "ALREADY_OWNED"
    GAME_ALREADY_OVER = "GAME_ALREADY_OVER"
    INVALID_ACTION = "INVALID_ACTION"


@dataclass
class ActionPayload:
    """
    Parameters of a command.

    Different action types use different fields; validation happens
    in the reducer.
    """
    position: Position | None = None  # selected / acting unit, or objective
    target: Position | None = None  # move destination or attack target
    unit_kind: str | None = None  # for purchases
    now_ms: int | None = None  # for ticks

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": list(self.position) if self.position is not None else None,
            "target": list(self.target) if self.target is not None else None,
            "unit_kind": self.unit_kind,
            "now_ms": self.now_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionPayload:
        position = data.get("position")
        target = data.get("target")
        return cls(
            position=tuple(position) if position is not None else None,
            target=tuple(target) if target is not None else None,
            unit_kind=data.get("unit_kind"),
            now_ms=data.get("now_ms"),
        )


@dataclass
class Action:
    """
    A complete command to be applied to a match state.

    Actions are plain values: they can be logged, serialized and
    replayed against the same starting state.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def select_unit(cls, position: Position) -> Action:
        return cls(ActionType.SELECT_UNIT, ActionPayload(position=tuple(position)))

    @classmethod
    def deselect(cls) -> Action:
        return cls(ActionType.DESELECT)

    @classmethod
    def move(cls, from_pos: Position, to_pos: Position) -> Action:
        return cls(
            ActionType.MOVE,
            ActionPayload(position=tuple(from_pos), target=tuple(to_pos)),
        )

    @classmethod
    def attack(cls, attacker_pos: Position, target_pos: Position) -> Action:
        return cls(
            ActionType.ATTACK,
            ActionPayload(position=tuple(attacker_pos), target=tuple(target_pos)),
        )

    @classmethod
    def capture(cls, unit_pos: Position) -> Action:
        return cls(ActionType.CAPTURE, ActionPayload(position=tuple(unit_pos)))

    @classmethod
    def purchase_unit(cls, objective_pos: Position, unit_kind: str) -> Action:
        return cls(
            ActionType.PURCHASE_UNIT,
            ActionPayload(position=tuple(objective_pos), unit_kind=unit_kind),
        )

    @classmethod
    def end_turn(cls) -> Action:
        return cls(ActionType.END_TURN)

    @classmethod
    def tick(cls, now_ms: int) -> Action:
        return cls(ActionType.TICK, ActionPayload(now_ms=now_ms))

    @classmethod
    def reset(cls) -> Action:
        return cls(ActionType.RESET)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_type": self.action_type.value,
            "payload": self.payload.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        return cls(
            action_type=ActionType(data["action_type"]),
            payload=ActionPayload.from_dict(data.get("payload") or {}),
        )


# =============================================================================
# Outcomes - what the UI needs to know about a successful command
# =============================================================================

@dataclass
class SelectionOutcome:
    position: Position
    mode: str
    reachable: frozenset[Position] = frozenset()
    targets: frozenset[Position] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": list(self.position),
            "mode": self.mode,
            "reachable": sorted(list(p) for p in self.reachable),
            "targets": sorted(list(p) for p in self.targets),
        }


@dataclass
class MoveOutcome:
    unit_id: str
    from_pos: Position
    to_pos: Position
    targets: frozenset[Position] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return {
            "unit_id": self.unit_id,
            "from": list(self.from_pos),
            "to": list(self.to_pos),
            "targets": sorted(list(p) for p in self.targets),
        }


@dataclass
class AttackOutcome:
    attacker_id: str
    defender_id: str
    damage_dealt: int
    defender_remaining: int
    defender_destroyed: bool
    winner: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "attacker_id": self.attacker_id,
            "defender_id": self.defender_id,
            "damage_dealt": self.damage_dealt,
            "defender_remaining": self.defender_remaining,
            "defender_destroyed": self.defender_destroyed,
            "winner": self.winner,
        }


@dataclass
class CaptureOutcome:
    progress: int
    captured: bool
    owner: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "progress": self.progress,
            "captured": self.captured,
            "owner": self.owner,
        }


@dataclass
class PurchaseOutcome:
    unit: Any  # Unit

    def to_dict(self) -> dict[str, Any]:
        return {"unit": self.unit.to_dict()}


@dataclass
class TickOutcome:
    action_points_recovered: dict[str, int] = field(default_factory=dict)
    income: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_points_recovered": dict(self.action_points_recovered),
            "income": dict(self.income),
        }


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the command succeeded
    - The resulting state (the untouched input on failure)
    - Error message and code (if failed)
    - Human-readable changes and a typed outcome (for the UI)
    """
    success: bool
    new_state: Any | None = None  # MatchState
    error: str | None = None
    error_code: ErrorCode | None = None

    state_changes: list[str] = field(default_factory=list)
    outcome: Any | None = None

    @property
    def status(self) -> str:
        """One-line status message for display."""
        if not self.success:
            return self.error or "Command rejected"
        if self.state_changes:
            return self.state_changes[-1]
        return "OK"

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: ErrorCode | None = None,
        state: Any | None = None,
    ) -> ActionResult:
        """Create a failure result. state is returned unchanged."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        outcome: Any | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            outcome=outcome,
        )
