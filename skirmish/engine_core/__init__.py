"""
Engine Core - Deterministic match state and command application.

The engine is the runtime that:
1. Builds a match from Rules (catalog + ruleset + generation policy)
2. Manages MatchState
3. Computes reachable tiles and attack targets
4. Applies commands via the reducer
5. Resolves combat, capture, income and action points
"""

from .catalog import Catalog, TerrainKind, UnitArchetype
from .rules import (
    ActionEconomy,
    DamageModel,
    GenerationConfig,
    IncomeModel,
    MatchConfig,
    MovementModel,
    Overlay,
    Placement,
    Rules,
    Ruleset,
    Scatter,
)
from .errors import (
    BoardError,
    DuplicateUnitError,
    EmptyTileError,
    OutOfBoundsError,
    RulesFileError,
    TileOccupiedError,
    UnknownKindError,
)
from .board import Board, ObjectiveState, Tile, Unit
from .reachability import movement_costs, reachable_tiles
from .targeting import attackable_tiles, in_attack_range, manhattan
from .combat import apply_damage, resolve_attack
from .capture import attempt_capture, collect_income
from .state import (
    FactionState,
    GamePhase,
    MatchState,
    Selection,
    SelectionMode,
    visible_state,
)
from .action import (
    Action,
    ActionPayload,
    ActionResult,
    ActionType,
    AttackOutcome,
    CaptureOutcome,
    ErrorCode,
    MoveOutcome,
    PurchaseOutcome,
    SelectionOutcome,
    TickOutcome,
)
from .setup import new_match
from .reducer import (
    Reducer,
    apply_action,
    attack,
    capture,
    deselect,
    end_turn,
    move,
    purchase_unit,
    reset,
    select_unit,
    tick,
)

__all__ = [
    "Catalog",
    "TerrainKind",
    "UnitArchetype",
    "ActionEconomy",
    "DamageModel",
    "GenerationConfig",
    "IncomeModel",
    "MatchConfig",
    "MovementModel",
    "Overlay",
    "Placement",
    "Rules",
    "Ruleset",
    "Scatter",
    "BoardError",
    "DuplicateUnitError",
    "EmptyTileError",
    "OutOfBoundsError",
    "RulesFileError",
    "TileOccupiedError",
    "UnknownKindError",
    "Board",
    "ObjectiveState",
    "Tile",
    "Unit",
    "movement_costs",
    "reachable_tiles",
    "attackable_tiles",
    "in_attack_range",
    "manhattan",
    "apply_damage",
    "resolve_attack",
    "attempt_capture",
    "collect_income",
    "FactionState",
    "GamePhase",
    "MatchState",
    "Selection",
    "SelectionMode",
    "visible_state",
    "Action",
    "ActionPayload",
    "ActionResult",
    "ActionType",
    "AttackOutcome",
    "CaptureOutcome",
    "ErrorCode",
    "MoveOutcome",
    "PurchaseOutcome",
    "SelectionOutcome",
    "TickOutcome",
    "new_match",
    "Reducer",
    "apply_action",
    "attack",
    "capture",
    "deselect",
    "end_turn",
    "move",
    "purchase_unit",
    "reset",
    "select_unit",
    "tick",
]
