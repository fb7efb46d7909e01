"""
Match State - Everything about one match at one point in time.

Design principles:
- Value semantics: commands return a new state, the input is never touched
- Serializable: to_snapshot() gives a JSON-safe dict, from_snapshot() restores it
- Rules travel with the state: catalog and effective ruleset
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .action import Action
from .board import Board, Unit
from .catalog import Catalog, TerrainKind, UnitArchetype
from .rules import MatchConfig, Position, Rules, Ruleset

SNAPSHOT_VERSION = 1


class GamePhase(Enum):
    """High-level match phases."""
    PLAYING = "playing"
    GAME_OVER = "game_over"


class SelectionMode(Enum):
    """What the selected unit is waiting to do."""
    MOVE_PENDING = "move_pending"
    ATTACK_PENDING = "attack_pending"


@dataclass(frozen=True)
class Selection:
    """The currently selected unit and its precomputed options."""
    position: Position
    mode: SelectionMode
    reachable: frozenset[Position] = frozenset()
    targets: frozenset[Position] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": list(self.position),
            "mode": self.mode.value,
            "reachable": sorted(list(p) for p in self.reachable),
            "targets": sorted(list(p) for p in self.targets),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Selection:
        return cls(
            position=tuple(data["position"]),
            mode=SelectionMode(data["mode"]),
            reachable=frozenset(tuple(p) for p in data.get("reachable", [])),
            targets=frozenset(tuple(p) for p in data.get("targets", [])),
        )


@dataclass
class FactionState:
    """Per-faction economy."""
    faction: str
    resources: int = 0
    action_points: int = 0
    last_recovery_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "faction": self.faction,
            "resources": self.resources,
            "action_points": self.action_points,
            "last_recovery_ms": self.last_recovery_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FactionState:
        return cls(
            faction=data["faction"],
            resources=data.get("resources", 0),
            action_points=data.get("action_points", 0),
            last_recovery_ms=data.get("last_recovery_ms", 0),
        )


@dataclass
class MatchState:
    """
    Complete state of a match.

    Only the reducer produces new states; everything else reads them.
    """
    match_id: str
    rules: Rules
    config: MatchConfig
    board: Board
    factions: dict[str, FactionState]
    faction_order: list[str]
    current_faction: str

    turn_number: int = 1
    phase: GamePhase = GamePhase.PLAYING
    winner: str | None = None
    selection: Selection | None = None

    last_income_ms: int = 0
    # Latest time a tick has advanced the match to
    clock_ms: int = 0
    next_unit_serial: int = 1

    # Action history for replay
    action_history: list[Action] = field(default_factory=list)

    @property
    def catalog(self) -> Catalog:
        return self.rules.catalog

    @property
    def ruleset(self) -> Ruleset:
        return self.rules.ruleset

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def interaction_state(self) -> str:
        return "unit_selected" if self.selection else "awaiting_selection"

    def faction(self, faction: str) -> FactionState:
        return self.factions[faction]

    def archetype_of(self, unit: Unit) -> UnitArchetype:
        return self.catalog.archetype(unit.kind)

    def terrain_at(self, pos: Position) -> TerrainKind:
        return self.catalog.terrain(self.board.tile_at(pos).terrain)

    def live_factions(self) -> list[str]:
        """Factions that still have units, in turn order."""
        alive = {u.faction for u in self.board.units()}
        return [f for f in self.faction_order if f in alive]

    def _copy_with(self, **kwargs) -> MatchState:
        """Create a shallow copy with some fields replaced."""
        return MatchState(
            match_id=kwargs.get("match_id", self.match_id),
            rules=kwargs.get("rules", self.rules),
            config=kwargs.get("config", self.config),
            board=kwargs.get("board", self.board),
            factions=kwargs.get("factions", self.factions),
            faction_order=kwargs.get("faction_order", self.faction_order),
            current_faction=kwargs.get("current_faction", self.current_faction),
            turn_number=kwargs.get("turn_number", self.turn_number),
            phase=kwargs.get("phase", self.phase),
            winner=kwargs.get("winner", self.winner),
            selection=kwargs.get("selection", self.selection),
            last_income_ms=kwargs.get("last_income_ms", self.last_income_ms),
            clock_ms=kwargs.get("clock_ms", self.clock_ms),
            next_unit_serial=kwargs.get("next_unit_serial", self.next_unit_serial),
            action_history=kwargs.get("action_history", self.action_history),
        )

    def clone(self) -> MatchState:
        """
        Independent copy that can be mutated freely.

        Rules and config are immutable and shared.
        """
        return self._copy_with(
            board=self.board.clone(),
            factions={
                k: FactionState(v.faction, v.resources, v.action_points, v.last_recovery_ms)
                for k, v in self.factions.items()
            },
            faction_order=list(self.faction_order),
            action_history=list(self.action_history),
        )

    # -- serialization -------------------------------------------------------

    def to_snapshot(self) -> dict[str, Any]:
        """Plain, JSON-safe dict of the full state (catalog excluded)."""
        return {
            "version": SNAPSHOT_VERSION,
            "match_id": self.match_id,
            "rules_id": self.rules.rules_id,
            "ruleset": self.ruleset.to_dict(),
            "config": self.config.to_dict(),
            "board": self.board.to_dict(),
            "factions": {k: v.to_dict() for k, v in self.factions.items()},
            "faction_order": list(self.faction_order),
            "current_faction": self.current_faction,
            "turn_number": self.turn_number,
            "phase": self.phase.value,
            "winner": self.winner,
            "selection": self.selection.to_dict() if self.selection else None,
            "last_income_ms": self.last_income_ms,
            "clock_ms": self.clock_ms,
            "next_unit_serial": self.next_unit_serial,
            "action_history": [a.to_dict() for a in self.action_history],
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any], rules: Rules) -> MatchState:
        """
        Restore a state from to_snapshot() output.

        rules supplies the catalog and generation policy; the ruleset
        stored in the snapshot replaces rules.ruleset.
        """
        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {version}")
        if data.get("rules_id") not in (None, rules.rules_id):
            raise ValueError(
                f"Snapshot is for rules '{data['rules_id']}', got '{rules.rules_id}'"
            )

        selection = data.get("selection")
        return cls(
            match_id=data["match_id"],
            rules=rules.with_ruleset(Ruleset.from_dict(data.get("ruleset") or {})),
            config=MatchConfig.from_dict(data.get("config") or {}),
            board=Board.from_dict(data["board"]),
            factions={
                k: FactionState.from_dict(v) for k, v in data["factions"].items()
            },
            faction_order=list(data["faction_order"]),
            current_faction=data["current_faction"],
            turn_number=data.get("turn_number", 1),
            phase=GamePhase(data.get("phase", GamePhase.PLAYING.value)),
            winner=data.get("winner"),
            selection=Selection.from_dict(selection) if selection else None,
            last_income_ms=data.get("last_income_ms", 0),
            clock_ms=data.get("clock_ms", data.get("last_income_ms", 0)),
            next_unit_serial=data.get("next_unit_serial", 1),
            action_history=[Action.from_dict(a) for a in data.get("action_history", [])],
        )


def visible_state(state: MatchState) -> dict[str, Any]:
    """
    Read-only view for rendering.

    A freshly built plain dict; changing it has no effect on the match.
    Unit entries carry their archetype's max_health for health bars.
    """
    rows = []
    for row in state.board.rows():
        cells = []
        for tile in row:
            unit = None
            if tile.unit is not None:
                unit = tile.unit.to_dict()
                unit["max_health"] = state.archetype_of(tile.unit).max_health
            cells.append({
                "terrain": tile.terrain,
                "unit": unit,
                "objective": tile.objective.to_dict() if tile.objective else None,
            })
        rows.append(cells)

    return {
        "match_id": state.match_id,
        "rules_id": state.rules.rules_id,
        "width": state.board.width,
        "height": state.board.height,
        "tiles": rows,
        "current_faction": state.current_faction,
        "turn_number": state.turn_number,
        "phase": state.phase.value,
        "winner": state.winner,
        "interaction": state.interaction_state,
        "selection": state.selection.to_dict() if state.selection else None,
        "factions": {k: v.to_dict() for k, v in state.factions.items()},
        "faction_order": list(state.faction_order),
    }
