"""
Rules - Ruleset options, generation policy and match configuration.

A Rules bundle is everything a match needs that doesn't change while
it is played:
- the terrain / unit catalog
- the ruleset (damage model, action economy, income, movement)
- the board generation policy
- the initial unit placements

Two very different games come out of the same engine by swapping the
ruleset; see skirmish.games for the built-in presets.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace, fields
from enum import Enum
from typing import Any

from .catalog import Catalog

Position = tuple[int, int]


class DamageModel(Enum):
    """How attack damage is computed."""
    FLAT = "flat"  # attack minus terrain-boosted defense, floor of 10
    HEALTH_SCALED = "health_scaled"  # both sides scaled by current health


class ActionEconomy(Enum):
    """What limits how often units may act."""
    PER_TURN = "per_turn"  # one move + one attack per unit per turn
    ACTION_POINTS = "action_points"  # shared faction pool, recovers over time


class IncomeModel(Enum):
    """When owned objectives pay out."""
    NONE = "none"
    TURN_START = "turn_start"
    REALTIME = "realtime"


class MovementModel(Enum):
    """How movement budget is spent per step."""
    TERRAIN = "terrain"  # destination terrain movement_cost
    UNIFORM = "uniform"  # every step costs 1


@dataclass(frozen=True)
class Ruleset:
    """Per-deployment rule switches and constants."""
    damage_model: DamageModel = DamageModel.FLAT
    action_economy: ActionEconomy = ActionEconomy.PER_TURN
    income_model: IncomeModel = IncomeModel.TURN_START
    movement_model: MovementModel = MovementModel.TERRAIN

    min_damage: int = 10  # FLAT model floor
    capture_increment: int = 50
    capture_threshold: int = 100
    income_amount: int = 100
    income_interval_ms: int = 10_000
    max_action_points: int = 10
    ap_recovery_ms: int = 60_000
    starting_resources: int = 0

    _ENUM_FIELDS = {
        "damage_model": DamageModel,
        "action_economy": ActionEconomy,
        "income_model": IncomeModel,
        "movement_model": MovementModel,
    }

    def with_overrides(self, overrides: dict[str, Any] | None) -> Ruleset:
        """
        Return a copy with some fields replaced.

        Enum fields accept either the enum member or its string value.
        Unknown keys raise ValueError.
        """
        if not overrides:
            return self
        known = {f.name for f in fields(self)}
        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                raise ValueError(f"Unknown ruleset option: {key}")
            enum_type = self._ENUM_FIELDS.get(key)
            if enum_type is not None and not isinstance(value, enum_type):
                value = enum_type(value)
            changes[key] = value
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = value.value if isinstance(value, Enum) else value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Ruleset:
        return cls().with_overrides(data)


@dataclass(frozen=True)
class Overlay:
    """Per-tile chance of replacing the base terrain."""
    kind: str
    probability: float


@dataclass(frozen=True)
class Scatter:
    """Fixed number of random tiles set to a terrain kind."""
    kind: str
    count: int


@dataclass(frozen=True)
class GenerationConfig:
    """
    Board generation policy.

    Passes run in order: weighted base terrain, overlays, scatters,
    road corridors, fixed objectives, faction bases.
    """
    base_weights: dict[str, float] = field(default_factory=lambda: {"plain": 1.0})
    overlays: tuple[Overlay, ...] = ()
    scatters: tuple[Scatter, ...] = ()
    roads: int = 0
    road_kind: str | None = None
    road_drift: float = 0.3
    objective_kind: str | None = None
    objectives: tuple[Position, ...] = ()
    base_kind: str | None = None
    bases: tuple[Position, ...] | None = None  # one per faction, defaults to corners
    home_rows: int = 3


@dataclass(frozen=True)
class Placement:
    """
    A unit placed at match start.

    Negative coordinates count from the far edge (-1 is the last
    column/row). A position of None means the faction's base tile.
    """
    faction_index: int
    kind: str
    position: Position | None = None


@dataclass(frozen=True)
class Rules:
    """A complete, named rules bundle."""
    rules_id: str
    name: str
    catalog: Catalog
    ruleset: Ruleset = field(default_factory=Ruleset)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    placements: tuple[Placement, ...] = ()
    factions: tuple[str, ...] = ("red", "blue")
    default_width: int = 10
    default_height: int = 10
    min_width: int = 3
    min_height: int = 3

    def with_ruleset(self, ruleset: Ruleset) -> Rules:
        return replace(self, ruleset=ruleset)


@dataclass(frozen=True)
class MatchConfig:
    """Parameters for starting a match."""
    width: int | None = None
    height: int | None = None
    faction_count: int = 2
    rng_seed: int | None = None
    ruleset: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "faction_count": self.faction_count,
            "rng_seed": self.rng_seed,
            "ruleset": {
                k: (v.value if isinstance(v, Enum) else v)
                for k, v in self.ruleset.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchConfig:
        return cls(
            width=data.get("width"),
            height=data.get("height"),
            faction_count=data.get("faction_count", 2),
            rng_seed=data.get("rng_seed"),
            ruleset=dict(data.get("ruleset") or {}),
        )
