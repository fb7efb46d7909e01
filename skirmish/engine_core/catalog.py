"""
Catalogs - Static terrain and unit archetype definitions.

Catalog entries are immutable and fixed when the rules are built.
Looking up a kind that isn't in the catalog is a configuration bug,
so it raises UnknownKindError instead of returning None.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from .errors import UnknownKindError


@dataclass(frozen=True)
class TerrainKind:
    """
    Terrain definition.

    movement_cost is the budget spent to step onto a tile of this kind.
    Objective terrain can be owned and captured; deployable objectives
    are where units are purchased.
    """
    kind: str
    movement_cost: float = 1.0
    defense_bonus_pct: int = 0
    is_objective: bool = False
    deployable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "movement_cost": self.movement_cost,
            "defense_bonus_pct": self.defense_bonus_pct,
            "is_objective": self.is_objective,
            "deployable": self.deployable,
        }


@dataclass(frozen=True)
class UnitArchetype:
    """Base combat stats a unit is instantiated from."""
    kind: str
    max_health: int
    attack: int
    defense: int
    move_range: int
    min_attack_range: int
    max_attack_range: int
    cost: int
    can_capture: bool = False

    @property
    def can_attack(self) -> bool:
        return self.max_attack_range > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "max_health": self.max_health,
            "attack": self.attack,
            "defense": self.defense,
            "move_range": self.move_range,
            "min_attack_range": self.min_attack_range,
            "max_attack_range": self.max_attack_range,
            "cost": self.cost,
            "can_capture": self.can_capture,
        }


@dataclass(frozen=True)
class Catalog:
    """Read-only lookup of terrain kinds and unit archetypes."""
    terrains: dict[str, TerrainKind] = field(default_factory=dict)
    archetypes: dict[str, UnitArchetype] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        terrains: list[TerrainKind],
        archetypes: list[UnitArchetype],
    ) -> Catalog:
        """Build a catalog from entry lists, keyed by kind."""
        return cls(
            terrains={t.kind: t for t in terrains},
            archetypes={a.kind: a for a in archetypes},
        )

    def terrain(self, kind: str) -> TerrainKind:
        try:
            return self.terrains[kind]
        except KeyError:
            raise UnknownKindError("terrain", kind) from None

    def archetype(self, kind: str) -> UnitArchetype:
        try:
            return self.archetypes[kind]
        except KeyError:
            raise UnknownKindError("unit", kind) from None

    def has_archetype(self, kind: str) -> bool:
        return kind in self.archetypes

    @property
    def objective_kinds(self) -> set[str]:
        return {k for k, t in self.terrains.items() if t.is_objective}

    @property
    def deployable_kinds(self) -> set[str]:
        return {k for k, t in self.terrains.items() if t.deployable}
