"""
Combat - Damage formulas.

Two models, selected by the ruleset:
- FLAT: attack minus terrain-boosted defense, with a floor and capped
  at the defender's remaining health
- HEALTH_SCALED: both sides' stats scale with current health, at least 1

Arithmetic is exact (Fraction) and the result is floored to an int.
"""

from __future__ import annotations
import math
from fractions import Fraction

from .board import Unit
from .catalog import TerrainKind, UnitArchetype
from .rules import DamageModel


def flat_damage(
    attack: int,
    defense: int,
    defense_bonus_pct: int,
    defender_health: int,
    min_damage: int = 10,
) -> int:
    mitigated = defense + Fraction(defense * defense_bonus_pct, 100)
    raw = math.floor(attack - mitigated)
    return min(defender_health, max(min_damage, raw))


def health_scaled_damage(
    attack: int,
    attacker_health: int,
    defense: int,
    defender_health: int,
    defense_bonus_pct: int,
) -> int:
    power = attack * Fraction(attacker_health, 100)
    resistance = (
        defense
        * Fraction(defender_health, 100)
        * (1 + Fraction(defense_bonus_pct, 100))
        / 2
    )
    return max(1, math.floor(power - resistance))


def resolve_attack(
    attacker: Unit,
    defender: Unit,
    attacker_archetype: UnitArchetype,
    defender_archetype: UnitArchetype,
    defender_terrain: TerrainKind,
    model: DamageModel = DamageModel.FLAT,
    min_damage: int = 10,
) -> int:
    """Damage the attacker deals to the defender. Does not modify either unit."""
    if model == DamageModel.HEALTH_SCALED:
        return health_scaled_damage(
            attacker_archetype.attack,
            attacker.health,
            defender_archetype.defense,
            defender.health,
            defender_terrain.defense_bonus_pct,
        )
    return flat_damage(
        attacker_archetype.attack,
        defender_archetype.defense,
        defender_terrain.defense_bonus_pct,
        defender.health,
        min_damage,
    )


def apply_damage(defender: Unit, damage: int) -> int:
    """Subtract damage from the defender in place. Returns remaining health."""
    defender.health = max(0, defender.health - damage)
    return defender.health
