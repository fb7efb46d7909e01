"""
Targeting - Which enemy units a unit can attack from where it stands.
"""

from __future__ import annotations

from .board import Board
from .catalog import Catalog, UnitArchetype
from .rules import Position


def manhattan(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def in_attack_range(archetype: UnitArchetype, origin: Position, target: Position) -> bool:
    if not archetype.can_attack:
        return False
    distance = manhattan(origin, target)
    return archetype.min_attack_range <= distance <= archetype.max_attack_range


def attackable_tiles(board: Board, catalog: Catalog, origin: Position) -> frozenset[Position]:
    """
    Positions of enemy units within the attack range of the unit at origin.

    Scans every tile; boards are small. Empty origin or a unit with
    max_attack_range 0 -> empty set.
    """
    unit = board.unit_at(origin)
    if unit is None:
        return frozenset()
    archetype = catalog.archetype(unit.kind)
    if not archetype.can_attack:
        return frozenset()

    return frozenset(
        tile.position
        for tile in board.tiles()
        if tile.unit is not None
        and tile.unit.faction != unit.faction
        and in_attack_range(archetype, origin, tile.position)
    )
