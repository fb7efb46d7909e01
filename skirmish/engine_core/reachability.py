"""
Reachability - Which tiles a unit can move to this action.

Best-first search from the unit's tile. Every tile is settled at most
once with its cheapest path cost, so the result doesn't depend on the
order neighbors are visited and a larger budget always reaches a
superset of what a smaller one does.

Rules:
- 4-directional steps only
- enemy-held tiles are never entered
- own-faction tiles can be passed through but not ended on
- the origin is never a destination
"""

from __future__ import annotations
import heapq
import itertools

from .board import Board
from .catalog import Catalog, TerrainKind
from .rules import MovementModel, Position


def step_cost(terrain: TerrainKind, model: MovementModel = MovementModel.TERRAIN) -> float:
    """Budget spent to step onto a tile of this terrain."""
    if model == MovementModel.UNIFORM:
        return 1
    return terrain.movement_cost


def movement_costs(
    board: Board,
    catalog: Catalog,
    origin: Position,
    model: MovementModel = MovementModel.TERRAIN,
    budget: float | None = None,
) -> dict[Position, float]:
    """
    Cheapest cost to every tile the unit at origin can enter within budget.

    Includes the origin (cost 0) and own-occupied transit tiles. Budget
    defaults to the unit's move_range. Empty origin -> {}.
    """
    unit = board.unit_at(origin)
    if unit is None:
        return {}
    if budget is None:
        budget = catalog.archetype(unit.kind).move_range

    best: dict[Position, float] = {origin: 0}
    settled: set[Position] = set()
    counter = itertools.count()
    frontier = [(0, next(counter), origin)]

    while frontier:
        cost, _, pos = heapq.heappop(frontier)
        if pos in settled:
            continue
        settled.add(pos)

        for nb in board.neighbors(pos):
            if nb in settled:
                continue
            tile = board.tile_at(nb)
            if tile.unit is not None and tile.unit.faction != unit.faction:
                continue
            new_cost = cost + step_cost(catalog.terrain(tile.terrain), model)
            if new_cost > budget:
                continue
            if nb in best and best[nb] <= new_cost:
                continue
            best[nb] = new_cost
            heapq.heappush(frontier, (new_cost, next(counter), nb))

    return best


def reachable_tiles(
    board: Board,
    catalog: Catalog,
    origin: Position,
    model: MovementModel = MovementModel.TERRAIN,
    budget: float | None = None,
) -> frozenset[Position]:
    """Empty tiles the unit at origin can end its move on."""
    costs = movement_costs(board, catalog, origin, model, budget)
    return frozenset(
        pos for pos in costs
        if pos != origin and board.tile_at(pos).unit is None
    )
