"""
Board - Rectangular grid of tiles and seeded map generation.

Tiles live in a flat list indexed by y * width + x. The board also
keeps an index of unit id -> position so units can be found without
scanning; the tile that holds a unit is the authority on its position.

Board mutators are purely structural. They never check game rules
(reachability, turn order, funds); that is the reducer's job.
"""

from __future__ import annotations
import random
from dataclasses import dataclass, field, replace
from typing import Any, Iterator

from .catalog import Catalog, TerrainKind
from .errors import (
    OutOfBoundsError,
    TileOccupiedError,
    EmptyTileError,
    DuplicateUnitError,
)
from .rules import GenerationConfig, Position

NEIGHBOR_OFFSETS = ((0, -1), (1, 0), (0, 1), (-1, 0))


@dataclass
class Unit:
    """A unit on the board. Its stats come from the archetype named by kind."""
    unit_id: str
    kind: str
    faction: str
    health: int
    position: Position
    has_moved: bool = False
    has_attacked: bool = False

    def clone(self) -> Unit:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "unit_id": self.unit_id,
            "kind": self.kind,
            "faction": self.faction,
            "health": self.health,
            "position": list(self.position),
            "has_moved": self.has_moved,
            "has_attacked": self.has_attacked,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Unit:
        return cls(
            unit_id=data["unit_id"],
            kind=data["kind"],
            faction=data["faction"],
            health=data["health"],
            position=tuple(data["position"]),
            has_moved=data.get("has_moved", False),
            has_attacked=data.get("has_attacked", False),
        )


@dataclass
class ObjectiveState:
    """
    Ownership and capture progress of an objective tile.

    capturing_faction is whoever the current progress belongs to.
    """
    owner: str | None = None
    capture_progress: int = 0
    capturing_faction: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "capture_progress": self.capture_progress,
            "capturing_faction": self.capturing_faction,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ObjectiveState:
        return cls(
            owner=data.get("owner"),
            capture_progress=data.get("capture_progress", 0),
            capturing_faction=data.get("capturing_faction"),
        )


@dataclass
class Tile:
    """One grid cell: terrain, optional unit, optional objective state."""
    position: Position
    terrain: str
    unit: Unit | None = None
    objective: ObjectiveState | None = None

    @property
    def is_occupied(self) -> bool:
        return self.unit is not None

    @property
    def is_objective(self) -> bool:
        return self.objective is not None

    @property
    def owner(self) -> str | None:
        return self.objective.owner if self.objective else None

    def clone(self) -> Tile:
        return Tile(
            position=self.position,
            terrain=self.terrain,
            unit=self.unit.clone() if self.unit else None,
            objective=replace(self.objective) if self.objective else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "x": self.position[0],
            "y": self.position[1],
            "terrain": self.terrain,
            "unit": self.unit.to_dict() if self.unit else None,
            "objective": self.objective.to_dict() if self.objective else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tile:
        unit_data = data.get("unit")
        objective_data = data.get("objective")
        return cls(
            position=(data["x"], data["y"]),
            terrain=data["terrain"],
            unit=Unit.from_dict(unit_data) if unit_data else None,
            objective=ObjectiveState.from_dict(objective_data) if objective_data is not None else None,
        )


class Board:
    """
    The grid. Exclusively owns its tiles; tiles exclusively own their unit.

    Usage:
        board = Board.generate(12, 10, config, catalog, random.Random(7))
        tile = board.tile_at((2, 2))
        board.move_unit((2, 2), (3, 2))
    """

    def __init__(self, width: int, height: int, tiles: list[Tile]):
        if width < 1 or height < 1:
            raise ValueError(f"Board must be at least 1x1, got {width}x{height}")
        if len(tiles) != width * height:
            raise ValueError(f"Expected {width * height} tiles, got {len(tiles)}")
        self.width = width
        self.height = height
        self._tiles = tiles
        self._unit_index: dict[str, Position] = {}
        for i, tile in enumerate(tiles):
            expected = (i % width, i // width)
            if tile.position != expected:
                raise ValueError(f"Tile {tile.position} stored at index of {expected}")
            if tile.unit is not None:
                if tile.unit.unit_id in self._unit_index:
                    raise DuplicateUnitError(tile.unit.unit_id)
                tile.unit.position = tile.position
                self._unit_index[tile.unit.unit_id] = tile.position

    @classmethod
    def filled(cls, width: int, height: int, terrain: TerrainKind) -> Board:
        """Board covered in a single terrain kind."""
        tiles = [
            Tile(
                position=(x, y),
                terrain=terrain.kind,
                objective=ObjectiveState() if terrain.is_objective else None,
            )
            for y in range(height)
            for x in range(width)
        ]
        return cls(width, height, tiles)

    @classmethod
    def generate(
        cls,
        width: int,
        height: int,
        config: GenerationConfig,
        catalog: Catalog,
        rng: random.Random,
        factions: tuple[str, ...] | list[str] = ("red", "blue"),
    ) -> Board:
        return generate_board(width, height, config, catalog, rng, factions)

    # -- coordinates -------------------------------------------------------

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def index_of(self, pos: Position) -> int:
        if not self.in_bounds(pos):
            raise OutOfBoundsError(pos, self.width, self.height)
        return pos[1] * self.width + pos[0]

    def neighbors(self, pos: Position) -> list[Position]:
        """In-bounds orthogonal neighbors. Diagonals are never adjacent."""
        x, y = pos
        result = []
        for dx, dy in NEIGHBOR_OFFSETS:
            nb = (x + dx, y + dy)
            if self.in_bounds(nb):
                result.append(nb)
        return result

    # -- queries -----------------------------------------------------------

    def tile_at(self, pos: Position) -> Tile:
        return self._tiles[self.index_of(pos)]

    def unit_at(self, pos: Position) -> Unit | None:
        return self.tile_at(pos).unit

    def tiles(self) -> Iterator[Tile]:
        return iter(self._tiles)

    def rows(self) -> list[list[Tile]]:
        return [
            self._tiles[y * self.width:(y + 1) * self.width]
            for y in range(self.height)
        ]

    def units(self) -> list[Unit]:
        return [self.tile_at(pos).unit for pos in self._unit_index.values()]

    def units_of(self, faction: str) -> list[Unit]:
        return [u for u in self.units() if u.faction == faction]

    def unit_count(self, faction: str) -> int:
        return sum(1 for u in self.units() if u.faction == faction)

    def find_unit(self, unit_id: str) -> Unit | None:
        pos = self._unit_index.get(unit_id)
        if pos is None:
            return None
        return self.tile_at(pos).unit

    def objective_tiles(self) -> list[Tile]:
        return [t for t in self._tiles if t.objective is not None]

    # -- mutators ----------------------------------------------------------

    def place_unit(self, pos: Position, unit: Unit) -> Tile:
        tile = self.tile_at(pos)
        if tile.unit is not None:
            raise TileOccupiedError(pos)
        if unit.unit_id in self._unit_index:
            raise DuplicateUnitError(unit.unit_id)
        unit.position = pos
        tile.unit = unit
        self._unit_index[unit.unit_id] = pos
        return tile

    def remove_unit(self, pos: Position) -> Tile:
        tile = self.tile_at(pos)
        if tile.unit is None:
            raise EmptyTileError(pos)
        del self._unit_index[tile.unit.unit_id]
        tile.unit = None
        return tile

    def move_unit(self, from_pos: Position, to_pos: Position) -> tuple[Tile, Tile]:
        """Relocate a unit. Returns (source tile, destination tile)."""
        source = self.tile_at(from_pos)
        dest = self.tile_at(to_pos)
        if source.unit is None:
            raise EmptyTileError(from_pos)
        if dest.unit is not None:
            raise TileOccupiedError(to_pos)
        unit = source.unit
        source.unit = None
        unit.position = to_pos
        dest.unit = unit
        self._unit_index[unit.unit_id] = to_pos
        return source, dest

    def set_terrain(self, pos: Position, terrain: TerrainKind, owner: str | None = None) -> Tile:
        """Change a tile's terrain, resetting its objective state to match."""
        tile = self.tile_at(pos)
        tile.terrain = terrain.kind
        tile.objective = ObjectiveState(owner=owner) if terrain.is_objective else None
        return tile

    # -- copying / serialization ---------------------------------------------

    def clone(self) -> Board:
        return Board(self.width, self.height, [t.clone() for t in self._tiles])

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self._tiles == other._tiles
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "tiles": [t.to_dict() for t in self._tiles],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Board:
        tiles = [Tile.from_dict(t) for t in data["tiles"]]
        tiles.sort(key=lambda t: (t.position[1], t.position[0]))
        return cls(data["width"], data["height"], tiles)


# =============================================================================
# Generation
# =============================================================================

def resolve_position(pos: Position, width: int, height: int) -> Position:
    """Map negative coordinates to offsets from the far edge."""
    x, y = pos
    if x < 0:
        x += width
    if y < 0:
        y += height
    return (x, y)


def default_base_positions(width: int, height: int, count: int) -> list[Position]:
    """Bases two tiles in from opposing corners, clamped to small boards."""
    def clamp(value: int, upper: int) -> int:
        return max(0, min(value, upper - 1))

    corners = [
        (2, 2),
        (width - 3, height - 3),
        (width - 3, 2),
        (2, height - 3),
    ]
    if count > len(corners):
        raise ValueError(f"No default base positions for {count} factions")
    return [(clamp(x, width), clamp(y, height)) for x, y in corners[:count]]


def generate_board(
    width: int,
    height: int,
    config: GenerationConfig,
    catalog: Catalog,
    rng: random.Random,
    factions: tuple[str, ...] | list[str] = ("red", "blue"),
) -> Board:
    """
    Generate a board from a generation policy.

    All randomness comes from rng, so the same seed always yields the
    same board.
    """
    kinds = list(config.base_weights)
    weights = [config.base_weights[k] for k in kinds]
    terrains = {k: catalog.terrain(k) for k in kinds}

    tiles = []
    for y in range(height):
        for x in range(width):
            terrain = terrains[rng.choices(kinds, weights=weights)[0]]
            tiles.append(Tile(
                position=(x, y),
                terrain=terrain.kind,
                objective=ObjectiveState() if terrain.is_objective else None,
            ))
    board = Board(width, height, tiles)

    overlays = [(catalog.terrain(o.kind), o.probability) for o in config.overlays]
    if overlays:
        for tile in board.tiles():
            for terrain, probability in overlays:
                if rng.random() < probability:
                    board.set_terrain(tile.position, terrain)

    for scatter in config.scatters:
        terrain = catalog.terrain(scatter.kind)
        for _ in range(scatter.count):
            pos = (rng.randrange(width), rng.randrange(height))
            board.set_terrain(pos, terrain)

    if config.roads and config.road_kind:
        road = catalog.terrain(config.road_kind)
        for i in range(config.roads):
            _carve_road(board, road, rng, config.road_drift, vertical=(i % 2 == 0))

    if config.objective_kind:
        objective = catalog.terrain(config.objective_kind)
        for pos in config.objectives:
            board.set_terrain(resolve_position(pos, width, height), objective)

    if config.base_kind:
        base = catalog.terrain(config.base_kind)
        positions = list(config.bases) if config.bases else default_base_positions(
            width, height, len(factions)
        )
        for faction, pos in zip(factions, positions):
            board.set_terrain(resolve_position(pos, width, height), base, owner=faction)

    _seed_ownership(board, factions, config.home_rows)
    return board


def _carve_road(
    board: Board,
    road: TerrainKind,
    rng: random.Random,
    drift: float,
    vertical: bool = True,
) -> None:
    """
    Random walk from one edge to the opposite one.

    At each step the walk may shift one tile sideways, but only while
    it is strictly inside the board so it never leaves it.
    """
    length = board.height if vertical else board.width
    span = board.width if vertical else board.height
    lane = rng.randrange(span)
    for step in range(length):
        pos = (lane, step) if vertical else (step, lane)
        board.set_terrain(pos, road)
        if rng.random() < drift and 0 < lane < span - 1:
            lane += 1 if rng.random() < 0.5 else -1


def _seed_ownership(board: Board, factions: tuple[str, ...] | list[str], home_rows: int) -> None:
    """Unowned objectives near a faction's home edge start out as theirs."""
    if home_rows <= 0 or not factions:
        return
    for tile in board.objective_tiles():
        if tile.objective.owner is not None:
            continue
        y = tile.position[1]
        if y < home_rows:
            tile.objective.owner = factions[0]
        elif len(factions) > 1 and y >= board.height - home_rows:
            tile.objective.owner = factions[1]
