"""
Tests for the board and map generation.

Tests:
- Bounds checking and structural errors
- Unit placement / movement / removal
- Seeded generation (determinism, bases, roads, ownership)
"""

import random

import pytest

from ..engine_core.board import Board, Unit, default_base_positions, generate_board
from ..engine_core.errors import (
    DuplicateUnitError,
    EmptyTileError,
    OutOfBoundsError,
    TileOccupiedError,
)
from ..engine_core.rules import GenerationConfig, Scatter


def _unit(unit_id="red-1", faction="red", pos=(0, 0)):
    return Unit(unit_id, "infantry", faction, 100, pos)


@pytest.fixture
def board(skirmish_rules) -> Board:
    return Board.filled(6, 4, skirmish_rules.catalog.terrain("plain"))


class TestBoardStructure:
    """Tests for board bounds and mutators."""

    def test_tile_positions(self, board):
        """Tiles are stored row-major and know their coordinates."""
        assert board.tile_at((5, 3)).position == (5, 3)
        assert board.index_of((2, 1)) == 8

    @pytest.mark.parametrize("pos", [(-1, 0), (6, 0), (0, 4), (0, -1)])
    def test_out_of_bounds(self, board, pos):
        with pytest.raises(OutOfBoundsError):
            board.tile_at(pos)
        assert not board.in_bounds(pos)

    def test_place_unit(self, board):
        tile = board.place_unit((2, 2), _unit())
        assert tile.unit.unit_id == "red-1"
        assert tile.unit.position == (2, 2)
        assert board.find_unit("red-1") is tile.unit

    def test_place_on_occupied_tile(self, board):
        board.place_unit((2, 2), _unit())
        with pytest.raises(TileOccupiedError):
            board.place_unit((2, 2), _unit("red-2"))

    def test_duplicate_unit_id(self, board):
        board.place_unit((2, 2), _unit())
        with pytest.raises(DuplicateUnitError):
            board.place_unit((3, 2), _unit())

    def test_move_unit_keeps_position_in_sync(self, board):
        board.place_unit((0, 0), _unit())
        source, dest = board.move_unit((0, 0), (4, 3))
        assert source.unit is None
        assert dest.unit.position == (4, 3)
        assert board.find_unit("red-1").position == (4, 3)

    def test_move_onto_occupied(self, board):
        board.place_unit((0, 0), _unit())
        board.place_unit((1, 0), _unit("blue-1", "blue"))
        with pytest.raises(TileOccupiedError):
            board.move_unit((0, 0), (1, 0))

    def test_remove_unit(self, board):
        board.place_unit((1, 1), _unit())
        tile = board.remove_unit((1, 1))
        assert tile.unit is None
        assert board.find_unit("red-1") is None
        assert board.units() == []

    def test_remove_from_empty_tile(self, board):
        with pytest.raises(EmptyTileError):
            board.remove_unit((1, 1))

    def test_neighbors_are_orthogonal(self, board):
        assert sorted(board.neighbors((0, 0))) == [(0, 1), (1, 0)]
        assert sorted(board.neighbors((2, 2))) == [(1, 2), (2, 1), (2, 3), (3, 2)]

    def test_units_of_faction(self, board):
        board.place_unit((0, 0), _unit())
        board.place_unit((1, 0), _unit("blue-1", "blue"))
        assert [u.unit_id for u in board.units_of("blue")] == ["blue-1"]
        assert board.unit_count("red") == 1

    def test_clone_is_independent(self, board):
        board.place_unit((0, 0), _unit())
        copy = board.clone()
        copy.move_unit((0, 0), (1, 0))
        assert board.unit_at((0, 0)) is not None
        assert copy.unit_at((0, 0)) is None

    def test_set_terrain_manages_objective(self, board, skirmish_rules):
        catalog = skirmish_rules.catalog
        tile = board.set_terrain((1, 1), catalog.terrain("city"), owner="red")
        assert tile.objective.owner == "red"
        tile = board.set_terrain((1, 1), catalog.terrain("forest"))
        assert tile.objective is None


class TestGeneration:
    """Tests for seeded board generation."""

    def test_same_seed_same_board(self, skirmish_rules):
        def make(seed):
            return generate_board(
                10, 10, skirmish_rules.generation, skirmish_rules.catalog,
                random.Random(seed),
            )
        assert make(42) == make(42)
        assert make(42) != make(43)

    def test_every_tile_has_catalog_terrain(self, skirmish_rules):
        board = generate_board(
            10, 10, skirmish_rules.generation, skirmish_rules.catalog, random.Random(3)
        )
        kinds = set(skirmish_rules.catalog.terrains)
        assert all(t.terrain in kinds for t in board.tiles())

    def test_objective_state_matches_terrain(self, conquest_rules):
        board = generate_board(
            12, 10, conquest_rules.generation, conquest_rules.catalog, random.Random(9)
        )
        for tile in board.tiles():
            is_objective = conquest_rules.catalog.terrain(tile.terrain).is_objective
            assert (tile.objective is not None) == is_objective

    def test_conquest_layout(self, conquest_rules):
        """Bases at (2,2) / (9,7) owned by their faction, cities neutral."""
        board = generate_board(
            12, 10, conquest_rules.generation, conquest_rules.catalog, random.Random(5)
        )
        assert board.tile_at((2, 2)).terrain == "base"
        assert board.tile_at((2, 2)).owner == "red"
        assert board.tile_at((9, 7)).terrain == "base"
        assert board.tile_at((9, 7)).owner == "blue"
        assert board.tile_at((4, 4)).terrain == "city"
        assert board.tile_at((4, 4)).owner is None
        assert board.tile_at((7, 5)).owner is None

    def test_road_is_connected_walk(self, skirmish_rules):
        """A vertical road has a tile in every row, drifting at most one column."""
        config = GenerationConfig(base_weights={"plain": 1}, roads=1, road_kind="road")
        for seed in range(20):
            board = generate_board(8, 8, config, skirmish_rules.catalog, random.Random(seed))
            columns = []
            for row in board.rows():
                xs = [t.position[0] for t in row if t.terrain == "road"]
                assert len(xs) == 1
                columns.append(xs[0])
            for a, b in zip(columns, columns[1:]):
                assert abs(a - b) <= 1

    def test_scatter_count_upper_bound(self, skirmish_rules):
        config = GenerationConfig(base_weights={"plain": 1}, scatters=(Scatter("city", 4),))
        board = generate_board(10, 10, config, skirmish_rules.catalog, random.Random(1))
        cities = [t for t in board.tiles() if t.terrain == "city"]
        assert 1 <= len(cities) <= 4

    def test_home_rows_seed_ownership(self, conquest_rules):
        config = GenerationConfig(
            base_weights={"plain": 1},
            objective_kind="city",
            objectives=((1, 0), (1, -1), (1, 5)),
            home_rows=2,
        )
        board = generate_board(6, 10, config, conquest_rules.catalog, random.Random(1))
        assert board.tile_at((1, 0)).owner == "red"
        assert board.tile_at((1, 9)).owner == "blue"
        assert board.tile_at((1, 5)).owner is None

    def test_default_bases_clamped(self):
        assert default_base_positions(12, 10, 2) == [(2, 2), (9, 7)]
        assert default_base_positions(3, 3, 2) == [(2, 2), (0, 0)]
