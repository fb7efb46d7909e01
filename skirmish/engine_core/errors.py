"""
Engine Errors - Exceptions for structural and configuration failures.

Game-rule violations are never raised: they come back as failed
ActionResults with an ErrorCode. The exceptions here cover:
- Board structure misuse (out of bounds, double occupancy)
- Catalog / rules configuration bugs (unknown kinds, bad rules files)
"""

from __future__ import annotations


class BoardError(Exception):
    """Base class for structural board errors."""


class OutOfBoundsError(BoardError):
    """Raised when a position falls outside the board."""

    def __init__(self, position: tuple[int, int], width: int, height: int):
        self.position = position
        super().__init__(f"Position {position} is outside the {width}x{height} board")


class TileOccupiedError(BoardError):
    """Raised when placing a unit on a tile that already holds one."""

    def __init__(self, position: tuple[int, int]):
        self.position = position
        super().__init__(f"Tile {position} is already occupied")


class EmptyTileError(BoardError):
    """Raised when a unit is expected on a tile that has none."""

    def __init__(self, position: tuple[int, int]):
        self.position = position
        super().__init__(f"No unit on tile {position}")


class DuplicateUnitError(BoardError):
    """Raised when the same unit id would appear on two tiles."""

    def __init__(self, unit_id: str):
        self.unit_id = unit_id
        super().__init__(f"Unit {unit_id} is already on the board")


class UnknownKindError(LookupError):
    """Raised when a terrain or unit kind is not in the catalog."""

    def __init__(self, category: str, kind: str):
        self.category = category
        self.kind = kind
        super().__init__(f"Unknown {category} kind: {kind!r}")


class RulesFileError(Exception):
    """Raised when a rules file cannot be parsed into Rules."""

    def __init__(self, path: str, errors: list[str]):
        self.path = path
        self.errors = errors
        super().__init__(f"Rules file {path} is invalid: {'; '.join(errors)}")
