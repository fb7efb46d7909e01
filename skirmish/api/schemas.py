"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between the game UI and the engine.

Error Codes (HTTP errors, not rule rejections):
- MATCH_NOT_FOUND: Match does not exist or has been ended
- UNKNOWN_PRESET: No preset with that id
- UNKNOWN_UNIT_KIND: Unit kind is not in the match's catalog
- INVALID_RULESET: Ruleset overrides could not be applied
- VALIDATION_ERROR: Request body is malformed

Rule rejections (not your turn, out of range, ...) are not HTTP errors:
commands answer 200 with success=false and the engine's error_code.
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class MatchStatus(str, Enum):
    """Match status values."""
    ACTIVE = "active"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
    UNKNOWN_PRESET = "UNKNOWN_PRESET"
    UNKNOWN_UNIT_KIND = "UNKNOWN_UNIT_KIND"
    INVALID_RULESET = "INVALID_RULESET"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class Point(BaseModel):
    """A board coordinate."""
    x: int = Field(..., ge=0)
    y: int = Field(..., ge=0)

    def as_tuple(self) -> tuple[int, int]:
        return (self.x, self.y)


class UnitInfo(BaseModel):
    """A unit for display."""
    unit_id: str
    kind: str
    faction: str
    health: int
    max_health: int
    position: list[int]
    has_moved: bool = False
    has_attacked: bool = False


class ObjectiveInfo(BaseModel):
    owner: Optional[str] = None
    capture_progress: int = 0
    capturing_faction: Optional[str] = None


class TileInfo(BaseModel):
    """One board cell for display."""
    terrain: str
    unit: Optional[UnitInfo] = None
    objective: Optional[ObjectiveInfo] = None


class SelectionInfo(BaseModel):
    """The selected unit and its highlighted tiles."""
    position: list[int]
    mode: str = Field(..., description="move_pending or attack_pending")
    reachable: list[list[int]] = Field(default_factory=list)
    targets: list[list[int]] = Field(default_factory=list)


class FactionInfo(BaseModel):
    faction: str
    resources: int = 0
    action_points: int = 0
    last_recovery_ms: int = 0


class TerrainInfo(BaseModel):
    kind: str
    movement_cost: float
    defense_bonus_pct: int
    is_objective: bool = False
    deployable: bool = False


class ArchetypeInfo(BaseModel):
    kind: str
    max_health: int
    attack: int
    defense: int
    move_range: int
    min_attack_range: int
    max_attack_range: int
    cost: int
    can_capture: bool = False


# =============================================================================
# Request Models
# =============================================================================

class CreateMatchRequest(BaseModel):
    """Request to start a new match."""
    preset: str = Field("skirmish", description="Built-in or loaded rules preset")
    width: Optional[int] = Field(None, ge=3, le=64, description="Board width, preset default if omitted")
    height: Optional[int] = Field(None, ge=3, le=64, description="Board height, preset default if omitted")
    faction_count: int = Field(2, ge=2, le=4)
    rng_seed: Optional[int] = Field(None, description="Seed for a reproducible board")
    ruleset: dict[str, Any] = Field(
        default_factory=dict,
        description="Ruleset overrides, e.g. {\"damage_model\": \"health_scaled\"}",
    )


class SelectRequest(BaseModel):
    position: Point


class MoveRequest(BaseModel):
    from_pos: Point = Field(..., description="Tile of the unit to move")
    to_pos: Point = Field(..., description="Destination tile")


class AttackRequest(BaseModel):
    attacker: Point
    target: Point


class CaptureRequest(BaseModel):
    position: Point = Field(..., description="Tile of the capturing unit")


class PurchaseRequest(BaseModel):
    position: Point = Field(..., description="Owned deployable objective")
    unit_kind: str


class TickRequest(BaseModel):
    now_ms: Optional[int] = Field(
        None, ge=0, description="Match clock in ms; the server clock if omitted"
    )


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class MatchStateResponse(BaseModel):
    """Visible match state for rendering."""
    match_id: str
    rules_id: str
    width: int
    height: int
    tiles: list[list[TileInfo]] = Field(description="Rows of tiles, tiles[y][x]")
    current_faction: str
    turn_number: int
    phase: str
    winner: Optional[str] = None
    interaction: str = Field(description="awaiting_selection or unit_selected")
    selection: Optional[SelectionInfo] = None
    factions: dict[str, FactionInfo] = Field(default_factory=dict)
    faction_order: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class CommandResponse(BaseModel):
    """Result of a command. Rule rejections have success=false."""
    success: bool
    status: str = Field(..., description="Status line for display")
    error_code: Optional[str] = None
    error: Optional[str] = None
    changes: list[str] = Field(default_factory=list)
    outcome: Optional[dict[str, Any]] = None
    state: MatchStateResponse
    api_version: str = "v1"


class MatchSummary(BaseModel):
    match_id: str
    rules_id: str
    status: MatchStatus
    turn_number: int
    current_faction: str
    winner: Optional[str] = None


class MatchListResponse(BaseModel):
    """Response listing matches."""
    matches: list[MatchSummary]
    count: int


class EndMatchResponse(BaseModel):
    """Response after ending a match."""
    success: bool
    match_id: str


class PresetInfo(BaseModel):
    rules_id: str
    name: str
    factions: list[str]
    default_width: int
    default_height: int
    min_width: int
    min_height: int
    ruleset: dict[str, Any]
    terrains: list[TerrainInfo] = Field(default_factory=list)
    units: list[ArchetypeInfo] = Field(default_factory=list)


class PresetListResponse(BaseModel):
    presets: list[PresetInfo]
    count: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    active_matches: int = 0
