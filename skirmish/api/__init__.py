"""
API Module - Interface for the game UI.

Exposes the engine via a REST API. The UI:
1. Lists presets and starts a match
2. Sends commands (select, move, attack, capture, purchase, end turn)
3. Renders the visible state returned with every command

All state is session-scoped and in-memory.
"""

from .schemas import (
    # Requests
    CreateMatchRequest,
    SelectRequest,
    MoveRequest,
    AttackRequest,
    CaptureRequest,
    PurchaseRequest,
    TickRequest,
    # Responses
    CommandResponse,
    MatchStateResponse,
    MatchListResponse,
    PresetListResponse,
    ErrorResponse,
    ErrorCode,
)
from .service import MatchService, ServiceError
from .app import create_app

__all__ = [
    # Requests
    "CreateMatchRequest",
    "SelectRequest",
    "MoveRequest",
    "AttackRequest",
    "CaptureRequest",
    "PurchaseRequest",
    "TickRequest",
    # Responses
    "CommandResponse",
    "MatchStateResponse",
    "MatchListResponse",
    "PresetListResponse",
    "ErrorResponse",
    "ErrorCode",
    # Service
    "MatchService",
    "ServiceError",
    "create_app",
]
