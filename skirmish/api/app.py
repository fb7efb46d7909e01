"""
FastAPI Application - REST API for the game UI.

Endpoints:
    GET    /api/v1/health                      Health check
    GET    /api/v1/presets                     List rule presets
    POST   /api/v1/matches                     Start a match
    GET    /api/v1/matches                     List matches
    GET    /api/v1/matches/{id}                Visible match state
    DELETE /api/v1/matches/{id}                End a match
    GET    /api/v1/matches/{id}/snapshot       Full serialized state
    POST   /api/v1/matches/{id}/select         Select a unit
    POST   /api/v1/matches/{id}/deselect       Clear the selection
    POST   /api/v1/matches/{id}/move           Move a unit
    POST   /api/v1/matches/{id}/attack         Attack with a unit
    POST   /api/v1/matches/{id}/capture        Capture with a unit
    POST   /api/v1/matches/{id}/purchase       Buy a unit on an owned base
    POST   /api/v1/matches/{id}/end-turn       End the current turn
    POST   /api/v1/matches/{id}/tick           Advance the match clock
    POST   /api/v1/matches/{id}/reset          Regenerate the match

Commands always answer 200 with a CommandResponse; success=false means
the engine rejected the command and the state is unchanged.
Time-driven matches are also ticked in the background while the app runs.
"""

from contextlib import asynccontextmanager
from typing import Optional
import logging
import os

from ..games import load_rules_dir, register_rules

# Environment configuration
SKIRMISH_ENV = os.getenv("SKIRMISH_ENV", "development")
SKIRMISH_RULES_DIR = os.getenv("SKIRMISH_RULES_DIR", None)
SKIRMISH_TICK_MS = int(os.getenv("SKIRMISH_TICK_MS", "1000"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None, run_ticker: bool = True):
    """
    Create the FastAPI application.

    Args:
        service: Optional MatchService instance (creates new if not provided)
        run_ticker: Tick time-driven matches in the background while serving

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import MatchService, ServiceError
    from .schemas import (
        # Request models
        CreateMatchRequest,
        SelectRequest,
        MoveRequest,
        AttackRequest,
        CaptureRequest,
        PurchaseRequest,
        TickRequest,
        # Response models
        CommandResponse,
        EndMatchResponse,
        ErrorResponse,
        HealthResponse,
        MatchListResponse,
        MatchStateResponse,
        PresetListResponse,
    )
    from ..session import TickRunner
    from .. import __version__

    if SKIRMISH_RULES_DIR:
        for rules in load_rules_dir(SKIRMISH_RULES_DIR).values():
            register_rules(rules)

    api_service = service or MatchService()
    ticker = TickRunner(api_service.session_manager, tick_ms=SKIRMISH_TICK_MS)

    @asynccontextmanager
    async def lifespan(app):
        if run_ticker:
            await ticker.start()
        try:
            yield
        finally:
            await ticker.stop()

    app = FastAPI(
        title="Skirmish Engine API",
        description="""
Tactical grid-combat engine.

## Commands

Every command returns a `CommandResponse` with the resulting visible
state. Rule rejections answer `200` with `success=false` and an
`error_code` such as `NOT_YOUR_UNIT`, `OUT_OF_RANGE` or
`INSUFFICIENT_FUNDS`; the match state is unchanged.

## Error Codes

| Code | Description |
|------|-------------|
| `MATCH_NOT_FOUND` | Match does not exist or has ended |
| `UNKNOWN_PRESET` | No preset with that id |
| `UNKNOWN_UNIT_KIND` | Unit kind not in the match's catalog |
| `INVALID_RULESET` | Ruleset overrides could not be applied |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = api_service
    app.state.ticker = ticker

    # =========================================================================
    # Error helpers
    # =========================================================================

    @app.exception_handler(ServiceError)
    async def service_error_handler(request, exc: ServiceError) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.message,
                error_code=exc.error_code,
                details=exc.details,
            ).model_dump(mode="json"),
        )

    not_found = {404: {"model": ErrorResponse, "description": "Match not found"}}

    # =========================================================================
    # System
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="skirmish-engine",
            version=__version__,
            active_matches=len(api_service.session_manager.list_active_sessions()),
        )

    @app.get(
        "/api/v1/presets",
        response_model=PresetListResponse,
        tags=["System"],
        summary="List rule presets",
    )
    async def presets() -> PresetListResponse:
        return api_service.list_presets()

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches",
        response_model=MatchStateResponse,
        status_code=201,
        responses={400: {"model": ErrorResponse, "description": "Unknown preset or bad ruleset"}},
        tags=["Matches"],
        summary="Start a new match",
    )
    async def create_match(request: CreateMatchRequest) -> MatchStateResponse:
        """
        Start a match from a preset.

        Pass `rng_seed` for a reproducible board and `ruleset` to
        override preset options.
        """
        return api_service.create_match(request)

    @app.get(
        "/api/v1/matches",
        response_model=MatchListResponse,
        tags=["Matches"],
        summary="List matches",
    )
    async def list_matches() -> MatchListResponse:
        return api_service.list_matches()

    @app.get(
        "/api/v1/matches/{match_id}",
        response_model=MatchStateResponse,
        responses=not_found,
        tags=["Matches"],
        summary="Get visible match state",
    )
    async def get_match(match_id: str) -> MatchStateResponse:
        return api_service.get_match(match_id)

    @app.delete(
        "/api/v1/matches/{match_id}",
        response_model=EndMatchResponse,
        tags=["Matches"],
        summary="End a match",
    )
    async def end_match(
        match_id: str,
        reason: str = Query("user_ended", description="Reason for ending"),
    ) -> EndMatchResponse:
        """End a match and release its session."""
        return api_service.end_match(match_id, reason)

    @app.get(
        "/api/v1/matches/{match_id}/snapshot",
        responses=not_found,
        tags=["Matches"],
        summary="Get the full serialized match state",
    )
    async def get_snapshot(match_id: str) -> dict:
        return api_service.get_snapshot(match_id)

    # =========================================================================
    # Command Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches/{match_id}/select",
        response_model=CommandResponse,
        responses=not_found,
        tags=["Commands"],
        summary="Select a unit",
    )
    async def select_unit(match_id: str, request: SelectRequest) -> CommandResponse:
        """Select a unit; the response lists reachable tiles and targets."""
        return api_service.select(match_id, request)

    @app.post(
        "/api/v1/matches/{match_id}/deselect",
        response_model=CommandResponse,
        responses=not_found,
        tags=["Commands"],
        summary="Clear the selection",
    )
    async def deselect(match_id: str) -> CommandResponse:
        return api_service.deselect(match_id)

    @app.post(
        "/api/v1/matches/{match_id}/move",
        response_model=CommandResponse,
        responses=not_found,
        tags=["Commands"],
        summary="Move a unit",
    )
    async def move(match_id: str, request: MoveRequest) -> CommandResponse:
        return api_service.move(match_id, request)

    @app.post(
        "/api/v1/matches/{match_id}/attack",
        response_model=CommandResponse,
        responses=not_found,
        tags=["Commands"],
        summary="Attack an enemy unit",
    )
    async def attack(match_id: str, request: AttackRequest) -> CommandResponse:
        return api_service.attack(match_id, request)

    @app.post(
        "/api/v1/matches/{match_id}/capture",
        response_model=CommandResponse,
        responses=not_found,
        tags=["Commands"],
        summary="Capture the objective a unit stands on",
    )
    async def capture(match_id: str, request: CaptureRequest) -> CommandResponse:
        return api_service.capture(match_id, request)

    @app.post(
        "/api/v1/matches/{match_id}/purchase",
        response_model=CommandResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown unit kind"},
            **not_found,
        },
        tags=["Commands"],
        summary="Buy a unit on an owned base",
    )
    async def purchase(match_id: str, request: PurchaseRequest) -> CommandResponse:
        return api_service.purchase(match_id, request)

    @app.post(
        "/api/v1/matches/{match_id}/end-turn",
        response_model=CommandResponse,
        responses=not_found,
        tags=["Commands"],
        summary="End the current turn",
    )
    async def end_turn(match_id: str) -> CommandResponse:
        return api_service.end_turn(match_id)

    @app.post(
        "/api/v1/matches/{match_id}/tick",
        response_model=CommandResponse,
        responses=not_found,
        tags=["Commands"],
        summary="Advance the match clock",
    )
    async def tick(match_id: str, request: Optional[TickRequest] = None) -> CommandResponse:
        """Apply action-point recovery and income up to now_ms."""
        return api_service.tick(match_id, request)

    @app.post(
        "/api/v1/matches/{match_id}/reset",
        response_model=CommandResponse,
        responses=not_found,
        tags=["Commands"],
        summary="Regenerate the match from its seed",
    )
    async def reset(match_id: str) -> CommandResponse:
        return api_service.reset(match_id)

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Skirmish Engine API",
            "version": __version__,
            "env": SKIRMISH_ENV,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app


# For running directly: uvicorn skirmish.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
