"""
API Service - Business logic layer between the HTTP app and the engine.

The service:
1. Translates API requests to engine commands
2. Manages match sessions
3. Formats engine results for the UI

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any

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
    EndMatchResponse,
    MatchListResponse,
    MatchStateResponse,
    MatchSummary,
    PresetInfo,
    PresetListResponse,
    # Shared
    ArchetypeInfo,
    TerrainInfo,
    # Enums
    ErrorCode,
    MatchStatus,
)
from ..engine_core.action import Action, ActionResult
from ..engine_core.rules import MatchConfig, Rules
from ..engine_core.state import MatchState, visible_state
from ..games import get_rules, has_preset, list_presets
from ..session import MatchSession, SessionManager

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """A request the service can't serve; mapped to an ErrorResponse."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


def state_response(state: MatchState) -> MatchStateResponse:
    return MatchStateResponse.model_validate(visible_state(state))


def preset_info(rules: Rules) -> PresetInfo:
    return PresetInfo(
        rules_id=rules.rules_id,
        name=rules.name,
        factions=list(rules.factions),
        default_width=rules.default_width,
        default_height=rules.default_height,
        min_width=rules.min_width,
        min_height=rules.min_height,
        ruleset=rules.ruleset.to_dict(),
        terrains=[TerrainInfo(**t.to_dict()) for t in rules.catalog.terrains.values()],
        units=[ArchetypeInfo(**a.to_dict()) for a in rules.catalog.archetypes.values()],
    )


@dataclass
class MatchService:
    """
    Main API service for the game UI.

    Usage:
        service = MatchService()

        # Start a match
        state = service.create_match(CreateMatchRequest(preset="conquest"))

        # Issue commands
        result = service.move(state.match_id, MoveRequest(...))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # -- presets -------------------------------------------------------------

    def list_presets(self) -> PresetListResponse:
        presets = [preset_info(r) for r in list_presets()]
        return PresetListResponse(presets=presets, count=len(presets))

    # -- match lifecycle -----------------------------------------------------

    def create_match(self, request: CreateMatchRequest) -> MatchStateResponse:
        """Create a session running a new match."""
        if not has_preset(request.preset):
            raise ServiceError(
                ErrorCode.UNKNOWN_PRESET,
                f"Unknown preset: {request.preset}",
                details={"presets": [r.rules_id for r in list_presets()]},
            )
        config = MatchConfig(
            width=request.width,
            height=request.height,
            faction_count=request.faction_count,
            rng_seed=request.rng_seed,
            ruleset=dict(request.ruleset),
        )
        try:
            session = self.session_manager.create_session(
                config=config,
                rules=get_rules(request.preset),
            )
        except ValueError as e:
            raise ServiceError(ErrorCode.INVALID_RULESET, str(e)) from e
        return state_response(session.current_state())

    def list_matches(self) -> MatchListResponse:
        matches = []
        for session in self.session_manager.list_sessions():
            state = session.current_state()
            matches.append(MatchSummary(
                match_id=state.match_id,
                rules_id=state.rules.rules_id,
                status=MatchStatus.GAME_OVER if state.is_over else MatchStatus.ACTIVE,
                turn_number=state.turn_number,
                current_faction=state.current_faction,
                winner=state.winner,
            ))
        return MatchListResponse(matches=matches, count=len(matches))

    def get_match(self, match_id: str) -> MatchStateResponse:
        return state_response(self._session(match_id).current_state())

    def get_snapshot(self, match_id: str) -> dict[str, Any]:
        return self._session(match_id).snapshot()

    def end_match(self, match_id: str, reason: str = "user_ended") -> EndMatchResponse:
        success = self.session_manager.end_session(match_id, reason)
        return EndMatchResponse(success=success, match_id=match_id)

    # -- commands ------------------------------------------------------------

    def select(self, match_id: str, request: SelectRequest) -> CommandResponse:
        return self._run(match_id, Action.select_unit(request.position.as_tuple()))

    def deselect(self, match_id: str) -> CommandResponse:
        return self._run(match_id, Action.deselect())

    def move(self, match_id: str, request: MoveRequest) -> CommandResponse:
        return self._run(
            match_id,
            Action.move(request.from_pos.as_tuple(), request.to_pos.as_tuple()),
        )

    def attack(self, match_id: str, request: AttackRequest) -> CommandResponse:
        return self._run(
            match_id,
            Action.attack(request.attacker.as_tuple(), request.target.as_tuple()),
        )

    def capture(self, match_id: str, request: CaptureRequest) -> CommandResponse:
        return self._run(match_id, Action.capture(request.position.as_tuple()))

    def purchase(self, match_id: str, request: PurchaseRequest) -> CommandResponse:
        session = self._session(match_id)
        catalog = session.current_state().catalog
        if not catalog.has_archetype(request.unit_kind):
            raise ServiceError(
                ErrorCode.UNKNOWN_UNIT_KIND,
                f"Unknown unit kind: {request.unit_kind}",
                details={"units": sorted(catalog.archetypes)},
            )
        return self._respond(
            session,
            session.apply(Action.purchase_unit(request.position.as_tuple(), request.unit_kind)),
        )

    def end_turn(self, match_id: str) -> CommandResponse:
        return self._run(match_id, Action.end_turn())

    def tick(self, match_id: str, request: TickRequest | None = None) -> CommandResponse:
        session = self._session(match_id)
        now_ms = request.now_ms if request else None
        return self._respond(session, session.tick(now_ms))

    def reset(self, match_id: str) -> CommandResponse:
        return self._run(match_id, Action.reset())

    # -- helpers -------------------------------------------------------------

    def _session(self, match_id: str) -> MatchSession:
        session = self.session_manager.get_session(match_id)
        if session is None:
            raise ServiceError(
                ErrorCode.MATCH_NOT_FOUND,
                f"Match {match_id} not found",
                status_code=404,
            )
        return session

    def _run(self, match_id: str, action: Action) -> CommandResponse:
        session = self._session(match_id)
        return self._respond(session, session.apply(action))

    def _respond(self, session: MatchSession, result: ActionResult) -> CommandResponse:
        if not result.success:
            logger.warning(
                f"Match {session.session_id}: rejected "
                f"({result.error_code.value if result.error_code else '-'}) {result.error}"
            )
        state = result.new_state if result.new_state is not None else session.current_state()
        outcome = result.outcome.to_dict() if result.outcome is not None else None
        return CommandResponse(
            success=result.success,
            status=result.status,
            error_code=result.error_code.value if result.error_code else None,
            error=result.error,
            changes=list(result.state_changes),
            outcome=outcome,
            state=state_response(state),
        )
