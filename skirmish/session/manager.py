"""
Session Manager - Creates and manages match sessions.

LIFECYCLE:
1. Caller picks a preset (or custom Rules) -> session created, match generated
2. During play:
   - Commands are applied through the session, one at a time
   - Time-driven rulesets are ticked with the session clock
3. Match ends -> session stays readable until ended or cleaned up

PERSISTENCE RULES:
- Sessions are in-memory only
- A session can be exported with snapshot() and rebuilt elsewhere

CONCURRENCY:
- Each session has one lock; commands and ticks for a match never
  interleave, so every mutation is atomic with respect to the clock
"""

from __future__ import annotations
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from ..engine_core.action import Action, ActionResult, ActionType
from ..engine_core.reducer import Reducer
from ..engine_core.rules import ActionEconomy, IncomeModel, MatchConfig, Rules
from ..engine_core.setup import new_match
from ..engine_core.state import MatchState, visible_state
from ..games import DEFAULT_PRESET, get_rules

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a match session."""
    ACTIVE = "active"  # Match in progress
    GAME_OVER = "game_over"  # Match finished, still readable
    ENDED = "ended"  # Removed from the manager


@dataclass
class MatchSession:
    """
    One match plus the lock that serializes access to it.

    The session clock starts at 0 when the session is created, matching
    the match's own clock origin.
    """
    session_id: str
    rules: Rules
    match_state: MatchState
    created_at: float
    clock: Callable[[], float] = time.monotonic
    last_activity: float = 0.0
    ended: bool = False
    reducer: Reducer = field(default_factory=Reducer)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def state(self) -> SessionState:
        if self.ended:
            return SessionState.ENDED
        if self.match_state.is_over:
            return SessionState.GAME_OVER
        return SessionState.ACTIVE

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def is_time_driven(self) -> bool:
        """Whether the ruleset needs periodic ticks."""
        ruleset = self.match_state.ruleset
        return (
            ruleset.action_economy == ActionEconomy.ACTION_POINTS
            or ruleset.income_model == IncomeModel.REALTIME
        )

    def now_ms(self) -> int:
        """Milliseconds since the session started."""
        return int((self.clock() - self.created_at) * 1000)

    def apply(self, action: Action) -> ActionResult:
        """
        Apply one command atomically.

        Time-driven matches are first ticked up to the session clock so
        the command acts on current action points and income.
        """
        with self._lock:
            if action.action_type != ActionType.TICK and self.is_time_driven():
                caught_up = self.reducer.apply(self.match_state, Action.tick(self.now_ms()))
                if caught_up.success:
                    self.match_state = caught_up.new_state
            result = self.reducer.apply(self.match_state, action)
            if result.success:
                self.match_state = result.new_state
            self.last_activity = self.clock()
            return result

    def tick(self, now_ms: int | None = None) -> ActionResult:
        """Advance the match clock to now_ms (default: the session clock)."""
        if now_ms is None:
            now_ms = self.now_ms()
        with self._lock:
            result = self.reducer.apply(self.match_state, Action.tick(now_ms))
            if result.success:
                self.match_state = result.new_state
            return result

    def current_state(self) -> MatchState:
        with self._lock:
            return self.match_state

    def view(self) -> dict[str, Any]:
        with self._lock:
            return visible_state(self.match_state)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return self.match_state.to_snapshot()


class SessionManager:
    """
    Manages match sessions.

    Responsibilities:
    - Create sessions from presets or custom rules
    - Track sessions
    - Tick time-driven matches
    - Clean up idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._sessions: dict[str, MatchSession] = {}
        self._lock = threading.RLock()
        self.clock = clock

    def create_session(
        self,
        preset: str = DEFAULT_PRESET,
        config: MatchConfig | None = None,
        rules: Rules | None = None,
    ) -> MatchSession:
        """
        Create a new match session.

        Args:
            preset: Built-in preset id, ignored when rules is given
            config: Board size, seed and ruleset overrides
            rules: Custom rules bundle

        Returns:
            New MatchSession with a generated match
        """
        rules = rules or get_rules(preset)
        session_id = str(uuid.uuid4())
        match_state = new_match(config, rules, now_ms=0, match_id=session_id)

        now = self.clock()
        session = MatchSession(
            session_id=session_id,
            rules=rules,
            match_state=match_state,
            created_at=now,
            clock=self.clock,
            last_activity=now,
        )
        with self._lock:
            self._sessions[session_id] = session
        logger.info(f"Session {session_id} created with rules '{rules.rules_id}'")
        return session

    def get_session(self, session_id: str) -> MatchSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """Remove a session. Returns False if it didn't exist."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.ended = True
        logger.info(f"Session {session_id} ended ({reason})")
        return True

    def list_sessions(self) -> list[MatchSession]:
        with self._lock:
            return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        return [s.session_id for s in self.list_sessions() if s.is_active()]

    def tick_all(self) -> int:
        """Tick every active time-driven session. Returns how many were ticked."""
        ticked = 0
        for session in self.list_sessions():
            if session.is_active() and session.is_time_driven():
                session.tick()
                ticked += 1
        return ticked

    def cleanup_stale_sessions(self, max_idle_seconds: float = 3600) -> list[str]:
        """
        End sessions nobody has sent a command to for max_idle_seconds.

        Called periodically to free memory.
        """
        now = self.clock()
        stale = [
            s.session_id for s in self.list_sessions()
            if now - s.last_activity > max_idle_seconds
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return stale
