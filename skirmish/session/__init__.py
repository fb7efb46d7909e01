"""
Session Module - Manages in-memory match sessions.

A session represents one match:
- Created when a caller starts a match
- Holds the current match state behind a lock
- Applies commands and clock ticks one at a time
- Dropped when ended or idle for too long

Sessions are EPHEMERAL: nothing is written to disk.
"""

from .manager import SessionManager, MatchSession, SessionState
from .ticker import TickRunner

__all__ = [
    "SessionManager",
    "MatchSession",
    "SessionState",
    "TickRunner",
]
