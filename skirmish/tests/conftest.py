"""
Pytest fixtures for Skirmish tests.
"""

import pytest

from ..engine_core.board import Board, Unit
from ..engine_core.rules import ActionEconomy, MatchConfig, Rules
from ..engine_core.state import FactionState, MatchState
from ..games import get_rules


def build_state(
    rules: Rules,
    width: int = 8,
    height: int = 8,
    units=(),
    terrain=None,
    owners=None,
    ruleset=None,
    resources: int = 0,
    action_points: int | None = None,
    now_ms: int = 0,
) -> MatchState:
    """
    Hand-built match on an all-plain board.

    units is a list of (faction, kind, position); unit ids are
    "<faction>-<n>" numbered in list order.
    """
    if ruleset:
        rules = rules.with_ruleset(rules.ruleset.with_overrides(ruleset))
    catalog = rules.catalog
    board = Board.filled(width, height, catalog.terrain("plain"))
    for pos, kind in (terrain or {}).items():
        board.set_terrain(pos, catalog.terrain(kind))
    for pos, owner in (owners or {}).items():
        board.tile_at(pos).objective.owner = owner
    for i, (faction, kind, pos) in enumerate(units, start=1):
        archetype = catalog.archetype(kind)
        board.place_unit(pos, Unit(f"{faction}-{i}", kind, faction, archetype.max_health, pos))

    if action_points is None:
        action_points = (
            rules.ruleset.max_action_points
            if rules.ruleset.action_economy == ActionEconomy.ACTION_POINTS
            else 0
        )
    factions = list(rules.factions[:2])
    return MatchState(
        match_id="test_match",
        rules=rules,
        config=MatchConfig(rng_seed=1),
        board=board,
        factions={f: FactionState(f, resources, action_points, now_ms) for f in factions},
        faction_order=factions,
        current_faction=factions[0],
        last_income_ms=now_ms,
        clock_ms=now_ms,
        next_unit_serial=len(units) + 1,
    )


@pytest.fixture
def skirmish_rules() -> Rules:
    """Hot-seat preset: flat damage, per-turn actions."""
    return get_rules("skirmish")


@pytest.fixture
def conquest_rules() -> Rules:
    """Real-time preset: health-scaled damage, action points."""
    return get_rules("conquest")


@pytest.fixture
def make_state():
    """Factory for hand-built match states."""
    return build_state


@pytest.fixture
def duel_state(skirmish_rules) -> MatchState:
    """
    Two infantry facing each other on an 8x8 plain board.

    red-1 at (1, 1), blue-2 at (4, 1).
    """
    return build_state(
        skirmish_rules,
        units=[
            ("red", "infantry", (1, 1)),
            ("blue", "infantry", (4, 1)),
        ],
    )


@pytest.fixture
def conquest_state(conquest_rules) -> MatchState:
    """Conquest match with 10 AP and 10000 gold each, bases owned."""
    return build_state(
        conquest_rules,
        terrain={(2, 2): "base", (5, 5): "base", (3, 4): "city"},
        owners={(2, 2): "red", (5, 5): "blue"},
        units=[
            ("red", "infantry", (2, 3)),
            ("blue", "infantry", (5, 4)),
        ],
        resources=10_000,
    )


@pytest.fixture
def fake_clock():
    """Manually advanced clock returning seconds."""

    class FakeClock:
        def __init__(self):
            self.now = 1000.0

        def __call__(self) -> float:
            return self.now

        def advance(self, seconds: float):
            self.now += seconds

    return FakeClock()
