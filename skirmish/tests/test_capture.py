"""
Tests for objective capture and income.

Tests:
- Capture progress and ownership flips
- Contested retakes
- Capture command validation
- Income collection
"""

from ..engine_core.action import ErrorCode
from ..engine_core.board import ObjectiveState, Tile, Unit
from ..engine_core.capture import attempt_capture, collect_income
from ..engine_core.reducer import capture, end_turn
from ..engine_core.state import FactionState


def _city(owner=None):
    return Tile((0, 0), "city", objective=ObjectiveState(owner=owner))


def _infantry(faction):
    return Unit(f"{faction}-1", "infantry", faction, 100, (0, 0))


class TestAttemptCapture:
    """Tests for the capture tracker."""

    def test_two_captures_flip_ownership(self):
        tile = _city(owner="blue")
        red = _infantry("red")

        first = attempt_capture(tile, red, 50)
        assert not first.captured
        assert first.progress == 50
        assert tile.objective.owner == "blue"

        second = attempt_capture(tile, red, 50)
        assert second.captured
        assert second.owner == "red"
        assert second.previous_owner == "blue"
        assert tile.objective.owner == "red"
        assert tile.objective.capture_progress == 0

    def test_neutral_objective(self):
        tile = _city()
        attempt_capture(tile, _infantry("red"), 50)
        report = attempt_capture(tile, _infantry("red"), 50)
        assert report.captured
        assert report.previous_owner is None

    def test_contested_progress_resets(self):
        """A different faction capturing starts from zero."""
        tile = _city()
        attempt_capture(tile, _infantry("red"), 50)

        report = attempt_capture(tile, _infantry("blue"), 50)
        assert not report.captured
        assert report.progress == 50
        assert tile.objective.capturing_faction == "blue"

    def test_not_an_objective(self):
        tile = Tile((0, 0), "plain")
        assert attempt_capture(tile, _infantry("red"), 50) is None

    def test_already_owned(self):
        tile = _city(owner="red")
        assert attempt_capture(tile, _infantry("red"), 50) is None


class TestCaptureCommand:
    """Tests for capture through the reducer."""

    def test_capture_uses_attack_slot(self, make_state, skirmish_rules):
        state = make_state(
            skirmish_rules,
            units=[("red", "infantry", (2, 2)), ("blue", "infantry", (6, 6))],
            terrain={(2, 2): "city"},
        )
        result = capture(state, (2, 2))

        assert result.success
        assert result.outcome.progress == 50
        unit = result.new_state.board.unit_at((2, 2))
        assert unit.has_attacked
        assert not unit.has_moved

        again = capture(result.new_state, (2, 2))
        assert not again.success
        assert again.error_code == ErrorCode.ALREADY_ACTED

    def test_capture_over_two_turns(self, make_state, skirmish_rules):
        state = make_state(
            skirmish_rules,
            units=[("red", "infantry", (2, 2)), ("blue", "infantry", (6, 6))],
            terrain={(2, 2): "city"},
            owners={(2, 2): "blue"},
        )
        state = capture(state, (2, 2)).new_state
        state = end_turn(state).new_state
        state = end_turn(state).new_state
        result = capture(state, (2, 2))

        assert result.success
        assert result.outcome.captured
        assert result.outcome.owner == "red"
        assert result.new_state.board.tile_at((2, 2)).owner == "red"

    def test_not_capture_capable(self, make_state, skirmish_rules):
        state = make_state(
            skirmish_rules,
            units=[("red", "tank", (2, 2)), ("blue", "infantry", (6, 6))],
            terrain={(2, 2): "city"},
        )
        result = capture(state, (2, 2))
        assert not result.success
        assert result.error_code == ErrorCode.NOT_CAPTURE_CAPABLE
        assert result.new_state is state

    def test_not_an_objective(self, duel_state):
        result = capture(duel_state, (1, 1))
        assert result.error_code == ErrorCode.NOT_AN_OBJECTIVE

    def test_already_owned(self, make_state, skirmish_rules):
        state = make_state(
            skirmish_rules,
            units=[("red", "infantry", (2, 2)), ("blue", "infantry", (6, 6))],
            terrain={(2, 2): "city"},
            owners={(2, 2): "red"},
        )
        result = capture(state, (2, 2))
        assert result.error_code == ErrorCode.ALREADY_OWNED

    def test_capture_costs_action_point(self, conquest_state):
        result = capture(conquest_state, (2, 3))
        assert result.error_code == ErrorCode.NOT_AN_OBJECTIVE

        state = conquest_state.clone()
        state.board.move_unit((2, 3), (3, 4))
        result = capture(state, (3, 4))
        assert result.success
        assert result.new_state.factions["red"].action_points == 9


class TestIncome:
    """Tests for collect_income."""

    def test_pays_per_owned_objective(self, make_state, skirmish_rules):
        state = make_state(
            skirmish_rules,
            terrain={(0, 0): "city", (1, 0): "city", (7, 7): "base", (5, 5): "city"},
            owners={(0, 0): "red", (1, 0): "red", (7, 7): "blue"},
        )
        factions = {f: FactionState(f) for f in ("red", "blue")}
        credited = collect_income(state.board, factions, 100)

        assert credited == {"red": 200, "blue": 100}
        assert factions["red"].resources == 200

    def test_only_one_faction(self, make_state, skirmish_rules):
        state = make_state(
            skirmish_rules,
            terrain={(0, 0): "city", (7, 7): "city"},
            owners={(0, 0): "red", (7, 7): "blue"},
        )
        factions = {f: FactionState(f) for f in ("red", "blue")}
        collect_income(state.board, factions, 100, only="blue", intervals=3)

        assert factions["red"].resources == 0
        assert factions["blue"].resources == 300
