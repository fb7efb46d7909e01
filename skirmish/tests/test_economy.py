"""
Tests for the action economies and the clock.

Tests:
- Turn rotation and per-unit slots (per-turn economy)
- Action point spending and recovery (action-point economy)
- Realtime and turn-start income
"""

from ..engine_core.action import ErrorCode
from ..engine_core.economy import next_faction, recover_action_points
from ..engine_core.reducer import attack, end_turn, move, select_unit, tick
from ..engine_core.rules import Ruleset
from ..engine_core.state import FactionState


class TestPerTurn:
    """Tests for the hot-seat economy."""

    def test_turns_alternate(self, duel_state):
        state = duel_state
        seen = []
        for _ in range(4):
            seen.append(state.current_faction)
            state = end_turn(state).new_state
        assert seen == ["red", "blue", "red", "blue"]
        assert state.turn_number == 5

    def test_next_faction_wraps(self):
        assert next_faction(["a", "b", "c"], "c") == "a"

    def test_enemy_unit_rejected(self, duel_state):
        result = select_unit(duel_state, (4, 1))
        assert not result.success
        assert result.error_code == ErrorCode.NOT_YOUR_UNIT
        assert result.new_state is duel_state

    def test_one_move_per_turn(self, duel_state):
        state = move(duel_state, (1, 1), (1, 2)).new_state
        result = move(state, (1, 2), (1, 3))
        assert result.error_code == ErrorCode.ALREADY_ACTED

    def test_one_attack_per_turn(self, duel_state):
        state = move(duel_state, (1, 1), (3, 1)).new_state
        state = attack(state, (3, 1), (4, 1)).new_state
        result = attack(state, (3, 1), (4, 1))
        assert result.error_code == ErrorCode.ALREADY_ACTED

    def test_move_after_attack_allowed(self, make_state, skirmish_rules):
        state = make_state(
            skirmish_rules,
            units=[("red", "infantry", (1, 1)), ("blue", "tank", (2, 1))],
        )
        state = attack(state, (1, 1), (2, 1)).new_state
        result = move(state, (1, 1), (1, 3))
        assert result.success

    def test_spent_unit_cannot_be_selected(self, duel_state):
        state = move(duel_state, (1, 1), (3, 1)).new_state
        state = attack(state, (3, 1), (4, 1)).new_state
        result = select_unit(state, (3, 1))
        assert result.error_code == ErrorCode.NO_ACTIONS_LEFT

    def test_end_turn_resets_next_factions_units(self, duel_state):
        state = move(duel_state, (1, 1), (1, 2)).new_state
        state = end_turn(state).new_state
        state = move(state, (4, 1), (4, 2)).new_state
        state = end_turn(state).new_state

        red = state.board.unit_at((1, 2))
        blue = state.board.unit_at((4, 2))
        assert not red.has_moved
        assert blue.has_moved  # blue resets at the start of its own turn

    def test_end_turn_clears_selection(self, duel_state):
        state = select_unit(duel_state, (1, 1)).new_state
        state = end_turn(state).new_state
        assert state.selection is None


class TestActionPoints:
    """Tests for the shared action-point pool."""

    def test_any_faction_may_act(self, conquest_state):
        result = move(conquest_state, (5, 4), (6, 4))
        assert result.success
        assert result.new_state.factions["blue"].action_points == 9
        assert result.new_state.factions["red"].action_points == 10

    def test_units_can_move_repeatedly(self, conquest_state):
        state = move(conquest_state, (2, 3), (1, 3)).new_state
        result = move(state, (1, 3), (0, 3))
        assert result.success
        assert result.new_state.factions["red"].action_points == 8

    def test_empty_pool_rejected(self, make_state, conquest_rules):
        state = make_state(
            conquest_rules,
            units=[("red", "infantry", (1, 1)), ("blue", "infantry", (6, 6))],
            action_points=0,
        )
        result = move(state, (1, 1), (1, 2))
        assert result.error_code == ErrorCode.NO_ACTIONS_LEFT
        assert select_unit(state, (1, 1)).error_code == ErrorCode.NO_ACTIONS_LEFT

    def test_recovery_exactly_on_interval(self):
        ruleset = Ruleset(max_action_points=10, ap_recovery_ms=60_000)
        faction = FactionState("red", action_points=5, last_recovery_ms=0)

        assert recover_action_points(faction, 59_999, ruleset) == 0
        assert faction.action_points == 5
        assert recover_action_points(faction, 60_000, ruleset) == 1
        assert faction.action_points == 6
        assert faction.last_recovery_ms == 60_000

    def test_recovery_catches_up(self):
        ruleset = Ruleset(max_action_points=10, ap_recovery_ms=60_000)
        faction = FactionState("red", action_points=2, last_recovery_ms=0)

        assert recover_action_points(faction, 190_000, ruleset) == 3
        assert faction.action_points == 5
        # the partial interval carries over
        assert faction.last_recovery_ms == 180_000

    def test_recovery_stops_at_cap(self):
        ruleset = Ruleset(max_action_points=10, ap_recovery_ms=60_000)
        faction = FactionState("red", action_points=9, last_recovery_ms=0)

        assert recover_action_points(faction, 600_000, ruleset) == 1
        assert faction.action_points == 10
        assert faction.last_recovery_ms == 600_000

    def test_full_pool_restarts_timer(self):
        ruleset = Ruleset(max_action_points=10, ap_recovery_ms=60_000)
        faction = FactionState("red", action_points=10, last_recovery_ms=0)

        assert recover_action_points(faction, 30_000, ruleset) == 0
        assert faction.last_recovery_ms == 30_000

    def test_spending_from_full_pool_restarts_timer(self, make_state, conquest_rules):
        state = make_state(
            conquest_rules,
            units=[("red", "infantry", (1, 1)), ("blue", "infantry", (6, 6))],
            now_ms=300_000,
        )
        state.factions["red"].last_recovery_ms = 0

        state = move(state, (1, 1), (1, 2)).new_state
        assert state.factions["red"].last_recovery_ms == 300_000

        result = tick(state, 300_001)
        assert result.outcome.action_points_recovered == {}
        assert result.new_state.factions["red"].action_points == 9
        assert tick(state, 360_000).new_state.factions["red"].action_points == 10

    def test_tick_advances_match_clock(self, conquest_state):
        state = tick(conquest_state, 42_000).new_state
        assert state.clock_ms == 42_000
        assert tick(state, 1_000).new_state.clock_ms == 42_000

    def test_tick_recovers_points(self, make_state, conquest_rules):
        state = make_state(
            conquest_rules,
            units=[("red", "infantry", (1, 1)), ("blue", "infantry", (6, 6))],
            action_points=5,
        )
        result = tick(state, 60_000)
        assert result.success
        assert result.outcome.action_points_recovered == {"red": 1, "blue": 1}
        assert result.new_state.factions["red"].action_points == 6
        assert state.factions["red"].action_points == 5


class TestIncome:
    """Tests for income on the clock and at turn start."""

    def test_realtime_income_per_interval(self, conquest_state):
        result = tick(conquest_state, 25_000)
        assert result.outcome.income == {"red": 200, "blue": 200}
        new_state = result.new_state
        assert new_state.factions["red"].resources == 10_200
        assert new_state.last_income_ms == 20_000

    def test_no_income_before_interval(self, conquest_state):
        result = tick(conquest_state, 9_999)
        assert result.success
        assert result.outcome.income == {}
        assert result.new_state.action_history == []

    def test_stale_tick_ignored(self, conquest_state):
        state = tick(conquest_state, 10_000).new_state
        result = tick(state, 5_000)
        assert result.outcome.income == {}
        assert result.new_state.factions == state.factions

    def test_productive_tick_recorded(self, conquest_state):
        result = tick(conquest_state, 10_000)
        assert len(result.new_state.action_history) == 1

    def test_turn_start_income(self, make_state, skirmish_rules):
        state = make_state(
            skirmish_rules,
            units=[("red", "infantry", (1, 1)), ("blue", "infantry", (6, 6))],
            terrain={(0, 0): "city", (7, 7): "city", (7, 6): "city"},
            owners={(0, 0): "red", (7, 7): "blue", (7, 6): "blue"},
        )
        result = end_turn(state)
        assert result.new_state.factions["blue"].resources == 200
        assert result.new_state.factions["red"].resources == 0
        assert "blue collected 200 income" in result.state_changes

    def test_turn_start_model_ignores_clock(self, duel_state):
        result = tick(duel_state, 1_000_000)
        assert result.outcome.income == {}
