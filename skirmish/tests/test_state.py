"""
Tests for match setup, snapshots and the read-only view.
"""

import json
from dataclasses import replace

import pytest

from ..engine_core.reducer import move, select_unit
from ..engine_core.rules import ActionEconomy, MatchConfig, Placement
from ..engine_core.setup import new_match as build_match, resolve_factions
from ..engine_core.state import MatchState, visible_state
from ..games import get_rules, new_match


class TestNewMatch:
    """Tests for match creation."""

    def test_same_seed_same_match(self):
        a = new_match("skirmish", MatchConfig(rng_seed=11))
        b = new_match("skirmish", MatchConfig(rng_seed=11))
        assert a.board == b.board
        assert a.match_id != b.match_id

    def test_missing_seed_is_stored(self):
        state = new_match("skirmish")
        assert state.config.rng_seed is not None
        again = build_match(state.config, state.rules)
        assert again.board == state.board

    def test_skirmish_starting_units(self):
        state = new_match("skirmish", MatchConfig(rng_seed=1), match_id="m")
        assert state.match_id == "m"
        assert state.board.unit_at((1, 0)).unit_id == "red-1"
        assert state.board.unit_at((0, 1)).kind == "tank"
        assert state.board.unit_at((8, 9)).faction == "blue"
        assert state.board.unit_count("red") == 3
        assert state.board.unit_count("blue") == 3
        assert state.current_faction == "red"
        assert state.next_unit_serial == 7

    def test_conquest_starts_on_bases(self):
        state = new_match("conquest", MatchConfig(rng_seed=2), now_ms=5_000)
        red = state.board.unit_at((2, 2))
        blue = state.board.unit_at((9, 7))
        assert red.kind == "infantry" and red.faction == "red"
        assert blue.faction == "blue"
        faction = state.factions["red"]
        assert faction.resources == 10_000
        assert faction.action_points == 10
        assert faction.last_recovery_ms == 5_000
        assert state.last_income_ms == 5_000

    def test_config_overrides(self):
        config = MatchConfig(
            width=14, height=6, rng_seed=4,
            ruleset={"action_economy": "action_points", "max_action_points": 3},
        )
        state = new_match("skirmish", config)
        assert (state.board.width, state.board.height) == (14, 6)
        assert state.ruleset.action_economy == ActionEconomy.ACTION_POINTS
        assert state.factions["blue"].action_points == 3

    @pytest.mark.parametrize("preset", ["skirmish", "conquest"])
    def test_smallest_board(self, preset):
        rules = get_rules(preset)
        config = MatchConfig(width=rules.min_width, height=rules.min_height, rng_seed=1)
        state = new_match(preset, config)

        assert (state.board.width, state.board.height) == (rules.min_width, rules.min_height)
        assert state.board.unit_count("red") == state.board.unit_count("blue") > 0

    @pytest.mark.parametrize("preset,width,height", [
        ("skirmish", 3, 3),
        ("skirmish", 5, 10),
        ("conquest", 6, 6),
        ("conquest", 12, 5),
    ])
    def test_board_below_minimum(self, preset, width, height):
        with pytest.raises(ValueError, match="at least"):
            new_match(preset, MatchConfig(width=width, height=height, rng_seed=1))

    def test_overlapping_placements(self, skirmish_rules):
        rules = replace(skirmish_rules, placements=(
            Placement(0, "infantry", (0, 0)),
            Placement(1, "tank", (0, 0)),
        ))
        with pytest.raises(ValueError, match="Cannot place blue tank"):
            build_match(MatchConfig(rng_seed=1), rules)

    def test_objectives_off_the_board(self, conquest_rules):
        rules = replace(conquest_rules, min_width=3, min_height=3)
        with pytest.raises(ValueError, match="do not fit a 6x6 board"):
            build_match(MatchConfig(width=6, height=6, rng_seed=1), rules)

    def test_faction_count(self, skirmish_rules):
        assert resolve_factions(skirmish_rules, 3) == ["red", "blue", "faction3"]
        with pytest.raises(ValueError):
            resolve_factions(skirmish_rules, 1)


class TestSnapshot:
    """Tests for to_snapshot / from_snapshot."""

    def test_round_trip_through_json(self):
        state = new_match("skirmish", MatchConfig(rng_seed=5), match_id="snap")
        state = select_unit(state, (1, 0)).new_state
        state = move(state, (1, 0), (1, 1)).new_state
        state = select_unit(state, (0, 1)).new_state

        data = json.loads(json.dumps(state.to_snapshot()))
        restored = MatchState.from_snapshot(data, get_rules("skirmish"))

        assert restored == state
        assert restored.selection == state.selection
        assert len(restored.action_history) == 3

    def test_snapshot_keeps_ruleset_overrides(self):
        config = MatchConfig(rng_seed=5, ruleset={"damage_model": "health_scaled"})
        state = new_match("skirmish", config)
        restored = MatchState.from_snapshot(state.to_snapshot(), get_rules("skirmish"))
        assert restored.ruleset == state.ruleset

    def test_wrong_rules_rejected(self):
        state = new_match("skirmish", MatchConfig(rng_seed=5))
        with pytest.raises(ValueError):
            MatchState.from_snapshot(state.to_snapshot(), get_rules("conquest"))

    def test_unknown_version_rejected(self):
        state = new_match("skirmish", MatchConfig(rng_seed=5))
        data = state.to_snapshot()
        data["version"] = 99
        with pytest.raises(ValueError):
            MatchState.from_snapshot(data, get_rules("skirmish"))


class TestVisibleState:
    """Tests for the rendering view."""

    def test_shape(self, duel_state):
        view = visible_state(duel_state)
        assert len(view["tiles"]) == 8
        assert len(view["tiles"][0]) == 8
        cell = view["tiles"][1][1]
        assert cell["unit"]["unit_id"] == "red-1"
        assert cell["unit"]["max_health"] == 100
        assert view["current_faction"] == "red"
        assert view["interaction"] == "awaiting_selection"

    def test_view_is_a_copy(self, duel_state):
        view = visible_state(duel_state)
        view["tiles"][1][1]["unit"]["health"] = 1
        view["tiles"][0][0]["terrain"] = "lava"
        assert duel_state.board.unit_at((1, 1)).health == 100
        assert duel_state.board.tile_at((0, 0)).terrain == "plain"
