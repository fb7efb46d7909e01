"""
Tests for the command-line interface.
"""

import json
import sys

import pytest

from .. import cli


def run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["skirmish", *argv])
    cli.main()


class TestCLI:
    """Tests for CLI commands."""

    def test_presets(self, monkeypatch, capsys):
        run(monkeypatch, "presets")
        out = capsys.readouterr().out
        assert "skirmish" in out
        assert "damage=health_scaled" in out

    def test_new_prints_state(self, monkeypatch, capsys):
        run(monkeypatch, "new", "--preset", "conquest", "--seed", "4")
        data = json.loads(capsys.readouterr().out)
        assert data["rules_id"] == "conquest"
        assert data["width"] == 12

    def test_new_map(self, monkeypatch, capsys):
        run(monkeypatch, "new", "--seed", "4", "--width", "8", "--height", "6", "--map")
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 6
        assert lines[0].split(" ")[1] == "R"

    def test_validate_bad_file(self, monkeypatch, capsys, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: nothing\n")
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, "validate", str(path))
        assert exc.value.code == 1
        assert "rules_id is required" in capsys.readouterr().out

    def test_no_command(self, monkeypatch):
        with pytest.raises(SystemExit):
            run(monkeypatch, "--log-level", "warning")

    def test_render_map(self, make_state, skirmish_rules):
        state = make_state(
            skirmish_rules, 3, 2,
            units=[("blue", "tank", (2, 1))],
            terrain={(0, 0): "city", (1, 0): "forest"},
            owners={(0, 0): "red"},
        )
        assert cli.render_map(state) == "r f .\n. . B"

    def test_new_board_too_small(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc:
            run(monkeypatch, "new", "--preset", "conquest", "--width", "6", "--height", "6")
        assert exc.value.code == 1
        assert "need a board of at least 8x6" in capsys.readouterr().out
