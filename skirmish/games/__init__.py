"""
Games module - Built-in rule presets.

Each preset is a module exposing create_rules():
- skirmish: hot-seat turns, flat damage, turn-start income
- conquest: action points, health-scaled damage, real-time income

More presets can be loaded from YAML rules files (see loader.py) and
added with register_rules().
"""

from __future__ import annotations

from ..engine_core.rules import MatchConfig, Rules
from ..engine_core.setup import new_match as _new_match
from ..engine_core.state import MatchState
from . import conquest, skirmish
from .loader import load_rules_dir, load_rules_file

DEFAULT_PRESET = skirmish.RULES_ID

_registry: dict[str, Rules] = {
    skirmish.RULES_ID: skirmish.create_rules(),
    conquest.RULES_ID: conquest.create_rules(),
}


def list_presets() -> list[Rules]:
    return list(_registry.values())


def has_preset(rules_id: str) -> bool:
    return rules_id in _registry


def get_rules(rules_id: str = DEFAULT_PRESET) -> Rules:
    """Look up a preset. Raises KeyError for unknown ids."""
    try:
        return _registry[rules_id]
    except KeyError:
        raise KeyError(f"Unknown preset: {rules_id}") from None


def register_rules(rules: Rules) -> None:
    """Add or replace a preset."""
    _registry[rules.rules_id] = rules


def new_match(
    preset: str = DEFAULT_PRESET,
    config: MatchConfig | None = None,
    now_ms: int = 0,
    match_id: str | None = None,
) -> MatchState:
    """Start a match from a registered preset."""
    return _new_match(config, get_rules(preset), now_ms=now_ms, match_id=match_id)


__all__ = [
    "DEFAULT_PRESET",
    "list_presets",
    "has_preset",
    "get_rules",
    "register_rules",
    "new_match",
    "load_rules_file",
    "load_rules_dir",
]
