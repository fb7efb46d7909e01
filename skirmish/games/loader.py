"""
Rules Loader - Build Rules from a YAML rules file.

File layout:

    rules_id: desert
    name: Desert Skirmish
    factions: [red, blue]
    default_width: 12
    default_height: 8
    ruleset:
      damage_model: flat
      action_economy: per_turn
    terrains:
      - {kind: plain, movement_cost: 1}
      - {kind: dune, movement_cost: 2, defense_bonus_pct: 10}
      - {kind: oasis, is_objective: true}
    units:
      - {kind: infantry, max_health: 100, attack: 55, defense: 10,
         move_range: 3, min_attack_range: 1, max_attack_range: 1,
         cost: 1000, can_capture: true}
    generation:
      base_weights: {plain: 3, dune: 1}
      overlays: [{kind: dune, probability: 0.1}]
      scatters: [{kind: oasis, count: 2}]
    placements:
      - {faction: 0, kind: infantry, position: [0, 0]}
      - {faction: 1, kind: infantry, position: [-1, -1]}

Every problem found is collected and reported together in one
RulesFileError.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any

import yaml

from ..engine_core.catalog import Catalog, TerrainKind, UnitArchetype
from ..engine_core.errors import RulesFileError
from ..engine_core.rules import (
    GenerationConfig,
    Overlay,
    Placement,
    Rules,
    Ruleset,
    Scatter,
)

logger = logging.getLogger(__name__)

UNIT_FIELDS = (
    "max_health",
    "attack",
    "defense",
    "move_range",
    "min_attack_range",
    "max_attack_range",
    "cost",
)


def load_rules_file(path: str | Path) -> Rules:
    """Load and validate a rules file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise RulesFileError(str(path), [f"cannot read file: {e}"]) from e
    except yaml.YAMLError as e:
        raise RulesFileError(str(path), [f"invalid YAML: {e}"]) from e

    if not isinstance(data, dict):
        raise RulesFileError(str(path), ["top level must be a mapping"])

    rules = rules_from_dict(data, source=str(path))
    logger.info(
        f"Loaded rules '{rules.rules_id}' from {path}: "
        f"{len(rules.catalog.terrains)} terrains, {len(rules.catalog.archetypes)} units"
    )
    return rules


def load_rules_dir(directory: str | Path) -> dict[str, Rules]:
    """Load every *.yaml / *.yml file in a directory, keyed by rules_id."""
    directory = Path(directory)
    loaded: dict[str, Rules] = {}
    for path in sorted(directory.glob("*.y*ml")):
        rules = load_rules_file(path)
        loaded[rules.rules_id] = rules
    return loaded


def rules_from_dict(data: dict[str, Any], source: str = "<dict>") -> Rules:
    """Build Rules from already-parsed data."""
    errors: list[str] = []

    rules_id = data.get("rules_id")
    if not rules_id or not isinstance(rules_id, str):
        errors.append("rules_id is required")

    terrains = _parse_terrains(data.get("terrains"), errors)
    archetypes = _parse_units(data.get("units"), errors)
    catalog = Catalog.build(terrains, archetypes)

    ruleset_data = data.get("ruleset") or {}
    if not isinstance(ruleset_data, dict):
        errors.append("ruleset: must be a mapping")
        ruleset_data = {}
    try:
        ruleset = Ruleset.from_dict(ruleset_data)
    except (ValueError, TypeError) as e:
        errors.append(f"ruleset: {e}")
        ruleset = Ruleset()

    generation_data = data.get("generation") or {}
    if not isinstance(generation_data, dict):
        errors.append("generation: must be a mapping")
        generation_data = {}
    generation = _parse_generation(generation_data, catalog, errors)
    placements = _parse_placements(data.get("placements") or [], catalog, errors)

    factions = data.get("factions") or ("red", "blue")
    if not isinstance(factions, (list, tuple)) or not all(isinstance(f, str) for f in factions):
        errors.append("factions: must be a list of names")
        factions = ("red", "blue")
    factions = tuple(factions)
    if len(factions) < 2:
        errors.append("at least 2 factions are required")

    sizes = {}
    for key, default in (
        ("default_width", 10),
        ("default_height", 10),
        ("min_width", 3),
        ("min_height", 3),
    ):
        value = data.get(key, default)
        if not _is_int(value) or value < 1:
            errors.append(f"{key}: must be a positive integer")
            value = default
        sizes[key] = value
    if sizes["default_width"] < sizes["min_width"] or sizes["default_height"] < sizes["min_height"]:
        errors.append("default board size is below min_width/min_height")

    if errors:
        raise RulesFileError(source, errors)

    return Rules(
        rules_id=rules_id,
        name=data.get("name", rules_id),
        catalog=catalog,
        ruleset=ruleset,
        generation=generation,
        placements=placements,
        factions=factions,
        **sizes,
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_position(value: Any, where: str, errors: list[str]) -> tuple[int, int] | None:
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or not all(_is_int(c) for c in value)
    ):
        errors.append(f"{where}: position must be a pair of integers, got {value!r}")
        return None
    return (value[0], value[1])


def _parse_positions(items: Any, where: str, errors: list[str]) -> tuple[tuple[int, int], ...]:
    if not isinstance(items, (list, tuple)):
        errors.append(f"{where}: must be a list of positions")
        return ()
    positions = []
    for i, item in enumerate(items):
        pos = _parse_position(item, f"{where}[{i}]", errors)
        if pos is not None:
            positions.append(pos)
    return tuple(positions)


def _parse_terrains(items: Any, errors: list[str]) -> list[TerrainKind]:
    if not items:
        errors.append("at least one terrain is required")
        return []
    if not isinstance(items, list):
        errors.append("terrains: must be a list")
        return []
    terrains = []
    for i, item in enumerate(items):
        if not isinstance(item, dict) or not isinstance(item.get("kind"), str):
            errors.append(f"terrains[{i}]: needs a kind")
            continue
        cost = item.get("movement_cost", 1)
        bonus = item.get("defense_bonus_pct", 0)
        if not _is_number(cost) or not _is_number(bonus):
            errors.append(f"terrains[{i}] ({item['kind']}): costs and bonuses must be numbers")
            continue
        if cost < 0 or bonus < 0:
            errors.append(f"terrains[{i}] ({item['kind']}): costs and bonuses must be >= 0")
            continue
        terrains.append(TerrainKind(
            kind=item["kind"],
            movement_cost=cost,
            defense_bonus_pct=bonus,
            is_objective=bool(item.get("is_objective", False)),
            deployable=bool(item.get("deployable", False)),
        ))
    return terrains


def _parse_units(items: Any, errors: list[str]) -> list[UnitArchetype]:
    if not items:
        errors.append("at least one unit is required")
        return []
    if not isinstance(items, list):
        errors.append("units: must be a list")
        return []
    archetypes = []
    for i, item in enumerate(items):
        if not isinstance(item, dict) or not isinstance(item.get("kind"), str):
            errors.append(f"units[{i}]: needs a kind")
            continue
        missing = [f for f in UNIT_FIELDS if f not in item]
        if missing:
            errors.append(f"units[{i}] ({item['kind']}): missing {', '.join(missing)}")
            continue
        not_numbers = [f for f in UNIT_FIELDS if not _is_number(item[f])]
        if not_numbers:
            errors.append(f"units[{i}] ({item['kind']}): not a number: {', '.join(not_numbers)}")
            continue
        if item["min_attack_range"] > item["max_attack_range"]:
            errors.append(f"units[{i}] ({item['kind']}): min_attack_range > max_attack_range")
            continue
        archetypes.append(UnitArchetype(
            kind=item["kind"],
            can_capture=bool(item.get("can_capture", False)),
            **{f: item[f] for f in UNIT_FIELDS},
        ))
    return archetypes


def _check_terrain(kind: Any, catalog: Catalog, where: str, errors: list[str]) -> None:
    if not isinstance(kind, str) or kind not in catalog.terrains:
        errors.append(f"{where}: unknown terrain kind {kind!r}")


def _mappings(items: Any, where: str, errors: list[str]) -> list[tuple[int, dict[str, Any]]]:
    """Indexed entries of a list that are mappings; anything else is an error."""
    if not isinstance(items, list):
        errors.append(f"{where}: must be a list")
        return []
    entries = []
    for i, item in enumerate(items):
        if isinstance(item, dict):
            entries.append((i, item))
        else:
            errors.append(f"{where}[{i}]: must be a mapping, got {item!r}")
    return entries


def _parse_generation(data: dict[str, Any], catalog: Catalog, errors: list[str]) -> GenerationConfig:
    base_weights = data.get("base_weights") or {next(iter(catalog.terrains), "plain"): 1}
    if not isinstance(base_weights, dict):
        errors.append("generation.base_weights: must be a mapping of kind to weight")
        base_weights = {next(iter(catalog.terrains), "plain"): 1}
    for kind, weight in base_weights.items():
        _check_terrain(kind, catalog, "generation.base_weights", errors)
        if not _is_number(weight) or weight < 0:
            errors.append(f"generation.base_weights.{kind}: weight must be a number >= 0")
    if not any(_is_number(w) and w > 0 for w in base_weights.values()):
        errors.append("generation.base_weights: at least one weight must be > 0")

    overlays = []
    for i, item in _mappings(data.get("overlays") or [], "generation.overlays", errors):
        _check_terrain(item.get("kind"), catalog, f"generation.overlays[{i}]", errors)
        probability = item.get("probability", 0)
        if not _is_number(probability):
            errors.append(f"generation.overlays[{i}]: probability must be a number")
            continue
        overlays.append(Overlay(item.get("kind"), float(probability)))

    scatters = []
    for i, item in _mappings(data.get("scatters") or [], "generation.scatters", errors):
        _check_terrain(item.get("kind"), catalog, f"generation.scatters[{i}]", errors)
        count = item.get("count", 0)
        if not _is_int(count):
            errors.append(f"generation.scatters[{i}]: count must be an integer")
            continue
        scatters.append(Scatter(item.get("kind"), count))

    for key in ("road_kind", "objective_kind", "base_kind"):
        if data.get(key) is not None:
            _check_terrain(data[key], catalog, f"generation.{key}", errors)

    roads = data.get("roads", 0)
    if not _is_int(roads):
        errors.append("generation.roads: must be an integer")
        roads = 0
    road_drift = data.get("road_drift", 0.3)
    if not _is_number(road_drift):
        errors.append("generation.road_drift: must be a number")
        road_drift = 0.3
    home_rows = data.get("home_rows", 3)
    if not _is_int(home_rows):
        errors.append("generation.home_rows: must be an integer")
        home_rows = 3

    bases = data.get("bases")
    return GenerationConfig(
        base_weights=dict(base_weights),
        overlays=tuple(overlays),
        scatters=tuple(scatters),
        roads=roads,
        road_kind=data.get("road_kind"),
        road_drift=float(road_drift),
        objective_kind=data.get("objective_kind"),
        objectives=_parse_positions(data.get("objectives") or (), "generation.objectives", errors),
        base_kind=data.get("base_kind"),
        bases=_parse_positions(bases, "generation.bases", errors) if bases else None,
        home_rows=home_rows,
    )


def _parse_placements(items: Any, catalog: Catalog, errors: list[str]) -> tuple[Placement, ...]:
    placements = []
    for i, item in _mappings(items, "placements", errors):
        kind = item.get("kind")
        if not isinstance(kind, str) or kind not in catalog.archetypes:
            errors.append(f"placements[{i}]: unknown unit kind {kind!r}")
            continue
        faction_index = item.get("faction", 0)
        if not _is_int(faction_index) or faction_index < 0:
            errors.append(f"placements[{i}]: faction must be a faction index >= 0")
            continue
        position = item.get("position")
        if position is not None:
            position = _parse_position(position, f"placements[{i}]", errors)
            if position is None:
                continue
        placements.append(Placement(
            faction_index=faction_index,
            kind=kind,
            position=position,
        ))
    return tuple(placements)
