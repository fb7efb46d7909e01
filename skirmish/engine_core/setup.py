"""
Match Setup - Build the initial MatchState from rules and a config.

Usage:
    from skirmish.games import get_rules
    state = new_match(MatchConfig(rng_seed=42), get_rules("skirmish"))
"""

from __future__ import annotations
import logging
import random
import uuid
from dataclasses import replace

from .board import Board, Unit, generate_board, resolve_position
from .errors import BoardError
from .rules import ActionEconomy, MatchConfig, Position, Rules
from .state import FactionState, MatchState

logger = logging.getLogger(__name__)


def resolve_factions(rules: Rules, count: int) -> list[str]:
    """First count faction ids from the rules, padded with generated names."""
    if count < 2:
        raise ValueError(f"A match needs at least 2 factions, got {count}")
    factions = list(rules.factions[:count])
    while len(factions) < count:
        factions.append(f"faction{len(factions) + 1}")
    return factions


def find_base(board: Board, faction: str, deployable_kinds: set[str]) -> Position | None:
    for tile in board.objective_tiles():
        if tile.terrain in deployable_kinds and tile.objective.owner == faction:
            return tile.position
    return None


def new_match(
    config: MatchConfig | None,
    rules: Rules,
    now_ms: int = 0,
    match_id: str | None = None,
) -> MatchState:
    """
    Create a match: generate the board, seed economies, place units.

    If config.rng_seed is None a seed is drawn once and stored in the
    returned state's config, so reset() rebuilds the same board.
    """
    config = config or MatchConfig()
    if config.rng_seed is None:
        config = replace(config, rng_seed=random.randrange(2**32))

    ruleset = rules.ruleset.with_overrides(config.ruleset)
    rules = rules.with_ruleset(ruleset)
    width = config.width or rules.default_width
    height = config.height or rules.default_height
    if width < rules.min_width or height < rules.min_height:
        raise ValueError(
            f"Rules {rules.rules_id} need a board of at least "
            f"{rules.min_width}x{rules.min_height}, got {width}x{height}"
        )
    factions = resolve_factions(rules, config.faction_count)

    rng = random.Random(config.rng_seed)
    try:
        board = generate_board(width, height, rules.generation, rules.catalog, rng, factions)
    except BoardError as e:
        raise ValueError(f"Rules {rules.rules_id} do not fit a {width}x{height} board: {e}") from e

    starting_points = (
        ruleset.max_action_points
        if ruleset.action_economy == ActionEconomy.ACTION_POINTS
        else 0
    )
    faction_states = {
        f: FactionState(
            faction=f,
            resources=ruleset.starting_resources,
            action_points=starting_points,
            last_recovery_ms=now_ms,
        )
        for f in factions
    }

    serial = 1
    deployable = rules.catalog.deployable_kinds
    for placement in rules.placements:
        if placement.faction_index >= len(factions):
            continue
        faction = factions[placement.faction_index]
        archetype = rules.catalog.archetype(placement.kind)
        if placement.position is None:
            pos = find_base(board, faction, deployable)
            if pos is None:
                raise ValueError(f"Placement for {faction} needs a base, none on the board")
        else:
            pos = resolve_position(placement.position, width, height)
        try:
            board.place_unit(pos, Unit(
                unit_id=f"{faction}-{serial}",
                kind=archetype.kind,
                faction=faction,
                health=archetype.max_health,
                position=pos,
            ))
        except BoardError as e:
            raise ValueError(f"Cannot place {faction} {placement.kind} at {pos}: {e}") from e
        serial += 1

    state = MatchState(
        match_id=match_id or str(uuid.uuid4()),
        rules=rules,
        config=config,
        board=board,
        factions=faction_states,
        faction_order=factions,
        current_faction=factions[0],
        last_income_ms=now_ms,
        clock_ms=now_ms,
        next_unit_serial=serial,
    )
    logger.info(
        f"New match {state.match_id}: rules={rules.rules_id} "
        f"{width}x{height} seed={config.rng_seed} factions={factions}"
    )
    return state
