"""
Skirmish CLI - Command-line interface for the engine.

Usage:
    skirmish presets                   List built-in rule presets
    skirmish new [--preset NAME]       Start a match and print its state
    skirmish validate <rules_file>     Validate a YAML rules file
    skirmish serve [--host --port]     Run the HTTP API
"""

import argparse
import json
import logging
import os
import sys


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Skirmish - Tactical Grid Combat Engine",
        prog="skirmish",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("SKIRMISH_LOG_LEVEL", "INFO"),
        help="Logging level (default: $SKIRMISH_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Presets command
    subparsers.add_parser("presets", help="List rule presets")

    # New match command
    new_parser = subparsers.add_parser("new", help="Start a match and print its visible state")
    new_parser.add_argument("--preset", default="skirmish", help="Preset id")
    new_parser.add_argument("--rules-file", help="YAML rules file to use instead of a preset")
    new_parser.add_argument("--seed", type=int, help="RNG seed for the board")
    new_parser.add_argument("--width", type=int, help="Board width")
    new_parser.add_argument("--height", type=int, help="Board height")
    new_parser.add_argument("--map", action="store_true", help="Print an ASCII map instead of JSON")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a YAML rules file")
    validate_parser.add_argument("rules_file", help="Path to rules file")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "presets":
        cmd_presets(args)
    elif args.command == "new":
        cmd_new(args)
    elif args.command == "validate":
        cmd_validate(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_presets(args):
    """List rule presets."""
    from .games import list_presets

    for rules in list_presets():
        ruleset = rules.ruleset
        print(
            f"{rules.rules_id:<12} {rules.name:<12} "
            f"{rules.default_width}x{rules.default_height} (min {rules.min_width}x{rules.min_height})  "
            f"damage={ruleset.damage_model.value} "
            f"actions={ruleset.action_economy.value} "
            f"income={ruleset.income_model.value}"
        )


def cmd_new(args):
    """Start a match and print it."""
    from .engine_core import MatchConfig, visible_state
    from .engine_core.setup import new_match
    from .games import get_rules, load_rules_file

    rules = load_rules_file(args.rules_file) if args.rules_file else get_rules(args.preset)
    config = MatchConfig(width=args.width, height=args.height, rng_seed=args.seed)
    try:
        state = new_match(config, rules)
    except ValueError as e:
        print(f"Cannot start match: {e}")
        sys.exit(1)

    if args.map:
        print(render_map(state))
    else:
        print(json.dumps(visible_state(state), indent=2))


def cmd_validate(args):
    """Validate a rules file."""
    from .engine_core.errors import RulesFileError
    from .games import load_rules_file

    try:
        rules = load_rules_file(args.rules_file)
    except RulesFileError as e:
        print(f"Invalid rules file: {e.path}")
        for error in e.errors:
            print(f"  - {error}")
        sys.exit(1)

    print(f"Valid: {rules.rules_id} ({rules.name})")
    print(f"  Terrains: {', '.join(rules.catalog.terrains)}")
    print(f"  Units: {', '.join(rules.catalog.archetypes)}")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("skirmish.api.app:app", host=args.host, port=args.port)


def render_map(state) -> str:
    """
    ASCII map: one letter per tile for terrain, faction initial for units.

    Units are upper case, objectives show their owner's initial in
    lower case.
    """
    lines = []
    for row in state.board.rows():
        cells = []
        for tile in row:
            if tile.unit is not None:
                cells.append(tile.unit.faction[0].upper())
            elif tile.objective is not None and tile.objective.owner:
                cells.append(tile.objective.owner[0].lower())
            else:
                cells.append(tile.terrain[0] if tile.terrain != "plain" else ".")
        lines.append(" ".join(cells))
    return "\n".join(lines)


if __name__ == "__main__":
    main()
