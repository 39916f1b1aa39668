"""Command line entry point for Colosseum.

Usage:
    colosseum fighter create FILE
    colosseum fighter import [FILE]
    colosseum fighter list
    colosseum fighter show NAME
    colosseum battle create FIGHTER1 FIGHTER2 [--run] [--no-save] [--seed N]
    colosseum battle random COUNT [--seed N]
    colosseum battle list [--pending]
    colosseum battle watch BATTLE_ID [--seed N]
    colosseum clean
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from colosseum.cli.render import (
    render_battle,
    render_fighter,
    render_fighter_list,
    render_summaries,
)
from colosseum.core.config import get_settings
from colosseum.core.exceptions import ColosseumError, ValidationError
from colosseum.core.logging import configure_from_settings, get_logger
from colosseum.services.arena import Arena
from colosseum.storage.loader import load_fighters
from colosseum.storage.store import BattleStore


logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="colosseum",
        description="Two-fighter battle arena with stored, replayable battles.",
    )
    parser.add_argument("--db", type=Path, help="Database file (overrides COLOSSEUM_DATABASE_PATH).")
    commands = parser.add_subparsers(dest="command", required=True)

    fighter = commands.add_parser("fighter", help="Manage fighters.")
    fighter_commands = fighter.add_subparsers(dest="action", required=True)
    create = fighter_commands.add_parser("create", help="Add one fighter from a JSON file.")
    create.add_argument("file", type=Path)
    imports = fighter_commands.add_parser("import", help="Add every fighter of a JSON file.")
    imports.add_argument("file", type=Path, nargs="?", help="Defaults to COLOSSEUM_FIGHTERS_PATH.")
    fighter_commands.add_parser("list", help="List fighters.")
    show = fighter_commands.add_parser("show", help="Show one fighter.")
    show.add_argument("name")

    battle = commands.add_parser("battle", help="Manage battles.")
    battle_commands = battle.add_subparsers(dest="action", required=True)
    create_battle = battle_commands.add_parser("create", help="Create a battle between two fighters.")
    create_battle.add_argument("fighter1")
    create_battle.add_argument("fighter2")
    create_battle.add_argument("--run", action="store_true", help="Fight immediately and print the log.")
    create_battle.add_argument("--no-save", action="store_true", help="Do not store the battle.")
    create_battle.add_argument("--seed", type=int, help="Optional RNG seed for reproducibility.")
    random_battles = battle_commands.add_parser("random", help="Create random pending battles.")
    random_battles.add_argument("count", type=int)
    random_battles.add_argument("--seed", type=int, help="Optional RNG seed for the pairings.")
    list_battles = battle_commands.add_parser("list", help="List battles.")
    list_battles.add_argument("--pending", action="store_true", help="Only pending battles.")
    watch = battle_commands.add_parser("watch", help="Fight a pending battle or replay a completed one.")
    watch.add_argument("battle_id")
    watch.add_argument("--seed", type=int, help="Optional RNG seed when the battle is fought.")

    commands.add_parser("clean", help="Delete every battle; fighters are kept.")
    return parser


def _fighter_command(arena: Arena, args: argparse.Namespace) -> None:
    if args.action == "create":
        fighters = load_fighters(args.file)
        if len(fighters) != 1:
            raise ValidationError(
                f"{args.file} defines {len(fighters)} fighters; use 'fighter import' for several",
            )
        fighter = arena.create_fighter(fighters[0])
        print(f"Fighter '{fighter.name}' created.")
    elif args.action == "import":
        fighters = arena.import_fighters(args.file)
        print(f"Imported {len(fighters)} fighters.")
    elif args.action == "list":
        print(render_fighter_list(arena.list_fighters()))
    elif args.action == "show":
        print(render_fighter(arena.show_fighter(args.name)))


def _battle_command(arena: Arena, args: argparse.Namespace) -> None:
    if args.action == "create":
        record = arena.create_battle(
            args.fighter1,
            args.fighter2,
            run=args.run,
            persist=not args.no_save,
            seed=args.seed,
        )
        if record.is_completed:
            print(render_battle(record.snapshots, record.events))
        if not args.no_save:
            print(f"Battle {record.id} saved ({record.status}).")
    elif args.action == "random":
        records = arena.create_random_battles(args.count, seed=args.seed)
        for record in records:
            print(f"{record.id}  {record.matchup}")
        print(f"Created {len(records)} pending battles.")
    elif args.action == "list":
        print(render_summaries(arena.list_battles(pending_only=args.pending)))
    elif args.action == "watch":
        record = arena.watch_battle(args.battle_id, seed=args.seed)
        print(render_battle(record.snapshots, record.events))


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line.

    Returns:
        Process exit code: 0 on success, 1 on an application error.
    """
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        configure_from_settings(settings)
        arena = Arena(BattleStore(args.db or settings.storage.database_path))

        if args.command == "fighter":
            _fighter_command(arena, args)
        elif args.command == "battle":
            _battle_command(arena, args)
        elif args.command == "clean":
            removed = arena.clear_battles()
            print(f"Removed {removed} battles.")
    except ColosseumError as exc:
        logger.debug("Command failed", command=args.command, error=repr(exc))
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    return 0


__all__ = [
    "build_parser",
    "main",
]
