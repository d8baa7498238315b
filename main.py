#!/usr/bin/env python3
"""CLI entry point for Tile Puzzle."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from tile_puzzle.catalog import ArchiveFetcher, JsonCatalog, filter_by_difficulty
from tile_puzzle.config import GameConfig
from tile_puzzle.errors import PuzzleError
from tile_puzzle.leaderboard import Leaderboard
from tile_puzzle.metrics import format_elapsed
from tile_puzzle.renderer import BoardRenderer
from tile_puzzle.session import PuzzleSession
from tile_puzzle.storage import JsonFileStore, KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging."""
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_grid_size(value: str) -> tuple[int, int]:
    """
    Parse a grid size argument.

    Accepts:
        - Single integer: "4" -> (4, 4)
        - Two integers with 'x': "3x5" -> (3, 5) (3 rows x 5 columns)
    """
    value = value.strip().lower()
    parts = value.split("x") if "x" in value else [value, value]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(
            f"Invalid grid size format: {value}. Use 'NxM' (e.g., '3x5') or single number (e.g., '4')"
        )
    try:
        rows = int(parts[0].strip())
        cols = int(parts[1].strip())
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid grid size: {value}. Dimensions must be integers."
        )
    if rows < 1 or cols < 1:
        raise argparse.ArgumentTypeError(f"Grid dimensions must be at least 1. Got: {rows}x{cols}")
    return rows, cols


def load_config(args: argparse.Namespace) -> GameConfig:
    config = GameConfig.load(args.config) if args.config else GameConfig()
    config = GameConfig.from_env(config)
    if args.store:
        config.store_path = args.store
    if args.player:
        config.player_name = args.player
    return config


def load_session(
    config: GameConfig,
    archive: str,
    grid: Optional[tuple[int, int]],
    store: Optional[KeyValueStore] = None,
) -> PuzzleSession:
    fetcher = ArchiveFetcher(root=config.archive_root, timeout=config.fetch_timeout)
    session = PuzzleSession(config, store=store)
    blob = fetcher.fetch(archive)
    path = Path(archive)
    report = session.load_archive(blob, archive_name=path.name)
    print(report.message())
    print(f"Grid: {report.estimate.describe()}")
    if grid is not None and grid != (session.rows, session.cols):
        session.build(*grid)
        print(f"Rebuilt board as {grid[0]}x{grid[1]}")
    return session


def cmd_inspect(args: argparse.Namespace, config: GameConfig) -> int:
    session = load_session(config, args.archive, args.grid)
    report = session.last_load
    print(f"Tiles: {report.tile_count} ({report.indexed_count} with coordinates, {report.dropped} dropped)")
    for tile in session.tiles:
        pos = f"({tile.row},{tile.col})" if tile.position is not None else "-"
        print(f"  {pos:>10}  {tile.name}")
    return 0


def cmd_solve(args: argparse.Namespace, config: GameConfig) -> int:
    # Throwaway store: a CLI solve neither spends nor earns real points
    session = load_session(config, args.archive, args.grid, store=MemoryStore())
    session.auto_solve()

    try:
        result = session.check()
        print(result.message())
    except PuzzleError as e:
        print(f"Auto-solved by name order; {e}")

    if args.render:
        BoardRenderer(cell_size=args.cell_size).save(session.board, args.render)
        print(f"Board image saved to: {args.render}")
    if args.output:
        session.metrics.save(args.output)
    return 0


def cmd_catalog(args: argparse.Namespace, config: GameConfig) -> int:
    puzzles = JsonCatalog(config.catalog_path, timeout=config.fetch_timeout).list_puzzles()
    if args.difficulty:
        puzzles = filter_by_difficulty(puzzles, args.difficulty)
    if not puzzles:
        print("No puzzles found.")
        return 1
    for p in puzzles:
        dims = f"{p.rows}×{p.cols}" if p.bounds else p.difficulty
        print(f"{p.id:<20} {p.name:<30} {dims:<10} {p.archive_path}")
    return 0


def cmd_leaderboard(args: argparse.Namespace, config: GameConfig) -> int:
    store = JsonFileStore(config.store_path) if config.store_path else MemoryStore()
    rows, cols = args.grid
    entries = Leaderboard(store, cap=config.leaderboard_cap).top(args.puzzle, rows, cols, limit=args.limit)
    if not entries:
        print("No entries yet.")
        return 0
    print(f"Leaderboard: {args.puzzle or 'Custom'} ({rows}×{cols})")
    for i, entry in enumerate(entries, 1):
        print(f"{i:>3}. {entry.player_name:<20} {format_elapsed(entry.elapsed_ms)}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Tile Puzzle - assemble image tiles from ZIP archives",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show tiles, parsed coordinates and the inferred grid
  python main.py inspect puzzles/castle_4x4.zip

  # Auto-solve and save the assembled board
  python main.py solve puzzles/castle_4x4.zip --render castle.png

  # List medium puzzles from the catalog
  python main.py catalog --difficulty medium

  # Show the leaderboard of a 4x4 catalog puzzle
  python main.py --store scores.json leaderboard --puzzle castle --grid 4x4
        """,
    )
    parser.add_argument("--config", type=str, default=None, help="JSON config file")
    parser.add_argument("--store", type=str, default=None, help="JSON store for points and leaderboards")
    parser.add_argument("--player", type=str, default=None, help="Player name")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress progress output")

    sub = parser.add_subparsers(dest="command", required=True)

    p_inspect = sub.add_parser("inspect", help="Load an archive and list its tiles")
    p_inspect.add_argument("archive", type=str, help="Path to the ZIP archive")
    p_inspect.add_argument("--grid", "-g", type=parse_grid_size, default=None, help="Override grid, e.g. '3x5'")

    p_solve = sub.add_parser("solve", help="Auto-solve an archive")
    p_solve.add_argument("archive", type=str, help="Path to the ZIP archive")
    p_solve.add_argument("--grid", "-g", type=parse_grid_size, default=None, help="Override grid, e.g. '3x5'")
    p_solve.add_argument("--render", type=str, default=None, help="Save the board image here")
    p_solve.add_argument("--cell-size", type=int, default=96, help="Cell size in pixels (default: 96)")
    p_solve.add_argument("--output", "-o", type=str, default=None, help="Save session metrics JSON here")

    p_catalog = sub.add_parser("catalog", help="List catalog puzzles")
    p_catalog.add_argument("--difficulty", "-d", type=str, default=None, help="easy, medium, hard, extra or custom")

    p_lb = sub.add_parser("leaderboard", help="Show a leaderboard")
    p_lb.add_argument("--puzzle", type=str, default=None, help="Puzzle id (default: custom)")
    p_lb.add_argument("--grid", "-g", type=parse_grid_size, required=True, help="Board size, e.g. '4x4'")
    p_lb.add_argument("--limit", type=int, default=20, help="Entries to show (default: 20)")

    args = parser.parse_args()
    setup_logging(not args.quiet)

    commands = {
        "inspect": cmd_inspect,
        "solve": cmd_solve,
        "catalog": cmd_catalog,
        "leaderboard": cmd_leaderboard,
    }

    try:
        config = load_config(args)
        sys.exit(commands[args.command](args, config))
    except PuzzleError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
