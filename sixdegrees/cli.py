"""Command-line surface for sixdegrees.

    sixdegrees search --target "Donald Trump"
    sixdegrees inspect data/graph.json --source "Kevin Bacon" --target "Footloose"

``search`` exits 0 once a path is printed and 1 on any unrecoverable failure
(generation cap, exhausted frontier, unwritable snapshot, unreachable
resolver). ``inspect`` reads a snapshot written by a previous search.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .config import Config
from .explorer import FrontierExplorer, SearchFailedError
from .graph import (
    GraphShapeError,
    InMemoryGraphStore,
    lowest_common_ancestors,
    shortest_path,
    topological_sort,
)
from .logging_utils import Color, colored, log_error, profile
from .persistence import JsonSnapshotFile, SnapshotPersistenceError
from .resolver import WikipediaResolver
from .schemas import PathResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sixdegrees",
        description="Find how closely two Wikipedia articles are linked",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Expand the link graph until source reaches target")
    search.add_argument(
        "-s",
        "--source",
        default=Config.DEFAULT_SOURCE,
        help=f'The source of our search, by default "{Config.DEFAULT_SOURCE}"',
    )
    search.add_argument("-t", "--target", required=True, help="The target of our search")
    search.add_argument(
        "--max-generations",
        type=int,
        default=Config.MAX_GENERATIONS,
        help="Give up after this many generations",
    )
    search.add_argument(
        "--snapshot",
        type=Path,
        default=Config.SNAPSHOT_PATH,
        help="Where to write the graph snapshot after every fold",
    )
    search.add_argument(
        "--backlinks",
        action="store_true",
        help="Also fetch backlinks and fold them as incoming edges",
    )
    search.add_argument(
        "--node-delay",
        type=float,
        default=Config.NODE_DELAY_SECONDS,
        help="Seconds to wait after each resolved node",
    )
    search.add_argument(
        "--generation-delay",
        type=float,
        default=Config.GENERATION_DELAY_SECONDS,
        help="Seconds to wait between generations",
    )

    inspect = subparsers.add_parser("inspect", help="Summarize a saved graph snapshot")
    inspect.add_argument("snapshot", type=Path, help="Snapshot JSON written by a search")
    inspect.add_argument("-s", "--source", help="Path start (requires --target)")
    inspect.add_argument("-t", "--target", help="Path end (requires --source)")

    return parser


def format_path(path: PathResult) -> str:
    chain = colored(" -> ", Color.GRAY).join(colored(node, Color.WHITE, bold=True) for node in path.path)
    return (
        f"{colored('Found path', Color.GREEN)}: {chain}, "
        f"{colored('Bacon Factor', Color.CYAN)}: {path.hops}"
    )


async def run_search(args: argparse.Namespace) -> int:
    resolver = WikipediaResolver(include_backlinks=args.backlinks)
    explorer = FrontierExplorer(
        resolver,
        args.source,
        args.target,
        persistence=JsonSnapshotFile(args.snapshot),
        max_generations=args.max_generations,
        node_delay=args.node_delay,
        generation_delay=args.generation_delay,
        follow_backlinks=args.backlinks,
    )

    try:
        with profile("total"):
            result = await explorer.run()
    except (SearchFailedError, SnapshotPersistenceError) as exc:
        log_error(str(exc))
        return 1

    print(format_path(result.path))
    return 0


async def run_inspect(args: argparse.Namespace) -> int:
    if (args.source is None) != (args.target is None):
        log_error("inspect needs both --source and --target to report a path")
        return 1

    try:
        serialized = await JsonSnapshotFile(args.snapshot).load_snapshot()
    except SnapshotPersistenceError as exc:
        log_error(str(exc))
        return 1
    if serialized is None:
        log_error(f"No snapshot at {args.snapshot}")
        return 1

    graph = InMemoryGraphStore(serialized)
    print(f"nodes: {len(serialized.nodes)}")
    print(f"links: {len(serialized.links)}")

    with profile("topologicalSort"):
        print(f"topologicalSort: {len(topological_sort(graph))}")

    if args.source is None:
        return 0

    with profile("lowestCommonAncestors"):
        lcas = lowest_common_ancestors(graph, args.source, args.target)
    print(f"lowestCommonAncestors: {', '.join(lcas) if lcas else '(none)'}")

    try:
        with profile("shortestPath"):
            path = shortest_path(graph, args.source, args.target)
    except GraphShapeError as exc:
        log_error(str(exc))
        return 1

    print(format_path(path))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        Config.validate()
    except ValueError as exc:
        log_error(str(exc))
        return 1

    if args.command == "search":
        return asyncio.run(run_search(args))
    return asyncio.run(run_inspect(args))


if __name__ == "__main__":
    sys.exit(main())
