"""
inkengine/cli.py -- Command line access to search, tags and connections.

Every command prints JSON to stdout.  Commands that need project data read
a snapshot from ``--project PATH`` or, failing that, from the per-user data
directory (``--name``, default ``default``).

Usage::

    inkengine --project aldara.json search "fire mage"
    inkengine tags "The ancient prophecy foretold a great war"
    inkengine connection-types character location
    inkengine --project aldara.json connect character 1 location 4 lives_in
    inkengine --project aldara.json network character 1 --depth 2
    inkengine --project aldara.json path character 1 lore 9
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Optional, Sequence

from inkengine.connections import author_connection, get_connection_types
from inkengine.errors import InkEngineError
from inkengine.graph_builder import ConnectionGraph
from inkengine.models.base import ENTITY_TYPES
from inkengine.paths import default_project_path
from inkengine.project import ProjectData, load_project, save_project
from inkengine.search import search_across_entities
from inkengine.tag_recommender import (
    analyze_content_for_tags,
    get_category_base_tags,
    get_recommended_tags,
)

logger = logging.getLogger("inkengine")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _dump(models) -> list[dict]:
    return [m.model_dump(mode="json", by_alias=True, exclude_none=True) for m in models]


def _project_path(args: argparse.Namespace) -> str:
    return args.project or default_project_path(args.name)


def _load(args: argparse.Namespace) -> ProjectData:
    return load_project(_project_path(args))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_search(args: argparse.Namespace) -> None:
    project = _load(args)
    _emit(_dump(search_across_entities(args.query, **project.collections())))


def _cmd_tags(args: argparse.Namespace) -> None:
    if args.all:
        _emit(_dump(analyze_content_for_tags(args.content, args.title, args.category)))
    else:
        _emit(get_recommended_tags(args.content, args.title, args.category))


def _cmd_base_tags(args: argparse.Namespace) -> None:
    _emit(get_category_base_tags(args.category))


def _cmd_connection_types(args: argparse.Namespace) -> None:
    _emit(get_connection_types(args.source_type, args.target_type))


def _cmd_connect(args: argparse.Namespace) -> None:
    path = _project_path(args)
    project = load_project(path)
    source_name = ConnectionGraph.from_project(project).get_node_name(
        args.source_type, args.source_id,
    )
    connection = author_connection(
        args.source_type,
        args.source_id,
        args.target_type,
        args.target_id,
        args.connection_type,
        project.available_entities(),
        on_add_connection=project.add_connection,
        description=args.description,
        source_name=source_name,
    )
    save_project(project, path)
    _emit(connection.model_dump(mode="json", by_alias=True, exclude_none=True))


def _cmd_network(args: argparse.Namespace) -> None:
    graph = ConnectionGraph.from_project(_load(args))
    _emit(_dump(graph.get_entity_network(args.entity_type, args.entity_id, args.depth)))


def _cmd_path(args: argparse.Namespace) -> None:
    graph = ConnectionGraph.from_project(_load(args))
    _emit(_dump(graph.find_connection_path(
        args.source_type, args.source_id, args.target_type, args.target_id,
    )))


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inkengine",
        description="Search, tag and connect worldbuilding entities.",
    )
    parser.add_argument("--project", help="Path to a project snapshot (JSON)")
    parser.add_argument(
        "--name", default="default",
        help="Snapshot name in the user data directory (used without --project)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("search", help="Search across all entities")
    p.add_argument("query")
    p.set_defaults(func=_cmd_search)

    p = sub.add_parser("tags", help="Recommend tags for a piece of text")
    p.add_argument("content")
    p.add_argument("--title", default="")
    p.add_argument("--category", default="")
    p.add_argument("--all", action="store_true", help="Show every candidate with confidence")
    p.set_defaults(func=_cmd_tags)

    p = sub.add_parser("base-tags", help="Seed tags for a lore category")
    p.add_argument("category")
    p.set_defaults(func=_cmd_base_tags)

    p = sub.add_parser("connection-types", help="Permitted connection types for a pair")
    p.add_argument("source_type", choices=ENTITY_TYPES)
    p.add_argument("target_type", choices=ENTITY_TYPES)
    p.set_defaults(func=_cmd_connection_types)

    p = sub.add_parser("connect", help="Author a connection and save it")
    p.add_argument("source_type", choices=ENTITY_TYPES)
    p.add_argument("source_id", type=int)
    p.add_argument("target_type", choices=ENTITY_TYPES)
    p.add_argument("target_id", type=int)
    p.add_argument("connection_type")
    p.add_argument("--description")
    p.set_defaults(func=_cmd_connect)

    p = sub.add_parser("network", help="Connections within N hops of an entity")
    p.add_argument("entity_type", choices=ENTITY_TYPES)
    p.add_argument("entity_id", type=int)
    p.add_argument("--depth", type=int, default=1)
    p.set_defaults(func=_cmd_network)

    p = sub.add_parser("path", help="Shortest connection path between two entities")
    p.add_argument("source_type", choices=ENTITY_TYPES)
    p.add_argument("source_id", type=int)
    p.add_argument("target_type", choices=ENTITY_TYPES)
    p.add_argument("target_id", type=int)
    p.set_defaults(func=_cmd_path)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the ``inkengine`` console script."""
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    try:
        args.func(args)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1
    except InkEngineError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
