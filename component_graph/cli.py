"""
Component Graph - command line interface

Scans a JavaScript/TypeScript source tree, detects UI components, hooks and
imports, and rebuilds a knowledge graph of them in Neo4j (or a JSON file).
"""

import argparse
import sys
from typing import List, Optional

from .config import settings
from .graph.json_graph_client import JsonGraphClient
from .graph.neo4j_client import Neo4jClient
from .graph.queries import write_sample_queries
from .pipeline import GraphBuilder
from .utils.logger import app_logger, setup_logging


BACKENDS = ("neo4j", "json")


def create_client(backend: str, json_path: Optional[str] = None):
    """Open a graph client. Connection failures propagate."""
    if backend == "json":
        return JsonGraphClient(json_path or settings.json_graph_path)

    return Neo4jClient()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="component-graph",
        description="Component Graph - build a knowledge graph of UI components",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Log level")
    parser.add_argument("--backend", choices=BACKENDS, default=settings.graph_backend,
                        help="Graph storage backend")
    parser.add_argument("--json-path", default=settings.json_graph_path,
                        help="Output file for the json backend")

    subparsers = parser.add_subparsers(dest="command")

    build = subparsers.add_parser("build", help="Full-refresh build of the graph (default)")
    build.add_argument("--root", default=settings.project_root, help="Project root")
    build.add_argument("--source-dir", default=settings.source_dir,
                       help="Directory to scan, relative to the project root")
    build.add_argument("--workers", type=int, default=settings.max_workers,
                       help="Parallel file analysis workers")

    setup = subparsers.add_parser("setup", help="Verify the database and prepare the schema")
    setup.add_argument("--queries-file", default="neo4j-sample-queries.cypher",
                       help="Where to write sample Cypher queries")

    subparsers.add_parser("stats", help="Print node and relationship counts")
    return parser


def run_build(client, args) -> dict:
    builder = GraphBuilder(
        client,
        project_root=getattr(args, "root", None),
        source_dir=getattr(args, "source_dir", None),
        max_workers=getattr(args, "workers", None),
    )
    return builder.build()


def print_stats(client):
    stats = client.get_database_stats()
    total_nodes = sum(stats["nodes"].values())
    app_logger.info("Database Statistics:")
    app_logger.info(f"  Total Nodes: {total_nodes}")
    for label, count in sorted(stats["nodes"].items()):
        app_logger.info(f"  {label}: {count}")
    for rel_type, count in sorted(stats["relationships"].items()):
        app_logger.info(f"  [{rel_type}]: {count}")
    if total_nodes == 0:
        app_logger.warning('Database is empty. Run "component-graph build" to populate it.')
    return stats


def run_setup(client, args):
    if not client.ping():
        raise RuntimeError("Database did not answer the connectivity check")
    client.ensure_constraints()
    client.ensure_indexes()
    print_stats(client)
    write_sample_queries(args.queries_file)
    app_logger.info("Setup complete")


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args(argv + ["build"])

    setup_logging(args.log_level, settings.log_file)
    app_logger.info(f"Starting component graph {args.command} ({args.backend} backend)")

    try:
        client = create_client(args.backend, args.json_path)
    except Exception as e:
        app_logger.error(f"Could not open graph storage: {e}")
        sys.exit(1)

    try:
        if args.command == "setup":
            run_setup(client, args)
        elif args.command == "stats":
            print_stats(client)
        else:
            run_build(client, args)
    except KeyboardInterrupt:
        app_logger.info("Shutting down...")
    except Exception as e:
        app_logger.error(f"Error running {args.command}: {e}")
        sys.exit(1)
    finally:
        client.close()


if __name__ == "__main__":
    main()
