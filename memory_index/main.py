# memory_index/main.py

import argparse
import asyncio
import logging
import sys
import time
from typing import List, Optional

import uvicorn
from components.api_app.main import create_app
from components.file_watcher.file_watcher import MemoryWatcher
from components.index_store import normalize_note_path
from components.mcp_app.main import create_mcp_app
from components.memory_service import MemoryService
from components.search_engine import format_results
from shared.config import Config
from shared.initializer import (
    configure_logging,
    create_arg_parser,
    initialize_service_from_args,
)

logger = logging.getLogger(__name__)

KEYWORD_PREVIEW_COUNT = 5


def build_parser() -> argparse.ArgumentParser:
    """Adds the memory-index subcommands to the shared argument parser."""
    parser = create_arg_parser()
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    rebuild = subparsers.add_parser(
        "rebuild", help="Rebuild the whole index from the brain directory."
    )
    rebuild.add_argument(
        "--embed", action="store_true", help="Generate description embeddings."
    )

    query = subparsers.add_parser("query", help="Search memories by meaning.")
    query.add_argument("query", nargs="+", help="The search text.")
    query.add_argument(
        "--threshold", type=float, default=None, help="Minimum similarity score."
    )
    query.add_argument(
        "--max-results", type=int, default=None, help="Maximum number of results."
    )

    update = subparsers.add_parser(
        "update", help="Update the index entry for a single note."
    )
    update.add_argument("file", help="Path to the markdown note.")
    update.add_argument(
        "--embed", action="store_true", help="Generate a description embedding."
    )

    related = subparsers.add_parser(
        "related", help="List notes sharing tags or keywords with a note."
    )
    related.add_argument("file", help="Path to the reference note.")
    related.add_argument(
        "--limit", type=int, default=None, help="Maximum number of matches."
    )

    subparsers.add_parser(
        "prune", help="Remove entries for notes that no longer exist."
    )

    watch = subparsers.add_parser(
        "watch", help="Watch the brain directory and update the index on change."
    )
    watch.add_argument(
        "--embed", action="store_true", help="Generate embeddings for changed notes."
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP and/or MCP servers.")
    serve.add_argument(
        "--serve-api", action="store_true", help="Run the standard API server."
    )
    serve.add_argument(
        "--serve-mcp", action="store_true", help="Run the MCP-compliant server."
    )
    serve.add_argument("--host", type=str, help="Host to run the servers on.")
    serve.add_argument(
        "--api-port", type=int, default=None, help="Port for the standard API."
    )
    serve.add_argument(
        "--mcp-port", type=int, default=None, help="Port for the MCP server."
    )

    return parser


def cmd_rebuild(service: MemoryService, args: argparse.Namespace) -> int:
    print("Building memory index...")
    if args.embed:
        print("  Generating embeddings (this may take a moment)...")

    summary = service.rebuild_index(embed=args.embed)

    print("✓ Index built successfully!")
    print(f"  Total files indexed: {summary.index.stats.total_files}")
    print(f"  Scan duration: {summary.index.stats.last_scan_duration_ms}ms")
    if args.embed:
        print(f"  Embeddings generated: {summary.embedded_count}")
        if summary.embedding_failure_count:
            print(f"  Embedding failures: {summary.embedding_failure_count}")
    if summary.skipped_count:
        print(f"  Skipped: {summary.skipped_count} (no frontmatter or unreadable)")
    print(f"  Location: {service.index_path}")
    return 0


def cmd_query(service: MemoryService, args: argparse.Namespace) -> int:
    query = " ".join(args.query)
    print(f'Searching memories for: "{query}"...\n')

    response = service.search(
        query, threshold=args.threshold, max_results=args.max_results
    )
    print(
        format_results(
            response,
            query,
            preview_length=service.config.search.description_preview_length,
        )
    )
    return 0 if response.index_found else 1


def cmd_update(service: MemoryService, args: argparse.Namespace) -> int:
    if not service.update_file(args.file, embed=args.embed):
        print(f"✗ No valid frontmatter found in {args.file}", file=sys.stderr)
        return 1

    entry = service.load_index().entries[normalize_note_path(args.file)]
    keywords = entry.description_keywords
    preview = ", ".join(keywords[:KEYWORD_PREVIEW_COUNT])
    if len(keywords) > KEYWORD_PREVIEW_COUNT:
        preview += "..."

    print(f"✓ Updated index for: {entry.file_name}")
    print(f"  Tags: {', '.join(entry.tags)}")
    print(f"  Keywords: {preview}")
    return 0


def cmd_related(service: MemoryService, args: argparse.Namespace) -> int:
    matches = service.find_related(args.file, limit=args.limit)
    if not matches:
        print("No related memories found.")
        return 0

    print("Related memories:")
    for match in matches:
        print(f"  [{match.score}] {match.entry.group_name}/{match.entry.file_name}")
        shared = match.shared_tags + match.shared_keywords
        print(f"      Shared: {', '.join(shared)}")
    return 0


def cmd_prune(service: MemoryService, args: argparse.Namespace) -> int:
    removed = service.prune_missing()
    if not removed:
        print("No stale entries found.")
        return 0

    print(f"✓ Removed {len(removed)} stale entries:")
    for path in removed:
        print(f"  {path}")
    return 0


def cmd_watch(service: MemoryService, args: argparse.Namespace) -> int:
    config = service.config
    config.watcher.enabled = True
    if args.embed:
        config.watcher.embed = True

    watcher = MemoryWatcher(service)
    watcher.start()
    if not watcher.is_running():
        logger.error("File watcher could not be started")
        return 1

    print(f"Watching {config.get_brain_path()} for changes. Press Ctrl+C to stop.")
    try:
        while watcher.is_running():
            time.sleep(1)
    except KeyboardInterrupt:
        print("Stopping watcher...")
    finally:
        watcher.stop()
    return 0


async def serve(
    config: Config, service: MemoryService, args: argparse.Namespace
) -> None:
    """
    Runs the selected servers and the file watcher concurrently.
    """
    if not args.serve_api and not args.serve_mcp:
        print(
            "No servers specified, running both --serve-api and --serve-mcp by default."
        )
        args.serve_api = True
        args.serve_mcp = True

    watcher = None  # Will hold watcher instance if enabled
    if config.watcher.enabled:
        logger.info("Initializing MemoryWatcher for live file monitoring...")
        watcher = MemoryWatcher(service)
        watcher.start()

    server_tasks = []
    if args.serve_api:
        api_app = create_app(service)
        port = config.server.api_port
        api_config = uvicorn.Config(api_app, host=config.server.host, port=port)
        api_server = uvicorn.Server(api_config)
        server_tasks.append(api_server.serve())
        print(f"Standard API will be served on http://{config.server.host}:{port}")

    if args.serve_mcp:
        mcp_app = create_mcp_app(service)
        port = config.server.mcp_port
        mcp_config = uvicorn.Config(mcp_app, host=config.server.host, port=port)
        mcp_server = uvicorn.Server(mcp_config)
        server_tasks.append(mcp_server.serve())
        print(f"MCP Server will be served on http://{config.server.host}:{port}")

    try:
        await asyncio.gather(*server_tasks)
    finally:
        if watcher:
            logger.info("Stopping MemoryWatcher...")
            watcher.stop()


COMMANDS = {
    "rebuild": cmd_rebuild,
    "query": cmd_query,
    "update": cmd_update,
    "related": cmd_related,
    "prune": cmd_prune,
    "watch": cmd_watch,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Parses arguments, runs one command and returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config, service = initialize_service_from_args(args)
        if args.command == "serve":
            asyncio.run(serve(config, service, args))
            return 0
        return COMMANDS[args.command](service, args)
    except KeyboardInterrupt:
        print("Servers shut down gracefully.")
        return 0
    except Exception as e:
        logger.error(f"{args.command} failed: {e}")
        logger.debug("Traceback:", exc_info=True)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
