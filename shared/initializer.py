"""
Centralized application initializer.

This component is responsible for parsing command-line arguments, loading
configurations, and initializing the core MemoryService.
It provides a single, reliable entry point for building the application's core,
which can then be used by the CLI, the file watcher and the servers.
"""

import argparse
import logging
import sys
from typing import Tuple

from components.memory_service import MemoryService

from shared.config import Config, load_config

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """Route diagnostics to stderr so that command output stays on stdout."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def create_arg_parser() -> argparse.ArgumentParser:
    """
    Creates and returns the command-line argument parser with the arguments
    shared by every command.

    Returns:
        An ArgumentParser instance with all common arguments defined.
    """
    parser = argparse.ArgumentParser(
        prog="memory-index",
        description="Metadata index and semantic search over markdown memory notes.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the config folder to use for all config files.",
    )
    parser.add_argument(
        "-a",
        "--app-config",
        help="Path to the app.toml file to use.",
    )
    parser.add_argument(
        "--brain-dir",
        help="Override the directory holding the memory notes.",
    )
    parser.add_argument(
        "--index-file",
        help="Override the index file location.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line overrides to a loaded configuration."""
    if getattr(args, "brain_dir", None):
        logger.info(f"Overriding brain directory with: {args.brain_dir}")
        config.paths.brain_dir = args.brain_dir
    if getattr(args, "index_file", None):
        logger.info(f"Overriding index file with: {args.index_file}")
        config.paths.index_file = args.index_file
    if getattr(args, "host", None):
        logger.info(f"Overriding server host with: {args.host}")
        config.server.host = args.host
    if getattr(args, "api_port", None):
        config.server.api_port = args.api_port
    if getattr(args, "mcp_port", None):
        config.server.mcp_port = args.mcp_port
    return config


def initialize_service_from_args(
    args: argparse.Namespace,
) -> Tuple[Config, MemoryService]:
    """
    Loads configuration and initializes the core service based on command-line
    arguments.

    The embedding model is not loaded here; the service creates it the first
    time a command needs it.

    Args:
        args: Parsed command-line arguments from an ArgumentParser.

    Returns:
        A tuple containing the loaded Config object and the initialized
        MemoryService instance.
    """
    logger.debug("Initializing application core services...")

    config = load_config(
        config_dir=getattr(args, "config", None),
        app_config_path=getattr(args, "app_config", None),
    )
    apply_overrides(config, args)

    service = MemoryService(config=config)
    logger.debug(f"Memory index located at {config.get_index_path()}")
    return config, service
