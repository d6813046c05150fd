"""
Songbook - Entry Point

Run with: python -m songbook
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from songbook import __version__
from songbook.config import ConfigError, Settings, load_settings, parse_origins
from songbook.server import SongbookServer


def setup_logging(verbose: bool = False, level_name: str = "INFO") -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="songbook",
        description="Songbook - song catalog manager (REST API + statistics)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML config file (default: ./songbook.toml if present)",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host address to bind to (default: 0.0.0.0)",
    )

    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=None,
        help="HTTP port (default: 5050)",
    )

    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="Path to the SQLite database file (default: songbook.sqlite3)",
    )

    parser.add_argument(
        "--cors-origins",
        type=str,
        default=None,
        help="Comma-separated origins allowed to write (default: any origin)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply command line flags on top of file/environment settings."""
    changes: dict[str, object] = {}
    if args.host is not None:
        changes["host"] = args.host
    if args.port is not None:
        changes["port"] = args.port
    if args.db is not None:
        changes["db_path"] = args.db
    if args.cors_origins is not None:
        changes["allowed_origins"] = parse_origins(args.cors_origins)
    return replace(settings, **changes)


async def run_server(settings: Settings) -> None:
    """Start and run the Songbook server."""
    server = SongbookServer(settings)
    await server.run()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)

    try:
        settings = apply_cli_overrides(load_settings(args.config), args)
    except (ConfigError, OSError, ValueError) as e:
        print(f"songbook: configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(verbose=args.verbose, level_name=settings.log_level)

    logger = logging.getLogger(__name__)
    logger.info("Starting Songbook...")

    try:
        asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1

    logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
