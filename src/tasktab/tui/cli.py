"""CLI entry point for the tasktab TUI.

This module handles command-line argument parsing, logging setup,
store wiring, and the main entry point.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.handlers
import sys
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import Config, load_config
from ..core.classification import ImageClassifier
from ..core.engine import StateEngine
from ..core.exceptions import ConfigError
from ..core.persistence import StatePersister
from ..core.stores import JsonFileStore, MemoryStore
from .app import TaskTabApp

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/tasktab/config.json")


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log line
        """
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "event": record.getMessage(),
            "context": {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            },
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_context"):
            log_data["context"].update(record.extra_context)

        return json.dumps(log_data)


def _setup_logging(log_file: Path, debug: bool) -> None:
    """Setup structured JSON logging to file.

    Args:
        log_file: Path to log file
        debug: Enable debug level logging
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # 10MB per file, 3 backups
    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(JSONFormatter())
    file_handler.setLevel(logging.DEBUG if debug else logging.INFO)

    root_logger.addHandler(file_handler)

    logger.info(
        "Logging initialized",
        extra={"extra_context": {"log_file": str(log_file), "debug": debug}},
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="tasktab",
        description="Tabbed to-do lists with themed backgrounds, in the terminal",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to config.json (default: {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--data-dir",
        type=Path,
        help="Directory holding the state stores (overrides config)",
    )

    return parser.parse_args(argv)


def build_persister(config: Config) -> StatePersister:
    """Wire the store fallback chain: sync file, local file, memory."""
    stores = [
        JsonFileStore(config.sync_store_path, name="sync"),
        JsonFileStore(config.local_store_path, name="local"),
        MemoryStore(),
    ]
    return StatePersister(stores, mirror_failed_writes=config.mirror_failed_writes)


async def _run(config: Config, console: Console) -> int:
    persister = build_persister(config)
    classifier = ImageClassifier(timeout=config.classification_timeout_seconds)
    engine = await StateEngine.create(persister, classifier, config)
    app = TaskTabApp(config, engine, console)
    return await app.run()


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the TUI application.

    Returns:
        Exit code (0=success, 1=error, 130=SIGINT)
    """
    args = _parse_args(argv)
    console = Console()

    try:
        config = load_config(args.config.expanduser())
    except ConfigError as err:
        console.print(f"[red]Error loading config: {escape(str(err))}[/red]")
        return 1

    if args.data_dir is not None:
        config = replace(config, data_dir=args.data_dir.expanduser().resolve())

    _setup_logging(config.log_file, args.debug)
    logger.info(
        "TUI starting",
        extra={
            "extra_context": {
                "config_path": str(args.config),
                "data_dir": str(config.data_dir),
                "debug": args.debug,
            }
        },
    )

    try:
        exit_code = asyncio.run(_run(config, console))
    except KeyboardInterrupt:
        logger.info("TUI interrupted by user (KeyboardInterrupt)")
        return 130
    except Exception as err:
        logger.error(
            "TUI crashed with unhandled exception",
            extra={"extra_context": {"error": str(err)}},
            exc_info=True,
        )
        console.print(f"[red]Fatal error: {escape(str(err))}[/red]")
        console.print(f"[dim]Check logs at: {escape(str(config.log_file))}[/dim]")
        return 1

    logger.info("TUI exited", extra={"extra_context": {"exit_code": exit_code}})
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
