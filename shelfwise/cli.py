"""CLI commands for shelfwise.

Provides diagnostic subcommands for the inventory chat core.

Commands:
    shelfwise detect MESSAGE   - Classify a chat message
    shelfwise extract MESSAGE  - Extract book fields from text
    shelfwise parse [FILE]     - Parse a book-recognition response
    shelfwise prompt           - Print the cataloging prompt
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import AppConfig
from .core.intent import (
    EntityExtractor,
    create_detector,
    describe,
    intent_to_dict,
)
from .core.recognition import build_cataloging_prompt
from .core.recognition import create_parser as create_response_parser

console = Console()

# Handlers installed by setup_logging, replaced on reconfiguration
_log_handlers: list[logging.Handler] = []


def setup_logging(config: AppConfig) -> logging.Logger:
    """Configure root logging for CLI runs.

    Log records go to stderr through rich, and also to a rotating file when
    ``config.log_file`` is set. Set SHELFWISE_DEBUG=1 for DEBUG level.

    Args:
        config: Application config supplying level and log file

    Returns:
        Logger for this module
    """
    root_logger = logging.getLogger()
    for handler in _log_handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _log_handlers.clear()

    log_level = logging.DEBUG if os.environ.get("SHELFWISE_DEBUG") else config.log_level

    _log_handlers.append(
        RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    )

    if config.log_file:
        log_file = Path(config.log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # Rotating file handler (5MB max, keep 3 backups)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        _log_handlers.append(file_handler)

    root_logger.setLevel(log_level)
    for handler in _log_handlers:
        root_logger.addHandler(handler)

    return logging.getLogger(__name__)


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def detect(args: argparse.Namespace, config: AppConfig) -> int:
    """Classify a chat message and show the resulting intent.

    Args:
        args: Parsed arguments (message, image, json)
        config: Loaded application config

    Returns:
        Exit code (0 for success)
    """
    detector = create_detector(config)
    intent = detector.detect_intent(args.message, has_image=args.image)
    data = intent_to_dict(intent)

    if args.json:
        console.print_json(data=data)
        return 0

    table = Table(title=describe(intent))
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in data.items():
        if key == "message" or value is None:
            continue
        table.add_row(key, escape(str(value)))

    console.print(table)
    return 0


def extract(args: argparse.Namespace, config: AppConfig) -> int:
    """Extract book fields from a message.

    Args:
        args: Parsed arguments (message, json)
        config: Loaded application config

    Returns:
        Exit code (0 for success, validation issues are reported only)
    """
    extractor = EntityExtractor()
    info = extractor.extract_book_info(args.message)
    issues = extractor.validate_book_info(info)

    if args.json:
        console.print_json(data={"book": info.to_dict(), "issues": issues})
        return 0

    table = Table(title="Extracted Book Info")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in info.to_dict().items():
        table.add_row(key, escape(str(value)))
    console.print(table)

    for issue in issues:
        console.print(f"[yellow]![/yellow] {escape(issue)}")

    return 0


def parse(args: argparse.Namespace, config: AppConfig) -> int:
    """Parse a book-recognition response from a file or stdin.

    Args:
        args: Parsed arguments (source, json)
        config: Loaded application config

    Returns:
        Exit code (0 when at least one valid book was found, 1 otherwise)
    """
    parser = create_response_parser(config)
    result = parser.parse_response(_read_input(args.source))
    issues = parser.validate_result(result)

    if args.json:
        data = result.to_dict()
        data["issues"] = issues
        data["records"] = result.to_records()
        console.print_json(data=data)
        return 0 if result.success else 1

    if result.books:
        table = Table(title="Recognized Books")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Author")
        table.add_column("Kannada", style="dim")
        table.add_column("Method", style="dim")
        table.add_column("Confidence", justify="right")

        for index, book in enumerate(result.books, start=1):
            regional = " / ".join(
                part for part in (book.regional_title, book.regional_author) if part
            )
            table.add_row(
                str(index),
                escape(book.english_title),
                escape(book.english_author),
                escape(regional) or "-",
                book.parsing_method.value,
                f"{book.confidence:.2f} ({book.confidence_level})",
            )
        console.print(table)

    style = "green" if result.success else "red"
    console.print(f"[{style}]{escape(result.summary())}[/{style}]")
    for issue in issues:
        console.print(f"[yellow]![/yellow] {escape(issue)}")

    return 0 if result.success else 1


def prompt(args: argparse.Namespace, config: AppConfig) -> int:
    """Print the cataloging prompt sent with book photos.

    Returns:
        Exit code (0 for success)
    """
    console.print(
        build_cataloging_prompt(config.parser.delimiter), markup=False, highlight=False
    )
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="shelfwise",
        description="shelfwise: intent detection and book recognition for bookstore chat",
    )
    parser.add_argument(
        "--project",
        "-p",
        dest="project_path",
        default=".",
        help="Path to project directory holding .shelfwise/ (default: current directory)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # =========================================================================
    # detect command
    # =========================================================================
    detect_parser = subparsers.add_parser("detect", help="Classify a chat message")
    detect_parser.add_argument("message", help="Chat message to classify")
    detect_parser.add_argument(
        "--image",
        "-i",
        action="store_true",
        help="Treat the message as sent with an attached image",
    )
    detect_parser.add_argument("--json", action="store_true", help="Print JSON")
    detect_parser.set_defaults(func=detect)

    # =========================================================================
    # extract command
    # =========================================================================
    extract_parser = subparsers.add_parser("extract", help="Extract book fields from text")
    extract_parser.add_argument("message", help="Text describing a book")
    extract_parser.add_argument("--json", action="store_true", help="Print JSON")
    extract_parser.set_defaults(func=extract)

    # =========================================================================
    # parse command
    # =========================================================================
    parse_parser = subparsers.add_parser("parse", help="Parse a book-recognition response")
    parse_parser.add_argument(
        "source",
        nargs="?",
        default="-",
        help="File holding the response, or '-' for stdin (default)",
    )
    parse_parser.add_argument("--json", action="store_true", help="Print JSON")
    parse_parser.set_defaults(func=parse)

    # =========================================================================
    # prompt command
    # =========================================================================
    prompt_parser = subparsers.add_parser("prompt", help="Print the cataloging prompt")
    prompt_parser.set_defaults(func=prompt)

    return parser


def run_cli(args: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not hasattr(parsed, "func"):
        parser.print_help()
        return 0

    try:
        config = AppConfig.load(Path(parsed.project_path).resolve())
        setup_logging(config)
        return parsed.func(parsed, config)
    except KeyboardInterrupt:
        console.print("\n[dim]Cancelled.[/dim]")
        return 130
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1


def main() -> None:
    """Console script entry point."""
    sys.exit(run_cli())


__all__ = [
    "create_parser",
    "run_cli",
    "main",
    "setup_logging",
    "detect",
    "extract",
    "parse",
    "prompt",
]
