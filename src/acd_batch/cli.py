"""CLI for batch annotation of text files.

Usage:
    acd-batch [-c CONFIG] [--data-dir DIR] [--output-dir DIR] [--url URL]

Examples:
    # Annotate every file in the configured data directory
    acd-batch -c config.json

    # Walk subdirectories and widen spans by 3 words
    acd-batch --recurse --extend-words-by 3

    # Keep a debug log file alongside the console output
    acd-batch --log-dir logs/ --verbose
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
import traceback
from datetime import datetime
from pathlib import Path

from acd_batch.config import BatchConfig, load_annotator_config, load_config
from acd_batch.errors import ConfigError
from acd_batch.pipeline import run_batch

# =============================================================================
# LOGGING SETUP
# =============================================================================

# Package logger; module loggers propagate to it
logger = logging.getLogger("acd_batch")


def _setup_logging(log_dir: Path | None = None, verbose: bool = False) -> Path | None:
    """Configure console and optional file logging.

    Args:
        log_dir: Directory for a timestamped log file (no file if None)
        verbose: If True, set console to DEBUG level

    Returns:
        Path to the log file, or None
    """
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    # Console handler - progress lines go to stdout
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"acd_batch_{timestamp}.log"

    # File handler - captures everything with full detail
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    logger.debug(f"Logging initialized - log file: {log_file}")
    return log_file


def _log_exception(msg: str, exc: Exception) -> None:
    """Log an exception with full traceback at debug level."""
    logger.error(f"{msg}: {type(exc).__name__}: {exc}")
    logger.debug(f"Traceback:\n{traceback.format_exc()}")


def _create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="acd-batch",
        description=(
            "Submit text files to a clinical annotation service and write the "
            "annotated JSON results to a mirrored output directory."
        ),
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.json"),
        help="JSON configuration file (default: config.json)",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Input directory (overrides dataDir)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Output directory (overrides outputDir)",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Annotation service URL (overrides url)",
    )
    parser.add_argument(
        "--recurse",
        action="store_true",
        default=None,
        help="Process files in subdirectories too",
    )
    parser.add_argument(
        "--extend-words-by",
        type=int,
        metavar="N",
        default=None,
        help="Words of context to add around extended annotations; 0 disables",
    )
    parser.add_argument(
        "--print-errors",
        action="store_true",
        default=None,
        help="Log full responses for failed requests",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Also write a timestamped debug log file to this directory",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug output on the console",
    )
    return parser


def _resolve_config(args: argparse.Namespace) -> BatchConfig:
    config = load_config(args.config)
    return config.with_overrides(
        data_dir=args.data_dir,
        output_dir=args.output_dir,
        url=args.url,
        recurse=args.recurse,
        extend_words_by=args.extend_words_by,
        print_errors=args.print_errors,
    )


def _run(args: argparse.Namespace) -> int:
    """Run one batch.

    Returns:
        Exit code (0 once the batch ran, 1 for configuration problems)
    """
    try:
        config = _resolve_config(args)
        template = load_annotator_config(config.annotator_config)
    except ConfigError as e:
        _log_exception("Configuration error", e)
        return 1

    if not config.url:
        logger.error("No annotation service URL configured (set url or pass --url)")
        return 1
    if not config.data_dir.is_dir():
        logger.error(f"Input directory does not exist: {config.data_dir}")
        return 1

    print("Batch Annotation")
    print("=" * 40)
    print(f"Input:     {config.data_dir}")
    print(f"Output:    {config.output_dir}")
    print(f"Service:   {config.url}")
    print(f"Recurse:   {config.recurse}")
    print(f"Attempts:  {config.max_attempts}")
    print()

    start = time.perf_counter()
    try:
        summary = asyncio.run(run_batch(config, template))
    except KeyboardInterrupt:
        print("\n\nInterrupted")
        return 130

    elapsed = time.perf_counter() - start
    print()
    print(f"Complete:  {summary.succeeded} of {summary.eligible} files annotated in {elapsed:.1f}s")
    if summary.failed:
        print(f"Failed:    {summary.failed} files (see log)")
    return 0


def main() -> None:
    """Run the batch annotation client."""
    parser = _create_parser()
    args = parser.parse_args()
    _setup_logging(args.log_dir, args.verbose)
    sys.exit(_run(args))


if __name__ == "__main__":
    main()
