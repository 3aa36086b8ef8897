#!/usr/bin/env python3
"""Parse a directory of cTAKES XMI notes into one CSV table per note.

Each regular file in --input-dir is parsed and written to --output-dir as
<name>.csv, with missing values rendered as NULL. A log of the run
(logfile.log by default) is written next to the CSV files.

Usage:
  python -m ctakes_parser.scripts.parse_notes --input-dir xmi/ --output-dir csv/
  python -m ctakes_parser.scripts.parse_notes --input-dir xmi/ --output-dir csv/ --workers 4 --pattern 'note_1*'
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from ctakes_parser.batch import parse_output_dir
from ctakes_parser.config import load_config
from ctakes_parser.logging import setup_logging

logger = setup_logging()


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parses command-line arguments for the batch script."""
    parser = argparse.ArgumentParser(
        description="Flatten cTAKES XMI output into CSV tables of clinical concepts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output columns:
  textsem, refsem, id, pos_start, pos_end, cui, negated, preferred_text,
  scheme, tui, score, confidence, uncertainty, conditional, generic,
  subject, part_of_speech, true_text

Examples:
  # Parse every note with four workers
  python -m ctakes_parser.scripts.parse_notes --input-dir xmi/ --output-dir csv/ --workers 4

  # Parse the first ten notes and print a JSON summary
  python -m ctakes_parser.scripts.parse_notes --input-dir xmi/ --output-dir csv/ --limit 10 --summary-json
""",
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        required=True,
        help="Directory containing cTAKES XMI files",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        required=True,
        help="Directory for the CSV files and the batch log (created if absent)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a ctakes_parser.toml file (default: CTAKES_PARSER_CONFIG or ./ctakes_parser.toml)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of notes parsed concurrently (default: from config, else 1)",
    )
    parser.add_argument(
        "--pattern",
        type=str,
        default=None,
        help="Comma-separated list of glob patterns to filter notes, e.g. 'note_1*,note_2*'",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Limit number of notes to process (for testing)",
    )
    parser.add_argument(
        "--summary-json",
        action="store_true",
        help="Print the batch summary as JSON on stdout",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Logging is done at DEBUG level",
    )
    args = parser.parse_args(argv)
    if args.debug:
        logger.setLevel(logging.DEBUG)
    return args


async def main(argv: list[str] | None = None) -> int:
    """Runs the batch and returns the process exit status."""
    args = parse_arguments(argv)
    if args.workers is not None and args.workers < 1:
        print(f"ERROR: --workers must be at least 1, got {args.workers}", file=sys.stderr)
        return 1
    config = load_config(args.config)
    logger.debug(config)

    try:
        result = await parse_output_dir(
            args.input_dir,
            args.output_dir,
            config=config,
            workers=args.workers,
            pattern=args.pattern,
            limit=args.limit,
            quiet=args.quiet,
        )
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(
            f"Parsed {result.files_processed} note(s), {result.files_failed} failed, "
            f"{result.files_skipped} skipped. Log: {result.log_file}",
            file=sys.stderr,
        )
    if args.summary_json:
        print(result.model_dump_json(indent=2))
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
