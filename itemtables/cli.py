"""
Command-line entry point.

Usage:
    python -m itemtables --file items.csv [--outdir output]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .exceptions import ItemTablesError, UsageError
from .models import ExportSummary
from .pipeline import run
from .rules import DEFAULT_OUTPUT_DIR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="item-tables",
        description="Filter a game item CSV and export id -> name JSON lookup tables.",
    )
    parser.add_argument("-f", "--file", dest="file", default="", help="Path to the CSV file")
    parser.add_argument(
        "-o",
        "--outdir",
        dest="outdir",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory to save the JSON files (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument("--encoding", default=None, help="Input encoding (default: detect)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each pipeline step")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def print_summary(summary: ExportSummary) -> None:
    """
    Print the run report to stdout; failed categories go to stderr only.

    The category file count includes categories whose write failed, so
    one failure out of two still reports "2 category files".
    """
    print(f"All items saved to {summary.aggregate_path}")
    for export in summary.categories:
        if export.ok:
            print(f"Category '{export.category}' saved to {export.path} ({export.items} items)")
        else:
            print(f"Error: {export.error}", file=sys.stderr)

    print()
    print(f"Total items processed: {summary.total_items}")
    print(f"Items exported to {len(summary.categories)} category files")


def parse_args(parser: argparse.ArgumentParser, argv: Optional[List[str]] = None) -> argparse.Namespace:
    args = parser.parse_args(argv)
    if not args.file:
        raise UsageError("Please provide an input CSV file with --file")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parse_args(parser, argv)
    except UsageError as e:
        print(e, file=sys.stderr)
        print("Example: python -m itemtables --file items.csv [--outdir output_directory]", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    configure_logging(args.verbose)

    try:
        summary = run(args.file, args.outdir, encoding=args.encoding)
    except ItemTablesError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_summary(summary)
    return 0
