# SPDX-License-Identifier: MIT
"""
POD Parser CLI

Command-line interface for stripping POD out of source files and for
inspecting how the parser sees a document.

Usage:
    podparse filter <file>... [-o OUTPUT]
    podparse paragraphs <file>
    podparse tree <file>
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .filters import PodFilter, TreeCollector
from .options import DEFAULT_COMMAND_MARKER, DEFAULT_SEQUENCE_PATTERN, ParseOptions
from .parser import InputError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def build_options(args: argparse.Namespace) -> ParseOptions:
    """
    Build parse options from command-line arguments.

    Raises:
        ValueError: If an option value is invalid
    """
    return ParseOptions(
        command_marker=args.marker,
        sequence_pattern=args.sequence_pattern,
        extended_delimiters=not args.no_extended,
        start_cutting=not args.no_cutting,
    )


def collect(path: str, options: ParseOptions) -> TreeCollector:
    """Parse a file and return the collector holding its paragraphs."""
    collector = TreeCollector(options=options)
    collector.parse_from_file(path)
    logger.debug("%s: %d paragraphs", path, len(collector.paragraphs))
    return collector


def cmd_filter(args: argparse.Namespace) -> int:
    """
    Copy the POD portions of each file to the output.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    options = build_options(args)
    out = sys.stdout
    close = False
    if args.output and args.output != "-":
        try:
            out = open(args.output, "w", encoding="utf-8")
        except OSError as e:
            print(f"Error: Cannot write {args.output}: {e.strerror or e}", file=sys.stderr)
            return 1
        close = True

    status = 0
    try:
        pod_filter = PodFilter(options=options, output=out)
        for path in args.files:
            try:
                pod_filter.parse_from_file(path)
            except InputError as e:
                print(f"Error: {e}", file=sys.stderr)
                status = 1
    finally:
        if close:
            out.close()

    return status


def cmd_paragraphs(args: argparse.Namespace) -> int:
    """
    Print the classified paragraphs of a file as JSON.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        collector = collect(args.file, build_options(args))
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output = []
    for paragraph in collector.paragraphs:
        data = paragraph.to_data()
        data.pop("tree", None)
        output.append(data)
    print(json.dumps(output, indent=2))
    return 0


def cmd_tree(args: argparse.Namespace) -> int:
    """
    Print each paragraph with its parse tree as JSON.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        collector = collect(args.file, build_options(args))
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps([p.to_data() for p in collector.paragraphs], indent=2))
    return 0


def add_parse_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--marker",
        default=DEFAULT_COMMAND_MARKER,
        help="Character that starts a command paragraph (default: %(default)s)",
    )
    parser.add_argument(
        "--sequence-pattern",
        default=DEFAULT_SEQUENCE_PATTERN,
        help="Regular expression for interior sequence names (default: %(default)s)",
    )
    parser.add_argument(
        "--no-extended",
        action="store_true",
        help="Do not recognize X<< ... >> sequences",
    )
    parser.add_argument(
        "--no-cutting",
        action="store_true",
        help="Treat the input as POD from the first line",
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser for the CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="podparse",
        description="POD paragraph and interior sequence parser",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log parser decisions to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # filter command
    filter_parser = subparsers.add_parser(
        "filter",
        help="Copy only the POD portions of the input",
    )
    filter_parser.add_argument(
        "files",
        nargs="*",
        default=["-"],
        help="Files to read ('-' for standard input)",
    )
    filter_parser.add_argument(
        "-o",
        "--output",
        help="File to write (default: standard output)",
    )
    add_parse_options(filter_parser)
    filter_parser.set_defaults(func=cmd_filter)

    # paragraphs command
    paragraphs_parser = subparsers.add_parser(
        "paragraphs",
        help="Show the classified paragraphs as JSON",
    )
    paragraphs_parser.add_argument("file", help="File to parse ('-' for standard input)")
    add_parse_options(paragraphs_parser)
    paragraphs_parser.set_defaults(func=cmd_paragraphs)

    # tree command
    tree_parser = subparsers.add_parser(
        "tree",
        help="Show the parse tree of every paragraph as JSON",
    )
    tree_parser.add_argument("file", help="File to parse ('-' for standard input)")
    add_parse_options(tree_parser)
    tree_parser.set_defaults(func=cmd_tree)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
