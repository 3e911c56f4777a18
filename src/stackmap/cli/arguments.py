"""Argument parser construction for stackmap CLI.

This module builds the argument parser with subcommands:
- stackmap scan  - Detect the technology stack of a project
- stackmap rules - List the technology rules in effect
"""

from __future__ import annotations

import argparse
from pathlib import Path


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show stackmap version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )


def _build_scan_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'scan' subcommand parser."""
    scan_parser = subparsers.add_parser(
        "scan",
        help="Detect components and technologies in a project.",
        description=(
            "Walk a project directory, detect components, technologies and "
            "dependencies, and link components that depend on each other."
        ),
    )
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to scan (default: current directory).",
    )

    output_group = scan_parser.add_argument_group("output")
    output_group.add_argument(
        "--format",
        choices=["json", "summary"],
        default="json",
        help="Output format (default: json).",
    )
    output_group.add_argument(
        "--output", "-o",
        metavar="FILE",
        type=Path,
        help="Write the report to FILE instead of stdout.",
    )

    config_group = scan_parser.add_argument_group("configuration")
    config_group.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        help="Path to config file (default: .stackmap.yml in project root).",
    )
    config_group.add_argument(
        "--root-id",
        metavar="ID",
        help="Use ID as the root component ID instead of deriving one.",
    )
    config_group.add_argument(
        "--exclude",
        action="append",
        metavar="PATTERN",
        help="Gitignore-style pattern to exclude (can be specified multiple times).",
    )
    config_group.add_argument(
        "--rules-dir",
        metavar="DIR",
        type=Path,
        help="Directory of additional rules that override the built-in ones.",
    )

    exec_group = scan_parser.add_argument_group("execution")
    exec_group.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Walk top-level directories with N threads (default: 1).",
    )


def _build_rules_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'rules' subcommand parser."""
    rules_parser = subparsers.add_parser(
        "rules",
        help="List the technology rules in effect.",
        description="Print every known technology, grouped by category.",
    )
    rules_parser.add_argument(
        "--type",
        dest="rule_type",
        metavar="TYPE",
        help="Only show rules of this category (e.g. framework, database).",
    )
    rules_parser.add_argument(
        "--rules-dir",
        metavar="DIR",
        type=Path,
        help="Directory of additional rules that override the built-in ones.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for stackmap CLI.

    Returns:
        Configured ArgumentParser instance with subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="stackmap",
        description="stackmap - Detect the technology stack of a codebase.",
        epilog=(
            "Examples:\n"
            "  stackmap scan                        # Scan current directory as JSON\n"
            "  stackmap scan --format summary app/  # Short overview of app/\n"
            "  stackmap scan --root-id my-service   # Stable IDs without git\n"
            "  stackmap rules --type database       # List database rules\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    _add_global_options(parser)

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands:",
        metavar="COMMAND",
    )

    _build_scan_parser(subparsers)
    _build_rules_parser(subparsers)

    return parser
