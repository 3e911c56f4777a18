"""Scan command implementation."""

from __future__ import annotations

import sys
from argparse import Namespace
from pathlib import Path

from stackmap.cli.commands import Command
from stackmap.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SCAN_ERROR, EXIT_SUCCESS
from stackmap.config.models import StackmapConfig
from stackmap.core.logging import get_logger
from stackmap.reporters import get_reporter
from stackmap.scanner import scan_directory

LOGGER = get_logger(__name__)


class ScanCommand(Command):
    """Detects the technology stack of a project and writes a report."""

    def __init__(self, version: str):
        self._version = version

    @property
    def name(self) -> str:
        return "scan"

    def execute(self, args: Namespace, config: StackmapConfig | None = None) -> int:
        """Execute the scan command.

        Args:
            args: Parsed command-line arguments.
            config: Loaded configuration.

        Returns:
            Exit code.
        """
        if config is None:
            LOGGER.error("Configuration is required for scan command")
            return EXIT_SCAN_ERROR

        path = Path(args.path)
        if not path.is_dir():
            LOGGER.error(f"Not a directory: {path}")
            return EXIT_INVALID_USAGE

        reporter = get_reporter(args.format)
        if reporter is None:
            LOGGER.error(f"Reporter '{args.format}' not found")
            return EXIT_INVALID_USAGE

        result = scan_directory(path, config)

        output_path = getattr(args, "output", None)
        if output_path:
            with open(output_path, "w", encoding="utf-8") as f:
                reporter.report(result, f)
            LOGGER.info(f"Report written to {output_path}")
        else:
            reporter.report(result, sys.stdout)
        return EXIT_SUCCESS
