"""CLI runner orchestration.

This module handles command dispatch and execution for the stackmap CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Iterable, Optional

from stackmap.cli.arguments import build_parser
from stackmap.cli.commands.rules import RulesCommand
from stackmap.cli.commands.scan import ScanCommand
from stackmap.cli.config_bridge import ConfigBridge
from stackmap.cli.exit_codes import EXIT_INVALID_USAGE, EXIT_SCAN_ERROR, EXIT_SUCCESS
from stackmap.config import load_config
from stackmap.config.loader import ConfigError
from stackmap.core.logging import configure_logging, get_logger
from stackmap.rules.loader import RuleError

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get stackmap version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("stackmap")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from stackmap import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self) -> None:
        self.parser = build_parser()
        self._version = get_version()
        self.scan_cmd = ScanCommand(version=self._version)
        self.rules_cmd = RulesCommand()

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        argv_list = list(argv) if argv is not None else None
        try:
            args = self.parser.parse_args(argv_list)
        except SystemExit as e:
            # argparse exits 0 for --help and 2 for bad usage
            return EXIT_SUCCESS if e.code == 0 else EXIT_INVALID_USAGE

        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command = getattr(args, "command", None)

        if command == "scan":
            return self._handle_scan(args)
        elif command == "rules":
            return self._handle_rules(args)
        else:
            self.parser.print_help()
            return EXIT_SUCCESS

    def _handle_scan(self, args) -> int:
        """Handle the scan command.

        Configuration and rule errors are usage errors; anything else
        raised while scanning is a scan error.
        """
        project_root = Path(args.path).resolve()
        cli_overrides = ConfigBridge.args_to_overrides(args)

        try:
            config = load_config(
                project_root=project_root,
                cli_config_path=getattr(args, "config", None),
                cli_overrides=cli_overrides,
            )
            return self.scan_cmd.execute(args, config)
        except (ConfigError, RuleError) as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE
        except Exception as e:
            if args.debug:
                import traceback
                traceback.print_exc()
            LOGGER.error(f"Scan failed: {e}")
            return EXIT_SCAN_ERROR

    def _handle_rules(self, args) -> int:
        try:
            return self.rules_cmd.execute(args)
        except RuleError as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE
